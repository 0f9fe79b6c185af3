# repos/progress.py
from typing import Dict, Any, Optional, Iterable, List
from datetime import datetime
from pymongo.database import Database
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

def ensure_indexes(db: Database) -> None:
    db.course_progress.create_index([("user_id", ASCENDING), ("course_id", ASCENDING)], unique=True, name="user_course_unique")
    db.course_progress.create_index([("user_id", ASCENDING), ("last_accessed", DESCENDING)], name="user_last_accessed")

def compute_percent(completed_lecture_ids: Iterable[str], curriculum_ids: List[str]) -> float:
    """Share of the current curriculum that is completed, in [0, 100]."""
    if not curriculum_ids:
        return 0.0
    done = len(set(completed_lecture_ids) & set(curriculum_ids))
    return max(0.0, min(100.0, done / len(curriculum_ids) * 100.0))

def get_user_course_progress(db: Database, user_id: str, course_id: str) -> Optional[Dict[str, Any]]:
    doc = db.course_progress.find_one({"user_id": user_id, "course_id": course_id})
    if not doc:
        return None
    doc["_id"] = str(doc["_id"])
    return doc

def upsert_lecture_completion(db: Database, *, user_id: str, course_id: str, lecture_id: str,
                              curriculum_ids: List[str], ts: datetime) -> Dict[str, Any]:
    key = {"user_id": user_id, "course_id": course_id}
    try:
        db.course_progress.update_one(
            key,
            {"$setOnInsert": {"completed_lectures": [], "progress_percent": 0.0, "completed": False,
                              "completion_date": None, "last_accessed": ts}},
            upsert=True,
        )
    except DuplicateKeyError:
        # concurrent first write for the same pair; the document exists now
        pass

    db.course_progress.update_one(
        {**key, "completed_lectures.lecture_id": {"$ne": lecture_id}},
        {"$push": {"completed_lectures": {"lecture_id": lecture_id, "completed_at": ts}}}
    )

    prog = db.course_progress.find_one(key, {"completed_lectures": 1, "completion_date": 1})
    completed_ids = [c["lecture_id"] for c in prog.get("completed_lectures", [])]
    percent = compute_percent(completed_ids, curriculum_ids)
    patch: Dict[str, Any] = {
        "progress_percent": percent,
        "total_lectures": len(curriculum_ids),
        "completed": percent >= 100.0,
        "last_accessed": ts,
    }
    if percent >= 100.0 and not prog.get("completion_date"):
        patch["completion_date"] = ts

    db.course_progress.update_one(key, {"$set": patch})

    out = db.course_progress.find_one(key)
    out["_id"] = str(out["_id"])
    return out

def reset_progress(db: Database, *, user_id: str, course_id: str, ts: datetime) -> Optional[Dict[str, Any]]:
    key = {"user_id": user_id, "course_id": course_id}
    res = db.course_progress.update_one(key, {"$set": {
        "completed_lectures": [],
        "progress_percent": 0.0,
        "completed": False,
        "completion_date": None,
        "last_accessed": ts,
    }})
    if res.matched_count == 0:
        return None
    return get_user_course_progress(db, user_id, course_id)
