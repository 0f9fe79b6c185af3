from pymongo.database import Database
from pymongo import ASCENDING, DESCENDING
from bson import ObjectId
from bson.errors import InvalidId
from typing import Dict, Any, List, Optional
from datetime import datetime, timezone
import uuid

# ---------------------------
# Helpers
# ---------------------------

def _to_object_id(id_str: str) -> Optional[ObjectId]:
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        return None

def _serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return None
    doc["_id"] = str(doc["_id"])
    return doc

def _assign_lecture_ids(curriculum: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    for item in curriculum:
        item["lecture_id"] = item.get("lecture_id") or str(uuid.uuid4())
    return curriculum

def _now() -> datetime:
    return datetime.now(timezone.utc)

SORTS = {
    "price-lowtohigh": ("pricing", ASCENDING),
    "price-hightolow": ("pricing", DESCENDING),
    "title-atoz": ("title", ASCENDING),
    "title-ztoa": ("title", DESCENDING),
}

# ---------------------------
# Indexes
# ---------------------------

def ensure_indexes(db: Database) -> None:
    db.courses.create_index([("instructor_id", ASCENDING), ("created_at", DESCENDING)])
    db.courses.create_index([("is_published", ASCENDING), ("category", ASCENDING), ("level", ASCENDING)])
    db.courses.create_index([("students.student_id", ASCENDING)])

# ---------------------------
# Instructor CRUD
# ---------------------------

def insert_course(db: Database, data: Dict[str, Any], *, instructor_id: str, instructor_name: str) -> Dict[str, Any]:
    now = _now()
    data = {
        **data,
        "instructor_id": instructor_id,
        "instructor_name": instructor_name,
        "curriculum": _assign_lecture_ids(data.get("curriculum", [])),
        "students": [],
        "created_at": now,
        "updated_at": now,
    }
    result = db.courses.insert_one(data)
    data["_id"] = str(result.inserted_id)
    return data

def get_course_by_id(db: Database, course_id: str) -> Optional[Dict[str, Any]]:
    oid = _to_object_id(course_id)
    if oid is None:
        return None
    return _serialize(db.courses.find_one({"_id": oid}))

def list_instructor_courses(db: Database, instructor_id: str) -> List[Dict[str, Any]]:
    cursor = db.courses.find({"instructor_id": instructor_id}).sort("created_at", DESCENDING)
    return [_serialize(doc) for doc in cursor]

def update_course(db: Database, course_id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    oid = _to_object_id(course_id)
    if oid is None:
        return None
    if "curriculum" in patch:
        patch["curriculum"] = _assign_lecture_ids(patch["curriculum"])
    patch["updated_at"] = _now()
    res = db.courses.update_one({"_id": oid}, {"$set": patch})
    if res.matched_count == 0:
        return None
    return get_course_by_id(db, course_id)

def delete_course(db: Database, course_id: str) -> bool:
    oid = _to_object_id(course_id)
    if oid is None:
        return False
    return db.courses.delete_one({"_id": oid}).deleted_count == 1

# ---------------------------
# Student catalog
# ---------------------------

def _build_match(filters: Dict[str, Any]) -> Dict[str, Any]:
    match: Dict[str, Any] = {"is_published": True}
    for field in ("category", "level", "primary_language"):
        values = filters.get(field)
        if values:
            match[field] = {"$in": list(values)}
    return match

def list_published_courses(db: Database, *, filters: Dict[str, Any], sort_by: str) -> List[Dict[str, Any]]:
    field, direction = SORTS.get(sort_by, SORTS["price-lowtohigh"])
    cursor = db.courses.find(_build_match(filters)).sort(field, direction)
    return [_serialize(doc) for doc in cursor]

def get_published_course(db: Database, course_id: str) -> Optional[Dict[str, Any]]:
    course = get_course_by_id(db, course_id)
    if not course or not course.get("is_published"):
        return None
    return course

# ---------------------------
# Media references
# ---------------------------

def set_lecture_media(db: Database, course_id: str, lecture_id: str, *, url: str, public_id: str) -> bool:
    course = get_course_by_id(db, course_id)
    if not course:
        return False
    curriculum = course.get("curriculum", [])
    for item in curriculum:
        if item.get("lecture_id") == lecture_id:
            item["video_url"] = url
            item["public_id"] = public_id
            break
    else:
        return False
    db.courses.update_one({"_id": ObjectId(course_id)}, {"$set": {"curriculum": curriculum, "updated_at": _now()}})
    return True

def set_course_image(db: Database, course_id: str, *, url: str, public_id: str) -> bool:
    oid = _to_object_id(course_id)
    if oid is None:
        return False
    res = db.courses.update_one({"_id": oid}, {"$set": {"image": url, "image_public_id": public_id, "updated_at": _now()}})
    return res.matched_count == 1

def media_owner_ids(db: Database, public_id: str) -> List[str]:
    """Instructor ids of every course referencing ``public_id``."""
    query = {"$or": [{"image_public_id": public_id}, {"curriculum.public_id": public_id}]}
    return sorted({c["instructor_id"] for c in db.courses.find(query, {"instructor_id": 1})})

def clear_media_references(db: Database, instructor_id: str, public_id: str) -> int:
    """Drop every reference to ``public_id`` on the instructor's courses. Returns courses touched."""
    query = {
        "instructor_id": instructor_id,
        "$or": [{"image_public_id": public_id}, {"curriculum.public_id": public_id}],
    }
    touched = 0
    for course in db.courses.find(query):
        patch: Dict[str, Any] = {"updated_at": _now()}
        if course.get("image_public_id") == public_id:
            patch["image"] = None
            patch["image_public_id"] = None
        curriculum = course.get("curriculum", [])
        for item in curriculum:
            if item.get("public_id") == public_id:
                item["video_url"] = None
                item["public_id"] = None
        patch["curriculum"] = curriculum
        db.courses.update_one({"_id": course["_id"]}, {"$set": patch})
        touched += 1
    return touched

# ---------------------------
# Enrollment
# ---------------------------

def add_student(db: Database, course_id: str, student: Dict[str, Any]) -> Optional[bool]:
    """Append ``student`` unless already enrolled.

    Returns True when appended, False when the student was already enrolled
    and None when the course no longer exists.
    """
    oid = _to_object_id(course_id)
    if oid is None:
        return None
    res = db.courses.update_one(
        {"_id": oid, "students.student_id": {"$ne": student["student_id"]}},
        {"$push": {"students": student}},
    )
    if res.modified_count == 1:
        return True
    if db.courses.find_one({"_id": oid}, {"_id": 1}) is None:
        return None
    return False

def is_student_enrolled(db: Database, course_id: str, student_id: str) -> bool:
    oid = _to_object_id(course_id)
    if oid is None:
        return False
    return db.courses.find_one({"_id": oid, "students.student_id": student_id}, {"_id": 1}) is not None

def list_courses_bought(db: Database, student_id: str) -> List[Dict[str, Any]]:
    items = []
    for course in db.courses.find({"students.student_id": student_id}).sort("title", ASCENDING):
        entry = next(s for s in course.get("students", []) if s.get("student_id") == student_id)
        items.append({
            "course_id": str(course["_id"]),
            "title": course["title"],
            "instructor_id": course["instructor_id"],
            "instructor_name": course["instructor_name"],
            "course_image": course.get("image"),
            "paid_amount": entry.get("paid_amount", 0.0),
            "date_of_purchase": entry.get("enrolled_at"),
        })
    return items
