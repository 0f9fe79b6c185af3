# services/progress_service.py
import logging
from typing import Dict, Any, List
from datetime import datetime, timezone
from pymongo.database import Database
from fastapi.concurrency import run_in_threadpool

from lms.errors import ForbiddenError, NotFoundError
from lms.repos import progress as repo
from lms.repos import courses as course_repo

logger = logging.getLogger(__name__)

def _curriculum_ids(course: Dict[str, Any]) -> List[str]:
    return [item["lecture_id"] for item in course.get("curriculum", []) if item.get("lecture_id")]

async def _load_course(db: Database, course_id: str) -> Dict[str, Any]:
    course = await run_in_threadpool(course_repo.get_course_by_id, db, course_id)
    if not course:
        raise NotFoundError("Course not found")
    return course

def _view(user_id: str, course: Dict[str, Any], doc: Dict[str, Any], is_purchased: bool) -> Dict[str, Any]:
    curriculum_ids = _curriculum_ids(course)
    completed_lectures = [c for c in doc.get("completed_lectures", []) if c["lecture_id"] in curriculum_ids]
    percent = repo.compute_percent((c["lecture_id"] for c in completed_lectures), curriculum_ids)
    return {
        "user_id": user_id,
        "course_id": course["_id"],
        "course_title": course.get("title"),
        "is_purchased": is_purchased,
        "progress_percent": percent,
        "completed_count": len(completed_lectures),
        "total_lectures": len(curriculum_ids),
        "completed": percent >= 100.0,
        "completion_date": doc.get("completion_date") if percent >= 100.0 else None,
        "completed_lectures": completed_lectures,
        "last_accessed": doc.get("last_accessed"),
    }

async def mark_lecture_viewed(db: Database, student: Dict[str, Any], *, course_id: str, lecture_id: str) -> Dict[str, Any]:
    course = await _load_course(db, course_id)
    curriculum_ids = _curriculum_ids(course)
    if lecture_id not in curriculum_ids:
        raise NotFoundError("Lecture not found in the specified course")
    if not await run_in_threadpool(course_repo.is_student_enrolled, db, course_id, student["_id"]):
        raise ForbiddenError("Course not purchased")

    doc = await run_in_threadpool(
        repo.upsert_lecture_completion, db,
        user_id=student["_id"], course_id=course_id, lecture_id=lecture_id,
        curriculum_ids=curriculum_ids, ts=datetime.now(timezone.utc),
    )
    if doc.get("completed"):
        logger.info(f"Student {student['_id']} completed course {course_id}")
    return _view(student["_id"], course, doc, True)

async def get_course_progress(db: Database, student: Dict[str, Any], course_id: str) -> Dict[str, Any]:
    course = await _load_course(db, course_id)
    purchased = await run_in_threadpool(course_repo.is_student_enrolled, db, course_id, student["_id"])
    doc = await run_in_threadpool(repo.get_user_course_progress, db, student["_id"], course_id)
    return _view(student["_id"], course, doc or {}, purchased)

async def reset_course_progress(db: Database, student: Dict[str, Any], course_id: str) -> Dict[str, Any]:
    course = await _load_course(db, course_id)
    if not await run_in_threadpool(course_repo.is_student_enrolled, db, course_id, student["_id"]):
        raise ForbiddenError("Course not purchased")
    doc = await run_in_threadpool(
        repo.reset_progress, db, user_id=student["_id"], course_id=course_id, ts=datetime.now(timezone.utc)
    )
    return _view(student["_id"], course, doc or {}, True)
