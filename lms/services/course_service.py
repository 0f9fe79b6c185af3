# services/course_service.py
import logging
from typing import Dict, Any, List
from pymongo.database import Database
from fastapi.concurrency import run_in_threadpool

from lms.errors import ConflictError, ForbiddenError, NotFoundError
from lms.repos import courses as repo
from lms.repos import orders as order_repo

logger = logging.getLogger(__name__)

DEFAULT_SORT = "price-lowtohigh"

def _split_csv(value) -> List[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]

async def get_owned_course(db: Database, course_id: str, instructor_id: str) -> Dict[str, Any]:
    """Load a course and check that ``instructor_id`` owns it."""
    course = await run_in_threadpool(repo.get_course_by_id, db, course_id)
    if not course:
        raise NotFoundError("Course not found")
    if course["instructor_id"] != instructor_id:
        raise ForbiddenError("You can only manage your own courses")
    return course

# ---------------------------
# Instructor
# ---------------------------

async def create_course(db: Database, instructor: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
    doc = await run_in_threadpool(
        repo.insert_course, db, data,
        instructor_id=instructor["_id"], instructor_name=instructor["user_name"],
    )
    logger.info(f"Instructor {instructor['_id']} created course {doc['_id']}")
    return doc

async def list_instructor_courses(db: Database, instructor: Dict[str, Any]) -> List[Dict[str, Any]]:
    return await run_in_threadpool(repo.list_instructor_courses, db, instructor["_id"])

async def update_course(db: Database, instructor: Dict[str, Any], course_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
    await get_owned_course(db, course_id, instructor["_id"])
    updated = await run_in_threadpool(repo.update_course, db, course_id, patch)
    if not updated:
        raise NotFoundError("Course not found")
    if "is_published" in patch:
        logger.info(f"Course {course_id} published={patch['is_published']}")
    return updated

async def delete_course(db: Database, instructor: Dict[str, Any], course_id: str) -> None:
    course = await get_owned_course(db, course_id, instructor["_id"])
    if course.get("students"):
        raise ConflictError("Cannot delete a course with enrolled students")
    if await run_in_threadpool(order_repo.has_open_orders, db, course_id):
        raise ConflictError("Cannot delete a course with pending or completed orders")
    deleted = await run_in_threadpool(repo.delete_course, db, course_id)
    if not deleted:
        raise NotFoundError("Course not found")
    logger.info(f"Instructor {instructor['_id']} deleted course {course_id}")

# ---------------------------
# Student catalog
# ---------------------------

def _catalog_view(course: Dict[str, Any]) -> Dict[str, Any]:
    view = {k: v for k, v in course.items() if k not in ("students", "image_public_id", "is_published", "updated_at")}
    view["students_count"] = len(course.get("students", []))
    # paid lecture media is only reachable after purchase
    view["curriculum"] = [
        item if item.get("free_preview") else {**item, "video_url": None, "public_id": None}
        for item in course.get("curriculum", [])
    ]
    return view

async def list_published_courses(db: Database, *, category=None, level=None, primary_language=None,
                                 sort_by: str = DEFAULT_SORT) -> List[Dict[str, Any]]:
    filters = {
        "category": _split_csv(category),
        "level": _split_csv(level),
        "primary_language": _split_csv(primary_language),
    }
    items = await run_in_threadpool(repo.list_published_courses, db, filters=filters, sort_by=sort_by)
    return [_catalog_view(c) for c in items]

async def get_published_course(db: Database, course_id: str) -> Dict[str, Any]:
    course = await run_in_threadpool(repo.get_published_course, db, course_id)
    if not course:
        raise NotFoundError("Course not found")
    return _catalog_view(course)

async def purchase_info(db: Database, student: Dict[str, Any], course_id: str) -> Dict[str, Any]:
    course = await run_in_threadpool(repo.get_published_course, db, course_id)
    if not course:
        raise NotFoundError("Course not found")
    purchased = await run_in_threadpool(repo.is_student_enrolled, db, course_id, student["_id"])
    return {"course_id": course_id, "purchased": purchased}

async def list_courses_bought(db: Database, student: Dict[str, Any]) -> List[Dict[str, Any]]:
    return await run_in_threadpool(repo.list_courses_bought, db, student["_id"])
