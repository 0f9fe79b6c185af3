from fastapi import APIRouter, Depends, Response, status
from pymongo.database import Database
from typing import List

from lms.deps import get_db
from lms.auth.dependencies import require_capability
from lms.auth.permissions import Capability
from lms.services import course_service
from lms.schemas.course_schema import CourseCreate, CourseUpdate, CourseOut

router = APIRouter(prefix="/instructor/course", tags=["instructor"])

manage_courses = require_capability(Capability.MANAGE_COURSES)

# Route to list the caller's own courses
@router.get("", response_model=List[CourseOut])
async def list_courses(db: Database = Depends(get_db), user=Depends(manage_courses)):
    return await course_service.list_instructor_courses(db, user)

# Route to create a new course owned by the caller
@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
async def create_course(payload: CourseCreate, db: Database = Depends(get_db), user=Depends(manage_courses)):
    """
    Create a new course. The owner is always the authenticated instructor;
    curriculum items without a ``lecture_id`` get one assigned.
    """
    return await course_service.create_course(db, user, payload.dict())

@router.get("/{course_id}", response_model=CourseOut)
async def get_course(course_id: str, db: Database = Depends(get_db), user=Depends(manage_courses)):
    return await course_service.get_owned_course(db, course_id, user["_id"])

@router.put("/{course_id}", response_model=CourseOut)
async def update_course(course_id: str, payload: CourseUpdate,
                        db: Database = Depends(get_db), user=Depends(manage_courses)):
    """
    Update the provided fields of a course. Publishing and unpublishing go
    through ``is_published``.
    """
    patch = {k: v for k, v in payload.dict().items() if v is not None}
    return await course_service.update_course(db, user, course_id, patch)

@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(course_id: str, db: Database = Depends(get_db), user=Depends(manage_courses)):
    await course_service.delete_course(db, user, course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
