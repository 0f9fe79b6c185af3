# routers/student_progress/progress_route.py
from fastapi import APIRouter, Depends
from pymongo.database import Database

from lms.deps import get_db
from lms.auth.dependencies import require_capability
from lms.auth.permissions import Capability
from lms.services import progress_service
from lms.schemas.progress_schema import LectureViewedIn, ResetProgressIn, CourseProgressOut

router = APIRouter(prefix="/student/course-progress", tags=["progress"])

track_progress = require_capability(Capability.TRACK_PROGRESS)

@router.post("", response_model=CourseProgressOut)
async def mark_lecture_viewed(payload: LectureViewedIn,
                              db: Database = Depends(get_db),
                              user=Depends(track_progress)):
    return await progress_service.mark_lecture_viewed(
        db, user, course_id=payload.course_id, lecture_id=payload.lecture_id
    )

@router.post("/reset", response_model=CourseProgressOut)
async def reset_progress(payload: ResetProgressIn,
                         db: Database = Depends(get_db),
                         user=Depends(track_progress)):
    return await progress_service.reset_course_progress(db, user, payload.course_id)

@router.get("/{course_id}", response_model=CourseProgressOut)
async def course_progress(course_id: str,
                          db: Database = Depends(get_db),
                          user=Depends(track_progress)):
    return await progress_service.get_course_progress(db, user, course_id)
