from fastapi import APIRouter, Depends, Query
from pymongo.database import Database
from typing import List, Optional

from lms.deps import get_db
from lms.auth.dependencies import require_capability
from lms.auth.permissions import Capability
from lms.services import course_service
from lms.schemas.course_schema import StudentCourseOut, PurchaseInfoOut, BoughtCourseOut

router = APIRouter(prefix="/student", tags=["student"])

browse_catalog = require_capability(Capability.BROWSE_CATALOG)
purchase_courses = require_capability(Capability.PURCHASE_COURSES)

@router.get("/course", response_model=List[StudentCourseOut])
async def list_courses(
    category: Optional[str] = Query(None, description="Comma-separated categories"),
    level: Optional[str] = Query(None, description="Comma-separated levels"),
    primary_language: Optional[str] = Query(None, description="Comma-separated languages"),
    sort_by: str = Query(course_service.DEFAULT_SORT, pattern="^(price-lowtohigh|price-hightolow|title-atoz|title-ztoa)$"),
    db: Database = Depends(get_db),
    user=Depends(browse_catalog),
):
    """
    List published courses.

    Args:
        category: Optional category filter
        level: Optional level filter
        primary_language: Optional language filter
        sort_by: Sort order by price or title

    Returns:
        Published courses; unpublished courses never appear
    """
    return await course_service.list_published_courses(
        db, category=category, level=level, primary_language=primary_language, sort_by=sort_by
    )

@router.get("/course/{course_id}", response_model=StudentCourseOut)
async def get_course(course_id: str, db: Database = Depends(get_db), user=Depends(browse_catalog)):
    return await course_service.get_published_course(db, course_id)

@router.get("/course/{course_id}/purchase-info", response_model=PurchaseInfoOut)
async def purchase_info(course_id: str, db: Database = Depends(get_db), user=Depends(purchase_courses)):
    return await course_service.purchase_info(db, user, course_id)

@router.get("/courses-bought", response_model=List[BoughtCourseOut])
async def courses_bought(db: Database = Depends(get_db), user=Depends(purchase_courses)):
    return await course_service.list_courses_bought(db, user)
