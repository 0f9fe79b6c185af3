from pydantic import BaseModel, constr
from typing import List, Optional
from datetime import datetime

ID = constr(strip_whitespace=True, min_length=1)

class LectureViewedIn(BaseModel):
    course_id: ID
    lecture_id: ID

class ResetProgressIn(BaseModel):
    course_id: ID

class CompletedLecture(BaseModel):
    lecture_id: str
    completed_at: datetime

class CourseProgressOut(BaseModel):
    user_id: str
    course_id: str
    course_title: Optional[str] = None
    is_purchased: bool = False
    progress_percent: float = 0.0
    completed_count: int = 0
    total_lectures: int = 0
    completed: bool = False
    completion_date: Optional[datetime] = None
    completed_lectures: List[CompletedLecture] = []
    last_accessed: Optional[datetime] = None
