from pydantic import BaseModel, Field, constr, confloat
from typing import List, Optional
from datetime import datetime

# Keep IDs as str at the API boundary. Convert to ObjectId in the repo.

class CurriculumItemIn(BaseModel):
    lecture_id: Optional[str] = None
    title: constr(strip_whitespace=True, min_length=1)
    video_url: Optional[str] = None
    public_id: Optional[str] = None
    free_preview: bool = False

class CourseCreate(BaseModel):
    title: constr(strip_whitespace=True, min_length=3)
    category: str
    level: str
    primary_language: str
    subtitle: str = ""
    description: str = ""
    image: Optional[str] = None
    image_public_id: Optional[str] = None
    welcome_message: str = ""
    pricing: confloat(ge=0) = 0.0
    objectives: str = ""
    curriculum: List[CurriculumItemIn] = []
    is_published: bool = False

class CourseUpdate(BaseModel):
    title: Optional[constr(strip_whitespace=True, min_length=3)] = None
    category: Optional[str] = None
    level: Optional[str] = None
    primary_language: Optional[str] = None
    subtitle: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    image_public_id: Optional[str] = None
    welcome_message: Optional[str] = None
    pricing: Optional[confloat(ge=0)] = None
    objectives: Optional[str] = None
    curriculum: Optional[List[CurriculumItemIn]] = None
    is_published: Optional[bool] = None

class CurriculumItemOut(BaseModel):
    lecture_id: str
    title: str
    video_url: Optional[str] = None
    public_id: Optional[str] = None
    free_preview: bool = False

class EnrolledStudentOut(BaseModel):
    student_id: str
    student_name: str
    student_email: str
    paid_amount: float
    enrolled_at: Optional[datetime] = None

class CourseOut(BaseModel):
    id: str = Field(alias="_id")
    instructor_id: str
    instructor_name: str
    title: str
    category: str
    level: str
    primary_language: str
    subtitle: str = ""
    description: str = ""
    image: Optional[str] = None
    image_public_id: Optional[str] = None
    welcome_message: str = ""
    pricing: float = 0.0
    objectives: str = ""
    curriculum: List[CurriculumItemOut] = []
    students: List[EnrolledStudentOut] = []
    is_published: bool = False
    created_at: datetime
    updated_at: datetime

class StudentCourseOut(BaseModel):
    """Catalog view: enrollment details of other students are not exposed."""
    id: str = Field(alias="_id")
    instructor_id: str
    instructor_name: str
    title: str
    category: str
    level: str
    primary_language: str
    subtitle: str = ""
    description: str = ""
    image: Optional[str] = None
    welcome_message: str = ""
    pricing: float = 0.0
    objectives: str = ""
    curriculum: List[CurriculumItemOut] = []
    students_count: int = 0
    created_at: datetime

class PurchaseInfoOut(BaseModel):
    course_id: str
    purchased: bool

class BoughtCourseOut(BaseModel):
    course_id: str
    title: str
    instructor_id: str
    instructor_name: str
    course_image: Optional[str] = None
    paid_amount: float = 0.0
    date_of_purchase: Optional[datetime] = None
