from pydantic import BaseModel
from typing import List, Optional

class MediaOut(BaseModel):
    url: str
    public_id: str
    resource_type: str
    course_id: Optional[str] = None
    lecture_id: Optional[str] = None

class BulkMediaOut(BaseModel):
    items: List[MediaOut]

class MediaDeletedOut(BaseModel):
    public_id: str
    found: bool
    courses_updated: int
