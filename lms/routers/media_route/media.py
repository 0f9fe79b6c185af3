from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pymongo.database import Database
from typing import List, Optional

from lms.deps import get_db, get_media_host
from lms.auth.dependencies import require_capability
from lms.auth.permissions import Capability
from lms.services import media_service
from lms.services.cloudinary_host import CloudinaryMediaHost
from lms.schemas.media_schema import MediaOut, BulkMediaOut, MediaDeletedOut

router = APIRouter(prefix="/media", tags=["media"])

manage_media = require_capability(Capability.MANAGE_MEDIA)

@router.post("/upload", response_model=MediaOut)
async def upload_media(file: UploadFile = File(...),
                       course_id: Optional[str] = Form(None),
                       lecture_id: Optional[str] = Form(None),
                       db: Database = Depends(get_db),
                       host: CloudinaryMediaHost = Depends(get_media_host),
                       user=Depends(manage_media)):
    """
    Upload one file to the media host. With ``course_id`` the reference is
    stored on the course (on lecture ``lecture_id`` if given, as the course
    image otherwise).
    """
    data = await file.read()
    return await media_service.upload(
        db, host, user, data=data, filename=file.filename, course_id=course_id, lecture_id=lecture_id
    )

@router.post("/bulk-upload", response_model=BulkMediaOut)
async def bulk_upload_media(files: List[UploadFile] = File(...),
                            host: CloudinaryMediaHost = Depends(get_media_host),
                            user=Depends(manage_media)):
    payload = [{"data": await f.read(), "filename": f.filename} for f in files]
    return {"items": await media_service.bulk_upload(host, payload)}

@router.delete("/{public_id:path}", response_model=MediaDeletedOut)
async def delete_media(public_id: str,
                       resource_type: str = Query("video", pattern="^(image|video|raw)$"),
                       db: Database = Depends(get_db),
                       host: CloudinaryMediaHost = Depends(get_media_host),
                       user=Depends(manage_media)):
    return await media_service.delete(db, host, user, public_id=public_id, resource_type=resource_type)
