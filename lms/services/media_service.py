# services/media_service.py
import logging
from typing import Any, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
from pymongo.database import Database

from lms.errors import ForbiddenError, NotFoundError, ValidationError
from lms.repos import courses as course_repo
from lms.services.cloudinary_host import CloudinaryMediaHost
from lms.services.course_service import get_owned_course

logger = logging.getLogger(__name__)

async def upload(db: Database, host: CloudinaryMediaHost, instructor: Dict[str, Any], *, data: bytes,
                 filename: Optional[str], course_id: Optional[str] = None,
                 lecture_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Forward ``data`` to the media host and, when ``course_id`` is given,
    store the returned reference on the course: on the curriculum item
    ``lecture_id`` if given, as the course image otherwise.
    """
    if not data:
        raise ValidationError("Uploaded file is empty")
    if lecture_id and not course_id:
        raise ValidationError("lecture_id requires course_id")

    course = None
    if course_id:
        course = await get_owned_course(db, course_id, instructor["_id"])
        if lecture_id and not any(i.get("lecture_id") == lecture_id for i in course.get("curriculum", [])):
            raise NotFoundError("Lecture not found in the specified course")

    media = await run_in_threadpool(host.upload, data, filename)
    logger.info(f"Uploaded {filename} as {media['public_id']}")

    if course:
        if lecture_id:
            attached = await run_in_threadpool(
                course_repo.set_lecture_media, db, course_id, lecture_id,
                url=media["url"], public_id=media["public_id"],
            )
        else:
            attached = await run_in_threadpool(
                course_repo.set_course_image, db, course_id,
                url=media["url"], public_id=media["public_id"],
            )
        if not attached:
            # course or lecture removed while the upload was in flight
            raise NotFoundError("Course or lecture no longer exists")

    return {**media, "course_id": course_id, "lecture_id": lecture_id}

async def bulk_upload(host: CloudinaryMediaHost, files: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not files:
        raise ValidationError("No files uploaded")
    results = []
    for f in files:
        if not f["data"]:
            raise ValidationError(f"Uploaded file {f['filename']} is empty")
        media = await run_in_threadpool(host.upload, f["data"], f["filename"])
        results.append(media)
    logger.info(f"Bulk uploaded {len(results)} files")
    return results

async def delete(db: Database, host: CloudinaryMediaHost, instructor: Dict[str, Any], *,
                 public_id: str, resource_type: str = "video") -> Dict[str, Any]:
    owners = await run_in_threadpool(course_repo.media_owner_ids, db, public_id)
    if any(owner != instructor["_id"] for owner in owners):
        raise ForbiddenError("Media is referenced by another instructor's course")
    found = await run_in_threadpool(host.delete, public_id, resource_type)
    if not found:
        logger.warning(f"Media host has no object {public_id}; clearing local references anyway")
    touched = await run_in_threadpool(course_repo.clear_media_references, db, instructor["_id"], public_id)
    return {"public_id": public_id, "found": found, "courses_updated": touched}
