# services/cloudinary_host.py
"""
Thin adapter over the Cloudinary SDK.

Credentials are held by the instance and passed on every call instead of
going through ``cloudinary.config()``, so several hosts can coexist in one
process (tests use a fake with the same interface).
"""
import logging
from typing import Any, Dict

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from lms.errors import UpstreamError

logger = logging.getLogger(__name__)

PROVIDER = "cloudinary"


class CloudinaryMediaHost:
    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }

    def upload(self, data: bytes, filename: str = None, resource_type: str = "auto") -> Dict[str, Any]:
        options = dict(self._credentials)
        if filename:
            options["filename_override"] = filename
            options["use_filename"] = True
        try:
            result = cloudinary.uploader.upload(data, resource_type=resource_type, **options)
        except CloudinaryError as e:
            logger.error(f"Cloudinary upload failed for {filename}: {str(e)}")
            raise UpstreamError(PROVIDER, str(e))
        return {
            "url": result.get("secure_url") or result.get("url"),
            "public_id": result["public_id"],
            "resource_type": result.get("resource_type", resource_type),
        }

    def delete(self, public_id: str, resource_type: str = "video") -> bool:
        """Destroy a stored object. Returns False when the host has no such object."""
        try:
            result = cloudinary.uploader.destroy(public_id, resource_type=resource_type, **self._credentials)
        except CloudinaryError as e:
            logger.error(f"Cloudinary delete failed for {public_id}: {str(e)}")
            raise UpstreamError(PROVIDER, str(e))
        outcome = result.get("result")
        if outcome == "ok":
            return True
        if outcome == "not found":
            return False
        raise UpstreamError(PROVIDER, f"Unexpected destroy result: {outcome}")
