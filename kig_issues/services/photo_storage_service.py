import mimetypes
import re
import urllib.parse
import uuid
from datetime import datetime
from pathlib import PurePosixPath
from typing import Optional
import logging

from fastapi import HTTPException

from ..core.config import StorageMode, settings
from ..core.exceptions import StorageError
from .photo_bucket import open_photo_bucket

logger = logging.getLogger(__name__)

MOCK_STORAGE_BASE_URL = "https://mock-storage.local"

_SEGMENT_RE = re.compile(r"^[A-Za-z0-9._-]+$")


class PhotoStorageService:
    """
    Stores issue photos under `{container}/{scope_id}/{file_name}`.

    LIVE mode writes to Firebase Storage and returns a token download URL;
    uploading the same name again replaces the object. MOCK mode persists
    nothing and returns a placeholder URL built from the same path.
    """

    allowed_image_types = {
        'image/jpeg', 'image/jpg', 'image/png', 'image/gif', 'image/webp'
    }
    max_image_size = 5 * 1024 * 1024  # 5MB

    def __init__(self, mode: StorageMode, bucket=None, container: Optional[str] = None):
        self.mode = StorageMode(mode)
        self.container = container or settings.PHOTO_CONTAINER
        self._bucket = bucket

    def validate_photo(self, file_name: str, content_type: Optional[str], size: int) -> str:
        """Check type and size; returns the normalized content type."""
        if not content_type or content_type in ("application/octet-stream", "binary/octet-stream"):
            content_type = mimetypes.guess_type(file_name or "")[0]
            if not content_type:
                raise HTTPException(status_code=400, detail="Unable to determine file type")
        content_type = content_type.lower()

        if content_type not in self.allowed_image_types:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid image type. Allowed: {', '.join(sorted(self.allowed_image_types))}"
            )
        if size == 0:
            raise HTTPException(status_code=400, detail="Empty file")
        if size > self.max_image_size:
            raise HTTPException(
                status_code=400,
                detail=f"Image too large. Maximum size: {self.max_image_size / (1024*1024):.1f}MB"
            )
        return content_type

    def blob_path(self, scope_id: str, file_name: str) -> str:
        name = PurePosixPath((file_name or "").replace("\\", "/")).name
        for label, segment in (("scope id", scope_id), ("file name", name)):
            if not segment or segment in (".", "..") or not _SEGMENT_RE.match(segment):
                raise ValueError(f"Invalid {label}: {segment!r}")
        return f"{self.container}/{scope_id}/{name}"

    async def upload_photo(
        self, data: bytes, file_name: str, scope_id: str, content_type: Optional[str] = None
    ) -> str:
        path = self.blob_path(scope_id, file_name)

        if self.mode is StorageMode.MOCK:
            logger.info(f"[MOCK STORAGE] {len(data)} bytes -> {path}")
            return f"{MOCK_STORAGE_BASE_URL}/{path}"

        bucket = self._bucket or open_photo_bucket()
        if bucket is None:
            raise StorageError("File storage not available")

        try:
            blob = bucket.blob(path)
            download_token = str(uuid.uuid4())
            blob.metadata = {
                'scope_id': scope_id,
                'original_filename': file_name,
                'upload_timestamp': datetime.now().isoformat(),
                'firebaseStorageDownloadTokens': download_token,
            }
            blob.upload_from_string(
                data,
                content_type=content_type or mimetypes.guess_type(file_name)[0] or "application/octet-stream",
            )
        except Exception as e:
            logger.error(f"❌ Photo upload failed for {path}: {e}")
            raise StorageError("Photo upload failed") from e

        encoded_path = urllib.parse.quote(path, safe='')
        download_url = (
            f"https://firebasestorage.googleapis.com/v0/b/{bucket.name}/o/{encoded_path}"
            f"?alt=media&token={download_token}"
        )
        logger.info(f"✅ Photo uploaded: {path}")
        return download_url
