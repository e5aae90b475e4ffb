"""Firebase Storage bucket holding issue photos."""

import logging
from typing import Optional

from firebase_admin import storage

from ..core.config import settings
from ..core.firebase_init import initialize_firebase

logger = logging.getLogger(__name__)

_bucket = None


def open_photo_bucket():
    """
    Return the photo bucket, creating it on first use if the project has none.
    None means storage is unreachable; callers decide whether that is fatal.
    """
    global _bucket
    if _bucket is not None:
        return _bucket
    if not initialize_firebase():
        return None

    bucket = storage.bucket(settings.FIREBASE_STORAGE_BUCKET or None)
    try:
        if not bucket.exists():
            logger.info(f"Creating photo bucket gs://{bucket.name}")
            bucket.create()
    except Exception as e:
        logger.error(f"❌ Photo bucket gs://{bucket.name} unavailable: {e}")
        return None

    _bucket = bucket
    logger.info(f"✅ Photo bucket ready: gs://{bucket.name}/{settings.PHOTO_CONTAINER}/")
    return _bucket


def describe_photo_bucket() -> dict:
    name: Optional[str] = _bucket.name if _bucket is not None else None
    return {
        "available": name is not None,
        "bucket": name,
        "container": settings.PHOTO_CONTAINER,
    }
