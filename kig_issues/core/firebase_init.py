import logging
from typing import Optional

import firebase_admin
from firebase_admin import credentials

from .config import Settings, settings

logger = logging.getLogger(__name__)


def _existing_app() -> Optional[firebase_admin.App]:
    try:
        return firebase_admin.get_app()
    except ValueError:
        return None


def initialize_firebase(cfg: Settings = settings) -> bool:
    """
    Start the default Admin SDK app from the service-account key in `cfg`.
    Safe to call repeatedly; returns False if the app could not be started.
    """
    if _existing_app() is not None:
        return True

    options = {"projectId": cfg.FIREBASE_PROJECT_ID}
    if cfg.FIREBASE_STORAGE_BUCKET:
        options["storageBucket"] = cfg.FIREBASE_STORAGE_BUCKET

    try:
        firebase_admin.initialize_app(credentials.Certificate(cfg.FIREBASE_SERVICE_ACCOUNT_PATH), options)
    except (ValueError, OSError) as e:
        logger.error(f"❌ Firebase initialization failed for project '{cfg.FIREBASE_PROJECT_ID}': {e}")
        return False

    logger.info(f"✅ Firebase initialized for project '{cfg.FIREBASE_PROJECT_ID}'")
    return True


def get_firebase_status() -> dict:
    app = _existing_app()
    if app is None:
        return {"available": False}
    return {
        "available": True,
        "project_id": app.project_id,
        "storage_bucket": app.options.get("storageBucket"),
    }
