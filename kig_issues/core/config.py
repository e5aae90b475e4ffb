# kig_issues/core/config.py
import json
import logging
import os
from enum import Enum

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Values that mean "not really configured"
PLACEHOLDER_SECRETS = {"", "undefined", "fallback-secret-key", "your-secret-key-here"}
PLACEHOLDER_IDENTIFIERS = {"", "undefined", "your-project-id"}


class StorageMode(str, Enum):
    LIVE = "live"
    MOCK = "mock"


class Settings:
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "KIG Issues")

    # "Is configured" switch; everything below is ignored for storage unless it is on
    STORAGE_CONFIGURED: bool = os.getenv("STORAGE_CONFIGURED", "false").lower() == "true"

    FIREBASE_PROJECT_ID: str = os.getenv("FIREBASE_PROJECT_ID", "")
    FIREBASE_STORAGE_BUCKET: str = os.getenv("FIREBASE_STORAGE_BUCKET", "")
    FIREBASE_SERVICE_ACCOUNT_PATH: str = os.getenv(
        "FIREBASE_SERVICE_ACCOUNT_PATH",
        "firebase-service-account.json",
    )
    # Collections are named "{prefix}{partition}", e.g. "kig_Issue"
    COLLECTION_PREFIX: str = os.getenv("COLLECTION_PREFIX", "kig_")
    PHOTO_CONTAINER: str = os.getenv("PHOTO_CONTAINER", "issues")

    JWT_SECRET: str = os.getenv("JWT_SECRET", "fallback-secret-key")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7))
    )

    CORS_ORIGINS: list = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()


def _service_account_is_valid(path: str) -> bool:
    if not path or not os.path.isfile(path):
        logger.warning("Service account file not found at %s. Using mock data.", path)
        return False
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError) as e:
        logger.warning("Service account file %s is unreadable (%s). Using mock data.", path, e)
        return False
    if not isinstance(data, dict) or data.get("type") != "service_account" or not data.get("project_id"):
        logger.warning("Service account file %s is not a service account key. Using mock data.", path)
        return False
    return True


def validate_storage_config(cfg: Settings = settings) -> bool:
    """
    Return True only when the cloud backend is switched on and every
    credential looks real: connection descriptor, account identifier and
    signing secret.
    """
    if not cfg.STORAGE_CONFIGURED:
        logger.warning("Storage is not configured. Using mock data.")
        return False

    project_id = (cfg.FIREBASE_PROJECT_ID or "").strip()
    if project_id in PLACEHOLDER_IDENTIFIERS:
        logger.warning("Firebase project id is missing. Using mock data.")
        return False

    secret = (cfg.JWT_SECRET or "").strip()
    if secret in PLACEHOLDER_SECRETS:
        logger.warning("JWT secret is missing or using fallback. Using mock data.")
        return False

    return _service_account_is_valid(cfg.FIREBASE_SERVICE_ACCOUNT_PATH)


def resolve_storage_mode(cfg: Settings = settings) -> StorageMode:
    mode = StorageMode.LIVE if validate_storage_config(cfg) else StorageMode.MOCK
    logger.info("Storage mode resolved: %s", mode.value)
    return mode
