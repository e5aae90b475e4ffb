from firebase_admin import firestore

from ..core.config import settings
from ..core.exceptions import ConfigurationError
from ..core.firebase_init import initialize_firebase

_client = None


def get_firestore_client():
    """Return the shared Firestore client, initializing Firebase on first use."""
    global _client

    if _client is None:
        if not initialize_firebase():
            raise ConfigurationError(
                f"Firebase could not be initialized for project '{settings.FIREBASE_PROJECT_ID}'"
            )
        _client = firestore.client()
    return _client
