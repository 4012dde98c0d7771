import logging

from firebase_admin import firestore

from ..core.firebase_init import initialize_firebase, is_firebase_available

logger = logging.getLogger(__name__)

_client = None


def get_firestore_client():
    """Return the shared Firestore client, initializing Firebase on first use."""
    global _client

    if _client is None:
        if not is_firebase_available() and not initialize_firebase():
            raise RuntimeError("Firestore is not available - check FIREBASE_SERVICE_ACCOUNT_PATH")
        _client = firestore.client()
        logger.info("Firestore client created")

    return _client
