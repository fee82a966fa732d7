"""Resource services: load a collection, apply a rule, save it back."""
import logging

from redweb.errors import StorageError

logger = logging.getLogger(__name__)


def save_or_fail(store, collection, records, message="Failed to save data"):
    if not store.save(collection, records):
        logger.error("❌ Could not persist %s", collection)
        raise StorageError(message)
    return True
