"""
Record store: whole-collection persistence for JSON arrays.

Every collection is a flat list of dicts. Callers load the full list,
mutate it in memory and save the full list back. Nothing here makes that
cycle atomic on its own; ``locked()`` serializes it per collection inside
one process when locking is enabled. Separate processes sharing a data
directory still race, and the last writer wins.
"""
import copy
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager

logger = logging.getLogger(__name__)

USERS = "users"
BLOOD_REQUESTS = "blood-requests"
NOTIFICATIONS = "notifications"
DONATION_DRIVES = "donation-drives"
DONATION_HISTORY = "donation-history"
MESSAGES = "messages"

COLLECTIONS = (
    USERS,
    BLOOD_REQUESTS,
    NOTIFICATIONS,
    DONATION_DRIVES,
    DONATION_HISTORY,
    MESSAGES,
)


class RecordStore:
    """Storage capability shared by every service.

    Subclasses implement ``load``, ``save`` and ``exists``. ``save`` returns
    True or False and never raises for an I/O problem.
    """

    def __init__(self, lock_collections=True):
        self.lock_collections = lock_collections
        self._locks = {}
        self._locks_guard = threading.Lock()

    def load(self, collection):
        raise NotImplementedError

    def save(self, collection, records):
        raise NotImplementedError

    def exists(self, collection):
        raise NotImplementedError

    def _lock_for(self, collection):
        with self._locks_guard:
            lock = self._locks.get(collection)
            if lock is None:
                lock = threading.RLock()
                self._locks[collection] = lock
            return lock

    @contextmanager
    def locked(self, collection):
        """Hold the collection lock for one load/mutate/save cycle."""
        if not self.lock_collections:
            yield
            return
        with self._lock_for(collection):
            yield

    def initialize(self):
        for collection in COLLECTIONS:
            if not self.exists(collection):
                if self.save(collection, []):
                    logger.info("📄 Created %s", collection)


class JsonFileStore(RecordStore):
    """One ``<collection>.json`` file per collection under ``data_dir``."""

    def __init__(self, data_dir, lock_collections=True):
        super().__init__(lock_collections=lock_collections)
        self.data_dir = data_dir

    def path_for(self, collection):
        return os.path.join(self.data_dir, f"{collection}.json")

    def exists(self, collection):
        return os.path.exists(self.path_for(collection))

    def initialize(self):
        os.makedirs(self.data_dir, exist_ok=True)
        super().initialize()

    def load(self, collection):
        path = self.path_for(collection)
        if not os.path.exists(path):
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Error reading %s: %s", path, e)
            return []

        if not isinstance(data, list):
            logger.warning("⚠️ %s does not hold a JSON array, treating as empty", path)
            return []
        return data

    def save(self, collection, records):
        path = self.path_for(collection)
        tmp_path = None
        try:
            os.makedirs(self.data_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.data_dir, prefix=f".{collection}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)
            os.replace(tmp_path, path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error writing %s: %s", path, e)
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    logger.warning("Could not remove temp file %s", tmp_path)
            return False


class MemoryStore(RecordStore):
    """In-process store with the same contract, used for tests and embedding."""

    def __init__(self, lock_collections=True, initial=None):
        super().__init__(lock_collections=lock_collections)
        self._data = {}
        for collection, records in (initial or {}).items():
            self._data[collection] = copy.deepcopy(list(records))

    def exists(self, collection):
        return collection in self._data

    def load(self, collection):
        return copy.deepcopy(self._data.get(collection, []))

    def save(self, collection, records):
        try:
            self._data[collection] = json.loads(json.dumps(records))
        except (TypeError, ValueError) as e:
            logger.error("Error writing %s: %s", collection, e)
            return False
        return True
