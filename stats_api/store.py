# stats_api/store.py
from __future__ import annotations

import copy
import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core.exceptions import NotFound

from stats_api.config import FIREBASE_CREDENTIALS_PATH, STATS_STORE_BACKEND

logger = logging.getLogger(__name__)

PLAYERS = "players"
TEAMS = "teams"
MATCHES = "matches"

# Firestore rejects batches with more writes than this
FIRESTORE_BATCH_LIMIT = 500


class StoreError(KeyError):
    """Raised when a document that must exist does not."""
    pass


class WriteBatch:
    """Writes collected inside `with store.batch() as b:`; applied on exit."""

    def __init__(self) -> None:
        self.ops: List[Tuple[str, str, str, dict]] = []

    def set(self, collection: str, doc_id: str, data: dict) -> None:
        self.ops.append(("set", collection, str(doc_id), copy.deepcopy(data)))

    def update(self, collection: str, doc_id: str, fields: dict) -> None:
        self.ops.append(("update", collection, str(doc_id), copy.deepcopy(fields)))


# -------------------------
# Firestore
# -------------------------
def _firestore_client() -> Any:
    try:
        firebase_admin.get_app()
    except ValueError:
        if FIREBASE_CREDENTIALS_PATH:
            firebase_admin.initialize_app(credentials.Certificate(FIREBASE_CREDENTIALS_PATH))
        else:
            # application default credentials (GOOGLE_APPLICATION_CREDENTIALS, metadata server)
            firebase_admin.initialize_app()
    return firestore.client()


class FirestoreStore:
    """
    players / teams / matches collections in Firestore, addressed by document id.

    update() and batched updates require the document to exist (StoreError
    otherwise). Batches are committed in chunks of FIRESTORE_BATCH_LIMIT;
    each chunk is atomic, the whole batch is not.
    """

    def __init__(self, client: Any = None) -> None:
        self._db = client if client is not None else _firestore_client()

    def _ref(self, collection: str, doc_id: str) -> Any:
        return self._db.collection(collection).document(str(doc_id))

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        snap = self._ref(collection, doc_id).get()
        return snap.to_dict() if snap.exists else None

    def list(self, collection: str) -> List[Tuple[str, dict]]:
        return [(snap.id, snap.to_dict()) for snap in self._db.collection(collection).stream()]

    def set(self, collection: str, doc_id: str, data: dict) -> None:
        self._ref(collection, doc_id).set(data)

    def update(self, collection: str, doc_id: str, fields: dict) -> None:
        try:
            self._ref(collection, doc_id).update(fields)
        except NotFound as e:
            raise StoreError(f"{collection}/{doc_id} not found") from e

    def delete(self, collection: str, doc_id: str) -> None:
        self._ref(collection, doc_id).delete()

    @contextmanager
    def batch(self) -> Iterator[WriteBatch]:
        b = WriteBatch()
        yield b

        for start in range(0, len(b.ops), FIRESTORE_BATCH_LIMIT):
            chunk = b.ops[start:start + FIRESTORE_BATCH_LIMIT]
            fb = self._db.batch()
            for op, collection, doc_id, data in chunk:
                ref = self._ref(collection, doc_id)
                if op == "set":
                    fb.set(ref, data)
                else:
                    fb.update(ref, data)
            try:
                fb.commit()
            except NotFound as e:
                raise StoreError(f"batch write failed after {start} writes: {e}") from e
            logger.debug("Committed %d writes", len(chunk))


# -------------------------
# In memory (tests, local runs)
# -------------------------
class MemoryStore:
    """Same interface as FirestoreStore over a dict; batches are all-or-nothing."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._data: Dict[str, Dict[str, dict]] = {}

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        with self._lock:
            doc = self._data.get(collection, {}).get(str(doc_id))
            return copy.deepcopy(doc) if doc is not None else None

    def list(self, collection: str) -> List[Tuple[str, dict]]:
        with self._lock:
            return [(k, copy.deepcopy(v)) for k, v in self._data.get(collection, {}).items()]

    def set(self, collection: str, doc_id: str, data: dict) -> None:
        with self._lock:
            self._data.setdefault(collection, {})[str(doc_id)] = copy.deepcopy(data)

    def update(self, collection: str, doc_id: str, fields: dict) -> None:
        """Shallow merge of top-level fields; the document must exist."""
        with self._lock:
            docs = self._data.get(collection, {})
            if str(doc_id) not in docs:
                raise StoreError(f"{collection}/{doc_id} not found")
            docs[str(doc_id)].update(copy.deepcopy(fields))

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            self._data.get(collection, {}).pop(str(doc_id), None)

    @contextmanager
    def batch(self) -> Iterator[WriteBatch]:
        b = WriteBatch()
        yield b
        with self._lock:
            created = set()
            for op, collection, doc_id, _ in b.ops:
                if op == "set":
                    created.add((collection, doc_id))
                elif (collection, doc_id) not in created and doc_id not in self._data.get(collection, {}):
                    raise StoreError(f"{collection}/{doc_id} not found")

            for op, collection, doc_id, data in b.ops:
                if op == "set":
                    self.set(collection, doc_id, data)
                else:
                    self.update(collection, doc_id, data)


DocumentStore = Union[FirestoreStore, MemoryStore]

_store: Optional[DocumentStore] = None


def get_store() -> DocumentStore:
    global _store
    if _store is None:
        if STATS_STORE_BACKEND == "memory":
            logger.warning("Using the in-memory store; nothing is persisted")
            _store = MemoryStore()
        else:
            _store = FirestoreStore()
    return _store


def set_store(store: Optional[DocumentStore]) -> None:
    """Swap the process-wide store (tests, scripts against another project)."""
    global _store
    _store = store
