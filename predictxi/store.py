"""Entity store with atomic single-entity writes and optional JSON persistence.

Documents are plain dicts keyed by collection and id. Services convert them
to and from the pydantic schemas. When a data directory is given, each
collection is mirrored to `<data_dir>/<collection>.json` after every write.
"""

import copy
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from .constants import COLLECTIONS
from .errors import ConflictError, NotFoundError
from .utils import load_json_safe, new_id, save_json

logger = logging.getLogger('predictxi.store')

Document = dict[str, Any]


class EntityStore:
    """
    In-process document store.

    Provides lookup by id and by field values, unique inserts, an atomic
    upsert on a composite key, atomic read-modify-write on one entity, and
    compare-and-swap on the entity's `version` counter.

    Lock order is always entity lock, then collection lock.
    """

    def __init__(self, data_dir: Optional[Path | str] = None):
        self.data_dir = Path(data_dir) if data_dir is not None else None
        self._docs: dict[str, dict[str, Document]] = {name: {} for name in COLLECTIONS}
        self._collection_locks = {name: threading.RLock() for name in COLLECTIONS}
        # One lock per entity ever locked; never pruned, so bounded by the entity count
        self._entity_locks: dict[tuple[str, str], threading.RLock] = {}
        self._guard = threading.Lock()

        if self.data_dir is not None:
            self._load()

    def _path(self, collection: str) -> Path:
        assert self.data_dir is not None
        return self.data_dir / f'{collection}.json'

    def _load(self) -> None:
        for collection in COLLECTIONS:
            docs = load_json_safe(self._path(collection), default={})
            self._docs[collection] = docs
            logger.debug(f'Loaded {len(docs)} {collection} from {self.data_dir}')

    def _flush(self, collection: str) -> None:
        if self.data_dir is not None:
            save_json(self._path(collection), self._docs[collection])

    def _collection(self, collection: str) -> dict[str, Document]:
        if collection not in self._docs:
            raise KeyError(f'Unknown collection: {collection}')
        return self._docs[collection]

    @staticmethod
    def _matches(doc: Document, fields: dict[str, Any]) -> bool:
        return all(doc.get(k) == v for k, v in fields.items())

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, collection: str, entity_id: str) -> Optional[Document]:
        with self._collection_locks[collection]:
            doc = self._collection(collection).get(entity_id)
            return copy.deepcopy(doc) if doc is not None else None

    def find(self, collection: str, **fields: Any) -> list[Document]:
        with self._collection_locks[collection]:
            return [
                copy.deepcopy(doc)
                for doc in self._collection(collection).values()
                if self._matches(doc, fields)
            ]

    def find_one(self, collection: str, **fields: Any) -> Optional[Document]:
        with self._collection_locks[collection]:
            for doc in self._collection(collection).values():
                if self._matches(doc, fields):
                    return copy.deepcopy(doc)
        return None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @contextmanager
    def locked(self, collection: str, entity_id: str) -> Iterator[None]:
        """
        Hold the single-writer lock for one entity.

        Use around validate-then-commit sequences so a concurrent writer
        cannot change the entity between the check and the write.
        """
        with self._guard:
            lock = self._entity_locks.setdefault((collection, entity_id), threading.RLock())
        with lock:
            yield

    def insert(self, collection: str, doc: Document, unique: tuple[str, ...] = ()) -> Document:
        """
        Insert a new document, assigning an id if it has none.

        Args:
            collection: Target collection
            doc: Document to store
            unique: Field names whose combined values must not already exist

        Raises:
            ConflictError: If the id or the unique key is already taken
        """
        with self._collection_locks[collection]:
            docs = self._collection(collection)
            if unique:
                key = {field: doc.get(field) for field in unique}
                if self.find_one(collection, **key) is not None:
                    raise ConflictError(f'{collection} already has an entry for {key}')

            stored = copy.deepcopy(doc)
            stored['id'] = stored.get('id') or new_id()
            if stored['id'] in docs:
                raise ConflictError(f"{collection} already has id {stored['id']}")
            stored['version'] = 1
            docs[stored['id']] = stored
            self._flush(collection)
            return copy.deepcopy(stored)

    def replace(self, collection: str, doc: Document) -> Document:
        """Overwrite an existing document by id, bumping its version."""
        with self._collection_locks[collection]:
            docs = self._collection(collection)
            current = docs.get(doc['id'])
            if current is None:
                raise NotFoundError(collection, doc['id'])
            stored = copy.deepcopy(doc)
            stored['version'] = current.get('version', 0) + 1
            docs[stored['id']] = stored
            self._flush(collection)
            return copy.deepcopy(stored)

    def update(
        self, collection: str, entity_id: str, mutate: Callable[[Document], Document]
    ) -> Document:
        """
        Atomic read-modify-write on one entity.

        `mutate` receives a copy of the current document and returns the new
        one. If it raises, nothing is written and the error propagates.

        Raises:
            NotFoundError: If the entity does not exist
        """
        with self.locked(collection, entity_id):
            current = self.get(collection, entity_id)
            if current is None:
                raise NotFoundError(collection, entity_id)
            updated = mutate(current)
            updated['id'] = entity_id
            return self.replace(collection, updated)

    def compare_and_swap(
        self, collection: str, entity_id: str, expected_version: int, doc: Document
    ) -> Document:
        """
        Write `doc` only if the stored version still equals `expected_version`.

        Raises:
            NotFoundError: If the entity does not exist
            ConflictError: If another write landed first
        """
        with self._collection_locks[collection]:
            current = self._collection(collection).get(entity_id)
            if current is None:
                raise NotFoundError(collection, entity_id)
            if current.get('version', 0) != expected_version:
                raise ConflictError(
                    f'{collection} {entity_id} changed: expected version {expected_version}, '
                    f"found {current.get('version', 0)}"
                )
            return self.replace(collection, {**doc, 'id': entity_id})

    def upsert(self, collection: str, key: dict[str, Any], doc: Document) -> tuple[Document, bool]:
        """
        Create or replace the single document matching `key`.

        The lookup and the write happen under one lock, so concurrent upserts
        on the same key leave exactly one document (last write wins).

        Returns:
            Tuple of (stored document, created)
        """
        with self._collection_locks[collection]:
            existing = self.find_one(collection, **key)
            merged = {**copy.deepcopy(doc), **key}
            if existing is None:
                return self.insert(collection, merged), True
            merged['id'] = existing['id']
            return self.replace(collection, merged), False

