"""In-memory content store.

Holds the five hierarchy collections (newest first) and is the only writer
to them. Every mutation runs the same sequence under one lock:

1. build the new record locally,
2. mirror it to the remote row store (a failure is logged and ignored),
3. swap it into the in-memory collection,
4. re-derive the local cache snapshot for that collection.

Lookups of unknown ids return ``None`` or empty lists, and updates of unknown
ids are no-ops; nothing here raises for a stale reference.
"""

import functools
import logging
import threading
from typing import Dict, Iterable, List, Optional, Set

from luma.cache import UnitSnapshotSerializer, read_records, write_records
from luma.cascade import cascade_delete
from luma.models import (
    ENTITY_TYPES, HIERARCHY, UNIT, LearningUnit, _now, new_id, to_row,
)
from luma.persistence import RemoteAdapter

logger = logging.getLogger(__name__)

CACHE_KEYS = {
    'subject': 'subjects',
    'training': 'trainings',
    'module': 'trainingModules',
    'topic': 'topics',
    'unit': UnitSnapshotSerializer.KEY,
}

IMMUTABLE_FIELDS = ('id', 'created_at', 'updated_at')

# Unit fields the cache snapshot truncates or strips. A unit read back from
# the cache holds lossy copies of these until its remote row is re-read.
DEGRADED_UNIT_FIELDS = (
    'learning_goals', 'urls', 'images', 'video', 'power_point_file',
    'text_snippets', 'comments', 'explanation_comments', 'speech_text_comments',
)


def locked(fn):
    """Run a ``fn(store, ...)`` helper with the store lock held throughout.

    Helpers that copy a list off a record, edit it and write it back need the
    whole read-modify-write serialized, not just the final update.
    """
    @functools.wraps(fn)
    def wrapper(store, *args, **kwargs):
        with store.lock:
            return fn(store, *args, **kwargs)
    return wrapper


class ContentStore:
    """The five ordered collections plus their CRUD primitives.

    Args:
        remote: adapter for the remote row store; defaults to local-only.
        cache: optional :class:`~luma.cache.LocalCache` for the fallback snapshot.
        policy: optional :class:`~luma.cache.CachePolicy` for the unit snapshot.
    """

    def __init__(self, remote: RemoteAdapter = None, cache=None, policy=None):
        self.remote = remote or RemoteAdapter(enabled=False)
        self.cache = cache
        self.unit_serializer = UnitSnapshotSerializer(cache, policy) if cache is not None else None
        self._collections: Dict[str, list] = {kind: [] for kind in HIERARCHY}
        self._partial_units: Set[str] = set()
        self.lock = threading.RLock()

    # -- loading ------------------------------------------------------------

    def load(self) -> str:
        """Fill the collections from the remote store, else from the local cache.

        Returns ``'remote'`` or ``'cache'`` naming the source used.
        """
        loaded = {}
        for kind in HIERARCHY:
            cls = ENTITY_TYPES[kind]
            result = self.remote.load(cls.COLLECTION)
            if not result.ok:
                break
            loaded[kind] = [cls.from_dict(row, row['id']) for row in result.value]
        else:
            with self.lock:
                self._collections.update(loaded)
                self._partial_units.clear()
                self.persist(HIERARCHY)
            logger.info('content loaded from remote store (%d units)', len(loaded[UNIT]))
            return 'remote'

        with self.lock:
            for kind in HIERARCHY:
                if self.cache is None:
                    self._collections[kind] = []
                else:
                    self._collections[kind] = read_records(self.cache, CACHE_KEYS[kind], ENTITY_TYPES[kind])
            self._partial_units = {u.id for u in self._collections[UNIT]}
        logger.warning('remote store unreachable, content loaded from local cache (%d units)',
                       len(self._collections[UNIT]))
        return 'cache'

    def persist(self, kinds: Iterable[str]) -> None:
        """Write the local cache snapshot for the given kinds."""
        if self.cache is None:
            return
        for kind in kinds:
            if kind == UNIT:
                self.unit_serializer.persist(self._collections[UNIT])
            else:
                write_records(self.cache, CACHE_KEYS[kind], self._collections[kind])

    # -- lookups ------------------------------------------------------------

    def all(self, kind) -> list:
        return list(self._collections[kind])

    def get_by_id(self, kind, record_id):
        for record in self._collections[kind]:
            if record.id == record_id:
                return record
        return None

    def list_by_parent(self, kind, parent_id) -> list:
        field = ENTITY_TYPES[kind].PARENT_FIELD
        if field is None:
            return []
        return [r for r in self._collections[kind] if getattr(r, field) == parent_id]

    def _index_of(self, kind, record_id) -> Optional[int]:
        for index, record in enumerate(self._collections[kind]):
            if record.id == record_id:
                return index
        return None

    # -- mutations ----------------------------------------------------------

    def create(self, kind, data: dict):
        """Create a record with a fresh id and timestamps at the head of its collection."""
        cls = ENTITY_TYPES[kind]
        now = _now()
        row = {k: to_row(v) for k, v in data.items() if k not in IMMUTABLE_FIELDS}
        row['created_at'] = now
        row['updated_at'] = now
        record = cls.from_dict(row, new_id())

        with self.lock:
            result = self.remote.insert(cls.COLLECTION, record.id, record.to_dict())
            if result.ok and result.value:
                record = cls.from_dict({**record.to_dict(), **result.value}, record.id)
            self._collections[kind].insert(0, record)
            self.persist([kind])
        return record

    def update(self, kind, record_id, changes: dict):
        """Shallow-merge ``changes`` into a record; unknown ids are a no-op."""
        cls = ENTITY_TYPES[kind]
        with self.lock:
            index = self._index_of(kind, record_id)
            if index is None:
                logger.debug('update of unknown %s %s ignored', kind, record_id)
                return None
            current = self._collections[kind][index]

            row_changes = {k: to_row(v) for k, v in changes.items() if k not in IMMUTABLE_FIELDS}
            row_changes['updated_at'] = _now()
            merged = {**current.to_dict(), **row_changes, 'created_at': current.created_at}
            record = cls.from_dict(merged, record_id)

            held = set()
            if kind == UNIT and record_id in self._partial_units:
                held = {k for k in row_changes if k in DEGRADED_UNIT_FIELDS}
            if held:
                logger.info('unit %s still holds cached data, %s kept local',
                            record_id, ', '.join(sorted(held)))
            remote_changes = {k: v for k, v in row_changes.items() if k not in held}

            result = self.remote.update(cls.COLLECTION, record_id, remote_changes)
            if result.ok and result.value:
                canonical = {k: v for k, v in result.value.items() if k not in held}
                record = cls.from_dict(
                    {**merged, **canonical, 'created_at': current.created_at}, record_id)
            self._collections[kind][index] = record
            self.persist([kind])
        return record

    def is_partial(self, unit_id) -> bool:
        return unit_id in self._partial_units

    def complete_unit(self, unit_id) -> bool:
        """Refill a cache-loaded unit's degraded fields from its remote row.

        Returns True once the unit holds complete data. While the remote row
        cannot be read the unit stays partial and :meth:`update` keeps edits
        to its degraded fields local.
        """
        with self.lock:
            if unit_id not in self._partial_units:
                return True
            index = self._index_of(UNIT, unit_id)
            if index is None:
                self._partial_units.discard(unit_id)
                return True
            result = self.remote.get(LearningUnit.COLLECTION, unit_id)
            if not result.ok:
                return False
            # No remote row means the local copy is the only one there is.
            row = result.value or {}
            current = self._collections[UNIT][index]
            restored = {k: row[k] for k in DEGRADED_UNIT_FIELDS if k in row}
            self._collections[UNIT][index] = LearningUnit.from_dict(
                {**current.to_dict(), **restored}, unit_id)
            self._partial_units.discard(unit_id)
            self.persist([UNIT])
            logger.info('unit %s refreshed from remote store', unit_id)
        return True

    def remove(self, kind, record_ids) -> List[str]:
        """Drop records from memory only. Returns the ids actually removed."""
        record_ids = set(record_ids)
        with self.lock:
            removed = [r.id for r in self._collections[kind] if r.id in record_ids]
            self._collections[kind] = [r for r in self._collections[kind] if r.id not in record_ids]
        return removed

    def delete(self, kind, record_id):
        """Delete a record and everything beneath it. See :mod:`luma.cascade`."""
        return cascade_delete(self, kind, record_id)
