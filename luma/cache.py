"""Local fallback cache.

:class:`LocalCache` is a capacity-bounded string store on top of Redis. It is
read only when the remote row store cannot be reached at startup.

:class:`UnitSnapshotSerializer` writes the learning-unit collection into it
using three tiers of lossy projection:

1. full: every unit reduced to a bounded projection (long texts truncated
   or replaced by a placeholder, lists capped, media stripped to references);
2. emergency: when the full projection serializes above the emergency
   threshold, or writing it fails, only ``id, title, editorialState,
   topicId, updatedAt`` per unit;
3. last resort: when the emergency write fails too, the key is cleared and
   the first few units are written as ``id, title, topicId``.

Failures at one tier fall through to the next and are never raised to the
caller.
"""

import json
import logging
from dataclasses import dataclass

import redis

from luma.errors import QuotaExceededError

logger = logging.getLogger(__name__)

MB = 1024 * 1024

PLACEHOLDER = '[stored remotely]'

TIER_FULL = 1
TIER_EMERGENCY = 2
TIER_LAST_RESORT = 3


def _dump(payload) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(',', ':'))


def _truncate(value, limit):
    if not value:
        return value
    return value[:limit]


class LocalCache:
    """String key-value store with a byte quota shared by all keys.

    Args:
        client: a redis-py client created with ``decode_responses=True``.
        prefix: namespace for every key written by this cache.
        capacity_bytes: total UTF-8 size allowed across the namespace.
    """

    def __init__(self, client, prefix='luma', capacity_bytes=10 * MB):
        self._r = client
        self._prefix = prefix
        self.capacity_bytes = capacity_bytes

    @classmethod
    def from_url(cls, url, **kwargs):
        return cls(redis.from_url(url, decode_responses=True), **kwargs)

    def _key(self, key):
        return f'{self._prefix}:{key}'

    def used_bytes(self, exclude=None) -> int:
        skip = self._key(exclude) if exclude else None
        return sum(
            self._r.strlen(k)
            for k in self._r.scan_iter(match=f'{self._prefix}:*')
            if k != skip
        )

    def get(self, key):
        return self._r.get(self._key(key))

    def set(self, key, value: str) -> None:
        """Store ``value``; raises QuotaExceededError if it would not fit."""
        size = len(value.encode('utf-8'))
        if self.used_bytes(exclude=key) + size > self.capacity_bytes:
            raise QuotaExceededError(key, size, self.capacity_bytes)
        self._r.set(self._key(key), value)

    def remove(self, key) -> None:
        self._r.delete(self._key(key))


@dataclass
class CachePolicy:
    """Size caps for the unit snapshot. Defaults match the stock config."""

    emergency_threshold_bytes: int = 8 * MB
    description_chars: int = 500
    notes_chars: int = 1000
    learning_goals: int = 5
    urls: int = 10
    images: int = 10
    snippets: int = 10
    snippet_chars: int = 100
    last_resort_units: int = 10

    @classmethod
    def from_config(cls, config):
        return cls(
            emergency_threshold_bytes=config.get('CACHE_EMERGENCY_THRESHOLD_BYTES', 8 * MB),
            description_chars=config.get('CACHE_DESCRIPTION_CHARS', 500),
            notes_chars=config.get('CACHE_NOTES_CHARS', 1000),
            learning_goals=config.get('CACHE_LEARNING_GOALS', 5),
            urls=config.get('CACHE_URLS', 10),
            images=config.get('CACHE_IMAGES', 10),
            snippets=config.get('CACHE_SNIPPETS', 10),
            snippet_chars=config.get('CACHE_SNIPPET_CHARS', 100),
            last_resort_units=config.get('CACHE_LAST_RESORT_UNITS', 10),
        )


def _media_ref(media):
    if not media:
        return None
    return {
        'id': media.get('id'),
        'name': media.get('name'),
        'publicUrl': media.get('publicUrl'),
        'uploadedAt': media.get('uploadedAt'),
    }


class UnitSnapshotSerializer:
    KEY = 'learningUnits'

    def __init__(self, cache: LocalCache, policy: CachePolicy = None):
        self.cache = cache
        self.policy = policy or CachePolicy()

    # -- projections ---------------------------------------------------------

    def project(self, unit) -> dict:
        """Tier 1: bounded projection of one unit."""
        p = self.policy
        data = unit.to_json()
        data['description'] = _truncate(data.get('description'), p.description_chars)
        data['notes'] = _truncate(data.get('notes'), p.notes_chars)
        data['speechText'] = PLACEHOLDER if data.get('speechText') else ''
        data['explanation'] = PLACEHOLDER if data.get('explanation') else ''
        data['learningGoals'] = data.get('learningGoals', [])[:p.learning_goals]
        data['urls'] = data.get('urls', [])[:p.urls]
        data['images'] = [_media_ref(i) for i in data.get('images', [])[:p.images]]
        data['video'] = _media_ref(data.get('video'))
        data['textSnippets'] = [
            {
                'id': s['id'],
                'content': _truncate(s.get('content'), p.snippet_chars),
                'order': s.get('order'),
                'approved': s.get('approved', False),
                'createdAt': s.get('createdAt'),
            }
            for s in data.get('textSnippets', [])[:p.snippets]
        ]
        data['comments'] = []
        data['explanationComments'] = []
        data['speechTextComments'] = []
        ppt = data.get('powerPointFile')
        data['powerPointFile'] = {'name': ppt.get('name')} if ppt else None
        return data

    @staticmethod
    def emergency(unit) -> dict:
        """Tier 2: identity, title, state and placement only."""
        return {
            'id': unit.id,
            'title': unit.title,
            'editorialState': unit.editorial_state.value,
            'topicId': unit.topic_id,
            'updatedAt': unit.updated_at.isoformat() if unit.updated_at else None,
        }

    @staticmethod
    def last_resort(unit) -> dict:
        return {'id': unit.id, 'title': unit.title, 'topicId': unit.topic_id}

    # -- writing -------------------------------------------------------------

    def persist(self, units):
        """Write the unit collection; returns the tier used or None."""
        units = list(units)
        try:
            payload = _dump([self.project(u) for u in units])
            size = len(payload.encode('utf-8'))
            if size <= self.policy.emergency_threshold_bytes:
                self.cache.set(self.KEY, payload)
                return TIER_FULL
            logger.warning('unit snapshot is %d bytes, over the %d byte threshold',
                           size, self.policy.emergency_threshold_bytes)
        except Exception as exc:
            logger.warning('full unit snapshot not written: %s', exc)

        try:
            self.cache.set(self.KEY, _dump([self.emergency(u) for u in units]))
            logger.warning('wrote emergency unit snapshot (%d units)', len(units))
            return TIER_EMERGENCY
        except Exception as exc:
            logger.warning('emergency unit snapshot not written: %s', exc)

        try:
            self.cache.remove(self.KEY)
            head = units[:self.policy.last_resort_units]
            self.cache.set(self.KEY, _dump([self.last_resort(u) for u in head]))
            logger.error('local cache degraded to last-resort snapshot (%d of %d units)',
                         len(head), len(units))
            return TIER_LAST_RESORT
        except Exception:
            logger.exception('local cache unusable, unit snapshot dropped')
            return None


def write_records(cache: LocalCache, key, records) -> bool:
    """Write a small collection verbatim. Returns False if the write failed."""
    try:
        cache.set(key, _dump([r.to_json() for r in records]))
    except Exception as exc:
        logger.warning('local cache write of %s failed: %s', key, exc)
        return False
    return True


def read_records(cache: LocalCache, key, cls):
    """Read a collection written by ``write_records`` or the unit serializer."""
    try:
        raw = cache.get(key)
    except Exception as exc:
        logger.warning('local cache read of %s failed: %s', key, exc)
        return []
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning('local cache entry %s is corrupt, ignoring it', key)
        return []
    return [cls.from_json(item) for item in items]
