"""Cascading deletes across the content hierarchy.

Deleting a node removes it and every transitive descendant from the store.
The whole descendant set is computed from the collections as they stand
before anything is removed; only then are the collections filtered. Only the
top-level row is deleted remotely; the remote store's own referential rules
take care of its children.
"""

import logging
from typing import Dict, List, Set

from luma.models import ENTITY_TYPES, HIERARCHY, MODULE, SUBJECT, TOPIC, TRAINING, UNIT

logger = logging.getLogger(__name__)


def collect_descendants(store, kind, record_id) -> Dict[str, Set[str]]:
    """Map each kind at or below ``kind`` to the ids that a delete would remove.

    Unknown ids yield an empty mapping. Records whose parent reference is
    ``None`` are never treated as children of anything.
    """
    if store.get_by_id(kind, record_id) is None:
        return {}

    doomed = {kind: {record_id}}
    parents = {record_id}
    for child in HIERARCHY[HIERARCHY.index(kind) + 1:]:
        field = ENTITY_TYPES[child].PARENT_FIELD
        ids = set()
        for record in store.all(child):
            parent_id = getattr(record, field)
            if parent_id is not None and parent_id in parents:
                ids.add(record.id)
        doomed[child] = ids
        parents = ids
    return doomed


def cascade_delete(store, kind, record_id) -> Dict[str, List[str]]:
    """Delete ``record_id`` and its subtree. Returns the removed ids per kind."""
    with store.lock:
        doomed = collect_descendants(store, kind, record_id)
        if not doomed:
            logger.debug('delete of unknown %s %s ignored', kind, record_id)
            return {}

        result = store.remote.delete(ENTITY_TYPES[kind].COLLECTION, record_id)
        if not result.ok and not result.skipped:
            logger.info('%s %s deleted locally only', kind, record_id)

        removed = {}
        for doomed_kind, ids in doomed.items():
            removed[doomed_kind] = store.remove(doomed_kind, ids)
        store.persist(doomed.keys())

    logger.info('deleted %s %s with %d descendants', kind, record_id,
                sum(len(ids) for ids in removed.values()) - 1)
    return removed


def delete_subject(store, subject_id):
    return cascade_delete(store, SUBJECT, subject_id)


def delete_training(store, training_id):
    return cascade_delete(store, TRAINING, training_id)


def delete_module(store, module_id):
    return cascade_delete(store, MODULE, module_id)


def delete_topic(store, topic_id):
    return cascade_delete(store, TOPIC, topic_id)


def delete_unit(store, unit_id):
    return cascade_delete(store, UNIT, unit_id)
