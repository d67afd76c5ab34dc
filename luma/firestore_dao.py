"""
Firestore Data Access Object (DAO) layer.

Row-level operations on the content collections. Each content collection is
keyed by the client-generated entity id, so inserts use ``document(id).set``
rather than ``add``. Reads are ordered newest first.

Every function raises whatever the Firestore client raises; turning those
failures into local-only degradation is the job of ``luma.persistence``.
"""

from datetime import datetime, timezone

from luma.firebase_init import get_db


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _doc_to_dict(doc_snapshot):
    """Convert a Firestore DocumentSnapshot to a dict with 'id' field."""
    if not doc_snapshot.exists:
        return None
    d = doc_snapshot.to_dict()
    d['id'] = doc_snapshot.id
    return d


def _query_to_list(query_ref, timeout=None):
    """Run a query and return a list of dicts."""
    return [_doc_to_dict(doc) for doc in query_ref.stream(timeout=timeout)]


def _now():
    return datetime.now(timezone.utc)


# ========================================================================
# Content rows  (collections: subjects, trainings, training_modules,
#                topics, learning_units, ideas)
# ========================================================================

def list_rows(collection, db=None, timeout=None):
    """Get every row of a collection, newest first."""
    db = db or get_db()
    return _query_to_list(
        db.collection(collection).order_by('created_at', direction='DESCENDING'),
        timeout=timeout,
    )


def get_row(collection, doc_id, db=None, timeout=None):
    """Get one row by ID. Returns dict or None."""
    db = db or get_db()
    return _doc_to_dict(db.collection(collection).document(doc_id).get(timeout=timeout))


def insert_row(collection, doc_id, data, db=None, timeout=None):
    """Create a row under the given ID and return it as stored."""
    db = db or get_db()
    data.setdefault('created_at', _now())
    doc_ref = db.collection(collection).document(doc_id)
    doc_ref.set(data, timeout=timeout)
    return _doc_to_dict(doc_ref.get(timeout=timeout))


def update_row(collection, doc_id, data, db=None, timeout=None):
    """Merge fields into a row and return it as stored.

    Merging rather than updating means a row whose insert never reached the
    store is created by its next successful write.
    """
    db = db or get_db()
    data.setdefault('updated_at', _now())
    doc_ref = db.collection(collection).document(doc_id)
    doc_ref.set(data, merge=True, timeout=timeout)
    return _doc_to_dict(doc_ref.get(timeout=timeout))


def delete_row(collection, doc_id, db=None, timeout=None):
    """Delete a row."""
    db = db or get_db()
    db.collection(collection).document(doc_id).delete(timeout=timeout)


# ========================================================================
# Users  (collection: users)
# ========================================================================

def get_user(uid, db=None):
    """Get a user document by UID. Returns dict or None."""
    db = db or get_db()
    doc = db.collection('users').document(uid).get()
    return _doc_to_dict(doc)


def set_user(uid, data, db=None):
    """Create or overwrite a user document."""
    db = db or get_db()
    db.collection('users').document(uid).set(data)
