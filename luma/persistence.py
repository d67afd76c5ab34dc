"""Remote persistence adapter.

Every content mutation is mirrored to Firestore through :class:`RemoteAdapter`.
A failed call never raises: it comes back as a :class:`RemoteResult` carrying
a :class:`~luma.errors.RemoteUnavailable`, and the caller carries on with its
locally built value. There is no retry queue and no reconciliation; a row
that failed to reach the remote store stays local until a later write touches
it again.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from luma import firestore_dao as dao
from luma.errors import RemoteUnavailable

logger = logging.getLogger(__name__)


@dataclass
class RemoteResult:
    ok: bool
    value: Any = None
    error: Optional[RemoteUnavailable] = None
    skipped: bool = False


class RemoteAdapter:
    """Try-remote wrapper around the Firestore DAO.

    Args:
        db: Firestore client; ``None`` resolves the process-wide client lazily.
        timeout: seconds after which a remote call counts as failed.
        enabled: when False every call is skipped and the store runs local-only.
    """

    def __init__(self, db=None, timeout=None, enabled=True):
        self.db = db
        self.timeout = timeout
        self.enabled = enabled

    def _call(self, operation, collection, fn, *args) -> RemoteResult:
        if not self.enabled:
            return RemoteResult(ok=False, skipped=True)
        try:
            value = fn(*args, db=self.db, timeout=self.timeout)
        except Exception as exc:
            error = RemoteUnavailable(operation, collection, exc)
            logger.warning('remote %s degraded to local-only: %s', operation, error)
            return RemoteResult(ok=False, error=error)
        return RemoteResult(ok=True, value=value)

    def load(self, collection) -> RemoteResult:
        return self._call('load', collection, dao.list_rows, collection)

    def get(self, collection, doc_id) -> RemoteResult:
        return self._call('get', collection, dao.get_row, collection, doc_id)

    def insert(self, collection, doc_id, row) -> RemoteResult:
        return self._call('insert', collection, dao.insert_row, collection, doc_id, dict(row))

    def update(self, collection, doc_id, row) -> RemoteResult:
        return self._call('update', collection, dao.update_row, collection, doc_id, dict(row))

    def delete(self, collection, doc_id) -> RemoteResult:
        return self._call('delete', collection, dao.delete_row, collection, doc_id)
