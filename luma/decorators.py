import logging
from functools import wraps

from flask import g, jsonify, request, session

from luma import firestore_dao as dao
from luma.firebase_init import get_auth
from luma.models import UserSnapshot

logger = logging.getLogger(__name__)


def _bearer_token():
    header = request.headers.get('Authorization', '')
    if header.lower().startswith('bearer '):
        return header[7:].strip()
    return None


def _verify_session():
    """Resolve the caller from a Firebase session cookie or ID token.

    Returns the user profile dict, or None when the caller is anonymous or
    the credential does not verify.
    """
    session_cookie = session.get('firebase_session')
    id_token = _bearer_token()
    if not session_cookie and not id_token:
        return None

    auth = get_auth()
    try:
        if session_cookie:
            decoded = auth.verify_session_cookie(session_cookie, check_revoked=True)
        else:
            decoded = auth.verify_id_token(id_token, check_revoked=True)
        uid = decoded['uid']
        user_data = dao.get_user(uid) or {
            'name': decoded.get('name', ''),
            'avatar': decoded.get('picture'),
        }
    except Exception as exc:
        logger.info('rejected credentials: %s', exc)
        return None

    user_data['uid'] = uid
    user_data['id'] = uid
    return user_data


class CurrentUser:
    """The signed-in user, or an anonymous user when ``data`` is empty."""

    def __init__(self, data=None):
        self._data = data or {}

    @property
    def is_authenticated(self):
        return bool(self._data)

    @property
    def id(self):
        return self._data.get('uid', '')

    @property
    def role(self):
        return self._data.get('role', 'user')

    @property
    def display_name(self):
        return self._data.get('name') or self._data.get('display_name') or self._data.get('email', '')

    def snapshot(self) -> UserSnapshot:
        """Copy of the user to embed in comments and ideas."""
        return UserSnapshot(
            id=self.id,
            name=self.display_name,
            avatar=self._data.get('avatar'),
            role=self.role,
        )


def load_current_user():
    if hasattr(g, '_current_user'):
        return
    g._current_user = CurrentUser(_verify_session())


def get_current_user():
    if not hasattr(g, '_current_user'):
        load_current_user()
    return g._current_user


def _unauthorized():
    return jsonify({'error': 'authentication required'}), 401


def auth_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        user = get_current_user()
        if not user.is_authenticated:
            return _unauthorized()
        g.current_user = user
        return f(*args, **kwargs)
    return decorated

