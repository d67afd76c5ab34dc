"""Process-wide Firebase handles for the row store, object store and auth."""

import logging
import os

import firebase_admin
from firebase_admin import auth, credentials, firestore, storage

from luma.errors import RemoteUnavailable

logger = logging.getLogger(__name__)

_app = None
_db = None
_bucket = None


def _load_credentials():
    cred_path = os.environ.get('GOOGLE_APPLICATION_CREDENTIALS', './firebase-service-account.json')
    if os.path.exists(cred_path):
        return credentials.Certificate(cred_path)
    return credentials.ApplicationDefault()


def init_firebase(app_config=None):
    """Initialise the default Firebase app once per process.

    The storage bucket comes from ``FIREBASE_STORAGE_BUCKET`` in the Flask
    config, falling back to the environment. Without a bucket, media uploads
    are unavailable but the row store still works.
    """
    global _app, _db, _bucket

    if _app is not None:
        return

    bucket_name = ''
    if app_config:
        bucket_name = app_config.get('FIREBASE_STORAGE_BUCKET', '')
    if not bucket_name:
        bucket_name = os.environ.get('FIREBASE_STORAGE_BUCKET', '')

    options = {'storageBucket': bucket_name} if bucket_name else None
    _app = firebase_admin.initialize_app(_load_credentials(), options=options)
    _db = firestore.client()
    logger.info('firebase initialised (bucket=%s)', bucket_name or '-')

    if bucket_name:
        _bucket = storage.bucket()


def get_db():
    if _db is None:
        init_firebase()
    return _db


def get_bucket():
    if _bucket is None:
        init_firebase()
    if _bucket is None:
        raise RemoteUnavailable('bucket', 'object store', 'FIREBASE_STORAGE_BUCKET is not configured')
    return _bucket


def get_auth():
    return auth
