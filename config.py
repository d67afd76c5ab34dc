import os
from dotenv import load_dotenv

load_dotenv()

MB = 1024 * 1024


def _env_int(name, default):
    value = os.environ.get(name)
    return int(value) if value else default


class Config:
    SECRET_KEY = os.environ.get('SESSION_SECRET') or os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = None
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Remote row store (Firestore) and object store (Firebase Storage)
    REMOTE_ENABLED = os.environ.get('REMOTE_ENABLED', 'true').lower() in ('true', '1')
    REMOTE_TIMEOUT_SECONDS = float(os.environ.get('REMOTE_TIMEOUT_SECONDS', 10))
    FIREBASE_STORAGE_BUCKET = os.environ.get('FIREBASE_STORAGE_BUCKET', '')

    # Local fallback cache (Redis)
    LOCAL_CACHE_URL = os.environ.get('LOCAL_CACHE_URL', 'redis://localhost:6379/0')
    LOCAL_CACHE_PREFIX = os.environ.get('LOCAL_CACHE_PREFIX', 'luma')
    LOCAL_CACHE_CAPACITY_BYTES = _env_int('LOCAL_CACHE_CAPACITY_BYTES', 10 * MB)

    # Unit snapshot degradation policy
    CACHE_EMERGENCY_THRESHOLD_BYTES = _env_int('CACHE_EMERGENCY_THRESHOLD_BYTES', 8 * MB)
    CACHE_DESCRIPTION_CHARS = 500
    CACHE_NOTES_CHARS = 1000
    CACHE_LEARNING_GOALS = 5
    CACHE_URLS = 10
    CACHE_IMAGES = 10
    CACHE_SNIPPETS = 10
    CACHE_SNIPPET_CHARS = 100
    CACHE_LAST_RESORT_UNITS = 10


class TestConfig(Config):
    TESTING = True
    WTF_CSRF_ENABLED = False
    REMOTE_ENABLED = False
    LOG_LEVEL = 'WARNING'
