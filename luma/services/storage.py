import logging
import re
from datetime import datetime, timezone

from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from luma.firebase_init import get_bucket

logger = logging.getLogger(__name__)

UPLOAD_ATTEMPTS = 3


def is_transient_error(exception: BaseException) -> bool:
    error_msg = str(exception).lower()
    return (
        '429' in error_msg
        or '503' in error_msg
        or 'timeout' in error_msg
        or 'timed out' in error_msg
        or getattr(exception, 'code', None) in (429, 503)
    )


def safe_filename(filename):
    """Strip path separators and anything outside a conservative charset."""
    name = filename.replace('\\', '/').rsplit('/', 1)[-1]
    name = re.sub(r'[^A-Za-z0-9._-]+', '_', name).strip('._')
    return name or 'file'


def unit_media_path(kind, unit_id, filename, now=None):
    """Storage path for a unit's media: ``{kind}/{unit_id}/{timestamp}_{filename}``.

    The timestamp is milliseconds since the epoch, so re-uploading a file
    with the same name never overwrites the earlier object.
    """
    now = now or datetime.now(timezone.utc)
    timestamp = int(now.timestamp() * 1000)
    return f'{kind}/{unit_id}/{timestamp}_{safe_filename(filename)}'


@retry(
    stop=stop_after_attempt(UPLOAD_ATTEMPTS),
    wait=wait_exponential(multiplier=1, min=1, max=8),
    retry=retry_if_exception(is_transient_error),
    reraise=True,
)
def upload_file(file_data, destination_path, content_type=None):
    """Upload file bytes to Firebase Storage.

    Args:
        file_data: bytes or file-like object
        destination_path: path in the bucket (e.g. 'images/<unit>/<ts>_a.png')
        content_type: MIME type

    Returns:
        The publicly resolvable URL of the stored object
    """
    bucket = get_bucket()
    blob = bucket.blob(destination_path)
    if isinstance(file_data, bytes):
        blob.upload_from_string(file_data, content_type=content_type)
    else:
        blob.upload_from_file(file_data, content_type=content_type)
    blob.make_public()
    logger.info('uploaded %s', destination_path)
    return blob.public_url


def delete_file(storage_path):
    """Delete a file from Firebase Storage."""
    bucket = get_bucket()
    blob = bucket.blob(storage_path)
    if blob.exists():
        blob.delete()
