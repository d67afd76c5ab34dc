"""Unit media: images, one video and one PowerPoint file per unit.

Uploads go to the object store first; the unit only records the stored
object once the upload succeeded, because there is no local copy to fall back
to. Uploads run outside the store lock; attaching the result runs inside it.
Removing media detaches it from the unit even if the object itself cannot be
deleted.
"""

import logging

from luma.errors import RemoteUnavailable
from luma.models import UNIT, MediaFile, _now
from luma.services import storage
from luma.store import locked

logger = logging.getLogger(__name__)

IMAGES = 'images'
VIDEOS = 'videos'
POWERPOINTS = 'powerpoints'


def _upload(folder, unit_id, file_data, filename, content_type) -> MediaFile:
    path = storage.unit_media_path(folder, unit_id, filename)
    try:
        public_url = storage.upload_file(file_data, path, content_type)
    except Exception as exc:
        raise RemoteUnavailable('upload', path, exc) from exc
    return MediaFile(
        name=filename,
        size=len(file_data),
        type=content_type,
        path=path,
        public_url=public_url,
        uploaded_at=_now(),
    )


def _discard(media):
    if media is None or not media.path:
        return
    try:
        storage.delete_file(media.path)
    except Exception as exc:
        logger.warning('could not delete %s from object store: %s', media.path, exc)


def add_image(store, unit_id, file_data: bytes, filename, content_type=None):
    if store.get_by_id(UNIT, unit_id) is None:
        return None
    image = _upload(IMAGES, unit_id, file_data, filename, content_type)
    with store.lock:
        store.complete_unit(unit_id)
        unit = store.get_by_id(UNIT, unit_id)
        if unit is None:
            _discard(image)
            return None
        store.update(UNIT, unit_id, {'images': unit.images + [image]})
    return image


@locked
def remove_image(store, unit_id, image_id) -> bool:
    store.complete_unit(unit_id)
    unit = store.get_by_id(UNIT, unit_id)
    image = next((i for i in unit.images if i.id == image_id), None) if unit else None
    if image is None:
        return False
    _discard(image)
    store.update(UNIT, unit_id, {'images': [i for i in unit.images if i.id != image_id]})
    return True


def _replace(store, unit_id, attr, media):
    with store.lock:
        store.complete_unit(unit_id)
        unit = store.get_by_id(UNIT, unit_id)
        if unit is None:
            _discard(media)
            return None
        _discard(getattr(unit, attr))
        store.update(UNIT, unit_id, {attr: media})
    return media


def set_video(store, unit_id, file_data: bytes, filename, content_type=None):
    """Upload a video, replacing (and deleting) any previous one."""
    if store.get_by_id(UNIT, unit_id) is None:
        return None
    video = _upload(VIDEOS, unit_id, file_data, filename, content_type)
    return _replace(store, unit_id, 'video', video)


@locked
def clear_video(store, unit_id) -> bool:
    store.complete_unit(unit_id)
    unit = store.get_by_id(UNIT, unit_id)
    if unit is None or unit.video is None:
        return False
    _discard(unit.video)
    store.update(UNIT, unit_id, {'video': None})
    return True


def set_powerpoint(store, unit_id, file_data: bytes, filename, content_type=None):
    if store.get_by_id(UNIT, unit_id) is None:
        return None
    deck = _upload(POWERPOINTS, unit_id, file_data, filename, content_type)
    return _replace(store, unit_id, 'power_point_file', deck)


@locked
def clear_powerpoint(store, unit_id) -> bool:
    store.complete_unit(unit_id)
    unit = store.get_by_id(UNIT, unit_id)
    if unit is None or unit.power_point_file is None:
        return False
    _discard(unit.power_point_file)
    store.update(UNIT, unit_id, {'power_point_file': None})
    return True
