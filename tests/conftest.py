"""Shared fixtures: in-process stand-ins for Firestore and Redis."""

import copy
import fnmatch
from unittest.mock import patch

import pytest

from config import TestConfig
from luma import create_app
from luma.cache import CachePolicy, LocalCache
from luma.ideas import IdeaBacklog
from luma.persistence import RemoteAdapter
from luma.store import ContentStore


class RemoteDown(Exception):
    """Raised by the fake Firestore while it is switched off."""


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeDocument:
    def __init__(self, db, collection, doc_id):
        self._db = db
        self._collection = collection
        self.id = doc_id

    def _rows(self):
        return self._db.data.setdefault(self._collection, {})

    def set(self, data, merge=False, timeout=None):
        self._db.check()
        rows = self._rows()
        if merge and self.id in rows:
            rows[self.id].update(copy.deepcopy(data))
        else:
            rows[self.id] = copy.deepcopy(data)

    def get(self, timeout=None):
        self._db.check()
        return FakeSnapshot(self.id, self._rows().get(self.id))

    def delete(self, timeout=None):
        self._db.check()
        self._rows().pop(self.id, None)


class FakeQuery:
    def __init__(self, db, collection, order_field=None, descending=False):
        self._db = db
        self._collection = collection
        self._order_field = order_field
        self._descending = descending

    def order_by(self, field, direction='ASCENDING'):
        return FakeQuery(self._db, self._collection, field, direction == 'DESCENDING')

    def document(self, doc_id):
        return FakeDocument(self._db, self._collection, doc_id)

    def stream(self, timeout=None):
        self._db.check()
        rows = self._db.data.get(self._collection, {})
        snapshots = [FakeSnapshot(doc_id, data) for doc_id, data in rows.items()]
        if self._order_field:
            snapshots.sort(key=lambda s: str(s._data.get(self._order_field) or ''),
                           reverse=self._descending)
        return iter(snapshots)


class FakeFirestore:
    """Dict-backed subset of the Firestore client API used by the DAO."""

    def __init__(self):
        self.data = {}
        self.available = True
        self.calls = 0

    def check(self):
        self.calls += 1
        if not self.available:
            raise RemoteDown('deadline exceeded')

    def collection(self, name):
        return FakeQuery(self, name)


class FakeRedis:
    """Dict-backed subset of the redis-py client (decode_responses=True)."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value
        return True

    def delete(self, *keys):
        return sum(1 for key in keys if self.data.pop(key, None) is not None)

    def strlen(self, key):
        return len(self.data.get(key, '').encode('utf-8'))

    def scan_iter(self, match='*'):
        return iter([k for k in list(self.data) if fnmatch.fnmatchcase(k, match)])


@pytest.fixture
def fake_db():
    return FakeFirestore()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def remote(fake_db):
    return RemoteAdapter(db=fake_db, timeout=5)


@pytest.fixture
def cache(fake_redis):
    return LocalCache(fake_redis, prefix='test')


@pytest.fixture
def store(remote, cache):
    return ContentStore(remote=remote, cache=cache, policy=CachePolicy())


@pytest.fixture
def ideas(remote, cache):
    return IdeaBacklog(remote=remote, cache=cache)


@pytest.fixture
def tree(store):
    """A subject with one branch down to two units, plus an unrelated subject."""
    subject = store.create('subject', {'title': 'Data Literacy'})
    training = store.create('training', {'title': 'Spreadsheets', 'subject_id': subject.id})
    module = store.create('module', {'title': 'Tables', 'training_id': training.id})
    topic = store.create('topic', {'title': 'Sorting', 'training_module_id': module.id,
                                   'owner_id': 'owner-1'})
    unit_a = store.create('unit', {'title': 'Sort a column', 'topic_id': topic.id})
    unit_b = store.create('unit', {'title': 'Sort by two keys', 'topic_id': topic.id})
    other = store.create('subject', {'title': 'Statistics'})
    return {
        'subject': subject, 'training': training, 'module': module, 'topic': topic,
        'unit_a': unit_a, 'unit_b': unit_b, 'other': other,
    }


@pytest.fixture
def app(store, ideas):
    app = create_app(TestConfig, store=store, ideas=ideas)
    yield app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def editor():
    return {'uid': 'user-1', 'id': 'user-1', 'name': 'Ada', 'role': 'editor'}


@pytest.fixture
def auth_client(client, editor):
    """Test client whose requests are authenticated as ``editor``."""
    with patch('luma.decorators._verify_session', return_value=editor):
        yield client
