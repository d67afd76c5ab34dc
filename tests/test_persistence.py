"""Tests for the try-remote adapter and local-only degradation."""

import logging
from unittest.mock import MagicMock

from luma import snippets, units
from luma.errors import RemoteUnavailable
from luma.models import UserSnapshot
from luma.persistence import RemoteAdapter
from luma.store import ContentStore


class TestRemoteAdapter:
    def test_success(self, remote, fake_db):
        result = remote.insert('subjects', 's1', {'title': 'Biology'})
        assert result.ok
        assert result.value['id'] == 's1'
        assert fake_db.data['subjects']['s1']['title'] == 'Biology'

    def test_failure_is_returned_not_raised(self, remote, fake_db, caplog):
        fake_db.available = False
        with caplog.at_level(logging.WARNING, logger='luma.persistence'):
            result = remote.load('subjects')
        assert not result.ok
        assert isinstance(result.error, RemoteUnavailable)
        assert result.error.operation == 'load'
        assert 'degraded to local-only' in caplog.text

    def test_disabled_skips(self):
        db = MagicMock()
        result = RemoteAdapter(db=db, enabled=False).delete('subjects', 's1')
        assert result.skipped
        db.collection.assert_not_called()

    def test_timeout_passed_through(self):
        db = MagicMock()
        RemoteAdapter(db=db, timeout=3).delete('subjects', 's1')
        db.collection.return_value.document.return_value.delete.assert_called_once_with(timeout=3)


class TestLocalOnlyDegradation:
    def test_every_mutation_succeeds_with_remote_down(self, fake_db, cache):
        fake_db.available = False
        store = ContentStore(remote=RemoteAdapter(db=fake_db), cache=cache)

        subject = store.create('subject', {'title': 'Biology'})
        training = store.create('training', {'title': 'Cells', 'subject_id': subject.id})
        store.update('training', training.id, {'title': 'Cell biology'})
        module = store.create('module', {'title': 'Membranes', 'training_id': training.id})
        topic = store.create('topic', {'title': 'Transport', 'training_module_id': module.id})
        unit = store.create('unit', {'title': 'Osmosis', 'topic_id': topic.id})
        units.add_comment(store, unit.id, 'check', UserSnapshot(id='u1', name='Ada'))
        segment = snippets.process_text_to_snippets(store, unit.id, 'Water moves.')[0]
        snippets.rate_snippet(store, unit.id, segment.id, 'u1', True)

        assert store.get_by_id('training', training.id).title == 'Cell biology'
        assert store.get_by_id('unit', unit.id).comments[0].content == 'check'
        assert fake_db.data == {}

        store.delete('subject', subject.id)
        assert store.all('unit') == []

    def test_failed_insert_is_created_on_next_write(self, fake_db, cache):
        store = ContentStore(remote=RemoteAdapter(db=fake_db), cache=cache)
        fake_db.available = False
        subject = store.create('subject', {'title': 'Biology'})
        fake_db.available = True
        store.update('subject', subject.id, {'description': 'Life'})
        assert fake_db.data['subjects'][subject.id]['description'] == 'Life'