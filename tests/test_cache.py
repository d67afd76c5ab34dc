"""Tests for the local cache and the tiered unit snapshot."""

import json
from unittest.mock import MagicMock

import pytest

from luma.cache import (
    PLACEHOLDER, TIER_EMERGENCY, TIER_FULL, TIER_LAST_RESORT, CachePolicy, LocalCache,
    UnitSnapshotSerializer, read_records,
)
from luma.errors import QuotaExceededError
from luma.models import (
    Comment, EditorialState, LearningGoal, LearningUnit, MediaFile, Snippet, UrlRef, _now, new_id,
)


def make_unit(**overrides):
    now = _now()
    data = dict(
        id=new_id(),
        title='Sort a column',
        topic_id='topic-1',
        editorial_state=EditorialState.DRAFT,
        description='d' * 800,
        notes='n' * 1500,
        speech_text='Say this out loud.',
        explanation='',
        learning_goals=[LearningGoal(text=f'goal {i}') for i in range(8)],
        urls=[UrlRef(title=f'u{i}', url=f'https://example.com/{i}') for i in range(12)],
        text_snippets=[Snippet(content='s' * 150, order=i + 1) for i in range(12)],
        comments=[Comment(content='hi')],
        images=[MediaFile(name=f'img{i}.png', size=10, path=f'images/u/{i}.png',
                          public_url=f'https://cdn/{i}.png') for i in range(12)],
        video=MediaFile(name='intro.mp4', size=99, path='videos/u/intro.mp4', public_url='https://cdn/v'),
        power_point_file=MediaFile(name='deck.pptx', size=5, path='powerpoints/u/deck.pptx'),
        created_at=now,
        updated_at=now,
    )
    data.update(overrides)
    return LearningUnit(**data)


@pytest.fixture
def serializer(cache):
    return UnitSnapshotSerializer(cache, CachePolicy())


class TestLocalCache:
    def test_round_trip(self, cache):
        cache.set('k', 'value')
        assert cache.get('k') == 'value'
        cache.remove('k')
        assert cache.get('k') is None

    def test_quota_counts_other_keys(self, fake_redis):
        small = LocalCache(fake_redis, prefix='q', capacity_bytes=10)
        small.set('a', '123456')
        with pytest.raises(QuotaExceededError):
            small.set('b', '12345')
        small.set('a', '1234567890')
        assert small.used_bytes() == 10

    def test_quota_ignores_other_namespaces(self, fake_redis):
        fake_redis.set('other:big', 'x' * 100)
        small = LocalCache(fake_redis, prefix='q', capacity_bytes=10)
        small.set('a', '0123456789')


class TestProjection:
    def test_size_contract(self, serializer):
        projected = serializer.project(make_unit())
        assert len(projected['description']) == 500
        assert len(projected['notes']) == 1000
        assert len(projected['learningGoals']) == 5
        assert len(projected['urls']) == 10
        assert len(projected['images']) == 10
        assert len(projected['textSnippets']) == 10
        assert all(len(s['content']) == 100 for s in projected['textSnippets'])
        assert projected['comments'] == []
        assert projected['explanationComments'] == []
        assert projected['speechTextComments'] == []

    def test_long_texts_become_placeholders(self, serializer):
        projected = serializer.project(make_unit())
        assert projected['speechText'] == PLACEHOLDER
        assert projected['explanation'] == ''

    def test_media_stripped_to_references(self, serializer):
        projected = serializer.project(make_unit())
        assert set(projected['images'][0]) == {'id', 'name', 'publicUrl', 'uploadedAt'}
        assert projected['video']['publicUrl'] == 'https://cdn/v'
        assert 'path' not in projected['video']
        assert projected['powerPointFile'] == {'name': 'deck.pptx'}

    def test_snippets_keep_identity_only(self, serializer):
        snippet = serializer.project(make_unit())['textSnippets'][0]
        assert set(snippet) == {'id', 'content', 'order', 'approved', 'createdAt'}


class TestPersist:
    def test_full_tier(self, serializer, cache):
        units = [make_unit(), make_unit(title='Second')]
        assert serializer.persist(units) == TIER_FULL
        stored = json.loads(cache.get('learningUnits'))
        assert [u['title'] for u in stored] == ['Sort a column', 'Second']

    def test_emergency_tier_over_threshold(self, cache):
        serializer = UnitSnapshotSerializer(cache, CachePolicy(emergency_threshold_bytes=100))
        unit = make_unit()
        assert serializer.persist([unit]) == TIER_EMERGENCY
        stored = json.loads(cache.get('learningUnits'))
        assert stored == [{
            'id': unit.id,
            'title': unit.title,
            'editorialState': 'Draft',
            'topicId': 'topic-1',
            'updatedAt': unit.updated_at.isoformat(),
        }]

    def test_emergency_tier_on_quota_failure(self, fake_redis):
        cache = LocalCache(fake_redis, prefix='q', capacity_bytes=2000)
        serializer = UnitSnapshotSerializer(cache, CachePolicy())
        assert serializer.persist([make_unit()]) == TIER_EMERGENCY

    def test_last_resort_tier(self):
        cache = MagicMock()
        cache.set.side_effect = [
            QuotaExceededError('learningUnits', 10, 1),
            QuotaExceededError('learningUnits', 10, 1),
            None,
        ]
        serializer = UnitSnapshotSerializer(cache, CachePolicy())
        units = [make_unit(title=f'unit {i}') for i in range(15)]

        assert serializer.persist(units) == TIER_LAST_RESORT
        cache.remove.assert_called_once_with('learningUnits')
        stored = json.loads(cache.set.call_args[0][1])
        assert len(stored) == 10
        assert stored[0] == {'id': units[0].id, 'title': 'unit 0', 'topicId': 'topic-1'}

    def test_nothing_raised_when_every_tier_fails(self):
        cache = MagicMock()
        cache.set.side_effect = QuotaExceededError('learningUnits', 10, 1)
        serializer = UnitSnapshotSerializer(cache, CachePolicy())
        assert serializer.persist([make_unit()]) is None

    def test_degraded_snapshot_reads_back(self, cache):
        serializer = UnitSnapshotSerializer(cache, CachePolicy(emergency_threshold_bytes=100))
        unit = make_unit(editorial_state=EditorialState.REVIEW)
        serializer.persist([unit])
        restored = read_records(cache, 'learningUnits', LearningUnit)
        assert restored[0].id == unit.id
        assert restored[0].editorial_state is EditorialState.REVIEW
        assert restored[0].text_snippets == []


class TestReadRecords:
    def test_missing_key(self, cache):
        assert read_records(cache, 'nothing', LearningUnit) == []

    def test_corrupt_entry(self, cache):
        cache.set('learningUnits', '{not json')
        assert read_records(cache, 'learningUnits', LearningUnit) == []
