"""Tests for snippet segmentation, voting and snippet operations."""

import threading
import time

import pytest

from luma import snippets
from luma.models import SnippetRating, UserSnapshot


class TestSegmentText:
    def test_splits_on_sentence_marks(self):
        result = snippets.segment_text('A. B! C?  ')
        assert [s.content for s in result] == ['A', 'B', 'C']
        assert [s.order for s in result] == [1, 2, 3]

    def test_runs_of_marks_count_once(self):
        result = snippets.segment_text('Wait... What?! Done')
        assert [s.content for s in result] == ['Wait', 'What', 'Done']

    def test_fresh_snippets(self):
        result = snippets.segment_text('One. Two.')
        assert len({s.id for s in result}) == 2
        for s in result:
            assert s.rating == SnippetRating()
            assert s.comments == []
            assert s.approved is False

    def test_empty_text(self):
        assert snippets.segment_text('') == []
        assert snippets.segment_text(' ..! ') == []


class TestApplyVote:
    def test_upvote(self):
        rating = snippets.apply_vote(SnippetRating(), 'u1', True)
        assert (rating.up, rating.down, rating.user_votes) == (1, 0, {'u1': True})

    def test_repeat_vote_withdraws(self):
        rating = snippets.apply_vote(SnippetRating(), 'u1', True)
        rating = snippets.apply_vote(rating, 'u1', True)
        assert (rating.up, rating.down, rating.user_votes) == (0, 0, {})

    def test_opposite_vote_moves(self):
        rating = snippets.apply_vote(SnippetRating(), 'u1', True)
        rating = snippets.apply_vote(rating, 'u1', False)
        assert (rating.up, rating.down, rating.user_votes) == (0, 1, {'u1': False})

    def test_does_not_mutate_input(self):
        original = SnippetRating(up=1, down=0, user_votes={'u1': True})
        snippets.apply_vote(original, 'u2', True)
        assert original.user_votes == {'u1': True}

    def test_counts_match_votes(self):
        rating = SnippetRating()
        for user, up in [('a', True), ('b', False), ('c', True), ('a', False), ('b', False)]:
            rating = snippets.apply_vote(rating, user, up)
        assert rating.up == sum(1 for v in rating.user_votes.values() if v)
        assert rating.down == sum(1 for v in rating.user_votes.values() if not v)


class TestRateSnippet:
    def test_approval_at_two_upvotes(self, store, tree):
        unit_id = tree['unit_a'].id
        segment = snippets.process_text_to_snippets(store, unit_id, 'Only sentence.')[0]

        rated = snippets.rate_snippet(store, unit_id, segment.id, 'u1', True)
        assert rated.approved is False
        rated = snippets.rate_snippet(store, unit_id, segment.id, 'u2', True)
        assert rated.approved is True
        rated = snippets.rate_snippet(store, unit_id, segment.id, 'u2', True)
        assert rated.approved is False

    def test_unknown_snippet(self, store, tree):
        assert snippets.rate_snippet(store, tree['unit_a'].id, 'nope', 'u1', True) is None


class TestSnippetOperations:
    def test_segmenting_replaces_previous(self, store, tree):
        unit_id = tree['unit_a'].id
        snippets.process_text_to_snippets(store, unit_id, 'Old one. Old two.')
        snippets.process_text_to_snippets(store, unit_id, 'New.')
        assert [s.content for s in store.get_by_id('unit', unit_id).text_snippets] == ['New']

    def test_add_update_delete(self, store, tree):
        unit_id = tree['unit_a'].id
        first = snippets.add_snippet(store, unit_id, 'First')
        second = snippets.add_snippet(store, unit_id, 'Second')
        assert (first.order, second.order) == (1, 2)

        snippets.update_snippet(store, unit_id, first.id, {'content': 'Edited', 'image_id': 'img'})
        stored = store.get_by_id('unit', unit_id).text_snippets[0]
        assert (stored.content, stored.image_id) == ('Edited', 'img')

        assert snippets.delete_snippet(store, unit_id, first.id) is True
        assert snippets.delete_snippet(store, unit_id, first.id) is False
        assert [s.id for s in store.get_by_id('unit', unit_id).text_snippets] == [second.id]

    def test_reorder(self, store, tree):
        unit_id = tree['unit_a'].id
        a, b, c = snippets.process_text_to_snippets(store, unit_id, 'A. B. C.')
        result = snippets.reorder_snippets(store, unit_id, [c.id, a.id])
        assert [s.content for s in result] == ['C', 'A', 'B']
        assert [s.order for s in result] == [1, 2, 3]

    def test_comment_copies_author(self, store, tree):
        unit_id = tree['unit_a'].id
        segment = snippets.process_text_to_snippets(store, unit_id, 'A. B.')[0]
        author = UserSnapshot(id='u1', name='Ada')
        snippets.add_snippet_comment(store, unit_id, segment.id, 'first', author)
        snippets.add_snippet_comment(store, unit_id, segment.id, 'second', author)
        author.name = 'Renamed'

        stored = store.get_by_id('unit', unit_id).text_snippets[0].comments
        assert [c.content for c in stored] == ['second', 'first']
        assert stored[0].author.name == 'Ada'
        assert stored[0].context == 'snippet'

    def test_unknown_unit(self, store):
        assert snippets.process_text_to_snippets(store, 'nope', 'A.') is None
        assert snippets.add_snippet(store, 'nope', 'A') is None


@pytest.fixture
def slow_remote(fake_db, monkeypatch):
    """Every remote call takes a little while, widening any race window."""
    check = fake_db.check

    def slow_check():
        time.sleep(0.02)
        check()

    monkeypatch.setattr(fake_db, 'check', slow_check)
    return fake_db


class TestConcurrentVotes:
    def test_parallel_votes_are_all_counted(self, store, tree, slow_remote):
        unit_id = tree['unit_a'].id
        segment = snippets.process_text_to_snippets(store, unit_id, 'Only sentence.')[0]

        voters = [f'u{i}' for i in range(4)]
        threads = [
            threading.Thread(target=snippets.rate_snippet,
                             args=(store, unit_id, segment.id, voter, True))
            for voter in voters
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stored = store.get_by_id('unit', unit_id).text_snippets[0]
        assert stored.rating.up == 4
        assert set(stored.rating.user_votes) == set(voters)
        assert stored.approved is True
        row = slow_remote.data['learning_units'][unit_id]['text_snippets'][0]
        assert row['rating']['up'] == 4

    def test_parallel_comments_are_all_kept(self, store, tree, slow_remote):
        unit_id = tree['unit_a'].id
        segment = snippets.process_text_to_snippets(store, unit_id, 'Only sentence.')[0]
        author = UserSnapshot(id='u1', name='Ada')

        threads = [
            threading.Thread(target=snippets.add_snippet_comment,
                             args=(store, unit_id, segment.id, f'note {i}', author))
            for i in range(3)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        comments = store.get_by_id('unit', unit_id).text_snippets[0].comments
        assert {c.content for c in comments} == {'note 0', 'note 1', 'note 2'}
