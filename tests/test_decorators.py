"""Tests for the current-user wrapper."""

import pytest

from luma.decorators import CurrentUser


class TestCurrentUser:
    def test_anonymous(self):
        user = CurrentUser()
        assert user.is_authenticated is False
        assert user.id == ''
        assert user.role == 'user'

    def test_snapshot(self, editor):
        snapshot = CurrentUser(editor).snapshot()
        assert (snapshot.id, snapshot.name, snapshot.role) == ('user-1', 'Ada', 'editor')

    def test_unknown_attributes_are_errors(self, editor):
        with pytest.raises(AttributeError):
            CurrentUser(editor).email
