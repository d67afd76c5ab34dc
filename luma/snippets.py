"""Text snippets: segmentation, voting and per-snippet comments.

A unit's free text can be cut into sentence-sized snippets that reviewers
vote on. Segmenting replaces the unit's whole snippet list, dropping any
previous edits, votes and comments.
"""

import copy
import re
from typing import List, Optional

from luma.models import UNIT, Comment, Snippet, SnippetRating, _now
from luma.store import locked

SENTENCE_BREAK = re.compile(r'[.!?]+')

APPROVAL_THRESHOLD = 2


def segment_text(text) -> List[Snippet]:
    """Split ``text`` on runs of ``.``, ``!`` and ``?`` into ordered snippets."""
    now = _now()
    parts = [part.strip() for part in SENTENCE_BREAK.split(text or '')]
    return [
        Snippet(content=part, order=order, created_at=now)
        for order, part in enumerate((p for p in parts if p), start=1)
    ]


def apply_vote(rating: SnippetRating, user_id, is_upvote: bool) -> SnippetRating:
    """Return the rating after ``user_id`` casts a vote.

    Repeating a vote withdraws it; casting the opposite vote moves it.
    """
    up, down = rating.up, rating.down
    votes = dict(rating.user_votes)
    current = votes.get(user_id)

    if current is not None:
        if current:
            up -= 1
        else:
            down -= 1
        del votes[user_id]

    if current != is_upvote:
        votes[user_id] = is_upvote
        if is_upvote:
            up += 1
        else:
            down += 1

    return SnippetRating(up=up, down=down, user_votes=votes)


def is_approved(rating: SnippetRating) -> bool:
    return rating.up >= APPROVAL_THRESHOLD


def _resequence(snippets):
    for order, snippet in enumerate(snippets, start=1):
        snippet.order = order
    return snippets


def _snippets_of(store, unit_id) -> Optional[List[Snippet]]:
    store.complete_unit(unit_id)
    unit = store.get_by_id(UNIT, unit_id)
    if unit is None:
        return None
    return copy.deepcopy(unit.text_snippets)


def _find(snippets, snippet_id):
    for snippet in snippets:
        if snippet.id == snippet_id:
            return snippet
    return None


# -- store operations -----------------------------------------------------

@locked
def process_text_to_snippets(store, unit_id, text):
    """Replace the unit's snippets with the segments of ``text``."""
    store.complete_unit(unit_id)
    if store.get_by_id(UNIT, unit_id) is None:
        return None
    snippets = segment_text(text)
    store.update(UNIT, unit_id, {'text_snippets': snippets})
    return snippets


@locked
def add_snippet(store, unit_id, content='', order=None):
    snippets = _snippets_of(store, unit_id)
    if snippets is None:
        return None
    snippet = Snippet(content=content, order=order or len(snippets) + 1, created_at=_now())
    snippets.append(snippet)
    store.update(UNIT, unit_id, {'text_snippets': snippets})
    return snippet


@locked
def update_snippet(store, unit_id, snippet_id, changes):
    """Shallow-merge ``content``, ``order`` or ``image_id`` into one snippet."""
    snippets = _snippets_of(store, unit_id)
    snippet = _find(snippets or [], snippet_id)
    if snippet is None:
        return None
    for key in ('content', 'order', 'image_id'):
        if key in changes:
            setattr(snippet, key, changes[key])
    store.update(UNIT, unit_id, {'text_snippets': snippets})
    return snippet


@locked
def delete_snippet(store, unit_id, snippet_id) -> bool:
    snippets = _snippets_of(store, unit_id)
    if snippets is None or _find(snippets, snippet_id) is None:
        return False
    store.update(UNIT, unit_id, {'text_snippets': [s for s in snippets if s.id != snippet_id]})
    return True


@locked
def reorder_snippets(store, unit_id, snippet_ids):
    """Put snippets in the order of ``snippet_ids`` and renumber them 1..N.

    Snippets missing from ``snippet_ids`` keep their relative order after the
    listed ones; unknown ids are ignored.
    """
    snippets = _snippets_of(store, unit_id)
    if snippets is None:
        return None
    by_id = {s.id: s for s in snippets}
    ordered = [by_id.pop(sid) for sid in snippet_ids if sid in by_id]
    ordered.extend(s for s in snippets if s.id in by_id)
    _resequence(ordered)
    store.update(UNIT, unit_id, {'text_snippets': ordered})
    return ordered


@locked
def rate_snippet(store, unit_id, snippet_id, user_id, is_upvote: bool):
    snippets = _snippets_of(store, unit_id)
    snippet = _find(snippets or [], snippet_id)
    if snippet is None:
        return None
    snippet.rating = apply_vote(snippet.rating, user_id, is_upvote)
    snippet.approved = is_approved(snippet.rating)
    store.update(UNIT, unit_id, {'text_snippets': snippets})
    return snippet


@locked
def add_snippet_comment(store, unit_id, snippet_id, content, author):
    """Prepend a comment to one snippet. ``author`` is copied, not referenced."""
    snippets = _snippets_of(store, unit_id)
    snippet = _find(snippets or [], snippet_id)
    if snippet is None:
        return None
    comment = Comment(
        content=content,
        author=copy.deepcopy(author),
        context='snippet',
        created_at=_now(),
    )
    snippet.comments.insert(0, comment)
    store.update(UNIT, unit_id, {'text_snippets': snippets})
    return comment
