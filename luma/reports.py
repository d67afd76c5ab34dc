"""Read-only views over the content store.

Progress statistics per hierarchy node, breadcrumb paths, the comment review
queue and the editorial Kanban board.
"""

import math
from datetime import datetime, timezone
from typing import Dict, List, Optional

from luma.cascade import collect_descendants
from luma.models import (
    FINISHED_STATES, HIERARCHY, TOPIC, UNIT, EditorialState, ENTITY_TYPES, parent_kind,
)

PATH_SEPARATOR = ' → '

DISCUSSION_OVERDUE_DAYS = 7
STALE_DAYS = 3


# -- statistics -------------------------------------------------------------

def unit_stats(units) -> Dict:
    """Completion figures for a set of units.

    ``percentage`` is the share of Ready or Published units, rounded half up.
    """
    total = len(units)
    if total == 0:
        return {'total': 0, 'readyOrPublished': 0, 'percentage': 0, 'statusCounts': {}}

    status_counts = {state.value: 0 for state in EditorialState}
    for unit in units:
        status_counts[unit.editorial_state.value] += 1
    finished = sum(status_counts[state.value] for state in FINISHED_STATES)
    return {
        'total': total,
        'readyOrPublished': finished,
        'percentage': math.floor(finished * 100 / total + 0.5),
        'statusCounts': status_counts,
    }


def units_under(store, kind, record_id) -> List:
    """Every unit in the subtree of a node, in collection order."""
    if kind == UNIT:
        unit = store.get_by_id(UNIT, record_id)
        return [unit] if unit else []
    ids = collect_descendants(store, kind, record_id).get(UNIT, set())
    return [u for u in store.all(UNIT) if u.id in ids]


def node_stats(store, kind, record_id) -> Dict:
    return unit_stats(units_under(store, kind, record_id))


# -- paths ------------------------------------------------------------------

def ancestry(store, kind, record_id) -> List:
    """The node and its ancestors, root first. Missing links end the walk."""
    chain = []
    record = store.get_by_id(kind, record_id)
    while record is not None:
        chain.append(record)
        field = ENTITY_TYPES[kind].PARENT_FIELD
        kind = parent_kind(kind)
        if field is None or kind is None:
            break
        parent_id = getattr(record, field)
        record = store.get_by_id(kind, parent_id) if parent_id else None
    chain.reverse()
    return chain


def path_of(store, kind, record_id) -> str:
    return PATH_SEPARATOR.join(r.title for r in ancestry(store, kind, record_id))


def unit_path(store, unit) -> str:
    """Breadcrumb of the unit's topic and its ancestors, without the unit itself."""
    if not unit.topic_id:
        return ''
    return path_of(store, TOPIC, unit.topic_id)


# -- comment review ---------------------------------------------------------

def _age_days(comment, now) -> int:
    if comment.created_at is None:
        return 0
    created = comment.created_at
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return (now - created).days


def comment_priority(comment, now=None) -> str:
    now = now or datetime.now(timezone.utc)
    days = _age_days(comment, now)
    if comment.is_processed:
        return 'low'
    if comment.is_for_discussion and days > DISCUSSION_OVERDUE_DAYS:
        return 'high'
    if days > STALE_DAYS:
        return 'medium'
    return 'low'


def is_overdue(comment, now=None) -> bool:
    now = now or datetime.now(timezone.utc)
    return comment.is_for_discussion and _age_days(comment, now) > DISCUSSION_OVERDUE_DAYS


def _unit_comments(unit):
    for context, attr in (('general', 'comments'),
                          ('explanation', 'explanation_comments'),
                          ('speechtext', 'speech_text_comments')):
        for comment in getattr(unit, attr):
            yield context, comment, None
    for snippet in unit.text_snippets:
        for comment in snippet.comments:
            yield 'snippet', comment, snippet


def collect_comments(store, now=None) -> List[Dict]:
    """Every comment on every unit, flattened with its unit context, newest first."""
    now = now or datetime.now(timezone.utc)
    entries = []
    for unit in store.all(UNIT):
        topic = store.get_by_id(TOPIC, unit.topic_id) if unit.topic_id else None
        path = unit_path(store, unit)
        for context, comment, snippet in _unit_comments(unit):
            entry = comment.to_json()
            entry.update({
                'context': context,
                'unitId': unit.id,
                'unitTitle': unit.title,
                'unitPath': path,
                'priority': comment_priority(comment, now),
                'isOverdue': is_overdue(comment, now),
                'topicOwnerId': topic.owner_id if topic else None,
                '_createdAt': comment.created_at or datetime.min.replace(tzinfo=timezone.utc),
            })
            if snippet is not None:
                entry['snippetId'] = snippet.id
                entry['snippetContent'] = snippet.content
            entries.append(entry)

    entries.sort(key=lambda e: e['_createdAt'], reverse=True)
    for entry in entries:
        del entry['_createdAt']
    return entries


def filter_comments(entries, search=None, status=None, context=None,
                    author_id=None, priority=None, owner_id=None) -> List[Dict]:
    """Apply the review-page filters; ``None`` or ``'all'`` disables a filter."""
    def active(value):
        return value not in (None, '', 'all')

    needle = search.lower() if active(search) else None
    result = []
    for entry in entries:
        if needle:
            haystacks = (entry.get('content'), entry.get('unitTitle'), entry.get('snippetContent'))
            if not any(h and needle in h.lower() for h in haystacks):
                continue
        if active(status):
            if status == 'discussion' and not entry['isForDiscussion']:
                continue
            if status == 'processed' and not entry['isProcessed']:
                continue
            if status in ('unprocessed', 'open') and entry['isProcessed']:
                continue
        if active(context) and entry['context'] != context:
            continue
        if active(author_id) and (entry.get('author') or {}).get('id') != author_id:
            continue
        if active(priority) and entry['priority'] != priority:
            continue
        if active(owner_id) and entry.get('topicOwnerId') != owner_id:
            continue
        result.append(entry)
    return result


def review_summary(entries) -> Dict:
    return {
        'total': len(entries),
        'forDiscussion': sum(1 for e in entries if e['isForDiscussion']),
        'processed': sum(1 for e in entries if e['isProcessed']),
        'overdue': sum(1 for e in entries if e['isOverdue']),
        'highPriority': sum(1 for e in entries if e['priority'] == 'high'),
        'snippetComments': sum(1 for e in entries if e['context'] == 'snippet'),
    }


# -- kanban -----------------------------------------------------------------

def kanban_board(store, scope_kind: Optional[str] = None, scope_id=None, tag_id=None) -> Dict:
    """Units grouped by editorial state; every state has a column, even if empty.

    ``scope_kind``/``scope_id`` narrow the board to one subtree and ``tag_id``
    to units carrying that tag.
    """
    if scope_kind in HIERARCHY and scope_id:
        units = units_under(store, scope_kind, scope_id)
    else:
        units = store.all(UNIT)
    if tag_id:
        units = [u for u in units if any(t.id == tag_id for t in u.tags)]

    board = {state.value: [] for state in EditorialState}
    for unit in units:
        board[unit.editorial_state.value].append(unit)
    return board


def all_tags(store) -> List:
    """Distinct tags across units (by id, last copy wins), sorted by label."""
    tags = {}
    for unit in store.all(UNIT):
        for tag in unit.tags:
            tags[tag.id] = tag
    return sorted(tags.values(), key=lambda t: t.label.lower())
