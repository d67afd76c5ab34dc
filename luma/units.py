"""Learning-unit operations beyond plain field updates.

Comments (three contexts), tags, learning goals, reference URLs and the
editorial workflow. Each helper reads the unit, edits a copy of one list and
writes it back through :meth:`ContentStore.update` with the store lock held,
so every change goes through the same remote-then-local path. Unknown unit
ids return ``None``.
"""

import copy

from luma.models import (
    COMMENT_CONTEXTS, UNIT, Comment, EditorialState, LearningGoal, Tag, UrlRef, _now,
)
from luma.store import locked

COMMENT_FIELDS = {
    'general': 'comments',
    'explanation': 'explanation_comments',
    'speechtext': 'speech_text_comments',
}


def _list_of(store, unit_id, attr):
    store.complete_unit(unit_id)
    unit = store.get_by_id(UNIT, unit_id)
    if unit is None:
        return None
    return copy.deepcopy(getattr(unit, attr))


# -- editorial workflow -----------------------------------------------------

def move_to_state(store, unit_id, state):
    """Any state may follow any other; there is no enforced order."""
    return store.update(UNIT, unit_id, {'editorial_state': EditorialState.parse(state)})


def move_to_topic(store, unit_id, topic_id):
    return store.update(UNIT, unit_id, {'topic_id': topic_id})


# -- comments ---------------------------------------------------------------

@locked
def add_comment(store, unit_id, content, author, context='general'):
    """Add a comment to the unit's list for ``context``, newest first."""
    if context not in COMMENT_CONTEXTS:
        raise ValueError(f'unknown comment context {context!r}')
    attr = COMMENT_FIELDS[context]
    comments = _list_of(store, unit_id, attr)
    if comments is None:
        return None
    comment = Comment(
        content=content,
        author=copy.deepcopy(author),
        context=context,
        created_at=_now(),
    )
    comments.insert(0, comment)
    store.update(UNIT, unit_id, {attr: comments})
    return comment


def _find_comment(unit, comment_id):
    for attr in COMMENT_FIELDS.values():
        for comment in getattr(unit, attr):
            if comment.id == comment_id:
                return attr
    return None


@locked
def update_comment(store, unit_id, comment_id, changes):
    """Edit content or the discussion/processed flags of a unit comment.

    The author snapshot is never touched.
    """
    store.complete_unit(unit_id)
    unit = store.get_by_id(UNIT, unit_id)
    attr = _find_comment(unit, comment_id) if unit else None
    if attr is None:
        return None
    comments = copy.deepcopy(getattr(unit, attr))
    target = next(c for c in comments if c.id == comment_id)
    for key in ('content', 'is_for_discussion', 'is_processed'):
        if key in changes:
            setattr(target, key, changes[key])
    target.updated_at = _now()
    store.update(UNIT, unit_id, {attr: comments})
    return target


@locked
def delete_comment(store, unit_id, comment_id) -> bool:
    store.complete_unit(unit_id)
    unit = store.get_by_id(UNIT, unit_id)
    attr = _find_comment(unit, comment_id) if unit else None
    if attr is None:
        return False
    comments = [c for c in getattr(unit, attr) if c.id != comment_id]
    store.update(UNIT, unit_id, {attr: comments})
    return True


# -- tags -------------------------------------------------------------------

@locked
def add_tag(store, unit_id, label, color=None):
    tags = _list_of(store, unit_id, 'tags')
    if tags is None:
        return None
    tag = Tag(label=label.strip(), color=color or Tag.DEFAULT_COLOR, created_at=_now())
    tags.append(tag)
    store.update(UNIT, unit_id, {'tags': tags})
    return tag


@locked
def update_tag(store, unit_id, tag_id, label=None, color=None):
    """Rename or recolor a tag on this unit only; copies on other units keep theirs."""
    tags = _list_of(store, unit_id, 'tags')
    tag = next((t for t in tags or [] if t.id == tag_id), None)
    if tag is None:
        return None
    if label is not None:
        tag.label = label.strip()
    if color is not None:
        tag.color = color
    store.update(UNIT, unit_id, {'tags': tags})
    return tag


@locked
def remove_tag(store, unit_id, tag_id) -> bool:
    tags = _list_of(store, unit_id, 'tags')
    if tags is None or not any(t.id == tag_id for t in tags):
        return False
    store.update(UNIT, unit_id, {'tags': [t for t in tags if t.id != tag_id]})
    return True


# -- learning goals and urls ------------------------------------------------

@locked
def add_learning_goal(store, unit_id, text):
    goals = _list_of(store, unit_id, 'learning_goals')
    if goals is None:
        return None
    goal = LearningGoal(text=text.strip(), created_at=_now())
    goals.append(goal)
    store.update(UNIT, unit_id, {'learning_goals': goals})
    return goal


@locked
def remove_learning_goal(store, unit_id, goal_id) -> bool:
    goals = _list_of(store, unit_id, 'learning_goals')
    if goals is None or not any(g.id == goal_id for g in goals):
        return False
    store.update(UNIT, unit_id, {'learning_goals': [g for g in goals if g.id != goal_id]})
    return True


@locked
def add_url(store, unit_id, title, url):
    urls = _list_of(store, unit_id, 'urls')
    if urls is None:
        return None
    ref = UrlRef(title=title.strip(), url=url.strip(), created_at=_now())
    urls.append(ref)
    store.update(UNIT, unit_id, {'urls': urls})
    return ref


@locked
def remove_url(store, unit_id, url_id) -> bool:
    urls = _list_of(store, unit_id, 'urls')
    if urls is None or not any(u.id == url_id for u in urls):
        return False
    store.update(UNIT, unit_id, {'urls': [u for u in urls if u.id != url_id]})
    return True
