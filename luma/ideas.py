"""Idea backlog.

Ideas live outside the content hierarchy in their own collection. Writes
follow the same rule as content: build locally, try the remote store, keep
the local value whatever happens, then rewrite the cache entry. Ideas are
small, so the cache copy is written whole without degradation tiers.
"""

import copy
import logging
import threading
from typing import Dict, List, Optional

from luma.cache import read_records, write_records
from luma.models import Comment, Idea, IdeaState, UrlRef, _now, new_id, to_row
from luma.persistence import RemoteAdapter

logger = logging.getLogger(__name__)

CACHE_KEY = 'ideas'


class IdeaBacklog:
    def __init__(self, remote: RemoteAdapter = None, cache=None):
        self.remote = remote or RemoteAdapter(enabled=False)
        self.cache = cache
        self._ideas: List[Idea] = []
        self.lock = threading.RLock()

    def load(self) -> str:
        result = self.remote.load(Idea.COLLECTION)
        with self.lock:
            if result.ok:
                self._ideas = [Idea.from_dict(row, row['id']) for row in result.value]
                self._persist()
                return 'remote'
            self._ideas = read_records(self.cache, CACHE_KEY, Idea) if self.cache is not None else []
        logger.warning('ideas loaded from local cache (%d)', len(self._ideas))
        return 'cache'

    def _persist(self):
        if self.cache is not None:
            write_records(self.cache, CACHE_KEY, self._ideas)

    # -- lookups ------------------------------------------------------------

    def all(self) -> List[Idea]:
        return list(self._ideas)

    def get(self, idea_id) -> Optional[Idea]:
        return next((i for i in self._ideas if i.id == idea_id), None)

    def by_state(self) -> Dict[str, List[Idea]]:
        board = {state.value: [] for state in IdeaState}
        for idea in self._ideas:
            board[idea.state.value].append(idea)
        return board

    # -- mutations ----------------------------------------------------------

    def create(self, title, author, description=None, tags=None, urls=None) -> Idea:
        """New ideas always start in the ``Idea`` state."""
        now = _now()
        idea = Idea(
            id=new_id(),
            title=title,
            description=description,
            state=IdeaState.IDEA,
            tags=list(tags or []),
            urls=[UrlRef(title=u.get('title', ''), url=u.get('url', ''), created_at=now)
                  for u in urls or []],
            author=copy.deepcopy(author),
            created_at=now,
            updated_at=now,
        )
        with self.lock:
            self.remote.insert(Idea.COLLECTION, idea.id, idea.to_dict())
            self._ideas.insert(0, idea)
            self._persist()
        return idea

    def update(self, idea_id, changes: dict) -> Optional[Idea]:
        with self.lock:
            current = self.get(idea_id)
            if current is None:
                return None
            row_changes = {
                k: to_row(v) for k, v in changes.items()
                if k in ('title', 'description', 'state', 'tags', 'urls', 'comments')
            }
            row_changes['updated_at'] = _now()
            idea = Idea.from_dict({**current.to_dict(), **row_changes}, idea_id)

            self.remote.update(Idea.COLLECTION, idea_id, row_changes)
            self._ideas = [idea if i.id == idea_id else i for i in self._ideas]
            self._persist()
        return idea

    def move(self, idea_id, state) -> Optional[Idea]:
        return self.update(idea_id, {'state': IdeaState.parse(state)})

    def delete(self, idea_id) -> bool:
        with self.lock:
            if self.get(idea_id) is None:
                return False
            self.remote.delete(Idea.COLLECTION, idea_id)
            self._ideas = [i for i in self._ideas if i.id != idea_id]
            self._persist()
        return True

    # List helpers hold the lock from read to rewrite; ``update`` re-enters it.

    def add_comment(self, idea_id, content, author) -> Optional[Comment]:
        with self.lock:
            idea = self.get(idea_id)
            if idea is None:
                return None
            comment = Comment(content=content, author=copy.deepcopy(author),
                              context='idea', created_at=_now())
            self.update(idea_id, {'comments': [comment] + idea.comments})
        return comment

    def delete_comment(self, idea_id, comment_id) -> bool:
        with self.lock:
            idea = self.get(idea_id)
            if idea is None or not any(c.id == comment_id for c in idea.comments):
                return False
            self.update(idea_id, {'comments': [c for c in idea.comments if c.id != comment_id]})
        return True

    def add_url(self, idea_id, title, url) -> Optional[UrlRef]:
        with self.lock:
            idea = self.get(idea_id)
            if idea is None:
                return None
            ref = UrlRef(title=title.strip(), url=url.strip(), created_at=_now())
            self.update(idea_id, {'urls': idea.urls + [ref]})
        return ref

    def delete_url(self, idea_id, url_id) -> bool:
        with self.lock:
            idea = self.get(idea_id)
            if idea is None or not any(u.id == url_id for u in idea.urls):
                return False
            self.update(idea_id, {'urls': [u for u in idea.urls if u.id != url_id]})
        return True
