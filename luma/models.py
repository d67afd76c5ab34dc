"""
Content document models using Python dataclasses.

Every record type exposes:
  - ``to_dict()`` producing the snake_case row stored in Firestore
  - ``from_dict(data, doc_id)`` rebuilding the record from such a row
  - ``to_json()`` / ``from_json(data)`` for the camelCase shape used by the
    HTTP API and the local cache

The camelCase shape is derived through each class's explicit ``FIELD_MAP``
(row name -> JSON name); ``NESTED`` names the embedded record types so the
mapping is applied recursively.

Comments, tags and author snapshots are embedded by value. A comment keeps
the author as they were when the comment was written.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_datetime(value) -> Optional[datetime]:
    """Convert a value to datetime. Accepts datetime objects, ISO-format
    strings, and Firestore DatetimeWithNanoseconds objects."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        value = value.replace("Z", "+00:00")
        try:
            return datetime.fromisoformat(value)
        except (ValueError, TypeError):
            return None
    return None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def _json_value(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def to_row(value):
    """Turn records (or lists of records) into plain row values."""
    if isinstance(value, list):
        return [to_row(item) for item in value]
    if is_dataclass(value) and not isinstance(value, type):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    return value


def camelize(row: Dict[str, Any], cls) -> Dict[str, Any]:
    """Rename row keys to their JSON names, recursing into embedded records."""
    out = {}
    for key, value in row.items():
        if key not in cls.FIELD_MAP:
            continue
        nested = cls.NESTED.get(key)
        if nested is not None and value is not None:
            if isinstance(value, list):
                value = [camelize(item, nested) for item in value]
            else:
                value = camelize(value, nested)
        out[cls.FIELD_MAP[key]] = _json_value(value)
    return out


def snakify(data: Dict[str, Any], cls) -> Dict[str, Any]:
    """Inverse of :func:`camelize`; unknown keys are dropped."""
    inverse = {json_name: row_name for row_name, json_name in cls.FIELD_MAP.items()}
    out = {}
    for key, value in data.items():
        row_name = inverse.get(key)
        if row_name is None:
            continue
        nested = cls.NESTED.get(row_name)
        if nested is not None and value is not None:
            if isinstance(value, list):
                value = [snakify(item, nested) for item in value]
            else:
                value = snakify(value, nested)
        out[row_name] = value
    return out


class JsonMixin:
    """camelCase serialization on top of ``to_dict``/``from_dict``."""

    FIELD_MAP: ClassVar[Dict[str, str]] = {}
    NESTED: ClassVar[Dict[str, type]] = {}

    def to_json(self) -> Dict[str, Any]:
        row = self.to_dict()
        if "id" in self.FIELD_MAP:
            row = {"id": self.id, **row}
        return camelize(row, type(self))

    @classmethod
    def from_json(cls, data: Dict[str, Any]):
        return cls.from_dict(snakify(data, cls), data.get("id"))


# ===========================================================================
# Enumerations
# ===========================================================================

class EditorialState(str, Enum):
    PLANNING = "Planning"
    DRAFT = "Draft"
    REVIEW = "Review"
    READY = "Ready"
    PUBLISHED = "Published"

    @classmethod
    def parse(cls, value) -> EditorialState:
        if isinstance(value, cls):
            return value
        for state in cls:
            if value in (state.value, state.name):
                return state
        return cls.PLANNING


class IdeaState(str, Enum):
    IDEA = "Idea"
    EXPLORATION = "Exploration"
    EVALUATION = "Evaluation"
    IMPLEMENTATION = "Implementation"
    REJECTED = "Rejected"

    @classmethod
    def parse(cls, value) -> IdeaState:
        if isinstance(value, cls):
            return value
        for state in cls:
            if value in (state.value, state.name):
                return state
        return cls.IDEA


FINISHED_STATES = (EditorialState.READY, EditorialState.PUBLISHED)

COMMENT_CONTEXTS = ("general", "explanation", "speechtext")


# ===========================================================================
# Embedded values
# ===========================================================================

@dataclass
class UserSnapshot(JsonMixin):
    """Point-in-time copy of a user, embedded in comments and ideas."""

    FIELD_MAP: ClassVar[Dict[str, str]] = {
        "id": "id", "name": "name", "avatar": "avatar", "role": "role",
    }

    id: Optional[str] = None
    name: str = ""
    avatar: Optional[str] = None
    role: str = "user"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "avatar": self.avatar, "role": self.role}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> UserSnapshot:
        data = data or {}
        return cls(
            id=data.get("id", doc_id),
            name=data.get("name", ""),
            avatar=data.get("avatar"),
            role=data.get("role", "user"),
        )


@dataclass
class Comment(JsonMixin):
    FIELD_MAP: ClassVar[Dict[str, str]] = {
        "id": "id",
        "content": "content",
        "author": "author",
        "context": "context",
        "is_for_discussion": "isForDiscussion",
        "is_processed": "isProcessed",
        "created_at": "createdAt",
        "updated_at": "updatedAt",
    }
    NESTED: ClassVar[Dict[str, type]] = {"author": UserSnapshot}

    id: str = field(default_factory=new_id)
    content: str = ""
    author: UserSnapshot = field(default_factory=UserSnapshot)
    context: str = "general"
    is_for_discussion: bool = True
    is_processed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "author": self.author.to_dict(),
            "context": self.context,
            "is_for_discussion": self.is_for_discussion,
            "is_processed": self.is_processed,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Comment:
        return cls(
            id=data.get("id") or doc_id or new_id(),
            content=data.get("content", ""),
            author=UserSnapshot.from_dict(data.get("author")),
            context=data.get("context", "general"),
            is_for_discussion=data.get("is_for_discussion", True),
            is_processed=data.get("is_processed", False),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


@dataclass
class SnippetRating(JsonMixin):
    FIELD_MAP: ClassVar[Dict[str, str]] = {"up": "up", "down": "down", "user_votes": "userVotes"}

    up: int = 0
    down: int = 0
    user_votes: Dict[str, bool] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"up": self.up, "down": self.down, "user_votes": dict(self.user_votes)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> SnippetRating:
        data = data or {}
        return cls(
            up=data.get("up", 0),
            down=data.get("down", 0),
            user_votes=dict(data.get("user_votes") or {}),
        )


@dataclass
class Snippet(JsonMixin):
    FIELD_MAP: ClassVar[Dict[str, str]] = {
        "id": "id",
        "content": "content",
        "order": "order",
        "image_id": "imageId",
        "rating": "rating",
        "comments": "comments",
        "approved": "approved",
        "created_at": "createdAt",
    }
    NESTED: ClassVar[Dict[str, type]] = {"rating": SnippetRating, "comments": Comment}

    id: str = field(default_factory=new_id)
    content: str = ""
    order: int = 1
    image_id: Optional[str] = None
    rating: SnippetRating = field(default_factory=SnippetRating)
    comments: List[Comment] = field(default_factory=list)
    approved: bool = False
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "order": self.order,
            "image_id": self.image_id,
            "rating": self.rating.to_dict(),
            "comments": [c.to_dict() for c in self.comments],
            "approved": self.approved,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Snippet:
        return cls(
            id=data.get("id") or doc_id or new_id(),
            content=data.get("content", ""),
            order=data.get("order", 1),
            image_id=data.get("image_id"),
            rating=SnippetRating.from_dict(data.get("rating")),
            comments=[Comment.from_dict(c) for c in data.get("comments") or []],
            approved=data.get("approved", False),
            created_at=_parse_datetime(data.get("created_at")),
        )


@dataclass
class Tag(JsonMixin):
    FIELD_MAP: ClassVar[Dict[str, str]] = {
        "id": "id", "label": "label", "color": "color", "created_at": "createdAt",
    }

    DEFAULT_COLOR: ClassVar[str] = "#3B82F6"

    id: str = field(default_factory=new_id)
    label: str = ""
    color: str = "#3B82F6"
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "color": self.color, "created_at": self.created_at}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Tag:
        return cls(
            id=data.get("id") or doc_id or new_id(),
            label=data.get("label", ""),
            color=data.get("color") or cls.DEFAULT_COLOR,
            created_at=_parse_datetime(data.get("created_at")),
        )


@dataclass
class LearningGoal(JsonMixin):
    FIELD_MAP: ClassVar[Dict[str, str]] = {"id": "id", "text": "text", "created_at": "createdAt"}

    id: str = field(default_factory=new_id)
    text: str = ""
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text, "created_at": self.created_at}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> LearningGoal:
        return cls(
            id=data.get("id") or doc_id or new_id(),
            text=data.get("text", ""),
            created_at=_parse_datetime(data.get("created_at")),
        )


@dataclass
class UrlRef(JsonMixin):
    FIELD_MAP: ClassVar[Dict[str, str]] = {
        "id": "id", "title": "title", "url": "url", "created_at": "createdAt",
    }

    id: str = field(default_factory=new_id)
    title: str = ""
    url: str = ""
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "url": self.url, "created_at": self.created_at}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> UrlRef:
        return cls(
            id=data.get("id") or doc_id or new_id(),
            title=data.get("title", ""),
            url=data.get("url", ""),
            created_at=_parse_datetime(data.get("created_at")),
        )


@dataclass
class MediaFile(JsonMixin):
    """An uploaded image, video or PowerPoint file attached to a unit."""

    FIELD_MAP: ClassVar[Dict[str, str]] = {
        "id": "id",
        "name": "name",
        "size": "size",
        "type": "type",
        "path": "path",
        "public_url": "publicUrl",
        "uploaded_at": "uploadedAt",
    }

    id: str = field(default_factory=new_id)
    name: str = ""
    size: int = 0
    type: Optional[str] = None
    path: Optional[str] = None
    public_url: Optional[str] = None
    uploaded_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "type": self.type,
            "path": self.path,
            "public_url": self.public_url,
            "uploaded_at": self.uploaded_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> MediaFile:
        return cls(
            id=data.get("id") or doc_id or new_id(),
            name=data.get("name", ""),
            size=data.get("size", 0),
            type=data.get("type"),
            path=data.get("path"),
            public_url=data.get("public_url"),
            uploaded_at=_parse_datetime(data.get("uploaded_at")),
        )


# ===========================================================================
# Hierarchy
# ===========================================================================

@dataclass
class Subject(JsonMixin):
    KIND: ClassVar[str] = "subject"
    COLLECTION: ClassVar[str] = "subjects"
    PARENT_FIELD: ClassVar[Optional[str]] = None
    FIELD_MAP: ClassVar[Dict[str, str]] = {
        "id": "id",
        "title": "title",
        "description": "description",
        "created_at": "createdAt",
        "updated_at": "updatedAt",
    }

    id: Optional[str] = None
    title: str = ""
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Subject:
        return cls(
            id=doc_id,
            title=data.get("title", ""),
            description=data.get("description"),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


@dataclass
class Training(JsonMixin):
    KIND: ClassVar[str] = "training"
    COLLECTION: ClassVar[str] = "trainings"
    PARENT_FIELD: ClassVar[Optional[str]] = "subject_id"
    FIELD_MAP: ClassVar[Dict[str, str]] = {
        "id": "id",
        "title": "title",
        "description": "description",
        "subject_id": "subjectId",
        "created_at": "createdAt",
        "updated_at": "updatedAt",
    }

    id: Optional[str] = None
    title: str = ""
    description: Optional[str] = None
    subject_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "subject_id": self.subject_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Training:
        return cls(
            id=doc_id,
            title=data.get("title", ""),
            description=data.get("description"),
            subject_id=data.get("subject_id"),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


@dataclass
class TrainingModule(JsonMixin):
    KIND: ClassVar[str] = "module"
    COLLECTION: ClassVar[str] = "training_modules"
    PARENT_FIELD: ClassVar[Optional[str]] = "training_id"
    FIELD_MAP: ClassVar[Dict[str, str]] = {
        "id": "id",
        "title": "title",
        "description": "description",
        "training_id": "trainingId",
        "created_at": "createdAt",
        "updated_at": "updatedAt",
    }

    id: Optional[str] = None
    title: str = ""
    description: Optional[str] = None
    training_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "training_id": self.training_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> TrainingModule:
        return cls(
            id=doc_id,
            title=data.get("title", ""),
            description=data.get("description"),
            training_id=data.get("training_id"),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


@dataclass
class Topic(JsonMixin):
    KIND: ClassVar[str] = "topic"
    COLLECTION: ClassVar[str] = "topics"
    PARENT_FIELD: ClassVar[Optional[str]] = "training_module_id"
    FIELD_MAP: ClassVar[Dict[str, str]] = {
        "id": "id",
        "title": "title",
        "description": "description",
        "training_module_id": "trainingModuleId",
        "owner_id": "ownerId",
        "created_at": "createdAt",
        "updated_at": "updatedAt",
    }

    id: Optional[str] = None
    title: str = ""
    description: Optional[str] = None
    training_module_id: Optional[str] = None
    owner_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "training_module_id": self.training_module_id,
            "owner_id": self.owner_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Topic:
        return cls(
            id=doc_id,
            title=data.get("title", ""),
            description=data.get("description"),
            training_module_id=data.get("training_module_id"),
            owner_id=data.get("owner_id"),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


@dataclass
class LearningUnit(JsonMixin):
    KIND: ClassVar[str] = "unit"
    COLLECTION: ClassVar[str] = "learning_units"
    PARENT_FIELD: ClassVar[Optional[str]] = "topic_id"
    FIELD_MAP: ClassVar[Dict[str, str]] = {
        "id": "id",
        "title": "title",
        "description": "description",
        "topic_id": "topicId",
        "editorial_state": "editorialState",
        "target_date": "targetDate",
        "learning_goals": "learningGoals",
        "notes": "notes",
        "speech_text": "speechText",
        "explanation": "explanation",
        "urls": "urls",
        "text_snippets": "textSnippets",
        "comments": "comments",
        "explanation_comments": "explanationComments",
        "speech_text_comments": "speechTextComments",
        "tags": "tags",
        "content_types": "contentTypes",
        "custom_content_types": "customContentTypes",
        "images": "images",
        "video": "video",
        "power_point_file": "powerPointFile",
        "created_at": "createdAt",
        "updated_at": "updatedAt",
    }
    NESTED: ClassVar[Dict[str, type]] = {
        "learning_goals": LearningGoal,
        "urls": UrlRef,
        "text_snippets": Snippet,
        "comments": Comment,
        "explanation_comments": Comment,
        "speech_text_comments": Comment,
        "tags": Tag,
        "images": MediaFile,
        "video": MediaFile,
        "power_point_file": MediaFile,
    }

    id: Optional[str] = None
    title: str = ""
    description: Optional[str] = None
    topic_id: Optional[str] = None
    editorial_state: EditorialState = EditorialState.PLANNING
    target_date: Optional[datetime] = None
    learning_goals: List[LearningGoal] = field(default_factory=list)
    notes: str = ""
    speech_text: str = ""
    explanation: str = ""
    urls: List[UrlRef] = field(default_factory=list)
    text_snippets: List[Snippet] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)
    explanation_comments: List[Comment] = field(default_factory=list)
    speech_text_comments: List[Comment] = field(default_factory=list)
    tags: List[Tag] = field(default_factory=list)
    content_types: List[str] = field(default_factory=list)
    custom_content_types: List[str] = field(default_factory=list)
    images: List[MediaFile] = field(default_factory=list)
    video: Optional[MediaFile] = None
    power_point_file: Optional[MediaFile] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "topic_id": self.topic_id,
            "editorial_state": self.editorial_state.value,
            "target_date": self.target_date,
            "learning_goals": [g.to_dict() for g in self.learning_goals],
            "notes": self.notes,
            "speech_text": self.speech_text,
            "explanation": self.explanation,
            "urls": [u.to_dict() for u in self.urls],
            "text_snippets": [s.to_dict() for s in self.text_snippets],
            "comments": [c.to_dict() for c in self.comments],
            "explanation_comments": [c.to_dict() for c in self.explanation_comments],
            "speech_text_comments": [c.to_dict() for c in self.speech_text_comments],
            "tags": [t.to_dict() for t in self.tags],
            "content_types": list(self.content_types),
            "custom_content_types": list(self.custom_content_types),
            "images": [i.to_dict() for i in self.images],
            "video": self.video.to_dict() if self.video else None,
            "power_point_file": self.power_point_file.to_dict() if self.power_point_file else None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> LearningUnit:
        video = data.get("video")
        power_point_file = data.get("power_point_file")
        return cls(
            id=doc_id,
            title=data.get("title", ""),
            description=data.get("description"),
            topic_id=data.get("topic_id"),
            editorial_state=EditorialState.parse(data.get("editorial_state")),
            target_date=_parse_datetime(data.get("target_date")),
            learning_goals=[LearningGoal.from_dict(g) for g in data.get("learning_goals") or []],
            notes=data.get("notes") or "",
            speech_text=data.get("speech_text") or "",
            explanation=data.get("explanation") or "",
            urls=[UrlRef.from_dict(u) for u in data.get("urls") or []],
            text_snippets=[Snippet.from_dict(s) for s in data.get("text_snippets") or []],
            comments=[Comment.from_dict(c) for c in data.get("comments") or []],
            explanation_comments=[Comment.from_dict(c) for c in data.get("explanation_comments") or []],
            speech_text_comments=[Comment.from_dict(c) for c in data.get("speech_text_comments") or []],
            tags=[Tag.from_dict(t) for t in data.get("tags") or []],
            content_types=list(data.get("content_types") or []),
            custom_content_types=list(data.get("custom_content_types") or []),
            images=[MediaFile.from_dict(i) for i in data.get("images") or []],
            video=MediaFile.from_dict(video) if video else None,
            power_point_file=MediaFile.from_dict(power_point_file) if power_point_file else None,
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


# ===========================================================================
# Idea backlog
# ===========================================================================

@dataclass
class Idea(JsonMixin):
    KIND: ClassVar[str] = "idea"
    COLLECTION: ClassVar[str] = "ideas"
    FIELD_MAP: ClassVar[Dict[str, str]] = {
        "id": "id",
        "title": "title",
        "description": "description",
        "state": "state",
        "tags": "tags",
        "urls": "urls",
        "comments": "comments",
        "author": "author",
        "created_at": "createdAt",
        "updated_at": "updatedAt",
    }
    NESTED: ClassVar[Dict[str, type]] = {"urls": UrlRef, "comments": Comment, "author": UserSnapshot}

    id: Optional[str] = None
    title: str = ""
    description: Optional[str] = None
    state: IdeaState = IdeaState.IDEA
    tags: List[str] = field(default_factory=list)
    urls: List[UrlRef] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)
    author: Optional[UserSnapshot] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "state": self.state.value,
            "tags": list(self.tags),
            "urls": [u.to_dict() for u in self.urls],
            "comments": [c.to_dict() for c in self.comments],
            "author": self.author.to_dict() if self.author else None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Idea:
        author = data.get("author")
        return cls(
            id=doc_id,
            title=data.get("title", ""),
            description=data.get("description"),
            state=IdeaState.parse(data.get("state")),
            tags=list(data.get("tags") or []),
            urls=[UrlRef.from_dict(u) for u in data.get("urls") or []],
            comments=[Comment.from_dict(c) for c in data.get("comments") or []],
            author=UserSnapshot.from_dict(author) if author else None,
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

SUBJECT = Subject.KIND
TRAINING = Training.KIND
MODULE = TrainingModule.KIND
TOPIC = Topic.KIND
UNIT = LearningUnit.KIND

# Root first; each kind's parent is the one before it.
HIERARCHY = (SUBJECT, TRAINING, MODULE, TOPIC, UNIT)

ENTITY_TYPES = {
    SUBJECT: Subject,
    TRAINING: Training,
    MODULE: TrainingModule,
    TOPIC: Topic,
    UNIT: LearningUnit,
}


def parent_kind(kind: str) -> Optional[str]:
    index = HIERARCHY.index(kind)
    return HIERARCHY[index - 1] if index > 0 else None
