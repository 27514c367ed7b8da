"""Document, user and media models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from settlernote.schemas.content import ContentNode


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _ApiModel(BaseModel):
    """Base for models exchanged with the web API (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)


class PermissionRole(str, Enum):
    """Access granted to a user on a shared document."""

    VIEWER = "viewer"
    EDITOR = "editor"


class UserSummary(_ApiModel):
    """Public view of a user."""

    id: str
    name: str | None = None
    email: str | None = None
    image: str | None = None


class Permission(_ApiModel):
    """A share of one document with one user."""

    id: str
    role: PermissionRole
    user: UserSummary


class DocumentRef(_ApiModel):
    """Minimal reference to a document, as shown in trees and child links."""

    id: str
    title: str
    icon: str | None = None


class Document(_ApiModel):
    """A stored document with its listing summaries."""

    id: str
    title: str = "Untitled"
    icon: str | None = None
    content: ContentNode | None = None
    parent_id: str | None = None
    owner_id: str
    position: int = 0
    is_archived: bool = False
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    owner: UserSummary | None = None
    children: list[DocumentRef] = Field(default_factory=list)
    permissions: list[Permission] = Field(default_factory=list)

    def ref(self) -> DocumentRef:
        return DocumentRef(id=self.id, title=self.title, icon=self.icon)


class DocumentSnapshot(_ApiModel):
    """Everything one auto-save request writes: the whole title, icon and tree."""

    title: str = "Untitled"
    icon: str | None = None
    content: ContentNode | None = None


class DocumentTreeNode(_ApiModel):
    """A document nested under its parent for sidebar display."""

    id: str
    title: str
    icon: str | None = None
    position: int = 0
    children: list["DocumentTreeNode"] = Field(default_factory=list)


class MediaItem(_ApiModel):
    """An uploaded image served from the media directory."""

    name: str
    url: str
