"""Pydantic request and response models for the web API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from settlernote.content_tree import parse_document
from settlernote.schemas import ContentNode, DocumentTreeNode, MediaItem, PermissionRole, TocEntry, UserSummary


class _RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentCreateRequest(_RequestModel):
    """Request model for ``POST /api/documents``.

    Attributes
    ----------
    title : str | None
        Document title; blank titles become ``"Untitled"``.
    icon : str | None
        Emoji shown before the title.
    parent_id : str | None
        Parent document, or None for a root document.
    content : ContentNode | None
        Initial body; an empty paragraph when omitted.

    """

    title: str | None = Field(default=None, description="Document title")
    icon: str | None = Field(default=None, description="Document icon")
    parent_id: str | None = Field(default=None, description="Parent document id")
    content: ContentNode | None = Field(default=None, description="Initial content tree")

    @field_validator("content")
    @classmethod
    def validate_root(cls, v: ContentNode | None) -> ContentNode | None:
        """Require a ``doc`` root."""
        return parse_document(v) if v is not None else None


class DocumentUpdateRequest(_RequestModel):
    """Request model for ``PATCH /api/documents/{id}``.

    Only the fields present in the body are written.

    Attributes
    ----------
    title : str | None
        New title.
    icon : str | None
        New icon; an explicit null clears it.
    content : ContentNode | None
        Whole new content tree.

    """

    title: str | None = None
    icon: str | None = None
    content: ContentNode | None = None

    @field_validator("content")
    @classmethod
    def validate_root(cls, v: ContentNode | None) -> ContentNode | None:
        """Require a ``doc`` root."""
        return parse_document(v) if v is not None else None


class ShareRequest(_RequestModel):
    """Request model for ``POST /api/documents/{id}/permissions``."""

    email: str = Field(..., description="Email of the user to share with")
    role: PermissionRole = Field(default=PermissionRole.VIEWER, description="Granted role")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Validate that ``email`` is not empty."""
        if not v.strip():
            err = "email cannot be empty"
            raise ValueError(err)
        return v.strip()


class UserUpdateRequest(BaseModel):
    """Request model for ``PUT /api/user/update``.

    ``name`` is checked by the store so a blank or non-string value is
    answered with the endpoint's own 400 message.
    """

    name: Any = None


class DocumentTreeResponse(BaseModel):
    """Response model for ``GET /api/documents/tree``.

    Attributes
    ----------
    tree : list[DocumentTreeNode]
        Root documents with their descendants nested under them.
    outline : str
        The same tree as an indented text outline.
    count : int
        Number of documents in the tree.

    """

    tree: list[DocumentTreeNode]
    outline: str
    count: int


class TocResponse(BaseModel):
    """Response model for ``GET /api/documents/{id}/toc``."""

    entries: list[TocEntry]
    outline: str


class MediaListResponse(BaseModel):
    """Response model for ``GET /api/media``."""

    images: list[MediaItem]


class UploadResponse(BaseModel):
    """Response model for ``POST /api/upload``."""

    url: str


class UserUpdateResponse(BaseModel):
    """Response model for ``PUT /api/user/update``."""

    message: str
    user: UserSummary


class ErrorResponse(BaseModel):
    """Error body returned for every library failure.

    Attributes
    ----------
    error : str
        Error message describing what went wrong.

    """

    error: str = Field(..., description="Error message")
