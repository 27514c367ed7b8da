"""Shared schemas for settlernote."""

from settlernote.schemas.content import NODE_SPECS, ContentNode, Mark, MarkType, NodeSpec, NodeType
from settlernote.schemas.documents import (
    Document,
    DocumentRef,
    DocumentSnapshot,
    DocumentTreeNode,
    MediaItem,
    Permission,
    PermissionRole,
    UserSummary,
)
from settlernote.schemas.toc import TocEntry

__all__ = [
    "NODE_SPECS",
    "ContentNode",
    "Document",
    "DocumentRef",
    "DocumentSnapshot",
    "DocumentTreeNode",
    "Mark",
    "MarkType",
    "MediaItem",
    "NodeSpec",
    "NodeType",
    "Permission",
    "PermissionRole",
    "TocEntry",
    "UserSummary",
]
