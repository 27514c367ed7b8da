"""settlernote: nested rich-text documents with outlines, child links and auto-save."""

from settlernote.autosave import AutoSaveReconciler, SaveState
from settlernote.blocks import move_block_down, move_block_up
from settlernote.child_links import ChildLinkInterceptor, insert_child_link
from settlernote.client import DocumentClient
from settlernote.document_tree import build_document_tree
from settlernote.editor import EditorSession, Selection, Transaction
from settlernote.exceptions import (
    DocumentNotFoundError,
    PermissionDeniedError,
    PositionError,
    SettlernoteError,
    TransientNetworkError,
    UnauthorizedError,
    ValidationError,
)
from settlernote.schemas import ContentNode, Document, DocumentSnapshot, TocEntry
from settlernote.store import DocumentStore
from settlernote.toc import extract_toc
from settlernote.workspace import DocumentWorkspace

__all__ = [
    "AutoSaveReconciler",
    "ChildLinkInterceptor",
    "ContentNode",
    "Document",
    "DocumentClient",
    "DocumentNotFoundError",
    "DocumentSnapshot",
    "DocumentStore",
    "DocumentWorkspace",
    "EditorSession",
    "PermissionDeniedError",
    "PositionError",
    "SaveState",
    "Selection",
    "SettlernoteError",
    "TocEntry",
    "Transaction",
    "TransientNetworkError",
    "UnauthorizedError",
    "ValidationError",
    "build_document_tree",
    "extract_toc",
    "insert_child_link",
    "move_block_down",
    "move_block_up",
]
