"""Editing session: the handle every editing operation works through.

An :class:`EditorSession` owns one open document's tree, caret and undo
history. Operations build a :class:`Transaction` from the session, stack
their steps on it, then hand it back to :meth:`EditorSession.dispatch`,
which swaps the new tree in at once and records a single history entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from settlernote.content_tree import (
    content_size,
    delete_inline,
    dump_content,
    empty_document,
    insert_inline,
    is_textblock,
    parse_document,
    replace_range,
    set_node_markup,
)
from settlernote.schemas import ContentNode, NodeType
from settlernote.utils.logging_config import get_logger

logger = get_logger(__name__)

ChangeCallback = Callable[[ContentNode], None]

DEFAULT_HISTORY_DEPTH = 100


@dataclass(frozen=True)
class Selection:
    """A selection between ``anchor`` and ``head``; equal ends form a caret."""

    anchor: int
    head: int

    @classmethod
    def caret(cls, pos: int) -> "Selection":
        return cls(pos, pos)

    @property
    def empty(self) -> bool:
        return self.anchor == self.head

    @property
    def from_(self) -> int:
        return min(self.anchor, self.head)

    @property
    def to(self) -> int:
        return max(self.anchor, self.head)

    def clamp(self, size: int) -> "Selection":
        return Selection(min(max(self.anchor, 0), size), min(max(self.head, 0), size))


class Transaction:
    """A batch of edits applied to a working copy of the session's tree."""

    def __init__(self, doc: ContentNode, selection: Selection) -> None:
        self.before = doc
        self.doc = doc
        self.selection = selection
        self.steps: list[str] = []

    @property
    def doc_changed(self) -> bool:
        return bool(self.steps)

    def replace(self, start: int, end: int, nodes: list[ContentNode]) -> "Transaction":
        self.doc = replace_range(self.doc, start, end, nodes)
        self.steps.append("replace")
        return self

    def delete(self, start: int, end: int) -> "Transaction":
        return self.replace(start, end, [])

    def insert(self, pos: int, nodes: list[ContentNode]) -> "Transaction":
        return self.replace(pos, pos, nodes)

    def delete_inline(self, start: int, end: int) -> "Transaction":
        self.doc = delete_inline(self.doc, start, end)
        self.steps.append("delete_inline")
        return self

    def insert_inline(self, pos: int, nodes: list[ContentNode]) -> "Transaction":
        self.doc = insert_inline(self.doc, pos, nodes)
        self.steps.append("insert_inline")
        return self

    def set_node_markup(self, pos: int, node_type: NodeType, attrs: dict[str, Any] | None = None) -> "Transaction":
        self.doc = set_node_markup(self.doc, pos, node_type, attrs)
        self.steps.append("set_node_markup")
        return self

    def set_selection(self, anchor: int, head: int | None = None) -> "Transaction":
        self.selection = Selection(anchor, anchor if head is None else head).clamp(content_size(self.doc))
        return self


class EditorSession:
    """One open document's editing state."""

    def __init__(
        self,
        doc: ContentNode | dict[str, Any] | None = None,
        *,
        on_change: ChangeCallback | None = None,
        editable: bool = True,
        history_depth: int = DEFAULT_HISTORY_DEPTH,
    ) -> None:
        self.doc = parse_document(doc) if doc is not None else empty_document()
        self.selection = Selection.caret(self._start_position(self.doc))
        self.editable = editable
        self.on_change = on_change
        self._history_depth = history_depth
        self._undo: list[tuple[ContentNode, Selection]] = []
        self._redo: list[tuple[ContentNode, Selection]] = []

    @staticmethod
    def _start_position(doc: ContentNode) -> int:
        first = doc.children[0] if doc.children else None
        return 1 if first is not None and is_textblock(first) else 0

    def transaction(self) -> Transaction:
        return Transaction(self.doc, self.selection)

    def set_selection(self, anchor: int, head: int | None = None) -> None:
        self.selection = Selection(anchor, anchor if head is None else head).clamp(content_size(self.doc))

    def dispatch(self, tr: Transaction) -> bool:
        """Apply a transaction atomically; returns whether the tree changed."""
        if tr.before is not self.doc:
            raise RuntimeError("Transaction was built from a stale document")
        if not self.editable:
            logger.debug("Ignoring transaction on read-only session", extra={"steps": tr.steps})
            return False

        previous = (self.doc, self.selection)
        self.selection = tr.selection
        if not tr.doc_changed:
            return False

        self._undo.append(previous)
        del self._undo[: -self._history_depth]
        self._redo.clear()
        self.doc = tr.doc
        self._emit()
        return True

    def set_content(self, doc: ContentNode | dict[str, Any], *, emit: bool = True) -> None:
        """Replace the whole tree, as when a document is (re)loaded."""
        self.doc = parse_document(doc)
        self.selection = self.selection.clamp(content_size(self.doc))
        self._undo.clear()
        self._redo.clear()
        if emit:
            self._emit()

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo(self) -> bool:
        if not self._undo or not self.editable:
            return False
        self._redo.append((self.doc, self.selection))
        self.doc, self.selection = self._undo.pop()
        self._emit()
        return True

    def redo(self) -> bool:
        if not self._redo or not self.editable:
            return False
        self._undo.append((self.doc, self.selection))
        self.doc, self.selection = self._redo.pop()
        self._emit()
        return True

    def to_json(self) -> dict[str, Any]:
        return dump_content(self.doc)

    def _emit(self) -> None:
        if self.on_change is not None:
            self.on_change(self.doc)
