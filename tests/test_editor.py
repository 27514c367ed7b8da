"""Tests for the editing session."""

from __future__ import annotations

import pytest

from conftest import doc, paragraph
from settlernote.content_tree import text_content, text_node
from settlernote.editor import EditorSession, Selection
from settlernote.schemas import ContentNode


class TestSelection:
    """Tests for Selection."""

    def test_caret_is_empty(self) -> None:
        """Equal anchor and head form a caret."""
        assert Selection.caret(3).empty

    def test_range_bounds(self) -> None:
        """from_ and to order the ends."""
        sel = Selection(5, 2)
        assert (sel.from_, sel.to) == (2, 5)
        assert not sel.empty

    def test_clamp(self) -> None:
        """Clamping keeps both ends inside the document."""
        assert Selection(-1, 99).clamp(10) == Selection(0, 10)


class TestEditorSession:
    """Tests for EditorSession."""

    def test_starts_inside_first_textblock(self) -> None:
        """The caret starts at the beginning of the first paragraph."""
        session = EditorSession(doc(paragraph("Hello")))
        assert session.selection == Selection.caret(1)

    def test_defaults_to_empty_document(self) -> None:
        """Without content the session holds one empty paragraph."""
        session = EditorSession()
        assert session.to_json() == doc(paragraph())

    def test_dispatch_applies_and_notifies(self) -> None:
        """A dispatched transaction replaces the tree and reports it."""
        seen: list[ContentNode] = []
        session = EditorSession(doc(paragraph("ab")), on_change=seen.append)
        tr = session.transaction().insert_inline(2, [text_node("X")]).set_selection(3)

        assert session.dispatch(tr) is True
        assert text_content(session.doc) == "aXb"
        assert session.selection == Selection.caret(3)
        assert seen == [session.doc]

    def test_selection_only_transaction(self) -> None:
        """Moving the caret is not a content change."""
        seen: list[ContentNode] = []
        session = EditorSession(doc(paragraph("ab")), on_change=seen.append)
        assert session.dispatch(session.transaction().set_selection(2)) is False
        assert session.selection == Selection.caret(2)
        assert seen == []
        assert not session.can_undo

    def test_stale_transaction_rejected(self) -> None:
        """A transaction built before another dispatch cannot be applied."""
        session = EditorSession(doc(paragraph("ab")))
        stale = session.transaction().insert_inline(1, [text_node("X")])
        session.dispatch(session.transaction().insert_inline(1, [text_node("Y")]))
        with pytest.raises(RuntimeError):
            session.dispatch(stale)

    def test_read_only_session_ignores_edits(self) -> None:
        """Non-editable sessions never change."""
        session = EditorSession(doc(paragraph("ab")), editable=False)
        before = session.doc
        assert session.dispatch(session.transaction().insert_inline(1, [text_node("X")])) is False
        assert session.doc is before

    def test_undo_and_redo(self) -> None:
        """Undo restores the previous tree and caret; redo reapplies."""
        session = EditorSession(doc(paragraph("ab")))
        original = session.doc
        session.dispatch(session.transaction().insert_inline(1, [text_node("X")]).set_selection(2))
        changed = session.doc

        assert session.undo() is True
        assert session.doc is original
        assert session.selection == Selection.caret(1)
        assert session.redo() is True
        assert session.doc is changed
        assert not session.can_redo

    def test_history_depth(self) -> None:
        """Only the most recent transactions can be undone."""
        session = EditorSession(doc(paragraph("ab")), history_depth=2)
        for letter in "XYZ":
            session.dispatch(session.transaction().insert_inline(1, [text_node(letter)]))
        assert session.undo() and session.undo()
        assert not session.can_undo
        assert text_content(session.doc) == "Xab"

    def test_set_content_clears_history(self) -> None:
        """Loading new content starts a fresh history."""
        seen: list[ContentNode] = []
        session = EditorSession(doc(paragraph("ab")), on_change=seen.append)
        session.dispatch(session.transaction().insert_inline(1, [text_node("X")]))
        session.set_content(doc(paragraph("new")))
        assert not session.can_undo
        assert text_content(seen[-1]) == "new"
