"""Tests for the document workspace."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio

from conftest import OWNER_EMAIL
from settlernote.autosave import SaveState
from settlernote.client import DocumentClient
from settlernote.content_tree import text_content, text_node
from settlernote.exceptions import TransientNetworkError
from settlernote.media import MediaStore
from settlernote.store import DocumentStore
from settlernote.workspace import DocumentWorkspace
from server.main import create_app

BASE_URL = "http://settlernote.test"
DEBOUNCE_S = 0.05

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def workspace(store: DocumentStore, media_store: MediaStore) -> AsyncIterator[DocumentWorkspace]:
    transport = httpx.ASGITransport(app=create_app(store, media_store))
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as http:
        ws = DocumentWorkspace(DocumentClient(BASE_URL, email=OWNER_EMAIL, client=http), debounce_s=DEBOUNCE_S)
        yield ws
        ws.autosave.close()


def _type(ws: DocumentWorkspace, text: str) -> None:
    editor = ws.editor
    tr = editor.transaction().insert_inline(editor.selection.head, [text_node(text)])
    tr.set_selection(editor.selection.head + len(text))
    editor.dispatch(tr)


class TestOpen:
    """Tests for creating and opening documents."""

    @pytest.mark.asyncio
    async def test_create_opens_without_saving(self, workspace: DocumentWorkspace, store: DocumentStore) -> None:
        """A new document opens in a clean editor."""
        created = await workspace.create()
        assert workspace.current.id == created.id
        assert workspace.editor is not None
        assert workspace.autosave.state == SaveState.IDLE
        assert not workspace.autosave.dirty
        assert [d.id for d in workspace.documents] == [created.id]

        await asyncio.sleep(DEBOUNCE_S * 3)
        assert store.get(created.id).updated_at == created.updated_at

    @pytest.mark.asyncio
    async def test_open_missing(self, workspace: DocumentWorkspace) -> None:
        """A missing document leaves nothing open."""
        assert await workspace.open("missing") is None
        assert workspace.current is None
        assert workspace.editor is None


class TestAutoSave:
    """Tests for edits flowing back to the service."""

    @pytest.mark.asyncio
    async def test_typing_is_saved(self, workspace: DocumentWorkspace, store: DocumentStore) -> None:
        """Editor changes reach the service after the debounce window."""
        created = await workspace.create()
        _type(workspace, "Hello")
        assert workspace.autosave.state == SaveState.PENDING_EDIT

        await workspace.autosave.drain()
        assert text_content(store.get(created.id).content) == "Hello"
        assert not workspace.autosave.dirty

    @pytest.mark.asyncio
    async def test_rename_refreshes_listing(self, workspace: DocumentWorkspace, store: DocumentStore) -> None:
        """A saved rename shows up in the refreshed listing."""
        created = await workspace.create()
        assert workspace.rename("Journal") is True
        await workspace.autosave.drain()

        assert store.get(created.id).title == "Journal"
        assert [d.title for d in workspace.documents] == ["Journal"]
        assert workspace.tree[0].title == "Journal"

    @pytest.mark.asyncio
    async def test_switch_drops_pending_edit(self, workspace: DocumentWorkspace, store: DocumentStore) -> None:
        """Opening another document never saves into it the previous one's edits."""
        first = await workspace.create()
        second = await workspace.create()
        await workspace.open(first.id)
        _type(workspace, "draft")

        await workspace.open(second.id)
        await asyncio.sleep(DEBOUNCE_S * 3)

        assert text_content(store.get(second.id).content) == ""
        assert workspace.autosave.document_id == second.id
        assert not workspace.autosave.dirty


class TestChildNavigation:
    """Tests for linking and following child documents."""

    @pytest.mark.asyncio
    async def test_link_and_follow(self, workspace: DocumentWorkspace) -> None:
        """A child link inserted in the parent opens the child when clicked."""
        parent = await workspace.create()
        child = await workspace.create(parent_id=parent.id)
        await workspace.open(parent.id)

        assert workspace.link_child(child.id) is True
        assert workspace.links.handle_click(f"#doc-{child.id}", ["child-document-link"]) is True
        opened = await workspace.follow_pending()
        assert opened.id == child.id
        assert workspace.current.id == child.id

    @pytest.mark.asyncio
    async def test_outline(self, workspace: DocumentWorkspace) -> None:
        """The open document's outline follows its headings."""
        await workspace.create()
        assert workspace.outline() == []


class TestDelete:
    """Tests for deleting the open document."""

    @pytest.mark.asyncio
    async def test_delete_current(self, workspace: DocumentWorkspace) -> None:
        created = await workspace.create()
        assert await workspace.delete_current() is True
        assert workspace.current is None
        assert created.id not in [d.id for d in workspace.documents]

    @pytest.mark.asyncio
    async def test_delete_requires_open_document(self, workspace: DocumentWorkspace) -> None:
        with pytest.raises(RuntimeError):
            await workspace.delete_current()


class TestRefresh:
    """Tests for listing refresh."""

    @pytest.mark.asyncio
    async def test_failure_keeps_listing(self) -> None:
        """A failed refresh is logged and the previous listing stays."""
        client = AsyncMock(spec=DocumentClient)
        client.list_documents.side_effect = TransientNetworkError("service unavailable")
        ws = DocumentWorkspace(client, debounce_s=DEBOUNCE_S)
        previous = ws.documents

        await ws.refresh()

        assert ws.documents is previous
        client.document_tree.assert_not_awaited()
