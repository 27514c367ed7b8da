"""Tests for the document store and document tree building."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import OTHER_EMAIL, doc, heading
from settlernote.content_tree import dump_content
from settlernote.document_tree import build_document_tree, count_documents, find_path, format_document_tree
from settlernote.exceptions import DocumentNotFoundError, PermissionDeniedError, ValidationError
from settlernote.schemas import Document, PermissionRole, UserSummary
from settlernote.store import DocumentStore


class TestUsers:
    """Tests for user handling."""

    def test_unknown_user(self, store: DocumentStore) -> None:
        """Unknown emails raise a not-found error."""
        with pytest.raises(DocumentNotFoundError, match="User not found"):
            store.get_user_by_email("nobody@example.com")

    def test_add_user_is_idempotent(self, store: DocumentStore, owner: UserSummary) -> None:
        """Adding an existing email returns the existing user."""
        assert store.add_user(owner.email) == owner

    def test_rename(self, store: DocumentStore, owner: UserSummary) -> None:
        """Names are stored stripped."""
        updated = store.update_user_name(owner.email, "  Ada L.  ")
        assert updated.name == "Ada L."
        assert store.get_user_by_email(owner.email).name == "Ada L."

    @pytest.mark.parametrize("name", ["", "   ", None, 42])
    def test_rename_rejects_blank(self, store: DocumentStore, owner: UserSummary, name: object) -> None:
        """Blank or non-string names are rejected."""
        with pytest.raises(ValidationError, match="Please enter a name"):
            store.update_user_name(owner.email, name)


class TestCreate:
    """Tests for DocumentStore.create."""

    def test_defaults(self, store: DocumentStore, owner: UserSummary) -> None:
        """New documents are untitled with an empty paragraph body."""
        created = store.create(owner)
        assert created.title == "Untitled"
        assert dump_content(created.content) == {"type": "doc", "content": [{"type": "paragraph"}]}
        assert created.parent_id is None
        assert created.owner == owner

    def test_positions_follow_last_sibling(self, store: DocumentStore, owner: UserSummary) -> None:
        """Each new sibling is placed after the owner's last one."""
        first = store.create(owner, title="First")
        second = store.create(owner, title="Second")
        child = store.create(owner, title="Child", parent_id=first.id)
        assert (first.position, second.position, child.position) == (1, 2, 1)

    def test_rejects_missing_parent(self, store: DocumentStore, owner: UserSummary) -> None:
        """A parent must exist."""
        with pytest.raises(DocumentNotFoundError):
            store.create(owner, parent_id="missing")

    def test_children_summaries(self, store: DocumentStore, owner: UserSummary) -> None:
        """Fetching a parent lists its children in position order."""
        parent = store.create(owner, title="Parent")
        a = store.create(owner, title="A", icon="🅰", parent_id=parent.id)
        b = store.create(owner, title="B", parent_id=parent.id)
        fetched = store.get(parent.id)
        assert [(c.id, c.title, c.icon) for c in fetched.children] == [(a.id, "A", "🅰"), (b.id, "B", None)]

    def test_list_roots_and_children(self, store: DocumentStore, owner: UserSummary) -> None:
        """Listing without a parent returns root documents only."""
        root = store.create(owner, title="Root")
        store.create(owner, title="Nested", parent_id=root.id)
        assert [d.title for d in store.list()] == ["Root"]
        assert [d.title for d in store.list(root.id)] == ["Nested"]


class TestUpdate:
    """Tests for DocumentStore.update."""

    def test_partial_update(self, store: DocumentStore, owner: UserSummary) -> None:
        """Only the given fields change."""
        created = store.create(owner, title="Old", icon="📝")
        updated = store.update(created.id, title="New")
        assert (updated.title, updated.icon) == ("New", "📝")
        assert updated.updated_at >= created.updated_at

    def test_content_replaced_whole(self, store: DocumentStore, owner: UserSummary) -> None:
        """Content is stored as given."""
        created = store.create(owner)
        body = doc(heading("Intro"))
        updated = store.update(created.id, content=body)
        assert dump_content(updated.content) == body

    def test_rejects_unknown_fields(self, store: DocumentStore, owner: UserSummary) -> None:
        """Only title, icon and content are writable."""
        created = store.create(owner)
        with pytest.raises(ValidationError):
            store.update(created.id, owner_id="someone-else")

    def test_rejects_null_content(self, store: DocumentStore, owner: UserSummary) -> None:
        """A document always keeps a content tree."""
        created = store.create(owner)
        with pytest.raises(ValidationError, match="Content"):
            store.update(created.id, content=None)
        assert store.get(created.id).content == created.content

    def test_missing_document(self, store: DocumentStore) -> None:
        with pytest.raises(DocumentNotFoundError):
            store.update("missing", title="x")


class TestDelete:
    """Tests for DocumentStore.delete."""

    def test_cascades_to_descendants(self, store: DocumentStore, owner: UserSummary) -> None:
        """Deleting a document removes everything below it."""
        parent = store.create(owner, title="Parent")
        child = store.create(owner, title="Child", parent_id=parent.id)
        grandchild = store.create(owner, title="Grandchild", parent_id=child.id)
        keep = store.create(owner, title="Keep")

        store.delete(parent.id, owner)

        for removed in (parent, child, grandchild):
            with pytest.raises(DocumentNotFoundError):
                store.get(removed.id)
        assert store.get(keep.id).title == "Keep"

    def test_owner_only(self, store: DocumentStore, owner: UserSummary, other_user: UserSummary) -> None:
        """Other users cannot delete."""
        created = store.create(owner)
        with pytest.raises(PermissionDeniedError):
            store.delete(created.id, other_user)
        assert store.get(created.id).id == created.id


class TestShare:
    """Tests for DocumentStore.share."""

    def test_grant_and_change_role(self, store: DocumentStore, owner: UserSummary, other_user: UserSummary) -> None:
        """Sharing twice updates the existing grant."""
        created = store.create(owner)
        store.share(created.id, owner, OTHER_EMAIL, PermissionRole.VIEWER)
        store.share(created.id, owner, OTHER_EMAIL, "editor")
        permissions = store.get(created.id).permissions
        assert len(permissions) == 1
        assert permissions[0].role == "editor"
        assert permissions[0].user.id == other_user.id

    def test_owner_only(self, store: DocumentStore, owner: UserSummary, other_user: UserSummary) -> None:
        created = store.create(owner)
        with pytest.raises(PermissionDeniedError):
            store.share(created.id, other_user, OTHER_EMAIL, "viewer")

    def test_unknown_target(self, store: DocumentStore, owner: UserSummary) -> None:
        created = store.create(owner)
        with pytest.raises(DocumentNotFoundError):
            store.share(created.id, owner, "nobody@example.com", "viewer")


def _doc(id_: str, parent: str | None = None, position: int = 0, title: str = "", icon: str | None = None) -> Document:
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return Document(
        id=id_,
        title=title or id_,
        icon=icon,
        parent_id=parent,
        owner_id="u1",
        position=position,
        created_at=base + timedelta(minutes=position),
    )


class TestDocumentTree:
    """Tests for build_document_tree and helpers."""

    def test_nests_by_parent_and_orders_by_position(self) -> None:
        """Children are nested under parents, siblings by position."""
        tree = build_document_tree(
            [_doc("b", position=2), _doc("a", position=1), _doc("a2", "a", 2), _doc("a1", "a", 1)]
        )
        assert [n.id for n in tree] == ["a", "b"]
        assert [n.id for n in tree[0].children] == ["a1", "a2"]
        assert count_documents(tree) == 4

    def test_orphans_become_roots(self) -> None:
        """A child whose parent is absent is shown at the top level."""
        tree = build_document_tree([_doc("child", parent="gone")])
        assert [n.id for n in tree] == ["child"]

    def test_parent_loop_becomes_root(self) -> None:
        """Documents whose parents form a loop stay visible under one loop member."""
        tree = build_document_tree([_doc("root"), _doc("x", "y"), _doc("y", "x"), _doc("z", "z")])
        assert [n.id for n in tree] == ["root", "x", "z"]
        assert [n.id for n in tree[1].children] == ["y"]
        assert tree[1].children[0].children == []
        assert tree[2].children == []
        assert count_documents(tree) == 4

    def test_find_path(self) -> None:
        """The path runs from the root to the document."""
        tree = build_document_tree([_doc("a"), _doc("b", "a"), _doc("c", "b")])
        assert [n.id for n in find_path(tree, "c")] == ["a", "b", "c"]
        assert find_path(tree, "missing") == []

    def test_format(self) -> None:
        """The outline indents four spaces per level and shows icons."""
        tree = build_document_tree([_doc("a", title="Home", icon="🏠"), _doc("b", "a", title="Notes")])
        assert format_document_tree(tree) == "Documents:\n🏠 Home\n    Notes"
