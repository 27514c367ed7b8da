"""In-process document tree service.

Holds users, documents and shares in memory behind the same contract the web
API exposes. Persistence is left to whatever backs a deployment; this store is
what the server and the tests run against.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from settlernote.content_tree import empty_document, parse_document
from settlernote.exceptions import DocumentNotFoundError, PermissionDeniedError, ValidationError
from settlernote.schemas import ContentNode, Document, Permission, PermissionRole, UserSummary
from settlernote.utils.logging_config import get_logger

logger = get_logger(__name__)

_UPDATABLE_FIELDS = frozenset({"title", "icon", "content"})


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentStore:
    """Users, documents and permissions for one deployment."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._users: dict[str, UserSummary] = {}
        self._documents: dict[str, Document] = {}
        self._permissions: dict[str, list[Permission]] = {}

    # ---------- users ----------

    def add_user(self, email: str, name: str | None = None, image: str | None = None) -> UserSummary:
        with self._lock:
            existing = self._users.get(email)
            if existing is not None:
                return existing
            user = UserSummary(id=_new_id(), email=email, name=name, image=image)
            self._users[email] = user
            logger.info("User added", extra={"user_id": user.id})
            return user

    def get_user_by_email(self, email: str) -> UserSummary:
        user = self._users.get(email)
        if user is None:
            raise DocumentNotFoundError("User not found")
        return user

    def update_user_name(self, email: str, name: Any) -> UserSummary:
        """Rename a user; a blank or non-string name is rejected."""
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Please enter a name")
        with self._lock:
            user = self.get_user_by_email(email)
            updated = user.model_copy(update={"name": name.strip()})
            self._users[email] = updated
            return updated

    def _user_by_id(self, user_id: str) -> UserSummary | None:
        return next((u for u in self._users.values() if u.id == user_id), None)

    # ---------- documents ----------

    def all(self) -> list[Document]:
        """Every live document, flat, ordered by position."""
        with self._lock:
            docs = [d for d in self._documents.values() if not d.is_archived]
        return sorted(docs, key=lambda d: (d.position, d.created_at))

    def list(self, parent_id: str | None = None) -> list[Document]:
        """Live documents directly under ``parent_id`` (roots for None), with summaries."""
        with self._lock:
            return [self._with_summaries(d) for d in self.all() if d.parent_id == parent_id]

    def get(self, document_id: str) -> Document:
        with self._lock:
            return self._with_summaries(self._live(document_id))

    def create(
        self,
        owner: UserSummary,
        *,
        title: str | None = None,
        icon: str | None = None,
        parent_id: str | None = None,
        content: ContentNode | dict[str, Any] | None = None,
    ) -> Document:
        """Create a document after its owner's last sibling."""
        with self._lock:
            if parent_id:
                self._live(parent_id)
            parent_id = parent_id or None
            sibling_positions = [
                d.position for d in self._documents.values() if d.parent_id == parent_id and d.owner_id == owner.id
            ]
            document = Document(
                id=_new_id(),
                title=title or "Untitled",
                icon=icon,
                content=parse_document(content) if content is not None else empty_document(),
                parent_id=parent_id,
                owner_id=owner.id,
                position=max(sibling_positions, default=0) + 1,
            )
            self._documents[document.id] = document
            logger.info(
                "Document created",
                extra={"document_id": document.id, "parent_id": parent_id, "position": document.position},
            )
            return self._with_summaries(document)

    def update(self, document_id: str, **changes: Any) -> Document:
        """Overwrite the given fields (title, icon, content); others stay as they are."""
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if "content" in changes:
            if changes["content"] is None:
                raise ValidationError("Content must be a document tree")
            changes["content"] = parse_document(changes["content"])

        with self._lock:
            document = self._live(document_id)
            updated = document.model_copy(update={**changes, "updated_at": _now()})
            self._documents[document_id] = updated
            logger.debug("Document updated", extra={"document_id": document_id, "fields": sorted(changes)})
            return self._with_summaries(updated)

    def delete(self, document_id: str, user: UserSummary) -> None:
        """Remove a document and everything below it; owners only."""
        with self._lock:
            document = self._live(document_id)
            if document.owner_id != user.id:
                raise PermissionDeniedError("Only the owner can delete this document")
            doomed = self._descendant_ids(document_id) | {document_id}
            for doc_id in doomed:
                self._documents.pop(doc_id, None)
                self._permissions.pop(doc_id, None)
            logger.info("Document deleted", extra={"document_id": document_id, "removed": len(doomed)})

    def share(self, document_id: str, owner: UserSummary, email: str, role: PermissionRole | str) -> Permission:
        """Grant ``email`` a role on a document; sharing again changes the role."""
        with self._lock:
            document = self._live(document_id)
            if document.owner_id != owner.id:
                raise PermissionDeniedError("Only the owner can share this document")
            target = self.get_user_by_email(email)
            grants = self._permissions.setdefault(document_id, [])
            for i, grant in enumerate(grants):
                if grant.user.id == target.id:
                    grants[i] = grant.model_copy(update={"role": PermissionRole(role).value})
                    return grants[i]
            permission = Permission(id=_new_id(), role=PermissionRole(role), user=target)
            grants.append(permission)
            return permission

    # ---------- helpers ----------

    def _live(self, document_id: str) -> Document:
        document = self._documents.get(document_id)
        if document is None or document.is_archived:
            raise DocumentNotFoundError(f"Document {document_id!r} not found")
        return document

    def _descendant_ids(self, document_id: str) -> set[str]:
        found: set[str] = set()
        frontier = [document_id]
        while frontier:
            current = frontier.pop()
            for doc in self._documents.values():
                if doc.parent_id == current and doc.id not in found:
                    found.add(doc.id)
                    frontier.append(doc.id)
        return found

    def _with_summaries(self, document: Document) -> Document:
        children = [
            d.ref()
            for d in sorted(self._documents.values(), key=lambda d: (d.position, d.created_at))
            if d.parent_id == document.id and not d.is_archived
        ]
        return document.model_copy(
            update={
                "owner": self._user_by_id(document.owner_id),
                "children": children,
                "permissions": list(self._permissions.get(document.id, [])),
            }
        )
