"""The document page: listing, open document, editor and auto-save together."""

from __future__ import annotations

from settlernote.autosave import AutoSaveReconciler
from settlernote.child_links import ChildLinkInterceptor, insert_child_link
from settlernote.client import DocumentClient
from settlernote.config import SETTLERNOTE_AUTOSAVE_DEBOUNCE_S
from settlernote.document_tree import build_document_tree
from settlernote.editor import EditorSession
from settlernote.exceptions import DocumentNotFoundError, TransientNetworkError
from settlernote.schemas import ContentNode, Document, DocumentSnapshot, DocumentTreeNode, TocEntry
from settlernote.toc import extract_toc
from settlernote.utils.logging_config import get_logger

logger = get_logger(__name__)


class DocumentWorkspace:
    """State behind one user's document view.

    Each opened document gets a fresh :class:`EditorSession`; the single
    :class:`AutoSaveReconciler` is reloaded so no dirty or saved status leaks
    from one document to the next.
    """

    def __init__(self, client: DocumentClient, *, debounce_s: float = SETTLERNOTE_AUTOSAVE_DEBOUNCE_S) -> None:
        self.client = client
        self.documents: list[Document] = []
        self.tree: list[DocumentTreeNode] = []
        self.current: Document | None = None
        self.editor: EditorSession | None = None
        self.autosave = AutoSaveReconciler(client.save_snapshot, on_saved=self.refresh, debounce_s=debounce_s)
        self.links = ChildLinkInterceptor(self.navigate)
        self._navigation: list[str] = []

    async def refresh(self) -> None:
        """Reload the root listing and the full tree; failures keep the old listing."""
        try:
            self.documents = await self.client.list_documents()
            self.tree = await self.client.document_tree()
        except TransientNetworkError as exc:
            logger.error("Error fetching documents", extra={"error": str(exc)})

    async def open(self, document_id: str) -> Document | None:
        """Load a document into a new editor; None when it no longer exists."""
        self.autosave.close()
        try:
            document = await self.client.get_document(document_id)
        except DocumentNotFoundError:
            logger.info("Document not found, back to listing", extra={"document_id": document_id})
            self.current = None
            self.editor = None
            return None

        self.current = document
        self.autosave.load(
            document.id,
            DocumentSnapshot(title=document.title, icon=document.icon, content=document.content),
        )
        self.editor = EditorSession(document.content, on_change=self._content_changed)
        # The freshly mounted editor reports its content once; auto-save absorbs it.
        self.autosave.set_content(self.editor.doc)
        return document

    def _content_changed(self, doc: ContentNode) -> None:
        self.autosave.set_content(doc)

    def rename(self, title: str) -> bool:
        self._require_open()
        self.current = self.current.model_copy(update={"title": title})
        return self.autosave.set_title(title)

    def set_icon(self, icon: str | None) -> bool:
        self._require_open()
        self.current = self.current.model_copy(update={"icon": icon})
        return self.autosave.set_icon(icon)

    async def create(self, parent_id: str | None = None) -> Document:
        """Create an untitled document, refresh the listing and open it."""
        document = await self.client.create_document(title="Untitled", parent_id=parent_id)
        await self.refresh()
        await self.open(document.id)
        return document

    async def delete_current(self) -> bool:
        self._require_open()
        await self.client.delete_document(self.current.id)
        self.autosave.close()
        self.current = None
        self.editor = None
        await self.refresh()
        return True

    def link_child(self, child_id: str) -> bool:
        """Insert a link to one of the open document's children at the caret."""
        self._require_open()
        ref = next((c for c in self.current.children if c.id == child_id), None)
        if ref is None:
            raise DocumentNotFoundError(f"{child_id!r} is not a child of {self.current.id!r}")
        return insert_child_link(self.editor, ref)

    def navigate(self, document_id: str) -> None:
        """Navigation callback for child links; :meth:`follow_pending` opens the target."""
        self._navigation.append(document_id)

    async def follow_pending(self) -> Document | None:
        """Open the most recent navigation target, if any."""
        if not self._navigation:
            return None
        target = self._navigation[-1]
        self._navigation.clear()
        return await self.open(target)

    def outline(self) -> list[TocEntry]:
        return extract_toc(self.editor.doc if self.editor else None)

    def build_tree(self) -> list[DocumentTreeNode]:
        """Tree from the flat listing, for when the tree endpoint is unavailable."""
        return build_document_tree(self.documents)

    async def close(self) -> None:
        self.autosave.close()
        await self.client.aclose()

    def _require_open(self) -> None:
        if self.current is None or self.editor is None:
            raise RuntimeError("No document is open")
