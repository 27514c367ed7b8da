"""Links from a document body to its child documents."""

from __future__ import annotations

from typing import Callable, Iterable, Iterator

from settlernote.content_tree import is_textblock, resolve, text_node, walk
from settlernote.editor import EditorSession
from settlernote.exceptions import PositionError
from settlernote.schemas import ContentNode, DocumentRef, Mark, MarkType, NodeType
from settlernote.utils.logging_config import get_logger

logger = get_logger(__name__)

CHILD_LINK_PREFIX = "#doc-"
CHILD_LINK_CLASS = "child-document-link"
DEFAULT_DOCUMENT_ICON = "📄"

NavigateCallback = Callable[[str], None]


def build_child_link(ref: DocumentRef) -> list[ContentNode]:
    """The runs inserted for a child link: the bold link, then a plain space.

    The trailing unmarked space keeps text typed after the link from picking
    up its formatting.
    """
    link = Mark(
        type=MarkType.LINK,
        attrs={"href": f"{CHILD_LINK_PREFIX}{ref.id}", "target": "_self", "class": CHILD_LINK_CLASS},
    )
    label = f"{ref.icon or DEFAULT_DOCUMENT_ICON} {ref.title}"
    return [text_node(label, [link, Mark(type=MarkType.BOLD)]), text_node(" ")]


def insert_child_link(session: EditorSession, ref: DocumentRef) -> bool:
    """Insert a link to ``ref`` at the caret; the caret ends after the space.

    A selected range inside one textblock is replaced by the link.
    """
    nodes = build_child_link(ref)
    selection = session.selection
    pos = selection.from_
    inserted = sum(len(node.text or "") for node in nodes)

    tr = session.transaction()
    try:
        if not selection.empty:
            tr.delete_inline(selection.from_, selection.to)
        in_textblock = is_textblock(resolve(tr.doc, pos).parent)
        tr.insert_inline(pos, nodes)
    except PositionError as exc:
        logger.debug("Cannot insert child link", extra={"pos": pos, "document_id": ref.id, "error": str(exc)})
        return False

    # Between blocks the runs land in a new paragraph, one position further in.
    if not in_textblock:
        pos += 1
    tr.set_selection(pos + inserted)
    return session.dispatch(tr)


def child_link_target(href: str | None, classes: Iterable[str] | str | None = None) -> str | None:
    """Return the document id a child link points at, or None for other links."""
    if not href or not href.startswith(CHILD_LINK_PREFIX):
        return None
    if classes is not None:
        class_list = classes.split() if isinstance(classes, str) else list(classes)
        if CHILD_LINK_CLASS not in class_list:
            return None
    return href[len(CHILD_LINK_PREFIX) :] or None


class ChildLinkInterceptor:
    """Routes clicks on child links to a navigation callback."""

    def __init__(self, navigate: NavigateCallback) -> None:
        self.navigate = navigate

    def handle_click(self, href: str | None, classes: Iterable[str] | str | None = None) -> bool:
        """Handle a click; True means default navigation must be suppressed."""
        document_id = child_link_target(href, classes if classes is not None else ())
        if document_id is None:
            return False
        logger.info("Navigating to child document", extra={"document_id": document_id})
        self.navigate(document_id)
        return True


def iter_child_links(node: ContentNode) -> Iterator[str]:
    """Yield the target id of every child link in a tree, in document order."""
    for current, _ in walk(node):
        if current.type != NodeType.TEXT:
            continue
        for mark in current.marks or []:
            if mark.type == MarkType.LINK:
                target = child_link_target((mark.attrs or {}).get("href"), (mark.attrs or {}).get("class"))
                if target is not None:
                    yield target
