"""Nesting a flat document listing into the sidebar tree."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from settlernote.schemas import Document, DocumentTreeNode


def build_document_tree(documents: Iterable[Document]) -> list[DocumentTreeNode]:
    """Nest documents under their parents, siblings ordered by position.

    Documents whose parent is missing from ``documents`` (archived, or not
    visible to the caller) are promoted to roots so nothing disappears. The
    same holds for documents whose parents form a loop: one loop member
    becomes a root and the rest of the loop nests below it.
    """
    docs = list(documents)
    by_id = {doc.id: doc for doc in docs}
    by_parent: dict[str | None, list[Document]] = defaultdict(list)
    for doc in docs:
        parent_id = doc.parent_id if doc.parent_id in by_id else None
        by_parent[parent_id].append(doc)

    def _node(doc: Document, seen: frozenset[str]) -> DocumentTreeNode:
        return DocumentTreeNode(
            id=doc.id,
            title=doc.title or "Untitled",
            icon=doc.icon,
            position=doc.position,
            children=_build(doc.id, seen | {doc.id}),
        )

    def _build(parent_id: str | None, seen: frozenset[str]) -> list[DocumentTreeNode]:
        return [_node(doc, seen) for doc in sorted(by_parent.get(parent_id, []), key=_order) if doc.id not in seen]

    tree = _build(None, frozenset())
    placed = _collect_ids(tree)
    for doc in sorted(docs, key=_order):
        if doc.id in placed:
            continue
        # Unplaced documents hang below a parent loop; the first repeated
        # ancestor lies on it.
        current, visited = doc, set()
        while current.id not in visited:
            visited.add(current.id)
            current = by_id[current.parent_id]
        root = _node(current, frozenset())
        tree.append(root)
        placed |= _collect_ids([root])
    return tree


def _order(doc: Document) -> tuple:
    return (doc.position, doc.created_at)


def _collect_ids(tree: Iterable[DocumentTreeNode]) -> set[str]:
    ids: set[str] = set()
    for node in tree:
        ids.add(node.id)
        ids |= _collect_ids(node.children)
    return ids


def count_documents(tree: Iterable[DocumentTreeNode]) -> int:
    """Count total documents in the tree."""
    total = 0
    for node in tree:
        total += 1
        total += count_documents(node.children)
    return total


def find_path(tree: Iterable[DocumentTreeNode], document_id: str) -> list[DocumentTreeNode]:
    """Nodes from a root down to ``document_id`` (empty when absent)."""
    for node in tree:
        if node.id == document_id:
            return [node]
        below = find_path(node.children, document_id)
        if below:
            return [node, *below]
    return []


def format_document_tree(tree: list[DocumentTreeNode]) -> str:
    """Render the tree as an indented outline."""
    return "Documents:\n" + _create_tree_lines(tree)


def _create_tree_lines(tree: list[DocumentTreeNode], indent: int = 0) -> str:
    lines: list[str] = []
    for node in tree:
        label = f"{node.icon} {node.title}" if node.icon else node.title
        lines.append(" " * (indent * 4) + label)
        if node.children:
            lines.append(_create_tree_lines(node.children, indent + 1))
    return "\n".join(lines)
