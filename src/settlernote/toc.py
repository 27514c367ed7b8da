"""Table of contents extraction from a content tree."""

from __future__ import annotations

from typing import Iterable

from settlernote.content_tree import walk
from settlernote.schemas import ContentNode, NodeType, TocEntry


def extract_toc(node: ContentNode | None) -> list[TocEntry]:
    """List the headings of a tree in document order.

    Ids are ``heading-<n>`` where ``n`` counts headings in pre-order, so they
    depend only on the tree's shape and are stable across calls. The entry
    text joins the text runs directly inside the heading, ignoring marks.
    """
    if node is None:
        return []

    entries: list[TocEntry] = []
    for current, _ in walk(node):
        if current.type != NodeType.HEADING:
            continue
        text = "".join(child.text or "" for child in current.children)
        level = (current.attrs or {}).get("level") or 1
        entries.append(TocEntry(id=f"heading-{len(entries) + 1}", text=text, level=level))
    return entries


def format_toc(entries: Iterable[TocEntry]) -> str:
    """Render entries as an indented outline."""
    lines = ["Contents:"]
    for entry in entries:
        lines.append("  " * (entry.level - 1) + "- " + entry.text)
    return "\n".join(lines)
