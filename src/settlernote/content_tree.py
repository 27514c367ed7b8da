"""Sizes, traversal and position arithmetic over content trees.

Positions follow the editor's flat addressing: every character of a text run
takes one position, every atom (image, rule, hard break) takes one, and every
other node adds one position for its opening and one for its closing boundary
around its content. Position 0 is the start of the root's content.

Edits never mutate a tree in place. They return a new root that reuses every
untouched subtree and holds fresh copies of what changed, so a node can never
end up under two parents.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from settlernote.exceptions import PositionError
from settlernote.schemas import ContentNode, Mark, NodeType

# Nodes whose content may be a paragraph created around loose inline nodes.
PARAGRAPH_CONTAINERS = frozenset({NodeType.DOC, NodeType.BLOCKQUOTE, NodeType.LIST_ITEM, NodeType.TASK_ITEM})


def parse_content(data: dict[str, Any] | ContentNode) -> ContentNode:
    """Validate a JSON-shaped mapping into a content node."""
    if isinstance(data, ContentNode):
        return data
    return ContentNode.model_validate(data)


def parse_document(data: dict[str, Any] | ContentNode) -> ContentNode:
    """Validate a document root; the root must be a ``doc`` node."""
    node = parse_content(data)
    if node.type != NodeType.DOC:
        raise ValueError(f"document root must be of type 'doc', got {node.type!r}")
    return node


def dump_content(node: ContentNode) -> dict[str, Any]:
    """Serialize a tree to its canonical JSON shape (absent fields omitted)."""
    return node.model_dump(mode="json", exclude_none=True)


def empty_document() -> ContentNode:
    """A new document body: a single empty paragraph."""
    return ContentNode(type=NodeType.DOC, content=[ContentNode(type=NodeType.PARAGRAPH)])


def text_node(text: str, marks: list[Mark] | None = None) -> ContentNode:
    return ContentNode(type=NodeType.TEXT, text=text, marks=marks or None)


def is_inline(node: ContentNode) -> bool:
    return node.traits().inline


def is_textblock(node: ContentNode) -> bool:
    return node.traits().textblock


def node_size(node: ContentNode) -> int:
    """Number of positions a node spans, boundaries included."""
    if node.type == NodeType.TEXT:
        return len(node.text or "")
    if node.traits().leaf:
        return 1
    return 2 + content_size(node)


def content_size(node: ContentNode) -> int:
    return sum(node_size(child) for child in node.children)


def walk(node: ContentNode, depth: int = 0) -> Iterator[tuple[ContentNode, int]]:
    """Yield ``(node, depth)`` pairs in pre-order, children in document order."""
    yield node, depth
    for child in node.children:
        yield from walk(child, depth + 1)


def text_content(node: ContentNode) -> str:
    """Concatenate every text run below ``node``."""
    return "".join(n.text or "" for n, _ in walk(node) if n.type == NodeType.TEXT)


@dataclass(frozen=True)
class _PathEntry:
    node: ContentNode
    index: int
    offset: int


@dataclass(frozen=True)
class ResolvedPos:
    """A document offset resolved to its chain of ancestors.

    ``path[d]`` holds the ancestor at depth ``d``, the index of the child the
    position points into (or just before), and the absolute position where
    that child starts. Depth 0 is the root.
    """

    pos: int
    path: tuple[_PathEntry, ...]
    parent_offset: int

    @property
    def depth(self) -> int:
        return len(self.path) - 1

    def _depth(self, depth: int | None) -> int:
        if depth is None:
            return self.depth
        if depth < 0:
            return self.depth + depth
        return depth

    def node(self, depth: int | None = None) -> ContentNode:
        return self.path[self._depth(depth)].node

    def index(self, depth: int | None = None) -> int:
        return self.path[self._depth(depth)].index

    def start(self, depth: int | None = None) -> int:
        """Position where the content of the ancestor at ``depth`` starts."""
        d = self._depth(depth)
        return 0 if d == 0 else self.path[d - 1].offset + 1

    def end(self, depth: int | None = None) -> int:
        d = self._depth(depth)
        return self.start(d) + content_size(self.node(d))

    def before(self, depth: int | None = None) -> int:
        """Position directly before the ancestor at ``depth``."""
        d = self._depth(depth)
        if d == 0:
            raise PositionError("There is no position before the top-level node")
        return self.path[d - 1].offset

    def after(self, depth: int | None = None) -> int:
        d = self._depth(depth)
        return self.before(d) + node_size(self.node(d))

    @property
    def parent(self) -> ContentNode:
        return self.node(self.depth)

    @property
    def text_offset(self) -> int:
        """How far into a text run the position falls (0 between nodes)."""
        return self.pos - self.path[-1].offset

    @property
    def node_after(self) -> ContentNode | None:
        parent = self.parent
        index = self.index()
        if index >= len(parent.children):
            return None
        child = parent.children[index]
        offset = self.text_offset
        if offset:
            return text_node(child.text[offset:], child.marks)
        return child

    @property
    def node_before(self) -> ContentNode | None:
        parent = self.parent
        index = self.index()
        offset = self.text_offset
        if offset:
            child = parent.children[index]
            return text_node(child.text[:offset], child.marks)
        if index == 0:
            return None
        return parent.children[index - 1]


def _find_index(node: ContentNode, pos: int) -> tuple[int, int]:
    """Return ``(child index, child start offset)`` for an offset in ``node``'s content."""
    if pos == 0:
        return 0, 0
    cur = 0
    for i, child in enumerate(node.children):
        end = cur + node_size(child)
        if end >= pos:
            if end == pos:
                return i + 1, end
            return i, cur
        cur = end
    raise PositionError(f"Position {pos} outside of {node.type} content")


def resolve(doc: ContentNode, pos: int) -> ResolvedPos:
    """Resolve a flat offset into the ancestor chain that contains it."""
    if not 0 <= pos <= content_size(doc):
        raise PositionError(f"Position {pos} out of range (0..{content_size(doc)})")

    path: list[_PathEntry] = []
    start = 0
    parent_offset = pos
    node = doc
    while True:
        index, offset = _find_index(node, parent_offset)
        remainder = parent_offset - offset
        path.append(_PathEntry(node, index, start + offset))
        if not remainder:
            break
        node = node.children[index]
        if node.type == NodeType.TEXT:
            break
        parent_offset = remainder - 1
        start += offset + 1
    return ResolvedPos(pos=pos, path=tuple(path), parent_offset=parent_offset)


def _rebuild(rpos: ResolvedPos, depth: int, replacement: ContentNode) -> ContentNode:
    """Swap ``replacement`` in for the ancestor at ``depth`` and copy the chain above it."""
    node = replacement
    for d in range(depth - 1, -1, -1):
        ancestor = rpos.node(d)
        children = list(ancestor.children)
        children[rpos.index(d)] = node
        node = ancestor.model_copy(update={"content": children})
    return node


def _sibling_range(doc: ContentNode, start: int, end: int) -> tuple[ResolvedPos, int, int]:
    if start > end:
        raise PositionError(f"Invalid range {start}..{end}")
    rstart = resolve(doc, start)
    rend = resolve(doc, end)
    if rstart.depth != rend.depth or rstart.start() != rend.start():
        raise PositionError(f"Range {start}..{end} does not share a parent")
    if rstart.text_offset or rend.text_offset:
        raise PositionError(f"Range {start}..{end} cuts through a text run")
    return rstart, rstart.index(), rend.index()


def slice_content(doc: ContentNode, start: int, end: int) -> list[ContentNode]:
    """Fresh copies of the sibling nodes covering ``[start, end)``."""
    rstart, first, last = _sibling_range(doc, start, end)
    return [child.model_copy(deep=True) for child in rstart.parent.children[first:last]]


def replace_range(doc: ContentNode, start: int, end: int, nodes: list[ContentNode]) -> ContentNode:
    """Return a new tree where the siblings in ``[start, end)`` become ``nodes``."""
    rstart, first, last = _sibling_range(doc, start, end)
    parent = rstart.parent
    children = list(parent.children)
    children[first:last] = nodes
    new_parent = parent.model_copy(update={"content": children or None})
    return _rebuild(rstart, rstart.depth, new_parent)


def _same_marks(a: ContentNode, b: ContentNode) -> bool:
    return (a.marks or []) == (b.marks or [])


def join_text_runs(children: list[ContentNode]) -> list[ContentNode]:
    """Merge adjacent text runs that carry identical marks."""
    joined: list[ContentNode] = []
    for child in children:
        if joined and child.type == NodeType.TEXT and joined[-1].type == NodeType.TEXT and _same_marks(joined[-1], child):
            joined[-1] = text_node(joined[-1].text + child.text, joined[-1].marks)
        else:
            joined.append(child)
    return joined


def insert_inline(doc: ContentNode, pos: int, nodes: list[ContentNode]) -> ContentNode:
    """Insert inline nodes at ``pos`` and return the new tree.

    Inside a textblock the nodes land exactly at ``pos``, splitting a text run
    if the position falls within one. Between blocks they are wrapped in a
    new paragraph, which only containers that hold paragraphs accept; list
    nodes take list items only, so a position directly inside one raises
    :class:`PositionError`.
    """
    rpos = resolve(doc, pos)
    parent = rpos.parent

    if not is_textblock(parent):
        if parent.type not in PARAGRAPH_CONTAINERS:
            raise PositionError(f"Cannot place inline content directly inside {parent.type}")
        paragraph = ContentNode(type=NodeType.PARAGRAPH, content=[n.model_copy(deep=True) for n in nodes])
        return replace_range(doc, pos, pos, [paragraph])

    children = list(parent.children)
    index = rpos.index()
    offset = rpos.text_offset
    fresh = [n.model_copy(deep=True) for n in nodes]
    if offset:
        run = children[index]
        children[index : index + 1] = [
            text_node(run.text[:offset], run.marks),
            *fresh,
            text_node(run.text[offset:], run.marks),
        ]
    else:
        children[index:index] = fresh

    new_parent = parent.model_copy(update={"content": join_text_runs(children) or None})
    return _rebuild(rpos, rpos.depth, new_parent)


def delete_inline(doc: ContentNode, start: int, end: int) -> ContentNode:
    """Remove the inline content between ``start`` and ``end`` of one textblock.

    Text runs cut by either end keep their outer part; atoms inside the range
    are dropped. Both ends must lie in the same textblock.
    """
    if start > end:
        raise PositionError(f"Invalid range {start}..{end}")
    rstart = resolve(doc, start)
    rend = resolve(doc, end)
    parent = rstart.parent
    if not is_textblock(parent) or rstart.depth != rend.depth or rstart.start() != rend.start():
        raise PositionError(f"Range {start}..{end} is not inside one textblock")

    low = start - rstart.start()
    high = end - rstart.start()
    kept: list[ContentNode] = []
    offset = 0
    for child in parent.children:
        child_start, offset = offset, offset + node_size(child)
        if offset <= low or child_start >= high:
            kept.append(child)
        elif child.type == NodeType.TEXT:
            for part in (child.text[: max(low - child_start, 0)], child.text[high - child_start :]):
                if part:
                    kept.append(text_node(part, child.marks))

    new_parent = parent.model_copy(update={"content": join_text_runs(kept) or None})
    return _rebuild(rstart, rstart.depth, new_parent)


def set_node_markup(
    doc: ContentNode, pos: int, node_type: NodeType, attrs: dict[str, Any] | None = None
) -> ContentNode:
    """Change the type (and attrs) of the node starting at ``pos``, keeping its content."""
    rpos = resolve(doc, pos)
    target = rpos.node_after
    if target is None or rpos.text_offset:
        raise PositionError(f"No node starts at position {pos}")
    changed = ContentNode(type=node_type, attrs=attrs or None, content=target.content)
    children = list(rpos.parent.children)
    children[rpos.index()] = changed
    new_parent = rpos.parent.model_copy(update={"content": children})
    return _rebuild(rpos, rpos.depth, new_parent)
