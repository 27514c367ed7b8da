"""Block-level editing: moving the caret's block and the slash-command set."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from settlernote.content_tree import ResolvedPos, is_inline, node_size, resolve, slice_content, text_node
from settlernote.editor import EditorSession, Transaction
from settlernote.exceptions import PositionError
from settlernote.schemas import ContentNode, Mark, MarkType, NodeType
from settlernote.utils.logging_config import get_logger

logger = get_logger(__name__)

_LIST_ITEM_TYPES = {
    NodeType.BULLET_LIST: NodeType.LIST_ITEM,
    NodeType.ORDERED_LIST: NodeType.LIST_ITEM,
    NodeType.TASK_LIST: NodeType.TASK_ITEM,
}
_WRAPPER_TYPES = (*_LIST_ITEM_TYPES, NodeType.BLOCKQUOTE)
_TEXTBLOCK_TYPES = (NodeType.PARAGRAPH, NodeType.HEADING, NodeType.CODE_BLOCK)


def current_block_position(session: EditorSession) -> int | None:
    """Position just before the block holding the caret.

    Returns None when there is no single caret, when the caret sits directly
    in the document root, or when the caret cannot be resolved.
    """
    selection = session.selection
    if not selection.empty:
        return None

    try:
        rpos = resolve(session.doc, selection.head)
    except PositionError as exc:
        logger.debug("Caret position unavailable", extra={"head": selection.head, "error": str(exc)})
        return None

    depth = rpos.depth
    node = rpos.node(depth)
    while depth > 0 and is_inline(node):
        depth -= 1
        node = rpos.node(depth)

    if depth == 0 or node.type == NodeType.DOC:
        return None
    return rpos.before(depth)


def move_block_up(session: EditorSession) -> bool:
    """Swap the caret's block with its previous sibling in one transaction."""
    block_pos = current_block_position(session)
    if block_pos is None:
        return False

    rpos = resolve(session.doc, block_pos)
    node = rpos.node_after
    index = rpos.index()
    if node is None or index == 0:
        return False

    previous = rpos.parent.children[index - 1]
    node_start = block_pos
    node_end = node_start + node_size(node)
    prev_start = node_start - node_size(previous)

    current_content = slice_content(session.doc, node_start, node_end)
    prev_content = slice_content(session.doc, prev_start, node_start)

    tr = session.transaction()
    tr.replace(prev_start, node_end, current_content + prev_content)
    tr.set_selection(session.selection.head - node_size(previous))
    return session.dispatch(tr)


def move_block_down(session: EditorSession) -> bool:
    """Swap the caret's block with its next sibling in one transaction."""
    block_pos = current_block_position(session)
    if block_pos is None:
        return False

    rpos = resolve(session.doc, block_pos)
    node = rpos.node_after
    index = rpos.index()
    parent = rpos.parent
    if node is None or index >= len(parent.children) - 1:
        return False

    following = parent.children[index + 1]
    node_start = block_pos
    node_end = node_start + node_size(node)
    next_end = node_end + node_size(following)

    current_content = slice_content(session.doc, node_start, node_end)
    next_content = slice_content(session.doc, node_end, next_end)

    tr = session.transaction()
    tr.replace(node_start, next_end, next_content + current_content)
    tr.set_selection(session.selection.head + node_size(following))
    return session.dispatch(tr)


def set_block_type(session: EditorSession, node_type: NodeType, *, level: int | None = None) -> bool:
    """Turn the caret's textblock into a paragraph, heading or code block."""
    if node_type not in _TEXTBLOCK_TYPES:
        raise ValueError(f"Cannot convert a block into {node_type!r}")

    block_pos = current_block_position(session)
    if block_pos is None:
        return False

    attrs = {"level": level or 1} if node_type == NodeType.HEADING else None
    tr = session.transaction()
    tr.set_node_markup(block_pos, node_type, attrs)
    return session.dispatch(tr)


def _wrap_item(node_type: NodeType, content: list[ContentNode]) -> ContentNode:
    attrs = {"checked": False} if node_type == NodeType.TASK_ITEM else None
    return ContentNode(type=node_type, attrs=attrs, content=content)


def wrap_block(session: EditorSession, wrapper: NodeType) -> bool:
    """Toggle a list or blockquote around the caret's block.

    Already inside the same wrapper: the block is lifted back out, splitting
    the wrapper around it. Inside a different kind of list: the list changes
    kind. Otherwise the block is wrapped.
    """
    if wrapper not in _WRAPPER_TYPES:
        raise ValueError(f"Cannot wrap a block in {wrapper!r}")

    block_pos = current_block_position(session)
    if block_pos is None:
        return False

    rpos = resolve(session.doc, session.selection.head)
    depth = next(d for d in range(rpos.depth, 0, -1) if rpos.before(d) == block_pos)
    block = rpos.node(depth)
    caret_in_block = session.selection.head - block_pos
    tr = session.transaction()

    if wrapper == NodeType.BLOCKQUOTE:
        if rpos.node(depth - 1).type == NodeType.BLOCKQUOTE:
            _lift(tr, rpos, depth - 1, caret_in_block)
        else:
            quote = ContentNode(type=NodeType.BLOCKQUOTE, content=[block])
            tr.replace(block_pos, block_pos + node_size(block), [quote])
            tr.set_selection(session.selection.head + 1)
        return session.dispatch(tr)

    in_list_item = depth >= 2 and rpos.node(depth - 1).type in (NodeType.LIST_ITEM, NodeType.TASK_ITEM)
    if in_list_item and rpos.node(depth - 2).type == wrapper:
        _lift_list_item(tr, rpos, depth, caret_in_block)
    elif in_list_item and rpos.node(depth - 2).type in _LIST_ITEM_TYPES:
        current = rpos.node(depth - 2)
        item_type = _LIST_ITEM_TYPES[wrapper]
        converted = ContentNode(
            type=wrapper,
            content=[_wrap_item(item_type, item.children) for item in current.children],
        )
        start = rpos.before(depth - 2)
        tr.replace(start, start + node_size(current), [converted])
    else:
        wrapped = ContentNode(type=wrapper, content=[_wrap_item(_LIST_ITEM_TYPES[wrapper], [block])])
        tr.replace(block_pos, block_pos + node_size(block), [wrapped])
        tr.set_selection(session.selection.head + 2)
    return session.dispatch(tr)


def _split_around(container: ContentNode, index: int) -> tuple[list[ContentNode], list[ContentNode]]:
    before = container.children[:index]
    after = container.children[index + 1 :]
    head = [container.model_copy(update={"content": before})] if before else []
    tail = [container.model_copy(update={"content": after})] if after else []
    return head, tail


def _lift(tr: Transaction, rpos: ResolvedPos, container_depth: int, caret_in_block: int) -> None:
    """Move the child at ``container_depth + 1`` out of its container."""
    container = rpos.node(container_depth)
    index = rpos.index(container_depth)
    start = rpos.before(container_depth)
    head, tail = _split_around(container, index)
    block = container.children[index]
    tr.replace(start, start + node_size(container), [*head, block, *tail])
    new_block_pos = start + sum(node_size(n) for n in head)
    tr.set_selection(new_block_pos + caret_in_block)


def _lift_list_item(tr: Transaction, rpos: ResolvedPos, depth: int, caret_in_block: int) -> None:
    """Unwrap the caret's list item, splitting the list around it."""
    container = rpos.node(depth - 2)
    item_index = rpos.index(depth - 2)
    item = container.children[item_index]
    block_index = rpos.index(depth - 1)
    start = rpos.before(depth - 2)
    head, tail = _split_around(container, item_index)
    tr.replace(start, start + node_size(container), [*head, *item.children, *tail])
    new_block_pos = start + sum(node_size(n) for n in head) + sum(node_size(n) for n in item.children[:block_index])
    tr.set_selection(new_block_pos + caret_in_block)


def _insert_after_block(session: EditorSession, nodes: list[ContentNode]) -> bool:
    block_pos = current_block_position(session)
    if block_pos is None:
        insert_at = session.selection.head
    else:
        rpos = resolve(session.doc, session.selection.head)
        depth = next(d for d in range(rpos.depth, 0, -1) if rpos.before(d) == block_pos)
        insert_at = rpos.after(depth)
    tr = session.transaction()
    try:
        tr.insert(insert_at, nodes)
    except PositionError as exc:
        logger.debug("Cannot insert blocks at caret", extra={"pos": insert_at, "error": str(exc)})
        return False
    return session.dispatch(tr)


def insert_horizontal_rule(session: EditorSession) -> bool:
    """Insert a divider after the caret's block."""
    return _insert_after_block(session, [ContentNode(type=NodeType.HORIZONTAL_RULE)])


def insert_toc_placeholder(session: EditorSession) -> bool:
    """Insert a bold "Contents" label and a one-item list after the caret's block."""
    label = ContentNode(
        type=NodeType.PARAGRAPH,
        content=[text_node("📑 Contents", [Mark(type=MarkType.BOLD)])],
    )
    hint = ContentNode(
        type=NodeType.BULLET_LIST,
        content=[
            _wrap_item(
                NodeType.LIST_ITEM,
                [ContentNode(type=NodeType.PARAGRAPH, content=[text_node("Headings in this document appear here")])],
            )
        ],
    )
    return _insert_after_block(session, [label, hint])


@dataclass(frozen=True)
class SlashCommand:
    """An entry of the "/" command menu."""

    title: str
    description: str
    search_terms: tuple[str, ...] = field(default_factory=tuple)
    run: Callable[[EditorSession], bool] = field(default=lambda session: False, repr=False, compare=False)

    def matches(self, query: str) -> bool:
        needle = query.strip().lower()
        if not needle:
            return True
        return needle in self.title.lower() or any(needle in term for term in self.search_terms)


SLASH_COMMANDS: tuple[SlashCommand, ...] = (
    SlashCommand("Paragraph", "Plain text", ("paragraph", "p"), lambda s: set_block_type(s, NodeType.PARAGRAPH)),
    SlashCommand("Heading 1", "Large heading", ("heading", "h1"), lambda s: set_block_type(s, NodeType.HEADING, level=1)),
    SlashCommand("Heading 2", "Medium heading", ("heading", "h2"), lambda s: set_block_type(s, NodeType.HEADING, level=2)),
    SlashCommand("Heading 3", "Small heading", ("heading", "h3"), lambda s: set_block_type(s, NodeType.HEADING, level=3)),
    SlashCommand("Bullet List", "Unordered list", ("bullet", "list", "ul"), lambda s: wrap_block(s, NodeType.BULLET_LIST)),
    SlashCommand("Numbered List", "Ordered list", ("numbered", "list", "ol"), lambda s: wrap_block(s, NodeType.ORDERED_LIST)),
    SlashCommand("Task List", "Checkboxes", ("task", "todo", "checkbox"), lambda s: wrap_block(s, NodeType.TASK_LIST)),
    SlashCommand("Quote", "Blockquote", ("quote", "blockquote"), lambda s: wrap_block(s, NodeType.BLOCKQUOTE)),
    SlashCommand("Code", "Code block", ("code", "codeblock"), lambda s: set_block_type(s, NodeType.CODE_BLOCK)),
    SlashCommand("Divider", "Horizontal rule", ("hr", "divider", "line"), insert_horizontal_rule),
    SlashCommand("Table of Contents", "List of headings", ("toc", "table of contents"), insert_toc_placeholder),
)


def filter_slash_commands(query: str) -> list[SlashCommand]:
    """Commands whose title or search terms contain ``query``."""
    return [command for command in SLASH_COMMANDS if command.matches(query)]
