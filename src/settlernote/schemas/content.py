"""Rich-text content tree models."""

from __future__ import annotations

from enum import Enum
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, model_validator


class NodeType(str, Enum):
    """Closed set of node types a content tree may hold."""

    DOC = "doc"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BULLET_LIST = "bulletList"
    ORDERED_LIST = "orderedList"
    LIST_ITEM = "listItem"
    TASK_LIST = "taskList"
    TASK_ITEM = "taskItem"
    BLOCKQUOTE = "blockquote"
    CODE_BLOCK = "codeBlock"
    HORIZONTAL_RULE = "horizontalRule"
    IMAGE = "image"
    HARD_BREAK = "hardBreak"
    TEXT = "text"


class MarkType(str, Enum):
    """Formatting annotations that may be attached to a text run."""

    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKE = "strike"
    CODE = "code"
    LINK = "link"


class NodeSpec(NamedTuple):
    """Structural traits of a node type.

    Attributes:
        inline: Node lives inside a textblock rather than between blocks.
        leaf: Node never has children (atoms occupy a single position).
        textblock: Node holds inline content directly.
    """

    inline: bool
    leaf: bool
    textblock: bool


NODE_SPECS: dict[NodeType, NodeSpec] = {
    NodeType.DOC: NodeSpec(inline=False, leaf=False, textblock=False),
    NodeType.PARAGRAPH: NodeSpec(inline=False, leaf=False, textblock=True),
    NodeType.HEADING: NodeSpec(inline=False, leaf=False, textblock=True),
    NodeType.BULLET_LIST: NodeSpec(inline=False, leaf=False, textblock=False),
    NodeType.ORDERED_LIST: NodeSpec(inline=False, leaf=False, textblock=False),
    NodeType.LIST_ITEM: NodeSpec(inline=False, leaf=False, textblock=False),
    NodeType.TASK_LIST: NodeSpec(inline=False, leaf=False, textblock=False),
    NodeType.TASK_ITEM: NodeSpec(inline=False, leaf=False, textblock=False),
    NodeType.BLOCKQUOTE: NodeSpec(inline=False, leaf=False, textblock=False),
    NodeType.CODE_BLOCK: NodeSpec(inline=False, leaf=False, textblock=True),
    NodeType.HORIZONTAL_RULE: NodeSpec(inline=False, leaf=True, textblock=False),
    NodeType.IMAGE: NodeSpec(inline=False, leaf=True, textblock=False),
    NodeType.HARD_BREAK: NodeSpec(inline=True, leaf=True, textblock=False),
    NodeType.TEXT: NodeSpec(inline=True, leaf=True, textblock=False),
}


class Mark(BaseModel):
    """A formatting mark on a text run."""

    model_config = ConfigDict(use_enum_values=True)

    type: MarkType
    attrs: dict[str, Any] | None = None


class ContentNode(BaseModel):
    """A node of the rich-text content tree.

    The JSON shape is the editor's document format verbatim: ``type`` plus
    optional ``attrs``, ``content``, ``marks`` and ``text``.
    """

    model_config = ConfigDict(use_enum_values=True)

    type: NodeType
    attrs: dict[str, Any] | None = None
    content: list["ContentNode"] | None = None
    marks: list[Mark] | None = None
    text: str | None = None

    @model_validator(mode="after")
    def check_shape(self) -> "ContentNode":
        """Enforce the per-type structural rules."""
        if self.type == NodeType.TEXT:
            if not self.text:
                raise ValueError("text nodes must carry non-empty text")
            if self.content is not None:
                raise ValueError("text nodes cannot have content")
            return self

        if self.text is not None:
            raise ValueError(f"{self.type} nodes cannot carry text")
        if self.marks:
            raise ValueError(f"{self.type} nodes cannot carry marks")
        if self.content and NODE_SPECS[NodeType(self.type)].leaf:
            raise ValueError(f"{self.type} nodes cannot have content")
        if self.type == NodeType.HEADING and self.attrs and self.attrs.get("level") is not None:
            level = self.attrs["level"]
            if not isinstance(level, int) or not 1 <= level <= 6:
                raise ValueError("heading level must be an integer between 1 and 6")
        return self

    def traits(self) -> NodeSpec:
        return NODE_SPECS[NodeType(self.type)]

    @property
    def children(self) -> list["ContentNode"]:
        return self.content or []

    def mark_types(self) -> list[str]:
        return [mark.type for mark in self.marks or []]

