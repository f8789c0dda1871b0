from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field

InlineKind = Literal["text", "bold", "italic", "strike", "code", "link", "line_break"]
BlockKind = Literal[
    "heading",
    "paragraph",
    "unordered_list",
    "ordered_list",
    "blockquote",
    "code",
    "rule",
    "metadata",
]


class InlineNode(BaseModel):
    kind: InlineKind
    text: str = ""             # "text" / "code" leaves
    href: str = ""             # "link" only
    children: List["InlineNode"] = Field(default_factory=list)

    def plain(self) -> str:
        if self.kind == "line_break":
            return "\n"
        if self.kind in ("text", "code"):
            return self.text
        return "".join(ch.plain() for ch in self.children)


class BlockNode(BaseModel):
    kind: BlockKind
    level: int = 0             # heading 1..6
    language: str = ""         # code
    text: str = ""             # raw text for code / metadata
    inlines: List[InlineNode] = Field(default_factory=list)
    items: List[List[InlineNode]] = Field(default_factory=list)

    def plain(self) -> str:
        if self.kind in ("code", "metadata"):
            return self.text
        if self.kind == "rule":
            return "---"
        if self.items:
            return "\n".join("".join(n.plain() for n in item) for item in self.items)
        return "".join(n.plain() for n in self.inlines)


InlineNode.model_rebuild()


# Small constructors, mostly for building expected trees in tests

def text(s: str) -> InlineNode:
    return InlineNode(kind="text", text=s)


def code_span(s: str) -> InlineNode:
    return InlineNode(kind="code", text=s)


def bold(*children: InlineNode) -> InlineNode:
    return InlineNode(kind="bold", children=list(children))


def italic(*children: InlineNode) -> InlineNode:
    return InlineNode(kind="italic", children=list(children))


def strike(*children: InlineNode) -> InlineNode:
    return InlineNode(kind="strike", children=list(children))


def link(href: str, *children: InlineNode) -> InlineNode:
    return InlineNode(kind="link", href=href, children=list(children) or [text(href)])


def line_break() -> InlineNode:
    return InlineNode(kind="line_break")
