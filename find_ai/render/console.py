"""Terminal projection of the render tree using rich."""

from __future__ import annotations

from typing import List, Sequence

from rich.console import Group, RenderableType
from rich.padding import Padding
from rich.panel import Panel
from rich.rule import Rule
from rich.syntax import Syntax
from rich.text import Text

from .nodes import BlockNode, InlineNode

HEADING_STYLES = {
    1: "bold magenta underline",
    2: "bold magenta",
    3: "bold cyan",
    4: "bold",
    5: "bold dim",
    6: "dim",
}
CODE_SPAN_STYLE = "bold cyan"


def _append_inlines(out: Text, nodes: Sequence[InlineNode], style: str = "") -> None:
    for n in nodes:
        if n.kind == "text":
            out.append(n.text, style=style or None)
        elif n.kind == "code":
            out.append(n.text, style=f"{style} {CODE_SPAN_STYLE}".strip())
        elif n.kind == "bold":
            _append_inlines(out, n.children, f"{style} bold".strip())
        elif n.kind == "italic":
            _append_inlines(out, n.children, f"{style} italic".strip())
        elif n.kind == "strike":
            _append_inlines(out, n.children, f"{style} strike".strip())
        elif n.kind == "link":
            _append_inlines(out, n.children, f"{style} underline blue link {n.href}".strip())
        elif n.kind == "line_break":
            out.append("\n")


def inline_text(nodes: Sequence[InlineNode], style: str = "") -> Text:
    out = Text()
    _append_inlines(out, nodes, style)
    return out


def block_renderable(b: BlockNode) -> RenderableType:
    if b.kind == "heading":
        return inline_text(b.inlines, HEADING_STYLES.get(b.level, "bold"))
    if b.kind == "paragraph":
        return inline_text(b.inlines)
    if b.kind == "blockquote":
        body = inline_text(b.inlines, "italic")
        return Padding(body, (0, 0, 0, 2), style="dim")
    if b.kind in ("unordered_list", "ordered_list"):
        out = Text()
        for n, item in enumerate(b.items, start=1):
            if n > 1:
                out.append("\n")
            marker = "• " if b.kind == "unordered_list" else f"{n}. "
            out.append("  " + marker, style="bold")
            _append_inlines(out, item)
        return out
    if b.kind == "code":
        return Syntax(b.text, b.language or "text", theme="monokai", word_wrap=True)
    if b.kind == "metadata":
        return Panel(Text(b.text), style="dim", expand=False)
    if b.kind == "rule":
        return Rule(style="dim")
    raise ValueError(f"Unsupported block kind: {b.kind}")


def to_rich(blocks: Sequence[BlockNode]) -> Group:
    items: List[RenderableType] = []
    for n, b in enumerate(blocks):
        if n:
            items.append(Text(""))
        items.append(block_renderable(b))
    return Group(*items)
