from __future__ import annotations

import html
from typing import List, Sequence

from .nodes import BlockNode, InlineNode


def esc(x) -> str:
    return html.escape(str(x)) if x is not None else ""


def inline_html(nodes: Sequence[InlineNode]) -> str:
    parts: List[str] = []
    for n in nodes:
        if n.kind == "text":
            parts.append(esc(n.text))
        elif n.kind == "code":
            parts.append(f"<code>{esc(n.text)}</code>")
        elif n.kind == "bold":
            parts.append(f"<strong>{inline_html(n.children)}</strong>")
        elif n.kind == "italic":
            parts.append(f"<em>{inline_html(n.children)}</em>")
        elif n.kind == "strike":
            parts.append(f"<del>{inline_html(n.children)}</del>")
        elif n.kind == "link":
            parts.append(
                f'<a href="{esc(n.href)}" target="_blank" rel="noopener noreferrer">{inline_html(n.children)}</a>'
            )
        elif n.kind == "line_break":
            parts.append("<br>")
    return "".join(parts)


def block_html(b: BlockNode) -> str:
    if b.kind == "heading":
        return f"<h{b.level}>{inline_html(b.inlines)}</h{b.level}>"
    if b.kind == "paragraph":
        return f"<p>{inline_html(b.inlines)}</p>"
    if b.kind == "blockquote":
        return f"<blockquote>{inline_html(b.inlines)}</blockquote>"
    if b.kind in ("unordered_list", "ordered_list"):
        tag = "ul" if b.kind == "unordered_list" else "ol"
        items = "".join(f"<li>{inline_html(item)}</li>" for item in b.items)
        return f"<{tag}>{items}</{tag}>"
    if b.kind == "code":
        return f'<pre><code class="language-{esc(b.language)}">{esc(b.text)}</code></pre>'
    if b.kind == "metadata":
        return f"<pre>{esc(b.text)}</pre>"
    if b.kind == "rule":
        return "<hr>"
    raise ValueError(f"Unsupported block kind: {b.kind}")


def to_html(blocks: Sequence[BlockNode]) -> str:
    return "\n".join(block_html(b) for b in blocks)


def to_plain_text(blocks: Sequence[BlockNode]) -> str:
    return "\n\n".join(b.plain() for b in blocks)
