"""
Restricted Markdown -> block/inline tree.

``render`` is re-run on the whole accumulated buffer after every streamed
increment, so it must stay a pure function of its input: no caches, no
module state, same tree for the same text.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from .nodes import BlockNode, InlineNode

METADATA_RE = re.compile(r"^Page Title:[^\n]*\nURL:[^\n]*\nPercentage of content sent:[^\n]*\n\n")
RULE_RE = re.compile(r"^-{3,}$")
FENCE_OPEN_RE = re.compile(r"^```(\w*)\s*$")
FENCE_CLOSE_RE = re.compile(r"^```\s*$")
HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")
QUOTE_RE = re.compile(r"^>\s?(.*)$")
UL_RE = re.compile(r"^\s*[-*+]\s+(.+)$")
OL_RE = re.compile(r"^\s*\d+\.\s+(.+)$")

URL_RE = re.compile(r"https?://[^\s<*]+[^\s<.,:;\"')\]}]")
MD_LINK_RE = re.compile(r"\[([^\]\n]+)\]\((https?://[^\s)]+)\)")


# ---------------------------
# Block scanner
# ---------------------------

def render(buffer: str) -> List[BlockNode]:
    text = (buffer or "").replace("\r\n", "\n").replace("\r", "\n")
    blocks: List[BlockNode] = []

    m = METADATA_RE.match(text)
    if m:
        blocks.append(BlockNode(kind="metadata", text=m.group(0).strip()))
        text = text[m.end():]

    lines = text.split("\n")
    i = 0
    while i < len(lines):
        line = lines[i]
        stripped = line.strip()
        if not stripped:
            i += 1
            continue

        if RULE_RE.match(stripped):
            blocks.append(BlockNode(kind="rule"))
            i += 1
            continue

        fence = FENCE_OPEN_RE.match(line)
        if fence:
            close = _find_fence_close(lines, i + 1)
            if close is not None:
                blocks.append(
                    BlockNode(kind="code", language=fence.group(1), text="\n".join(lines[i + 1 : close]))
                )
                i = close + 1
                continue
            # unterminated fence: not a code block until the closing line arrives

        heading = HEADING_RE.match(stripped)
        if heading:
            blocks.append(
                BlockNode(
                    kind="heading",
                    level=len(heading.group(1)),
                    inlines=parse_inline(heading.group(2).strip()),
                )
            )
            i += 1
            continue

        if QUOTE_RE.match(line):
            block, i = _scan_quote(lines, i)
            if block is not None:
                blocks.append(block)
            continue

        if UL_RE.match(line) and not RULE_RE.match(stripped):
            block, i = _scan_list(lines, i, UL_RE, "unordered_list")
            blocks.append(block)
            continue

        if OL_RE.match(line):
            block, i = _scan_list(lines, i, OL_RE, "ordered_list")
            blocks.append(block)
            continue

        blocks.append(BlockNode(kind="paragraph", inlines=parse_inline(stripped)))
        i += 1

    return blocks


def _find_fence_close(lines: List[str], start: int) -> Optional[int]:
    for j in range(start, len(lines)):
        if FENCE_CLOSE_RE.match(lines[j]):
            return j
    return None


def _scan_quote(lines: List[str], i: int) -> Tuple[Optional[BlockNode], int]:
    parts: List[List[InlineNode]] = []
    while i < len(lines):
        m = QUOTE_RE.match(lines[i])
        if not m:
            break
        content = m.group(1).strip()
        if content:
            parts.append(parse_inline(content))
        i += 1
    if not parts:
        return None, i
    inlines: List[InlineNode] = []
    for n, part in enumerate(parts):
        if n:
            inlines.append(InlineNode(kind="line_break"))
        inlines.extend(part)
    return BlockNode(kind="blockquote", inlines=inlines), i


def _scan_list(lines: List[str], i: int, item_re: re.Pattern, kind: str) -> Tuple[BlockNode, int]:
    items: List[List[InlineNode]] = []
    while i < len(lines):
        line = lines[i]
        if kind == "unordered_list" and RULE_RE.match(line.strip()):
            break
        m = item_re.match(line)
        if not m:
            break
        items.append(parse_inline(m.group(1).strip()))
        i += 1
    return BlockNode(kind=kind, items=items), i


# ---------------------------
# Inline tokenizer
# ---------------------------

def parse_inline(s: str) -> List[InlineNode]:
    """
    Inline pass for one line. Precedence: code spans, links (markdown and
    bare URLs), bold, italic, strikethrough. Unmatched delimiters stay text.
    """
    out: List[InlineNode] = []
    buf: List[str] = []

    def flush() -> None:
        if buf:
            out.append(InlineNode(kind="text", text="".join(buf)))
            buf.clear()

    i = 0
    n = len(s)
    while i < n:
        c = s[i]

        if c == "`":
            j = s.find("`", i + 1)
            if j > i + 1:
                flush()
                out.append(InlineNode(kind="code", text=s[i + 1 : j]))
                i = j + 1
                continue

        if c == "[":
            m = MD_LINK_RE.match(s, i)
            if m:
                flush()
                out.append(InlineNode(kind="link", href=m.group(2), children=parse_inline(m.group(1))))
                i = m.end()
                continue

        if c == "h" and (s.startswith("http://", i) or s.startswith("https://", i)):
            m = URL_RE.match(s, i)
            if m:
                flush()
                url = m.group(0)
                out.append(InlineNode(kind="link", href=url, children=[InlineNode(kind="text", text=url)]))
                i = m.end()
                continue

        if c in "*_":
            hit = _match_strong(s, i, c * 2) or _match_em(s, i, c)
            if hit:
                node, i = hit
                flush()
                out.append(node)
                continue

        if c == "~" and s.startswith("~~", i):
            j = _find_delim(s, "~~", i + 2)
            if j > i + 2:
                flush()
                out.append(InlineNode(kind="strike", children=parse_inline(s[i + 2 : j])))
                i = j + 2
                continue

        buf.append(c)
        i += 1

    flush()
    return _merge_text(out)


def _find_delim(s: str, delim: str, start: int) -> int:
    """Index of the next ``delim`` at or after ``start``.

    Code spans, links and bare URLs are skipped whole.
    """
    i = start
    while i < len(s):
        if s[i] == "`":
            j = s.find("`", i + 1)
            if j > i + 1:
                i = j + 1
                continue
        m = MD_LINK_RE.match(s, i) or URL_RE.match(s, i)
        if m:
            i = m.end()
            continue
        if s.startswith(delim, i):
            return i
        i += 1
    return -1


def _match_strong(s: str, i: int, delim: str) -> Optional[Tuple[InlineNode, int]]:
    if not s.startswith(delim, i):
        return None
    j = _find_delim(s, delim, i + 2)
    if j <= i + 2:
        return None
    # "***x***": keep the inner single delimiter inside the bold span
    if s[i + 2] == delim[0] and j + 2 < len(s) and s[j + 2] == delim[0]:
        j += 1
    return InlineNode(kind="bold", children=parse_inline(s[i + 2 : j])), j + 2


def _match_em(s: str, i: int, delim: str) -> Optional[Tuple[InlineNode, int]]:
    if i > 0 and s[i - 1] == delim:
        return None
    j = _find_delim(s, delim, i + 1)
    if j <= i + 1:
        return None
    if j + 1 < len(s) and s[j + 1] == delim:
        return None
    return InlineNode(kind="italic", children=parse_inline(s[i + 1 : j])), j + 1


def _merge_text(nodes: List[InlineNode]) -> List[InlineNode]:
    merged: List[InlineNode] = []
    for node in nodes:
        if node.kind == "text" and not node.text:
            continue
        if node.kind == "text" and merged and merged[-1].kind == "text":
            merged[-1] = InlineNode(kind="text", text=merged[-1].text + node.text)
        else:
            merged.append(node)
    return merged
