"""
Highlight overlay over an unmodified document tree.

The canonical text nodes are never split or rewrapped. The overlay keeps a
list of live highlight regions and projects "canonical text + regions" into
fragments (or HTML) on demand, so restoring is just dropping the regions.
"""

from __future__ import annotations

import html
import logging
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel

from ..document.model import VOID_TAGS, Element, Node, TextNode
from ..errors import HighlightApplyError
from .index import MatchRecord

logger = logging.getLogger(__name__)


class HighlightHandle:
    """Live highlight region for one match; owned by HighlightOverlay."""

    def __init__(self, match: MatchRecord) -> None:
        self.match = match
        self.current = False

    @property
    def node(self) -> TextNode:
        return self.match.node

    @property
    def start(self) -> int:
        return self.match.start

    @property
    def end(self) -> int:
        return self.match.end

    @property
    def text(self) -> str:
        return self.match.text

    def __repr__(self) -> str:
        flag = " current" if self.current else ""
        return f"<HighlightHandle {self.start}..{self.end} {self.text!r}{flag}>"


class Fragment(BaseModel):
    text: str
    highlight: bool = False
    current: bool = False


class HighlightOverlay:
    def __init__(
        self,
        root: Element,
        highlight_class: str = "highlight",
        current_class: str = "current",
    ) -> None:
        self.root = root
        self.highlight_class = highlight_class
        self.current_class = current_class
        self._handles: List[HighlightHandle] = []
        self._by_node: Dict[TextNode, List[HighlightHandle]] = {}
        self._current: Optional[HighlightHandle] = None

    # ---------------------------
    # State
    # ---------------------------

    @property
    def handles(self) -> List[HighlightHandle]:
        return list(self._handles)

    @property
    def is_highlighted(self) -> bool:
        return bool(self._handles)

    @property
    def current(self) -> Optional[HighlightHandle]:
        return self._current

    # ---------------------------
    # Apply / restore
    # ---------------------------

    def apply(self, matches: Sequence[MatchRecord]) -> List[Optional[HighlightHandle]]:
        """
        Highlight every match and return handles aligned with ``matches``
        (``None`` where a match could not be wrapped).

        Any previous overlay is restored first. Matches of one segment are
        applied in descending offset order; a failing match is logged and
        skipped without affecting the others.
        """
        self.restore()
        aligned: List[Optional[HighlightHandle]] = [None] * len(matches)

        groups: Dict[TextNode, List[int]] = {}
        for i, m in enumerate(matches):
            groups.setdefault(m.node, []).append(i)

        for node, indices in groups.items():
            applied: List[HighlightHandle] = []
            for i in sorted(indices, key=lambda j: matches[j].start, reverse=True):
                try:
                    handle = self._wrap(matches[i], applied)
                except HighlightApplyError as e:
                    logger.warning("Skipping match %d (%r): %s", i, matches[i].text, e)
                    continue
                applied.append(handle)
                aligned[i] = handle
            if applied:
                self._by_node[node] = sorted(applied, key=lambda h: h.start)

        self._handles = [h for h in aligned if h is not None]
        logger.debug("Applied %d/%d highlights", len(self._handles), len(matches))
        return aligned

    def _wrap(self, match: MatchRecord, applied: List[HighlightHandle]) -> HighlightHandle:
        node = match.node
        if not node.is_attached(self.root):
            raise HighlightApplyError("segment is no longer in the document", match)
        if node.text != match.segment.text:
            raise HighlightApplyError("segment text changed since indexing", match)
        if not (0 <= match.start < match.end <= len(node.text)):
            raise HighlightApplyError(f"offsets {match.start}..{match.end} out of range", match)
        for h in applied:
            if h.start < match.end and match.start < h.end:
                raise HighlightApplyError(f"overlaps highlighted region {h.start}..{h.end}", match)
        return HighlightHandle(match)

    def restore(self) -> None:
        """Drop every live handle. No-op when nothing is highlighted."""
        if not self._handles and self._current is None:
            return
        for h in self._handles:
            h.current = False
        self._handles = []
        self._by_node = {}
        self._current = None

    def set_current(self, handle: Optional[HighlightHandle]) -> None:
        if self._current is not None:
            self._current.current = False
        self._current = None
        if handle is None:
            return
        if handle not in self._handles:
            logger.debug("Ignoring set_current for a handle that is not live: %r", handle)
            return
        handle.current = True
        self._current = handle

    # ---------------------------
    # Projection
    # ---------------------------

    def fragments(self, node: TextNode) -> List[Fragment]:
        """Split one text node into plain / highlighted pieces."""
        text = node.text
        out: List[Fragment] = []
        pos = 0
        for h in self._by_node.get(node, []):
            if h.start > pos:
                out.append(Fragment(text=text[pos : h.start]))
            out.append(Fragment(text=text[h.start : h.end], highlight=True, current=h.current))
            pos = h.end
        if pos < len(text) or not out:
            out.append(Fragment(text=text[pos:]))
        return out

    def projected_text(self, element: Optional[Element] = None) -> str:
        el = element if element is not None else self.root
        return "".join(f.text for t in el.iter_text_nodes() for f in self.fragments(t))

    def project_html(self, node: Optional[Node] = None) -> str:
        node = node if node is not None else self.root
        if isinstance(node, TextNode):
            return "".join(self._fragment_html(f) for f in self.fragments(node))
        if node.tag in VOID_TAGS:
            return node.open_tag()
        inner = "".join(self.project_html(ch) for ch in node.children)
        return f"{node.open_tag()}{inner}</{node.tag}>"

    def _fragment_html(self, frag: Fragment) -> str:
        text = html.escape(frag.text, quote=False)
        if not frag.highlight:
            return text
        cls = self.highlight_class
        if frag.current:
            cls += " " + self.current_class
        return f'<span class="{cls}">{text}</span>'
