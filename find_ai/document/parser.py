from __future__ import annotations

import logging
from html.parser import HTMLParser
from typing import Dict, List, Optional, Tuple

from .model import VOID_TAGS, Document, Element

logger = logging.getLogger(__name__)


def parse_style(raw: str) -> Dict[str, str]:
    """'display: none; Opacity:0' -> {'display': 'none', 'opacity': '0'}"""
    out: Dict[str, str] = {}
    for decl in (raw or "").split(";"):
        if ":" not in decl:
            continue
        key, value = decl.split(":", 1)
        key = key.strip().lower()
        if key:
            out[key] = value.strip().lower()
    return out


class _TreeBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.root = Element("body")
        self.stack: List[Element] = [self.root]
        self.title_parts: List[str] = []
        self._in_title = False

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        tag = tag.lower()
        if tag in ("html", "body"):
            # collapse document wrappers into the single root
            for k, v in attrs:
                self.root.attrs[k] = v or ""
            return
        attr_map = {k: (v or "") for k, v in attrs}
        style = parse_style(attr_map.get("style", ""))
        if "hidden" in attr_map:
            style["display"] = "none"
        el = Element(tag, attrs=attr_map, style=style)
        self.stack[-1].append(el)
        if tag == "title":
            self._in_title = True
        if tag not in VOID_TAGS:
            self.stack.append(el)

    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        self.handle_starttag(tag, attrs)
        if tag.lower() not in VOID_TAGS and tag.lower() not in ("html", "body"):
            self.stack.pop()

    def handle_endtag(self, tag: str) -> None:
        tag = tag.lower()
        if tag == "title":
            self._in_title = False
        # pop to the matching open element; stray end tags are ignored
        for i in range(len(self.stack) - 1, 0, -1):
            if self.stack[i].tag == tag:
                del self.stack[i:]
                return
        if tag not in ("html", "body"):
            logger.debug("Ignoring stray end tag </%s>", tag)

    def handle_data(self, data: str) -> None:
        if not data:
            return
        if self._in_title:
            self.title_parts.append(data)
        self.stack[-1].append_text(data)


def parse_html(markup: str, url: str = "") -> Document:
    builder = _TreeBuilder()
    builder.feed(markup or "")
    builder.close()
    title = " ".join("".join(builder.title_parts).split())
    return Document(builder.root, title=title, url=url)
