from __future__ import annotations

import html
from typing import Dict, Iterator, List, Optional, Union

# Elements that never hold children when serialized
VOID_TAGS = {"br", "hr", "img", "input", "meta", "link", "wbr", "source"}


class TextNode:
    """Leaf text holder. Identity is the object itself, never the text."""

    def __init__(self, text: str, parent: Optional["Element"] = None) -> None:
        self.text = text
        self.parent = parent

    def is_attached(self, root: "Element") -> bool:
        node: Optional[Element] = self.parent
        while node is not None:
            if node is root:
                return True
            node = node.parent
        return False

    def __repr__(self) -> str:
        preview = self.text if len(self.text) <= 30 else self.text[:27] + "..."
        return f"TextNode({preview!r})"


Node = Union["Element", TextNode]


class Element:
    def __init__(
        self,
        tag: str,
        attrs: Optional[Dict[str, str]] = None,
        style: Optional[Dict[str, str]] = None,
        children: Optional[List[Node]] = None,
    ) -> None:
        self.tag = tag.lower()
        self.attrs: Dict[str, str] = dict(attrs or {})
        self.style: Dict[str, str] = {k.lower(): v for k, v in (style or {}).items()}
        self.parent: Optional[Element] = None
        self.children: List[Node] = []
        for ch in children or []:
            self.append(ch)

    @property
    def id(self) -> str:
        return self.attrs.get("id", "")

    def append(self, child: Node) -> Node:
        child.parent = self
        self.children.append(child)
        return child

    def append_text(self, text: str) -> TextNode:
        node = TextNode(text)
        self.append(node)
        return node

    def remove(self, child: Node) -> None:
        self.children.remove(child)
        child.parent = None

    def closest(self, element_id: str) -> Optional["Element"]:
        """Nearest ancestor-or-self carrying ``element_id``."""
        node: Optional[Element] = self
        while node is not None:
            if node.id == element_id:
                return node
            node = node.parent
        return None

    def iter_text_nodes(self) -> Iterator[TextNode]:
        for ch in self.children:
            if isinstance(ch, TextNode):
                yield ch
            else:
                yield from ch.iter_text_nodes()

    @property
    def text_content(self) -> str:
        return "".join(t.text for t in self.iter_text_nodes())

    def find_by_id(self, element_id: str) -> Optional["Element"]:
        if self.id == element_id:
            return self
        for ch in self.children:
            if isinstance(ch, Element):
                hit = ch.find_by_id(element_id)
                if hit is not None:
                    return hit
        return None

    def open_tag(self, extra_class: str = "") -> str:
        attrs = dict(self.attrs)
        if extra_class:
            attrs["class"] = (attrs.get("class", "") + " " + extra_class).strip()
        parts = [self.tag] + [
            f'{k}="{html.escape(v, quote=True)}"' if v != "" else k for k, v in attrs.items()
        ]
        return "<" + " ".join(parts) + ">"

    def __repr__(self) -> str:
        return f"Element({self.tag!r}, id={self.id!r}, children={len(self.children)})"


class Document:
    """A loaded page: a ``body`` root plus the metadata chat context needs."""

    def __init__(self, body: Element, title: str = "", url: str = "") -> None:
        self.body = body
        self.title = title
        self.url = url

    @property
    def text_content(self) -> str:
        return self.body.text_content


def serialize(node: Node) -> str:
    """Plain HTML serialization of a subtree (no overlay applied)."""
    if isinstance(node, TextNode):
        return html.escape(node.text, quote=False)
    if node.tag in VOID_TAGS:
        return node.open_tag()
    inner = "".join(serialize(ch) for ch in node.children)
    return f"{node.open_tag()}{inner}</{node.tag}>"
