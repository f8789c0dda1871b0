from __future__ import annotations

from typing import Iterator

from pydantic import BaseModel, ConfigDict

from .model import Element, TextNode
from .visibility import VisibilityPredicate, computed_visible

OVERLAY_ID = "find-ai-overlay"
SKIPPED_PARENTS = {"script", "style", "noscript"}


class TextSegment(BaseModel):
    """A text node plus its content at walk time."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    node: TextNode
    text: str


def walk_text(
    root: Element,
    *,
    is_visible: VisibilityPredicate = computed_visible,
    exclude_id: str = OVERLAY_ID,
) -> Iterator[TextSegment]:
    """
    Yield the visible, non-blank text segments under ``root`` in document
    (depth-first, pre-order) order.

    Each call re-walks the live tree, so callers must not cache the result
    across mutations. An element failing ``is_visible`` (or carrying
    ``exclude_id``) prunes its whole subtree; ``root`` itself is never tested.
    """
    if root.id and root.id == exclude_id:
        return
    yield from _walk(root, is_visible, exclude_id)


def _walk(
    element: Element,
    is_visible: VisibilityPredicate,
    exclude_id: str,
) -> Iterator[TextSegment]:
    for child in list(element.children):
        if isinstance(child, TextNode):
            if element.tag in SKIPPED_PARENTS:
                continue
            if not child.text.strip():
                continue
            yield TextSegment(node=child, text=child.text)
            continue
        if exclude_id and child.id == exclude_id:
            continue
        if not is_visible(child):
            continue
        yield from _walk(child, is_visible, exclude_id)
