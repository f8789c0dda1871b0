from __future__ import annotations

from typing import Callable

from .model import Element

VisibilityPredicate = Callable[[Element], bool]

# Browsers compute display:none for these regardless of inline style
_NEVER_RENDERED = {"head", "title", "template", "meta", "link"}


def _is_zero(value: str) -> bool:
    v = (value or "").strip().lower()
    for unit in ("px", "em", "rem", "%"):
        if v.endswith(unit):
            v = v[: -len(unit)]
            break
    try:
        return float(v) == 0.0
    except ValueError:
        return False


def computed_visible(element: Element) -> bool:
    """
    Default visibility oracle over an element's (computed) style dict.

    Invisible when not displayed, visibility hidden, zero opacity, or
    zero height with clipped overflow.
    """
    if element.tag in _NEVER_RENDERED:
        return False
    style = element.style
    if style.get("display", "") == "none":
        return False
    if style.get("visibility", "") in ("hidden", "collapse"):
        return False
    if "opacity" in style and _is_zero(style["opacity"]):
        return False
    if _is_zero(style.get("height", "")) and style.get("overflow", "") == "hidden":
        return False
    return True
