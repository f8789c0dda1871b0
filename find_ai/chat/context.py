from __future__ import annotations

import re
from typing import List, Optional

from pydantic import BaseModel

from ..document.model import Document
from ..document.visibility import VisibilityPredicate, computed_visible
from ..document.walker import OVERLAY_ID, walk_text

PAGE_TOKEN_CAP = 500
_PUNCT_RE = re.compile(r"[^\w\s]|_")


class PageContext(BaseModel):
    page_text: str            # metadata header + capped token text
    percentage_sent: str      # "37.52"
    total_tokens: int
    token_cap: int = PAGE_TOKEN_CAP

    @property
    def truncated(self) -> bool:
        return self.total_tokens > self.token_cap


def _tokens(s: str) -> List[str]:
    return [t for t in _PUNCT_RE.sub(" ", s).split() if t]


def metadata_header(title: str, url: str, percentage: str) -> str:
    return f"Page Title: {title}\nURL: {url}\nPercentage of content sent: {percentage}%\n\n"


def capture_page_context(
    document: Document,
    *,
    token_cap: int = PAGE_TOKEN_CAP,
    is_visible: VisibilityPredicate = computed_visible,
    overlay_id: str = OVERLAY_ID,
) -> PageContext:
    """Visible page text, punctuation-stripped and capped at ``token_cap`` tokens."""
    tokens: List[str] = []
    for seg in walk_text(document.body, is_visible=is_visible, exclude_id=overlay_id):
        tokens.extend(_tokens(seg.text.strip()))
    total = len(tokens)
    capped = tokens[:token_cap]
    if total > 0:
        pct = f"{min(len(capped) / total * 100, 100):.2f}"
    else:
        pct = "0.00"
    header = metadata_header(document.title or "Untitled Page", document.url, pct)
    return PageContext(
        page_text=header + " ".join(capped),
        percentage_sent=pct,
        total_tokens=total,
        token_cap=token_cap,
    )


def truncation_notice(ctx: Optional[PageContext]) -> str:
    if ctx is None or not ctx.truncated:
        return ""
    shown = min(ctx.token_cap, ctx.total_tokens)
    return (
        f"Page too long: Only {ctx.percentage_sent}% analyzed "
        f"({shown} of {ctx.total_tokens} tokens)"
    )
