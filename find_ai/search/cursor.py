from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel

from .index import MatchRecord
from .overlay import HighlightHandle, HighlightOverlay

logger = logging.getLogger(__name__)

NO_MATCHES = "No matches"


class SearchStatus(BaseModel):
    text: str = ""
    show_navigation: bool = False
    show_ask: bool = False


class NavigationCursor:
    """
    Current-match pointer with circular navigation.

    States: Empty (``index is None``) or Positioned(i). Entering Positioned(i)
    moves the current marker to match i and asks ``scroll_to`` to center it.
    """

    def __init__(
        self,
        overlay: HighlightOverlay,
        scroll_to: Optional[Callable[[HighlightHandle], None]] = None,
    ) -> None:
        self.overlay = overlay
        self.scroll_to = scroll_to
        self.matches: List[MatchRecord] = []
        self.handles: List[Optional[HighlightHandle]] = []
        self.index: Optional[int] = None

    def __len__(self) -> int:
        return len(self.matches)

    @property
    def is_empty(self) -> bool:
        return self.index is None

    @property
    def current_match(self) -> Optional[MatchRecord]:
        return None if self.index is None else self.matches[self.index]

    def reset(
        self,
        matches: Sequence[MatchRecord],
        handles: Optional[Sequence[Optional[HighlightHandle]]] = None,
    ) -> None:
        self.matches = list(matches)
        self.handles = list(handles) if handles is not None else [None] * len(self.matches)
        if len(self.handles) != len(self.matches):
            raise ValueError("handles must be aligned with matches")
        if not self.matches:
            self.index = None
            self.overlay.set_current(None)
            return
        self._position(0)

    def clear(self) -> None:
        self.reset([])

    def next(self) -> Optional[int]:
        if self.index is None:
            return None
        self._position((self.index + 1) % len(self.matches))
        return self.index

    def prev(self) -> Optional[int]:
        if self.index is None:
            return None
        n = len(self.matches)
        self._position((self.index - 1 + n) % n)
        return self.index

    def _position(self, i: int) -> None:
        self.index = i
        handle = self.handles[i]
        self.overlay.set_current(handle)
        if handle is None:
            # the match exists but was never highlighted; nothing to scroll to
            logger.debug("Match %d has no highlight handle", i)
            return
        if self.scroll_to is not None:
            self.scroll_to(handle)

    def status(self, query: str) -> SearchStatus:
        if not (query or "").strip():
            return SearchStatus()
        if self.index is None:
            return SearchStatus(text=NO_MATCHES, show_ask=True)
        return SearchStatus(text=f"{self.index + 1}/{len(self.matches)}", show_navigation=True)
