from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from ..document.model import Document
from ..document.visibility import VisibilityPredicate, computed_visible
from ..document.walker import OVERLAY_ID, walk_text
from ..utils.log import EventLog
from .cursor import NavigationCursor, SearchStatus
from .debounce import Debouncer
from .index import MatchRecord, build_match_list
from .overlay import HighlightHandle, HighlightOverlay

logger = logging.getLogger(__name__)


class FindSession:
    """
    Find-bar state for one document: walker -> index -> overlay -> cursor,
    fed by a debounced query.

    ``type`` is called for every input change; ``tick`` runs the pending
    search once the debounce delay has passed.
    """

    def __init__(
        self,
        document: Document,
        *,
        debounce_ms: int = 150,
        overlay_id: str = OVERLAY_ID,
        is_visible: VisibilityPredicate = computed_visible,
        scroll_to: Optional[Callable[[HighlightHandle], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        event_log: Optional[EventLog] = None,
    ) -> None:
        self.document = document
        self.overlay_id = overlay_id
        self.is_visible = is_visible
        self.overlay = HighlightOverlay(document.body)
        self.cursor = NavigationCursor(self.overlay, scroll_to=scroll_to)
        self.debouncer: Debouncer[str] = Debouncer(debounce_ms / 1000.0, clock=clock)
        self.event_log = event_log or EventLog(None)
        self.query = ""

    @property
    def matches(self) -> List[MatchRecord]:
        return self.cursor.matches

    @property
    def status(self) -> SearchStatus:
        # nothing to report until the pending search has run
        if self.debouncer.pending:
            return SearchStatus()
        return self.cursor.status(self.query)

    def type(self, text: str) -> None:
        """Input changed: drop highlights and matches now, search after the delay."""
        self.overlay.restore()
        self.cursor.clear()
        self.query = text or ""
        self.debouncer.schedule(self.query)

    def tick(self) -> bool:
        """Run the pending search if it is due. Returns True if one ran."""
        pending = self.debouncer.poll()
        if pending is None:
            return False
        self.search(pending)
        return True

    def flush(self) -> None:
        """Run the pending search immediately (e.g. Enter pressed)."""
        if self.debouncer.pending:
            self.search(self.debouncer.fire() or "")

    def search(self, text: str) -> List[MatchRecord]:
        self.query = text or ""
        self.overlay.restore()
        needle = self.query.strip()
        if not needle:
            self.cursor.clear()
            return []
        segments = walk_text(self.document.body, is_visible=self.is_visible, exclude_id=self.overlay_id)
        matches = build_match_list(needle, segments)
        handles = self.overlay.apply(matches)
        self.cursor.reset(matches, handles)
        skipped = sum(1 for h in handles if h is None)
        logger.debug("Search %r: %d matches (%d not highlighted)", needle, len(matches), skipped)
        self.event_log.write("search", query=needle, matches=len(matches), skipped=skipped)
        return matches

    def next(self) -> Optional[int]:
        return self.cursor.next()

    def prev(self) -> Optional[int]:
        return self.cursor.prev()

    def wants_chat(self) -> bool:
        """True when the query has no matches and should escalate to chat."""
        return bool(self.query.strip()) and self.cursor.is_empty and not self.debouncer.pending

    def close(self) -> None:
        self.debouncer.cancel()
        self.overlay.restore()
        self.cursor.clear()
        self.query = ""
