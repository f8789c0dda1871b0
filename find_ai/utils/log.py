from __future__ import annotations

import datetime
import json
import logging
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class EventLog:
    """Append-only JSON-lines event log (one object per line)."""

    def __init__(self, path: Optional[Path]):
        self.path = Path(path) if path else None
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def write(self, event: str, **fields: Any) -> None:
        if self.path is None:
            return
        obj = {"ts": datetime.datetime.now().isoformat(timespec="seconds"), "event": event}
        obj.update(fields)
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(obj, ensure_ascii=False, default=str) + "\n")
        except OSError as e:
            logger.warning("Could not append to %s: %s", self.path, e)
