from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Dict, Optional, TextIO

# Third-party loggers that chatter at INFO/DEBUG during streaming requests.
QUIET_LIBRARIES = ("urllib3", "requests", "charset_normalizer")

_SHORT = "%(levelname)s %(name)s - %(message)s"
_LONG = "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(filename)s:%(lineno)d - %(message)s"


class StderrFormatter(logging.Formatter):
    """
    One record per line, either human readable or as a JSON object.

    The readable form gains timestamp, thread and source location only when
    ``detailed`` is set (the CLI sets it for ``--verbose``).
    """

    def __init__(self, as_json: bool = False, detailed: bool = False) -> None:
        super().__init__(fmt=_LONG if detailed else _SHORT, datefmt="%Y-%m-%d %H:%M:%S")
        self.as_json = as_json

    def format(self, record: logging.LogRecord) -> str:
        if not self.as_json:
            return super().format(record)
        fields: Dict[str, Any] = dict(
            time=self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            severity=record.levelname,
            source=f"{record.name}:{record.lineno}",
            thread=record.threadName,
            text=record.getMessage(),
        )
        if record.exc_info:
            fields["traceback"] = self.formatException(record.exc_info)
        return json.dumps(fields, ensure_ascii=False)


def coerce_level(level: str | int | None) -> int:
    """Map ``"debug"``, ``"10"`` or ``10`` to a logging level; anything else is INFO."""
    if isinstance(level, int):
        return level
    name = str(level or "").strip().upper()
    if name.isdigit():
        return int(name)
    known = logging.getLevelName(name)
    return known if isinstance(known, int) else logging.INFO


def setup_logging(
    level: str | int | None = None,
    json_logs: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Point the root logger at stderr (or ``stream``).

    ``level`` wins over the LOG_LEVEL environment variable, which wins over
    INFO. Repeated calls swap the handler rather than adding another.
    """
    resolved = coerce_level(level if level is not None else os.getenv("LOG_LEVEL"))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(StderrFormatter(as_json=json_logs, detailed=resolved <= logging.DEBUG))

    root = logging.getLogger()
    for old in root.handlers[:]:
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(resolved)

    floor = max(resolved, logging.WARNING)
    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(floor)
