"""Server-sent-event frame decoding for chat-completion streams."""

from __future__ import annotations

import codecs
import json
import logging
from typing import Iterable, Iterator, List, Optional

from pydantic import BaseModel

from ..errors import StreamParseError

logger = logging.getLogger(__name__)

DONE = "[DONE]"
DATA_PREFIX = "data:"


class Frame(BaseModel):
    data: str
    done: bool = False


class FrameDecoder:
    """
    Incremental bytes -> frames.

    Chunks may split UTF-8 sequences and lines anywhere; the incomplete tail
    is carried into the next ``feed``.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    def feed(self, chunk: bytes) -> List[Frame]:
        self._pending += self._decoder.decode(chunk)
        lines = self._pending.split("\n")
        self._pending = lines.pop()
        return [f for f in (_line_to_frame(ln) for ln in lines) if f is not None]

    def close(self) -> List[Frame]:
        self._pending += self._decoder.decode(b"", final=True)
        tail, self._pending = self._pending, ""
        frame = _line_to_frame(tail)
        return [frame] if frame is not None else []


def _line_to_frame(line: str) -> Optional[Frame]:
    line = line.rstrip("\r")
    if not line.startswith(DATA_PREFIX):
        # comments (": OPENROUTER PROCESSING"), event names, keep-alives
        return None
    data = line[len(DATA_PREFIX):]
    if data.startswith(" "):
        data = data[1:]
    return Frame(data=data, done=data.strip() == DONE)


def delta_content(frame: Frame) -> str:
    """``choices[0].delta.content`` of one frame ('' when absent)."""
    if not frame.data.strip():
        return ""
    try:
        payload = json.loads(frame.data)
    except json.JSONDecodeError as e:
        raise StreamParseError(f"malformed stream frame: {e}", frame=frame.data) from e
    if not isinstance(payload, dict):
        raise StreamParseError("stream frame is not a JSON object", frame=frame.data)
    choices = payload.get("choices") or []
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0] if isinstance(choices[0], dict) else {}
    delta = first.get("delta") or {}
    content = delta.get("content") if isinstance(delta, dict) else None
    return content if isinstance(content, str) else ""


def iter_deltas(chunks: Iterable[bytes]) -> Iterator[str]:
    """
    Content deltas from a raw byte stream, stopping at ``[DONE]``.
    Malformed frames are logged and skipped.
    """
    decoder = FrameDecoder()

    def _frames() -> Iterator[Frame]:
        for chunk in chunks:
            yield from decoder.feed(chunk)
        yield from decoder.close()

    for frame in _frames():
        if frame.done:
            return
        try:
            content = delta_content(frame)
        except StreamParseError as e:
            logger.warning("Skipping stream frame: %s (frame=%r)", e, e.frame[:200])
            continue
        if content:
            yield content
