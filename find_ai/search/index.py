from __future__ import annotations

from typing import Iterable, List

from pydantic import BaseModel, ConfigDict, model_validator

from ..document.model import TextNode
from ..document.walker import TextSegment


def fold(s: str) -> str:
    return (s or "").lower()


class MatchRecord(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    segment: TextSegment
    start: int
    end: int
    text: str

    @model_validator(mode="after")
    def _check_offsets(self) -> "MatchRecord":
        if not (0 <= self.start < self.end <= len(self.segment.text)):
            raise ValueError(
                f"invalid match offsets {self.start}..{self.end} for segment of length {len(self.segment.text)}"
            )
        return self

    @property
    def node(self) -> TextNode:
        return self.segment.node


def find_occurrences(haystack: str, needle: str) -> List[int]:
    """
    Start offsets of every occurrence of ``needle`` in ``haystack``.

    Scanning resumes one character after each hit, so overlapping
    occurrences are all reported ("aa" in "aaa" -> [0, 1]).
    """
    if not needle:
        return []
    out: List[int] = []
    idx = haystack.find(needle)
    while idx != -1:
        out.append(idx)
        idx = haystack.find(needle, idx + 1)
    return out


def build_match_list(query: str, segments: Iterable[TextSegment]) -> List[MatchRecord]:
    needle = fold(query)
    if not needle:
        return []
    matches: List[MatchRecord] = []
    for seg in segments:
        folded = fold(seg.text)
        for start in find_occurrences(folded, needle):
            end = start + len(needle)
            # lower() can change length for a few code points; skip hits that
            # would fall outside the original text
            if end > len(seg.text):
                continue
            matches.append(MatchRecord(segment=seg, start=start, end=end, text=seg.text[start:end]))
    return matches
