from __future__ import annotations

from typing import Dict, Iterator, List, Literal

from pydantic import BaseModel

HISTORY_LIMIT = 10


class Turn(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ConversationHistory:
    """Ordered chat turns, trimmed to the most recent ``limit`` before each request."""

    def __init__(self, limit: int = HISTORY_LIMIT) -> None:
        self.limit = limit
        self.turns: List[Turn] = []

    def __len__(self) -> int:
        return len(self.turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.turns)

    def trim(self) -> None:
        if len(self.turns) > self.limit:
            self.turns = self.turns[-self.limit :]

    def add_user(self, content: str) -> None:
        """Trim first, then append, so a request carries at most limit + 1 turns."""
        self.trim()
        self.turns.append(Turn(role="user", content=content))

    def add_assistant(self, content: str) -> None:
        self.turns.append(Turn(role="assistant", content=content))

    def clear(self) -> None:
        self.turns = []

    def as_messages(self) -> List[Dict[str, str]]:
        return [t.model_dump() for t in self.turns]
