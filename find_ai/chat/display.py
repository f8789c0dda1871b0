from __future__ import annotations

from typing import List, Optional, Sequence

from rich.console import Console, Group
from rich.live import Live
from rich.spinner import Spinner
from rich.text import Text

from ..render.console import to_rich
from ..render.nodes import BlockNode


class Display:
    """
    Where a chat response goes. ``update`` replaces the partial response
    shown so far; ``message`` adds a standalone message (errors, config
    prompts); ``notice`` is a one-line status above the response.
    """

    def start(self) -> None:
        pass

    def update(self, blocks: Sequence[BlockNode]) -> None:
        pass

    def message(self, blocks: Sequence[BlockNode]) -> None:
        pass

    def notice(self, text: str) -> None:
        pass

    def finish(self) -> None:
        pass


class BufferDisplay(Display):
    """Keeps everything in memory; used by tests and non-interactive callers."""

    def __init__(self) -> None:
        self.blocks: List[BlockNode] = []
        self.updates = 0
        self.messages: List[List[BlockNode]] = []
        self.notices: List[str] = []
        self.finished = False

    def update(self, blocks: Sequence[BlockNode]) -> None:
        self.blocks = list(blocks)
        self.updates += 1

    def message(self, blocks: Sequence[BlockNode]) -> None:
        self.messages.append(list(blocks))

    def notice(self, text: str) -> None:
        self.notices.append(text)

    def finish(self) -> None:
        self.finished = True


class LiveDisplay(Display):
    """Terminal display: the response is re-rendered in place with rich.Live."""

    def __init__(self, console: Optional[Console] = None, refresh_per_second: float = 12) -> None:
        self.console = console or Console()
        self.refresh_per_second = refresh_per_second
        self._live: Optional[Live] = None
        self.blocks: List[BlockNode] = []

    def start(self) -> None:
        self._live = Live(
            Spinner("dots", text=Text("Thinking...", style="dim")),
            console=self.console,
            refresh_per_second=self.refresh_per_second,
            transient=False,
        )
        self._live.start()

    def update(self, blocks: Sequence[BlockNode]) -> None:
        self.blocks = list(blocks)
        if self._live is not None:
            self._live.update(to_rich(self.blocks))

    def message(self, blocks: Sequence[BlockNode]) -> None:
        self.console.print(to_rich(blocks))

    def notice(self, text: str) -> None:
        self.console.print(Text(text, style="yellow"))

    def finish(self) -> None:
        if self._live is not None:
            if not self.blocks:
                self._live.update(Group())
            self._live.stop()
            self._live = None
