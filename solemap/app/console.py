# solemap/app/console.py
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

from solemap.interfaces.log_sink import LogEntry, LogSink, LogTag
from solemap.protocol.validator import is_well_formed


@dataclass(frozen=True)
class ConsoleLine:
    text: str
    tag: Optional[LogTag]  # None for raw diagnostic lines
    well_formed: bool


class ConsoleLog(LogSink):
    """
    Bounded in-memory console for the display layer.

    Keeps the tagged log stream and the raw diagnostic stream side by side;
    the oldest lines fall off once max_lines is reached.
    """

    def __init__(self, *, max_lines: int = 500):
        if max_lines <= 0:
            raise ValueError("max_lines must be > 0")
        self._entries: Deque[LogEntry] = deque(maxlen=max_lines)
        self._raw: Deque[str] = deque(maxlen=max_lines)

    def on_log(self, entry: LogEntry) -> None:
        self._entries.append(entry)

    def on_raw(self, text: str) -> None:
        self._raw.append(text)

    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def lines(self) -> List[ConsoleLine]:
        out: List[ConsoleLine] = []
        for e in self._entries:
            text = e.render()
            out.append(ConsoleLine(text=text, tag=e.tag, well_formed=is_well_formed(text)))
        return out

    def raw_lines(self) -> List[ConsoleLine]:
        return [ConsoleLine(text=t, tag=None, well_formed=is_well_formed(t)) for t in self._raw]

    def malformed(self) -> List[ConsoleLine]:
        return [ln for ln in self.lines() + self.raw_lines() if not ln.well_formed]

    def clear(self) -> None:
        self._entries.clear()
        self._raw.clear()
