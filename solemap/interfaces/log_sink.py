# solemap/interfaces/log_sink.py
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Protocol


class LogTag(str, enum.Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True, slots=True)
class LogEntry:
    """
    One display log entry. Keep this small + stable; the display decides how
    to render it.
    """
    tag: LogTag
    payload: str
    ts_wall: Optional[str] = None

    def render(self) -> str:
        return f"[{self.tag.value}] {self.payload}"


class LogSink(Protocol):
    def on_log(self, entry: LogEntry) -> None: ...
    def on_raw(self, text: str) -> None: ...
