# solemap/interfaces/command_sink.py
from __future__ import annotations

from typing import Callable, Protocol

from solemap.protocol.commands import encode_command


class CommandSink(Protocol):
    """
    Outbound side of the transport. Fire-and-forget: no acknowledgement is
    awaited. Implementations may raise; callers log and carry on.
    """
    def send_command(self, command: str) -> None: ...


class WriterCommandSink:
    """
    Adapts a byte writer (e.g. a characteristic write callable) to CommandSink.
    """

    def __init__(self, write: Callable[[bytes], object]):
        self._write = write

    def send_command(self, command: str) -> None:
        self._write(encode_command(command))
