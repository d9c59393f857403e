# solemap/protocol/commands.py
from __future__ import annotations

# Opaque outbound commands; the peripheral sends no acknowledgement.
CMD_START = "START"
CMD_STOP = "STOP"

COMMANDS = (CMD_START, CMD_STOP)


def encode_command(command: str) -> bytes:
    """Wire form for transports that write bytes (UTF-8 text, no terminator)."""
    if command not in COMMANDS:
        raise ValueError(f"Unknown command '{command}'")
    return command.encode("utf-8")
