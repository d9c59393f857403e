# solemap/core/errors.py
from __future__ import annotations


class SoleMapError(Exception):
    """
    Base class for all expected operational errors in SoleMap.

    None of these are fatal: the engine stays usable after any of them.
    """

    #: Stable machine-readable identifier (for CLI exit mapping, UI badges, etc.)
    code: str = "unknown"

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration errors (nothing started yet)
# ---------------------------------------------------------------------------

class ConfigError(SoleMapError):
    """
    Configuration file is missing, unreadable or inconsistent.

    Examples:
      - YAML syntax error
      - missing 'solemap' root node
      - duration_s <= 0, unknown side
    """
    code = "config_error"


# ---------------------------------------------------------------------------
# Session preconditions (caller-level, recoverable, no state mutated)
# ---------------------------------------------------------------------------

class PreconditionError(SoleMapError):
    """
    A session operation was called in a state where it is not legal.
    """
    code = "precondition_failed"


class NotConnectedError(PreconditionError):
    """
    start() was requested while the peripheral connection signal is false.
    """
    code = "not_connected"


class AlreadyRecordingError(PreconditionError):
    """
    start() was requested while a measurement is already recording.
    """
    code = "already_recording"


class InvalidStateError(PreconditionError):
    """
    stop() or a strict append() was called outside the Recording state.
    """
    code = "invalid_state"
