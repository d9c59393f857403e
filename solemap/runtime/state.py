# solemap/runtime/state.py
from __future__ import annotations

import enum
from dataclasses import dataclass


class SessionState(str, enum.Enum):
    """
    Idle -> Recording -> Finalizing -> Completed

    Completed is terminal per run; start() from Completed begins a new run.
    Finalizing is transient (stop() reduces synchronously).
    """
    IDLE = "idle"
    RECORDING = "recording"
    FINALIZING = "finalizing"
    COMPLETED = "completed"

    @property
    def can_start(self) -> bool:
        return self in (SessionState.IDLE, SessionState.COMPLETED)


@dataclass(frozen=True)
class SessionStatus:
    """
    Immutable snapshot of a SessionRecorder, safe to hand to display code.
    """
    state: SessionState
    connected: bool
    duration_s: int
    remaining_s: int
    sample_count: int
    dropped_frames: int
    has_summary: bool
