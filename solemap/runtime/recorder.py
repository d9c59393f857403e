# solemap/runtime/recorder.py
from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable, List, Optional, Tuple, Union

from solemap.core.errors import AlreadyRecordingError, InvalidStateError, NotConnectedError
from solemap.interfaces.command_sink import CommandSink
from solemap.model.compute import reduce_readings
from solemap.model.reading import ChannelReading, TimestampedReading, zero_values
from solemap.model.summary import EmptySessionCondition, SummaryResult
from solemap.protocol.commands import CMD_START, CMD_STOP
from solemap.runtime.state import SessionState, SessionStatus

DEFAULT_DURATION_S = 20

SessionOutcome = Union[SummaryResult, EmptySessionCondition]


def wall_clock_now() -> str:
    return datetime.now().strftime("%H:%M:%S")


def _validate_duration(duration_s: int) -> int:
    if isinstance(duration_s, bool) or not isinstance(duration_s, int) or duration_s <= 0:
        raise ValueError(f"duration_s must be a positive integer (got {duration_s!r})")
    return duration_s


class SessionRecorder:
    """
    Timed measurement session.

    - No clock or thread of its own: the caller drives tick() once per second.
    - Readings are kept in arrival order; stop() reduces them synchronously.
    - START/STOP go out through `command_sink` only while connected.
    """

    def __init__(
        self,
        *,
        duration_s: int = DEFAULT_DURATION_S,
        command_sink: Optional[CommandSink] = None,
        clock: Optional[Callable[[], float]] = None,
        wall_clock: Optional[Callable[[], str]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._default_duration_s = _validate_duration(duration_s)
        self._duration_s = self._default_duration_s
        self._command_sink = command_sink
        self._clock = clock or time.monotonic
        self._wall_clock = wall_clock or wall_clock_now
        self._log = logger or logging.getLogger(__name__)

        self._state = SessionState.IDLE
        self._connected = False
        self._remaining_s = self._duration_s
        self._elapsed_s = 0

        self._readings: List[TimestampedReading] = []
        self._summary: Optional[SummaryResult] = None
        self._outcome: Optional[SessionOutcome] = None
        self._dropped_frames = 0

    # --- state ---
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def duration_s(self) -> int:
        return self._duration_s

    @property
    def remaining_s(self) -> int:
        return self._remaining_s

    @property
    def readings(self) -> Tuple[TimestampedReading, ...]:
        return tuple(self._readings)

    @property
    def sample_count(self) -> int:
        return len(self._readings)

    @property
    def latest(self) -> Optional[TimestampedReading]:
        return self._readings[-1] if self._readings else None

    @property
    def summary(self) -> Optional[SummaryResult]:
        return self._summary

    @property
    def outcome(self) -> Optional[SessionOutcome]:
        return self._outcome

    @property
    def dropped_frames(self) -> int:
        return self._dropped_frames

    def set_connected(self, connected: bool) -> None:
        connected = bool(connected)
        if connected != self._connected:
            self._log.info("CONNECTION_CHANGED connected=%s state=%s", connected, self._state.value)
        self._connected = connected

    # --- control ---
    def start(self, duration_s: Optional[int] = None) -> None:
        if self._state is SessionState.RECORDING:
            raise AlreadyRecordingError(
                "A measurement is already recording.",
                hint="Stop the current measurement first.",
                details={"remaining_s": self._remaining_s},
            )
        if not self._state.can_start:
            raise InvalidStateError(
                f"Cannot start while {self._state.value}.",
                details={"state": self._state.value},
            )
        if not self._connected:
            raise NotConnectedError(
                "No peripheral connection.",
                hint="Connect to the pressure sensor before starting a measurement.",
            )

        duration = self._default_duration_s if duration_s is None else _validate_duration(duration_s)

        self._duration_s = duration
        self._remaining_s = duration
        self._elapsed_s = 0
        self._readings = []
        self._summary = None
        self._outcome = None
        self._state = SessionState.RECORDING

        self._log.info("SESSION_START duration_s=%d", duration)
        self._send(CMD_START)

    def append(self, reading: ChannelReading, *, strict: bool = False) -> bool:
        if self._state is not SessionState.RECORDING:
            self._dropped_frames += 1
            self._log.warning("FRAME_DROPPED state=%s dropped=%d", self._state.value, self._dropped_frames)
            if strict:
                raise InvalidStateError(
                    f"Cannot append while {self._state.value}.",
                    details={"state": self._state.value},
                )
            return False

        self._readings.append(
            TimestampedReading(
                reading=reading,
                ts_monotonic=float(self._clock()),
                ts_wall=self._wall_clock(),
            )
        )
        return True

    def tick(self) -> Optional[SessionOutcome]:
        """One countdown unit. Returns the outcome when this tick finalized the session."""
        if self._state is not SessionState.RECORDING:
            return None

        self._elapsed_s += 1
        self._remaining_s = max(0, self._remaining_s - 1)
        if self._remaining_s == 0:
            self._log.info("SESSION_TIMEOUT duration_s=%d", self._duration_s)
            return self.stop()
        return None

    def stop(self) -> SessionOutcome:
        if self._state is not SessionState.RECORDING:
            raise InvalidStateError(
                f"Cannot stop while {self._state.value}.",
                hint="stop() is only legal while recording.",
                details={"state": self._state.value},
            )

        self._state = SessionState.FINALIZING
        readings = [r.reading for r in self._readings]
        self._send(CMD_STOP)

        outcome: SessionOutcome
        if not readings:
            outcome = EmptySessionCondition(duration_s=self._duration_s, elapsed_s=self._elapsed_s)
            self._log.warning("SESSION_EMPTY duration_s=%d elapsed_s=%d", self._duration_s, self._elapsed_s)
        else:
            outcome = reduce_readings(readings)
            self._summary = outcome
            self._log.info(
                "SESSION_COMPLETE samples=%d overall=%d peak=P%d:%d",
                outcome.sample_count,
                outcome.overall_average,
                outcome.peak_channel_index + 1,
                outcome.peak_value,
            )

        self._outcome = outcome
        self._state = SessionState.COMPLETED
        return outcome

    # --- views ---
    def live_values(self) -> Tuple[int, ...]:
        latest = self.latest
        return latest.values if latest is not None else zero_values()

    def display_values(self) -> Tuple[int, ...]:
        """Averages once finalized, live values while recording, zeros otherwise."""
        if self._state is SessionState.COMPLETED and self._summary is not None:
            return self._summary.per_channel_average
        if self._state is SessionState.RECORDING:
            return self.live_values()
        return zero_values()

    def format_remaining(self) -> str:
        mins, secs = divmod(self._remaining_s, 60)
        return f"{mins:02d}:{secs:02d}"

    def status(self) -> SessionStatus:
        return SessionStatus(
            state=self._state,
            connected=self._connected,
            duration_s=self._duration_s,
            remaining_s=self._remaining_s,
            sample_count=len(self._readings),
            dropped_frames=self._dropped_frames,
            has_summary=self._summary is not None,
        )

    def _send(self, command: str) -> None:
        if self._command_sink is None or not self._connected:
            return
        try:
            self._command_sink.send_command(command)
        except Exception as e:
            self._log.warning("COMMAND_SEND_FAILED cmd=%s err=%s", command, e)
