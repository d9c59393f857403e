# solemap/app/controller.py
from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, Dict, Optional, Tuple

from solemap.app.config import SoleMapConfig
from solemap.core.errors import PreconditionError
from solemap.interfaces.command_sink import CommandSink
from solemap.interfaces.log_sink import LogEntry, LogSink, LogTag
from solemap.model.summary import SummaryResult
from solemap.protocol.decoder import DecodeFailure, DecodeResult, FrameDecoder, Payload
from solemap.runtime.recorder import SessionOutcome, SessionRecorder, wall_clock_now
from solemap.runtime.state import SessionState, SessionStatus


class SoleMapController:
    """
    App-level owner of one decoder and one session recorder.

    The caller's event loop feeds it transport callbacks (on_notification,
    on_connection_change) and a 1 Hz timer (tick). Display output goes to
    `log_sink`; outbound START/STOP to `command_sink`.
    """

    def __init__(
        self,
        config: SoleMapConfig,
        *,
        command_sink: Optional[CommandSink] = None,
        log_sink: Optional[LogSink] = None,
        logger: Optional[logging.Logger] = None,
        clock: Optional[Callable[[], float]] = None,
        wall_clock: Optional[Callable[[], str]] = None,
    ):
        self._config = config
        self._log = logger or logging.getLogger(__name__)
        self._log_sink = log_sink
        self._wall_clock = wall_clock or wall_clock_now

        self._decoder = FrameDecoder(logger=self._log)
        self._recorder = SessionRecorder(
            duration_s=config.duration_s,
            command_sink=command_sink,
            clock=clock,
            wall_clock=self._wall_clock,
            logger=self._log,
        )

        self._history: Deque[SummaryResult] = deque(maxlen=config.history_limit)
        self._device_name: Optional[str] = None

        self._emit(LogTag.INFO, f"Foot pressure system initialized ({config.side.lower()} sole)")

    @property
    def config(self) -> SoleMapConfig:
        return self._config

    @property
    def recorder(self) -> SessionRecorder:
        return self._recorder

    @property
    def history(self) -> Tuple[SummaryResult, ...]:
        return tuple(self._history)

    @property
    def device_name(self) -> Optional[str]:
        return self._device_name

    # --- transport callbacks ---
    def on_connection_change(self, connected: bool, device_name: Optional[str] = None) -> None:
        was_recording = self._recorder.state is SessionState.RECORDING
        self._recorder.set_connected(connected)

        if connected:
            self._device_name = device_name or self._device_name
            self._emit(LogTag.INFO, f"Connected to {self._device_name or 'Unknown Device'}")
            return

        self._emit(LogTag.INFO, "Device disconnected")
        if was_recording:
            self._emit(LogTag.WARNING, "Connection lost during measurement; waiting for timer or manual stop")

    def on_notification(self, payload: Payload) -> DecodeResult:
        result = self._decoder.decode(payload)

        if isinstance(result, DecodeFailure):
            self._log.warning("DECODE_FAILED size=%d reason=%s", result.size, result.reason)
            self._emit_raw(result.payload_text)
            return result

        if not self._recorder.append(result):
            return result

        side = result.side or self._config.side
        self._emit(LogTag.INFO, f"PRESSURE_{side}: {result.format_csv()}")
        if result.is_degraded:
            self._emit(LogTag.WARNING, f"Received single value {result.values[0]}; broadcast to all channels")
        return result

    # --- measurement control ---
    def start_measurement(self, duration_s: Optional[int] = None) -> None:
        try:
            self._recorder.start(duration_s)
        except PreconditionError as e:
            self._emit(LogTag.ERROR, e.message)
            raise

        self._emit(LogTag.INFO, f"Starting {self._recorder.duration_s}-second measurement...")
        self._emit(LogTag.INFO, "Please stand still on the pressure sensors")

    def stop_measurement(self) -> SessionOutcome:
        try:
            outcome = self._recorder.stop()
        except PreconditionError as e:
            self._emit(LogTag.ERROR, e.message)
            raise
        self._report(outcome)
        return outcome

    def tick(self) -> Optional[SessionOutcome]:
        outcome = self._recorder.tick()
        if outcome is not None:
            self._report(outcome)
        return outcome

    # --- views ---
    def heatmap_values(self) -> Tuple[int, ...]:
        return self._recorder.display_values()

    def status(self) -> SessionStatus:
        return self._recorder.status()

    def decoder_stats(self) -> Dict[str, int]:
        return self._decoder.stats()

    # --- internals ---
    def _report(self, outcome: SessionOutcome) -> None:
        if not isinstance(outcome, SummaryResult):
            self._emit(LogTag.WARNING, "No data collected during measurement")
            return

        self._history.append(outcome)

        self._emit(LogTag.INFO, "Measurement completed. Calculating averages...")
        self._emit(LogTag.INFO, f"Processed {outcome.sample_count} data points")
        self._emit(LogTag.INFO, f"Average pressure: {outcome.overall_average} kPa")
        self._emit(LogTag.INFO, f"Max pressure: {outcome.peak_channel_label} = {outcome.peak_value} kPa")
        self._emit(
            LogTag.INFO,
            "Averaged pressure values: " + ", ".join(str(v) for v in outcome.per_channel_average),
        )

        threshold = self._config.peak_warning_kpa
        if outcome.exceeds(threshold):
            self._emit(
                LogTag.WARNING,
                f"Pressure point exceeded {threshold}kPa - consider medical evaluation",
            )

    def _emit(self, tag: LogTag, payload: str) -> None:
        if self._log_sink is None:
            return
        try:
            self._log_sink.on_log(LogEntry(tag=tag, payload=payload, ts_wall=self._wall_clock()))
        except Exception:
            self._log.exception("LOG_SINK_ERROR")

    def _emit_raw(self, text: str) -> None:
        if self._log_sink is None:
            return
        try:
            self._log_sink.on_raw(text)
        except Exception:
            self._log.exception("LOG_SINK_ERROR")
