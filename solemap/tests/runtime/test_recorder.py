# solemap/tests/runtime/test_recorder.py
from __future__ import annotations

import pytest

from solemap.core.errors import AlreadyRecordingError, InvalidStateError, NotConnectedError
from solemap.model.reading import ChannelReading, FrameEncoding
from solemap.model.summary import EmptySessionCondition, SummaryResult
from solemap.runtime.recorder import SessionRecorder
from solemap.runtime.state import SessionState


class FakeCommandSink:
    def __init__(self):
        self.sent: list[str] = []
        self.raise_on_send: Exception | None = None

    def send_command(self, command: str) -> None:
        if self.raise_on_send:
            raise self.raise_on_send
        self.sent.append(command)


class FakeClock:
    def __init__(self):
        self.t = 0.0

    def __call__(self) -> float:
        self.t += 0.1
        return self.t


def _r(*vals: int) -> ChannelReading:
    return ChannelReading(values=tuple(vals), encoding=FrameEncoding.UNTAGGED_CSV)


def _recorder(duration_s: int = 20, connected: bool = True, sink=None) -> SessionRecorder:
    rec = SessionRecorder(
        duration_s=duration_s,
        command_sink=sink,
        clock=FakeClock(),
        wall_clock=lambda: "12:00:00",
    )
    rec.set_connected(connected)
    return rec


def test_initial_state():
    rec = SessionRecorder()
    assert rec.state is SessionState.IDLE
    assert rec.connected is False
    assert rec.duration_s == 20
    assert rec.remaining_s == 20
    assert rec.summary is None
    assert rec.display_values() == (0,) * 8


@pytest.mark.parametrize("bad", [0, -1, True, 1.5, "20"])
def test_invalid_duration_rejected(bad):
    with pytest.raises(ValueError):
        SessionRecorder(duration_s=bad)


def test_start_without_connection_stays_idle():
    rec = _recorder(connected=False)
    with pytest.raises(NotConnectedError) as ei:
        rec.start()
    assert ei.value.code == "not_connected"
    assert ei.value.hint
    assert rec.state is SessionState.IDLE


def test_start_while_recording_is_rejected():
    rec = _recorder()
    rec.start()
    with pytest.raises(AlreadyRecordingError):
        rec.start()
    assert rec.state is SessionState.RECORDING


def test_start_with_duration_override_does_not_change_default():
    rec = _recorder(duration_s=20)
    rec.start(5)
    assert rec.duration_s == 5
    assert rec.remaining_s == 5
    rec.stop()
    rec.start()
    assert rec.duration_s == 20


def test_early_stop_reduces_collected_frames():
    rec = _recorder()
    rec.start()
    for i in range(5):
        assert rec.append(_r(i, i, i, i, i, i, i, 10))
    for _ in range(3):
        assert rec.tick() is None
    assert rec.remaining_s == 17
    assert rec.format_remaining() == "00:17"

    res = rec.stop()
    assert isinstance(res, SummaryResult)
    assert res.sample_count == 5
    assert res.per_channel_average == (2, 2, 2, 2, 2, 2, 2, 10)
    assert res.peak_channel_index == 7
    assert rec.state is SessionState.COMPLETED
    assert rec.summary is res
    assert rec.outcome is res


def test_second_stop_raises_and_keeps_summary():
    rec = _recorder()
    rec.start()
    rec.append(_r(1, 2, 3, 4, 5, 6, 7, 8))
    first = rec.stop()
    with pytest.raises(InvalidStateError):
        rec.stop()
    assert rec.summary is first
    assert rec.state is SessionState.COMPLETED


def test_stop_from_idle_raises():
    rec = _recorder()
    with pytest.raises(InvalidStateError):
        rec.stop()
    assert rec.state is SessionState.IDLE


def test_empty_session_reports_condition_without_summary():
    rec = _recorder(duration_s=3)
    rec.start()
    rec.tick()
    out = rec.stop()
    assert isinstance(out, EmptySessionCondition)
    assert out.duration_s == 3
    assert out.elapsed_s == 1
    assert out.reason == "no data collected"
    assert rec.summary is None
    assert rec.state is SessionState.COMPLETED
    assert rec.display_values() == (0,) * 8


def test_timeout_finalizes_on_last_tick():
    rec = _recorder(duration_s=3)
    rec.start()
    rec.append(_r(10, 20, 30, 40, 50, 60, 70, 80))
    assert rec.tick() is None
    assert rec.tick() is None
    out = rec.tick()
    assert isinstance(out, SummaryResult)
    assert rec.remaining_s == 0
    assert rec.state is SessionState.COMPLETED
    assert rec.tick() is None


def test_tick_outside_recording_is_noop():
    rec = _recorder(duration_s=5)
    assert rec.tick() is None
    assert rec.remaining_s == 5
    assert rec.state is SessionState.IDLE


def test_append_outside_recording_counts_dropped_frame():
    rec = _recorder()
    assert rec.append(_r(1, 1, 1, 1, 1, 1, 1, 1)) is False
    assert rec.dropped_frames == 1
    assert rec.sample_count == 0

    rec.start()
    rec.append(_r(1, 1, 1, 1, 1, 1, 1, 1))
    rec.stop()
    assert rec.append(_r(2, 2, 2, 2, 2, 2, 2, 2)) is False
    assert rec.dropped_frames == 2
    assert rec.summary.sample_count == 1


def test_strict_append_outside_recording_raises():
    rec = _recorder()
    with pytest.raises(InvalidStateError) as ei:
        rec.append(_r(1, 1, 1, 1, 1, 1, 1, 1), strict=True)
    assert ei.value.details == {"state": "idle"}
    assert rec.dropped_frames == 1


def test_readings_are_timestamped_in_arrival_order():
    rec = _recorder()
    rec.start()
    rec.append(_r(1, 0, 0, 0, 0, 0, 0, 0))
    rec.append(_r(2, 0, 0, 0, 0, 0, 0, 0))
    rs = rec.readings
    assert [r.values[0] for r in rs] == [1, 2]
    assert rs[0].ts_monotonic < rs[1].ts_monotonic
    assert rs[0].ts_wall == "12:00:00"
    assert rec.latest is rs[1]


def test_restart_clears_previous_run():
    rec = _recorder()
    rec.start()
    rec.append(_r(5, 5, 5, 5, 5, 5, 5, 5))
    rec.stop()

    rec.start()
    assert rec.sample_count == 0
    assert rec.summary is None
    assert rec.outcome is None
    assert rec.state is SessionState.RECORDING


def test_display_values_follow_state():
    rec = _recorder()
    rec.start()
    assert rec.display_values() == (0,) * 8
    rec.append(_r(1, 2, 3, 4, 5, 6, 7, 8))
    rec.append(_r(3, 4, 5, 6, 7, 8, 9, 10))
    assert rec.display_values() == (3, 4, 5, 6, 7, 8, 9, 10)
    rec.stop()
    assert rec.display_values() == (2, 3, 4, 5, 6, 7, 8, 9)


def test_commands_sent_only_while_connected():
    sink = FakeCommandSink()
    rec = _recorder(sink=sink)
    rec.start()
    rec.stop()
    assert sink.sent == ["START", "STOP"]

    rec.start()
    rec.set_connected(False)
    rec.stop()
    assert sink.sent == ["START", "STOP", "START"]


def test_command_send_failure_does_not_break_session(caplog):
    sink = FakeCommandSink()
    sink.raise_on_send = OSError("link down")
    rec = _recorder(sink=sink)
    rec.start()
    assert rec.state is SessionState.RECORDING
    assert any("COMMAND_SEND_FAILED" in r.getMessage() for r in caplog.records)


def test_disconnect_during_recording_keeps_session_running():
    rec = _recorder(duration_s=2)
    rec.start()
    rec.append(_r(1, 1, 1, 1, 1, 1, 1, 1))
    rec.set_connected(False)
    assert rec.state is SessionState.RECORDING
    rec.tick()
    assert isinstance(rec.tick(), SummaryResult)


def test_format_remaining_minutes():
    rec = _recorder(duration_s=125)
    assert rec.format_remaining() == "02:05"


def test_status_snapshot():
    rec = _recorder(duration_s=10)
    rec.start()
    rec.append(_r(1, 1, 1, 1, 1, 1, 1, 1))
    rec.tick()
    st = rec.status()
    assert st.state is SessionState.RECORDING
    assert st.connected is True
    assert st.duration_s == 10
    assert st.remaining_s == 9
    assert st.sample_count == 1
    assert st.dropped_frames == 0
    assert st.has_summary is False


class RestartOnStopSink:
    """Calls back into the recorder while STOP is being sent."""

    def __init__(self):
        self.recorder: SessionRecorder | None = None
        self.errors: list[Exception] = []

    def send_command(self, command: str) -> None:
        if command == "STOP" and self.recorder is not None:
            try:
                self.recorder.start(5)
            except InvalidStateError as e:
                self.errors.append(e)


def test_start_during_finalizing_is_rejected_and_keeps_frames():
    sink = RestartOnStopSink()
    rec = _recorder(duration_s=20, sink=sink)
    sink.recorder = rec
    rec.start()
    for _ in range(5):
        rec.append(_r(4, 4, 4, 4, 4, 4, 4, 4))

    out = rec.stop()

    assert isinstance(out, SummaryResult)
    assert out.sample_count == 5
    assert rec.state is SessionState.COMPLETED
    assert rec.duration_s == 20
    assert len(sink.errors) == 1
    assert sink.errors[0].details == {"state": "finalizing"}


def test_dropped_frame_is_logged_as_warning(caplog):
    rec = _recorder()
    rec.append(_r(1, 1, 1, 1, 1, 1, 1, 1))
    assert any(
        r.levelname == "WARNING" and "FRAME_DROPPED" in r.getMessage() for r in caplog.records
    )
