# solemap/model/reading.py
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

CHANNEL_COUNT = 8
UINT32_MAX = 2**32 - 1
UINT8_MAX = 2**8 - 1

CHANNEL_LABELS: Tuple[str, ...] = tuple(f"P{i + 1}" for i in range(CHANNEL_COUNT))

SIDES = ("LEFT", "RIGHT")


class FrameEncoding(str, enum.Enum):
    """Wire encodings a frame may arrive in, in decoder priority order."""

    TAGGED_CSV = "tagged_csv"
    UNTAGGED_CSV = "untagged_csv"
    SPACE_SEPARATED = "space_separated"
    BINARY_U32 = "binary_u32"
    BINARY_U8 = "binary_u8"
    SCALAR_BROADCAST = "scalar_broadcast"


@dataclass(frozen=True)
class ChannelReading:
    """
    One decoded frame: simultaneous pressure samples for channels P1..P8.

    values: exactly 8 ints in [0, 2^32-1]
    encoding: which wire encoding matched
    side: "LEFT"/"RIGHT" when the frame carried a PRESSURE_<SIDE>: tag
    """
    values: Tuple[int, ...]
    encoding: FrameEncoding
    side: Optional[str] = None

    def __post_init__(self) -> None:
        vals = tuple(int(v) for v in self.values)
        if len(vals) != CHANNEL_COUNT:
            raise ValueError(f"ChannelReading needs {CHANNEL_COUNT} values, got {len(vals)}")
        for v in vals:
            if v < 0 or v > UINT32_MAX:
                raise ValueError(f"Channel value {v} outside [0, {UINT32_MAX}]")
        if self.side is not None and self.side not in SIDES:
            raise ValueError(f"Unknown side '{self.side}'")
        object.__setattr__(self, "values", vals)

    @property
    def is_degraded(self) -> bool:
        # single scalar broadcast to all channels, not a genuine 8-channel frame
        return self.encoding is FrameEncoding.SCALAR_BROADCAST

    def as_dict(self) -> dict:
        return {
            "values": list(self.values),
            "encoding": self.encoding.value,
            "side": self.side,
        }

    def format_csv(self) -> str:
        return ",".join(str(v) for v in self.values)


@dataclass(frozen=True)
class TimestampedReading:
    """A ChannelReading as captured by a session, in arrival order."""
    reading: ChannelReading
    ts_monotonic: float
    ts_wall: str

    @property
    def values(self) -> Tuple[int, ...]:
        return self.reading.values


def zero_values() -> Tuple[int, ...]:
    return (0,) * CHANNEL_COUNT


def fit_channels(values: Iterable[int]) -> Tuple[int, ...]:
    """Truncate to the first 8 values and right-pad with zeros."""
    out = list(values)[:CHANNEL_COUNT]
    out.extend([0] * (CHANNEL_COUNT - len(out)))
    return tuple(out)
