# solemap/model/summary.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .reading import CHANNEL_COUNT, CHANNEL_LABELS


@dataclass(frozen=True)
class SummaryResult:
    """
    Reduction of a finalized session. Always built whole by reduce_readings().

    per_channel_average: rounded mean per channel (P1..P8)
    peak_channel_index:  0-based argmax of the rounded averages (lowest index on ties)
    peak_value:          per_channel_average[peak_channel_index]
    overall_average:     rounded mean of the 8 rounded channel averages
    sample_count:        number of frames reduced
    """
    per_channel_average: Tuple[int, ...]
    peak_channel_index: int
    peak_value: int
    overall_average: int
    sample_count: int

    def __post_init__(self) -> None:
        if len(self.per_channel_average) != CHANNEL_COUNT:
            raise ValueError("per_channel_average must have 8 entries")
        if not 0 <= self.peak_channel_index < CHANNEL_COUNT:
            raise ValueError(f"peak_channel_index {self.peak_channel_index} out of range")
        if self.sample_count <= 0:
            raise ValueError("SummaryResult requires at least one sample")

    @property
    def peak_channel_label(self) -> str:
        return CHANNEL_LABELS[self.peak_channel_index]

    def exceeds(self, threshold: int) -> bool:
        return self.peak_value > threshold

    def as_dict(self) -> dict:
        """Export record consumed by report/export collaborators."""
        return {
            "per_channel_average": list(self.per_channel_average),
            "peak_channel_index": self.peak_channel_index,
            "peak_value": self.peak_value,
            "overall_average": self.overall_average,
            "sample_count": self.sample_count,
        }


@dataclass(frozen=True)
class EmptySessionCondition:
    """
    Outcome of finalizing a session that buffered no readings.
    Expected and recoverable. Carries no averages.
    """
    duration_s: int
    elapsed_s: int
    reason: str = "no data collected"

    def as_dict(self) -> dict:
        return {
            "reason": self.reason,
            "duration_s": self.duration_s,
            "elapsed_s": self.elapsed_s,
        }
