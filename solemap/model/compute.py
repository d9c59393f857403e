# solemap/model/compute.py
from __future__ import annotations

from typing import List, Sequence

from .reading import CHANNEL_COUNT, ChannelReading
from .summary import SummaryResult


def round_half_up_div(total: int, count: int) -> int:
    """
    Integer division rounded to nearest, halves rounded up.
    Exact for arbitrary-size non-negative ints (no float detour).
    """
    if count <= 0:
        raise ValueError("count must be positive")
    if total < 0:
        raise ValueError("total must be non-negative")
    return (2 * total + count) // (2 * count)


def argmax_lowest(vals: Sequence[int]) -> int:
    """Index of the max value; the lowest index wins on ties."""
    if not vals:
        raise ValueError("argmax requires at least one value")
    best = 0
    for i in range(1, len(vals)):
        if vals[i] > vals[best]:
            best = i
    return best


def channel_sums(readings: Sequence[ChannelReading]) -> List[int]:
    sums = [0] * CHANNEL_COUNT
    # arrival order; python ints do not overflow
    for r in readings:
        for i, v in enumerate(r.values):
            sums[i] += v
    return sums


def reduce_readings(readings: Sequence[ChannelReading]) -> SummaryResult:
    """
    Reduce a non-empty, ordered sequence of readings into a SummaryResult.

    Two-stage rounding: each channel average is rounded first, the overall
    average is the rounded mean of those rounded values. Output compatibility
    depends on keeping it that way.
    """
    if not readings:
        raise ValueError("reduce requires at least one reading")

    count = len(readings)
    averages = tuple(round_half_up_div(s, count) for s in channel_sums(readings))

    peak_idx = argmax_lowest(averages)
    overall = round_half_up_div(sum(averages), CHANNEL_COUNT)

    return SummaryResult(
        per_channel_average=averages,
        peak_channel_index=peak_idx,
        peak_value=averages[peak_idx],
        overall_average=overall,
        sample_count=count,
    )
