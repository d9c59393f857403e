# solemap/runtime/simulator.py
from __future__ import annotations

import random
from typing import Iterator, Optional, Sequence, Tuple, Union

from solemap.model.codec import pack_channels
from solemap.model.reading import CHANNEL_COUNT, SIDES, UINT8_MAX, FrameEncoding

DEFAULT_BASE_VALUES: Tuple[int, ...] = (88, 122, 199, 145, 101, 92, 130, 88)

SIMULATED_ENCODINGS = (
    FrameEncoding.TAGGED_CSV,
    FrameEncoding.UNTAGGED_CSV,
    FrameEncoding.SPACE_SEPARATED,
    FrameEncoding.BINARY_U32,
    FrameEncoding.BINARY_U8,
)


class SimulatedPeripheral:
    """
    Stand-in for a foot-pressure peripheral when no hardware is attached.

    Each frame is base_values +/- jitter, clamped to the 8-bit range, emitted
    in the chosen wire encoding so it goes through the normal decoder path.
    """

    def __init__(
        self,
        *,
        seed: Optional[int] = None,
        base_values: Sequence[int] = DEFAULT_BASE_VALUES,
        jitter: int = 20,
        encoding: FrameEncoding = FrameEncoding.UNTAGGED_CSV,
        side: str = "LEFT",
    ):
        if len(base_values) != CHANNEL_COUNT:
            raise ValueError(f"base_values must have {CHANNEL_COUNT} entries")
        if jitter < 0:
            raise ValueError("jitter must be >= 0")
        if encoding not in SIMULATED_ENCODINGS:
            raise ValueError(f"Encoding '{encoding.value}' cannot be simulated")
        if side not in SIDES:
            raise ValueError(f"Unknown side '{side}'")

        self._rng = random.Random(seed)
        self.base_values = tuple(int(v) for v in base_values)
        self.jitter = int(jitter)
        self.encoding = encoding
        self.side = side

    def next_values(self) -> Tuple[int, ...]:
        return tuple(
            max(0, min(UINT8_MAX, base + self._rng.randint(-self.jitter, self.jitter)))
            for base in self.base_values
        )

    def encode(self, values: Sequence[int]) -> Union[str, bytes]:
        csv = ",".join(str(v) for v in values)
        if self.encoding is FrameEncoding.TAGGED_CSV:
            return f"PRESSURE_{self.side}: {csv}"
        if self.encoding is FrameEncoding.UNTAGGED_CSV:
            return csv
        if self.encoding is FrameEncoding.SPACE_SEPARATED:
            return " ".join(str(v) for v in values)
        if self.encoding is FrameEncoding.BINARY_U32:
            return pack_channels("uint32", tuple(values))
        return pack_channels("uint8", tuple(values))

    def next_payload(self) -> Union[str, bytes]:
        return self.encode(self.next_values())

    def payloads(self, count: int) -> Iterator[Union[str, bytes]]:
        for _ in range(count):
            yield self.next_payload()
