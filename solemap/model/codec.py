# solemap/model/codec.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple
import struct

from .reading import CHANNEL_COUNT


@dataclass(frozen=True)
class PrimitiveCodec:
    fmt_le: str  # little-endian struct format (single item, no prefix)
    size: int


PRIMITIVES: Dict[str, PrimitiveCodec] = {
    "uint8": PrimitiveCodec(fmt_le="B", size=1),
    "uint32": PrimitiveCodec(fmt_le="I", size=4),
}


def primitive_size(encode: str) -> int:
    enc = encode.lower()
    if enc not in PRIMITIVES:
        raise NotImplementedError(f"Unknown encode type '{encode}'")
    return PRIMITIVES[enc].size


def frame_size(encode: str, count: int = CHANNEL_COUNT) -> int:
    """Byte length of a fixed-width frame of `count` channels."""
    return primitive_size(encode) * count


def unpack_channels(encode: str, raw_bytes: bytes, *, count: int = CHANNEL_COUNT) -> Tuple[int, ...]:
    """
    Unpack a fixed-width little-endian frame: `count` consecutive unsigned
    values of type `encode`. Length must match exactly.
    """
    expected = frame_size(encode, count)
    if len(raw_bytes) != expected:
        raise ValueError(
            f"Raw bytes length {len(raw_bytes)} != expected {expected} for {count} x '{encode}'"
        )
    codec = PRIMITIVES[encode.lower()]
    return tuple(int(v) for v in struct.unpack(f"<{count}{codec.fmt_le}", bytes(raw_bytes)))


def pack_channels(encode: str, values: Tuple[int, ...]) -> bytes:
    """Inverse of unpack_channels (simulator / tests)."""
    codec = PRIMITIVES[encode.lower()]
    return struct.pack(f"<{len(values)}{codec.fmt_le}", *(int(v) for v in values))
