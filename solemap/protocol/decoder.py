# solemap/protocol/decoder.py
"""
Tolerant decoder for 8-channel pressure frames.

The peripheral firmware does not announce its wire format, so every payload
is run through an ordered list of strategies and the first match wins:

  1. tagged CSV        "PRESSURE_LEFT: 1,2,3,4,5,6,7,8"
  2. untagged CSV      "1,2,3,4,5,6,7,8"   (>= 4 integer tokens)
  3. space separated   "1 2 3 4 5 6 7 8"   (exactly 8 integers, 8-bit)
  4. binary u32        32 bytes, 8 x little-endian uint32
  5. binary u8         8 bytes, one byte per channel
  6. scalar broadcast  "123" -> all 8 channels (degraded)

Byte payloads are looked at both as bytes and, when they are valid UTF-8, as
text. String payloads only have a text view and never match 4 or 5.
"""
from __future__ import annotations

import logging
import re
import string
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from solemap.model.codec import frame_size, unpack_channels
from solemap.model.reading import (
    CHANNEL_COUNT,
    UINT8_MAX,
    UINT32_MAX,
    ChannelReading,
    FrameEncoding,
    fit_channels,
)

Payload = Union[bytes, bytearray, memoryview, str]

# text list forms need at least this many integer tokens to count as a frame
MIN_NUMERIC_TOKENS = 4

TAG_RE = re.compile(r"PRESSURE_(LEFT|RIGHT):")
_INT_RE = re.compile(r"[+-]?[0-9]+")
_STRIP_CHARS = string.whitespace + "\x00"


@dataclass(frozen=True)
class DecodeFailure:
    """
    Payload that matched no encoding. Per-frame and recoverable: the caller
    logs it and drops the frame.
    """
    payload_text: str
    size: int
    reason: str = "unrecognized format"
    raw: Optional[bytes] = None


DecodeResult = Union[ChannelReading, DecodeFailure]


@dataclass(frozen=True)
class PayloadView:
    text: Optional[str]   # stripped text view, None when bytes are not UTF-8
    raw: Optional[bytes]  # byte view, None for str payloads


@dataclass(frozen=True)
class DecodeStrategy:
    encoding: FrameEncoding
    decode: Callable[[PayloadView], Optional[ChannelReading]]


# ---------------------------------------------------------------------------
# Token helpers
# ---------------------------------------------------------------------------

def parse_int(token: str) -> Optional[int]:
    tok = token.strip()
    if not _INT_RE.fullmatch(tok):
        return None
    return int(tok)


def _zero_if_out_of_range(v: Optional[int]) -> int:
    if v is None or v < 0 or v > UINT32_MAX:
        return 0
    return v


def _clamp(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, v))


def _numeric_count(parsed: Sequence[Optional[int]]) -> int:
    return sum(1 for v in parsed if v is not None)


# ---------------------------------------------------------------------------
# Strategies (priority order)
# ---------------------------------------------------------------------------

def decode_tagged_csv(view: PayloadView) -> Optional[ChannelReading]:
    if not view.text:
        return None
    m = TAG_RE.search(view.text)
    if not m:
        return None

    tokens = view.text[m.end():].split(",")[:CHANNEL_COUNT]
    parsed = [parse_int(t) for t in tokens]
    if _numeric_count(parsed) < MIN_NUMERIC_TOKENS:
        return None

    values = fit_channels(_zero_if_out_of_range(v) for v in parsed)
    return ChannelReading(values=values, encoding=FrameEncoding.TAGGED_CSV, side=m.group(1))


def decode_untagged_csv(view: PayloadView) -> Optional[ChannelReading]:
    if not view.text or "," not in view.text or TAG_RE.search(view.text):
        return None

    parsed = [parse_int(t) for t in view.text.split(",")[:CHANNEL_COUNT]]
    if _numeric_count(parsed) < MIN_NUMERIC_TOKENS:
        return None

    values = fit_channels(_zero_if_out_of_range(v) for v in parsed)
    return ChannelReading(values=values, encoding=FrameEncoding.UNTAGGED_CSV)


def decode_space_separated(view: PayloadView) -> Optional[ChannelReading]:
    if not view.text:
        return None
    tokens = view.text.split()
    if len(tokens) != CHANNEL_COUNT:
        return None

    parsed = [parse_int(t) for t in tokens]
    if any(v is None for v in parsed):
        return None

    # legacy 8-bit peripheral
    values = tuple(_clamp(v, 0, UINT8_MAX) for v in parsed)  # type: ignore[arg-type]
    return ChannelReading(values=values, encoding=FrameEncoding.SPACE_SEPARATED)


def decode_binary_u32(view: PayloadView) -> Optional[ChannelReading]:
    if view.raw is None or len(view.raw) != frame_size("uint32"):
        return None
    return ChannelReading(values=unpack_channels("uint32", view.raw), encoding=FrameEncoding.BINARY_U32)


def decode_binary_u8(view: PayloadView) -> Optional[ChannelReading]:
    if view.raw is None or len(view.raw) != frame_size("uint8"):
        return None
    return ChannelReading(values=unpack_channels("uint8", view.raw), encoding=FrameEncoding.BINARY_U8)


def decode_scalar(view: PayloadView) -> Optional[ChannelReading]:
    if not view.text:
        return None
    v = parse_int(view.text)
    if v is None:
        return None
    v = _clamp(v, 0, UINT32_MAX)
    return ChannelReading(values=(v,) * CHANNEL_COUNT, encoding=FrameEncoding.SCALAR_BROADCAST)


STRATEGIES: Tuple[DecodeStrategy, ...] = (
    DecodeStrategy(FrameEncoding.TAGGED_CSV, decode_tagged_csv),
    DecodeStrategy(FrameEncoding.UNTAGGED_CSV, decode_untagged_csv),
    DecodeStrategy(FrameEncoding.SPACE_SEPARATED, decode_space_separated),
    DecodeStrategy(FrameEncoding.BINARY_U32, decode_binary_u32),
    DecodeStrategy(FrameEncoding.BINARY_U8, decode_binary_u8),
    DecodeStrategy(FrameEncoding.SCALAR_BROADCAST, decode_scalar),
)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def make_view(payload: Payload) -> PayloadView:
    if isinstance(payload, str):
        return PayloadView(text=payload.strip(_STRIP_CHARS), raw=None)
    if isinstance(payload, (bytes, bytearray, memoryview)):
        raw = bytes(payload)
        try:
            text: Optional[str] = raw.decode("utf-8").strip(_STRIP_CHARS)
        except UnicodeDecodeError:
            text = None
        return PayloadView(text=text, raw=raw)
    raise TypeError(f"payload must be bytes or str, got {type(payload).__name__}")


def payload_as_text(payload: Payload) -> str:
    """Best-effort text rendering for diagnostics."""
    if isinstance(payload, str):
        return payload
    return bytes(payload).decode("utf-8", errors="replace")


def decode_payload(
    payload: Payload,
    *,
    strategies: Sequence[DecodeStrategy] = STRATEGIES,
) -> DecodeResult:
    """Decode one notification payload. Never raises for malformed content."""
    view = make_view(payload)
    for strategy in strategies:
        reading = strategy.decode(view)
        if reading is not None:
            return reading

    size = len(view.raw) if view.raw is not None else len(payload)
    return DecodeFailure(
        payload_text=payload_as_text(payload),
        size=size,
        reason="empty payload" if size == 0 else "unrecognized format",
        raw=view.raw,
    )


class FrameDecoder:
    """
    decode_payload() plus per-encoding counters and debug logging.
    Holds no frame state: every call is independent.
    """

    def __init__(
        self,
        strategies: Optional[Sequence[DecodeStrategy]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._strategies: List[DecodeStrategy] = list(strategies or STRATEGIES)
        self._log = logger or logging.getLogger(__name__)
        self._stats: Dict[str, int] = {}
        self.reset_stats()

    @property
    def encodings(self) -> List[FrameEncoding]:
        return [s.encoding for s in self._strategies]

    def decode(self, payload: Payload) -> DecodeResult:
        result = decode_payload(payload, strategies=self._strategies)
        self._stats["frames"] += 1

        if isinstance(result, DecodeFailure):
            self._stats["failures"] += 1
            self._log.debug("DECODE_FAILED size=%d reason=%s payload=%r", result.size, result.reason, result.payload_text)
            return result

        self._stats[result.encoding.value] += 1
        if result.is_degraded:
            self._log.warning("DECODE_DEGRADED encoding=%s value=%d", result.encoding.value, result.values[0])
        else:
            self._log.debug("DECODED encoding=%s values=%s", result.encoding.value, result.format_csv())
        return result

    def stats(self) -> Dict[str, int]:
        return dict(self._stats)

    def reset_stats(self) -> None:
        self._stats = {"frames": 0, "failures": 0}
        for enc in FrameEncoding:
            self._stats[enc.value] = 0
