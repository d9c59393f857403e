# solemap/protocol/validator.py
from __future__ import annotations

import math
import re

from solemap.model.reading import CHANNEL_COUNT

TAG_MARKER = "PRESSURE_"

_TAGGED_LINE_RE = re.compile(r"PRESSURE_(?:LEFT|RIGHT):\s*(.+)")
_NUMBER_RE = re.compile(r"\+?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def is_non_negative_number(token: str) -> bool:
    tok = token.strip()
    if not _NUMBER_RE.fullmatch(tok):
        return False
    return math.isfinite(float(tok))


def is_well_formed(line: str) -> bool:
    """
    Display-only check for one console line.

    Lines without a PRESSURE_ marker are vacuously well-formed. Tagged lines
    need exactly 8 comma-separated non-negative numbers after the tag.
    """
    if TAG_MARKER not in line:
        return True

    m = _TAGGED_LINE_RE.search(line)
    if not m:
        return False

    tokens = m.group(1).split(",")
    return len(tokens) == CHANNEL_COUNT and all(is_non_negative_number(t) for t in tokens)
