# protocol/__init__.py

from .decoder import FrameDecoder, DecodeFailure, decode_payload
from .validator import is_well_formed
from .commands import CMD_START, CMD_STOP

__all__ = [
    "FrameDecoder", "DecodeFailure", "decode_payload",
    "is_well_formed",
    "CMD_START", "CMD_STOP"]
