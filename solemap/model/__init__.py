from .reading import ChannelReading, TimestampedReading, FrameEncoding
from .summary import SummaryResult, EmptySessionCondition
from .compute import reduce_readings

__all__ = ["ChannelReading",
           "TimestampedReading",
           "FrameEncoding",
           "SummaryResult",
           "EmptySessionCondition",
           "reduce_readings"]
