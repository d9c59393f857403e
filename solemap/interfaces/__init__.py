from .command_sink import CommandSink, WriterCommandSink
from .log_sink import LogEntry, LogSink, LogTag

__all__ = ["CommandSink",
           "WriterCommandSink",
           "LogEntry",
           "LogSink",
           "LogTag"]
