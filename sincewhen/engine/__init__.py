"""Duration bucketing and timer display formatting for sincewhen."""

from sincewhen.engine.buckets import bucketize, Bucket, TimeUnit, TIME_UNITS
from sincewhen.engine.formatters import format_time, get_formatter, list_formatters, is_valid_format, FORMATTERS

__all__ = [
    "bucketize",
    "Bucket",
    "TimeUnit",
    "TIME_UNITS",
    "format_time",
    "get_formatter",
    "list_formatters",
    "is_valid_format",
    "FORMATTERS",
]
