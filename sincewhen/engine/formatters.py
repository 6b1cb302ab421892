"""Timer display formats.

Each timer stores an integer index into FORMATTERS. The order of the list is
persisted, so new formats may only be appended.
"""

import time
from typing import Callable, List, Optional, Tuple

from sincewhen.engine.buckets import Bucket, bucketize, bucket_to_str, UNIT_SECONDS
from sincewhen.models.constants import FALLBACK_FORMAT

# (epoch, now) -> display string
Formatter = Callable[[int, int], str]

EMPTY_DURATION = "-"


def _elapsed(epoch: int, now: int) -> int:
    return max(0, int(now - epoch))


def _show_epoch(epoch: int, now: int) -> str:
    return str(epoch)


def _one_unit(epoch: int, now: int) -> str:
    buckets = bucketize(_elapsed(epoch, now))
    if not buckets:
        return EMPTY_DURATION
    return bucket_to_str(buckets[0])


def _two_units(epoch: int, now: int) -> str:
    buckets = bucketize(_elapsed(epoch, now))
    if not buckets:
        return EMPTY_DURATION
    return ", ".join(bucket_to_str(b) for b in buckets[:2])


def make_scale_formatter(unit_name: str) -> Formatter:
    """Build a formatter expressing the whole duration in a single unit.

    Raises:
        ValueError: if `unit_name` is not a known time unit
    """
    if unit_name not in UNIT_SECONDS:
        raise ValueError(f"Unrecognized scale {unit_name!r}")
    seconds = UNIT_SECONDS[unit_name]

    def formatter(epoch: int, now: int) -> str:
        return bucket_to_str(Bucket(unit_name, _elapsed(epoch, now) // seconds))

    return formatter


FORMATTERS: List[Tuple[str, Formatter]] = [
    ("Show Epoch", _show_epoch),
    ("One Unit", _one_unit),
    ("Two Units", _two_units),
    ("Years", make_scale_formatter("Year")),
    ("Weeks", make_scale_formatter("Week")),
    ("Days", make_scale_formatter("Day")),
    ("Hours", make_scale_formatter("Hour")),
    ("Minutes", make_scale_formatter("Minute")),
]


def list_formatters() -> List[str]:
    """Names of the available formats, in index order."""
    return [name for name, _ in FORMATTERS]


def is_valid_format(format_index) -> bool:
    """Whether `format_index` addresses a registered format."""
    if isinstance(format_index, bool) or not isinstance(format_index, int):
        return False
    return 0 <= format_index < len(FORMATTERS)


def get_formatter(format_index: Optional[int]) -> Formatter:
    """Look up a formatter, falling back to "One Unit" for unknown indexes."""
    if not is_valid_format(format_index):
        format_index = FALLBACK_FORMAT
    return FORMATTERS[format_index][1]


def format_time(epoch: int, format_index: Optional[int], now: Optional[float] = None) -> str:
    """Render the time elapsed since `epoch` using the stored format index.

    Args:
        epoch: Unix seconds of the timer's last reset
        format_index: Index into FORMATTERS; invalid or missing values fall back
        now: Unix seconds to measure against (defaults to the current time)
    """
    if now is None:
        now = time.time()
    return get_formatter(format_index)(epoch, int(now))
