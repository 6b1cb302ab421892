"""Duration bucketing for sincewhen.

Splits a number of seconds into descending calendar-scale buckets
(years, weeks, days, hours, minutes).
"""

from typing import List, NamedTuple


class TimeUnit(NamedTuple):
    """A named calendar scale."""
    name: str
    seconds: int


class Bucket(NamedTuple):
    """How many whole `unit`s a duration holds at one scale."""
    unit: str
    count: int


MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY
YEAR = 365 * DAY

# Largest first; bucketize relies on this order
TIME_UNITS = (
    TimeUnit("Year", YEAR),
    TimeUnit("Week", WEEK),
    TimeUnit("Day", DAY),
    TimeUnit("Hour", HOUR),
    TimeUnit("Minute", MINUTE),
)

UNIT_SECONDS = {unit.name: unit.seconds for unit in TIME_UNITS}


def bucketize(total_seconds: int) -> List[Bucket]:
    """Decompose a duration into calendar buckets, largest unit first.

    Leading zero-valued units are dropped; once a unit is non-zero every
    smaller unit down to Minute is included, zero or not. Durations under a
    minute (and negative durations) give an empty list.

    This function is deterministic - same inputs always produce same outputs.

    Args:
        total_seconds: Duration in seconds

    Returns:
        List of buckets, e.g. [Bucket("Hour", 1), Bucket("Minute", 1)] for 3661
    """
    remaining = max(0, int(total_seconds))
    buckets: List[Bucket] = []
    for unit in TIME_UNITS:
        count = remaining // unit.seconds
        if count > 0 or buckets:
            buckets.append(Bucket(unit.name, count))
        remaining -= count * unit.seconds
    return buckets


def bucket_to_str(bucket: Bucket) -> str:
    """Render a bucket as "<count> <Unit>", pluralized unless the count is 1."""
    suffix = "" if bucket.count == 1 else "s"
    return f"{bucket.count} {bucket.unit}{suffix}"
