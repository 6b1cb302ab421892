"""Exception types raised by the sincewhen core.

Ownership mismatches and missing rows are not errors: repositories report
them as ``False``, ``None`` or an empty list.
"""


class SincewhenError(Exception):
    """Base class for sincewhen errors."""


class ValidationError(SincewhenError):
    """Input rejected before it reached storage."""


class ExhaustionError(SincewhenError):
    """No free slug could be found within the bounded search."""


class StorageError(SincewhenError):
    """The storage engine failed in a way the caller has to handle."""
