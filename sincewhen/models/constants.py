"""Constants for sincewhen.

This module centralizes the magic numbers shared by storage and rendering.
"""

# Slugs: visually confusable characters (0/O, 1/I/l) are left out
SLUG_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz23456789"
SLUG_MIN_LENGTH = 6
SLUG_MAX_LENGTH = 12  # exclusive
SLUG_LENGTH_STEP = 2
SLUG_ATTEMPTS_PER_LENGTH = 9

# Timer formats (indexes into engine.formatters.FORMATTERS)
FORMAT_SHOW_EPOCH = 0
FORMAT_ONE_UNIT = 1
FORMAT_TWO_UNITS = 2
DEFAULT_FORMAT = FORMAT_TWO_UNITS
FALLBACK_FORMAT = FORMAT_ONE_UNIT

# Settings
SCHEMA_VERSION_KEY = "version"
SCHEMA_VERSION = 1

# Titles
MAX_TITLE_LENGTH = 200
