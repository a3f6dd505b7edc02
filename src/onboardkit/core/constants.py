"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# Slug rules
MIN_SLUG_LENGTH = 3
MAX_SLUG_LENGTH = 50
SLUG_FALLBACK_WORD = "restaurant"
SLUG_SUFFIX_START = 2
SLUG_SUFFIX_END = 100  # inclusive

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_STATUS_LENGTH = 32
MAX_ROLE_LENGTH = 50
MAX_IDEMPOTENCY_KEY_LENGTH = 128

# Temporary owner passwords
TEMP_PASSWORD_LENGTH = 12
TEMP_PASSWORD_ALPHABET = (
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789!@#$%^&*"
)

# Reversible mutation probe
PROBE_MARKER_DOMAIN = "example.com"

# Remote error codes that mean "slug already taken" at the store boundary
SLUG_CONFLICT_CODES = frozenset({"SLUG_UNAVAILABLE", "SLUG_TAKEN", "DUPLICATE_SLUG"})

# Operator-set owner passwords
MIN_PASSWORD_LENGTH = 8
