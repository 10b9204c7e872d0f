"""
HuffIndex Errors
================
Exception hierarchy for the indexing layer.

  HuffIndexError
    ├── EmptyInputError     code builder called with no symbols
    ├── UnknownTokenError   strict encode of a token without a code
    └── KeyCollisionError   two distinct codes mapped to one tree key

Absent lookups (try_encode / find on an unseen token) are NOT errors.
"""


class HuffIndexError(Exception):
    """Base class for indexing errors."""
    pass


class EmptyInputError(HuffIndexError):
    """Raised when a codebook is built from an empty frequency table."""

    def __init__(self):
        super().__init__("Empty frequency table: at least one symbol is required")


class UnknownTokenError(HuffIndexError):
    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Unknown token: {token!r}")


class KeyCollisionError(HuffIndexError):
    """
    Raised when the key mapper produces the same integer key for two
    different codes. Only possible on the hashed fallback path.
    """

    def __init__(self, key: int, existing_code: str, new_code: str):
        self.key = key
        self.existing_code = existing_code
        self.new_code = new_code
        super().__init__(
            f"Key collision: codes '{existing_code}' and '{new_code}' "
            f"both map to key {key}"
        )
