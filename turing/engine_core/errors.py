"""
Error taxonomy shared by the engine and the service layer.

Errors are returned as values (result objects carrying an ErrorKind),
not raised across the service boundary.
"""

from enum import Enum


class ErrorKind(Enum):
    """Failure categories a caller can act on."""
    NOT_FOUND = "not_found"  # Session or character unknown after all tiers
    INVALID_INPUT = "invalid_input"  # Malformed or unknown character / text
    CONFLICT = "conflict"  # Round already decided
