"""
Core types used across modules.

This module provides the error classification enum so that every layer
speaks the same wait-or-fail vocabulary.
"""

from enum import Enum


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures that may succeed if attempted again
                   (e.g., network timeouts, 429/503 responses, slow propagation)
        AUTH: Authentication failures (e.g., 401 responses, expired tokens)
        PERMANENT: Non-retriable failures that won't succeed on retry
                   (e.g., 404, 409, invalid names, failed provisioning)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


__all__ = [
    "ErrorCategory",
]
