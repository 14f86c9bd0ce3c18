"""
Unified exception hierarchy for management-plane operations.

Typed exceptions carry an ErrorCategory so the propagation poller can tell
an error worth waiting out from a terminal one.
"""

from core.types import ErrorCategory


class ManagementError(Exception):
    """
    Base exception for all management-plane errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for retry decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging (operation, resource names)
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        # Credentials are never refreshed mid-run, so only transient errors can clear
        return self.category == ErrorCategory.TRANSIENT

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthError(ManagementError):
    """Base class for authentication errors."""

    category = ErrorCategory.AUTH


# =============================================================================
# Transient Errors
# =============================================================================


class TransientError(ManagementError):
    """Base class for transient/retriable errors."""

    category = ErrorCategory.TRANSIENT


class ThrottlingError(TransientError):
    """Rate limited (429) - should back off."""

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message, cause, context)
        self.retry_after = retry_after  # Seconds to wait if provided


class PropagationTimeoutError(TransientError):
    """A resource did not reach the expected state before the wait deadline."""

    def __init__(
        self,
        description: str,
        timeout_seconds: float,
        attempts: int,
        cause: Exception | None = None,
    ):
        message = (
            f"Timed out after {timeout_seconds:g}s waiting for {description} "
            f"({attempts} checks)"
        )
        super().__init__(
            message,
            cause,
            {"description": description, "timeout_seconds": timeout_seconds, "attempts": attempts},
        )
        self.description = description
        self.timeout_seconds = timeout_seconds
        self.attempts = attempts


# =============================================================================
# Permanent Errors (Don't Retry)
# =============================================================================


class PermanentError(ManagementError):
    """Base class for permanent/non-retriable errors."""

    category = ErrorCategory.PERMANENT


class ResourceNotFoundError(PermanentError):
    """The addressed resource does not exist (404)."""

    pass


class ConflictError(PermanentError):
    """The request conflicts with the current state of the resource (409)."""

    pass


class NamespaceNameUnavailableError(PermanentError):
    """The requested namespace name is taken or invalid."""

    def __init__(
        self,
        namespace_name: str,
        reason: str | None = None,
        cause: Exception | None = None,
    ):
        message = f"Namespace name '{namespace_name}' is not available"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, cause, {"namespace": namespace_name, "reason": reason})
        self.namespace_name = namespace_name
        self.reason = reason


class ProvisioningFailedError(PermanentError):
    """A resource reported a terminal failed provisioning state."""

    pass
