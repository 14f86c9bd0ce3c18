"""
Centralized error classification for Azure management-plane calls.

Wraps azure-core exceptions raised by the management SDKs into the typed
ManagementError hierarchy so callers never branch on SDK exception types.
"""

from typing import Any, Optional

from azure.core.exceptions import (
    AzureError,
    ClientAuthenticationError,
    HttpResponseError,
    ResourceExistsError,
    ServiceRequestError,
    ServiceResponseError,
)
from azure.core.exceptions import ResourceNotFoundError as AzureResourceNotFoundError

from core.errors.exceptions import (
    AuthError,
    ConflictError,
    ManagementError,
    PermanentError,
    ResourceNotFoundError,
    ThrottlingError,
    TransientError,
)


# ARM error codes (the "code" field of the error body)
ARM_ERROR_CODES = {
    "auth_errors": [
        "AuthenticationFailed",
        "ExpiredAuthenticationToken",
        "InvalidAuthenticationToken",
        "InvalidAuthenticationTokenTenant",
    ],
    "throttling_errors": [
        "TooManyRequests",
        "SubscriptionRequestsThrottled",
        "ServerBusy",
    ],
    "transient_errors": [
        "InternalServerError",
        "ServiceUnavailable",
        "GatewayTimeout",
        "OperationTimedOut",
        "RetryableError",
    ],
    "not_found_errors": [
        "NotFound",
        "ResourceNotFound",
        "ResourceGroupNotFound",
        "ParentResourceNotFound",
        "SubscriptionNotFound",
    ],
    "conflict_errors": [
        "Conflict",
        "ResourceGroupBeingDeleted",
        "MissingSubscriptionRegistration",
        "NamespaceAlreadyExists",
    ],
}


def classify_arm_error_code(error_code: Optional[str]) -> Optional[str]:
    """
    Classify an ARM error code into a coarse error kind.

    Args:
        error_code: ARM error code (e.g. "ResourceGroupNotFound")

    Returns:
        "auth", "throttling", "transient", "not_found", "conflict", or None
    """
    if not error_code:
        return None
    error_code = str(error_code).strip()

    if error_code in ARM_ERROR_CODES["auth_errors"]:
        return "auth"
    if error_code in ARM_ERROR_CODES["throttling_errors"]:
        return "throttling"
    if error_code in ARM_ERROR_CODES["transient_errors"]:
        return "transient"
    if error_code in ARM_ERROR_CODES["not_found_errors"]:
        return "not_found"
    if error_code in ARM_ERROR_CODES["conflict_errors"]:
        return "conflict"
    return None


def _error_code(error: HttpResponseError) -> Optional[str]:
    odata_error = getattr(error, "error", None)
    code = getattr(odata_error, "code", None)
    return code if isinstance(code, str) else None


def _retry_after_seconds(error: HttpResponseError) -> Optional[float]:
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None) or {}
    for header in ("Retry-After", "retry-after", "x-ms-retry-after-ms"):
        raw = headers.get(header) if hasattr(headers, "get") else None
        if raw is None:
            continue
        try:
            value = float(raw)
        except (TypeError, ValueError):
            continue
        return value / 1000.0 if header == "x-ms-retry-after-ms" else value
    return None


class AzureManagementErrorClassifier:
    """
    Error classifier for azure-core exceptions raised by management clients.

    Anything it cannot place (non-azure exceptions, bare AzureError) becomes a
    plain ManagementError with the UNKNOWN category, which is never waited out.
    """

    @staticmethod
    def wrap(error: Exception, context: Optional[dict[str, Any]] = None) -> ManagementError:
        """
        Wrap an exception into the appropriate ManagementError subclass.

        Args:
            error: Original exception (usually an azure-core AzureError)
            context: Additional context (operation, resource names)

        Returns:
            Classified ManagementError subclass
        """
        ctx: dict[str, Any] = {"service": "arm"}
        if context:
            ctx.update(context)

        if isinstance(error, ManagementError):
            error.context.update(ctx)
            return error

        if not isinstance(error, AzureError):
            return ManagementError(str(error), cause=error, context=ctx)

        # Order matters: the specific azure-core types subclass HttpResponseError
        if isinstance(error, ClientAuthenticationError):
            return AuthError(f"Azure authentication failed: {error.message}", cause=error, context=ctx)

        if isinstance(error, AzureResourceNotFoundError):
            return ResourceNotFoundError(f"Azure resource not found: {error.message}", cause=error, context=ctx)

        if isinstance(error, ResourceExistsError):
            return ConflictError(f"Azure resource conflict: {error.message}", cause=error, context=ctx)

        if isinstance(error, (ServiceRequestError, ServiceResponseError)):
            return TransientError(f"Azure service connection error: {error.message}", cause=error, context=ctx)

        if isinstance(error, HttpResponseError):
            return AzureManagementErrorClassifier._wrap_http_error(error, ctx)

        return ManagementError(f"Azure management request failed: {error.message}", cause=error, context=ctx)

    @staticmethod
    def _wrap_http_error(error: HttpResponseError, ctx: dict[str, Any]) -> ManagementError:
        status = getattr(error, "status_code", None)
        code = _error_code(error)
        if status is not None:
            ctx["status_code"] = status
        if code:
            ctx["error_code"] = code

        kind = classify_arm_error_code(code)
        if kind is None and status is not None:
            if status == 401:
                kind = "auth"
            elif status == 429:
                kind = "throttling"
            elif status == 404:
                kind = "not_found"
            elif status == 409:
                kind = "conflict"
            elif status >= 500 or status == 408:
                kind = "transient"
            elif 400 <= status < 500:
                kind = "permanent"

        message = f"Azure management request failed: {error.message}"
        if kind == "auth":
            return AuthError(message, cause=error, context=ctx)
        if kind == "throttling":
            retry_after = _retry_after_seconds(error)
            if retry_after is not None:
                ctx["retry_after_seconds"] = retry_after
            return ThrottlingError(message, retry_after=retry_after, cause=error, context=ctx)
        if kind == "transient":
            return TransientError(message, cause=error, context=ctx)
        if kind == "not_found":
            return ResourceNotFoundError(message, cause=error, context=ctx)
        if kind == "conflict":
            return ConflictError(message, cause=error, context=ctx)
        if kind == "permanent":
            return PermanentError(message, cause=error, context=ctx)
        return ManagementError(message, cause=error, context=ctx)


def classify_azure_error(
    error: Exception, context: Optional[dict[str, Any]] = None
) -> ManagementError:
    """Convenience wrapper around AzureManagementErrorClassifier.wrap."""
    return AzureManagementErrorClassifier.wrap(error, context)


__all__ = [
    "ARM_ERROR_CODES",
    "AzureManagementErrorClassifier",
    "classify_arm_error_code",
    "classify_azure_error",
]
