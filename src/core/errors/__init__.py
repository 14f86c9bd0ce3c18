"""
Error classification and exception hierarchy.

Provides:
- ManagementError hierarchy for typed exceptions
- ErrorCategory for wait-or-fail decisions
- Azure management SDK error classifier
"""

from core.errors.classifiers import (
    ARM_ERROR_CODES,
    AzureManagementErrorClassifier,
    classify_arm_error_code,
    classify_azure_error,
)
from core.errors.exceptions import (
    AuthError,
    ConflictError,
    ManagementError,
    NamespaceNameUnavailableError,
    PermanentError,
    PropagationTimeoutError,
    ProvisioningFailedError,
    ResourceNotFoundError,
    ThrottlingError,
    TransientError,
)
from core.types import ErrorCategory

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "ManagementError",
    "AuthError",
    "TransientError",
    "PermanentError",
    # Specific errors
    "ThrottlingError",
    "PropagationTimeoutError",
    "ResourceNotFoundError",
    "ConflictError",
    "NamespaceNameUnavailableError",
    "ProvisioningFailedError",
    # Azure classifiers
    "ARM_ERROR_CODES",
    "AzureManagementErrorClassifier",
    "classify_arm_error_code",
    "classify_azure_error",
]
