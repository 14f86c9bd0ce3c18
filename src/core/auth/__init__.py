"""
Authentication module.

Resolves async azure-identity credentials for the management plane.
"""

from core.auth.credentials import (
    AzureAuthError,
    AzureCredentialProvider,
)

__all__ = [
    "AzureAuthError",
    "AzureCredentialProvider",
]
