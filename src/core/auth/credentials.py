"""
Azure credential provider supporting multiple authentication methods.

This module resolves the async azure-identity credential used by the
management clients. Token acquisition and refresh stay inside azure-identity;
this provider only decides *which* credential to build.

Supported Authentication Methods:
    - Azure CLI: Uses the signed-in `az` session for interactive development
    - Service Principal (Secret): Uses client ID/secret for service accounts
    - Service Principal (Certificate): Uses client ID/certificate for long-lived auth
    - Default Azure Credential: Uses azure-identity's credential chain
      (environment variables, managed identity, CLI, etc.)

Example:
    >>> provider = AzureCredentialProvider()  # configured from environment
    >>> credential = provider.get_credential()
    >>> client = GeoDrManagementClient(credential, subscription_id)
    >>> ...
    >>> await provider.close()
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional, Union

from azure.identity.aio import (
    AzureCliCredential,
    CertificateCredential,
    ClientSecretCredential,
    DefaultAzureCredential,
)

from core.errors.exceptions import AuthError

logger = logging.getLogger(__name__)


AsyncCredential = Union[
    AzureCliCredential,
    CertificateCredential,
    ClientSecretCredential,
    DefaultAzureCredential,
]


class AzureAuthError(AuthError):
    """
    Raised when Azure credential configuration is invalid.

    Provides actionable error messages to help diagnose authentication
    issues across different authentication modes.
    """

    pass


class AzureCredentialProvider:
    """
    Unified Azure credential provider with multi-mode support.

    Resolution order:
    1. Azure CLI (if use_cli)
    2. Service Principal with Certificate
    3. Service Principal with Secret
    4. Default Azure Credential (managed identity, env vars, etc.)

    The credential object is created once and reused; call close() (or use
    the provider as an async context manager) to release its transport.

    Attributes:
        use_cli: Whether to use Azure CLI for authentication
        use_default_credential: Whether to use DefaultAzureCredential
        client_id: Azure AD client ID (for SPN auth)
        client_secret: Client secret (for secret-based SPN auth)
        tenant_id: Azure AD tenant ID
        certificate_path: Path to certificate file (for cert-based SPN auth)
    """

    def __init__(
        self,
        use_cli: bool = False,
        use_default_credential: bool = False,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        tenant_id: Optional[str] = None,
        certificate_path: Optional[str] = None,
    ):
        """
        Initialize credential provider.

        Args:
            use_cli: Use Azure CLI for authentication
            use_default_credential: Use DefaultAzureCredential
            client_id: Azure AD client ID (for SPN)
            client_secret: Client secret (for SPN with secret)
            tenant_id: Azure AD tenant ID
            certificate_path: Path to certificate (for SPN with cert)

        Note:
            If no authentication method is explicitly configured, the provider
            loads its configuration from environment variables.
        """
        self._credential: Optional[AsyncCredential] = None

        self.use_cli = use_cli
        self.use_default_credential = use_default_credential
        self.client_id = client_id
        self.client_secret = client_secret
        self.tenant_id = tenant_id
        self.certificate_path = certificate_path

        if not any([use_cli, use_default_credential, client_id]):
            self._load_config_from_env()

    def _load_config_from_env(self) -> None:
        """
        Load authentication configuration from environment variables.

        Environment Variables:
            AZURE_AUTH_INTERACTIVE: Set to "true" to use Azure CLI
            AZURE_CLIENT_ID: Service principal client ID
            AZURE_CLIENT_SECRET: Service principal secret
            AZURE_TENANT_ID: Azure AD tenant ID
            AZURE_CERTIFICATE_PATH: Path to certificate for SPN auth
        """
        self.use_cli = os.getenv("AZURE_AUTH_INTERACTIVE", "").lower() == "true"
        self.client_id = os.getenv("AZURE_CLIENT_ID")
        self.client_secret = os.getenv("AZURE_CLIENT_SECRET")
        self.tenant_id = os.getenv("AZURE_TENANT_ID")
        self.certificate_path = os.getenv("AZURE_CERTIFICATE_PATH")

        # If no specific auth mode configured, default to DefaultAzureCredential
        if not self.use_cli and not self.has_spn_credentials:
            self.use_default_credential = True

    @property
    def has_spn_credentials(self) -> bool:
        """True if SPN with secret OR certificate is fully configured."""
        has_secret = all([self.client_id, self.client_secret, self.tenant_id])
        has_cert = all([self.client_id, self.certificate_path, self.tenant_id])
        return has_secret or has_cert

    @property
    def auth_mode(self) -> str:
        """
        Get current authentication mode for diagnostics.

        Returns:
            "cli", "spn_cert", "spn_secret", "default", or "none"
        """
        if self.use_cli:
            return "cli"
        if self.has_spn_credentials:
            if self.certificate_path:
                return "spn_cert"
            return "spn_secret"
        if self.use_default_credential:
            return "default"
        return "none"

    def get_credential(self) -> AsyncCredential:
        """
        Get or create the async Azure credential object.

        Returns:
            Async azure-identity credential for the configured mode

        Raises:
            AzureAuthError: If the configuration is incomplete or invalid
        """
        if self._credential is not None:
            return self._credential

        mode = self.auth_mode

        if mode == "cli":
            logger.info("Using Azure CLI authentication", extra={"auth_mode": mode})
            self._credential = AzureCliCredential(tenant_id=self.tenant_id)
            return self._credential

        if mode == "spn_cert":
            if not Path(self.certificate_path).exists():
                raise AzureAuthError(
                    f"Certificate file not found: {self.certificate_path}"
                )
            logger.info(
                "Using certificate-based Service Principal authentication",
                extra={"auth_mode": mode},
            )
            self._credential = CertificateCredential(
                tenant_id=self.tenant_id,
                client_id=self.client_id,
                certificate_path=self.certificate_path,
            )
            return self._credential

        if mode == "spn_secret":
            logger.info(
                "Using client secret Service Principal authentication",
                extra={"auth_mode": mode},
            )
            self._credential = ClientSecretCredential(
                tenant_id=self.tenant_id,
                client_id=self.client_id,
                client_secret=self.client_secret,
            )
            return self._credential

        if mode == "default":
            logger.info(
                "Using DefaultAzureCredential (managed identity, env vars, etc.)",
                extra={"auth_mode": mode},
            )
            self._credential = DefaultAzureCredential()
            return self._credential

        raise AzureAuthError(
            "No valid Azure credential configuration found. "
            "Please configure one of: CLI (AZURE_AUTH_INTERACTIVE=true), "
            "SPN (AZURE_CLIENT_ID/AZURE_TENANT_ID with secret or certificate), "
            "or DefaultAzureCredential"
        )

    async def close(self) -> None:
        """Close the underlying credential, if one was created."""
        if self._credential is not None:
            await self._credential.close()
            self._credential = None

    async def __aenter__(self) -> "AzureCredentialProvider":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def get_diagnostics(self) -> Dict:
        """
        Get authentication diagnostics for logging.

        Returns:
            Dictionary with auth mode and configuration flags (no secrets)
        """
        return {
            "auth_mode": self.auth_mode,
            "cli_enabled": self.use_cli,
            "default_credential_enabled": self.use_default_credential,
            "spn_configured": self.has_spn_credentials,
            "tenant_id": self.tenant_id,
            "credential_created": self._credential is not None,
        }


__all__ = [
    "AzureAuthError",
    "AzureCredentialProvider",
]
