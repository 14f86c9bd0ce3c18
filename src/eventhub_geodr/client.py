"""
Management client for the geo-disaster-recovery sample.

Thin async wrapper over the Azure Resource Manager SDKs: one method per
remote call the sample makes. Every SDK failure is re-raised as a typed
ManagementError (see core.errors) with the operation and resource names in
its context and the azure-core exception chained as the cause.
"""

import logging
from contextlib import contextmanager
from typing import Any, Optional

from azure.core.exceptions import AzureError
from azure.mgmt.eventhub.aio import EventHubManagementClient
from azure.mgmt.eventhub.models import (
    AccessKeys,
    ArmDisasterRecovery,
    AuthorizationRule,
    CheckNameAvailabilityParameter,
    CheckNameAvailabilityResult,
    ConsumerGroup,
    EHNamespace,
    Eventhub,
    Sku,
)
from azure.mgmt.resource.resources.aio import ResourceManagementClient

from core.errors.classifiers import classify_azure_error
from core.logging.context_managers import log_operation

logger = logging.getLogger(__name__)


class GeoDrManagementClient:
    """
    Async management-plane client for resource groups and Event Hubs.

    Constructed explicitly from a credential and subscription id and passed
    into the orchestration. Use as an async context manager (or call close())
    to release the underlying HTTP sessions.
    """

    def __init__(
        self,
        credential: Any,
        subscription_id: str,
        *,
        resource_client: Optional[ResourceManagementClient] = None,
        eventhub_client: Optional[EventHubManagementClient] = None,
    ) -> None:
        if not subscription_id:
            raise ValueError("subscription_id must be provided")
        self.subscription_id = subscription_id
        self._resources = resource_client or ResourceManagementClient(credential, subscription_id)
        self._eventhub = eventhub_client or EventHubManagementClient(credential, subscription_id)

    async def close(self) -> None:
        await self._eventhub.close()
        await self._resources.close()

    async def __aenter__(self) -> "GeoDrManagementClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @contextmanager
    def _operation(self, operation: str, **context: Any):
        with log_operation(logger, operation, **context):
            try:
                yield
            except AzureError as exc:
                raise classify_azure_error(exc, {"operation": operation, **context}) from exc

    # -----------------
    # Resource groups
    # -----------------

    async def create_resource_group(self, name: str, location: str) -> Any:
        with self._operation("create_resource_group", resource_group=name, location=location):
            return await self._resources.resource_groups.create_or_update(
                name, {"location": location}
            )

    async def delete_resource_group(self, name: str) -> None:
        """Delete a resource group and every resource in it; waits for completion."""
        with self._operation("delete_resource_group", resource_group=name):
            poller = await self._resources.resource_groups.begin_delete(name)
            await poller.result()

    # -----------------
    # Namespaces
    # -----------------

    async def check_namespace_name_available(self, name: str) -> CheckNameAvailabilityResult:
        with self._operation("check_namespace_name", namespace=name):
            return await self._eventhub.namespaces.check_name_availability(
                CheckNameAvailabilityParameter(name=name)
            )

    async def create_namespace(
        self,
        resource_group: str,
        name: str,
        location: str,
        sku: str = "Standard",
    ) -> EHNamespace:
        """Create a namespace and wait for provisioning to finish."""
        with self._operation(
            "create_namespace", resource_group=resource_group, namespace=name, location=location, sku=sku
        ):
            poller = await self._eventhub.namespaces.begin_create_or_update(
                resource_group,
                name,
                EHNamespace(location=location, sku=Sku(name=sku, tier=sku)),
            )
            return await poller.result()

    # -----------------
    # Geo-DR pairing
    # -----------------

    async def create_pairing(
        self,
        resource_group: str,
        namespace: str,
        alias: str,
        partner_namespace_id: str,
    ) -> ArmDisasterRecovery:
        with self._operation(
            "create_pairing",
            resource_group=resource_group,
            namespace=namespace,
            alias=alias,
            partner_namespace=partner_namespace_id,
        ):
            return await self._eventhub.disaster_recovery_configs.create_or_update(
                resource_group,
                namespace,
                alias,
                ArmDisasterRecovery(partner_namespace=partner_namespace_id),
            )

    async def get_pairing(self, resource_group: str, namespace: str, alias: str) -> ArmDisasterRecovery:
        with self._operation("get_pairing", resource_group=resource_group, namespace=namespace, alias=alias):
            return await self._eventhub.disaster_recovery_configs.get(resource_group, namespace, alias)

    async def break_pairing(self, resource_group: str, namespace: str, alias: str) -> None:
        """Remove the pairing; called on the primary namespace."""
        with self._operation("break_pairing", resource_group=resource_group, namespace=namespace, alias=alias):
            await self._eventhub.disaster_recovery_configs.break_pairing(resource_group, namespace, alias)

    async def fail_over(self, resource_group: str, namespace: str, alias: str) -> None:
        """Promote ``namespace`` (the secondary) to primary for the alias."""
        with self._operation("fail_over", resource_group=resource_group, namespace=namespace, alias=alias):
            await self._eventhub.disaster_recovery_configs.fail_over(resource_group, namespace, alias)

    async def list_pairing_authorization_rules(
        self, resource_group: str, namespace: str, alias: str
    ) -> list[AuthorizationRule]:
        with self._operation(
            "list_pairing_authorization_rules", resource_group=resource_group, namespace=namespace, alias=alias
        ):
            pager = self._eventhub.disaster_recovery_configs.list_authorization_rules(
                resource_group, namespace, alias
            )
            return [rule async for rule in pager]

    async def get_pairing_keys(
        self, resource_group: str, namespace: str, alias: str, authorization_rule: str
    ) -> AccessKeys:
        with self._operation(
            "get_pairing_keys",
            resource_group=resource_group,
            namespace=namespace,
            alias=alias,
            authorization_rule=authorization_rule,
        ):
            return await self._eventhub.disaster_recovery_configs.list_keys(
                resource_group, namespace, alias, authorization_rule
            )

    # -----------------
    # Event hubs and consumer groups
    # -----------------

    async def create_event_hub(self, resource_group: str, namespace: str, name: str) -> Eventhub:
        with self._operation("create_event_hub", resource_group=resource_group, namespace=namespace, event_hub=name):
            return await self._eventhub.event_hubs.create_or_update(resource_group, namespace, name, Eventhub())

    async def get_event_hub(self, resource_group: str, namespace: str, name: str) -> Eventhub:
        with self._operation("get_event_hub", resource_group=resource_group, namespace=namespace, event_hub=name):
            return await self._eventhub.event_hubs.get(resource_group, namespace, name)

    async def create_consumer_group(
        self,
        resource_group: str,
        namespace: str,
        event_hub: str,
        name: str,
        user_metadata: Optional[str] = None,
    ) -> ConsumerGroup:
        with self._operation(
            "create_consumer_group",
            resource_group=resource_group,
            namespace=namespace,
            event_hub=event_hub,
            consumer_group=name,
        ):
            return await self._eventhub.consumer_groups.create_or_update(
                resource_group,
                namespace,
                event_hub,
                name,
                ConsumerGroup(user_metadata=user_metadata),
            )
