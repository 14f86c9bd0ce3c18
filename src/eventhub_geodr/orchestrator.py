"""
Geo-disaster-recovery sample orchestration.

Runs the provisioning sequence against a GeoDrManagementClient:

    resource group -> primary namespace -> secondary namespace -> pairing
    -> event hub + consumer group -> metadata sync wait -> read from secondary
    -> alias connection strings -> failover

followed by guaranteed cleanup. Each acquired resource registers a release
action as soon as it exists; cleanup runs them in reverse order, so the
pairing is always broken (or skipped after a failover) before the resource
group is deleted. Release failures are logged and never propagate.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, List, Optional

from core.errors.exceptions import (
    NamespaceNameUnavailableError,
    ProvisioningFailedError,
    ResourceNotFoundError,
)
from core.logging.context_managers import LogContext, StepLogContext
from core.logging.utilities import log_exception, log_with_context
from core.resilience.polling import PollConfig, wait_until
from eventhub_geodr.client import GeoDrManagementClient
from eventhub_geodr.config import GeoDrConfig
from eventhub_geodr.naming import ResourceNames

logger = logging.getLogger(__name__)

NO_CLEANUP_MESSAGE = "Did not create any resources in Azure. No clean up is necessary"

PROVISIONING_SUCCEEDED = "Succeeded"
PROVISIONING_FAILED = "Failed"


def _state_name(value: Any) -> str:
    # SDK enums are str subclasses; fall back to the raw value for plain strings
    return str(getattr(value, "value", value))


@dataclass
class Release:
    """A cleanup action registered when a resource is acquired."""

    description: str
    action: Callable[[], Awaitable[None]]


@dataclass
class RunState:
    """Handles needed for teardown, filled in as the sequence progresses."""

    resource_group_name: Optional[str] = None
    resource_group_id: Optional[str] = None
    pairing: Any = None
    failover_succeeded: bool = False
    completed_steps: List[str] = field(default_factory=list)
    releases: List[Release] = field(default_factory=list)

    @property
    def has_resources(self) -> bool:
        return bool(self.releases)


@dataclass
class RunResult:
    """Summary of a completed run."""

    names: ResourceNames
    resource_group_id: Optional[str]
    primary_namespace_id: Optional[str]
    secondary_namespace_id: Optional[str]
    authorization_rules: List[str]
    failover_succeeded: bool
    completed_steps: List[str]


class GeoDrSample:
    """
    Provision, pair and fail over two Event Hubs namespaces, then clean up.

    Args:
        client: Management client (explicitly constructed, not global)
        config: Validated sample configuration
        names: Resource names for this run (generated when omitted)
        sleep: Sleep coroutine used by the sync wait (injectable for tests)
        clock: Monotonic clock used by polling (injectable for tests)
    """

    def __init__(
        self,
        client: GeoDrManagementClient,
        config: GeoDrConfig,
        names: Optional[ResourceNames] = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.config = config
        self.names = names or ResourceNames.generate(config.name_prefixes, config.name_length)
        self.state = RunState()
        self._sleep = sleep
        self._clock = clock

    # -----------------
    # Main sequence
    # -----------------

    async def run(self) -> RunResult:
        """
        Execute the full sequence; cleanup always runs before returning or raising.

        Raises:
            ManagementError: The first failing step's error, after cleanup
        """
        names = self.names
        log_with_context(
            logger,
            logging.INFO,
            "Starting geo-disaster recovery sample",
            resource_group=names.resource_group,
            primary_namespace=names.primary_namespace,
            secondary_namespace=names.secondary_namespace,
            alias=names.pairing,
            event_hub=names.event_hub,
        )

        with LogContext(resource_group=names.resource_group):
            try:
                await self._run_step("create_resource_group", self._create_resource_group)
                primary = await self._run_step(
                    "create_primary_namespace",
                    lambda: self._create_namespace(
                        names.primary_namespace, self.config.primary_location, "primary"
                    ),
                )
                secondary = await self._run_step(
                    "create_secondary_namespace",
                    lambda: self._create_namespace(
                        names.secondary_namespace, self.config.secondary_location, "secondary"
                    ),
                )
                await self._run_step("create_pairing", lambda: self._create_pairing(secondary.id))
                await self._run_step("create_event_hub", self._create_event_hub)
                await self._run_step("wait_for_metadata_sync", self._wait_for_metadata_sync)
                rules = await self._run_step("get_connection_strings", self._log_connection_strings)
                await self._run_step("fail_over", self._fail_over)
            finally:
                await self.cleanup()

        return RunResult(
            names=names,
            resource_group_id=self.state.resource_group_id,
            primary_namespace_id=primary.id,
            secondary_namespace_id=secondary.id,
            authorization_rules=rules,
            failover_succeeded=self.state.failover_succeeded,
            completed_steps=list(self.state.completed_steps),
        )

    async def _run_step(self, step: str, func: Callable[[], Awaitable[Any]]) -> Any:
        with StepLogContext(logger, step):
            result = await func()
        self.state.completed_steps.append(step)
        return result

    def _register_release(self, description: str, action: Callable[[], Awaitable[None]]) -> None:
        self.state.releases.append(Release(description, action))

    async def _create_resource_group(self) -> Any:
        name = self.names.resource_group
        logger.info("Creating resource group %s in %s", name, self.config.primary_location)
        group = await self.client.create_resource_group(name, self.config.primary_location)

        self.state.resource_group_name = name
        self.state.resource_group_id = group.id
        self._register_release(f"Delete resource group {name}", self._delete_resource_group)

        logger.info("Created resource group %s", group.id)
        return group

    async def _create_namespace(self, name: str, location: str, role: str) -> Any:
        availability = await self.client.check_namespace_name_available(name)
        if not availability.name_available:
            reason = availability.message or (
                _state_name(availability.reason) if availability.reason else None
            )
            raise NamespaceNameUnavailableError(name, reason)

        logger.info("Creating %s event hub namespace %s in %s", role, name, location)
        namespace = await self.client.create_namespace(
            self.names.resource_group, name, location, self.config.namespace_sku
        )
        logger.info(
            "Created %s event hub namespace %s",
            role,
            namespace.name,
            extra={"namespace": namespace.name, "location": location},
        )
        return namespace

    async def _create_pairing(self, partner_namespace_id: str) -> Any:
        names = self.names
        logger.info("Creating geo-disaster recovery pairing %s", names.pairing)
        pairing = await self.client.create_pairing(
            names.resource_group, names.primary_namespace, names.pairing, partner_namespace_id
        )
        self.state.pairing = pairing
        self._register_release(f"Break pairing {names.pairing}", self._break_pairing)

        self.state.pairing = await wait_until(
            self._check_pairing_provisioned,
            description=f"pairing {names.pairing} to provision",
            config=PollConfig(
                timeout_seconds=self.config.pairing_timeout_seconds,
                base_delay=self.config.sync.initial_delay_seconds,
                max_delay=self.config.sync.max_delay_seconds,
            ),
            sleep=self._sleep,
            clock=self._clock,
        )
        logger.info("Created geo-disaster recovery pairing %s", names.pairing)
        return self.state.pairing

    async def _check_pairing_provisioned(self) -> Any:
        names = self.names
        pairing = await self.client.get_pairing(
            names.resource_group, names.primary_namespace, names.pairing
        )
        state = _state_name(pairing.provisioning_state)
        if state == PROVISIONING_SUCCEEDED:
            return pairing
        if state == PROVISIONING_FAILED:
            raise ProvisioningFailedError(
                f"Pairing {names.pairing} failed to provision",
                context={"alias": names.pairing, "provisioning_state": state},
            )
        logger.debug("Pairing %s is %s", names.pairing, state)
        return None

    async def _create_event_hub(self) -> Any:
        names = self.names
        logger.info("Creating an event hub and consumer group in primary namespace")
        event_hub = await self.client.create_event_hub(
            names.resource_group, names.primary_namespace, names.event_hub
        )
        await self.client.create_consumer_group(
            names.resource_group,
            names.primary_namespace,
            names.event_hub,
            self.config.consumer_group_name,
            user_metadata=self.config.consumer_group_metadata,
        )
        logger.info("Created event hub and consumer group in primary namespace")
        return event_hub

    async def _wait_for_metadata_sync(self) -> Any:
        """Wait for the event hub to replicate, then read it from the secondary namespace."""
        sync = self.config.sync
        if sync.strategy == "sleep":
            logger.info(
                "Waiting for %g seconds to allow metadata to sync across primary and secondary",
                sync.wait_seconds,
            )
            await self._sleep(sync.wait_seconds)
            logger.info("Retrieving the event hubs in secondary namespace")
            event_hub = await self._get_secondary_event_hub()
        else:
            logger.info(
                "Polling secondary namespace for up to %g seconds until metadata syncs",
                sync.timeout_seconds,
            )
            event_hub = await wait_until(
                self._find_secondary_event_hub,
                description=f"event hub {self.names.event_hub} in secondary namespace",
                config=sync.poll_config(),
                sleep=self._sleep,
                clock=self._clock,
            )
        logger.info("Retrieved the event hubs in secondary namespace")
        return event_hub

    async def _get_secondary_event_hub(self) -> Any:
        names = self.names
        return await self.client.get_event_hub(
            names.resource_group, names.secondary_namespace, names.event_hub
        )

    async def _find_secondary_event_hub(self) -> Any:
        try:
            return await self._get_secondary_event_hub()
        except ResourceNotFoundError:
            return None

    async def _log_connection_strings(self) -> List[str]:
        names = self.names
        rules = await self.client.list_pairing_authorization_rules(
            names.resource_group, names.primary_namespace, names.pairing
        )
        rule_names = []
        for rule in rules:
            keys = await self.client.get_pairing_keys(
                names.resource_group, names.primary_namespace, names.pairing, rule.name
            )
            logger.info("Key is: %s", keys.alias_primary_connection_string)
            rule_names.append(rule.name)
        return rule_names

    async def _fail_over(self) -> None:
        names = self.names
        logger.info("Initiating fail over")
        # Failover is requested on the secondary namespace's view of the alias
        await self.client.fail_over(names.resource_group, names.secondary_namespace, names.pairing)
        self.state.failover_succeeded = True
        logger.info("Fail over initiated")

    # -----------------
    # Cleanup
    # -----------------

    async def cleanup(self) -> None:
        """Run registered release actions in reverse order; never raises."""
        try:
            if not self.state.has_resources:
                logger.info(NO_CLEANUP_MESSAGE)
                return

            for release in reversed(self.state.releases):
                try:
                    await release.action()
                except Exception as e:
                    log_exception(
                        logger,
                        e,
                        f"{release.description} failed",
                        include_traceback=False,
                        operation="cleanup",
                    )
        except Exception as e:
            log_exception(logger, e, "Cleanup failed unexpectedly", operation="cleanup")

    async def _break_pairing(self) -> None:
        names = self.names
        logger.info("Pairing breaking")
        if self.state.pairing is None:
            return
        if self.state.failover_succeeded:
            logger.info("Fail over succeeded; pairing %s no longer needs breaking", names.pairing)
            return
        await self.client.break_pairing(names.resource_group, names.primary_namespace, names.pairing)
        logger.info("Pairing %s broken", names.pairing)

    async def _delete_resource_group(self) -> None:
        resource_group_id = self.state.resource_group_id
        logger.info("Deleting Resource Group: %s", resource_group_id)
        await self.client.delete_resource_group(self.state.resource_group_name)
        logger.info("Deleted Resource Group: %s", resource_group_id)


__all__ = [
    "NO_CLEANUP_MESSAGE",
    "GeoDrSample",
    "Release",
    "RunResult",
    "RunState",
]
