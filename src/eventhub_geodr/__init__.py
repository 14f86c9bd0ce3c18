"""
Azure Event Hubs geo-disaster-recovery sample.

Creates two namespaces, pairs them, creates an event hub and consumer group,
waits for metadata to reach the secondary, retrieves the alias connection
strings and fails over, then cleans everything up.

Usage:
    python -m eventhub_geodr --help
"""

from eventhub_geodr.client import GeoDrManagementClient
from eventhub_geodr.config import GeoDrConfig, NamePrefixes, SyncConfig, load_config
from eventhub_geodr.naming import ResourceNames, create_random_name
from eventhub_geodr.orchestrator import GeoDrSample, RunResult, RunState

__all__ = [
    "GeoDrConfig",
    "GeoDrManagementClient",
    "GeoDrSample",
    "NamePrefixes",
    "ResourceNames",
    "RunResult",
    "RunState",
    "SyncConfig",
    "create_random_name",
    "load_config",
]
