"""Sample configuration from YAML file.

Loads from eventhub_geodr/config.yaml (or GEODR_CONFIG_FILE) with all settings
in one place:
- Subscription and regions for the primary and secondary namespaces
- Namespace SKU, consumer group name and metadata
- Resource name prefixes
- Pairing provisioning and metadata-sync wait settings

Environment variables ARE supported using ${VAR_NAME} syntax in YAML files.
"""

import logging
import os
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from core.resilience.polling import PollConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path(__file__).parent / "config.yaml"

SYNC_STRATEGIES = ("poll", "sleep")
NAMESPACE_SKUS = ("Standard", "Premium")

# Namespace names: 6-50 chars, start with a letter, letters/digits/hyphens
MIN_NAME_LENGTH = 6
MAX_NAME_LENGTH = 50


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict.

    Raises:
        ValueError: If the file is not valid YAML
    """
    if not path.exists():
        return {}
    with open(path, "r") as f:
        try:
            return yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


def _as_float(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {key}; must be a number (got {value!r})") from exc


def _as_int(value: Any, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {key}; must be an integer (got {value!r})") from exc


def _as_mapping(value: Any, key: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"Invalid {key}; must be a mapping (got {type(value).__name__})")
    return value


@dataclass(frozen=True)
class NamePrefixes:
    """Prefixes for the randomly generated resource names."""

    resource_group: str = "rgeh"
    primary_namespace: str = "ns"
    secondary_namespace: str = "ns"
    pairing: str = "geodr"
    event_hub: str = "eh"


@dataclass(frozen=True)
class SyncConfig:
    """How to wait for metadata to replicate to the secondary namespace."""

    strategy: str = "poll"
    wait_seconds: float = 80.0
    timeout_seconds: float = 300.0
    initial_delay_seconds: float = 5.0
    max_delay_seconds: float = 30.0

    def poll_config(self) -> PollConfig:
        return PollConfig(
            timeout_seconds=self.timeout_seconds,
            base_delay=self.initial_delay_seconds,
            max_delay=self.max_delay_seconds,
        )


@dataclass(frozen=True)
class GeoDrConfig:
    """Geo-disaster-recovery sample configuration.

    Configuration structure:
        geodr:
          subscription_id: ...
          primary_location: ...
          secondary_location: ...
          namespace_sku: ...
          consumer_group_name: ...
          consumer_group_metadata: ...
          name_prefixes: {...}
          name_length: ...
          pairing_timeout_seconds: ...
          sync: {...}
    """

    subscription_id: str = ""
    primary_location: str = "southcentralus"
    secondary_location: str = "northcentralus"
    namespace_sku: str = "Standard"
    consumer_group_name: str = "consumerGrp1"
    consumer_group_metadata: str = "sometadata"
    name_prefixes: NamePrefixes = field(default_factory=NamePrefixes)
    name_length: int = 12
    pairing_timeout_seconds: float = 600.0
    sync: SyncConfig = field(default_factory=SyncConfig)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "GeoDrConfig":
        """Build a config from the ``geodr`` section of the YAML file."""
        data = dict(_as_mapping(data, "geodr"))

        prefixes_raw = _as_mapping(data.pop("name_prefixes", None), "name_prefixes")
        unknown = set(prefixes_raw) - {f.name for f in fields(NamePrefixes)}
        if unknown:
            raise ValueError(f"Unknown name_prefixes keys: {sorted(unknown)}")
        prefixes = NamePrefixes(**{k: str(v) for k, v in prefixes_raw.items()})

        sync_raw = _as_mapping(data.pop("sync", None), "sync")
        sync = SyncConfig(
            strategy=str(sync_raw.get("strategy", "poll")).strip().lower(),
            wait_seconds=_as_float(sync_raw.get("wait_seconds", 80), "sync.wait_seconds"),
            timeout_seconds=_as_float(sync_raw.get("timeout_seconds", 300), "sync.timeout_seconds"),
            initial_delay_seconds=_as_float(
                sync_raw.get("initial_delay_seconds", 5), "sync.initial_delay_seconds"
            ),
            max_delay_seconds=_as_float(sync_raw.get("max_delay_seconds", 30), "sync.max_delay_seconds"),
        )

        kwargs: Dict[str, Any] = {}
        for key in (
            "subscription_id",
            "primary_location",
            "secondary_location",
            "namespace_sku",
            "consumer_group_name",
            "consumer_group_metadata",
        ):
            if data.get(key) is not None:
                kwargs[key] = str(data[key]).strip()
        if data.get("name_length") is not None:
            kwargs["name_length"] = _as_int(data["name_length"], "name_length")
        if data.get("pairing_timeout_seconds") is not None:
            kwargs["pairing_timeout_seconds"] = _as_float(
                data["pairing_timeout_seconds"], "pairing_timeout_seconds"
            )

        return GeoDrConfig(name_prefixes=prefixes, sync=sync, **kwargs)

    def with_overrides(self, overrides: Optional[Dict[str, Any]] = None) -> "GeoDrConfig":
        """Return a copy with CLI overrides applied (None values are ignored).

        ``sync_strategy`` and ``sync_wait_seconds`` map onto the sync section.
        """
        if not overrides:
            return self

        top_level: Dict[str, Any] = {}
        sync_changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            if value is None:
                continue
            if key == "sync_strategy":
                sync_changes["strategy"] = str(value).strip().lower()
            elif key == "sync_wait_seconds":
                sync_changes["wait_seconds"] = _as_float(value, "sync_wait_seconds")
            elif key in {f.name for f in fields(GeoDrConfig)}:
                top_level[key] = value
            else:
                raise ValueError(f"Unknown configuration override: {key}")

        if sync_changes:
            top_level["sync"] = replace(self.sync, **sync_changes)
        return replace(self, **top_level)

    def validate(self) -> None:
        """Raise ValueError naming the first invalid setting."""
        if not self.subscription_id:
            raise ValueError(
                "Missing required environment variable: AZURE_SUBSCRIPTION_ID "
                "(or geodr.subscription_id in the config file)"
            )
        if not self.primary_location or not self.secondary_location:
            raise ValueError("primary_location and secondary_location must be set")
        if self.primary_location.lower() == self.secondary_location.lower():
            raise ValueError(
                "primary_location and secondary_location must be different regions "
                f"(both are {self.primary_location!r})"
            )
        if self.namespace_sku not in NAMESPACE_SKUS:
            raise ValueError(
                f"Invalid namespace_sku {self.namespace_sku!r}; geo-disaster recovery "
                f"requires one of {NAMESPACE_SKUS}"
            )
        if not self.consumer_group_name:
            raise ValueError("consumer_group_name must be set")
        if not MIN_NAME_LENGTH <= self.name_length <= MAX_NAME_LENGTH:
            raise ValueError(
                f"Invalid name_length {self.name_length}; must be between "
                f"{MIN_NAME_LENGTH} and {MAX_NAME_LENGTH}"
            )
        for prefix_field in fields(NamePrefixes):
            prefix = getattr(self.name_prefixes, prefix_field.name)
            if not prefix or not prefix[0].isalpha() or not prefix.isalnum():
                raise ValueError(
                    f"Invalid name_prefixes.{prefix_field.name} {prefix!r}; "
                    "must start with a letter and contain only letters and digits"
                )
            if len(prefix) >= self.name_length - 3:
                raise ValueError(
                    f"name_prefixes.{prefix_field.name} {prefix!r} leaves too few random "
                    f"characters for name_length {self.name_length}"
                )
        if self.pairing_timeout_seconds <= 0:
            raise ValueError("pairing_timeout_seconds must be positive")
        if self.sync.strategy not in SYNC_STRATEGIES:
            raise ValueError(
                f"Invalid sync.strategy {self.sync.strategy!r}; must be one of {SYNC_STRATEGIES}"
            )
        if self.sync.wait_seconds < 0:
            raise ValueError("sync.wait_seconds must not be negative")
        if self.sync.timeout_seconds <= 0:
            raise ValueError("sync.timeout_seconds must be positive")
        if self.sync.initial_delay_seconds <= 0 or self.sync.max_delay_seconds <= 0:
            raise ValueError("sync delays must be positive")


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> GeoDrConfig:
    """Load, override and validate the sample configuration.

    Args:
        config_path: YAML file (default: $GEODR_CONFIG_FILE or the bundled config.yaml)
        overrides: Flat CLI overrides (primary_location, sync_strategy, ...)

    Returns:
        Validated GeoDrConfig

    Raises:
        ValueError: If a setting is missing or invalid
    """
    if config_path is None:
        env_path = os.getenv("GEODR_CONFIG_FILE")
        config_path = Path(env_path) if env_path else DEFAULT_CONFIG_FILE

    raw = load_yaml(Path(config_path))
    if not raw:
        logger.debug("Config file not found or empty, using defaults: %s", config_path)
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid config file {config_path}; top level must be a mapping")
    section = dict(_as_mapping(_expand_env_vars(raw.get("geodr")), "geodr"))

    # Fall back to the environment when the file doesn't mention the subscription
    if not section.get("subscription_id"):
        section["subscription_id"] = os.getenv("AZURE_SUBSCRIPTION_ID", "")

    config = GeoDrConfig.from_dict(section).with_overrides(overrides)
    config.validate()
    return config


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "GeoDrConfig",
    "NamePrefixes",
    "SyncConfig",
    "load_config",
]
