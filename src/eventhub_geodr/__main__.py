"""Event Hubs geo-disaster-recovery sample. Use --help for usage."""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from core.auth.credentials import AzureCredentialProvider
from core.logging.setup import generate_run_id, setup_logging
from core.logging.utilities import log_exception
from eventhub_geodr.client import GeoDrManagementClient
from eventhub_geodr.config import SYNC_STRATEGIES, GeoDrConfig, load_config
from eventhub_geodr.orchestrator import GeoDrSample

# __main__.py is at src/eventhub_geodr/__main__.py, so root is 3 levels up
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Placeholder logger until setup_logging() is called in main()
logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Pair two Event Hubs namespaces for geo-disaster recovery, fail over, then clean up",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Run with defaults (southcentralus -> northcentralus, poll for metadata sync)
    python -m eventhub_geodr

    # Use the fixed 80 second wait instead of polling
    python -m eventhub_geodr --sync-strategy sleep --sync-wait 80

    # Different regions, JSON logs to stdout
    python -m eventhub_geodr --primary-location westus2 --secondary-location eastus2 --log-to-stdout
        """,
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config YAML (default: GEODR_CONFIG_FILE env var or the bundled config.yaml)",
    )

    parser.add_argument(
        "--primary-location",
        default=None,
        help="Region for the resource group and primary namespace",
    )

    parser.add_argument(
        "--secondary-location",
        default=None,
        help="Region for the secondary namespace",
    )

    parser.add_argument(
        "--sync-strategy",
        choices=SYNC_STRATEGIES,
        default=None,
        help="How to wait for metadata to reach the secondary namespace (default: from config)",
    )

    parser.add_argument(
        "--sync-wait",
        type=float,
        default=None,
        help="Seconds to wait with --sync-strategy sleep (default: from config)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="Log directory path (default: from LOG_DIR env var or ./logs)",
    )

    parser.add_argument(
        "--json-logs",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Write JSON lines (or, with --no-json-logs, console-style text) to the log file "
        "(default: JSON_LOGS env var, true when unset)",
    )

    parser.add_argument(
        "--log-to-stdout",
        action="store_true",
        help="Send all log output to stdout only, skipping the log file. "
        "Can also be set via LOG_TO_STDOUT environment variable.",
    )

    return parser.parse_args(argv)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _setup_logging(args: argparse.Namespace, run_id: str) -> None:
    log_level = getattr(logging, args.log_level)
    log_dir = Path(args.log_dir or os.getenv("LOG_DIR") or "logs")
    json_logs = args.json_logs if args.json_logs is not None else _env_flag("JSON_LOGS", "true")

    setup_logging(
        name="eventhub_geodr",
        log_dir=log_dir,
        json_format=json_logs,
        console_level=log_level,
        log_to_stdout=args.log_to_stdout or _env_flag("LOG_TO_STDOUT"),
        run_id=run_id,
    )


async def run_sample(config: GeoDrConfig) -> None:
    """Authenticate, build the management client and run the sample once."""
    async with AzureCredentialProvider() as provider:
        logger.debug("Authentication configured", extra=provider.get_diagnostics())
        credential = provider.get_credential()

        async with GeoDrManagementClient(credential, config.subscription_id) as client:
            sample = GeoDrSample(client, config)
            result = await sample.run()

    logger.info(
        "Sample completed",
        extra={
            "alias": result.names.pairing,
            "resource_id": result.resource_group_id,
        },
    )


def main(argv: list[str] | None = None) -> int:
    """
    CLI entry point.

    Errors are logged rather than surfaced as exit codes, so this returns 0
    whether or not the sample succeeded.
    """
    load_dotenv(PROJECT_ROOT / ".env")

    args = parse_args(argv)
    run_id = generate_run_id()
    _setup_logging(args, run_id)

    overrides = {
        "primary_location": args.primary_location,
        "secondary_location": args.secondary_location,
        "sync_strategy": args.sync_strategy,
        "sync_wait_seconds": args.sync_wait,
    }

    try:
        config = load_config(args.config, overrides)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 0
    except OSError as e:
        logger.error("Cannot read configuration: %s", e)
        return 0

    logger.info(
        "Starting run %s",
        run_id,
        extra={
            "subscription_id": config.subscription_id,
            "strategy": config.sync.strategy,
        },
    )

    try:
        asyncio.run(run_sample(config))
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, shutting down...")
    except Exception as e:
        log_exception(logger, e, "Sample failed")

    return 0


if __name__ == "__main__":
    sys.exit(main())
