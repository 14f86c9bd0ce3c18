"""Logging setup and configuration."""

import io
import logging
import secrets
import sys
from datetime import datetime
from pathlib import Path

from core.logging.context import set_log_context
from core.logging.formatters import ConsoleFormatter, JSONFormatter

# Default settings
DEFAULT_LOG_DIR = Path("logs")
DEFAULT_CONSOLE_LEVEL = logging.INFO
DEFAULT_FILE_LEVEL = logging.DEBUG

# Noisy loggers to suppress
NOISY_LOGGERS = [
    "azure.core.pipeline.policies.http_logging_policy",
    "azure.identity",
    "azure.mgmt",
    "urllib3",
    "aiohttp",
]


def get_log_file_path(log_dir: Path, run_id: str | None = None) -> Path:
    """
    Build the log file path for a run.

    Files are grouped by date:
        logs/2026-01-05/geodr_r-20260105-143000-ab12.log

    Args:
        log_dir: Base log directory
        run_id: Run identifier (defaults to a timestamp)

    Returns:
        Path to the log file (parent directory not created)
    """
    date_folder = datetime.now().strftime("%Y-%m-%d")
    suffix = run_id or datetime.now().strftime("%H%M%S")
    return log_dir / date_folder / f"geodr_{suffix}.log"


def setup_logging(
    name: str = "eventhub_geodr",
    log_dir: Path | None = None,
    json_format: bool = True,
    console_level: int = DEFAULT_CONSOLE_LEVEL,
    file_level: int = DEFAULT_FILE_LEVEL,
    suppress_noisy: bool = True,
    log_to_stdout: bool = False,
    run_id: str | None = None,
) -> logging.Logger:
    """
    Configure logging with a console handler and a per-run file handler.

    Args:
        name: Logger name to return
        log_dir: Directory for log files (default: ./logs)
        json_format: Use JSON format for file logs (default: True)
        console_level: Console handler level (default: INFO)
        file_level: File handler level (default: DEBUG)
        suppress_noisy: Quiet down Azure SDK and HTTP client loggers
        log_to_stdout: Send all log output to stdout only, skipping the file handler
        run_id: Run identifier, stored in the log context and used in the file name

    Returns:
        Configured logger instance
    """
    log_dir = log_dir or DEFAULT_LOG_DIR

    if run_id:
        set_log_context(run_id=run_id)

    if sys.platform == "win32":
        safe_stdout = io.TextIOWrapper(
            sys.stdout.buffer, encoding="utf-8", errors="replace"
        )
        console_handler = logging.StreamHandler(safe_stdout)
    else:
        console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ConsoleFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    root_logger.handlers.clear()

    log_file: Path | None = None
    if log_to_stdout:
        console_handler.setLevel(min(console_level, file_level))
        root_logger.addHandler(console_handler)
    else:
        console_handler.setLevel(console_level)

        log_file = get_log_file_path(log_dir, run_id=run_id)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        if json_format:
            file_formatter: logging.Formatter = JSONFormatter()
        else:
            file_formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
            )

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(file_formatter)

        root_logger.addHandler(file_handler)
        root_logger.addHandler(console_handler)

    if suppress_noisy:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logger = logging.getLogger(name)
    if log_file is None:
        logger.debug("Logging initialized: stdout-only mode")
    else:
        logger.debug(f"Logging initialized: file={log_file}, json={json_format}")

    return logger


def generate_run_id() -> str:
    """
    Generate unique run identifier.

    Format: r-YYYYMMDD-HHMMSS-XXXX where XXXX is random hex.

    Returns:
        Unique run ID string
    """
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    suffix = secrets.token_hex(2)
    return f"r-{ts}-{suffix}"
