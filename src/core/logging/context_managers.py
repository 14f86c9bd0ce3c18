"""Context managers for structured logging."""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

from core.logging.context import get_log_context, set_log_context
from core.logging.utilities import log_exception, log_with_context


class LogContext:
    """
    Context manager for temporary log context.

    Usage:
        with LogContext(run_id=run_id, resource_group=names.resource_group):
            # All logs in this block carry run_id and resource_group
            await sample.run()
    """

    def __init__(
        self,
        run_id: Optional[str] = None,
        step: Optional[str] = None,
        resource_group: Optional[str] = None,
    ):
        self.new_context = {
            "run_id": run_id,
            "step": step,
            "resource_group": resource_group,
        }
        self.old_context: Dict[str, str] = {}

    def __enter__(self) -> "LogContext":
        self.old_context = get_log_context()
        for key, value in self.new_context.items():
            if value is not None:
                set_log_context(**{key: value})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        set_log_context(
            run_id=self.old_context.get("run_id", ""),
            step=self.old_context.get("step", ""),
            resource_group=self.old_context.get("resource_group", ""),
        )
        return False


class StepLogContext(LogContext):
    """
    Context manager for one orchestration step with automatic timing.

    Logs completion (or failure) with the step duration on exit.

    Usage:
        with StepLogContext(logger, "create_pairing"):
            pairing = await client.create_pairing(...)
    """

    def __init__(
        self,
        logger: logging.Logger,
        step: str,
        level: int = logging.DEBUG,
    ):
        super().__init__(step=step)
        self.logger = logger
        self.step = step
        self.level = level
        self.start_time: Optional[float] = None

    def __enter__(self) -> "StepLogContext":
        super().__enter__()
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
        if exc_val is not None:
            log_exception(
                self.logger,
                exc_val,
                f"Step failed: {self.step}",
                include_traceback=False,
                operation=self.step,
                duration_ms=duration_ms,
            )
        else:
            log_with_context(
                self.logger,
                self.level,
                f"Step complete: {self.step}",
                operation=self.step,
                duration_ms=duration_ms,
            )
        super().__exit__(exc_type, exc_val, exc_tb)
        return False


class OperationContext:
    """Context manager for timed operations with automatic logging."""

    def __init__(
        self,
        logger: logging.Logger,
        operation: str,
        level: int = logging.DEBUG,
        slow_threshold_ms: Optional[float] = 10000.0,
        **context: Any,
    ):
        self.logger = logger
        self.operation = operation
        if isinstance(level, str):
            self.level = getattr(logging, level.upper(), logging.DEBUG)
        else:
            self.level = level
        self.slow_threshold_ms = slow_threshold_ms
        self.context = context
        self._start_time: Optional[float] = None

    def __enter__(self) -> "OperationContext":
        self._start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = (time.perf_counter() - self._start_time) * 1000

        # Auto-promote to INFO if slow
        effective_level = self.level
        if self.slow_threshold_ms and duration_ms > self.slow_threshold_ms:
            effective_level = max(self.level, logging.INFO)

        if exc_val is not None:
            log_exception(
                self.logger,
                exc_val,
                f"Failed: {self.operation}",
                level=logging.DEBUG,
                include_traceback=False,
                duration_ms=round(duration_ms, 2),
                operation=self.operation,
                **self.context,
            )
        else:
            log_with_context(
                self.logger,
                effective_level,
                f"Completed: {self.operation}",
                duration_ms=round(duration_ms, 2),
                operation=self.operation,
                **self.context,
            )
        return False


@contextmanager
def log_operation(
    logger: logging.Logger,
    operation: str,
    level: int = logging.DEBUG,
    slow_threshold_ms: Optional[float] = 10000.0,
    **context: Any,
):
    """Convenience context manager for ad-hoc operation logging."""
    with OperationContext(
        logger, operation, level=level, slow_threshold_ms=slow_threshold_ms, **context
    ) as ctx:
        yield ctx
