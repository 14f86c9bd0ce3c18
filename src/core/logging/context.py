"""Context variables for structured logging."""

from contextvars import ContextVar
from typing import Dict, Optional

_run_id: ContextVar[str] = ContextVar("run_id", default="")
_step_name: ContextVar[str] = ContextVar("step_name", default="")
_resource_group: ContextVar[str] = ContextVar("resource_group", default="")


def set_log_context(
    run_id: Optional[str] = None,
    step: Optional[str] = None,
    resource_group: Optional[str] = None,
) -> None:
    if run_id is not None:
        _run_id.set(run_id)
    if step is not None:
        _step_name.set(step)
    if resource_group is not None:
        _resource_group.set(resource_group)


def get_log_context() -> Dict[str, str]:
    return {
        "run_id": _run_id.get(),
        "step": _step_name.get(),
        "resource_group": _resource_group.get(),
    }


def clear_log_context() -> None:
    _run_id.set("")
    _step_name.set("")
    _resource_group.set("")
