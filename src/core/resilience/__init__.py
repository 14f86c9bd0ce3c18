"""
Resilience patterns module.

Components:
    - PollConfig: Exponential backoff configuration for convergence waits
    - wait_until: Poll a check with jitter until ready or the deadline passes
"""

from .polling import (
    DEFAULT_POLL,
    PollConfig,
    wait_until,
)

__all__ = [
    "DEFAULT_POLL",
    "PollConfig",
    "wait_until",
]
