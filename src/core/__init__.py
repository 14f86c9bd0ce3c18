"""
Core library: reusable, service-agnostic components.

Modules:
    auth        - Azure credential resolution (CLI, SPN, managed identity)
    resilience  - Poll-until-ready with exponential backoff and jitter
    logging     - Console/JSON logging with run and step context
    errors      - Error classification and exception hierarchy

Design Principles:
    - No dependency on the Event Hubs sample itself
    - All modules are independently testable
    - Async-first where applicable
"""

from .types import ErrorCategory

__version__ = "0.1.0"

__all__ = [
    "ErrorCategory",
]
