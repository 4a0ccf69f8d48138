"""
Time-tracking API services for the billing reconciler.

This package provides:
- A read-only Toggl API client built on requests
- Optional bounded retries with exponential backoff and jitter
- Per-run memoization of project and client lookups
"""

from .lookup_cache import LookupCache
from .retry_handler import RetryExhaustedException, RetryHandler, is_transient_error
from .toggl_client import TogglAPIError, TogglClient

__all__ = [
    "LookupCache",
    "RetryExhaustedException",
    "RetryHandler",
    "TogglAPIError",
    "TogglClient",
    "is_transient_error",
]
