"""Data models for the billing reconciler.

This package contains Pydantic models for the records read from the
time-tracking service:
- BaseDataModel: Base class with common configuration
- TimeEntry: A single tracked time entry
- Project: Project record, linking to a client
- Client: Client record
- Account: The authenticated account (timezone)
"""

from toggl_billing.models.base import BaseDataModel
from toggl_billing.models.toggl import (
    Account,
    Client,
    MalformedRecordError,
    Project,
    TimeEntry,
)

__all__ = [
    "BaseDataModel",
    "Account",
    "Client",
    "MalformedRecordError",
    "Project",
    "TimeEntry",
]
