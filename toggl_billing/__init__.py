"""Monthly invoice reconciliation for Toggl time entries."""

__version__ = "1.0.0"
