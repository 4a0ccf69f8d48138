"""CLI commands."""

from toggl_billing.cli.commands.list_billed import list_billed
from toggl_billing.cli.commands.reconcile import reconcile

__all__ = ["list_billed", "reconcile"]
