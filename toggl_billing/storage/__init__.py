"""Persistent state for the billing reconciler."""

from toggl_billing.storage.billed_store import BilledEntryStore, BilledStoreError

__all__ = ["BilledEntryStore", "BilledStoreError"]
