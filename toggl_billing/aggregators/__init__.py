"""Aggregators module for turning raw time entries into invoice lines.

This module filters entries that must not be billed and totals the rest per
description for the target client.
"""

from toggl_billing.aggregators.entry_aggregator import (
    AggregationResult,
    EntryAggregator,
    SkippedEntry,
)

__all__ = [
    "AggregationResult",
    "EntryAggregator",
    "SkippedEntry",
]
