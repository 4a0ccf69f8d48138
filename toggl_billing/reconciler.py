"""Monthly invoice reconciliation.

This module wires the pipeline together for one run:
1. Read the account timezone and compute the billing window
2. Fetch the window's time entries
3. Filter and aggregate them for the target client
4. Round and price the invoice lines
5. Ask for confirmation, then mark the invoiced entries as billed
"""

import datetime as dt
import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional, Sequence

from toggl_billing.aggregators.entry_aggregator import (
    AggregationResult,
    EntryAggregator,
)
from toggl_billing.calculators.billing_period import (
    BillingWindow,
    compute_billing_window,
)
from toggl_billing.calculators.billing_rounder import BillingSummary, calculate_billing
from toggl_billing.config.settings import BillingConfig
from toggl_billing.services.lookup_cache import LookupCache
from toggl_billing.services.retry_handler import RetryHandler
from toggl_billing.services.toggl_client import TogglClient
from toggl_billing.storage.billed_store import BilledEntryStore

logger = logging.getLogger(__name__)

# Receives the ids about to be marked billed, returns True to commit them
ConfirmationGate = Callable[[Sequence[int]], bool]


def approve_all(entry_ids: Sequence[int]) -> bool:
    return True


def decline_all(entry_ids: Sequence[int]) -> bool:
    return False


@dataclass
class ReconciliationResult:
    """Everything computed by a run, before anything is persisted.

    Attributes:
        window: Billing window the entries were fetched for
        entry_count: Number of entries returned by the API
        aggregation: Filtered per-description totals and ids to bill
        billing: Priced, ranked invoice lines
    """

    window: BillingWindow
    entry_count: int
    aggregation: AggregationResult
    billing: BillingSummary

    @property
    def to_bill(self) -> List[int]:
        return list(self.aggregation.to_bill)


class InvoiceReconciler:
    """Runs the reconciliation pipeline against the time-tracking API.

    Nothing is written until ``commit`` is called with a gate that approves
    the batch, so a run that fails or is declined leaves the billed-entry
    store untouched.

    Example:
        >>> reconciler = InvoiceReconciler.from_config(get_config())
        >>> result = reconciler.prepare()
        >>> reconciler.commit(result, approve_all)
        True
    """

    def __init__(
        self,
        client: TogglClient,
        store: BilledEntryStore,
        target_client: str,
        rate: Decimal,
        request_delay: float = 1.0,
        lookback_weeks: int = 0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.store = store
        self.target_client = target_client
        self.rate = rate
        self.request_delay = request_delay
        self.lookback_weeks = lookback_weeks
        self._sleep = sleep

    @classmethod
    def from_config(
        cls, config: BillingConfig, lookback_weeks: Optional[int] = None
    ) -> "InvoiceReconciler":
        """Build a reconciler from settings; ``lookback_weeks`` overrides the config."""
        client = TogglClient(
            api_token=config.toggl_api_token,
            base_url=config.toggl_api_url,
            timeout=config.request_timeout,
            retry_handler=RetryHandler(max_retries=config.max_retries),
        )
        return cls(
            client=client,
            store=BilledEntryStore(config.billed_store_path),
            target_client=config.target_client,
            rate=config.hourly_rate,
            request_delay=config.request_delay,
            lookback_weeks=(
                config.lookback_weeks if lookback_weeks is None else lookback_weeks
            ),
        )

    def prepare(
        self, now: Optional[dt.datetime] = None, month: Optional[str] = None
    ) -> ReconciliationResult:
        """Fetch, filter, aggregate and price one month of entries.

        Args:
            now: Reference time for the current month (defaults to now)
            month: Explicit ``YYYY-MM`` month instead of the current one

        Raises:
            TogglAPIError: On any failed request
            InvalidTimezoneError: If the account timezone is unusable
            MalformedRecordError: On malformed entries or clients
            BilledStoreError: If the billed-entry store cannot be read
        """
        account = self.client.get_account()
        window = compute_billing_window(
            account.timezone,
            now=now,
            lookback_weeks=self.lookback_weeks,
            month=month,
        )
        logger.info(f"Billing window: {window.start_iso} to {window.end_iso}")

        entries = self.client.get_time_entries(window.start_iso, window.end_iso)

        # A fresh cache per run; lookups are never shared between runs
        lookup_cache = LookupCache(self.client, delay=self.request_delay, sleep=self._sleep)
        aggregator = EntryAggregator(lookup_cache, self.store, self.target_client)
        aggregation = aggregator.aggregate(entries)
        logger.debug(f"Lookup statistics: {lookup_cache.get_statistics()}")

        billing = calculate_billing(aggregation.summary, self.rate)

        return ReconciliationResult(
            window=window,
            entry_count=len(entries),
            aggregation=aggregation,
            billing=billing,
        )

    def commit(self, result: ReconciliationResult, confirm: ConfirmationGate) -> bool:
        """Mark the run's entries as billed if ``confirm`` approves.

        Returns:
            True if entries were written, False if there was nothing to bill
            or the batch was declined

        Raises:
            BilledStoreError: If the write fails (nothing is marked)
        """
        entry_ids = result.to_bill
        if not entry_ids:
            logger.info("Nothing to commit")
            return False

        if not confirm(entry_ids):
            logger.info(f"Commit of {len(entry_ids)} entries declined")
            return False

        self.store.commit(entry_ids)
        return True
