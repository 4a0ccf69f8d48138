"""Entry aggregator for the monthly invoice summary.

This module filters a month's time entries down to the ones that are billable
to the target client and have not been invoiced before, and sums their
durations per description.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from toggl_billing.models.toggl import MalformedRecordError, TimeEntry
from toggl_billing.services.lookup_cache import LookupCache
from toggl_billing.storage.billed_store import BilledEntryStore
from toggl_billing.utils.logging_utils import LogContext

logger = logging.getLogger(__name__)

SKIP_RUNNING = "running timer"
SKIP_NO_PROJECT = "no project"
SKIP_NO_CLIENT = "project has no client"


@dataclass
class SkippedEntry:
    """An entry left out of the summary, and why."""

    entry_id: int
    description: str
    reason: str


@dataclass
class AggregationResult:
    """Container for the outcome of one aggregation pass.

    Attributes:
        summary: Total seconds per description for the target client
        to_bill: Ids of the entries that make up ``summary``, in input order
        skipped: Entries excluded with a warning
        already_billed: Number of entries excluded because they were invoiced
            by an earlier run
        other_clients: Number of entries belonging to other clients

    Example:
        >>> result = AggregationResult(summary={"Review": 5400}, to_bill=[1, 2])
        >>> result.is_empty
        False
    """

    summary: Dict[str, int] = field(default_factory=dict)
    to_bill: List[int] = field(default_factory=list)
    skipped: List[SkippedEntry] = field(default_factory=list)
    already_billed: int = 0
    other_clients: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.to_bill


class EntryAggregator:
    """Aggregates time entries for a single client.

    For every entry, in order:
    1. Skip it if the billed-entry store already has it
    2. Normalize the description (done by ``TimeEntry``)
    3. Require a duration; skip running timers (negative duration)
    4. Skip entries without a project
    5. Resolve the project's client; skip projects without one
    6. Resolve the client's name
    7. Add the duration to the description's total if the client matches

    Entries with the same description are merged into one line no matter
    which project they were logged against.

    Attributes:
        lookup_cache: Project/client lookups for this run
        billed_store: Store of already invoiced entries
        target_client: Client name to aggregate, matched exactly

    Example:
        >>> aggregator = EntryAggregator(cache, store, "Acme Corp")
        >>> result = aggregator.aggregate(entries)
        >>> result.summary
        {'Development': 5400}
    """

    def __init__(
        self,
        lookup_cache: LookupCache,
        billed_store: BilledEntryStore,
        target_client: str,
    ):
        self.lookup_cache = lookup_cache
        self.billed_store = billed_store
        self.target_client = target_client

    def aggregate(self, entries: Iterable[TimeEntry]) -> AggregationResult:
        """Filter and total ``entries``.

        Returns:
            AggregationResult with per-description totals and the ids to bill

        Raises:
            MalformedRecordError: If an entry has no duration or a client has
                no name
            TogglAPIError: If a project or client lookup fails
            BilledStoreError: If the billed-entry store cannot be read
        """
        entries = list(entries)
        result = AggregationResult()
        billed = self.billed_store.billed_among(entry.id for entry in entries)

        for entry in entries:
            with LogContext(entry_id=entry.id):
                self._process_entry(entry, entry.id in billed, result)

        logger.info(
            f"Aggregated {len(result.to_bill)} entries into "
            f"{len(result.summary)} lines for '{self.target_client}' "
            f"({result.already_billed} already billed, "
            f"{len(result.skipped)} skipped, {result.other_clients} other clients)"
        )
        return result

    def _process_entry(
        self, entry: TimeEntry, already_billed: bool, result: AggregationResult
    ) -> None:
        if already_billed:
            logger.debug(f"Entry {entry.id} already billed")
            result.already_billed += 1
            return

        description = entry.description

        if entry.duration is None:
            raise MalformedRecordError(f"Entry {entry.id} has no duration")

        if entry.is_running:
            self._skip(result, entry, SKIP_RUNNING)
            return

        if entry.project_id is None:
            self._skip(result, entry, SKIP_NO_PROJECT)
            return

        client_id = self.lookup_cache.resolve_client_id(entry.project_id)
        if client_id is None:
            self._skip(result, entry, SKIP_NO_CLIENT)
            return

        client_name = self.lookup_cache.resolve_client_name(client_id)
        if client_name != self.target_client:
            logger.debug(f"Entry {entry.id} belongs to client '{client_name}'")
            result.other_clients += 1
            return

        result.summary[description] = result.summary.get(description, 0) + entry.duration
        result.to_bill.append(entry.id)

    @staticmethod
    def _skip(result: AggregationResult, entry: TimeEntry, reason: str) -> None:
        logger.warning(f"Ignoring entry {entry.id} ({entry.description}): {reason}")
        result.skipped.append(
            SkippedEntry(entry_id=entry.id, description=entry.description, reason=reason)
        )
