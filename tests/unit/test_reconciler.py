"""
Unit tests for the reconciliation pipeline.
"""

import datetime as dt
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from toggl_billing.models.toggl import Account, MalformedRecordError, TimeEntry
from toggl_billing.reconciler import InvoiceReconciler, approve_all, decline_all
from toggl_billing.services.toggl_client import TogglAPIError
from toggl_billing.storage.billed_store import BilledEntryStore, BilledStoreError

OCTOBER = dt.datetime(2024, 10, 15, 12, 0)


@pytest.fixture
def store(tmp_path):
    return BilledEntryStore(tmp_path / "billed.sqlite3")


@pytest.fixture
def reconciler(mock_toggl_client, store, hourly_rate):
    return InvoiceReconciler(
        client=mock_toggl_client,
        store=store,
        target_client="Acme Corp",
        rate=hourly_rate,
        request_delay=0,
    )


class TestPrepare:
    """Test building the invoice summary."""

    def test_full_month(self, reconciler, mock_toggl_client, sample_entries):
        mock_toggl_client.get_time_entries.return_value = sample_entries

        result = reconciler.prepare(now=OCTOBER)

        mock_toggl_client.get_time_entries.assert_called_once_with(
            "2024-10-01T00:00:00+02:00", "2024-10-31T23:59:59+01:00"
        )
        assert result.entry_count == 7
        assert result.to_bill == [1, 2, 3]
        assert result.aggregation.summary == {"Development": 5400, "Meeting": 900}
        assert [s.entry_id for s in result.aggregation.skipped] == [4, 5, 7]
        assert result.aggregation.other_clients == 1

        lines = result.billing.lines
        assert [line.description for line in lines] == ["Development", "Meeting"]
        assert lines[0].rounded_hours == Decimal("1.50")
        assert lines[0].price == Decimal("150.00")
        assert lines[1].rounded_hours == Decimal("0.25")
        assert lines[1].price == Decimal("25.00")
        assert result.billing.total_hours == Decimal("1.75")
        assert result.billing.total_price == Decimal("175.00")

    def test_explicit_month_and_lookback(self, mock_toggl_client, store, hourly_rate):
        reconciler = InvoiceReconciler(
            client=mock_toggl_client,
            store=store,
            target_client="Acme Corp",
            rate=hourly_rate,
            request_delay=0,
            lookback_weeks=4,
        )

        result = reconciler.prepare(month="2024-04")

        assert result.window.start_iso == "2024-03-04T00:00:00+01:00"
        assert result.window.end_iso == "2024-04-30T23:59:59+02:00"

    def test_prepare_writes_nothing(self, reconciler, mock_toggl_client, store, sample_entries):
        mock_toggl_client.get_time_entries.return_value = sample_entries

        reconciler.prepare(now=OCTOBER)

        assert store.count() == 0

    def test_already_billed_entries_excluded(
        self, reconciler, mock_toggl_client, store, sample_entries
    ):
        store.commit([1, 3])
        mock_toggl_client.get_time_entries.return_value = sample_entries

        result = reconciler.prepare(now=OCTOBER)

        assert result.to_bill == [2]
        assert result.aggregation.already_billed == 2
        assert result.billing.total_hours == Decimal("0.50")

    def test_empty_month(self, reconciler):
        result = reconciler.prepare(now=OCTOBER)

        assert result.entry_count == 0
        assert result.billing.is_empty
        assert result.billing.total_price == Decimal("0.00")

    def test_lookups_cached_per_run(self, reconciler, mock_toggl_client, sample_entries):
        mock_toggl_client.get_time_entries.return_value = sample_entries

        reconciler.prepare(now=OCTOBER)

        # projects 10, 11, 20, 30; clients 5, 6
        assert mock_toggl_client.get_project.call_count == 4
        assert mock_toggl_client.get_client.call_count == 2

        reconciler.prepare(now=OCTOBER)

        assert mock_toggl_client.get_project.call_count == 8

    def test_throttles_lookups(self, mock_toggl_client, store, hourly_rate):
        sleep = MagicMock()
        mock_toggl_client.get_time_entries.return_value = [
            TimeEntry(id=1, description="Development", duration=3600, project_id=10)
        ]
        reconciler = InvoiceReconciler(
            client=mock_toggl_client,
            store=store,
            target_client="Acme Corp",
            rate=hourly_rate,
            request_delay=1.0,
            sleep=sleep,
        )

        reconciler.prepare(now=OCTOBER)

        assert sleep.call_count == 2
        sleep.assert_called_with(1.0)

    def test_api_error_propagates(self, reconciler, mock_toggl_client):
        mock_toggl_client.get_time_entries.side_effect = TogglAPIError(
            "GET /time_entries failed with HTTP 500", status_code=500
        )

        with pytest.raises(TogglAPIError):
            reconciler.prepare(now=OCTOBER)

    def test_entry_without_duration_is_fatal(self, reconciler, mock_toggl_client):
        mock_toggl_client.get_time_entries.return_value = [
            TimeEntry(id=9, description="Broken", project_id=10)
        ]

        with pytest.raises(MalformedRecordError, match="Entry 9"):
            reconciler.prepare(now=OCTOBER)

    def test_invalid_account_timezone(self, reconciler, mock_toggl_client):
        mock_toggl_client.get_account.return_value = Account(id=1, timezone="Mars/Base")

        with pytest.raises(ValueError):
            reconciler.prepare(now=OCTOBER)


class TestCommit:
    """Test the confirmation gate and persistence."""

    def test_commit_approved(self, reconciler, mock_toggl_client, store, sample_entries):
        mock_toggl_client.get_time_entries.return_value = sample_entries
        result = reconciler.prepare(now=OCTOBER)

        assert reconciler.commit(result, approve_all) is True
        assert store.billed_ids() == [1, 2, 3]

    def test_gate_receives_ids(self, reconciler, mock_toggl_client, sample_entries):
        mock_toggl_client.get_time_entries.return_value = sample_entries
        result = reconciler.prepare(now=OCTOBER)
        gate = MagicMock(return_value=False)

        reconciler.commit(result, gate)

        gate.assert_called_once_with([1, 2, 3])

    def test_commit_declined(self, reconciler, mock_toggl_client, store, sample_entries):
        mock_toggl_client.get_time_entries.return_value = sample_entries
        result = reconciler.prepare(now=OCTOBER)

        assert reconciler.commit(result, decline_all) is False
        assert store.count() == 0

    def test_nothing_to_commit_skips_gate(self, reconciler):
        result = reconciler.prepare(now=OCTOBER)
        gate = MagicMock(return_value=True)

        assert reconciler.commit(result, gate) is False
        gate.assert_not_called()

    def test_second_run_bills_nothing(self, reconciler, mock_toggl_client, sample_entries):
        mock_toggl_client.get_time_entries.return_value = sample_entries
        reconciler.commit(reconciler.prepare(now=OCTOBER), approve_all)

        result = reconciler.prepare(now=OCTOBER)

        assert result.aggregation.is_empty
        assert result.aggregation.already_billed == 3

    def test_store_failure_propagates(self, reconciler, mock_toggl_client, sample_entries):
        mock_toggl_client.get_time_entries.return_value = sample_entries
        result = reconciler.prepare(now=OCTOBER)

        with patch.object(
            reconciler.store, "commit", side_effect=BilledStoreError("disk full")
        ):
            with pytest.raises(BilledStoreError):
                reconciler.commit(result, approve_all)


class TestFromConfig:
    def test_builds_from_settings(self, test_config):
        reconciler = InvoiceReconciler.from_config(test_config)

        assert reconciler.target_client == "Acme Corp"
        assert reconciler.rate == Decimal("100")
        assert reconciler.request_delay == 0
        assert reconciler.lookback_weeks == 0
        assert reconciler.client.session.auth == ("test-token", "api_token")
        assert str(reconciler.store.path) == test_config.billed_store_path

    def test_lookback_override(self, test_config):
        reconciler = InvoiceReconciler.from_config(test_config, lookback_weeks=12)

        assert reconciler.lookback_weeks == 12
