"""Reconcile command."""

import time
from typing import Optional, Sequence

import click

from toggl_billing.calculators.billing_period import parse_month
from toggl_billing.cli.error_handlers import with_error_handling
from toggl_billing.cli.settings_loader import load_settings, setup_logging
from toggl_billing.cli.utils.formatters import (
    format_amount,
    format_billing_table,
    format_info,
    format_success,
    format_warning,
)
from toggl_billing.reconciler import (
    InvoiceReconciler,
    ReconciliationResult,
    approve_all,
    decline_all,
)


def validate_month(ctx, param, value: Optional[str]) -> Optional[str]:
    """Reject --month values that are not YYYY-MM."""
    if value is None:
        return value
    try:
        parse_month(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
    return value


def prompt_confirmation(entry_ids: Sequence[int]) -> bool:
    """Ask the operator whether to mark the entries as billed.

    End of input or Ctrl-C counts as "no".
    """
    try:
        return click.confirm(
            f"Mark {len(entry_ids)} entries as billed?", default=False
        )
    except click.Abort:
        click.echo()
        return False


def print_report(result: ReconciliationResult, client_name: str) -> None:
    """Print the billing window, ranked lines, totals and deviation."""
    window = result.window
    billing = result.billing
    aggregation = result.aggregation

    click.echo(format_info(f"From {window.start_iso} to {window.end_iso}"))
    click.echo(
        format_info(
            f"Client: {client_name}, rate {format_amount(billing.rate)}/h, "
            f"{result.entry_count} entries fetched, "
            f"{aggregation.already_billed} already billed"
        )
    )

    for skipped in aggregation.skipped:
        click.echo(
            format_warning(
                f"Ignored entry {skipped.entry_id} ({skipped.description}): "
                f"{skipped.reason}"
            )
        )
    click.echo()

    if billing.is_empty:
        click.echo(format_info("No unbilled entries for this client."))
        return

    click.echo(format_billing_table(billing.lines))
    click.echo()
    click.echo(f"  Total hours:        {format_amount(billing.total_hours)}")
    click.echo(f"  Total amount:       {format_amount(billing.total_price)}")
    click.echo(f"  Rounding deviation: {format_amount(billing.deviation_display)}")
    click.echo()


@click.command(name="reconcile")
@click.option(
    "--month",
    type=str,
    default=None,
    callback=validate_month,
    help="Month to reconcile (YYYY-MM). Defaults to the current month.",
)
@click.option(
    "--lookback-weeks",
    type=click.IntRange(min=0),
    default=None,
    help="Move the window start back by N weeks (default: LOOKBACK_WEEKS).",
)
@click.option(
    "--yes",
    "-y",
    "assume_yes",
    is_flag=True,
    help="Mark entries as billed without asking.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print the report and never mark entries as billed.",
)
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Load settings from this .env file.",
)
@click.option("--debug", is_flag=True, help="Verbose logging and stack traces.")
def reconcile(
    month: Optional[str],
    lookback_weeks: Optional[int],
    assume_yes: bool,
    dry_run: bool,
    env_file: Optional[str],
    debug: bool,
):
    """Summarize unbilled time for the target client and mark it billed.

    Fetches the month's entries, skips everything already invoiced, groups
    the rest by description, prints the priced report and, once confirmed,
    records the entries as billed so the next run does not bill them again.

    Example:
        toggl-billing reconcile
        toggl-billing reconcile --month 2024-10 --lookback-weeks 12
        toggl-billing reconcile --dry-run
    """
    if assume_yes and dry_run:
        raise click.UsageError("--yes and --dry-run cannot be used together")

    setup_logging(debug)
    start_time = time.time()

    with with_error_handling(debug):
        config = load_settings(env_file)
        reconciler = InvoiceReconciler.from_config(config, lookback_weeks=lookback_weeks)

        result = reconciler.prepare(month=month)
        print_report(result, config.target_client)

        if result.aggregation.is_empty:
            return

        if dry_run:
            gate = decline_all
            click.echo(format_info("Dry run: nothing marked as billed."))
        elif assume_yes:
            gate = approve_all
        else:
            gate = prompt_confirmation

        if reconciler.commit(result, gate):
            click.echo(
                format_success(
                    f"Marked {len(result.to_bill)} entries as billed "
                    f"({time.time() - start_time:.1f}s)"
                )
            )
        elif not dry_run:
            click.echo(format_warning("Not committed; entries remain unbilled."))
