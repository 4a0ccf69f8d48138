"""List billed entries command."""

from typing import Optional

import click

from toggl_billing.cli.error_handlers import with_error_handling
from toggl_billing.cli.settings_loader import load_settings, setup_logging
from toggl_billing.cli.utils.formatters import format_info, format_table
from toggl_billing.storage.billed_store import BilledEntryStore


@click.command(name="list-billed")
@click.option(
    "--store",
    "store_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Billed-entry store file (optional, uses BILLED_STORE_PATH)",
)
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Show at most N ids")
@click.option("--debug", is_flag=True)
def list_billed(store_path: Optional[str], limit: Optional[int], debug: bool):
    """List the time entries recorded as billed.

    Example:
        toggl-billing list-billed
        toggl-billing list-billed --store data/billed.sqlite3 --limit 20
    """
    setup_logging(debug)

    with with_error_handling(debug):
        path = store_path or load_settings().billed_store_path
        store = BilledEntryStore(path)
        total = store.count()

        if not total:
            click.echo(format_info(f"No billed entries in {path}"))
            return

        shown = store.billed_ids(limit=limit)
        click.echo(format_table(["Entry ID"], [[str(i)] for i in shown], align_right=(0,)))
        click.echo(format_info(f"{total} billed entries in {path}"))
