"""Billing reconciler CLI.

This module provides the command-line interface: ``reconcile`` builds the
monthly invoice summary and ``list-billed`` shows what has been invoiced.
"""

import click

from toggl_billing import __version__
from toggl_billing.cli.commands.list_billed import list_billed
from toggl_billing.cli.commands.reconcile import reconcile


@click.group(help="Toggl billing - reconcile tracked time into monthly invoices")
@click.version_option(version=__version__)
def cli():
    """Billing reconciler CLI main entry point."""
    pass


cli.add_command(reconcile)
cli.add_command(list_billed)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
