"""Output formatting utilities for CLI."""

from decimal import ROUND_HALF_UP, Decimal
from typing import List, Sequence

import click

from toggl_billing.calculators.billing_rounder import BillingLine

TWO_PLACES = Decimal("0.01")


def format_success(message: str) -> str:
    """Format a success message in green."""
    return click.style(f"✓ {message}", fg="green", bold=True)


def format_error(message: str) -> str:
    """Format an error message in red."""
    return click.style(f"✗ {message}", fg="red", bold=True)


def format_warning(message: str) -> str:
    """Format a warning message in yellow."""
    return click.style(f"⚠ {message}", fg="yellow", bold=True)


def format_info(message: str) -> str:
    """Format an info message in blue."""
    return click.style(f"ℹ {message}", fg="blue")


def format_amount(value: Decimal) -> str:
    """Format hours or money with exactly two decimals.

    Example:
        >>> format_amount(Decimal("128.125"))
        '128.13'
    """
    return str(value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def format_table(
    headers: List[str],
    rows: Sequence[Sequence[str]],
    align_right: Sequence[int] = (),
    max_width: int = 60,
) -> str:
    """Format rows as a plain-text table.

    Args:
        headers: Column headers
        rows: Data rows, one string per cell
        align_right: Indexes of columns to right-align (numbers)
        max_width: Maximum width of a column; longer cells are truncated

    Returns:
        The table as a single string, or "" without headers
    """
    if not headers:
        return ""

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(widths)]):
            widths[i] = max(widths[i], len(str(cell)))
    widths = [min(w, max_width) for w in widths]

    def _render(cells: Sequence[str]) -> str:
        rendered = []
        for i, width in enumerate(widths):
            cell = str(cells[i])[:width] if i < len(cells) else ""
            rendered.append(f" {cell:>{width}} " if i in align_right else f" {cell:<{width}} ")
        return "|" + "|".join(rendered) + "|"

    separator = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
    lines = [separator, _render(headers), separator]
    if rows:
        lines.extend(_render(row) for row in rows)
        lines.append(separator)
    return "\n".join(lines)


def format_billing_table(lines: Sequence[BillingLine]) -> str:
    """Render ranked invoice lines as a table of rank, description, hours and amount."""
    rows = [
        [
            str(line.rank),
            line.description,
            format_amount(line.rounded_hours),
            format_amount(line.price),
        ]
        for line in lines
    ]
    return format_table(["#", "Description", "Hours", "Amount"], rows, align_right=(0, 2, 3))
