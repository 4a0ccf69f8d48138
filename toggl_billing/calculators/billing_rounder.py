"""Billing rounder for invoice lines.

This module turns per-description durations into priced invoice lines:
- Exact hours as ``Fraction`` (seconds / 3600, no floating point)
- Hours rounded to 2 decimal places, ties away from zero
- Price per line from the rounded hours
- Totals and the rounding deviation against the exact hours

Rounding is applied to hours, never to prices, so every line price is
exactly ``rate × rounded_hours``.
"""

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Dict, List, Union

SECONDS_PER_HOUR = 3600


def round_half_up(value: Fraction, places: int = 2) -> Decimal:
    """Round an exact value to ``places`` decimals, ties away from zero.

    Args:
        value: Exact value to round
        places: Number of decimal places to keep

    Returns:
        Decimal with exactly ``places`` decimal places

    Example:
        >>> round_half_up(Fraction(1, 8))
        Decimal('0.13')
        >>> round_half_up(Fraction(-1, 8))
        Decimal('-0.13')
    """
    scaled = abs(value) * 10**places
    quotient, remainder = divmod(scaled.numerator, scaled.denominator)
    if 2 * remainder >= scaled.denominator:
        quotient += 1
    if value < 0:
        quotient = -quotient
    return Decimal(quotient).scaleb(-places)


@dataclass
class BillingLine:
    """One invoice line.

    Attributes:
        rank: Position in the report, 1 for the largest line
        description: Description shared by the aggregated entries
        total_seconds: Tracked seconds
        exact_hours: ``total_seconds / 3600``, exact
        rounded_hours: Hours billed, rounded to 0.01
        price: ``rate × rounded_hours``
    """

    rank: int
    description: str
    total_seconds: int
    exact_hours: Fraction
    rounded_hours: Decimal
    price: Decimal

    @property
    def deviation_hours(self) -> Fraction:
        """Hours billed above (positive) or below (negative) the tracked time."""
        return Fraction(self.rounded_hours) - self.exact_hours


@dataclass
class BillingSummary:
    """Priced invoice lines with totals.

    Attributes:
        lines: Lines ranked by exact hours, largest first
        rate: Hourly rate used for pricing
        total_hours: Sum of rounded hours
        total_price: Sum of line prices
        exact_total_hours: Sum of exact hours
        deviation: ``Σ (rounded_hours − exact_hours) × rate``, exact
    """

    lines: List[BillingLine]
    rate: Decimal
    total_hours: Decimal
    total_price: Decimal
    exact_total_hours: Fraction
    deviation: Fraction

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def deviation_display(self) -> Decimal:
        """Deviation rounded to cents, for display only."""
        return round_half_up(self.deviation, 2)


def calculate_billing(
    summary: Dict[str, int], rate: Union[Decimal, int, str]
) -> BillingSummary:
    """Price a description→seconds summary.

    Lines are sorted by exact hours descending, then rounded hours
    descending, then description ascending, so ties always come out in the
    same order.

    Args:
        summary: Total tracked seconds per description
        rate: Hourly rate in currency units, at whatever scale is configured

    Returns:
        BillingSummary with ranked lines, totals and the rounding deviation

    Raises:
        ValueError: If a total is negative

    Example:
        >>> result = calculate_billing({"Development": 5400}, Decimal("100"))
        >>> result.lines[0].rounded_hours, result.total_price
        (Decimal('1.50'), Decimal('150.00'))
    """
    if not isinstance(rate, Decimal):
        rate = Decimal(str(rate))
    exact_rate = Fraction(rate)

    rows = []
    for description, total_seconds in summary.items():
        if total_seconds < 0:
            raise ValueError(
                f"Total for '{description}' is negative ({total_seconds}s)"
            )
        exact_hours = Fraction(total_seconds, SECONDS_PER_HOUR)
        rows.append((exact_hours, round_half_up(exact_hours), description, total_seconds))

    rows.sort(key=lambda row: (-row[0], -row[1], row[2]))

    lines = [
        BillingLine(
            rank=rank,
            description=description,
            total_seconds=total_seconds,
            exact_hours=exact_hours,
            rounded_hours=rounded_hours,
            price=rate * rounded_hours,
        )
        for rank, (exact_hours, rounded_hours, description, total_seconds) in enumerate(
            rows, start=1
        )
    ]

    total_hours = sum((line.rounded_hours for line in lines), Decimal("0.00"))
    total_price = sum((line.price for line in lines), Decimal("0.00"))
    exact_total_hours = sum((line.exact_hours for line in lines), Fraction(0))
    deviation = sum(
        (line.deviation_hours * exact_rate for line in lines), Fraction(0)
    )

    return BillingSummary(
        lines=lines,
        rate=rate,
        total_hours=total_hours,
        total_price=total_price,
        exact_total_hours=exact_total_hours,
        deviation=deviation,
    )
