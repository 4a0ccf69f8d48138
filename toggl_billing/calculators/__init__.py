"""Calculator modules for the billing reconciler."""

from toggl_billing.calculators.billing_period import (
    BillingWindow,
    InvalidTimezoneError,
    compute_billing_window,
    last_day_of_month,
)
from toggl_billing.calculators.billing_rounder import (
    BillingLine,
    BillingSummary,
    calculate_billing,
    round_half_up,
)

__all__ = [
    # billing_period
    "BillingWindow",
    "InvalidTimezoneError",
    "compute_billing_window",
    "last_day_of_month",
    # billing_rounder
    "BillingLine",
    "BillingSummary",
    "calculate_billing",
    "round_half_up",
]
