"""
services/schedule_calc.py
-------------------------
Recurring-billing date engine.

Every date boundary in the application (what "today" is, when an invoice is
due, which day a historical record is filed under) goes through the helpers
in this module so that all of them agree on one reference timezone.
"""

from datetime import date, datetime, time
from typing import Optional, Union

from dateutil import tz
from dateutil.relativedelta import relativedelta

from config import REFERENCE_TIMEZONE
from models.invoice import BIWEEKLY_CUT_OFF_DAYS, CADENCE_BIWEEKLY, CADENCE_MONTHLY

_REFERENCE_TZ = tz.gettz(REFERENCE_TIMEZONE)
if _REFERENCE_TZ is None:
    raise RuntimeError(f"Unknown REFERENCE_TIMEZONE: {REFERENCE_TIMEZONE!r}")


def reference_tz():
    """The tzinfo all calendar dates are expressed in."""
    return _REFERENCE_TZ


def to_reference_tz(instant: datetime) -> datetime:
    """
    Normalize an instant to the reference timezone.

    Naive datetimes are interpreted as UTC, never as server-local time.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=tz.UTC)
    return instant.astimezone(_REFERENCE_TZ)


def now_in_reference_tz() -> datetime:
    return datetime.now(tz=_REFERENCE_TZ)


def reference_today(now: Optional[datetime] = None) -> date:
    """Calendar date of ``now`` (default: current instant) in the reference timezone."""
    return to_reference_tz(now or now_in_reference_tz()).date()


def reference_noon(day: date) -> datetime:
    """Midday of ``day`` in the reference timezone."""
    return datetime.combine(day, time(hour=12), tzinfo=_REFERENCE_TZ)


def validate_cut_off_day(cadence: str, cut_off_day: int) -> None:
    """
    Raises:
        ValueError: If the cadence is unknown or the day is out of range for it.
    """
    if cadence == CADENCE_MONTHLY:
        if not 1 <= cut_off_day <= 31:
            raise ValueError(f"Monthly cut-off day must be between 1 and 31, got {cut_off_day}")
    elif cadence == CADENCE_BIWEEKLY:
        if cut_off_day not in BIWEEKLY_CUT_OFF_DAYS:
            raise ValueError(f"Biweekly cut-off day must be 1 or 16, got {cut_off_day}")
    else:
        raise ValueError(f"Unknown cadence: {cadence!r}")


def compute_next_send_date(
    cadence: str,
    cut_off_day: int,
    reference_now: Union[datetime, date],
) -> date:
    """
    Compute the next occurrence of a recurring invoice.

    Monthly invoices land on ``cut_off_day`` of the following month, clamped
    to the month's last day (day 31 in February gives the 28th or 29th).
    Biweekly invoices land on day 1 or day 16 of the following month. If the
    computed date is not strictly after today, it rolls one period forward.

    Args:
        cadence: 'monthly' or 'biweekly'.
        cut_off_day: 1-31 for monthly, 1 or 16 for biweekly.
        reference_now: The current instant. Datetimes are normalized to the
            reference timezone; a plain date is used as-is.

    Returns:
        The next send date.

    Raises:
        ValueError: On an unknown cadence or an out-of-range cut-off day.
    """
    validate_cut_off_day(cadence, cut_off_day)

    if isinstance(reference_now, datetime):
        today = to_reference_tz(reference_now).date()
    else:
        today = reference_now

    # relativedelta clamps day= to the last day of the target month.
    target = today + relativedelta(months=+1, day=cut_off_day)

    if target <= today:
        if cadence == CADENCE_MONTHLY:
            target = target + relativedelta(months=+1, day=cut_off_day)
        elif cut_off_day == 1:
            target = target.replace(day=16)
        else:
            target = target + relativedelta(months=+1, day=1)

    return target
