"""Core utility functions for the application"""

from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Tuple, Union
from zoneinfo import ZoneInfo

from pos_api.core.config import config


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every DateTime column is stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _business_tz():
    if config.business_timezone.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(config.business_timezone)


def business_now() -> datetime:
    return datetime.now(_business_tz())


def business_today() -> date:
    """Current calendar date in the configured business timezone."""
    return business_now().date()


def business_day_range(day: date) -> Tuple[datetime, datetime]:
    """
    Convert a business-local calendar date to a naive UTC [start, end) range.

    Args:
        day: The local calendar date

    Returns:
        Tuple of (start, end) naive UTC datetimes, end exclusive
    """
    tz = _business_tz()
    start_local = datetime.combine(day, time.min, tzinfo=tz)
    end_local = start_local + timedelta(days=1)
    return (
        start_local.astimezone(timezone.utc).replace(tzinfo=None),
        end_local.astimezone(timezone.utc).replace(tzinfo=None),
    )


def to_money(amount: Union[Decimal, float, int, None]) -> Decimal:
    """
    Normalize an amount to a Decimal rounded to 2 places.

    None is treated as zero.
    """
    if amount is None:
        return Decimal("0.00")
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_rupiah(amount: Union[Decimal, float, int]) -> str:
    """
    Format an amount for receipts and notifications.

    Example: 150000 -> "Rp 150.000"
    """
    whole = int(to_money(amount).to_integral_value(rounding=ROUND_HALF_UP))
    sign = "-" if whole < 0 else ""
    return f"Rp {sign}{abs(whole):,}".replace(",", ".")
