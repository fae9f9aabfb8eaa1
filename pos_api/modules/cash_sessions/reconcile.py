"""Drawer reconciliation arithmetic."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from pos_api.core.utils import to_money


@dataclass(frozen=True)
class Reconciliation:
    total_cash_in: Decimal
    total_change: Decimal
    expected_cash: Decimal
    difference: Decimal


def reconcile(
    opening_cash: Decimal,
    closing_cash: Decimal,
    total_cash_in: Optional[Decimal],
    total_change: Optional[Decimal],
) -> Reconciliation:
    """
    expected = opening + cash taken in - change handed back
    difference = declared closing cash - expected (negative means short)

    Example:
        opening 100000, one sale paid 60000 with 10000 change, declared
        150000 -> expected 150000, difference 0
    """
    cash_in = to_money(total_cash_in)
    change = to_money(total_change)
    expected = to_money(opening_cash) + cash_in - change
    return Reconciliation(
        total_cash_in=cash_in,
        total_change=change,
        expected_cash=expected,
        difference=to_money(closing_cash) - expected,
    )
