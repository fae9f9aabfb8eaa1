"""
Pure pricing and stock arithmetic for transactions. No database access.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Tuple, get_args

from pos_api.core.config import StockUnderflowPolicy
from pos_api.core.exceptions import ValidationError
from pos_api.core.utils import to_money

ZERO = Decimal("0.00")


class StockPolicy:
    """What happens when a sale would take stock below zero."""

    ALL = get_args(StockUnderflowPolicy)
    BLOCK, CLAMP, ALLOW = ALL


@dataclass(frozen=True)
class PricedLine:
    item_id: int
    quantity: int
    price: Decimal
    subtotal: Decimal


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    discount: Decimal
    total: Decimal


def unit_price(catalog_price: Decimal, custom_price: Optional[Decimal] = None) -> Decimal:
    """A non-negative custom price wins over the catalog price."""
    if custom_price is not None and custom_price >= 0:
        return to_money(custom_price)
    return to_money(catalog_price)


def price_line(
    item_id: int,
    quantity: int,
    catalog_price: Decimal,
    custom_price: Optional[Decimal] = None,
) -> PricedLine:
    """
    Raises:
        ValidationError: If quantity is not positive
    """
    if quantity <= 0:
        raise ValidationError(f"Quantity for item {item_id} must be greater than 0")
    price = unit_price(catalog_price, custom_price)
    return PricedLine(
        item_id=item_id,
        quantity=quantity,
        price=price,
        subtotal=to_money(price * quantity),
    )


def compute_totals(subtotals: Iterable[Decimal], discount: Optional[Decimal] = None) -> Totals:
    """
    Sum the line subtotals and apply the discount.

    Negative discounts count as zero and the total never drops below zero.
    """
    subtotal = to_money(sum((to_money(s) for s in subtotals), ZERO))
    discount = max(ZERO, to_money(discount))
    return Totals(subtotal=subtotal, discount=discount, total=max(ZERO, subtotal - discount))


def compute_change(payment: Optional[Decimal], total: Decimal) -> Decimal:
    """
    Raises:
        ValidationError: If payment is missing or below the total
    """
    if payment is None:
        raise ValidationError("Payment is required to complete a transaction")
    payment = to_money(payment)
    if payment < to_money(total):
        raise ValidationError("Payment not enough")
    return payment - to_money(total)


def decrement_stock(
    stock: int, quantity: int, policy: str, item_name: str
) -> Tuple[int, Optional[str]]:
    """
    Take quantity out of stock under the given underflow policy.

    Returns:
        Tuple of (new_stock, warning or None)

    Raises:
        ValidationError: If the policy is 'block' and stock is insufficient
    """
    remaining = stock - quantity
    if remaining >= 0:
        return remaining, None

    if policy == StockPolicy.BLOCK:
        raise ValidationError(
            f"Insufficient stock for '{item_name}'. Available: {stock}, Required: {quantity}"
        )
    if policy == StockPolicy.ALLOW:
        return remaining, f"Stock for '{item_name}' is now negative ({remaining})"
    return 0, f"Stock for '{item_name}' was {stock}, sold {quantity}; set to 0"
