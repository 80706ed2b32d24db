"""Display helpers shared by listing views."""

from decimal import Decimal, InvalidOperation
from typing import Any

NO_PRICE_LABEL = "Contact for price"


def group_indian_digits(digits: str) -> str:
    """Group an unsigned digit string the Indian way: 12,34,56,789."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_inr(value: Any) -> str:
    """Format a rupee amount with no fractional part, e.g. ₹12,34,567."""
    if value is None or isinstance(value, bool):
        return NO_PRICE_LABEL
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return NO_PRICE_LABEL
    if not amount.is_finite():
        return NO_PRICE_LABEL

    rounded = int(amount.quantize(Decimal(1)))
    sign = "-" if rounded < 0 else ""
    return f"{sign}₹{group_indian_digits(str(abs(rounded)))}"
