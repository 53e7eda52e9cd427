"""
Money math for estimates and invoices.

Everything here works in ``decimal.Decimal`` and rounds to cents with
ROUND_HALF_UP, so 150.00 * 8.25% is 12.38 and never 12.37 or 12.379999.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from ..enums import DepositType
from ..exceptions import ValidationError

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(value: Any, field: str = "value") -> Decimal:
    """Convert user input (str, int, float, Decimal, None) to Decimal."""
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        # floats go through str() so 0.1 becomes Decimal("0.1"), not its binary expansion
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid number for {field}: {value!r}")


def round2(value: Any) -> Decimal:
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class DocumentTotals:
    line_items: List[Dict[str, str]]
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class DepositBreakdown:
    deposit_amount: Optional[Decimal]
    remaining_after_deposit: Decimal


def _item_value(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def compute_line_items(items: Iterable[Any]) -> List[Dict[str, str]]:
    """
    Normalize line items and derive ``amount = quantity * rate`` for each.

    Items may be dicts or objects exposing description/quantity/rate. The
    result is JSON-ready: numbers are decimal strings, order is preserved.
    """
    computed = []
    for position, item in enumerate(items, start=1):
        description = (_item_value(item, "description") or "").strip()
        if not description:
            raise ValidationError(f"Line item {position} needs a description")

        quantity = to_decimal(_item_value(item, "quantity"), "quantity")
        rate = to_decimal(_item_value(item, "rate"), "rate")
        if rate == round2(rate):
            # whole-cent rates display as cents; sub-cent rates keep their precision
            rate = round2(rate)
        if quantity < 0 or rate < 0:
            raise ValidationError(f"Line item {position} cannot have a negative quantity or rate")

        computed.append({
            "description": description,
            "quantity": str(quantity),
            "rate": str(rate),
            "amount": str(round2(quantity * rate)),
        })
    return computed


def compute_totals(items: Iterable[Any], tax_rate: Any = 0) -> DocumentTotals:
    """
    subtotal = sum of amounts, tax = round2(subtotal * tax_rate / 100),
    total = subtotal + tax. The tax rate itself is quantized to 2 dp first,
    matching the Numeric(5, 2) column it is stored in.
    """
    rate = round2(to_decimal(tax_rate, "tax_rate"))
    if rate < 0 or rate > HUNDRED:
        raise ValidationError("Tax rate must be between 0 and 100")

    line_items = compute_line_items(items)
    subtotal = round2(sum((Decimal(item["amount"]) for item in line_items), ZERO))
    tax_amount = round2(subtotal * rate / HUNDRED)
    return DocumentTotals(
        line_items=line_items,
        subtotal=subtotal,
        tax_amount=tax_amount,
        total=subtotal + tax_amount,
    )


def compute_deposit(
    subtotal: Any,
    total: Any,
    required: bool,
    deposit_type: Optional[DepositType] = DepositType.FIXED,
    fixed_amount: Any = None,
    percentage: Any = None,
) -> DepositBreakdown:
    """
    Deposit due up front. Fixed deposits use the configured amount; percentage
    deposits are taken on the subtotal. Raises ValidationError when the
    deposit would exceed the document total.
    """
    total = round2(total)
    if not required:
        return DepositBreakdown(deposit_amount=None, remaining_after_deposit=total)

    if deposit_type == DepositType.PERCENTAGE:
        if percentage is None or percentage == "":
            raise ValidationError("deposit_percentage is required for percentage deposits")
        pct = to_decimal(percentage, "deposit_percentage")
        if pct < 0 or pct > HUNDRED:
            raise ValidationError("Deposit percentage must be between 0 and 100")
        deposit = round2(round2(subtotal) * pct / HUNDRED)
    else:
        if fixed_amount is None or fixed_amount == "":
            raise ValidationError("deposit_amount is required for fixed deposits")
        deposit = round2(fixed_amount)

    if deposit < 0:
        raise ValidationError("Deposit cannot be negative")
    if deposit > total:
        raise ValidationError(
            "Deposit cannot exceed the document total",
            details={"deposit_amount": str(deposit), "total": str(total)},
        )
    return DepositBreakdown(deposit_amount=deposit, remaining_after_deposit=total - deposit)
