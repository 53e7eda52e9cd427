"""
Helpers shared by estimates and invoices: pricing, share tokens and numbering.
"""
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.settings import get_settings
from ..enums import DepositType
from ..timeutils import utcnow
from .totals import compute_deposit, compute_totals, round2

PRICING_FIELDS = (
    "line_items",
    "tax_rate",
    "deposit_required",
    "deposit_type",
    "deposit_amount",
    "deposit_percentage",
)

REQUIRED_FIELDS = ("client_id", "title")


def apply_pricing(document, changes: Dict[str, Any]) -> None:
    """
    Merge pricing ``changes`` over the document's current values and write
    back line items, totals and deposit. Called on every create and update,
    so stored totals always match the stored line items.
    """
    def current(name):
        if name in changes:
            return changes[name]
        return getattr(document, name)

    line_items = current("line_items") or []
    tax_rate = round2(current("tax_rate") or 0)
    deposit_required = bool(current("deposit_required"))
    deposit_type = current("deposit_type") or DepositType.FIXED

    totals = compute_totals(line_items, tax_rate)
    deposit = compute_deposit(
        subtotal=totals.subtotal,
        total=totals.total,
        required=deposit_required,
        deposit_type=deposit_type,
        fixed_amount=current("deposit_amount"),
        percentage=current("deposit_percentage"),
    )

    document.line_items = totals.line_items
    document.tax_rate = tax_rate
    document.subtotal = totals.subtotal
    document.tax_amount = totals.tax_amount
    document.total = totals.total
    document.deposit_required = deposit_required
    document.deposit_type = deposit_type
    document.deposit_amount = deposit.deposit_amount
    document.deposit_percentage = current("deposit_percentage") if deposit_type == DepositType.PERCENTAGE else None


def apply_fields(document, changes: Dict[str, Any], exclude=PRICING_FIELDS) -> None:
    for field, value in changes.items():
        if field in exclude:
            continue
        # an explicit null on a required column means "leave unchanged"
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(document, field, value)


def issue_share_token(document) -> str:
    """Give the document a share token the first time it is shared; reuse it after."""
    if not document.share_token:
        document.share_token = secrets.token_urlsafe(24)
        ttl_days = get_settings().share_token_ttl_days
        if ttl_days:
            document.share_token_expires_at = utcnow() + timedelta(days=ttl_days)
    return document.share_token


def next_document_number(db: Session, model, column, prefix: str, business_id: int) -> str:
    """PREFIX-<business>-<sequence>, skipping any number already taken."""
    sequence = db.query(model).filter(model.business_id == business_id).count() + 1
    while True:
        number = f"{prefix}-{business_id:03d}-{sequence:04d}"
        if db.query(model).filter(column == number).first() is None:
            return number
        sequence += 1


def pricing_changes(payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """The subset of an update payload that affects totals, or None."""
    changes = {name: payload[name] for name in PRICING_FIELDS if name in payload}
    return changes or None
