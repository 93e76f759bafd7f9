# hotel_billing/services/billing_services/usage_ledger_service.py
"""
Usage ledger: at most one applied-discount row per invoice.

Rows are replaced, never edited, and usage_count only ever moves up: a
discount counts as consumed once it has been attached to an invoice, even if
the invoice later drops or switches it.
"""
from decimal import Decimal
from sqlalchemy import select, delete, exists
from sqlalchemy.ext.asyncio import AsyncSession
from hotel_billing.models.billing_models.invoice_models import InvoiceDiscount
from hotel_billing.models.discount_models import DiscountType
from hotel_billing.services.billing_services.discount_service import try_consume_usage
from hotel_billing.utils.decimal_utils import round_money
import logging

logger = logging.getLogger(__name__)


async def get_invoice_discount(db: AsyncSession, invoice_id: int) -> InvoiceDiscount | None:
    result = await db.execute(select(InvoiceDiscount).where(InvoiceDiscount.invoice_id == invoice_id))
    return result.scalar_one_or_none()


async def clear_invoice_discount(db: AsyncSession, invoice_id: int) -> InvoiceDiscount | None:
    """Drop the invoice's ledger row. Usage already recorded stays recorded."""
    previous = await get_invoice_discount(db, invoice_id)
    await db.execute(
        delete(InvoiceDiscount)
        .where(InvoiceDiscount.invoice_id == invoice_id)
        .execution_options(synchronize_session=False)
    )
    if previous is not None:
        db.expunge(previous)
    return previous


async def replace_invoice_discount(
    db: AsyncSession,
    invoice_id: int,
    *,
    discount_id: int,
    discount_amount: Decimal,
    discount_type: DiscountType,
    discount_value_used: Decimal,
    coupon_code_id: int | None = None,
    guest_id: str | None = None,
    booking_id: str | None = None,
    increment_usage: bool = True,
) -> InvoiceDiscount | None:
    """
    Delete-then-insert the ledger row for an invoice, inside the caller's transaction.

    Usage is consumed only when the discount differs from the one previously
    recorded for this invoice, so re-finalizing is idempotent. A zero amount
    leaves the invoice with no row. Raises ValueError when the usage cap is
    already exhausted; the caller must roll back.
    """
    previous = await clear_invoice_discount(db, invoice_id)
    previous_discount_id = previous.discount_id if previous else None

    discount_amount = round_money(discount_amount)
    if discount_amount <= 0:
        return None

    if increment_usage and previous_discount_id != discount_id:
        if not await try_consume_usage(db, discount_id):
            raise ValueError("Discount usage limit reached")

    entry = InvoiceDiscount(
        invoice_id=invoice_id,
        discount_id=discount_id,
        coupon_code_id=coupon_code_id,
        guest_id=guest_id,
        booking_id=booking_id,
        discount_amount=discount_amount,
        discount_type=discount_type,
        discount_value_used=discount_value_used,
    )
    db.add(entry)
    await db.flush()
    logger.info(
        "Invoice %s ledger: discount %s amount %s (previous %s)",
        invoice_id, discount_id, discount_amount, previous_discount_id,
    )
    return entry


async def guest_has_used_discount(
    db: AsyncSession, discount_id: int, guest_id: str, exclude_invoice_id: int | None = None
) -> bool:
    conditions = [InvoiceDiscount.discount_id == discount_id, InvoiceDiscount.guest_id == guest_id]
    if exclude_invoice_id is not None:
        conditions.append(InvoiceDiscount.invoice_id != exclude_invoice_id)
    result = await db.execute(select(exists().where(*conditions)))
    return bool(result.scalar())


async def booking_has_discount(
    db: AsyncSession, booking_id: str, exclude_invoice_id: int | None = None
) -> bool:
    conditions = [InvoiceDiscount.booking_id == booking_id]
    if exclude_invoice_id is not None:
        conditions.append(InvoiceDiscount.invoice_id != exclude_invoice_id)
    result = await db.execute(select(exists().where(*conditions)))
    return bool(result.scalar())
