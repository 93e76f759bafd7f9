# hotel_billing/services/billing_services/invoice_service.py
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
from decimal import Decimal
import random
import string

from hotel_billing.models.billing_models.invoice_models import Invoice, InvoiceItem
from hotel_billing.models.discount_models import DiscountType
from hotel_billing.schemas.billing_schemas.invoice_schemas import (
    InvoiceCalculateRequest, InvoiceCreate, InvoiceUpdate, InvoiceTotals
)
from hotel_billing.schemas.discount_schemas import DiscountValidateRequest
from hotel_billing.services.billing_services.pricing_service import calculate_invoice_total
from hotel_billing.services.billing_services.discount_validation_service import Accepted, validate_discount
from hotel_billing.services.billing_services.usage_ledger_service import (
    replace_invoice_discount, clear_invoice_discount
)
from hotel_billing.utils.activity_helpers import log_activity
from hotel_billing.utils.date_helpers import property_now
import logging

logger = logging.getLogger(__name__)


async def _generate_invoice_number(session: AsyncSession, prefix="INV") -> str:
    year = property_now().year
    chars = string.ascii_uppercase + string.digits
    for _ in range(5):
        number = f"{prefix}-{year}-{''.join(random.choices(chars, k=6))}"
        taken = await session.execute(select(Invoice.id).where(Invoice.invoice_number == number))
        if taken.first() is None:
            return number
    raise RuntimeError("Could not generate unique invoice number after retries")


def preview_invoice_totals(payload: InvoiceCalculateRequest) -> InvoiceTotals:
    return calculate_invoice_total(
        payload.items,
        payload.tax_rate,
        payload.discount,
        payload.discount_type,
        payload.service_charge_rate,
        payload.damage_charge,
        payload.price_adjustment,
    )


async def _price_invoice(
    session: AsyncSession,
    payload: InvoiceCreate,
    today: date | None,
    invoice_id: int | None = None,
) -> tuple[InvoiceTotals, Accepted | None]:
    """
    Price an invoice, validating any catalog discount or coupon first.

    Catalog discounts are validated against the subtotal including service
    charge, the same base the calculator discounts. Raises ValueError with the
    rejection reason when the discount does not apply.
    """
    has_coupon = bool(payload.coupon_code and payload.coupon_code.strip())
    if payload.discount_id is None and not has_coupon:
        return preview_invoice_totals(payload), None

    base = calculate_invoice_total(
        payload.items, Decimal("0"), Decimal("0"), DiscountType.PERCENTAGE,
        payload.service_charge_rate, Decimal("0"), Decimal("0"),
    ).subtotal_with_service

    result = await validate_discount(
        session,
        DiscountValidateRequest(
            discount_id=payload.discount_id,
            coupon_code=payload.coupon_code,
            subtotal=base,
            currency=payload.currency,
            check_in=payload.check_in,
            check_out=payload.check_out,
            room_types=payload.room_types,
            rate_type_ids=payload.rate_type_ids,
            guest_id=payload.guest_id,
            booking_id=payload.booking_id,
            invoice_id=invoice_id,
        ),
        today=today,
    )
    if not result.valid:
        raise ValueError(result.reason)

    if result.discount_type == DiscountType.PERCENTAGE:
        discount = result.discount_value
    else:
        discount = result.discount_amount

    totals = calculate_invoice_total(
        payload.items,
        payload.tax_rate,
        discount,
        result.discount_type,
        payload.service_charge_rate,
        payload.damage_charge,
        payload.price_adjustment,
    )
    return totals, result


def _apply_pricing(invoice: Invoice, payload: InvoiceCreate, totals: InvoiceTotals, accepted: Accepted | None):
    invoice.guest_id = payload.guest_id
    invoice.booking_id = payload.booking_id
    invoice.currency = payload.currency
    invoice.check_in = payload.check_in
    invoice.check_out = payload.check_out
    invoice.room_types = list(payload.room_types)
    invoice.rate_type_ids = list(payload.rate_type_ids)
    invoice.service_charge_rate = payload.service_charge_rate
    invoice.tax_rate = payload.tax_rate
    invoice.damage_charge = payload.damage_charge
    invoice.price_adjustment = payload.price_adjustment
    invoice.price_adjustment_reason = payload.price_adjustment_reason
    invoice.notes = payload.notes
    invoice.status = payload.status

    if accepted is not None:
        invoice.discount = accepted.discount_value
        invoice.discount_type = accepted.discount_type
    else:
        invoice.discount = payload.discount
        invoice.discount_type = payload.discount_type

    invoice.subtotal = totals.subtotal
    invoice.service_charge = totals.service_charge
    invoice.discount_amount = totals.discount_amount
    invoice.tax_amount = totals.tax_amount
    invoice.total = totals.total

    invoice.items = [
        InvoiceItem(
            description=item.description,
            quantity_type=item.quantity_type,
            quantity=item.quantity,
            unit_price=item.unit_price,
            currency=item.currency,
        )
        for item in payload.items
    ]


async def _record_discount(session: AsyncSession, invoice: Invoice, totals: InvoiceTotals, accepted: Accepted | None):
    if accepted is None:
        await clear_invoice_discount(session, invoice.id)
        return
    await replace_invoice_discount(
        session,
        invoice.id,
        discount_id=accepted.discount.id,
        coupon_code_id=accepted.coupon.id if accepted.coupon else None,
        guest_id=invoice.guest_id,
        booking_id=invoice.booking_id,
        discount_amount=totals.discount_amount,
        discount_type=accepted.discount_type,
        discount_value_used=accepted.discount_value,
    )


async def create_invoice(session: AsyncSession, payload: InvoiceCreate, today: date | None = None) -> Invoice:
    try:
        totals, accepted = await _price_invoice(session, payload, today)

        invoice = Invoice(invoice_number=await _generate_invoice_number(session))
        _apply_pricing(invoice, payload, totals, accepted)
        session.add(invoice)
        await session.flush()

        await _record_discount(session, invoice, totals, accepted)
        await log_activity(
            session,
            action="invoice_created",
            entity_type="invoice",
            entity_id=invoice.id,
            entity_name=invoice.invoice_number,
            message=f"Created invoice: {invoice.invoice_number}",
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Created invoice %s total %s", invoice.invoice_number, totals.total)
    return await get_invoice_by_id(session, invoice.id)


async def update_invoice(
    session: AsyncSession, invoice_id: int, payload: InvoiceUpdate, today: date | None = None
) -> Invoice:
    invoice = await get_invoice_by_id(session, invoice_id)
    if invoice is None:
        raise LookupError("Invoice not found")

    try:
        totals, accepted = await _price_invoice(session, payload, today, invoice_id=invoice.id)
        _apply_pricing(invoice, payload, totals, accepted)
        await session.flush()

        await _record_discount(session, invoice, totals, accepted)
        await log_activity(
            session,
            action="invoice_updated",
            entity_type="invoice",
            entity_id=invoice.id,
            entity_name=invoice.invoice_number,
            message=f"Updated invoice: {invoice.invoice_number}",
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    return await get_invoice_by_id(session, invoice_id)


async def get_all_invoices(session: AsyncSession, limit: int = 100, offset: int = 0):
    q = select(Invoice).order_by(Invoice.created_at.desc(), Invoice.id.desc()).limit(limit).offset(offset)
    res = await session.execute(q)
    return res.scalars().all()

async def get_invoice_by_id(session: AsyncSession, invoice_id: int) -> Invoice | None:
    res = await session.execute(
        select(Invoice).where(Invoice.id == invoice_id).execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()
