# hotel_billing/services/billing_services/report_service.py
from datetime import date
from decimal import Decimal
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_billing.models.billing_models.invoice_models import Invoice, InvoiceDiscount
from hotel_billing.models.discount_models import Discount, CouponCode
from hotel_billing.schemas.report_schemas import DiscountUsageRow
from hotel_billing.utils.decimal_utils import round_money


async def get_discount_usage_report(
    db: AsyncSession,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[DiscountUsageRow]:
    """
    Applied discounts grouped by discount and coupon code.

    The window keeps invoices whose stay overlaps it: check_out on/after
    start_date and check_in on/before end_date. Soft-deleted discounts are
    still reported.
    """
    stmt = (
        select(
            InvoiceDiscount.discount_id,
            Discount.name,
            CouponCode.code,
            Invoice.currency,
            func.count(InvoiceDiscount.id),
            func.sum(InvoiceDiscount.discount_amount),
        )
        .join(Invoice, Invoice.id == InvoiceDiscount.invoice_id)
        .outerjoin(Discount, Discount.id == InvoiceDiscount.discount_id)
        .outerjoin(CouponCode, CouponCode.id == InvoiceDiscount.coupon_code_id)
        .group_by(InvoiceDiscount.discount_id, Discount.name, CouponCode.code, Invoice.currency)
        .order_by(InvoiceDiscount.discount_id, CouponCode.code)
    )
    if start_date:
        stmt = stmt.where(Invoice.check_out >= start_date)
    if end_date:
        stmt = stmt.where(Invoice.check_in <= end_date)

    result = await db.execute(stmt)
    return [
        DiscountUsageRow(
            discount_id=discount_id,
            discount_name=name or "Unknown",
            coupon_code=code,
            usage_count=count,
            total_discount_amount=round_money(total or Decimal("0")),
            currency=currency,
        )
        for discount_id, name, code, currency, count, total in result.all()
    ]
