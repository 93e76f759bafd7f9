# hotel_billing/services/billing_services/discount_validation_service.py
"""
Decides whether a discount may apply to a proposed charge.

Rule violations are returned as ``Rejected`` values, never raised: a refused
coupon is a normal outcome shown to the guest. Database failures propagate as
exceptions so callers can tell "not eligible" apart from "could not check".

Checks run in a fixed order and stop at the first failure, so a given
request always reports the same reason:

    resolve -> status -> validity window -> minimum stay -> room types
    -> rate types -> blackout dates -> total usage -> per guest
    -> per booking -> amount

Nothing here writes; usage is consumed by the ledger when an invoice is
finalized.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Union

from sqlalchemy.ext.asyncio import AsyncSession

from hotel_billing.models.discount_models import Discount, CouponCode, DiscountType, DiscountStatus
from hotel_billing.schemas.discount_schemas import DiscountValidateRequest
from hotel_billing.services.billing_services.coupon_service import find_coupon_by_code
from hotel_billing.services.billing_services.pricing_service import calculate_discount_amount
from hotel_billing.services.billing_services.usage_ledger_service import (
    guest_has_used_discount,
    booking_has_discount,
    get_invoice_discount,
)
from hotel_billing.utils.date_helpers import property_today, stay_nights
from hotel_billing.utils.decimal_utils import to_decimal, round_money
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Accepted:
    discount: Discount
    discount_amount: Decimal
    discount_value: Decimal
    discount_type: DiscountType
    coupon: CouponCode | None = None

    valid = True


@dataclass(frozen=True)
class Rejected:
    reason: str
    discount_type: DiscountType = DiscountType.PERCENTAGE

    valid = False


ValidationResult = Union[Accepted, Rejected]


def check_discount_rules(
    discount: Discount, context: DiscountValidateRequest, today: date, already_applied: bool = False
) -> str | None:
    """
    Rejection reason for the first rule the discount fails, or None.

    already_applied marks a discount the invoice being edited already holds:
    its validity window was checked when it was applied, and one unit of
    usage_count is the invoice's own.
    """
    if discount.status != DiscountStatus.ACTIVE:
        return "Discount is inactive"

    if not already_applied:
        if today < discount.valid_from:
            return "Discount not yet valid"
        if today > discount.valid_until:
            return "Discount has expired"

    min_stay = discount.min_stay_nights or 0
    if context.nights < min_stay:
        return f"Minimum stay of {min_stay} nights required"

    room_types = discount.applicable_room_types or []
    if room_types and not set(context.room_types) & set(room_types):
        return "Discount does not apply to selected room types"

    rate_type_ids = discount.applicable_rate_type_ids or []
    if rate_type_ids and not set(context.rate_type_ids) & set(rate_type_ids):
        return "Discount does not apply to selected rate types"

    blackout = set(discount.blackout_dates or [])
    if blackout:
        for night in stay_nights(context.check_in, context.check_out):
            if night.isoformat() in blackout:
                return f"Blackout date: {night.isoformat()}"

    used = (discount.usage_count or 0) - (1 if already_applied else 0)
    if discount.max_total_usage is not None and used >= discount.max_total_usage:
        return "Discount usage limit reached"

    return None


async def _resolve_discount(
    db: AsyncSession, request: DiscountValidateRequest
) -> tuple[Discount | None, CouponCode | None, str | None]:
    coupon = None
    discount_id = request.discount_id

    if request.coupon_code and request.coupon_code.strip():
        coupon = await find_coupon_by_code(db, request.coupon_code)
        if not coupon:
            return None, None, "Invalid coupon code"
        if discount_id is not None and coupon.discount_id != discount_id:
            return None, coupon, "Coupon does not match discount"
        discount_id = coupon.discount_id

    # Soft-deleted discounts still resolve; they are inactive
    discount = await db.get(Discount, discount_id, populate_existing=True)
    if not discount:
        return None, coupon, "Discount not found"
    return discount, coupon, None


async def validate_discount(
    db: AsyncSession,
    request: DiscountValidateRequest,
    today: date | None = None,
) -> ValidationResult:
    if today is None:
        today = property_today()

    discount, coupon, error = await _resolve_discount(db, request)
    if error:
        logger.debug("Discount rejected: %s", error)
        return Rejected(error)

    already_applied = False
    if request.invoice_id is not None:
        current = await get_invoice_discount(db, request.invoice_id)
        already_applied = current is not None and current.discount_id == discount.id

    reason = check_discount_rules(discount, request, today, already_applied)
    if reason:
        logger.debug("Discount %s rejected: %s", discount.id, reason)
        return Rejected(reason, discount.discount_type)

    if discount.one_time_per_guest and request.guest_id:
        if await guest_has_used_discount(db, discount.id, request.guest_id, exclude_invoice_id=request.invoice_id):
            return Rejected("Guest has already used this discount", discount.discount_type)

    if discount.one_time_per_booking and request.booking_id:
        if await booking_has_discount(db, request.booking_id, exclude_invoice_id=request.invoice_id):
            return Rejected("Booking already has a discount", discount.discount_type)

    discount_value = to_decimal(discount.amount)
    discount_amount = calculate_discount_amount(discount_value, discount.discount_type, request.subtotal)

    return Accepted(
        discount=discount,
        discount_amount=round_money(discount_amount),
        discount_value=discount_value,
        discount_type=discount.discount_type,
        coupon=coupon,
    )
