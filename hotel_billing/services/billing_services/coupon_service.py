# hotel_billing/services/billing_services/coupon_service.py
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from hotel_billing.models.discount_models import CouponCode
from hotel_billing.schemas.coupon_schemas import CouponCodeCreate
from hotel_billing.services.billing_services.discount_service import get_discount_by_id
from hotel_billing.utils.activity_helpers import log_activity
import logging

logger = logging.getLogger(__name__)


async def find_coupon_by_code(db: AsyncSession, code: str | None) -> CouponCode | None:
    """Case-insensitive lookup; blank input never matches."""
    if not code or not code.strip():
        return None
    result = await db.execute(
        select(CouponCode)
        .where(func.lower(CouponCode.code) == code.strip().lower())
        .limit(1)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def get_coupon_codes(db: AsyncSession, discount_id: int | None = None):
    query = select(CouponCode)
    if discount_id is not None:
        query = query.where(CouponCode.discount_id == discount_id)
    result = await db.execute(query.order_by(CouponCode.code.asc()))
    return result.scalars().all()


async def get_coupon_code_by_id(db: AsyncSession, coupon_id: int) -> CouponCode | None:
    return await db.get(CouponCode, coupon_id)


async def create_coupon_code(db: AsyncSession, payload: CouponCodeCreate) -> CouponCode:
    code = payload.code.strip()
    if not code:
        raise ValueError("Coupon code is required")

    discount = await get_discount_by_id(db, payload.discount_id)
    if not discount:
        raise LookupError("Discount not found")

    # Codes are unique regardless of case
    if await find_coupon_by_code(db, code):
        raise ValueError("Coupon code already exists")

    coupon = CouponCode(discount_id=discount.id, code=code)
    db.add(coupon)
    await db.flush()

    await log_activity(
        db,
        action="coupon_code_created",
        entity_type="coupon_code",
        entity_id=coupon.id,
        entity_name=coupon.code,
        message=f"Created coupon code: {coupon.code}",
    )

    await db.commit()
    result = await db.execute(
        select(CouponCode).where(CouponCode.id == coupon.id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def delete_coupon_code(db: AsyncSession, coupon_id: int) -> CouponCode:
    """Hard delete. The owning discount is left untouched."""
    coupon = await get_coupon_code_by_id(db, coupon_id)
    if not coupon:
        raise LookupError("Coupon code not found")

    await db.delete(coupon)
    await log_activity(
        db,
        action="coupon_code_deleted",
        entity_type="coupon_code",
        entity_id=coupon_id,
        entity_name=coupon.code,
        message=f"Deleted coupon code: {coupon.code}",
    )
    await db.commit()
    logger.info("Deleted coupon code %s", coupon.code)
    return coupon
