# hotel_billing/services/billing_services/discount_service.py
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession
from hotel_billing.models.discount_models import Offer, Discount, DiscountType, DiscountStatus
from hotel_billing.schemas.discount_schemas import DiscountCreate, DiscountUpdate
from hotel_billing.utils.activity_helpers import log_activity
import logging

logger = logging.getLogger(__name__)


def _check_amount(discount_type: DiscountType, amount: Decimal):
    if discount_type == DiscountType.PERCENTAGE and not (0 < amount <= 100):
        raise ValueError("Percentage discount must be between 0 and 100")
    if discount_type == DiscountType.FIXED and amount <= 0:
        raise ValueError("Fixed discount must be greater than 0")


async def _check_offer(db: AsyncSession, offer_id: int | None):
    if offer_id is not None and not await db.get(Offer, offer_id):
        raise ValueError("Offer not found")


def _to_columns(data: dict) -> dict:
    # Blackout dates are stored as ISO strings in a JSON column
    if data.get("blackout_dates") is not None:
        data["blackout_dates"] = sorted({d.isoformat() for d in data["blackout_dates"]})
    return data


# -----------------------
# CREATE
# -----------------------
async def create_discount(db: AsyncSession, payload: DiscountCreate) -> Discount:
    if payload.valid_from > payload.valid_until:
        raise ValueError("valid_from must not be after valid_until")
    _check_amount(payload.discount_type, payload.amount)
    await _check_offer(db, payload.offer_id)

    discount = Discount(**_to_columns(payload.model_dump()))
    discount.usage_count = 0
    db.add(discount)
    await db.flush()

    await log_activity(
        db,
        action="discount_created",
        entity_type="discount",
        entity_id=discount.id,
        entity_name=discount.name,
        message=f"Created discount: {discount.name}",
    )

    await db.commit()
    await db.refresh(discount)
    logger.info("Created discount %s (%s)", discount.id, discount.name)
    return discount


# -----------------------
# READ
# -----------------------
async def get_all_discounts(
    db: AsyncSession,
    status: DiscountStatus | None = None,
    discount_type: DiscountType | None = None,
    include_deleted: bool = False,
    offer_id: int | None = None,
):
    filters = []

    # Soft delete filter
    if not include_deleted:
        filters.append(Discount.deleted_at.is_(None))
    if status:
        filters.append(Discount.status == status)
    if discount_type:
        filters.append(Discount.discount_type == discount_type)
    if offer_id is not None:
        filters.append(Discount.offer_id == offer_id)

    query = select(Discount).where(*filters).order_by(Discount.created_at.desc(), Discount.id.desc())
    result = await db.execute(query)
    return result.scalars().all()

async def get_discount_by_id(db: AsyncSession, discount_id: int) -> Discount | None:
    # populate_existing: usage_count is bumped by bulk UPDATE, never trust the identity map
    result = await db.execute(
        select(Discount)
        .where(Discount.id == discount_id, Discount.deleted_at.is_(None))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


# -----------------------
# UPDATE
# -----------------------
async def update_discount(db: AsyncSession, discount_id: int, payload: DiscountUpdate) -> Discount | None:
    discount = await get_discount_by_id(db, discount_id)
    if not discount:
        return None

    update_data = payload.model_dump(exclude_unset=True)

    valid_from = update_data.get("valid_from", discount.valid_from)
    valid_until = update_data.get("valid_until", discount.valid_until)
    if valid_from > valid_until:
        raise ValueError("valid_from must not be after valid_until")

    if "discount_type" in update_data or "amount" in update_data:
        dtype = update_data.get("discount_type") or discount.discount_type
        amount = update_data.get("amount")
        if amount is None:
            amount = discount.amount
        _check_amount(dtype, Decimal(str(amount)))
    if update_data.get("offer_id") is not None:
        await _check_offer(db, update_data["offer_id"])

    for key, value in _to_columns(update_data).items():
        if value is None and key not in ("description", "offer_id", "max_total_usage", "max_usage_per_guest"):
            continue
        setattr(discount, key, value)

    status_changed = "status" in update_data and update_data["status"] is not None
    await log_activity(
        db,
        action="discount_status_changed" if status_changed else "discount_updated",
        entity_type="discount",
        entity_id=discount.id,
        entity_name=discount.name,
        message=f"Status: {discount.status.value}" if status_changed else f"Updated discount: {discount.name}",
    )

    await db.commit()
    await db.refresh(discount)
    return discount


# -----------------------
# SOFT DELETE
# -----------------------
async def delete_discount(db: AsyncSession, discount_id: int) -> Discount | None:
    discount = await get_discount_by_id(db, discount_id)
    if not discount:
        return None

    discount.deleted_at = datetime.now(timezone.utc)
    discount.status = DiscountStatus.INACTIVE

    await log_activity(
        db,
        action="discount_deleted",
        entity_type="discount",
        entity_id=discount.id,
        entity_name=discount.name,
        message=f"Deleted discount: {discount.name}",
    )

    await db.commit()
    await db.refresh(discount)
    return discount


# -----------------------
# USAGE
# -----------------------
async def try_consume_usage(db: AsyncSession, discount_id: int) -> bool:
    """
    Take one usage unit in a single conditional UPDATE.

    Returns False when the discount is missing or its max_total_usage is
    already reached. Runs inside the caller's transaction.
    """
    stmt = (
        update(Discount)
        .where(
            Discount.id == discount_id,
            or_(Discount.max_total_usage.is_(None), Discount.usage_count < Discount.max_total_usage),
        )
        .values(usage_count=Discount.usage_count + 1)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    consumed = result.rowcount == 1
    if not consumed:
        logger.warning("Usage cap reached for discount %s", discount_id)
    return consumed
