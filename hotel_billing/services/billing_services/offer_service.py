# hotel_billing/services/billing_services/offer_service.py
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from hotel_billing.models.discount_models import Offer, Discount
from hotel_billing.schemas.offer_schemas import OfferCreate, OfferUpdate
from hotel_billing.utils.activity_helpers import log_activity


async def get_offers(db: AsyncSession):
    result = await db.execute(select(Offer).order_by(Offer.display_order.asc(), Offer.id.asc()))
    return result.scalars().all()


async def get_offer_by_id(db: AsyncSession, offer_id: int) -> Offer | None:
    return await db.get(Offer, offer_id)


async def create_offer(db: AsyncSession, payload: OfferCreate) -> Offer:
    offer = Offer(**payload.model_dump())
    db.add(offer)
    await db.flush()

    await log_activity(
        db,
        action="offer_created",
        entity_type="offer",
        entity_id=offer.id,
        entity_name=offer.name,
        message=f"Created offer: {offer.name}",
    )
    await db.commit()
    await db.refresh(offer)
    return offer


async def update_offer(db: AsyncSession, offer_id: int, payload: OfferUpdate) -> Offer | None:
    offer = await get_offer_by_id(db, offer_id)
    if not offer:
        return None

    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is None and key != "description":
            continue
        setattr(offer, key, value)

    await log_activity(
        db,
        action="offer_updated",
        entity_type="offer",
        entity_id=offer.id,
        entity_name=offer.name,
        message=f"Updated offer: {offer.name}",
    )
    await db.commit()
    await db.refresh(offer)
    return offer


async def delete_offer(db: AsyncSession, offer_id: int) -> Offer:
    """Hard delete. Discounts in the offer stay, ungrouped."""
    offer = await get_offer_by_id(db, offer_id)
    if not offer:
        raise LookupError("Offer not found")

    # Not every backend enforces ON DELETE SET NULL
    await db.execute(update(Discount).where(Discount.offer_id == offer_id).values(offer_id=None))
    await db.delete(offer)
    await log_activity(
        db,
        action="offer_deleted",
        entity_type="offer",
        entity_id=offer_id,
        entity_name=offer.name,
        message=f"Deleted offer: {offer.name}",
    )
    await db.commit()
    return offer
