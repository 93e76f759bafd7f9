from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from hotel_billing.core.db import get_db
from hotel_billing.schemas.offer_schemas import OfferCreate, OfferUpdate, OfferOut
from hotel_billing.schemas.response_schemas import ResponseMessage
from hotel_billing.services.billing_services import offer_service

router = APIRouter(prefix="/offers", tags=["Offers"])


@router.post("/", response_model=OfferOut, status_code=201)
async def route_create_offer(payload: OfferCreate, db: AsyncSession = Depends(get_db)):
    return await offer_service.create_offer(db, payload)


@router.get("/", response_model=List[OfferOut])
async def route_get_offers(db: AsyncSession = Depends(get_db)):
    """Offers in display order."""
    return await offer_service.get_offers(db)


@router.get("/{offer_id}", response_model=OfferOut)
async def route_get_offer(offer_id: int, db: AsyncSession = Depends(get_db)):
    offer = await offer_service.get_offer_by_id(db, offer_id)
    if not offer:
        raise HTTPException(status_code=404, detail="Offer not found")
    return offer


@router.put("/{offer_id}", response_model=OfferOut)
async def route_update_offer(offer_id: int, payload: OfferUpdate, db: AsyncSession = Depends(get_db)):
    offer = await offer_service.update_offer(db, offer_id, payload)
    if not offer:
        raise HTTPException(status_code=404, detail="Offer not found")
    return offer


@router.delete("/{offer_id}", response_model=ResponseMessage[None])
async def route_delete_offer(offer_id: int, db: AsyncSession = Depends(get_db)):
    try:
        offer = await offer_service.delete_offer(db, offer_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ResponseMessage(message=f"Offer '{offer.name}' deleted")
