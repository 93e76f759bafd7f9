from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from hotel_billing.core.db import get_db
from hotel_billing.schemas.coupon_schemas import (
    CouponCodeCreate, CouponCodeOut, CouponLookupRequest, CouponLookupResponse
)
from hotel_billing.schemas.response_schemas import ResponseMessage
from hotel_billing.services.billing_services import coupon_service

router = APIRouter(prefix="/coupon-codes", tags=["Coupon Codes"])


@router.post("/", response_model=CouponCodeOut, status_code=201)
async def route_create_coupon_code(payload: CouponCodeCreate, db: AsyncSession = Depends(get_db)):
    try:
        return await coupon_service.create_coupon_code(db, payload)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=List[CouponCodeOut])
async def route_get_coupon_codes(
    discount_id: int | None = Query(None, description="Only coupons for this discount"),
    db: AsyncSession = Depends(get_db),
):
    return await coupon_service.get_coupon_codes(db, discount_id)


# POST /billing/coupon-codes/lookup
@router.post("/lookup", response_model=CouponLookupResponse)
async def route_lookup_coupon(payload: CouponLookupRequest, db: AsyncSession = Depends(get_db)):
    if not payload.code.strip():
        raise HTTPException(status_code=400, detail="Code is required")
    coupon = await coupon_service.find_coupon_by_code(db, payload.code)
    if not coupon:
        raise HTTPException(status_code=404, detail="Invalid coupon code")
    return CouponLookupResponse(coupon=CouponCodeOut.model_validate(coupon))


@router.get("/{coupon_id}", response_model=CouponCodeOut)
async def route_get_coupon_code(coupon_id: int, db: AsyncSession = Depends(get_db)):
    coupon = await coupon_service.get_coupon_code_by_id(db, coupon_id)
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon code not found")
    return coupon


@router.delete("/{coupon_id}", response_model=ResponseMessage[None])
async def route_delete_coupon_code(coupon_id: int, db: AsyncSession = Depends(get_db)):
    try:
        coupon = await coupon_service.delete_coupon_code(db, coupon_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ResponseMessage(message=f"Coupon code '{coupon.code}' deleted")
