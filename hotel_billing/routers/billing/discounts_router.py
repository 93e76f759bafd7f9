from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from hotel_billing.core.db import get_db
from hotel_billing.models.discount_models import DiscountStatus, DiscountType
from hotel_billing.schemas.discount_schemas import (
    DiscountCreate, DiscountUpdate, DiscountOut, DiscountValidateRequest, DiscountValidateResponse
)
from hotel_billing.services.billing_services.discount_service import (
    create_discount,
    get_all_discounts,
    get_discount_by_id,
    update_discount,
    delete_discount,
)
from hotel_billing.services.billing_services.discount_validation_service import Rejected, validate_discount
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/discounts", tags=["Discounts"])


@router.post("/", response_model=DiscountOut, status_code=201)
async def route_create_discount(payload: DiscountCreate, db: AsyncSession = Depends(get_db)):
    """
    Create a new discount (e.g., Long Stay 15%).
    Validates the date window and the amount for the discount type.
    """
    try:
        return await create_discount(db, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=List[DiscountOut])
async def route_get_all_discounts(
    db: AsyncSession = Depends(get_db),
    status: DiscountStatus | None = Query(None, description="Filter by status (active/inactive)"),
    discount_type: DiscountType | None = Query(None, description="Filter by type (percentage/fixed)"),
    include_deleted: bool = Query(False, description="Include soft-deleted discounts"),
    offer_id: int | None = Query(None, description="Only discounts grouped under this offer"),
):
    return await get_all_discounts(
        db, status=status, discount_type=discount_type, include_deleted=include_deleted, offer_id=offer_id
    )


@router.post("/validate", response_model=DiscountValidateResponse)
async def route_validate_discount(payload: DiscountValidateRequest, db: AsyncSession = Depends(get_db)):
    """
    Check a discount (or coupon code) against a proposed stay and subtotal.
    Rule failures come back as valid=false with the reason; nothing is consumed.
    """
    try:
        result = await validate_discount(db, payload)
    except SQLAlchemyError:
        logger.exception("Validate discount error")
        return JSONResponse(status_code=500, content={"valid": False, "error": "Validation failed"})

    if isinstance(result, Rejected):
        return DiscountValidateResponse(valid=False, discount_type=result.discount_type, error=result.reason)
    return DiscountValidateResponse(
        valid=True,
        discount_amount=result.discount_amount,
        discount_value=result.discount_value,
        discount_type=result.discount_type,
        discount=DiscountOut.model_validate(result.discount),
    )


@router.get("/{discount_id}", response_model=DiscountOut)
async def route_get_discount(discount_id: int, db: AsyncSession = Depends(get_db)):
    """Fetch a single discount by ID."""
    discount = await get_discount_by_id(db, discount_id)
    if not discount:
        raise HTTPException(status_code=404, detail="Discount not found")
    return discount


@router.put("/{discount_id}", response_model=DiscountOut)
async def route_update_discount(discount_id: int, payload: DiscountUpdate, db: AsyncSession = Depends(get_db)):
    """Update discount details (status, dates, constraints)."""
    try:
        updated = await update_discount(db, discount_id, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not updated:
        raise HTTPException(status_code=404, detail="Discount not found")
    return updated


@router.delete("/{discount_id}", response_model=DiscountOut)
async def route_delete_discount(discount_id: int, db: AsyncSession = Depends(get_db)):
    """Soft delete a discount; keeps the record for historical reports."""
    deleted = await delete_discount(db, discount_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Discount not found")
    return deleted
