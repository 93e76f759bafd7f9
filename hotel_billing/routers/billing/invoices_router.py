from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from hotel_billing.core.db import get_db
from hotel_billing.schemas.billing_schemas.invoice_schemas import (
    InvoiceCalculateRequest, InvoiceCreate, InvoiceUpdate, InvoiceResponse, InvoiceTotals
)
from hotel_billing.services.billing_services.invoice_service import (
    preview_invoice_totals, create_invoice, update_invoice, get_all_invoices, get_invoice_by_id
)

router = APIRouter(prefix="/invoices", tags=["Invoice"])


# POST /billing/invoices/calculate
@router.post("/calculate", response_model=InvoiceTotals)
async def route_calculate_invoice(payload: InvoiceCalculateRequest):
    """Price line items without saving anything."""
    return preview_invoice_totals(payload)


# POST /billing/invoices
@router.post("", response_model=InvoiceResponse, status_code=201)
async def route_create_invoice(payload: InvoiceCreate, db: AsyncSession = Depends(get_db)):
    try:
        return await create_invoice(db, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# GET /billing/invoices
@router.get("", response_model=List[InvoiceResponse])
async def route_get_all_invoices(limit: int = 100, offset: int = 0, db: AsyncSession = Depends(get_db)):
    return await get_all_invoices(db, limit=limit, offset=offset)


# GET /billing/invoices/{invoice_id}
@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def route_get_invoice(invoice_id: int, db: AsyncSession = Depends(get_db)):
    invoice = await get_invoice_by_id(db, invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


# PUT /billing/invoices/{invoice_id}
@router.put("/{invoice_id}", response_model=InvoiceResponse)
async def route_update_invoice(invoice_id: int, payload: InvoiceUpdate, db: AsyncSession = Depends(get_db)):
    try:
        return await update_invoice(db, invoice_id, payload)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
