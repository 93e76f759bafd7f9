from fastapi import APIRouter
from .offers_router import router as offers_router
from .discounts_router import router as discounts_router
from .coupon_codes_router import router as coupon_codes_router
from .invoices_router import router as invoices_router
from .reports_router import router as reports_router
from .activity_router import router as activity_router

router = APIRouter(prefix="/billing")

router.include_router(offers_router)
router.include_router(discounts_router)
router.include_router(coupon_codes_router)
router.include_router(invoices_router)
router.include_router(reports_router)
router.include_router(activity_router)
