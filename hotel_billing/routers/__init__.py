# hotel_billing/routers/__init__.py

from .billing import router as billing_router

__all__ = [
    "billing_router",
]
