import os

# Must be set before hotel_billing.core.config is imported
os.environ["DB_TYPE"] = "sqlite"
os.environ["SQLITE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["PROPERTY_TIMEZONE"] = "Asia/Colombo"

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hotel_billing.core.db import Base, get_db
from hotel_billing.models import Discount, CouponCode, Invoice, DiscountType, DiscountStatus
from main import app


def discount_fields(**overrides):
    fields = dict(
        name="Long Stay",
        description=None,
        discount_type=DiscountType.PERCENTAGE,
        amount=Decimal("15"),
        currency="USD",
        min_stay_nights=0,
        valid_from=date(2025, 1, 1),
        valid_until=date(2025, 12, 31),
        blackout_dates=[],
        applicable_room_types=[],
        applicable_rate_type_ids=[],
        max_total_usage=None,
        max_usage_per_guest=None,
        one_time_per_booking=False,
        one_time_per_guest=False,
        usage_count=0,
        status=DiscountStatus.ACTIVE,
    )
    fields.update(overrides)
    return fields


def make_discount(**overrides) -> Discount:
    """Unsaved discount with every rule field populated."""
    return Discount(**discount_fields(**overrides))


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def add_discount(db):
    async def _add(**overrides) -> Discount:
        discount = make_discount(**overrides)
        db.add(discount)
        await db.commit()
        return discount
    return _add


@pytest.fixture
def add_coupon(db):
    async def _add(discount: Discount, code: str) -> CouponCode:
        coupon = CouponCode(discount_id=discount.id, code=code)
        db.add(coupon)
        await db.commit()
        return coupon
    return _add


@pytest.fixture
def add_invoice(db):
    counter = {"n": 0}

    async def _add(**overrides) -> Invoice:
        counter["n"] += 1
        fields = dict(
            invoice_number=f"INV-TEST-{counter['n']:04d}",
            check_in=date(2025, 6, 1),
            check_out=date(2025, 6, 4),
            currency="USD",
        )
        fields.update(overrides)
        invoice = Invoice(**fields)
        db.add(invoice)
        await db.commit()
        return invoice
    return _add
