"""Shared test infrastructure.

Provides:
- db_session: async SQLite in-memory session with all tables created
- client: httpx AsyncClient against the app, sharing db_session
- make_partner / make_customer / make_vendor: row factories (committed)
"""

import os
import uuid

# Settings are read at import time; keep tests off disk and off the network
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["OPENAI_API_KEY"] = ""

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from config import settings
from database import Base, get_db

# Import all model modules so their tables are registered with Base.metadata
import models  # noqa: F401
from models import Customer, Partner, Vendor
from models.enums import PartnerStatus, Role, VendorStatus, VendorType
from services import journey


# ---------------------------------------------------------------------------
# Database session fixture
# ---------------------------------------------------------------------------

@pytest.fixture
async def db_session():
    """Fresh in-memory database per test; the session mirrors the app's (no autoflush)."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_dir", str(path))
    return path


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(db_session, upload_dir):
    """AsyncClient over ASGI; each request commits or rolls back db_session like get_db does.

    Rollback expires loaded rows, so tests keep ids in locals rather than
    reading fixture attributes after a failing request.
    """
    from main import app

    async def _override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = _override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Row factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_partner(db_session):
    """Factory that creates an approved Partner.

    Usage:
        bdp = await make_partner(role=Role.BDP)
        ddp = await make_partner(role=Role.DDP, parent_id=bdp.id)
    """
    async def _factory(
        role: Role = Role.DDP,
        name: str = "Test Partner",
        status: PartnerStatus = PartnerStatus.APPROVED,
        parent_id: str | None = None,
        state: str = "Odisha",
        referral_code: str | None = None,
        linked_customer_id: str | None = None,
    ) -> Partner:
        partner = Partner(
            id=f"ptr-{uuid.uuid4().hex[:12]}",
            username=f"user-{uuid.uuid4().hex[:8]}",
            name=name,
            phone="9876543210",
            role=role.value,
            state=state,
            status=status.value,
            parent_id=parent_id,
            referral_code=referral_code,
            linked_customer_id=linked_customer_id,
        )
        db_session.add(partner)
        await db_session.commit()
        return partner

    return _factory


@pytest.fixture
def make_customer(db_session):
    """Factory that creates a Customer with its milestone checklist seeded."""
    async def _factory(
        ddp: Partner | None = None,
        name: str = "Ravi Kumar",
        phone: str = "9123456780",
        state: str = "Odisha",
        panel_type: str = "dcr",
        proposed_capacity: str | None = "3",
        status: str = "pending",
        source: str = "ddp_registration",
        referrer_customer_id: str | None = None,
        **fields,
    ) -> Customer:
        customer = Customer(
            id=f"cus-{uuid.uuid4().hex[:12]}",
            name=name,
            phone=phone,
            state=state,
            panel_type=panel_type,
            proposed_capacity=proposed_capacity,
            status=status,
            ddp_id=ddp.id if ddp else None,
            source=source,
            referrer_customer_id=referrer_customer_id,
            site_pictures=[],
            **fields,
        )
        db_session.add(customer)
        await db_session.flush()
        await journey.initialize_milestones(db_session, customer.id)
        await db_session.commit()
        return customer

    return _factory


@pytest.fixture
def make_vendor(db_session):
    """Factory that creates a Vendor, approved by default."""
    async def _factory(
        vendor_type: VendorType = VendorType.DISCOM_NET_METERING,
        name: str = "Net Meter Services",
        state: str = "Odisha",
        status: VendorStatus = VendorStatus.APPROVED,
    ) -> Vendor:
        vendor = Vendor(
            id=f"vnd-{uuid.uuid4().hex[:12]}",
            name=name,
            vendor_type=vendor_type.value,
            phone="9000000000",
            state=state,
            status=status.value,
        )
        db_session.add(vendor)
        await db_session.commit()
        return vendor

    return _factory
