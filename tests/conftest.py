import os

# Configure before roomrent.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("SMS_PROVIDER", "log")

from datetime import date

import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from roomrent.database.core import Base
from roomrent.database import models  # noqa: F401
from roomrent.services.contract_service import create_contract
from roomrent.services.landlord_service import create_landlord
from roomrent.services.room_service import create_room
from roomrent.services.tenant_service import create_tenant


@pytest_asyncio.fixture
async def session_factory():
    # One shared in-memory SQLite connection for every session of a test
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def landlord(async_session):
    return await create_landlord(async_session, "Tran Thi Landlord", "0900000001")


@pytest_asyncio.fixture
async def tenant(async_session):
    return await create_tenant(async_session, "Nguyen Van Tenant", "0900000002")


@pytest_asyncio.fixture
async def room(async_session, landlord):
    return await create_room(
        async_session,
        landlord.id,
        "101",
        price=2000000,
        electric_price=3500,
        water_price=25000,
    )


@pytest_asyncio.fixture
async def contract(async_session, landlord, tenant, room):
    return await create_contract(
        async_session,
        landlord.id,
        tenant.id,
        room.id,
        start_date=date(2024, 1, 1),
        monthly_rent=2000000,
    )
