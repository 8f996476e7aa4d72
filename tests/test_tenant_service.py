import pytest
from datetime import date

from sqlalchemy import select, func

from roomrent.database.models import Contract, ContractStatus, Invoice, Room, RoomStatus, Tenant
from roomrent.errors import ConflictError, NotFoundError, ValidationError
from roomrent.services.contract_service import create_contract
from roomrent.services.invoice_service import create_invoice
from roomrent.services.room_service import create_room
from roomrent.services.tenant_service import (
    create_tenant, get_tenant, list_tenants, update_tenant, delete_tenant
)


async def room_status(session, room_id):
    result = await session.execute(select(Room.status).where(Room.id == room_id))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_duplicate_phone_conflicts(async_session, tenant):
    with pytest.raises(ConflictError):
        await create_tenant(async_session, "Copy", tenant.phone)


@pytest.mark.asyncio
async def test_update_tenant(async_session, tenant):
    other = await create_tenant(async_session, "Other", "0900000005")

    updated = await update_tenant(async_session, tenant.id, email="t@example.com", address="12 Le Loi")
    assert updated.email == "t@example.com"
    assert updated.address == "12 Le Loi"

    with pytest.raises(ConflictError):
        await update_tenant(async_session, tenant.id, phone=other.phone)
    with pytest.raises(ValidationError):
        await update_tenant(async_session, tenant.id, landlord_id=1)
    with pytest.raises(NotFoundError):
        await get_tenant(async_session, 999)

    assert len(await list_tenants(async_session)) == 2


@pytest.mark.asyncio
async def test_delete_tenant_cascade_rechecks_each_room(async_session, landlord, tenant, room):
    """
    Tenant holds an active contract on room A and an old contract on room B.
    Room B is rented by someone else now and must stay occupied.
    """
    room_b = await create_room(async_session, landlord.id, "102", price=1500000)
    neighbour = await create_tenant(async_session, "Neighbour", "0900000006")

    active = await create_contract(
        async_session, landlord.id, tenant.id, room.id,
        start_date=date(2024, 1, 1), monthly_rent=2000000,
    )
    async_session.add(Contract(
        tenant_id=tenant.id,
        room_id=room_b.id,
        landlord_id=landlord.id,
        start_date=date(2023, 1, 1),
        end_date=date(2023, 12, 31),
        monthly_rent=1500000,
        status=ContractStatus.expired.value,
    ))
    await async_session.commit()
    await create_contract(
        async_session, landlord.id, neighbour.id, room_b.id,
        start_date=date(2024, 1, 1), monthly_rent=1500000,
    )
    await create_invoice(
        async_session,
        contract_id=active.id, tenant_id=tenant.id, room_id=room.id,
        month=1, year=2024, room_price=2000000,
        electric_usage=0, electric_price=0, water_usage=0, water_price=0,
    )

    released = await delete_tenant(async_session, tenant.id)

    assert released == [room.id]
    assert await room_status(async_session, room.id) == RoomStatus.available.value
    assert await room_status(async_session, room_b.id) == RoomStatus.occupied.value

    remaining = await async_session.execute(select(Contract.tenant_id))
    assert remaining.scalars().all() == [neighbour.id]
    invoices = await async_session.execute(select(func.count(Invoice.id)))
    assert invoices.scalar() == 0
    tenants = await async_session.execute(select(Tenant.id))
    assert tenants.scalars().all() == [neighbour.id]


@pytest.mark.asyncio
async def test_delete_tenant_without_contracts(async_session, tenant):
    assert await delete_tenant(async_session, tenant.id) == []

    with pytest.raises(NotFoundError):
        await delete_tenant(async_session, tenant.id)
