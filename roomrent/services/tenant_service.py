import logging
from typing import Optional, List
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from roomrent.database.models import Tenant, Contract, Invoice
from roomrent.errors import ConflictError, NotFoundError, ValidationError
from roomrent.services.room_service import release_room_if_vacant

_UPDATABLE_FIELDS = {"name", "phone", "email", "address", "id_card", "tg_id"}


async def get_tenant_by_phone(session: AsyncSession, phone: str) -> Tenant | None:
    stmt = select(Tenant).where(Tenant.phone == phone)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_tenant(
    session: AsyncSession,
    name: str,
    phone: Optional[str] = None,
    email: Optional[str] = None,
    address: Optional[str] = None,
    id_card: Optional[str] = None,
    tg_id: Optional[int] = None
) -> Tenant:
    """
    Create a tenant profile. Phone numbers are unique; the constraint also
    catches a concurrent insert that slipped past the lookup.
    """
    if phone and await get_tenant_by_phone(session, phone):
        raise ConflictError("Phone number already exists")

    tenant = Tenant(name=name, phone=phone, email=email, address=address, id_card=id_card, tg_id=tg_id)
    session.add(tenant)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("Phone number or Telegram ID already exists")
    return tenant


async def get_tenant(session: AsyncSession, tenant_id: int) -> Tenant:
    tenant = await session.get(Tenant, tenant_id)
    if not tenant:
        raise NotFoundError(f"Tenant with ID {tenant_id} not found")
    return tenant


async def list_tenants(session: AsyncSession) -> List[Tenant]:
    result = await session.execute(select(Tenant).order_by(Tenant.id))
    return list(result.scalars().all())


async def update_tenant(session: AsyncSession, tenant_id: int, **fields) -> Tenant:
    unknown = set(fields) - _UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown tenant fields: {', '.join(sorted(unknown))}")

    tenant = await get_tenant(session, tenant_id)

    phone = fields.get("phone")
    if phone and phone != tenant.phone:
        existing = await get_tenant_by_phone(session, phone)
        if existing and existing.id != tenant_id:
            raise ConflictError("Phone number already exists")

    for name, value in fields.items():
        setattr(tenant, name, value)

    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("Phone number or Telegram ID already exists")
    return tenant


async def delete_tenant(session: AsyncSession, tenant_id: int) -> List[int]:
    """
    Delete a tenant with all of its contracts (and their invoices) in one
    transaction. Every room that lost a contract is re-checked on its own:
    it reverts to available only if no active contract remains on it.

    Returns the ids of rooms that were released.
    """
    tenant = await get_tenant(session, tenant_id)

    try:
        stmt = select(Contract.id, Contract.room_id).where(Contract.tenant_id == tenant_id)
        result = await session.execute(stmt)
        contracts = result.all()
        contract_ids = [row.id for row in contracts]
        room_ids = sorted({row.room_id for row in contracts})

        if contract_ids:
            await session.execute(delete(Invoice).where(Invoice.contract_id.in_(contract_ids)))
            await session.execute(delete(Contract).where(Contract.id.in_(contract_ids)))
        await session.execute(delete(Invoice).where(Invoice.tenant_id == tenant_id))

        released = []
        for room_id in room_ids:
            if await release_room_if_vacant(session, room_id):
                released.append(room_id)

        await session.execute(delete(Tenant).where(Tenant.id == tenant.id))
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logging.info(
        f"Tenant {tenant_id} deleted with {len(contract_ids)} contracts, "
        f"rooms released: {released}"
    )
    return released
