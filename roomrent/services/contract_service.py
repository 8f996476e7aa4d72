"""
Contract lifecycle coupled to room occupancy.

Invariant: a room is `occupied` exactly when an `active` contract references
it. Every mutation here locks the room row, changes the contract and the
room together, and commits once; any failure rolls both back.
"""
import logging
from datetime import date
from typing import Optional, List

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from roomrent.database.models import Contract, ContractStatus, RoomStatus, Invoice
from roomrent.errors import NotFoundError, ForbiddenError, ConflictError, ValidationError
from roomrent.services.access import Actor, ensure_contract_access
from roomrent.services.room_service import lock_room, count_active_contracts, release_room_if_vacant
from roomrent.services.tenant_service import get_tenant
from roomrent.utils.formatting import to_decimal, optional_decimal

_UPDATABLE_FIELDS = {"start_date", "end_date", "monthly_rent", "deposit", "notes", "status"}


def _parse_status(status) -> ContractStatus:
    try:
        return ContractStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown contract status {status!r}")


async def create_contract(
    session: AsyncSession,
    landlord_id: int,
    tenant_id: int,
    room_id: int,
    start_date: date,
    monthly_rent,
    end_date: Optional[date] = None,
    deposit=None,
    notes: Optional[str] = None,
    status: ContractStatus = ContractStatus.active,
) -> Contract:
    """
    Sign a contract on an available room owned by the landlord.
    The room flips to occupied in the same transaction.
    """
    status = _parse_status(status)

    try:
        # LOCK THE ROOM ROW so two landlord sessions cannot both see it available
        room = await lock_room(session, room_id)
        if not room:
            raise NotFoundError(f"Room with ID {room_id} not found")
        if room.landlord_id != landlord_id:
            raise ForbiddenError("Room does not belong to this landlord")
        if room.status != RoomStatus.available.value:
            raise ConflictError("Room is not available")

        existing = await count_active_contracts(session, room_id)
        if existing:
            raise ConflictError("Room already has an active contract")

        await get_tenant(session, tenant_id)

        if end_date and end_date < start_date:
            raise ValidationError("End date is before start date")

        contract = Contract(
            tenant_id=tenant_id,
            room_id=room_id,
            landlord_id=landlord_id,
            start_date=start_date,
            end_date=end_date,
            monthly_rent=to_decimal(monthly_rent),
            deposit=optional_decimal(deposit),
            status=status.value,
            notes=notes,
        )
        session.add(contract)
        await session.flush()  # Get contract.id

        # Historical (non-active) contracts do not occupy the room
        if status == ContractStatus.active:
            room.status = RoomStatus.occupied.value

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logging.info(f"Contract {contract.id} created: tenant {tenant_id} in room {room_id}")
    return contract


async def list_contracts(
    session: AsyncSession,
    landlord_id: Optional[int] = None,
    tenant_id: Optional[int] = None
) -> List[Contract]:
    stmt = select(Contract)
    if landlord_id:
        stmt = stmt.where(Contract.landlord_id == landlord_id)
    if tenant_id:
        stmt = stmt.where(Contract.tenant_id == tenant_id)
    stmt = stmt.options(
        selectinload(Contract.tenant),
        selectinload(Contract.room)
    ).order_by(Contract.id.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_contract(session: AsyncSession, contract_id: int, actor: Optional[Actor] = None) -> Contract:
    stmt = (
        select(Contract)
        .where(Contract.id == contract_id)
        .options(selectinload(Contract.tenant), selectinload(Contract.room))
    )
    result = await session.execute(stmt)
    contract = result.scalar_one_or_none()

    if not contract:
        raise NotFoundError(f"Contract with ID {contract_id} not found")
    if actor is not None:
        ensure_contract_access(actor, contract)
    return contract


async def _get_owned_contract(session: AsyncSession, contract_id: int, landlord_id: Optional[int]) -> Contract:
    contract = await session.get(Contract, contract_id)
    if not contract:
        raise NotFoundError(f"Contract with ID {contract_id} not found")
    if landlord_id is not None and contract.landlord_id != landlord_id:
        raise ForbiddenError("Access denied")
    return contract


async def update_contract(session: AsyncSession, contract_id: int, landlord_id: int, **fields) -> Contract:
    """
    Owner-only edit. Leaving `active` re-checks the room; returning to
    `active` needs the room free of other active contracts.
    """
    unknown = set(fields) - _UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown contract fields: {', '.join(sorted(unknown))}")

    try:
        contract = await _get_owned_contract(session, contract_id, landlord_id)
        room = await lock_room(session, contract.room_id)

        was_active = contract.status == ContractStatus.active.value
        raw_status = fields.pop("status", None)
        new_status = _parse_status(raw_status) if raw_status is not None else None

        for name, value in fields.items():
            if name == "monthly_rent" and value is not None:
                value = to_decimal(value)
            elif name == "deposit":
                value = optional_decimal(value)
            setattr(contract, name, value)

        if contract.end_date and contract.end_date < contract.start_date:
            raise ValidationError("End date is before start date")

        if new_status is not None:
            if was_active and new_status != ContractStatus.active:
                contract.status = new_status.value
                await release_room_if_vacant(session, contract.room_id, exclude_contract_id=contract.id)
            elif not was_active and new_status == ContractStatus.active:
                if await count_active_contracts(session, contract.room_id, exclude_contract_id=contract.id):
                    raise ConflictError("Room already has an active contract")
                if room.status == RoomStatus.maintenance.value:
                    raise ConflictError("Room is under maintenance")
                contract.status = new_status.value
                room.status = RoomStatus.occupied.value
            else:
                contract.status = new_status.value

        await session.commit()
    except Exception:
        await session.rollback()
        raise

    return contract


async def terminate_contract(session: AsyncSession, contract_id: int, landlord_id: Optional[int] = None) -> Contract:
    """
    End a contract early. Terminating twice is a no-op.
    """
    try:
        contract = await _get_owned_contract(session, contract_id, landlord_id)

        # IDEMPOTENCY CHECK: If already terminated, return
        if contract.status == ContractStatus.terminated.value:
            logging.info(f"Contract {contract_id} already terminated")
            return contract

        contract.status = ContractStatus.terminated.value
        if contract.end_date is None:
            contract.end_date = date.today()
        await session.flush()

        await release_room_if_vacant(session, contract.room_id, exclude_contract_id=contract.id)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logging.info(f"Contract {contract_id} terminated")
    return contract


async def delete_contract(session: AsyncSession, contract_id: int, landlord_id: Optional[int] = None) -> None:
    """
    Remove a contract and its invoices, then re-check the room.
    """
    try:
        contract = await _get_owned_contract(session, contract_id, landlord_id)
        room_id = contract.room_id

        await session.execute(delete(Invoice).where(Invoice.contract_id == contract_id))
        await session.execute(delete(Contract).where(Contract.id == contract_id))

        await release_room_if_vacant(session, room_id, exclude_contract_id=contract_id)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logging.info(f"Contract {contract_id} deleted")
