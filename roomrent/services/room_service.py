import logging
from typing import Optional, List

from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from roomrent.database.models import (
    Room, RoomStatus, Contract, ContractStatus, Landlord, Invoice, Usage, SensorData
)
from roomrent.errors import NotFoundError, ForbiddenError, ConflictError, ValidationError
from roomrent.services.geocoding_service import GeocodingService
from roomrent.services.storage_service import LocalFileStorage
from roomrent.utils.formatting import to_decimal

_UPDATABLE_FIELDS = {
    "room_number", "floor", "area", "price", "electric_price", "water_price",
    "status", "description", "ward", "district", "province",
}
_ADDRESS_FIELDS = {"ward", "district", "province"}
_MONEY_FIELDS = {"price", "electric_price", "water_price"}


# --- Occupancy primitives (run inside the caller's transaction) ---

async def lock_room(session: AsyncSession, room_id: int) -> Optional[Room]:
    """SELECT ... FOR UPDATE on the room row"""
    stmt = select(Room).where(Room.id == room_id).with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def count_active_contracts(
    session: AsyncSession,
    room_id: int,
    exclude_contract_id: Optional[int] = None
) -> int:
    stmt = select(func.count(Contract.id)).where(
        Contract.room_id == room_id,
        Contract.status == ContractStatus.active.value
    )
    if exclude_contract_id is not None:
        stmt = stmt.where(Contract.id != exclude_contract_id)
    result = await session.execute(stmt)
    return result.scalar() or 0


async def release_room_if_vacant(
    session: AsyncSession,
    room_id: int,
    exclude_contract_id: Optional[int] = None
) -> bool:
    """
    Revert an occupied room to available when no other active contract
    references it. Does not commit. Returns True if the status changed.
    """
    room = await lock_room(session, room_id)
    if not room:
        return False

    remaining = await count_active_contracts(session, room_id, exclude_contract_id)
    if remaining == 0 and room.status == RoomStatus.occupied.value:
        room.status = RoomStatus.available.value
        logging.info(f"Room {room_id} released (no active contracts)")
        return True
    return False


# --- CRUD ---

async def create_room(
    session: AsyncSession,
    landlord_id: int,
    room_number: str,
    price,
    electric_price=0,
    water_price=0,
    floor: Optional[int] = None,
    area: Optional[float] = None,
    description: Optional[str] = None,
    ward: Optional[str] = None,
    district: Optional[str] = None,
    province: Optional[str] = None,
    status: RoomStatus = RoomStatus.available,
    qr_code_image: Optional[str] = None,
    geocoder: Optional[GeocodingService] = None,
    storage: Optional[LocalFileStorage] = None,
) -> Room:
    """Create a room for a landlord, resolving coordinates when possible."""
    landlord = await session.get(Landlord, landlord_id)
    if not landlord:
        raise NotFoundError(f"Landlord with ID {landlord_id} not found")

    status = RoomStatus(status)
    if status == RoomStatus.occupied:
        raise ValidationError("A new room cannot start occupied")

    room = Room(
        landlord_id=landlord_id,
        room_number=room_number,
        floor=floor,
        area=area,
        price=to_decimal(price),
        electric_price=to_decimal(electric_price),
        water_price=to_decimal(water_price),
        status=status.value,
        description=description,
        ward=ward,
        district=district,
        province=province,
    )

    if geocoder and (ward or province):
        coords = await geocoder.resolve_room_address(ward, district, province)
        if coords:
            room.latitude = coords.latitude
            room.longitude = coords.longitude

    if qr_code_image and storage:
        room.qr_code_url = storage.store(qr_code_image, "qr-codes")

    session.add(room)
    await session.commit()
    logging.info(f"Room {room.id} ({room_number}) created for landlord {landlord_id}")
    return room


async def list_rooms(
    session: AsyncSession,
    landlord_id: Optional[int] = None,
    status: Optional[RoomStatus] = None
) -> List[Room]:
    stmt = select(Room)
    if landlord_id:
        stmt = stmt.where(Room.landlord_id == landlord_id)
    if status:
        stmt = stmt.where(Room.status == RoomStatus(status).value)
    stmt = stmt.order_by(Room.id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_available_rooms(session: AsyncSession) -> List[Room]:
    return await list_rooms(session, status=RoomStatus.available)


async def get_room(session: AsyncSession, room_id: int, landlord_id: Optional[int] = None) -> Room:
    room = await session.get(Room, room_id)
    if not room:
        raise NotFoundError(f"Room with ID {room_id} not found")
    if landlord_id and room.landlord_id != landlord_id:
        raise ForbiddenError("Access denied")
    return room


async def update_room(
    session: AsyncSession,
    room_id: int,
    landlord_id: int,
    geocoder: Optional[GeocodingService] = None,
    **fields
) -> Room:
    """
    Owner-only update. Status changes must agree with contracts: only an
    active contract makes a room occupied, and an occupied room cannot be
    moved elsewhere while its contract is active.
    """
    unknown = set(fields) - _UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown room fields: {', '.join(sorted(unknown))}")

    room = await lock_room(session, room_id)
    if not room:
        raise NotFoundError(f"Room with ID {room_id} not found")
    if room.landlord_id != landlord_id:
        raise ForbiddenError("Access denied")

    if "status" in fields and fields["status"] is not None:
        new_status = RoomStatus(fields["status"])
        active = await count_active_contracts(session, room_id)
        if new_status == RoomStatus.occupied and not active:
            raise ConflictError("Room can only become occupied through a contract")
        if new_status != RoomStatus.occupied and active:
            raise ConflictError("Room has an active contract")
        fields["status"] = new_status.value

    for name, value in fields.items():
        if name in _MONEY_FIELDS and value is not None:
            value = to_decimal(value)
        setattr(room, name, value)

    if geocoder and _ADDRESS_FIELDS & set(fields):
        coords = await geocoder.resolve_room_address(room.ward, room.district, room.province)
        room.latitude = coords.latitude if coords else None
        room.longitude = coords.longitude if coords else None

    await session.commit()
    return room


async def delete_room(
    session: AsyncSession,
    room_id: int,
    landlord_id: int,
    storage: Optional[LocalFileStorage] = None
) -> None:
    room = await lock_room(session, room_id)
    if not room:
        raise NotFoundError(f"Room with ID {room_id} not found")
    if room.landlord_id != landlord_id:
        raise ForbiddenError("Access denied")

    if await count_active_contracts(session, room_id):
        raise ConflictError("Room has an active contract")

    qr_code_url = room.qr_code_url
    # Billing history goes with the room
    for model in (Invoice, Usage, SensorData, Contract):
        await session.execute(delete(model).where(model.room_id == room_id))
    await session.execute(delete(Room).where(Room.id == room_id))
    await session.commit()
    logging.info(f"Room {room_id} deleted by landlord {landlord_id}")

    if storage and qr_code_url:
        storage.delete(qr_code_url)
