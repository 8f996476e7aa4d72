"""
Usage ledger: one normalized usage row per (room, month, year).

Manual readings trust the landlord's figures, so consumption is not clamped.
Sensor readings are absolute meter values; the start is carried forward from
the latest earlier period and negative consumption (meter reset, late
delivery) is clamped to zero.

After each upsert an invoice is derived best-effort; a failure there never
fails the reading.
"""
import logging
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List, Union

from sqlalchemy import select, func, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from roomrent.database.core import upsert_insert
from roomrent.database.models import Usage, Room
from roomrent.errors import NotFoundError, ValidationError
from roomrent.services.invoice_service import generate_for_usage_safely
from roomrent.services.room_service import get_room
from roomrent.utils.formatting import to_decimal

_UPDATABLE_COLUMNS = (
    "electric_start", "electric_end", "water_start", "water_end",
    "electric_usage", "water_usage", "is_auto",
)


def validate_period(month: int, year: int) -> None:
    if not 1 <= month <= 12:
        raise ValidationError(f"Month must be between 1 and 12, got {month}")
    if year < 1:
        raise ValidationError(f"Invalid year {year}")


def compute_consumption(start, end, clamp: bool) -> Decimal:
    consumption = to_decimal(end) - to_decimal(start)
    if clamp and consumption < 0:
        return Decimal("0")
    return consumption


async def find_previous_usage(session: AsyncSession, room_id: int, month: int, year: int) -> Optional[Usage]:
    """Latest usage row strictly before (month, year) for the room."""
    stmt = (
        select(Usage)
        .where(
            Usage.room_id == room_id,
            or_(
                and_(Usage.year == year, Usage.month < month),
                Usage.year < year
            )
        )
        .order_by(Usage.year.desc(), Usage.month.desc())
        .limit(1)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def upsert_usage(
    session: AsyncSession,
    *,
    room_id: int,
    month: int,
    year: int,
    electric_start: Decimal,
    electric_end: Decimal,
    water_start: Decimal,
    water_end: Decimal,
    electric_usage: Decimal,
    water_usage: Decimal,
    is_auto: bool,
) -> Usage:
    """INSERT ... ON CONFLICT (room_id, month, year) DO UPDATE, then commit."""
    stmt = upsert_insert(session, Usage).values([{
        "room_id": room_id,
        "month": month,
        "year": year,
        "electric_start": electric_start,
        "electric_end": electric_end,
        "water_start": water_start,
        "water_end": water_end,
        "electric_usage": electric_usage,
        "water_usage": water_usage,
        "is_auto": is_auto,
    }])
    set_ = {name: stmt.excluded[name] for name in _UPDATABLE_COLUMNS}
    set_["updated_at"] = func.now()
    stmt = stmt.on_conflict_do_update(
        index_elements=["room_id", "month", "year"],
        set_=set_
    )

    result = await session.scalars(
        stmt.returning(Usage),
        execution_options={"populate_existing": True}
    )
    usage = result.one()
    await session.commit()
    return usage


# --- Ingest ---

async def submit_manual_reading(
    session: AsyncSession,
    room_id: int,
    month: int,
    year: int,
    electric_end,
    water_end,
    electric_start=None,
    water_start=None,
) -> Usage:
    """
    Landlord-entered readings. An omitted start counts as 0 for that
    utility only; a start above the end yields negative consumption as-is.
    """
    validate_period(month, year)
    await get_room(session, room_id)

    electric_start = to_decimal(electric_start)
    water_start = to_decimal(water_start)
    electric_end = to_decimal(electric_end)
    water_end = to_decimal(water_end)

    usage = await upsert_usage(
        session,
        room_id=room_id,
        month=month,
        year=year,
        electric_start=electric_start,
        electric_end=electric_end,
        water_start=water_start,
        water_end=water_end,
        electric_usage=compute_consumption(electric_start, electric_end, clamp=False),
        water_usage=compute_consumption(water_start, water_end, clamp=False),
        is_auto=False,
    )
    logging.info(f"Manual usage {usage.id} recorded for room {room_id} ({month}/{year})")

    await generate_for_usage_safely(session, usage)
    return usage


async def submit_auto_reading(
    session: AsyncSession,
    room_id: int,
    electricity,
    water,
    timestamp: Optional[Union[datetime, date]] = None,
) -> Usage:
    """
    Sensor report with absolute cumulative meter values. The period comes
    from `timestamp` (ingest time when absent).
    """
    moment = timestamp or datetime.now()
    month, year = moment.month, moment.year

    await get_room(session, room_id)

    previous = await find_previous_usage(session, room_id, month, year)
    electric_start = to_decimal(previous.electric_end) if previous else Decimal("0")
    water_start = to_decimal(previous.water_end) if previous else Decimal("0")

    electric_end = to_decimal(electricity)
    water_end = to_decimal(water)

    usage = await upsert_usage(
        session,
        room_id=room_id,
        month=month,
        year=year,
        electric_start=electric_start,
        electric_end=electric_end,
        water_start=water_start,
        water_end=water_end,
        electric_usage=compute_consumption(electric_start, electric_end, clamp=True),
        water_usage=compute_consumption(water_start, water_end, clamp=True),
        is_auto=True,
    )
    logging.info(f"Auto usage {usage.id} recorded for room {room_id} ({month}/{year})")

    await generate_for_usage_safely(session, usage)
    return usage


# --- Queries ---

async def list_usages(session: AsyncSession, room_id: Optional[int] = None) -> List[Usage]:
    stmt = select(Usage)
    if room_id:
        stmt = stmt.where(Usage.room_id == room_id)
    stmt = stmt.order_by(Usage.year.desc(), Usage.month.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_usages_for_rooms(session: AsyncSession, room_ids: List[int]) -> List[Usage]:
    if not room_ids:
        return []
    stmt = (
        select(Usage)
        .where(Usage.room_id.in_(room_ids))
        .order_by(Usage.year.desc(), Usage.month.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_usages_for_landlord(session: AsyncSession, landlord_id: int) -> List[Usage]:
    stmt = (
        select(Usage)
        .join(Room, Usage.room_id == Room.id)
        .where(Room.landlord_id == landlord_id)
        .order_by(Usage.year.desc(), Usage.month.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_usage(session: AsyncSession, usage_id: int) -> Usage:
    usage = await session.get(Usage, usage_id)
    if not usage:
        raise NotFoundError(f"Usage with ID {usage_id} not found")
    return usage
