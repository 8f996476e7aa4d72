from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from roomrent.database.models import Landlord
from roomrent.errors import ConflictError, NotFoundError


async def get_landlord_by_phone(session: AsyncSession, phone: str) -> Optional[Landlord]:
    stmt = select(Landlord).where(Landlord.phone == phone)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_landlord(
    session: AsyncSession,
    name: str,
    phone: Optional[str] = None,
    email: Optional[str] = None
) -> Landlord:
    if phone and await get_landlord_by_phone(session, phone):
        raise ConflictError("Phone number already registered")

    landlord = Landlord(name=name, phone=phone, email=email)
    session.add(landlord)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("Phone number already registered")
    return landlord


async def get_landlord(session: AsyncSession, landlord_id: int) -> Landlord:
    landlord = await session.get(Landlord, landlord_id)
    if not landlord:
        raise NotFoundError(f"Landlord with ID {landlord_id} not found")
    return landlord
