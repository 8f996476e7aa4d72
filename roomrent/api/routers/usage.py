"""
Usage ledger routes.

- Landlord: submit manual readings, read usage of own rooms
- Tenant: read usage of rooms it holds contracts on
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from roomrent.api.deps import get_session, get_actor, get_landlord_id
from roomrent.errors import ForbiddenError
from roomrent.schemas.usage import ManualReadingCreate, UsageResponse
from roomrent.services import usage_service
from roomrent.services.access import Actor
from roomrent.services.contract_service import list_contracts
from roomrent.services.room_service import get_room

router = APIRouter(prefix="/api/usage", tags=["usage"])


async def _tenant_room_ids(session: AsyncSession, tenant_id: int) -> List[int]:
    contracts = await list_contracts(session, tenant_id=tenant_id)
    return sorted({c.room_id for c in contracts})


@router.post("", response_model=UsageResponse, status_code=status.HTTP_201_CREATED)
async def submit_manual_reading(
    body: ManualReadingCreate,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id)
):
    await get_room(session, body.room_id, landlord_id)
    return await usage_service.submit_manual_reading(session, **body.model_dump())


@router.get("", response_model=List[UsageResponse])
async def list_usages(
    room_id: Optional[int] = None,
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_actor)
):
    if actor.is_landlord:
        if room_id:
            await get_room(session, room_id, actor.id)
            return await usage_service.list_usages(session, room_id)
        return await usage_service.list_usages_for_landlord(session, actor.id)

    room_ids = await _tenant_room_ids(session, actor.id)
    if room_id:
        if room_id not in room_ids:
            raise ForbiddenError("Access denied")
        room_ids = [room_id]
    return await usage_service.list_usages_for_rooms(session, room_ids)


@router.get("/{usage_id}", response_model=UsageResponse)
async def get_usage(
    usage_id: int,
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_actor)
):
    usage = await usage_service.get_usage(session, usage_id)
    if actor.is_landlord:
        await get_room(session, usage.room_id, actor.id)
    elif usage.room_id not in await _tenant_room_ids(session, actor.id):
        raise ForbiddenError("Access denied")
    return usage
