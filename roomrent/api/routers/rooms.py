"""
Room routes.

- Public: list available rooms
- Landlord: CRUD on own rooms
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from roomrent.api.deps import get_session, get_landlord_id, get_geocoder, get_storage
from roomrent.database.models import RoomStatus
from roomrent.schemas.rooms import RoomCreate, RoomUpdate, RoomResponse
from roomrent.services import room_service
from roomrent.services.geocoding_service import GeocodingService
from roomrent.services.storage_service import LocalFileStorage

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


@router.get("/available", response_model=List[RoomResponse])
async def list_available_rooms(session: AsyncSession = Depends(get_session)):
    return await room_service.list_available_rooms(session)


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    body: RoomCreate,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id),
    geocoder: GeocodingService = Depends(get_geocoder),
    storage: LocalFileStorage = Depends(get_storage)
):
    return await room_service.create_room(
        session,
        landlord_id,
        geocoder=geocoder,
        storage=storage,
        **body.model_dump()
    )


@router.get("", response_model=List[RoomResponse])
async def list_rooms(
    room_status: Optional[RoomStatus] = Query(None, alias="status"),
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id)
):
    return await room_service.list_rooms(session, landlord_id=landlord_id, status=room_status)


@router.get("/{room_id}", response_model=RoomResponse)
async def get_room(
    room_id: int,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id)
):
    return await room_service.get_room(session, room_id, landlord_id)


@router.patch("/{room_id}", response_model=RoomResponse)
async def update_room(
    room_id: int,
    body: RoomUpdate,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id),
    geocoder: GeocodingService = Depends(get_geocoder)
):
    return await room_service.update_room(
        session, room_id, landlord_id, geocoder=geocoder, **body.model_dump(exclude_none=True)
    )


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(
    room_id: int,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id),
    storage: LocalFileStorage = Depends(get_storage)
):
    await room_service.delete_room(session, room_id, landlord_id, storage=storage)
