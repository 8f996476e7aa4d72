"""
Sensor routes. Devices post without an actor; landlords read history.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from roomrent.api.deps import get_session, get_landlord_id
from roomrent.schemas.sensor import SensorDataCreate, SensorDataResponse, SensorSubmitResponse
from roomrent.schemas.usage import UsageResponse
from roomrent.services import sensor_service
from roomrent.services.room_service import get_room

router = APIRouter(prefix="/api/sensor-data", tags=["sensor-data"])


@router.post("", response_model=SensorSubmitResponse, status_code=status.HTTP_201_CREATED)
async def record_sensor_data(body: SensorDataCreate, session: AsyncSession = Depends(get_session)):
    record, usage = await sensor_service.record_sensor_data(
        session, body.room_id, body.electricity, body.water, body.timestamp
    )
    return SensorSubmitResponse(
        sensor_data=SensorDataResponse.model_validate(record),
        usage=UsageResponse.model_validate(usage)
    )


@router.get("", response_model=List[SensorDataResponse])
async def list_sensor_data(
    room_id: int,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id)
):
    await get_room(session, room_id, landlord_id)
    return await sensor_service.list_sensor_data(session, room_id, start, end)
