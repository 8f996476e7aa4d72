import logging
from datetime import datetime
from typing import Optional, List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roomrent.database.models import SensorData, Usage
from roomrent.errors import NotFoundError
from roomrent.services.room_service import get_room
from roomrent.services.usage_service import submit_auto_reading
from roomrent.utils.formatting import to_decimal


async def record_sensor_data(
    session: AsyncSession,
    room_id: int,
    electricity,
    water,
    timestamp: Optional[datetime] = None
) -> Tuple[SensorData, Usage]:
    """
    Store a raw device report, then feed it to the usage ledger as an
    automatic reading for the same moment.
    """
    await get_room(session, room_id)

    moment = timestamp or datetime.now()
    record = SensorData(
        room_id=room_id,
        electricity=to_decimal(electricity),
        water=to_decimal(water),
        timestamp=moment,
    )
    session.add(record)
    await session.commit()
    logging.info(f"Sensor data {record.id} received for room {room_id}")

    usage = await submit_auto_reading(session, room_id, electricity, water, moment)
    return record, usage


async def list_sensor_data(
    session: AsyncSession,
    room_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None
) -> List[SensorData]:
    stmt = select(SensorData)
    if room_id:
        stmt = stmt.where(SensorData.room_id == room_id)
    if start:
        stmt = stmt.where(SensorData.timestamp >= start)
    if end:
        stmt = stmt.where(SensorData.timestamp <= end)
    stmt = stmt.order_by(SensorData.timestamp.desc(), SensorData.id.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_sensor_data(session: AsyncSession, sensor_data_id: int) -> SensorData:
    record = await session.get(SensorData, sensor_data_id)
    if not record:
        raise NotFoundError(f"Sensor data with ID {sensor_data_id} not found")
    return record
