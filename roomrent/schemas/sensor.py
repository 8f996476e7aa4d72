from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from roomrent.schemas.usage import UsageResponse


class SensorDataCreate(BaseModel):
    """Absolute cumulative meter values reported by a device"""
    room_id: int = Field(..., gt=0)
    electricity: Decimal = Field(..., ge=0)
    water: Decimal = Field(..., ge=0)
    timestamp: Optional[datetime] = None


class SensorDataResponse(BaseModel):
    id: int
    room_id: int
    electricity: Decimal
    water: Decimal
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class SensorSubmitResponse(BaseModel):
    sensor_data: SensorDataResponse
    usage: UsageResponse
