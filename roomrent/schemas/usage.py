from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class ManualReadingCreate(BaseModel):
    """Landlord-entered meter readings; omitted starts count as 0"""
    room_id: int = Field(..., gt=0)
    month: int = Field(..., description="1-12")
    year: int
    electric_start: Optional[Decimal] = None
    electric_end: Decimal
    water_start: Optional[Decimal] = None
    water_end: Decimal

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "room_id": 1,
                "month": 1,
                "year": 2024,
                "electric_start": 0,
                "electric_end": 100,
                "water_start": 0,
                "water_end": 10
            }
        }
    )


class UsageResponse(BaseModel):
    id: int
    room_id: int
    month: int
    year: int
    electric_start: Decimal
    electric_end: Decimal
    water_start: Decimal
    water_end: Decimal
    electric_usage: Decimal
    water_usage: Decimal
    is_auto: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
