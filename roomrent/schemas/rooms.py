"""
Pydantic schemas for room requests and responses.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from roomrent.database.models import RoomStatus


class RoomCreate(BaseModel):
    room_number: str = Field(..., min_length=1, max_length=50)
    price: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2, description="Monthly rent baseline")
    electric_price: Decimal = Field(default=Decimal("0"), ge=0, description="Price per kWh")
    water_price: Decimal = Field(default=Decimal("0"), ge=0, description="Price per m3")
    floor: Optional[int] = None
    area: Optional[float] = Field(None, gt=0)
    description: Optional[str] = None
    ward: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None
    status: RoomStatus = RoomStatus.available
    qr_code_image: Optional[str] = Field(None, description="Payment QR code as base64 or data URL")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "room_number": "101",
                "price": 2000000,
                "electric_price": 3500,
                "water_price": 25000,
                "ward": "Ben Nghe",
                "district": "District 1",
                "province": "Ho Chi Minh City"
            }
        }
    )


class RoomUpdate(BaseModel):
    room_number: Optional[str] = Field(None, min_length=1, max_length=50)
    price: Optional[Decimal] = Field(None, ge=0)
    electric_price: Optional[Decimal] = Field(None, ge=0)
    water_price: Optional[Decimal] = Field(None, ge=0)
    floor: Optional[int] = None
    area: Optional[float] = Field(None, gt=0)
    description: Optional[str] = None
    ward: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None
    status: Optional[RoomStatus] = None


class RoomResponse(BaseModel):
    id: int
    landlord_id: int
    room_number: str
    floor: Optional[int] = None
    area: Optional[float] = None
    price: Decimal
    electric_price: Decimal
    water_price: Decimal
    status: RoomStatus
    description: Optional[str] = None
    ward: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    qr_code_url: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
