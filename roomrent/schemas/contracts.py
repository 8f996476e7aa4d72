"""
Pydantic schemas for contract requests and responses.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from roomrent.database.models import ContractStatus


class ContractCreate(BaseModel):
    tenant_id: int = Field(..., gt=0)
    room_id: int = Field(..., gt=0)
    start_date: date
    end_date: Optional[date] = None
    monthly_rent: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)
    deposit: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None
    status: ContractStatus = ContractStatus.active

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "tenant_id": 1,
                "room_id": 1,
                "start_date": "2024-01-01",
                "monthly_rent": 2000000,
                "deposit": 2000000
            }
        }
    )


class ContractUpdate(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    monthly_rent: Optional[Decimal] = Field(None, ge=0)
    deposit: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None
    status: Optional[ContractStatus] = None


class ContractResponse(BaseModel):
    id: int
    tenant_id: int
    room_id: int
    landlord_id: int
    start_date: date
    end_date: Optional[date] = None
    monthly_rent: Decimal
    deposit: Optional[Decimal] = None
    status: ContractStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
