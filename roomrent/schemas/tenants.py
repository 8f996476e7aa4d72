"""
Pydantic schemas for tenant requests and responses.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

PHONE_PATTERN = r'^\+?[\d\s-]{9,20}$'


class TenantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN, description="Unique phone number")
    email: Optional[str] = None
    address: Optional[str] = None
    id_card: Optional[str] = Field(None, description="National ID card number")
    tg_id: Optional[int] = Field(None, gt=0, description="Telegram chat id for bot notifications")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Nguyen Van A",
                "phone": "0901234567",
                "email": "a@example.com",
                "id_card": "079123456789"
            }
        }
    )


class TenantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    email: Optional[str] = None
    address: Optional[str] = None
    id_card: Optional[str] = None
    tg_id: Optional[int] = Field(None, gt=0)


class TenantResponse(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    id_card: Optional[str] = None
    tg_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TenantBalanceResponse(BaseModel):
    """Outstanding and paid totals across a tenant's invoices"""
    tenant_id: int
    total_owed: Decimal
    pending_amount: Decimal
    overdue_amount: Decimal
    paid_amount: Decimal
    pending_count: int
    overdue_count: int
    paid_count: int


class TenantDeleteResponse(BaseModel):
    deleted: bool = True
    released_room_ids: list[int] = []
