"""
Pydantic schemas for invoice responses and status changes.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict

from roomrent.database.models import InvoiceStatus


class InvoiceResponse(BaseModel):
    id: int
    contract_id: int
    tenant_id: int
    room_id: int
    usage_id: Optional[int] = None
    month: int
    year: int
    room_price: Decimal
    electric_usage: Decimal
    electric_price: Decimal
    electric_total: Decimal
    water_usage: Decimal
    water_price: Decimal
    water_total: Decimal
    total_amount: Decimal
    status: InvoiceStatus
    due_date: date
    paid_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "contract_id": 1,
                "tenant_id": 1,
                "room_id": 1,
                "usage_id": 1,
                "month": 1,
                "year": 2024,
                "room_price": "2000000.00",
                "electric_usage": "100.00",
                "electric_price": "3500.00",
                "electric_total": "350000.00",
                "water_usage": "10.00",
                "water_price": "25000.00",
                "water_total": "250000.00",
                "total_amount": "2600000.00",
                "status": "PENDING",
                "due_date": "2024-02-07",
                "paid_date": None
            }
        }
    )


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus
    paid_date: Optional[datetime] = None


class InvoicePayment(BaseModel):
    paid_date: Optional[datetime] = None


class NotificationResult(BaseModel):
    invoice_id: int
    sent: bool


class SweepResult(BaseModel):
    month: int
    year: int
    created: int
