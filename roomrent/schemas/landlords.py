from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from roomrent.schemas.tenants import PHONE_PATTERN


class LandlordCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    email: Optional[str] = None


class LandlordResponse(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
