from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from roomrent.api.deps import get_session
from roomrent.schemas.landlords import LandlordCreate, LandlordResponse
from roomrent.services import landlord_service

router = APIRouter(prefix="/api/landlords", tags=["landlords"])


@router.post("", response_model=LandlordResponse, status_code=status.HTTP_201_CREATED)
async def create_landlord(body: LandlordCreate, session: AsyncSession = Depends(get_session)):
    return await landlord_service.create_landlord(session, body.name, body.phone, body.email)


@router.get("/{landlord_id}", response_model=LandlordResponse)
async def get_landlord(landlord_id: int, session: AsyncSession = Depends(get_session)):
    return await landlord_service.get_landlord(session, landlord_id)
