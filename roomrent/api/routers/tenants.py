"""
Tenant routes.

- Landlord: create, list, update, delete tenants
- Tenant: read own profile and balance
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from roomrent.api.deps import get_session, get_actor, get_landlord_id
from roomrent.errors import ForbiddenError
from roomrent.schemas.tenants import (
    TenantCreate, TenantUpdate, TenantResponse, TenantBalanceResponse, TenantDeleteResponse
)
from roomrent.services import tenant_service
from roomrent.services.access import Actor
from roomrent.services.invoice_service import get_tenant_balance

router = APIRouter(prefix="/api/tenants", tags=["tenants"])


def _ensure_tenant_visible(actor: Actor, tenant_id: int) -> None:
    if actor.is_tenant and actor.id != tenant_id:
        raise ForbiddenError("Access denied")


@router.post("", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    body: TenantCreate,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id)
):
    return await tenant_service.create_tenant(session, **body.model_dump())


@router.get("", response_model=List[TenantResponse])
async def list_tenants(
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id)
):
    return await tenant_service.list_tenants(session)


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(
    tenant_id: int,
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_actor)
):
    _ensure_tenant_visible(actor, tenant_id)
    return await tenant_service.get_tenant(session, tenant_id)


@router.get("/{tenant_id}/balance", response_model=TenantBalanceResponse)
async def get_balance(
    tenant_id: int,
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_actor)
):
    _ensure_tenant_visible(actor, tenant_id)
    await tenant_service.get_tenant(session, tenant_id)
    balance = await get_tenant_balance(session, tenant_id)
    return TenantBalanceResponse(**balance._asdict())


@router.patch("/{tenant_id}", response_model=TenantResponse)
async def update_tenant(
    tenant_id: int,
    body: TenantUpdate,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id)
):
    return await tenant_service.update_tenant(session, tenant_id, **body.model_dump(exclude_none=True))


@router.delete("/{tenant_id}", response_model=TenantDeleteResponse)
async def delete_tenant(
    tenant_id: int,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id)
):
    released = await tenant_service.delete_tenant(session, tenant_id)
    return TenantDeleteResponse(released_room_ids=released)
