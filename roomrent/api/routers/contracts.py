"""
Contract routes.

- Landlord: sign, edit, terminate and delete contracts on own rooms
- Tenant: read contracts that reference it
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from roomrent.api.deps import get_session, get_actor, get_landlord_id
from roomrent.schemas.contracts import ContractCreate, ContractUpdate, ContractResponse
from roomrent.services import contract_service
from roomrent.services.access import Actor

router = APIRouter(prefix="/api/contracts", tags=["contracts"])


@router.post("", response_model=ContractResponse, status_code=status.HTTP_201_CREATED)
async def create_contract(
    body: ContractCreate,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id)
):
    return await contract_service.create_contract(session, landlord_id, **body.model_dump())


@router.get("", response_model=List[ContractResponse])
async def list_contracts(
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_actor)
):
    if actor.is_landlord:
        return await contract_service.list_contracts(session, landlord_id=actor.id)
    return await contract_service.list_contracts(session, tenant_id=actor.id)


@router.get("/{contract_id}", response_model=ContractResponse)
async def get_contract(
    contract_id: int,
    session: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_actor)
):
    return await contract_service.get_contract(session, contract_id, actor)


@router.patch("/{contract_id}", response_model=ContractResponse)
async def update_contract(
    contract_id: int,
    body: ContractUpdate,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id)
):
    return await contract_service.update_contract(
        session, contract_id, landlord_id, **body.model_dump(exclude_none=True)
    )


@router.post("/{contract_id}/terminate", response_model=ContractResponse)
async def terminate_contract(
    contract_id: int,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id)
):
    return await contract_service.terminate_contract(session, contract_id, landlord_id)


@router.delete("/{contract_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contract(
    contract_id: int,
    session: AsyncSession = Depends(get_session),
    landlord_id: int = Depends(get_landlord_id)
):
    await contract_service.delete_contract(session, contract_id, landlord_id)
