from typing import List, Optional
from fastapi import APIRouter, Depends

from nom_records.api.deps import get_duplicate_policy
from nom_records.core.config import DuplicatePolicy
from nom_records.core.database import ConnectionPool, get_pool
from nom_records.schemas.catalogs import NormaRead
from nom_records.schemas.common import MessageResponse
from nom_records.schemas.positions import (
    NormaAssign,
    PuestoCreate,
    PuestoCreated,
    PuestoRead,
    PuestoWithCatalogsRead,
)
from nom_records.services.position_service import (
    assign_norm,
    create_position,
    get_position,
    list_position_norms,
    list_positions_by_area,
)

router = APIRouter(tags=["positions"])


@router.get("/areas/{area_id}/puestos", response_model=List[PuestoWithCatalogsRead])
async def get_area_positions(area_id: int, pool: ConnectionPool = Depends(get_pool)):
    return await list_positions_by_area(pool, area_id)


@router.post("/areas/{area_id}/puestos", response_model=PuestoCreated)
async def create_position_endpoint(
    area_id: int,
    payload: PuestoCreate,
    policy: DuplicatePolicy = Depends(get_duplicate_policy),
    pool: ConnectionPool = Depends(get_pool),
):
    """
    Create a position with its risk and PPE associations in one transaction.
    """
    outcome = await create_position(pool, area_id, payload, policy)
    return PuestoCreated(id=outcome.id)


@router.get("/puestos/{puesto_id}", response_model=Optional[PuestoRead])
async def get_position_endpoint(puesto_id: int, pool: ConnectionPool = Depends(get_pool)):
    return await get_position(pool, puesto_id)


@router.get("/puestos/{puesto_id}/normas", response_model=List[NormaRead])
async def get_position_norms(puesto_id: int, pool: ConnectionPool = Depends(get_pool)):
    return await list_position_norms(pool, puesto_id)


@router.post("/puestos/{puesto_id}/normas", response_model=MessageResponse)
async def assign_norm_endpoint(
    puesto_id: int,
    payload: NormaAssign,
    policy: DuplicatePolicy = Depends(get_duplicate_policy),
    pool: ConnectionPool = Depends(get_pool),
):
    await assign_norm(pool, puesto_id, payload.normaId, policy)
    return MessageResponse(message="Norma asignada correctamente")
