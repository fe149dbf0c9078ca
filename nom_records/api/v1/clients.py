from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile

from nom_records.core.database import ConnectionPool, get_pool
from nom_records.schemas.clients import AreaRead, ClienteCreate, ClienteRead
from nom_records.schemas.common import SuccessResponse
from nom_records.services.client_service import create_area, create_client, list_areas, list_clients
from nom_records.utils.file_utils import ImageStore, get_image_store

router = APIRouter(tags=["clients"])


@router.post("/cliente", response_model=SuccessResponse)
async def create_client_endpoint(payload: ClienteCreate, pool: ConnectionPool = Depends(get_pool)):
    await create_client(pool, payload)
    return SuccessResponse()


@router.get("/clientes", response_model=List[ClienteRead])
async def get_clients(pool: ConnectionPool = Depends(get_pool)):
    """All clients, newest first."""
    return await list_clients(pool)


@router.get("/clientes/{cliente_id}/areas", response_model=List[AreaRead])
async def get_client_areas(cliente_id: int, pool: ConnectionPool = Depends(get_pool)):
    return await list_areas(pool, cliente_id)


@router.post("/clientes/{cliente_id}/areas", response_model=SuccessResponse)
async def create_area_endpoint(
    cliente_id: int,
    nombre_area: str = Form(...),
    descripcion: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    pool: ConnectionPool = Depends(get_pool),
    store: ImageStore = Depends(get_image_store),
):
    """
    Create a work area for a client, with an optional image.
    The file is stored first; the insert that records its path is not transactional with it.
    """
    image_path = await store.save(image)
    await create_area(pool, cliente_id, nombre_area, descripcion, image_path)
    return SuccessResponse()
