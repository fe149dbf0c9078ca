from typing import List
from fastapi import APIRouter, Depends

from nom_records.core.database import ConnectionPool, get_pool
from nom_records.schemas.catalogs import CatalogItemRead, NormaRead, PreguntaRead, SubopcionRead
from nom_records.services.catalog_service import list_norms, list_ppe, list_risks
from nom_records.services.questionnaire_service import list_questions, list_suboptions

router = APIRouter(tags=["catalogs"])


@router.get("/riesgos", response_model=List[CatalogItemRead])
async def get_risks(pool: ConnectionPool = Depends(get_pool)):
    return await list_risks(pool)


@router.get("/epp", response_model=List[CatalogItemRead])
async def get_ppe(pool: ConnectionPool = Depends(get_pool)):
    return await list_ppe(pool)


@router.get("/normas", response_model=List[NormaRead])
async def get_norms(pool: ConnectionPool = Depends(get_pool)):
    return await list_norms(pool)


@router.get("/nom-subopciones/{nom}", response_model=List[SubopcionRead])
async def get_suboptions(nom: str, pool: ConnectionPool = Depends(get_pool)):
    return await list_suboptions(pool, nom)


@router.get("/preguntas/{subopcion_tipo}", response_model=List[PreguntaRead])
async def get_questions(subopcion_tipo: str, pool: ConnectionPool = Depends(get_pool)):
    """Question bank for one sub-option type."""
    return await list_questions(pool, subopcion_tipo)
