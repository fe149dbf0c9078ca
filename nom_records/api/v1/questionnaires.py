from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import ValidationError

from nom_records.api.deps import get_duplicate_policy
from nom_records.core.config import DuplicatePolicy
from nom_records.core.database import ConnectionPool, get_pool
from nom_records.core.exceptions import InvalidPayload
from nom_records.schemas.questionnaires import (
    CuestionarioCompleto,
    CuestionarioCreate,
    CuestionarioCreated,
    CuestionarioInfoRead,
    CuestionarioResumen,
)
from nom_records.services.questionnaire_service import (
    get_complete,
    get_header,
    list_questionnaires,
    submit_questionnaire,
)
from nom_records.utils.file_utils import ImageStore, get_image_store

router = APIRouter(tags=["questionnaires"])


def parse_questionnaire_data(data: Optional[str]) -> CuestionarioCreate:
    """The structured payload arrives as JSON text in the `data` form field."""
    if not data:
        raise InvalidPayload("missing 'data' field")
    try:
        return CuestionarioCreate.model_validate_json(data)
    except ValidationError as exc:
        raise InvalidPayload(f"unparseable 'data' field: {exc.error_count()} error(s)") from exc


@router.post("/cuestionario", response_model=CuestionarioCreated)
async def submit_questionnaire_endpoint(
    data: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    policy: DuplicatePolicy = Depends(get_duplicate_policy),
    pool: ConnectionPool = Depends(get_pool),
    store: ImageStore = Depends(get_image_store),
):
    # validated before any connection is taken
    payload = parse_questionnaire_data(data)

    image_path = await store.save(image)
    try:
        outcome = await submit_questionnaire(pool, payload, image_path, policy)
    except Exception:
        store.discard(image_path)
        raise

    if not outcome.created:
        # merged into an existing header, which keeps its own image
        store.discard(image_path)

    return CuestionarioCreated(message="Cuestionario guardado correctamente", info_id=outcome.info_id)


@router.get(
    "/cuestionarios-info/{puesto_id}/{nom}/{subopcion_id}",
    response_model=Optional[CuestionarioInfoRead],
)
async def get_questionnaire_header(
    puesto_id: int,
    nom: str,
    subopcion_id: int,
    pool: ConnectionPool = Depends(get_pool),
):
    return await get_header(pool, puesto_id, nom, subopcion_id)


@router.get("/cuestionario-completo/{info_id}", response_model=CuestionarioCompleto)
async def get_complete_questionnaire(info_id: int, pool: ConnectionPool = Depends(get_pool)):
    """Header plus answers in submission order; {info: null, respuestas: []} when absent."""
    return await get_complete(pool, info_id)


@router.get("/puestos/{puesto_id}/cuestionarios", response_model=List[CuestionarioResumen])
async def get_position_questionnaires(puesto_id: int, pool: ConnectionPool = Depends(get_pool)):
    return await list_questionnaires(pool, puesto_id)
