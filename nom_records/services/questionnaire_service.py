import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

from nom_records.core.config import DuplicatePolicy
from nom_records.core.database import ConnectionPool
from nom_records.core.exceptions import DuplicateSubmission
from nom_records.core.multi_insert import build_multi_row_insert
from nom_records.schemas.questionnaires import CuestionarioCreate

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

INSERT_HEADER = """
    INSERT INTO cuestionarios_info
        (puesto_id, nom, subopcion_id, observaciones, recomendaciones, recomendaciones_epp, image)
    VALUES
        (:puesto_id, :nom, :subopcion_id, :observaciones, :recomendaciones, :recomendaciones_epp, :image)
    RETURNING id
"""

# shared columns first: every answer row repeats its header's keys
ANSWER_COLUMNS = ("info_id", "puesto_id", "nom", "subopcion_id", "pregunta", "respuesta")


@dataclass
class QuestionnaireWrite:
    info_id: int
    created: bool
    answers_added: int


async def _find_header(conn: AsyncConnection, payload: CuestionarioCreate) -> Optional[int]:
    result = await conn.execute(
        text(
            """
            SELECT id FROM cuestionarios_info
            WHERE puesto_id = :puesto_id AND nom = :nom AND subopcion_id = :subopcion_id
            ORDER BY created_at DESC, id DESC
            LIMIT 1
            """
        ),
        {"puesto_id": payload.puesto_id, "nom": payload.nom, "subopcion_id": payload.subopcion_id},
    )
    return result.scalar()


async def _recorded_questions(conn: AsyncConnection, info_id: int) -> set:
    result = await conn.execute(
        text("SELECT pregunta FROM cuestionarios WHERE info_id = :info_id"),
        {"info_id": info_id},
    )
    return set(result.scalars().all())


async def submit_questionnaire(
    pool: ConnectionPool,
    payload: CuestionarioCreate,
    image_path: Optional[str] = None,
    policy: DuplicatePolicy = DuplicatePolicy.APPEND,
) -> QuestionnaireWrite:
    """
    Persist a questionnaire header and all of its answers as one transaction.

    Answers are written with a single multi-row insert whose info_id is the
    id generated for the header in the same transaction.
    """
    answers = [(r.pregunta, r.respuesta) for r in payload.respuestas]
    lock_key = None
    if policy is not DuplicatePolicy.APPEND:
        lock_key = f"cuestionario:{payload.puesto_id}:{payload.nom}:{payload.subopcion_id}"

    async with pool.unit_of_work(lock_key) as conn:
        info_id = None
        if policy is not DuplicatePolicy.APPEND:
            info_id = await _find_header(conn, payload)
            if info_id is not None and policy is DuplicatePolicy.REJECT:
                raise DuplicateSubmission(
                    f"questionnaire {payload.nom}/{payload.subopcion_id} already recorded for position {payload.puesto_id}"
                )

        created = info_id is None
        if created:
            result = await conn.execute(
                text(INSERT_HEADER),
                {
                    "puesto_id": payload.puesto_id,
                    "nom": payload.nom,
                    "subopcion_id": payload.subopcion_id,
                    "observaciones": payload.observaciones or None,
                    "recomendaciones": payload.recomendaciones or None,
                    "recomendaciones_epp": payload.recomendaciones_epp or None,
                    "image": image_path,
                },
            )
            info_id = result.scalar_one()
        else:
            recorded = await _recorded_questions(conn, info_id)
            fresh = []
            for question, answer in answers:
                if question not in recorded:
                    recorded.add(question)
                    fresh.append((question, answer))
            answers = fresh

        stmt = build_multi_row_insert(
            "cuestionarios",
            ANSWER_COLUMNS,
            answers,
            shared=(info_id, payload.puesto_id, payload.nom, payload.subopcion_id),
        )
        if stmt is not None:
            await conn.execute(stmt.statement(), stmt.bind_params)

    answers_added = stmt.row_count if stmt is not None else 0
    logger.info(
        "Questionnaire saved | puesto_id=%s | nom=%s | info_id=%s | created=%s | respuestas=%s",
        payload.puesto_id, payload.nom, info_id, created, answers_added,
    )
    return QuestionnaireWrite(info_id=info_id, created=created, answers_added=answers_added)


async def list_questionnaires(pool: ConnectionPool, puesto_id: int) -> List[Dict[str, Any]]:
    return await pool.query(
        """
        SELECT
            ci.id,
            ci.puesto_id,
            ci.nom,
            ns.subopcion AS subopcion_nombre,
            ci.subopcion_id,
            ci.created_at,
            ci.image,
            COUNT(c.id) AS num_respuestas
        FROM cuestionarios_info ci
        LEFT JOIN nom_subopciones ns ON ci.subopcion_id = ns.id
        LEFT JOIN cuestionarios c ON ci.id = c.info_id
        WHERE ci.puesto_id = :puesto_id
        GROUP BY ci.id, ns.subopcion
        ORDER BY ci.created_at DESC, ci.id DESC
        """,
        {"puesto_id": puesto_id},
    )


async def get_header(pool: ConnectionPool, puesto_id: int, nom: str, subopcion_id: int) -> Optional[Dict[str, Any]]:
    """Newest header recorded for a position / category / sub-option, or None."""
    return await pool.query_one(
        """
        SELECT id, puesto_id, nom, subopcion_id, observaciones, recomendaciones,
               recomendaciones_epp, image, created_at
        FROM cuestionarios_info
        WHERE puesto_id = :puesto_id AND nom = :nom AND subopcion_id = :subopcion_id
        ORDER BY created_at DESC, id DESC
        LIMIT 1
        """,
        {"puesto_id": puesto_id, "nom": nom, "subopcion_id": subopcion_id},
    )


async def get_complete(pool: ConnectionPool, info_id: int) -> Dict[str, Any]:
    info = await pool.query_one(
        """
        SELECT observaciones, recomendaciones, recomendaciones_epp, image, created_at
        FROM cuestionarios_info
        WHERE id = :id
        """,
        {"id": info_id},
    )
    if info is None:
        return {"info": None, "respuestas": []}

    respuestas = await pool.query(
        "SELECT pregunta, respuesta FROM cuestionarios WHERE info_id = :info_id ORDER BY id",
        {"info_id": info_id},
    )
    return {
        "info": {
            "observaciones": info["observaciones"] or NOT_AVAILABLE,
            "recomendaciones": info["recomendaciones"] or NOT_AVAILABLE,
            "recomendaciones_epp": info["recomendaciones_epp"] or NOT_AVAILABLE,
            "image": info["image"] or None,
            "created_at": info["created_at"],
        },
        "respuestas": respuestas,
    }


async def list_questions(pool: ConnectionPool, subopcion_tipo: str) -> List[Dict[str, Any]]:
    return await pool.query(
        "SELECT id, subopcion_tipo, pregunta FROM cuestionario_preguntas WHERE subopcion_tipo = :tipo ORDER BY id",
        {"tipo": subopcion_tipo},
    )


async def list_suboptions(pool: ConnectionPool, nom: str) -> List[Dict[str, Any]]:
    return await pool.query(
        "SELECT id, nom, subopcion FROM nom_subopciones WHERE nom = :nom ORDER BY id",
        {"nom": nom},
    )
