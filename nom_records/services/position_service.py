import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

from nom_records.core.config import DuplicatePolicy
from nom_records.core.database import ConnectionPool
from nom_records.core.exceptions import DuplicateSubmission
from nom_records.core.multi_insert import build_multi_row_insert
from nom_records.schemas.positions import PuestoCreate

logger = logging.getLogger(__name__)

# association table -> catalog id column
RISK_LINKS = ("puestos_riesgos", "riesgo_id")
PPE_LINKS = ("puestos_epp", "epp_id")

INSERT_POSITION = """
    INSERT INTO puestos_trabajo (area_id, puesto, numero_usuarios, descripcion, criterio_epp)
    VALUES (:area_id, :puesto, :numero_usuarios, :descripcion, :criterio_epp)
    RETURNING id
"""


@dataclass
class PositionWrite:
    id: int
    created: bool
    risks_added: int
    ppe_added: int


def _unique(ids: Iterable[int]) -> List[int]:
    seen = set()
    out = []
    for i in ids:
        if i not in seen:
            seen.add(i)
            out.append(i)
    return out


async def _find_position(conn: AsyncConnection, area_id: int, title: str) -> Optional[int]:
    result = await conn.execute(
        text("SELECT id FROM puestos_trabajo WHERE area_id = :area_id AND puesto = :puesto ORDER BY id LIMIT 1"),
        {"area_id": area_id, "puesto": title},
    )
    return result.scalar()


async def _linked_ids(conn: AsyncConnection, links: tuple, puesto_id: int) -> set:
    table, column = links
    result = await conn.execute(
        text(f"SELECT {column} FROM {table} WHERE puesto_id = :puesto_id"),
        {"puesto_id": puesto_id},
    )
    return set(result.scalars().all())


async def _insert_links(conn: AsyncConnection, links: tuple, puesto_id: int, ids: List[int]) -> int:
    table, column = links
    stmt = build_multi_row_insert(table, ("puesto_id", column), [(i,) for i in ids], shared=(puesto_id,))
    if stmt is None:
        return 0
    await conn.execute(stmt.statement(), stmt.bind_params)
    return stmt.row_count


async def create_position(
    pool: ConnectionPool,
    area_id: int,
    payload: PuestoCreate,
    policy: DuplicatePolicy = DuplicatePolicy.APPEND,
) -> PositionWrite:
    """
    Persist a position and its risk/PPE associations as one transaction.

    The association rows always use the id returned by the position insert
    (or, under the merge policy, the id of the existing position).
    """
    risks = list(payload.riesgos)
    ppe = list(payload.epp)
    lock_key = None if policy is DuplicatePolicy.APPEND else f"puesto:{area_id}:{payload.puesto}"

    async with pool.unit_of_work(lock_key) as conn:
        puesto_id = None
        if policy is not DuplicatePolicy.APPEND:
            puesto_id = await _find_position(conn, area_id, payload.puesto)
            if puesto_id is not None and policy is DuplicatePolicy.REJECT:
                raise DuplicateSubmission(f"position '{payload.puesto}' already exists in area {area_id}")
            risks, ppe = _unique(risks), _unique(ppe)

        created = puesto_id is None
        if created:
            result = await conn.execute(
                text(INSERT_POSITION),
                {
                    "area_id": area_id,
                    "puesto": payload.puesto,
                    "numero_usuarios": payload.numero_usuarios,
                    "descripcion": payload.descripcion,
                    "criterio_epp": payload.criterio_epp,
                },
            )
            puesto_id = result.scalar_one()
        else:
            existing_risks = await _linked_ids(conn, RISK_LINKS, puesto_id)
            existing_ppe = await _linked_ids(conn, PPE_LINKS, puesto_id)
            risks = [r for r in risks if r not in existing_risks]
            ppe = [e for e in ppe if e not in existing_ppe]

        risks_added = await _insert_links(conn, RISK_LINKS, puesto_id, risks)
        ppe_added = await _insert_links(conn, PPE_LINKS, puesto_id, ppe)

    logger.info(
        "Position saved | area_id=%s | puesto_id=%s | created=%s | riesgos=%s | epp=%s",
        area_id, puesto_id, created, risks_added, ppe_added,
    )
    return PositionWrite(id=puesto_id, created=created, risks_added=risks_added, ppe_added=ppe_added)


async def list_positions_by_area(pool: ConnectionPool, area_id: int) -> List[Dict[str, Any]]:
    # LEFT JOINs keep positions without associations; their aggregates come back NULL
    sql = f"""
        SELECT
            p.id,
            p.puesto,
            p.numero_usuarios,
            p.descripcion,
            p.criterio_epp,
            {pool.string_agg_distinct("r.nombre")} AS riesgos,
            {pool.string_agg_distinct("e.nombre")} AS epp
        FROM puestos_trabajo p
        LEFT JOIN puestos_riesgos pr ON p.id = pr.puesto_id
        LEFT JOIN riesgos_laborales r ON pr.riesgo_id = r.id
        LEFT JOIN puestos_epp pe ON p.id = pe.puesto_id
        LEFT JOIN equipo_proteccion e ON pe.epp_id = e.id
        WHERE p.area_id = :area_id
        GROUP BY p.id
        ORDER BY p.id
    """
    return await pool.query(sql, {"area_id": area_id})


async def get_position(pool: ConnectionPool, puesto_id: int) -> Optional[Dict[str, Any]]:
    return await pool.query_one(
        """
        SELECT id, area_id, puesto, numero_usuarios, descripcion, criterio_epp
        FROM puestos_trabajo
        WHERE id = :id
        """,
        {"id": puesto_id},
    )


async def list_position_norms(pool: ConnectionPool, puesto_id: int) -> List[Dict[str, Any]]:
    return await pool.query(
        """
        SELECT n.id, n.nombre, n.descripcion
        FROM puestos_normas pn
        JOIN normas n ON pn.norma_id = n.id
        WHERE pn.puesto_id = :puesto_id
        ORDER BY pn.id
        """,
        {"puesto_id": puesto_id},
    )


async def assign_norm(
    pool: ConnectionPool,
    puesto_id: int,
    norma_id: int,
    policy: DuplicatePolicy = DuplicatePolicy.APPEND,
) -> bool:
    """Link a norm to a position. Returns False when merge found the pair already linked."""
    lock_key = None if policy is DuplicatePolicy.APPEND else f"puesto_norma:{puesto_id}:{norma_id}"
    async with pool.unit_of_work(lock_key) as conn:
        if policy is not DuplicatePolicy.APPEND:
            result = await conn.execute(
                text("SELECT 1 FROM puestos_normas WHERE puesto_id = :puesto_id AND norma_id = :norma_id"),
                {"puesto_id": puesto_id, "norma_id": norma_id},
            )
            if result.first() is not None:
                if policy is DuplicatePolicy.REJECT:
                    raise DuplicateSubmission(f"norm {norma_id} already assigned to position {puesto_id}")
                return False
        await conn.execute(
            text("INSERT INTO puestos_normas (puesto_id, norma_id) VALUES (:puesto_id, :norma_id)"),
            {"puesto_id": puesto_id, "norma_id": norma_id},
        )
    logger.info("Norm assigned | puesto_id=%s | norma_id=%s", puesto_id, norma_id)
    return True
