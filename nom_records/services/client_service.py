import logging
from typing import Any, Dict, List, Optional

from nom_records.core.database import ConnectionPool
from nom_records.schemas.clients import ClienteCreate

logger = logging.getLogger(__name__)


async def create_client(pool: ConnectionPool, payload: ClienteCreate) -> None:
    await pool.execute(
        """
        INSERT INTO clientes (nombre_empresa, nombre, telefono, direccion, puesto)
        VALUES (:nombre_empresa, :nombre, :telefono, :direccion, :puesto)
        """,
        payload.model_dump(),
    )
    logger.info("Client created | nombre_empresa=%s", payload.nombre_empresa)


async def list_clients(pool: ConnectionPool) -> List[Dict[str, Any]]:
    return await pool.query(
        "SELECT id, nombre_empresa, nombre, telefono, direccion, puesto FROM clientes ORDER BY id DESC"
    )


async def list_areas(pool: ConnectionPool, cliente_id: int) -> List[Dict[str, Any]]:
    return await pool.query(
        """
        SELECT id, cliente_id, nombre_area, descripcion, image
        FROM areas_trabajo
        WHERE cliente_id = :cliente_id
        ORDER BY id
        """,
        {"cliente_id": cliente_id},
    )


async def create_area(
    pool: ConnectionPool,
    cliente_id: int,
    nombre_area: str,
    descripcion: Optional[str] = None,
    image_path: Optional[str] = None,
) -> None:
    """Single insert, no unit of work: the image is already on disk when this runs."""
    await pool.execute(
        """
        INSERT INTO areas_trabajo (cliente_id, nombre_area, descripcion, image)
        VALUES (:cliente_id, :nombre_area, :descripcion, :image)
        """,
        {
            "cliente_id": cliente_id,
            "nombre_area": nombre_area,
            "descripcion": descripcion,
            "image": image_path,
        },
    )
    logger.info("Area created | cliente_id=%s | image=%s", cliente_id, image_path)
