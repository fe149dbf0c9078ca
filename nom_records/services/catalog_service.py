from typing import Any, Dict, List

from nom_records.core.database import ConnectionPool


async def list_risks(pool: ConnectionPool) -> List[Dict[str, Any]]:
    return await pool.query("SELECT id, nombre FROM riesgos_laborales ORDER BY id")


async def list_ppe(pool: ConnectionPool) -> List[Dict[str, Any]]:
    return await pool.query("SELECT id, nombre FROM equipo_proteccion ORDER BY id")


async def list_norms(pool: ConnectionPool) -> List[Dict[str, Any]]:
    return await pool.query("SELECT id, nombre, descripcion FROM normas ORDER BY id")
