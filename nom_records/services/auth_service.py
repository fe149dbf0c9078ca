import logging
from typing import Any, Dict, Optional

from nom_records.core.database import ConnectionPool

logger = logging.getLogger(__name__)


async def authenticate_user(pool: ConnectionPool, usuario: str, password: str) -> Optional[Dict[str, Any]]:
    """Direct credential comparison against the usuarios table (stored as given)."""
    user = await pool.query_one(
        "SELECT id, usuario FROM usuarios WHERE usuario = :usuario AND password = :password",
        {"usuario": usuario, "password": password},
    )
    if user is None:
        logger.info("Login rejected | usuario=%s", usuario)
    return user
