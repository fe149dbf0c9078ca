from fastapi import APIRouter, Depends
from pydantic import BaseModel

from nom_records.core.database import ConnectionPool, get_pool

router = APIRouter()


class HealthResponse(BaseModel):
    status: str = "ok"


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Simple health check endpoint."""
    return HealthResponse()


@router.get("/health/db", response_model=HealthResponse, tags=["health"])
async def health_db(pool: ConnectionPool = Depends(get_pool)):
    """Round trip to the database through the pool."""
    ok = await pool.check_health()
    return HealthResponse(status="ok" if ok else "unavailable")
