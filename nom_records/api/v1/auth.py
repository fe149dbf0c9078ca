from fastapi import APIRouter, Depends

from nom_records.core.database import ConnectionPool, get_pool
from nom_records.schemas.auth import LoginRequest, LoginResponse
from nom_records.services.auth_service import authenticate_user

router = APIRouter(tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, pool: ConnectionPool = Depends(get_pool)):
    user = await authenticate_user(pool, payload.usuario, payload.password)
    return LoginResponse(success=user is not None, user=user)
