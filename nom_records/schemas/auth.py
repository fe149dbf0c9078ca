from typing import Optional
from pydantic import AliasChoices, BaseModel, Field


class LoginRequest(BaseModel):
    usuario: str
    password: str = Field(validation_alias=AliasChoices("password", "contraseña"))


class UserRead(BaseModel):
    id: int
    usuario: str


class LoginResponse(BaseModel):
    success: bool
    user: Optional[UserRead] = None
