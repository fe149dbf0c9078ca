from typing import Optional
from sqlmodel import SQLModel, Field


class Usuario(SQLModel, table=True):
    __tablename__ = "usuarios"

    id: Optional[int] = Field(default=None, primary_key=True)
    usuario: str = Field(index=True, sa_column_kwargs={"unique": True})
    password: str
