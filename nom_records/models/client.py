from typing import Optional
from sqlmodel import SQLModel, Field


class Cliente(SQLModel, table=True):
    __tablename__ = "clientes"

    id: Optional[int] = Field(default=None, primary_key=True)
    nombre_empresa: str
    nombre: Optional[str] = None
    telefono: Optional[str] = None
    direccion: Optional[str] = None
    puesto: Optional[str] = None  # role label of the contact person


class AreaTrabajo(SQLModel, table=True):
    __tablename__ = "areas_trabajo"

    id: Optional[int] = Field(default=None, primary_key=True)
    cliente_id: int = Field(foreign_key="clientes.id", index=True)
    nombre_area: str
    descripcion: Optional[str] = None
    image: Optional[str] = None
