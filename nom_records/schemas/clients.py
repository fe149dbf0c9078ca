from typing import Optional
from pydantic import BaseModel


class ClienteCreate(BaseModel):
    nombre_empresa: str
    nombre: Optional[str] = None
    telefono: Optional[str] = None
    direccion: Optional[str] = None
    puesto: Optional[str] = None


class ClienteRead(ClienteCreate):
    id: int


class AreaRead(BaseModel):
    id: int
    cliente_id: int
    nombre_area: str
    descripcion: Optional[str] = None
    image: Optional[str] = None
