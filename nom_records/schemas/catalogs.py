from typing import Optional
from pydantic import BaseModel


class CatalogItemRead(BaseModel):
    id: int
    nombre: str


class NormaRead(BaseModel):
    id: int
    nombre: str
    descripcion: Optional[str] = None


class SubopcionRead(BaseModel):
    id: int
    nom: str
    subopcion: str


class PreguntaRead(BaseModel):
    id: int
    subopcion_tipo: str
    pregunta: str
