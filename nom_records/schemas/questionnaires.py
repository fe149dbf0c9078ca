from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class RespuestaSchema(BaseModel):
    pregunta: str
    respuesta: Optional[str] = None


class CuestionarioCreate(BaseModel):
    """Structured part of the multipart submission (the `data` field)."""
    puesto_id: int
    nom: str
    subopcion_id: int
    respuestas: List[RespuestaSchema] = Field(default_factory=list)
    observaciones: Optional[str] = None
    recomendaciones: Optional[str] = None
    recomendaciones_epp: Optional[str] = None


class CuestionarioCreated(BaseModel):
    message: str
    info_id: int


class CuestionarioInfoRead(BaseModel):
    id: int
    puesto_id: int
    nom: str
    subopcion_id: int
    observaciones: Optional[str] = None
    recomendaciones: Optional[str] = None
    recomendaciones_epp: Optional[str] = None
    image: Optional[str] = None
    created_at: Optional[datetime] = None


class CuestionarioResumen(BaseModel):
    id: int
    puesto_id: int
    nom: str
    subopcion_id: Optional[int] = None
    subopcion_nombre: Optional[str] = None
    created_at: Optional[datetime] = None
    image: Optional[str] = None
    num_respuestas: int


class CuestionarioDetalleInfo(BaseModel):
    observaciones: str
    recomendaciones: str
    recomendaciones_epp: str
    image: Optional[str] = None
    created_at: Optional[datetime] = None


class CuestionarioCompleto(BaseModel):
    info: Optional[CuestionarioDetalleInfo] = None
    respuestas: List[RespuestaSchema] = Field(default_factory=list)
