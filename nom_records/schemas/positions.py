from typing import List, Optional
from pydantic import BaseModel, Field


class PuestoCreate(BaseModel):
    puesto: str
    numero_usuarios: Optional[int] = None
    descripcion: Optional[str] = None
    riesgos: List[int] = Field(default_factory=list)
    epp: List[int] = Field(default_factory=list)
    criterio_epp: Optional[str] = None


class PuestoCreated(BaseModel):
    success: bool = True
    id: int


class PuestoRead(BaseModel):
    id: int
    area_id: int
    puesto: str
    numero_usuarios: Optional[int] = None
    descripcion: Optional[str] = None
    criterio_epp: Optional[str] = None


class PuestoWithCatalogsRead(BaseModel):
    """Position row with its risk and PPE names joined into one string each."""
    id: int
    puesto: str
    numero_usuarios: Optional[int] = None
    descripcion: Optional[str] = None
    criterio_epp: Optional[str] = None
    riesgos: Optional[str] = None
    epp: Optional[str] = None


class NormaAssign(BaseModel):
    normaId: int
