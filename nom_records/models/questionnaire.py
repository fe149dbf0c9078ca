from datetime import datetime
from typing import Optional
from sqlalchemy import Column, DateTime, func
from sqlmodel import SQLModel, Field


class CuestionarioInfo(SQLModel, table=True):
    __tablename__ = "cuestionarios_info"

    id: Optional[int] = Field(default=None, primary_key=True)
    puesto_id: int = Field(foreign_key="puestos_trabajo.id", index=True)
    nom: str
    subopcion_id: int = Field(foreign_key="nom_subopciones.id")
    observaciones: Optional[str] = None
    recomendaciones: Optional[str] = None
    recomendaciones_epp: Optional[str] = None
    image: Optional[str] = None
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(
            DateTime(timezone=False),
            server_default=func.now(),
            nullable=False,
        )
    )


class Cuestionario(SQLModel, table=True):
    """One answered question. puesto_id/nom/subopcion_id repeat the header's for filtering."""
    __tablename__ = "cuestionarios"

    id: Optional[int] = Field(default=None, primary_key=True)
    info_id: int = Field(foreign_key="cuestionarios_info.id", index=True)
    puesto_id: int = Field(foreign_key="puestos_trabajo.id")
    nom: str
    subopcion_id: int = Field(foreign_key="nom_subopciones.id")
    pregunta: str
    respuesta: Optional[str] = None
