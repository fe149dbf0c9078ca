from typing import Optional
from sqlmodel import SQLModel, Field


class PuestoTrabajo(SQLModel, table=True):
    __tablename__ = "puestos_trabajo"

    id: Optional[int] = Field(default=None, primary_key=True)
    area_id: int = Field(foreign_key="areas_trabajo.id", index=True)
    puesto: str
    numero_usuarios: Optional[int] = None
    descripcion: Optional[str] = None
    criterio_epp: Optional[str] = None


# Association tables carry a surrogate key: submissions are append-only and
# the same pair may legitimately be stored more than once.
class PuestoRiesgo(SQLModel, table=True):
    __tablename__ = "puestos_riesgos"

    id: Optional[int] = Field(default=None, primary_key=True)
    puesto_id: int = Field(foreign_key="puestos_trabajo.id", index=True)
    riesgo_id: int = Field(foreign_key="riesgos_laborales.id")


class PuestoEpp(SQLModel, table=True):
    __tablename__ = "puestos_epp"

    id: Optional[int] = Field(default=None, primary_key=True)
    puesto_id: int = Field(foreign_key="puestos_trabajo.id", index=True)
    epp_id: int = Field(foreign_key="equipo_proteccion.id")


class PuestoNorma(SQLModel, table=True):
    __tablename__ = "puestos_normas"

    id: Optional[int] = Field(default=None, primary_key=True)
    puesto_id: int = Field(foreign_key="puestos_trabajo.id", index=True)
    norma_id: int = Field(foreign_key="normas.id")
