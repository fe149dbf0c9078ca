from typing import Optional
from sqlmodel import SQLModel, Field


class RiesgoLaboral(SQLModel, table=True):
    __tablename__ = "riesgos_laborales"

    id: Optional[int] = Field(default=None, primary_key=True)
    nombre: str


class EquipoProteccion(SQLModel, table=True):
    __tablename__ = "equipo_proteccion"

    id: Optional[int] = Field(default=None, primary_key=True)
    nombre: str


class Norma(SQLModel, table=True):
    __tablename__ = "normas"

    id: Optional[int] = Field(default=None, primary_key=True)
    nombre: str
    descripcion: Optional[str] = None


class NomSubopcion(SQLModel, table=True):
    __tablename__ = "nom_subopciones"

    id: Optional[int] = Field(default=None, primary_key=True)
    nom: str = Field(index=True)
    subopcion: str


class CuestionarioPregunta(SQLModel, table=True):
    __tablename__ = "cuestionario_preguntas"

    id: Optional[int] = Field(default=None, primary_key=True)
    subopcion_tipo: str = Field(index=True)
    pregunta: str
