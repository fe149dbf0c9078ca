# models package for SQLModel tables
from .user import Usuario  # noqa: F401  (import for metadata registration)
from .client import Cliente, AreaTrabajo  # noqa: F401
from .catalog import (  # noqa: F401
    RiesgoLaboral,
    EquipoProteccion,
    Norma,
    NomSubopcion,
    CuestionarioPregunta,
)
from .position import PuestoTrabajo, PuestoRiesgo, PuestoEpp, PuestoNorma  # noqa: F401
from .questionnaire import CuestionarioInfo, Cuestionario  # noqa: F401
