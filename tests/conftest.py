"""Pytest configuration and fixtures."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from nom_records.core.config import Settings
from nom_records.core.database import ConnectionPool, init_db
from nom_records.main import create_app

SEED = [
    ("INSERT INTO usuarios (id, usuario, password) VALUES (1, 'inspector', 'secreto')", {}),
    (
        "INSERT INTO clientes (id, nombre_empresa, nombre, telefono, direccion, puesto) "
        "VALUES (1, 'Aceros del Norte', 'Laura Ríos', '8112345678', 'Av. Industrial 100', 'Gerente EHS')",
        {},
    ),
    ("INSERT INTO areas_trabajo (id, cliente_id, nombre_area, descripcion) VALUES (1, 1, 'Almacén', 'Nave 2')", {}),
    ("INSERT INTO areas_trabajo (id, cliente_id, nombre_area, descripcion) VALUES (2, 1, 'Soldadura', NULL)", {}),
    ("INSERT INTO riesgos_laborales (id, nombre) VALUES (1, 'Fuego'), (2, 'Altura'), (3, 'Ruido')", {}),
    ("INSERT INTO equipo_proteccion (id, nombre) VALUES (1, 'Casco'), (2, 'Guantes'), (3, 'Arnés')", {}),
    (
        "INSERT INTO normas (id, nombre, descripcion) VALUES "
        "(1, 'NOM-002-STPS', 'Prevención y protección contra incendios'), "
        "(2, 'NOM-009-STPS', 'Trabajos en altura')",
        {},
    ),
    (
        "INSERT INTO nom_subopciones (id, nom, subopcion) VALUES "
        "(1, 'NOM-002', 'Extintores'), (2, 'NOM-002', 'Rutas de evacuación'), (3, 'NOM-009', 'Andamios')",
        {},
    ),
    (
        "INSERT INTO cuestionario_preguntas (id, subopcion_tipo, pregunta) VALUES "
        "(1, 'extintores', '¿Los extintores están señalizados?'), "
        "(2, 'extintores', '¿La carga está vigente?'), "
        "(3, 'andamios', '¿El andamio tiene barandal?')",
        {},
    ),
]


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'nom_records.db'}"


@pytest.fixture
def settings(database_url, tmp_path):
    return Settings(
        DATABASE_URL=database_url,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        LOG_LEVEL="DEBUG",
    )


@pytest_asyncio.fixture
async def pool(database_url):
    pool = ConnectionPool(database_url, max_size=5, acquire_timeout=2.0)
    await init_db(pool)
    yield pool
    await pool.dispose()


@pytest_asyncio.fixture
async def seeded_pool(pool):
    for sql, params in SEED:
        await pool.execute(sql, params)
    return pool


@pytest_asyncio.fixture
async def client(settings, seeded_pool):
    app = create_app(settings, pool=seeded_pool)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def row_count(pool):
    """Count the rows of a table through the pool under test."""

    async def _count(table: str) -> int:
        row = await pool.query_one(f"SELECT COUNT(*) AS n FROM {table}")
        return row["n"]

    return _count
