"""Fixtures comunes: base de datos SQLite en memoria, app y datos de prueba."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("MODO_DESARROLLO", "false")

from datetime import date, time
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from kampus.core.config import Settings
from kampus.core.database import Base, activar_claves_foraneas, get_db
from kampus.core.security import hash_password
from kampus.main import crear_app
from kampus.models import (
    Anio,
    Area,
    Asignatura,
    Docente,
    FranjaHoraria,
    Grado,
    Grupo,
    Institucion,
    Periodo,
    Rol,
    Sede,
    Usuario,
)
from kampus.services.auth_service import emitir_token
from kampus.services.permisos import sembrar_permisos_y_roles

BASE_URL = "http://test/api/v1"
PASSWORD = "secreto123"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    activar_claves_foraneas(engine.sync_engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def sesiones(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


def _construir_app(sesiones, config: Settings):
    app = crear_app(config)

    async def _get_db():
        async with sesiones() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    return app


@pytest.fixture
def app(sesiones):
    return _construir_app(sesiones, Settings(modo_desarrollo=False))


@pytest.fixture
def app_desarrollo(sesiones):
    return _construir_app(sesiones, Settings(modo_desarrollo=True))


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL) as c:
        yield c


@pytest.fixture
async def guardar(sesiones):
    """Persiste entidades en una sesión propia y devuelve la primera."""

    async def _guardar(*entidades):
        async with sesiones() as s:
            s.add_all(entidades)
            await s.commit()
        return entidades[0]

    return _guardar


async def _usuario_con_rol(s: AsyncSession, institucion_id: int, username: str, rol: Rol | None) -> Usuario:
    usuario = Usuario(
        nombre=username.capitalize(),
        apellido="Prueba",
        username=username,
        email=f"{username}@example.com",
        password_hash=PASSWORD_HASH,
        institucion_id=institucion_id,
        roles=[rol] if rol is not None else [],
    )
    s.add(usuario)
    await s.flush()
    return usuario


@pytest.fixture
async def datos(sesiones):
    """Institución con su estructura académica, dos docentes y tres usuarios con token.

    - ``admin``: rol Administrador (todos los permisos).
    - ``lector``: rol Docente (solo lectura académica).
    - ``sin_roles``: ningún permiso.
    """
    async with sesiones() as s:
        admin_rol = await sembrar_permisos_y_roles(s)
        docente_rol = (await s.execute(select(Rol).where(Rol.nombre == "Docente"))).scalar_one()

        institucion = Institucion(nombre="Colegio Central", siglas="CC")
        s.add(institucion)
        await s.flush()

        admin = await _usuario_con_rol(s, institucion.id, "admin", admin_rol)
        lector = await _usuario_con_rol(s, institucion.id, "lector", docente_rol)
        sin_roles = await _usuario_con_rol(s, institucion.id, "invitado", None)

        sede = Sede(institucion_id=institucion.id, nombre="Sede Principal")
        anio = Anio(
            nombre="2025",
            fecha_inicio=date(2025, 1, 20),
            fecha_fin=date(2025, 11, 30),
            institucion_id=institucion.id,
        )
        otro_anio = Anio(
            nombre="2026",
            fecha_inicio=date(2026, 1, 20),
            fecha_fin=date(2026, 11, 30),
            institucion_id=institucion.id,
        )
        grado = Grado(nombre="Sexto", nivel="Básica Secundaria", institucion_id=institucion.id)
        area = Area(nombre="Matemáticas", institucion_id=institucion.id)
        s.add_all([sede, anio, otro_anio, grado, area])
        await s.flush()

        periodo = Periodo(
            nombre="Primer periodo", fecha_inicio=date(2025, 1, 20), fecha_fin=date(2025, 4, 10), anio_id=anio.id
        )
        periodo_otro_anio = Periodo(
            nombre="Primer periodo", fecha_inicio=date(2026, 1, 20), fecha_fin=date(2026, 4, 10), anio_id=otro_anio.id
        )
        grupo_a = Grupo(nombre="6-A", sede_id=sede.id, anio_id=anio.id, grado_id=grado.id)
        grupo_b = Grupo(nombre="6-B", sede_id=sede.id, anio_id=anio.id, grado_id=grado.id)
        asignatura = Asignatura(nombre="Álgebra", porcentaje_area=60, area_id=area.id)
        geometria = Asignatura(nombre="Geometría", porcentaje_area=40, area_id=area.id)
        primera = FranjaHoraria(
            institucion_id=institucion.id, nombre="Primera hora", hora_inicio=time(7, 0), hora_fin=time(7, 45)
        )
        segunda = FranjaHoraria(
            institucion_id=institucion.id, nombre="Segunda hora", hora_inicio=time(7, 45), hora_fin=time(8, 30)
        )
        docente_1 = Docente(
            user=await _usuario_con_rol(s, institucion.id, "docente1", docente_rol), especialidad="Matemáticas"
        )
        docente_2 = Docente(
            user=await _usuario_con_rol(s, institucion.id, "docente2", docente_rol), especialidad="Física"
        )
        s.add_all(
            [periodo, periodo_otro_anio, grupo_a, grupo_b, asignatura, geometria, primera, segunda, docente_1, docente_2]
        )
        await s.flush()

        tokens = {}
        for nombre, usuario in (("admin", admin), ("lector", lector), ("sin_roles", sin_roles)):
            tokens[nombre], _ = await emitir_token(s, usuario)
        await s.commit()

        return SimpleNamespace(
            institucion_id=institucion.id,
            sede_id=sede.id,
            anio_id=anio.id,
            otro_anio_id=otro_anio.id,
            periodo_id=periodo.id,
            periodo_otro_anio_id=periodo_otro_anio.id,
            grado_id=grado.id,
            grupo_a_id=grupo_a.id,
            grupo_b_id=grupo_b.id,
            area_id=area.id,
            asignatura_id=asignatura.id,
            geometria_id=geometria.id,
            franja_1_id=primera.id,
            franja_2_id=segunda.id,
            docente_1_id=docente_1.id,
            docente_2_id=docente_2.id,
            admin_id=admin.id,
            lector_id=lector.id,
            sin_roles_id=sin_roles.id,
            admin_rol_id=admin_rol.id,
            docente_rol_id=docente_rol.id,
            tokens=tokens,
        )


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(datos):
    return auth(datos.tokens["admin"])


@pytest.fixture
def lector(datos):
    return auth(datos.tokens["lector"])


@pytest.fixture
def sin_roles(datos):
    return auth(datos.tokens["sin_roles"])


@pytest.fixture
def asignacion_valida(datos):
    """Payload de una asignación que no choca con nada."""
    return {
        "docente_id": datos.docente_1_id,
        "asignatura_id": datos.asignatura_id,
        "grupo_id": datos.grupo_a_id,
        "franja_horaria_id": datos.franja_1_id,
        "dia_semana": "lunes",
        "anio_academico_id": datos.anio_id,
        "periodo_id": datos.periodo_id,
    }
