"""Punto de entrada de la aplicación FastAPI."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi

from kampus import __version__
from kampus.api import router as api_router
from kampus.core.autorizacion import construir_politica
from kampus.core.config import Settings, settings
from kampus.core.database import init_db
from kampus.core.errores import registrar_manejadores
from kampus.core.middleware import headers_de_sesion, registrar_peticiones
from kampus.models import *  # noqa: F401, F403 - Registra modelos en Base.metadata antes de init_db

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Documentación Swagger: disponible en /docs (OpenAPI 3.0)
OPENAPI_TAGS = [
    {"name": "auth", "description": "Login, logout, usuario actual y verificación/renovación del token."},
    {"name": "api", "description": "Información general de la API v1."},
    {"name": "users", "description": "Usuarios y asignación de roles."},
    {"name": "roles", "description": "Roles y permisos disponibles."},
    {"name": "instituciones", "description": "Instituciones educativas y sus sedes."},
    {"name": "sedes", "description": "Sedes de cada institución."},
    {"name": "anios", "description": "Años académicos y sus periodos."},
    {"name": "grados", "description": "Grados por nivel educativo."},
    {"name": "grupos", "description": "Grupos, matrícula y traslado de estudiantes."},
    {"name": "areas", "description": "Áreas del plan de estudios."},
    {"name": "asignaturas", "description": "Asignaturas y su peso dentro del área."},
    {"name": "aulas", "description": "Aulas y espacios físicos."},
    {"name": "franjas-horarias", "description": "Franjas horarias de cada institución."},
    {"name": "docentes", "description": "Docentes y su usuario asociado."},
    {"name": "estudiantes", "description": "Estudiantes, su usuario y sus acudientes."},
    {"name": "acudientes", "description": "Acudientes de los estudiantes."},
    {
        "name": "asignaciones",
        "description": "Asignaciones de horario con detección de conflictos de docente y grupo.",
    },
    {"name": "salud", "description": "Comprobación del estado del servicio."},
]

DESCRIPCION = """
API REST de **Kampus**: administración escolar multi-institución (estructura
académica, personas y asignaciones de horario con detección de conflictos).

## Autenticación

1. Obtén un token con **POST /api/v1/login** (email y contraseña).
2. En Swagger UI, clic en **Authorize** y pega solo el token.
3. Si el token está por vencer, la respuesta trae uno nuevo en el header `X-New-Token`.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Crea las tablas que falten al iniciar."""
    await init_db()
    logger.info("Kampus API %s iniciada (política: %s)", __version__, app.state.politica_autorizacion.nombre)
    yield


def crear_app(config: Settings = settings) -> FastAPI:
    """Construye la aplicación; la política de autorización se fija aquí una sola vez."""
    app = FastAPI(
        title=config.app_name,
        description=DESCRIPCION,
        version=__version__,
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        swagger_ui_parameters={"persistAuthorization": True, "tryItOutEnabled": True},
    )
    app.state.politica_autorizacion = construir_politica(config)

    def custom_openapi():
        """Asegura que el esquema de seguridad Bearer tenga descripción en Swagger."""
        if app.openapi_schema is not None:
            return app.openapi_schema
        openapi_schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
            tags=OPENAPI_TAGS,
        )
        esquemas = openapi_schema.setdefault("components", {}).setdefault("securitySchemes", {})
        for scheme in esquemas.values():
            if scheme.get("type") == "http" and scheme.get("scheme") == "bearer":
                scheme["description"] = "Pegue aquí el token obtenido en POST /api/v1/login (sin 'Bearer')"
                break
        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi

    registrar_manejadores(app)
    app.middleware("http")(headers_de_sesion)
    app.middleware("http")(registrar_peticiones)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-New-Token", "X-Dev-Auth"],
    )

    app.include_router(api_router, prefix="/api/v1")

    @app.get(
        "/health",
        tags=["salud"],
        summary="Estado del servicio",
        response_description="Indica que la API está en ejecución",
    )
    async def health_check():
        """Comprueba que el servicio está activo. No requiere autenticación."""
        return {"status": "ok", "message": "Servicio en ejecución"}

    return app


app = crear_app()
