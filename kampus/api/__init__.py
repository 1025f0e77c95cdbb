"""Routers de la API."""
from fastapi import APIRouter

from kampus.api.endpoints import (
    acudientes,
    anios,
    areas,
    asignaciones,
    asignaturas,
    auth,
    aulas,
    docentes,
    estudiantes,
    franjas_horarias,
    grados,
    grupos,
    instituciones,
    roles,
    sedes,
    usuarios,
)

router = APIRouter()
router.include_router(auth.router)
router.include_router(usuarios.router)
router.include_router(roles.router)
router.include_router(instituciones.router)
router.include_router(franjas_horarias.router_institucion)
router.include_router(sedes.router)
router.include_router(anios.router)
router.include_router(grados.router)
router.include_router(grupos.router)
router.include_router(areas.router)
router.include_router(asignaturas.router)
router.include_router(aulas.router)
router.include_router(franjas_horarias.router)
router.include_router(docentes.router)
router.include_router(estudiantes.router)
router.include_router(acudientes.router)
router.include_router(asignaciones.router)


@router.get("/", tags=["api"], summary="Raíz de la API v1")
async def api_root():
    """Información básica de la API y enlace a la documentación Swagger."""
    return {"message": "Kampus API v1", "docs": "/docs", "redoc": "/redoc"}
