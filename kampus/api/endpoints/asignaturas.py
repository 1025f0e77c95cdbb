"""Endpoints de asignaturas."""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kampus.api.endpoints.auth import require_permission
from kampus.core.database import get_db
from kampus.core.paginacion import (
    ParametrosListado,
    aplicar_busqueda,
    aplicar_orden,
    paginar,
    parametros_listado,
)
from kampus.models import Area, Asignatura, Usuario
from kampus.resources import Incluir, asignatura_resource
from kampus.schemas.academico import AsignaturaCreate, AsignaturaUpdate
from kampus.services.crud import (
    aplicar_cambios,
    crear,
    eliminar,
    obtener,
    obtener_o_404,
    verificar_referencias,
)

router = APIRouter(prefix="/asignaturas", tags=["asignaturas"])

INCLUIR_ASIGNATURA = Incluir.de("area")
NO_ENCONTRADA = "Asignatura no encontrada"
ORDENABLES = {
    "id": Asignatura.id,
    "nombre": Asignatura.nombre,
    "porcentaje_area": Asignatura.porcentaje_area,
    "area.nombre": Area.nombre,
}


def _referencias(area_id: int | None):
    return [("area_id", Area, area_id, "El área seleccionada no existe.")]


@router.get("", summary="Listar asignaturas")
async def listar_asignaturas(
    request: Request,
    params: ParametrosListado = Depends(parametros_listado),
    area_id: int | None = Query(None),
    institucion_id: int | None = Query(None, description="Filtrar por institución del área"),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_asignaturas")),
):
    q = (
        select(Asignatura)
        .join(Area, Area.id == Asignatura.area_id)
        .options(*INCLUIR_ASIGNATURA.opciones(Asignatura))
    )
    if area_id is not None:
        q = q.where(Asignatura.area_id == area_id)
    if institucion_id is not None:
        q = q.where(Area.institucion_id == institucion_id)
    q = aplicar_busqueda(q, [Asignatura.nombre], params.search)
    q = aplicar_orden(q, params, ORDENABLES, [Asignatura.nombre])
    return await paginar(
        db, request, q, params, lambda a: asignatura_resource(a, INCLUIR_ASIGNATURA)
    )


@router.post("", status_code=status.HTTP_201_CREATED, summary="Crear asignatura")
async def crear_asignatura(
    body: AsignaturaCreate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("crear_asignaturas")),
):
    """Crea la asignatura. La suma de porcentajes del área no se valida."""
    await verificar_referencias(db, _referencias(body.area_id))
    asignatura = await crear(db, Asignatura(**body.model_dump()))
    asignatura = await obtener(db, Asignatura, asignatura.id, INCLUIR_ASIGNATURA)
    return {"data": asignatura_resource(asignatura, INCLUIR_ASIGNATURA)}


@router.get("/{asignatura_id}", summary="Detalle de asignatura")
async def obtener_asignatura(
    asignatura_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_asignaturas")),
):
    asignatura = await obtener_o_404(db, Asignatura, asignatura_id, NO_ENCONTRADA, INCLUIR_ASIGNATURA)
    return {"data": asignatura_resource(asignatura, INCLUIR_ASIGNATURA)}


@router.put("/{asignatura_id}", summary="Actualizar asignatura")
async def actualizar_asignatura(
    asignatura_id: int,
    body: AsignaturaUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("editar_asignaturas")),
):
    asignatura = await obtener_o_404(db, Asignatura, asignatura_id, NO_ENCONTRADA)
    cambios = body.model_dump(exclude_none=True)
    await verificar_referencias(db, _referencias(cambios.get("area_id")))
    aplicar_cambios(asignatura, cambios)
    await db.flush()
    asignatura = await obtener(db, Asignatura, asignatura_id, INCLUIR_ASIGNATURA)
    return {"data": asignatura_resource(asignatura, INCLUIR_ASIGNATURA)}


@router.delete("/{asignatura_id}", summary="Eliminar asignatura")
async def eliminar_asignatura(
    asignatura_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("eliminar_asignaturas")),
):
    asignatura = await obtener_o_404(db, Asignatura, asignatura_id, NO_ENCONTRADA)
    await eliminar(db, asignatura)
    return {"message": "Asignatura eliminada exitosamente"}
