"""Endpoints de áreas."""
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
from kampus.models import Area, Institucion, Usuario
from kampus.resources import Incluir, area_resource
from kampus.schemas.academico import AreaCreate, AreaUpdate
from kampus.services.crud import (
    aplicar_cambios,
    crear,
    eliminar,
    obtener,
    obtener_o_404,
    verificar_referencias,
)

router = APIRouter(prefix="/areas", tags=["areas"])

INCLUIR_AREA = Incluir.de("institucion", "asignaturas")
NO_ENCONTRADA = "Área no encontrada"
ORDENABLES = {"id": Area.id, "nombre": Area.nombre, "created_at": Area.created_at}


def _referencias(institucion_id: int | None):
    return [("institucion_id", Institucion, institucion_id, "La institución seleccionada no existe.")]


@router.get("", summary="Listar áreas")
async def listar_areas(
    request: Request,
    params: ParametrosListado = Depends(parametros_listado),
    institucion_id: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_areas")),
):
    q = select(Area).options(*INCLUIR_AREA.opciones(Area))
    if institucion_id is not None:
        q = q.where(Area.institucion_id == institucion_id)
    q = aplicar_busqueda(q, [Area.nombre, Area.descripcion], params.search)
    q = aplicar_orden(q, params, ORDENABLES, [Area.nombre])
    return await paginar(db, request, q, params, lambda a: area_resource(a, INCLUIR_AREA))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Crear área")
async def crear_area(
    body: AreaCreate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("crear_areas")),
):
    await verificar_referencias(db, _referencias(body.institucion_id))
    area = await crear(db, Area(**body.model_dump()))
    area = await obtener(db, Area, area.id, INCLUIR_AREA)
    return {"data": area_resource(area, INCLUIR_AREA)}


@router.get("/{area_id}", summary="Detalle de área")
async def obtener_area(
    area_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_areas")),
):
    area = await obtener_o_404(db, Area, area_id, NO_ENCONTRADA, INCLUIR_AREA)
    return {"data": area_resource(area, INCLUIR_AREA)}


@router.put("/{area_id}", summary="Actualizar área")
async def actualizar_area(
    area_id: int,
    body: AreaUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("editar_areas")),
):
    area = await obtener_o_404(db, Area, area_id, NO_ENCONTRADA)
    cambios = body.model_dump(exclude_none=True)
    await verificar_referencias(db, _referencias(cambios.get("institucion_id")))
    aplicar_cambios(area, cambios)
    await db.flush()
    area = await obtener(db, Area, area_id, INCLUIR_AREA)
    return {"data": area_resource(area, INCLUIR_AREA)}


@router.delete("/{area_id}", summary="Eliminar área")
async def eliminar_area(
    area_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("eliminar_areas")),
):
    """Elimina el área junto con sus asignaturas."""
    area = await obtener_o_404(db, Area, area_id, NO_ENCONTRADA)
    await eliminar(db, area)
    return {"message": "Área eliminada exitosamente"}
