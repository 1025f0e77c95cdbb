"""Endpoints de sedes."""
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
from kampus.models import Institucion, Sede, Usuario
from kampus.resources import Incluir, sede_resource
from kampus.schemas.institucion import SedeCreate, SedeUpdate
from kampus.services.crud import (
    aplicar_cambios,
    crear,
    eliminar,
    obtener,
    obtener_o_404,
    verificar_referencias,
)

router = APIRouter(prefix="/sedes", tags=["sedes"])

INCLUIR_SEDE = Incluir.de("institucion")
NO_ENCONTRADA = "Sede no encontrada"
ORDENABLES = {"id": Sede.id, "nombre": Sede.nombre, "created_at": Sede.created_at}


def _referencias(institucion_id: int | None):
    return [("institucion_id", Institucion, institucion_id, "La institución seleccionada no existe.")]


@router.get("", summary="Listar sedes")
async def listar_sedes(
    request: Request,
    params: ParametrosListado = Depends(parametros_listado),
    institucion_id: int | None = Query(None, description="Filtrar por institución"),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_sedes")),
):
    q = select(Sede).options(*INCLUIR_SEDE.opciones(Sede))
    if institucion_id is not None:
        q = q.where(Sede.institucion_id == institucion_id)
    q = aplicar_busqueda(q, [Sede.nombre, Sede.direccion], params.search)
    q = aplicar_orden(q, params, ORDENABLES, [Sede.nombre])
    return await paginar(db, request, q, params, lambda s: sede_resource(s, INCLUIR_SEDE))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Crear sede")
async def crear_sede(
    body: SedeCreate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("crear_sedes")),
):
    await verificar_referencias(db, _referencias(body.institucion_id))
    sede = await crear(db, Sede(**body.model_dump()))
    sede = await obtener(db, Sede, sede.id, INCLUIR_SEDE)
    return {"data": sede_resource(sede, INCLUIR_SEDE)}


@router.get("/{sede_id}", summary="Detalle de sede")
async def obtener_sede(
    sede_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_sedes")),
):
    sede = await obtener_o_404(db, Sede, sede_id, NO_ENCONTRADA, INCLUIR_SEDE)
    return {"data": sede_resource(sede, INCLUIR_SEDE)}


@router.put("/{sede_id}", summary="Actualizar sede")
async def actualizar_sede(
    sede_id: int,
    body: SedeUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("editar_sedes")),
):
    sede = await obtener_o_404(db, Sede, sede_id, NO_ENCONTRADA)
    cambios = body.model_dump(exclude_none=True)
    await verificar_referencias(db, _referencias(cambios.get("institucion_id")))
    aplicar_cambios(sede, cambios)
    await db.flush()
    sede = await obtener(db, Sede, sede_id, INCLUIR_SEDE)
    return {"data": sede_resource(sede, INCLUIR_SEDE)}


@router.delete("/{sede_id}", summary="Eliminar sede")
async def eliminar_sede(
    sede_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("eliminar_sedes")),
):
    sede = await obtener_o_404(db, Sede, sede_id, NO_ENCONTRADA)
    await eliminar(db, sede)
    return {"message": "Sede eliminada exitosamente"}
