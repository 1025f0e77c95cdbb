"""Endpoints de instituciones: CRUD y listado de sus sedes."""
from fastapi import APIRouter, Depends, Request, status
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
from kampus.resources import Incluir, institucion_resource, sede_resource
from kampus.schemas.institucion import InstitucionCreate, InstitucionUpdate
from kampus.services.crud import aplicar_cambios, crear, eliminar, obtener, obtener_o_404, verificar_unico

router = APIRouter(prefix="/instituciones", tags=["instituciones"])

INCLUIR_INSTITUCION = Incluir.de("sedes")
NO_ENCONTRADA = "Institución no encontrada"
SIGLAS_EN_USO = "Las siglas ya están en uso."

ORDENABLES = {
    "id": Institucion.id,
    "nombre": Institucion.nombre,
    "siglas": Institucion.siglas,
    "created_at": Institucion.created_at,
}


@router.get("", summary="Listar instituciones")
async def listar_instituciones(
    request: Request,
    params: ParametrosListado = Depends(parametros_listado),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_instituciones")),
):
    """Listado paginado; `search` busca en nombre, siglas, DANE y rector."""
    q = select(Institucion).options(*INCLUIR_INSTITUCION.opciones(Institucion))
    q = aplicar_busqueda(
        q,
        [Institucion.nombre, Institucion.siglas, Institucion.dane, Institucion.rector],
        params.search,
    )
    q = aplicar_orden(q, params, ORDENABLES, [Institucion.nombre])
    return await paginar(db, request, q, params, lambda i: institucion_resource(i, INCLUIR_INSTITUCION))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Crear institución")
async def crear_institucion(
    body: InstitucionCreate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("crear_instituciones")),
):
    await verificar_unico(db, Institucion, "siglas", body.siglas, SIGLAS_EN_USO)
    institucion = await crear(db, Institucion(**body.model_dump()))
    institucion = await obtener(db, Institucion, institucion.id, INCLUIR_INSTITUCION)
    return {"data": institucion_resource(institucion, INCLUIR_INSTITUCION)}


@router.get("/{institucion_id}", summary="Detalle de institución")
async def obtener_institucion(
    institucion_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_instituciones")),
):
    institucion = await obtener_o_404(db, Institucion, institucion_id, NO_ENCONTRADA, INCLUIR_INSTITUCION)
    return {"data": institucion_resource(institucion, INCLUIR_INSTITUCION)}


@router.put("/{institucion_id}", summary="Actualizar institución")
async def actualizar_institucion(
    institucion_id: int,
    body: InstitucionUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("editar_instituciones")),
):
    institucion = await obtener_o_404(db, Institucion, institucion_id, NO_ENCONTRADA)
    cambios = body.model_dump(exclude_none=True)
    if "siglas" in cambios:
        await verificar_unico(db, Institucion, "siglas", cambios["siglas"], SIGLAS_EN_USO, excluir_id=institucion_id)
    aplicar_cambios(institucion, cambios)
    await db.flush()
    institucion = await obtener(db, Institucion, institucion_id, INCLUIR_INSTITUCION)
    return {"data": institucion_resource(institucion, INCLUIR_INSTITUCION)}


@router.delete("/{institucion_id}", summary="Eliminar institución")
async def eliminar_institucion(
    institucion_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("eliminar_instituciones")),
):
    """Elimina la institución; sus sedes, años, grados, áreas, aulas y franjas caen en cascada."""
    institucion = await obtener_o_404(db, Institucion, institucion_id, NO_ENCONTRADA)
    await eliminar(db, institucion)
    return {"message": "Institución eliminada exitosamente"}


@router.get("/{institucion_id}/sedes", summary="Sedes de una institución")
async def sedes_de_institucion(
    institucion_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_sedes")),
):
    await obtener_o_404(db, Institucion, institucion_id, NO_ENCONTRADA)
    result = await db.execute(
        select(Sede).where(Sede.institucion_id == institucion_id).order_by(Sede.nombre)
    )
    return {"data": [sede_resource(s) for s in result.scalars().all()]}
