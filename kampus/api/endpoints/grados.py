"""Endpoints de grados y de los niveles educativos disponibles."""
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
from kampus.models import Grado, Institucion, NivelGrado, Usuario
from kampus.resources import Incluir, grado_resource
from kampus.schemas.academico import GradoCreate, GradoUpdate
from kampus.services.crud import (
    aplicar_cambios,
    crear,
    eliminar,
    obtener,
    obtener_o_404,
    verificar_referencias,
    verificar_unico,
)

router = APIRouter(prefix="/grados", tags=["grados"])

INCLUIR_GRADO = Incluir.de("institucion", "grupos")
NO_ENCONTRADO = "Grado no encontrado"
NOMBRE_EN_USO = "Ya existe un grado con ese nombre en la institución."

ORDENABLES = {"id": Grado.id, "nombre": Grado.nombre, "nivel": Grado.nivel, "estado": Grado.estado}


def _referencias(institucion_id: int | None):
    return [("institucion_id", Institucion, institucion_id, "La institución seleccionada no existe.")]


@router.get("/niveles", summary="Niveles educativos disponibles")
async def niveles(_: Usuario = Depends(require_permission("ver_grados"))):
    return {"data": list(NivelGrado.TODOS)}


@router.get("", summary="Listar grados")
async def listar_grados(
    request: Request,
    params: ParametrosListado = Depends(parametros_listado),
    institucion_id: int | None = Query(None),
    nivel: str | None = Query(None, description="Filtrar por nivel educativo"),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_grados")),
):
    q = select(Grado).options(*INCLUIR_GRADO.opciones(Grado))
    if institucion_id is not None:
        q = q.where(Grado.institucion_id == institucion_id)
    if nivel:
        q = q.where(Grado.nivel == nivel)
    q = aplicar_busqueda(q, [Grado.nombre, Grado.descripcion], params.search)
    q = aplicar_orden(q, params, ORDENABLES, [Grado.id])
    return await paginar(db, request, q, params, lambda g: grado_resource(g, INCLUIR_GRADO))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Crear grado")
async def crear_grado(
    body: GradoCreate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("crear_grados")),
):
    await verificar_referencias(db, _referencias(body.institucion_id))
    await verificar_unico(
        db, Grado, "nombre", body.nombre, NOMBRE_EN_USO, institucion_id=body.institucion_id
    )
    grado = await crear(db, Grado(**body.model_dump()))
    grado = await obtener(db, Grado, grado.id, INCLUIR_GRADO)
    return {"data": grado_resource(grado, INCLUIR_GRADO)}


@router.get("/{grado_id}", summary="Detalle de grado")
async def obtener_grado(
    grado_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_grados")),
):
    grado = await obtener_o_404(db, Grado, grado_id, NO_ENCONTRADO, INCLUIR_GRADO)
    return {"data": grado_resource(grado, INCLUIR_GRADO)}


@router.put("/{grado_id}", summary="Actualizar grado")
async def actualizar_grado(
    grado_id: int,
    body: GradoUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("editar_grados")),
):
    grado = await obtener_o_404(db, Grado, grado_id, NO_ENCONTRADO)
    cambios = body.model_dump(exclude_none=True)
    await verificar_referencias(db, _referencias(cambios.get("institucion_id")))
    if "nombre" in cambios or "institucion_id" in cambios:
        await verificar_unico(
            db,
            Grado,
            "nombre",
            cambios.get("nombre", grado.nombre),
            NOMBRE_EN_USO,
            excluir_id=grado_id,
            institucion_id=cambios.get("institucion_id", grado.institucion_id),
        )
    aplicar_cambios(grado, cambios)
    await db.flush()
    grado = await obtener(db, Grado, grado_id, INCLUIR_GRADO)
    return {"data": grado_resource(grado, INCLUIR_GRADO)}


@router.delete("/{grado_id}", summary="Eliminar grado")
async def eliminar_grado(
    grado_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("eliminar_grados")),
):
    grado = await obtener_o_404(db, Grado, grado_id, NO_ENCONTRADO)
    await eliminar(db, grado)
    return {"message": "Grado eliminado exitosamente"}
