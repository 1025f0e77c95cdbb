"""Endpoints de aulas."""
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
from kampus.models import Aula, Institucion, Usuario
from kampus.resources import Incluir, aula_resource
from kampus.schemas.academico import AulaCreate, AulaUpdate
from kampus.services.crud import (
    aplicar_cambios,
    crear,
    eliminar,
    obtener,
    obtener_o_404,
    verificar_referencias,
)

router = APIRouter(prefix="/aulas", tags=["aulas"])

INCLUIR_AULA = Incluir.de("institucion")
NO_ENCONTRADA = "Aula no encontrada"
ORDENABLES = {"id": Aula.id, "nombre": Aula.nombre, "tipo": Aula.tipo, "capacidad": Aula.capacidad}


def _referencias(institucion_id: int | None):
    return [("institucion_id", Institucion, institucion_id, "La institución seleccionada no existe.")]


@router.get("", summary="Listar aulas")
async def listar_aulas(
    request: Request,
    params: ParametrosListado = Depends(parametros_listado),
    institucion_id: int | None = Query(None),
    tipo: str | None = Query(None, description="Salón, Laboratorio, Auditorio o Deportivo"),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_aulas")),
):
    q = select(Aula).options(*INCLUIR_AULA.opciones(Aula))
    if institucion_id is not None:
        q = q.where(Aula.institucion_id == institucion_id)
    if tipo:
        q = q.where(Aula.tipo == tipo)
    q = aplicar_busqueda(q, [Aula.nombre, Aula.tipo], params.search)
    q = aplicar_orden(q, params, ORDENABLES, [Aula.nombre])
    return await paginar(db, request, q, params, lambda a: aula_resource(a, INCLUIR_AULA))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Crear aula")
async def crear_aula(
    body: AulaCreate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("crear_aulas")),
):
    await verificar_referencias(db, _referencias(body.institucion_id))
    aula = await crear(db, Aula(**body.model_dump()))
    aula = await obtener(db, Aula, aula.id, INCLUIR_AULA)
    return {"data": aula_resource(aula, INCLUIR_AULA)}


@router.get("/{aula_id}", summary="Detalle de aula")
async def obtener_aula(
    aula_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_aulas")),
):
    aula = await obtener_o_404(db, Aula, aula_id, NO_ENCONTRADA, INCLUIR_AULA)
    return {"data": aula_resource(aula, INCLUIR_AULA)}


@router.put("/{aula_id}", summary="Actualizar aula")
async def actualizar_aula(
    aula_id: int,
    body: AulaUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("editar_aulas")),
):
    aula = await obtener_o_404(db, Aula, aula_id, NO_ENCONTRADA)
    cambios = body.model_dump(exclude_none=True)
    await verificar_referencias(db, _referencias(cambios.get("institucion_id")))
    aplicar_cambios(aula, cambios)
    await db.flush()
    aula = await obtener(db, Aula, aula_id, INCLUIR_AULA)
    return {"data": aula_resource(aula, INCLUIR_AULA)}


@router.delete("/{aula_id}", summary="Eliminar aula")
async def eliminar_aula(
    aula_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("eliminar_aulas")),
):
    aula = await obtener_o_404(db, Aula, aula_id, NO_ENCONTRADA)
    await eliminar(db, aula)
    return {"message": "Aula eliminada exitosamente"}
