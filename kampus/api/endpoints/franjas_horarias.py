"""Endpoints de franjas horarias.

Se exponen dos veces: como recurso plano ``/franjas-horarias`` y anidadas
bajo ``/instituciones/{institucion_id}/franjas-horarias``, donde la
institución se toma de la URL y una franja de otra institución da 404.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kampus.api.endpoints.auth import require_permission
from kampus.core.database import get_db
from kampus.core.errores import ErrorValidacion
from kampus.core.paginacion import (
    ParametrosListado,
    aplicar_busqueda,
    aplicar_orden,
    paginar,
    parametros_listado,
)
from kampus.models import FranjaHoraria, Institucion, Usuario
from kampus.resources import Incluir, franja_horaria_resource
from kampus.schemas.academico import (
    FranjaHorariaCreate,
    FranjaHorariaDatos,
    FranjaHorariaItem,
    FranjaHorariaUpdate,
)
from kampus.schemas.comun import MensajeResponse, Paginado, Respuesta
from kampus.services.crud import (
    aplicar_cambios,
    crear,
    eliminar,
    obtener,
    obtener_o_404,
    verificar_referencias,
)

router = APIRouter(prefix="/franjas-horarias", tags=["franjas-horarias"])
router_institucion = APIRouter(
    prefix="/instituciones/{institucion_id}/franjas-horarias", tags=["franjas-horarias"]
)

INCLUIR_FRANJA = Incluir.de("institucion")
LISTADO = Paginado[FranjaHorariaItem]
DETALLE = Respuesta[FranjaHorariaItem]
NO_ENCONTRADA = "Franja horaria no encontrada"
NO_ENCONTRADA_EN_INSTITUCION = "Franja horaria no encontrada en esta institución"
INSTITUCION_NO_ENCONTRADA = "Institución no encontrada"
HORARIO_EN_USO = "Ya existe una franja horaria con ese horario en la institución."

ORDENABLES = {
    "id": FranjaHoraria.id,
    "nombre": FranjaHoraria.nombre,
    "hora_inicio": FranjaHoraria.hora_inicio,
    "hora_fin": FranjaHoraria.hora_fin,
    "estado": FranjaHoraria.estado,
}


async def _verificar_horario_libre(
    db: AsyncSession, institucion_id: int, hora_inicio, hora_fin, excluir_id: int | None = None
) -> None:
    """Una institución no puede tener dos franjas con las mismas horas."""
    q = select(FranjaHoraria.id).where(
        FranjaHoraria.institucion_id == institucion_id,
        FranjaHoraria.hora_inicio == hora_inicio,
        FranjaHoraria.hora_fin == hora_fin,
    )
    if excluir_id is not None:
        q = q.where(FranjaHoraria.id != excluir_id)
    if (await db.execute(q.limit(1))).first() is not None:
        raise ErrorValidacion.campo("hora_inicio", HORARIO_EN_USO)


def _horas_en_orden(hora_inicio, hora_fin) -> None:
    if hora_fin <= hora_inicio:
        raise ErrorValidacion.campo("hora_fin", "La hora de fin debe ser posterior a la hora de inicio.")


async def _listar(db, request, params, institucion_id: int | None, estado: str | None):
    q = select(FranjaHoraria).options(*INCLUIR_FRANJA.opciones(FranjaHoraria))
    if institucion_id is not None:
        q = q.where(FranjaHoraria.institucion_id == institucion_id)
    if estado:
        q = q.where(FranjaHoraria.estado == estado)
    q = aplicar_busqueda(q, [FranjaHoraria.nombre, FranjaHoraria.descripcion], params.search)
    q = aplicar_orden(q, params, ORDENABLES, [FranjaHoraria.hora_inicio, FranjaHoraria.id])
    return await paginar(db, request, q, params, lambda f: franja_horaria_resource(f, INCLUIR_FRANJA))


async def _crear(db: AsyncSession, institucion_id: int, datos: FranjaHorariaDatos) -> dict:
    await _verificar_horario_libre(db, institucion_id, datos.hora_inicio, datos.hora_fin)
    valores = datos.model_dump(exclude={"institucion_id"})
    franja = await crear(db, FranjaHoraria(institucion_id=institucion_id, **valores))
    franja = await obtener(db, FranjaHoraria, franja.id, INCLUIR_FRANJA)
    return {"data": franja_horaria_resource(franja, INCLUIR_FRANJA)}


async def _actualizar(db: AsyncSession, franja: FranjaHoraria, body: FranjaHorariaUpdate) -> dict:
    cambios = body.model_dump(exclude_none=True)
    hora_inicio = cambios.get("hora_inicio", franja.hora_inicio)
    hora_fin = cambios.get("hora_fin", franja.hora_fin)
    _horas_en_orden(hora_inicio, hora_fin)
    if "hora_inicio" in cambios or "hora_fin" in cambios:
        await _verificar_horario_libre(db, franja.institucion_id, hora_inicio, hora_fin, excluir_id=franja.id)
    aplicar_cambios(franja, cambios)
    await db.flush()
    franja = await obtener(db, FranjaHoraria, franja.id, INCLUIR_FRANJA)
    return {"data": franja_horaria_resource(franja, INCLUIR_FRANJA)}


# --- Recurso plano ---


@router.get(
    "",
    response_model=LISTADO,
    response_model_exclude_unset=True,
    summary="Listar franjas horarias",
)
async def listar_franjas(
    request: Request,
    params: ParametrosListado = Depends(parametros_listado),
    institucion_id: int | None = Query(None),
    estado: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_franjas_horarias")),
):
    return await _listar(db, request, params, institucion_id, estado)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=DETALLE,
    response_model_exclude_unset=True,
    summary="Crear franja horaria",
)
async def crear_franja(
    body: FranjaHorariaCreate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("crear_franjas_horarias")),
):
    await verificar_referencias(
        db, [("institucion_id", Institucion, body.institucion_id, "La institución seleccionada no existe.")]
    )
    return await _crear(db, body.institucion_id, body)


@router.get(
    "/{franja_id}",
    response_model=DETALLE,
    response_model_exclude_unset=True,
    summary="Detalle de franja horaria",
)
async def obtener_franja(
    franja_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_franjas_horarias")),
):
    franja = await obtener_o_404(db, FranjaHoraria, franja_id, NO_ENCONTRADA, INCLUIR_FRANJA)
    return {"data": franja_horaria_resource(franja, INCLUIR_FRANJA)}


@router.put(
    "/{franja_id}",
    response_model=DETALLE,
    response_model_exclude_unset=True,
    summary="Actualizar franja horaria",
)
async def actualizar_franja(
    franja_id: int,
    body: FranjaHorariaUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("editar_franjas_horarias")),
):
    franja = await obtener_o_404(db, FranjaHoraria, franja_id, NO_ENCONTRADA)
    return await _actualizar(db, franja, body)


@router.delete("/{franja_id}", response_model=MensajeResponse, summary="Eliminar franja horaria")
async def eliminar_franja(
    franja_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("eliminar_franjas_horarias")),
):
    franja = await obtener_o_404(db, FranjaHoraria, franja_id, NO_ENCONTRADA)
    await eliminar(db, franja)
    return {"message": "Franja horaria eliminada exitosamente"}


# --- Anidadas bajo la institución ---


async def _franja_de_institucion(db: AsyncSession, institucion_id: int, franja_id: int) -> FranjaHoraria:
    await obtener_o_404(db, Institucion, institucion_id, INSTITUCION_NO_ENCONTRADA)
    franja = await obtener(db, FranjaHoraria, franja_id, INCLUIR_FRANJA)
    if franja is None or franja.institucion_id != institucion_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NO_ENCONTRADA_EN_INSTITUCION)
    return franja


@router_institucion.get(
    "",
    response_model=LISTADO,
    response_model_exclude_unset=True,
    summary="Franjas horarias de una institución",
)
async def listar_franjas_institucion(
    institucion_id: int,
    request: Request,
    params: ParametrosListado = Depends(parametros_listado),
    estado: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_franjas_horarias")),
):
    await obtener_o_404(db, Institucion, institucion_id, INSTITUCION_NO_ENCONTRADA)
    return await _listar(db, request, params, institucion_id, estado)


@router_institucion.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=DETALLE,
    response_model_exclude_unset=True,
    summary="Crear franja en una institución",
)
async def crear_franja_institucion(
    institucion_id: int,
    body: FranjaHorariaDatos,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("crear_franjas_horarias")),
):
    await obtener_o_404(db, Institucion, institucion_id, INSTITUCION_NO_ENCONTRADA)
    return await _crear(db, institucion_id, body)


@router_institucion.get(
    "/{franja_id}",
    response_model=DETALLE,
    response_model_exclude_unset=True,
    summary="Detalle de franja de una institución",
)
async def obtener_franja_institucion(
    institucion_id: int,
    franja_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_franjas_horarias")),
):
    franja = await _franja_de_institucion(db, institucion_id, franja_id)
    return {"data": franja_horaria_resource(franja, INCLUIR_FRANJA)}


@router_institucion.put(
    "/{franja_id}",
    response_model=DETALLE,
    response_model_exclude_unset=True,
    summary="Actualizar franja de una institución",
)
async def actualizar_franja_institucion(
    institucion_id: int,
    franja_id: int,
    body: FranjaHorariaUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("editar_franjas_horarias")),
):
    franja = await _franja_de_institucion(db, institucion_id, franja_id)
    return await _actualizar(db, franja, body)


@router_institucion.delete(
    "/{franja_id}",
    response_model=MensajeResponse,
    summary="Eliminar franja de una institución",
)
async def eliminar_franja_institucion(
    institucion_id: int,
    franja_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("eliminar_franjas_horarias")),
):
    franja = await _franja_de_institucion(db, institucion_id, franja_id)
    await eliminar(db, franja)
    return {"message": "Franja horaria eliminada exitosamente"}
