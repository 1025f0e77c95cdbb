"""Endpoints de años académicos y de sus periodos anidados."""
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
from kampus.models import Anio, Institucion, Periodo, Usuario
from kampus.resources import Incluir, anio_resource, periodo_resource
from kampus.schemas.academico import (
    AnioCreate,
    AnioItem,
    AnioUpdate,
    PeriodoCreate,
    PeriodoItem,
    PeriodoUpdate,
)
from kampus.schemas.comun import Lista, MensajeResponse, Paginado, Respuesta
from kampus.services.crud import (
    aplicar_cambios,
    crear,
    eliminar,
    obtener,
    obtener_o_404,
    verificar_referencias,
    verificar_unico,
)

router = APIRouter(prefix="/anios", tags=["anios"])

INCLUIR_ANIO = Incluir.de("institucion", "periodos")
INCLUIR_PERIODO = Incluir.de("anio")
NO_ENCONTRADO = "Año académico no encontrado"
PERIODO_NO_ENCONTRADO = "Periodo no encontrado"
NOMBRE_EN_USO = "Ya existe un año académico con ese nombre."

ORDENABLES = {
    "id": Anio.id,
    "nombre": Anio.nombre,
    "fecha_inicio": Anio.fecha_inicio,
    "fecha_fin": Anio.fecha_fin,
    "estado": Anio.estado,
}


def _referencias(institucion_id: int | None):
    return [("institucion_id", Institucion, institucion_id, "La institución seleccionada no existe.")]


def _fechas_en_orden(fecha_inicio, fecha_fin) -> None:
    if fecha_fin <= fecha_inicio:
        raise ErrorValidacion.campo(
            "fecha_fin", "La fecha de fin debe ser posterior a la fecha de inicio."
        )


@router.get(
    "",
    response_model=Paginado[AnioItem],
    response_model_exclude_unset=True,
    summary="Listar años académicos",
)
async def listar_anios(
    request: Request,
    params: ParametrosListado = Depends(parametros_listado),
    institucion_id: int | None = Query(None, description="Filtrar por institución"),
    estado: str | None = Query(None, description="activo o inactivo"),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_anios")),
):
    q = select(Anio).options(*INCLUIR_ANIO.opciones(Anio))
    if institucion_id is not None:
        q = q.where(Anio.institucion_id == institucion_id)
    if estado:
        q = q.where(Anio.estado == estado)
    q = aplicar_busqueda(q, [Anio.nombre], params.search)
    q = aplicar_orden(q, params, ORDENABLES, [Anio.fecha_inicio.desc(), Anio.id])
    return await paginar(db, request, q, params, lambda a: anio_resource(a, INCLUIR_ANIO))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Respuesta[AnioItem],
    response_model_exclude_unset=True,
    summary="Crear año académico",
)
async def crear_anio(
    body: AnioCreate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("crear_anios")),
):
    await verificar_referencias(db, _referencias(body.institucion_id))
    await verificar_unico(db, Anio, "nombre", body.nombre, NOMBRE_EN_USO)
    anio = await crear(db, Anio(**body.model_dump()))
    anio = await obtener(db, Anio, anio.id, INCLUIR_ANIO)
    return {"data": anio_resource(anio, INCLUIR_ANIO)}


@router.get(
    "/{anio_id}",
    response_model=Respuesta[AnioItem],
    response_model_exclude_unset=True,
    summary="Detalle de año académico",
)
async def obtener_anio(
    anio_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_anios")),
):
    anio = await obtener_o_404(db, Anio, anio_id, NO_ENCONTRADO, INCLUIR_ANIO)
    return {"data": anio_resource(anio, INCLUIR_ANIO)}


@router.put(
    "/{anio_id}",
    response_model=Respuesta[AnioItem],
    response_model_exclude_unset=True,
    summary="Actualizar año académico",
)
async def actualizar_anio(
    anio_id: int,
    body: AnioUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("editar_anios")),
):
    anio = await obtener_o_404(db, Anio, anio_id, NO_ENCONTRADO)
    cambios = body.model_dump(exclude_none=True)
    await verificar_referencias(db, _referencias(cambios.get("institucion_id")))
    if "nombre" in cambios:
        await verificar_unico(db, Anio, "nombre", cambios["nombre"], NOMBRE_EN_USO, excluir_id=anio_id)
    _fechas_en_orden(cambios.get("fecha_inicio", anio.fecha_inicio), cambios.get("fecha_fin", anio.fecha_fin))
    aplicar_cambios(anio, cambios)
    await db.flush()
    anio = await obtener(db, Anio, anio_id, INCLUIR_ANIO)
    return {"data": anio_resource(anio, INCLUIR_ANIO)}


@router.delete(
    "/{anio_id}",
    response_model=MensajeResponse,
    summary="Eliminar año académico",
)
async def eliminar_anio(
    anio_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("eliminar_anios")),
):
    anio = await obtener_o_404(db, Anio, anio_id, NO_ENCONTRADO)
    await eliminar(db, anio)
    return {"message": "Año académico eliminado exitosamente"}


# --- Periodos del año ---


async def _periodo_del_anio(db: AsyncSession, anio_id: int, periodo_id: int) -> Periodo:
    """Periodo por id; 404 si no existe o pertenece a otro año."""
    await obtener_o_404(db, Anio, anio_id, NO_ENCONTRADO)
    periodo = await obtener_o_404(db, Periodo, periodo_id, PERIODO_NO_ENCONTRADO, INCLUIR_PERIODO)
    if periodo.anio_id != anio_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PERIODO_NO_ENCONTRADO)
    return periodo


@router.get(
    "/{anio_id}/periodos",
    response_model=Lista[PeriodoItem],
    response_model_exclude_unset=True,
    summary="Periodos de un año",
)
async def listar_periodos(
    anio_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_periodos")),
):
    """Todos los periodos del año ordenados por fecha de inicio (sin paginar)."""
    await obtener_o_404(db, Anio, anio_id, NO_ENCONTRADO)
    result = await db.execute(
        select(Periodo)
        .where(Periodo.anio_id == anio_id)
        .options(*INCLUIR_PERIODO.opciones(Periodo))
        .order_by(Periodo.fecha_inicio, Periodo.id)
    )
    return {"data": [periodo_resource(p, INCLUIR_PERIODO) for p in result.scalars().all()]}


@router.post(
    "/{anio_id}/periodos",
    status_code=status.HTTP_201_CREATED,
    response_model=Respuesta[PeriodoItem],
    response_model_exclude_unset=True,
    summary="Crear periodo",
)
async def crear_periodo(
    anio_id: int,
    body: PeriodoCreate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("crear_periodos")),
):
    await obtener_o_404(db, Anio, anio_id, NO_ENCONTRADO)
    periodo = await crear(db, Periodo(anio_id=anio_id, **body.model_dump()))
    periodo = await obtener(db, Periodo, periodo.id, INCLUIR_PERIODO)
    return {"data": periodo_resource(periodo, INCLUIR_PERIODO)}


@router.get(
    "/{anio_id}/periodos/{periodo_id}",
    response_model=Respuesta[PeriodoItem],
    response_model_exclude_unset=True,
    summary="Detalle de periodo",
)
async def obtener_periodo(
    anio_id: int,
    periodo_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_periodos")),
):
    periodo = await _periodo_del_anio(db, anio_id, periodo_id)
    return {"data": periodo_resource(periodo, INCLUIR_PERIODO)}


@router.put(
    "/{anio_id}/periodos/{periodo_id}",
    response_model=Respuesta[PeriodoItem],
    response_model_exclude_unset=True,
    summary="Actualizar periodo",
)
async def actualizar_periodo(
    anio_id: int,
    periodo_id: int,
    body: PeriodoUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("editar_periodos")),
):
    periodo = await _periodo_del_anio(db, anio_id, periodo_id)
    cambios = body.model_dump(exclude_none=True)
    _fechas_en_orden(
        cambios.get("fecha_inicio", periodo.fecha_inicio), cambios.get("fecha_fin", periodo.fecha_fin)
    )
    aplicar_cambios(periodo, cambios)
    await db.flush()
    periodo = await obtener(db, Periodo, periodo_id, INCLUIR_PERIODO)
    return {"data": periodo_resource(periodo, INCLUIR_PERIODO)}


@router.delete(
    "/{anio_id}/periodos/{periodo_id}",
    response_model=MensajeResponse,
    summary="Eliminar periodo",
)
async def eliminar_periodo(
    anio_id: int,
    periodo_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("eliminar_periodos")),
):
    periodo = await _periodo_del_anio(db, anio_id, periodo_id)
    await eliminar(db, periodo)
    return {"message": "Periodo eliminado exitosamente"}
