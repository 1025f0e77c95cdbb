"""Endpoints de asignaciones de horario.

Crear o editar una asignación que choca con otra activa del mismo docente o
grupo (misma franja, día y año) responde 422 con ``conflicto: true``.
``POST`` acepta el header ``Idempotency-Key``: repetir la clave devuelve la
respuesta guardada en lugar de crear otra asignación.
"""
import logging

from fastapi import APIRouter, Depends, Header, Query, Request, status
from fastapi.responses import JSONResponse
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
from kampus.models import Asignacion, Asignatura, Docente, Grupo, Usuario
from kampus.resources import INCLUIR_ASIGNACION, asignacion_resource
from kampus.schemas.asignacion import (
    AsignacionCreate,
    AsignacionItem,
    AsignacionUpdate,
    ConflictosResponse,
    asignacion_json,
)
from kampus.schemas.comun import Lista, MensajeResponse, Paginado, Respuesta
from kampus.services import asignacion_service
from kampus.services.crud import eliminar, obtener_o_404
from kampus.services.idempotencia import guardar_respuesta, respuesta_guardada

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/asignaciones", tags=["asignaciones"])

NO_ENCONTRADA = "Asignación no encontrada"
CAMPOS_OPCIONALES = ("periodo_id",)

ORDENABLES = {
    "id": Asignacion.id,
    "dia_semana": asignacion_service.ORDEN_DIA,
    "estado": Asignacion.estado,
    "asignatura.nombre": Asignatura.nombre,
    "created_at": Asignacion.created_at,
}


@router.get(
    "/conflictos",
    response_model=ConflictosResponse,
    response_model_exclude_unset=True,
    summary="Asignaciones activas en conflicto",
)
async def conflictos(
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_asignaciones")),
):
    """Auditoría: asignaciones activas que comparten horario con otra activa."""
    return await asignacion_service.detectar_conflictos(db)


@router.get(
    "/grupo/{grupo_id}",
    response_model=Lista[AsignacionItem],
    response_model_exclude_unset=True,
    summary="Horario de un grupo",
)
async def horario_grupo(
    grupo_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_asignaciones")),
):
    """Asignaciones activas del grupo ordenadas por día y franja."""
    await obtener_o_404(db, Grupo, grupo_id, "Grupo no encontrado")
    filas = await asignacion_service.horario(db, Asignacion.grupo_id, grupo_id)
    return {"data": [asignacion_resource(a, INCLUIR_ASIGNACION) for a in filas]}


@router.get(
    "/docente/{docente_id}",
    response_model=Lista[AsignacionItem],
    response_model_exclude_unset=True,
    summary="Horario de un docente",
)
async def horario_docente(
    docente_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_asignaciones")),
):
    """Asignaciones activas del docente ordenadas por día y franja."""
    await obtener_o_404(db, Docente, docente_id, "Docente no encontrado")
    filas = await asignacion_service.horario(db, Asignacion.docente_id, docente_id)
    return {"data": [asignacion_resource(a, INCLUIR_ASIGNACION) for a in filas]}


@router.get(
    "",
    response_model=Paginado[AsignacionItem],
    response_model_exclude_unset=True,
    summary="Listar asignaciones",
)
async def listar_asignaciones(
    request: Request,
    params: ParametrosListado = Depends(parametros_listado),
    docente_id: int | None = Query(None),
    asignatura_id: int | None = Query(None),
    grupo_id: int | None = Query(None),
    anio_academico_id: int | None = Query(None),
    periodo_id: int | None = Query(None),
    estado: str | None = Query(None),
    dia_semana: str | None = Query(None),
    institucion_id: int | None = Query(None, description="Institución de la sede del grupo"),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_asignaciones")),
):
    """Listado paginado con cualquier combinación de filtros; `search` busca por asignatura."""
    q = asignacion_service.consulta_asignaciones(
        {
            "docente_id": docente_id,
            "asignatura_id": asignatura_id,
            "grupo_id": grupo_id,
            "anio_academico_id": anio_academico_id,
            "periodo_id": periodo_id,
            "estado": estado,
            "dia_semana": dia_semana,
            "institucion_id": institucion_id,
        }
    )
    q = q.join(Asignatura, Asignatura.id == Asignacion.asignatura_id)
    q = aplicar_busqueda(q, [Asignatura.nombre], params.search)
    q = aplicar_orden(q, params, ORDENABLES, [Asignacion.id])
    return await paginar(db, request, q, params, lambda a: asignacion_resource(a, INCLUIR_ASIGNACION))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Respuesta[AsignacionItem],
    response_model_exclude_unset=True,
    summary="Crear asignación",
    responses={422: {"description": "Datos inválidos o conflicto de horario (conflicto: true)"}},
)
async def crear_asignacion(
    body: AsignacionCreate,
    idempotency_key: str | None = Header(None, alias="Idempotency-Key"),
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(require_permission("crear_asignaciones")),
):
    if idempotency_key:
        guardada = await respuesta_guardada(db, current_user.id, idempotency_key)
        if guardada is not None:
            logger.info("Idempotency-Key repetida (%s); se devuelve la respuesta guardada", idempotency_key)
            return JSONResponse(status_code=guardada.status_code, content=guardada.respuesta)

    asignacion = await asignacion_service.crear_asignacion(db, body.model_dump())
    asignacion = await asignacion_service.recargar(db, asignacion.id)
    respuesta = {"data": asignacion_json(asignacion_resource(asignacion, INCLUIR_ASIGNACION))}
    if idempotency_key:
        await guardar_respuesta(db, current_user.id, idempotency_key, status.HTTP_201_CREATED, respuesta)
    return respuesta


@router.get(
    "/{asignacion_id}",
    response_model=Respuesta[AsignacionItem],
    response_model_exclude_unset=True,
    summary="Detalle de asignación",
)
async def obtener_asignacion(
    asignacion_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_asignaciones")),
):
    asignacion = await obtener_o_404(db, Asignacion, asignacion_id, NO_ENCONTRADA, INCLUIR_ASIGNACION)
    return {"data": asignacion_resource(asignacion, INCLUIR_ASIGNACION)}


@router.put(
    "/{asignacion_id}",
    response_model=Respuesta[AsignacionItem],
    response_model_exclude_unset=True,
    summary="Actualizar asignación",
    responses={422: {"description": "Datos inválidos o conflicto de horario (conflicto: true)"}},
)
async def actualizar_asignacion(
    asignacion_id: int,
    body: AsignacionUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("editar_asignaciones")),
):
    """Los campos no enviados se conservan; `periodo_id: null` quita el periodo."""
    asignacion = await obtener_o_404(db, Asignacion, asignacion_id, NO_ENCONTRADA)
    cambios = body.model_dump(exclude_unset=True)
    nulos = {
        campo: [f"El campo {campo} no puede ser nulo."]
        for campo, valor in cambios.items()
        if valor is None and campo not in CAMPOS_OPCIONALES
    }
    if nulos:
        raise ErrorValidacion(nulos)
    await asignacion_service.actualizar_asignacion(db, asignacion, cambios)
    asignacion = await asignacion_service.recargar(db, asignacion_id)
    return {"data": asignacion_resource(asignacion, INCLUIR_ASIGNACION)}


@router.delete("/{asignacion_id}", response_model=MensajeResponse, summary="Eliminar asignación")
async def eliminar_asignacion(
    asignacion_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("eliminar_asignaciones")),
):
    asignacion = await obtener_o_404(db, Asignacion, asignacion_id, NO_ENCONTRADA)
    await eliminar(db, asignacion)
    logger.info("Asignación %s eliminada", asignacion_id)
    return {"message": "Asignación eliminada exitosamente"}
