"""Endpoints de grupos y de la matrícula de estudiantes en ellos."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
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
from kampus.models import Anio, Docente, Estudiante, Grado, Grupo, Sede, Usuario
from kampus.resources import Incluir, grupo_resource
from kampus.schemas.academico import GrupoCreate, GrupoUpdate, TrasladarEstudianteRequest
from kampus.services.crud import (
    aplicar_cambios,
    crear,
    eliminar,
    obtener,
    obtener_o_404,
    verificar_referencias,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/grupos", tags=["grupos"])

INCLUIR_LISTA = Incluir.de("grado", "sede", "anio", "director_docente.user", "estudiantes")
INCLUIR_DETALLE = Incluir.de(
    "grado.institucion", "sede", "anio", "director_docente.user", "estudiantes.user"
)
NO_ENCONTRADO = "Grupo no encontrado"
NO_MATRICULADO = "El estudiante no está matriculado en este grupo"

ORDENABLES = {
    "id": Grupo.id,
    "nombre": Grupo.nombre,
    "capacidad": Grupo.capacidad,
    "estado": Grupo.estado,
    "grado.nombre": Grado.nombre,
    "sede.nombre": Sede.nombre,
    "anio.nombre": Anio.nombre,
}


def _referencias(datos: dict):
    return [
        ("sede_id", Sede, datos.get("sede_id"), "La sede seleccionada no existe."),
        ("anio_id", Anio, datos.get("anio_id"), "El año académico seleccionado no existe."),
        ("grado_id", Grado, datos.get("grado_id"), "El grado seleccionado no existe."),
        (
            "director_docente_id",
            Docente,
            datos.get("director_docente_id"),
            "El docente seleccionado no existe.",
        ),
    ]


@router.get("", summary="Listar grupos")
async def listar_grupos(
    request: Request,
    params: ParametrosListado = Depends(parametros_listado),
    grado_id: int | None = Query(None),
    anio_id: int | None = Query(None),
    sede_id: int | None = Query(None),
    institucion_id: int | None = Query(None, description="Filtrar por institución de la sede"),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_grupos")),
):
    """Listado paginado; se puede ordenar por grado.nombre, sede.nombre o anio.nombre."""
    q = (
        select(Grupo)
        .join(Grado, Grado.id == Grupo.grado_id)
        .join(Sede, Sede.id == Grupo.sede_id)
        .join(Anio, Anio.id == Grupo.anio_id)
        .options(*INCLUIR_LISTA.opciones(Grupo))
    )
    for columna, valor in (
        (Grupo.grado_id, grado_id),
        (Grupo.anio_id, anio_id),
        (Grupo.sede_id, sede_id),
        (Sede.institucion_id, institucion_id),
    ):
        if valor is not None:
            q = q.where(columna == valor)
    q = aplicar_busqueda(q, [Grupo.nombre], params.search)
    q = aplicar_orden(q, params, ORDENABLES, [Grupo.nombre, Grupo.id])
    return await paginar(db, request, q, params, lambda g: grupo_resource(g, INCLUIR_LISTA))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Crear grupo")
async def crear_grupo(
    body: GrupoCreate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("crear_grupos")),
):
    datos = body.model_dump()
    await verificar_referencias(db, _referencias(datos))
    grupo = await crear(db, Grupo(**datos))
    grupo = await obtener(db, Grupo, grupo.id, INCLUIR_DETALLE)
    return {"data": grupo_resource(grupo, INCLUIR_DETALLE)}


@router.get("/{grupo_id}", summary="Detalle de grupo")
async def obtener_grupo(
    grupo_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_grupos")),
):
    """Grupo con grado, sede, año, director y estudiantes matriculados."""
    grupo = await obtener_o_404(db, Grupo, grupo_id, NO_ENCONTRADO, INCLUIR_DETALLE)
    return {"data": grupo_resource(grupo, INCLUIR_DETALLE)}


@router.put("/{grupo_id}", summary="Actualizar grupo")
async def actualizar_grupo(
    grupo_id: int,
    body: GrupoUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("editar_grupos")),
):
    grupo = await obtener_o_404(db, Grupo, grupo_id, NO_ENCONTRADO)
    cambios = body.model_dump(exclude_none=True)
    await verificar_referencias(db, _referencias(cambios))
    aplicar_cambios(grupo, cambios)
    await db.flush()
    grupo = await obtener(db, Grupo, grupo_id, INCLUIR_DETALLE)
    return {"data": grupo_resource(grupo, INCLUIR_DETALLE)}


@router.delete("/{grupo_id}", summary="Eliminar grupo")
async def eliminar_grupo(
    grupo_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("eliminar_grupos")),
):
    """Elimina el grupo; sus estudiantes quedan sin grupo."""
    grupo = await obtener_o_404(db, Grupo, grupo_id, NO_ENCONTRADO)
    await eliminar(db, grupo)
    return {"message": "Grupo eliminado exitosamente"}


async def _estudiante_del_grupo(db: AsyncSession, grupo_id: int, estudiante_id: int) -> Estudiante:
    result = await db.execute(
        select(Estudiante).where(Estudiante.id == estudiante_id, Estudiante.grupo_id == grupo_id)
    )
    estudiante = result.scalar_one_or_none()
    if estudiante is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NO_MATRICULADO)
    return estudiante


@router.delete("/{grupo_id}/estudiantes/{estudiante_id}", summary="Desvincular estudiante")
async def desvincular_estudiante(
    grupo_id: int,
    estudiante_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("matricular_estudiantes")),
):
    await obtener_o_404(db, Grupo, grupo_id, NO_ENCONTRADO)
    estudiante = await _estudiante_del_grupo(db, grupo_id, estudiante_id)
    estudiante.grupo_id = None
    await db.flush()
    logger.info("Estudiante %s desvinculado del grupo %s", estudiante_id, grupo_id)
    return {"message": "Estudiante desvinculado exitosamente del grupo"}


@router.put("/{grupo_id}/estudiantes/{estudiante_id}/trasladar", summary="Trasladar estudiante")
async def trasladar_estudiante(
    grupo_id: int,
    estudiante_id: int,
    body: TrasladarEstudianteRequest,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("matricular_estudiantes")),
):
    """Mueve al estudiante a ``grupo_destino_id``.

    404 si el estudiante no está en el grupo o el destino no existe;
    422 si el destino es el mismo grupo de origen.
    """
    await obtener_o_404(db, Grupo, grupo_id, NO_ENCONTRADO)
    estudiante = await _estudiante_del_grupo(db, grupo_id, estudiante_id)
    destino = await obtener_o_404(db, Grupo, body.grupo_destino_id, "El grupo destino no existe")
    if destino.id == grupo_id:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="El grupo destino no puede ser el mismo grupo de origen",
        )
    estudiante.grupo_id = destino.id
    await db.flush()
    logger.info("Estudiante %s trasladado del grupo %s al %s", estudiante_id, grupo_id, destino.id)
    return {
        "message": "Estudiante trasladado exitosamente",
        "estudiante_id": estudiante.id,
        "grupo_origen_id": grupo_id,
        "grupo_destino_id": destino.id,
    }
