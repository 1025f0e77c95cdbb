"""Endpoints de docentes. Cada docente se crea, edita y elimina junto con su usuario."""
import logging

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import or_, select
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
from kampus.models import Docente, Grupo, Usuario
from kampus.resources import Incluir, docente_resource
from kampus.schemas.personas import DocenteCreate, DocenteUpdate
from kampus.services.crud import aplicar_cambios, crear, eliminar, obtener, obtener_o_404
from kampus.services.usuarios_service import (
    actualizar_usuario,
    buscar_rol_por_nombre,
    crear_usuario,
    separar_datos_usuario,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/docentes", tags=["docentes"])

INCLUIR_DOCENTE = Incluir.de("user.institucion")
NO_ENCONTRADO = "Docente no encontrado"
ROL_DOCENTE = "Docente"

ORDENABLES = {
    "id": Docente.id,
    "nombre": Usuario.nombre,
    "apellido": Usuario.apellido,
    "email": Usuario.email,
    "especialidad": Docente.especialidad,
    "fecha_contratacion": Docente.fecha_contratacion,
}


def _consulta(institucion_id: int | None):
    q = (
        select(Docente)
        .join(Usuario, Usuario.id == Docente.user_id)
        .options(*INCLUIR_DOCENTE.opciones(Docente))
    )
    if institucion_id is not None:
        q = q.where(Usuario.institucion_id == institucion_id)
    return q


def _sin_grupo_dirigido():
    return ~select(Grupo.id).where(Grupo.director_docente_id == Docente.id).exists()


@router.get("/disponibles-grupo", summary="Docentes disponibles para dirigir un grupo")
async def disponibles_grupo(
    institucion_id: int | None = Query(None),
    grupo_id: int | None = Query(None, description="Grupo en edición; su director actual se incluye"),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_docentes")),
):
    """Docentes que no dirigen ningún grupo (sin paginar)."""
    condicion = _sin_grupo_dirigido()
    if grupo_id is not None:
        director_actual = select(Grupo.director_docente_id).where(Grupo.id == grupo_id).scalar_subquery()
        condicion = or_(condicion, Docente.id == director_actual)
    q = _consulta(institucion_id).where(condicion).order_by(Usuario.apellido, Usuario.nombre)
    docentes = (await db.execute(q)).scalars().all()
    return {"data": [docente_resource(d, INCLUIR_DOCENTE) for d in docentes]}


@router.get("", summary="Listar docentes")
async def listar_docentes(
    request: Request,
    params: ParametrosListado = Depends(parametros_listado),
    institucion_id: int | None = Query(None),
    disponibles_grupo: bool = Query(False, description="Solo docentes que no dirigen grupo"),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_docentes")),
):
    """`search` busca en nombre, apellido y email del usuario y en la especialidad."""
    q = _consulta(institucion_id)
    if disponibles_grupo:
        q = q.where(_sin_grupo_dirigido())
    q = aplicar_busqueda(
        q, [Usuario.nombre, Usuario.apellido, Usuario.email, Docente.especialidad], params.search
    )
    q = aplicar_orden(q, params, ORDENABLES, [Usuario.apellido, Usuario.nombre, Docente.id])
    return await paginar(db, request, q, params, lambda d: docente_resource(d, INCLUIR_DOCENTE))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Crear docente")
async def crear_docente(
    body: DocenteCreate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("crear_docentes")),
):
    """Crea el usuario (con rol Docente si existe) y el docente asociado."""
    datos_usuario, datos_docente = separar_datos_usuario(body.model_dump())
    rol = await buscar_rol_por_nombre(db, ROL_DOCENTE)
    usuario = await crear_usuario(db, datos_usuario, [rol] if rol else [])
    docente = await crear(db, Docente(user_id=usuario.id, **datos_docente))
    docente = await obtener(db, Docente, docente.id, INCLUIR_DOCENTE)
    return {"data": docente_resource(docente, INCLUIR_DOCENTE)}


@router.get("/{docente_id}", summary="Detalle de docente")
async def obtener_docente(
    docente_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_docentes")),
):
    docente = await obtener_o_404(db, Docente, docente_id, NO_ENCONTRADO, INCLUIR_DOCENTE)
    return {"data": docente_resource(docente, INCLUIR_DOCENTE)}


@router.put("/{docente_id}", summary="Actualizar docente")
async def actualizar_docente(
    docente_id: int,
    body: DocenteUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("editar_docentes")),
):
    docente = await obtener_o_404(db, Docente, docente_id, NO_ENCONTRADO, Incluir.de("user"))
    datos_usuario, datos_docente = separar_datos_usuario(body.model_dump(exclude_none=True))
    if datos_usuario:
        await actualizar_usuario(db, docente.user, datos_usuario)
    aplicar_cambios(docente, datos_docente)
    await db.flush()
    docente = await obtener(db, Docente, docente_id, INCLUIR_DOCENTE)
    return {"data": docente_resource(docente, INCLUIR_DOCENTE)}


@router.delete("/{docente_id}", summary="Eliminar docente")
async def eliminar_docente(
    docente_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("eliminar_docentes")),
):
    """Elimina el docente y su usuario."""
    docente = await obtener_o_404(db, Docente, docente_id, NO_ENCONTRADO, Incluir.de("user"))
    usuario = docente.user
    await eliminar(db, docente)
    await eliminar(db, usuario)
    logger.info("Docente %s y usuario %s eliminados", docente_id, usuario.id)
    return {"message": "Docente eliminado exitosamente"}
