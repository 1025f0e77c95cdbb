"""Endpoints de estudiantes. El estudiante se crea junto con su usuario y
puede vincularse a uno o más acudientes."""
import logging

from fastapi import APIRouter, Depends, Query, Request, status
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
from kampus.models import Acudiente, Estudiante, EstudianteAcudiente, Grupo, Usuario
from kampus.resources import Incluir, estudiante_resource
from kampus.schemas.personas import EstudianteCreate, EstudianteUpdate
from kampus.services.crud import (
    aplicar_cambios,
    crear,
    eliminar,
    obtener,
    obtener_o_404,
    verificar_referencias,
    verificar_unico,
)
from kampus.services.usuarios_service import (
    actualizar_usuario,
    buscar_rol_por_nombre,
    crear_usuario,
    separar_datos_usuario,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/estudiantes", tags=["estudiantes"])

INCLUIR_LISTA = Incluir.de("user", "grupo.grado")
INCLUIR_DETALLE = Incluir.de("user", "grupo.grado", "institucion", "acudientes")
NO_ENCONTRADO = "Estudiante no encontrado"
CODIGO_EN_USO = "El código estudiantil ya está en uso."
ROL_ESTUDIANTE = "Estudiante"

ORDENABLES = {
    "id": Estudiante.id,
    "codigo_estudiantil": Estudiante.codigo_estudiantil,
    "nombre": Usuario.nombre,
    "apellido": Usuario.apellido,
    "fecha_nacimiento": Estudiante.fecha_nacimiento,
    "estado": Estudiante.estado,
}


async def _vinculos(db: AsyncSession, vinculos: list[dict]) -> list[EstudianteAcudiente]:
    """Valida que los acudientes existan y arma las filas de asociación."""
    ids = [v["acudiente_id"] for v in vinculos]
    if len(ids) != len(set(ids)):
        raise ErrorValidacion.campo("acudientes", "Un acudiente no puede vincularse dos veces.")
    await verificar_referencias(
        db,
        [("acudientes", Acudiente, i, f"El acudiente {i} no existe.") for i in ids],
    )
    return [EstudianteAcudiente(acudiente_id=v["acudiente_id"], parentesco=v.get("parentesco")) for v in vinculos]


@router.get("", summary="Listar estudiantes")
async def listar_estudiantes(
    request: Request,
    params: ParametrosListado = Depends(parametros_listado),
    grupo_id: int | None = Query(None),
    institucion_id: int | None = Query(None),
    estado: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_estudiantes")),
):
    """`search` busca en código, nombre, apellido y documento del usuario."""
    q = (
        select(Estudiante)
        .outerjoin(Usuario, Usuario.id == Estudiante.user_id)
        .options(*INCLUIR_LISTA.opciones(Estudiante))
    )
    for columna, valor in (
        (Estudiante.grupo_id, grupo_id),
        (Estudiante.institucion_id, institucion_id),
        (Estudiante.estado, estado),
    ):
        if valor is not None:
            q = q.where(columna == valor)
    q = aplicar_busqueda(
        q,
        [Estudiante.codigo_estudiantil, Usuario.nombre, Usuario.apellido, Usuario.numero_documento],
        params.search,
    )
    q = aplicar_orden(q, params, ORDENABLES, [Usuario.apellido, Usuario.nombre, Estudiante.id])
    return await paginar(db, request, q, params, lambda e: estudiante_resource(e, INCLUIR_LISTA))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Crear estudiante")
async def crear_estudiante(
    body: EstudianteCreate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("crear_estudiantes")),
):
    """Crea el usuario (con rol Estudiante si existe), el estudiante y sus vínculos con acudientes."""
    datos = body.model_dump()
    vinculos = datos.pop("acudientes")
    datos_usuario, datos_estudiante = separar_datos_usuario(datos)

    await verificar_referencias(
        db, [("grupo_id", Grupo, datos_estudiante.get("grupo_id"), "El grupo seleccionado no existe.")]
    )
    await verificar_unico(
        db, Estudiante, "codigo_estudiantil", datos_estudiante["codigo_estudiantil"], CODIGO_EN_USO
    )
    filas = await _vinculos(db, vinculos)

    rol = await buscar_rol_por_nombre(db, ROL_ESTUDIANTE)
    usuario = await crear_usuario(db, datos_usuario, [rol] if rol else [])
    estudiante = await crear(
        db,
        Estudiante(
            user_id=usuario.id,
            institucion_id=usuario.institucion_id,
            estado=usuario.estado,
            vinculos_acudiente=filas,
            **datos_estudiante,
        ),
    )
    estudiante = await obtener(db, Estudiante, estudiante.id, INCLUIR_DETALLE)
    return {"data": estudiante_resource(estudiante, INCLUIR_DETALLE)}


@router.get("/{estudiante_id}", summary="Detalle de estudiante")
async def obtener_estudiante(
    estudiante_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_estudiantes")),
):
    estudiante = await obtener_o_404(db, Estudiante, estudiante_id, NO_ENCONTRADO, INCLUIR_DETALLE)
    return {"data": estudiante_resource(estudiante, INCLUIR_DETALLE)}


@router.put("/{estudiante_id}", summary="Actualizar estudiante")
async def actualizar_estudiante(
    estudiante_id: int,
    body: EstudianteUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("editar_estudiantes")),
):
    """Actualiza estudiante y usuario; si se envía `acudientes` reemplaza los vínculos."""
    estudiante = await obtener_o_404(
        db, Estudiante, estudiante_id, NO_ENCONTRADO, Incluir.de("user", "vinculos_acudiente")
    )
    cambios = body.model_dump(exclude_none=True)
    vinculos = cambios.pop("acudientes", None)
    datos_usuario, datos_estudiante = separar_datos_usuario(cambios)

    await verificar_referencias(
        db, [("grupo_id", Grupo, datos_estudiante.get("grupo_id"), "El grupo seleccionado no existe.")]
    )
    if "codigo_estudiantil" in datos_estudiante:
        await verificar_unico(
            db,
            Estudiante,
            "codigo_estudiantil",
            datos_estudiante["codigo_estudiantil"],
            CODIGO_EN_USO,
            excluir_id=estudiante_id,
        )
    if vinculos is not None:
        actuales = {v.acudiente_id: v for v in estudiante.vinculos_acudiente}
        nuevos = []
        for fila in await _vinculos(db, vinculos):
            existente = actuales.get(fila.acudiente_id)
            if existente is not None:
                existente.parentesco = fila.parentesco
                fila = existente
            nuevos.append(fila)
        estudiante.vinculos_acudiente = nuevos

    if datos_usuario and estudiante.user is not None:
        await actualizar_usuario(db, estudiante.user, datos_usuario)
    for campo in ("institucion_id", "estado"):
        if campo in datos_usuario:
            datos_estudiante[campo] = datos_usuario[campo]
    aplicar_cambios(estudiante, datos_estudiante)
    await db.flush()
    estudiante = await obtener(db, Estudiante, estudiante_id, INCLUIR_DETALLE)
    return {"data": estudiante_resource(estudiante, INCLUIR_DETALLE)}


@router.delete("/{estudiante_id}", summary="Eliminar estudiante")
async def eliminar_estudiante(
    estudiante_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("eliminar_estudiantes")),
):
    """Elimina el estudiante, sus vínculos con acudientes y su usuario."""
    estudiante = await obtener_o_404(
        db, Estudiante, estudiante_id, NO_ENCONTRADO, Incluir.de("user", "vinculos_acudiente")
    )
    usuario = estudiante.user
    await eliminar(db, estudiante)
    if usuario is not None:
        await eliminar(db, usuario)
    logger.info("Estudiante %s eliminado", estudiante_id)
    return {"message": "Estudiante eliminado exitosamente"}
