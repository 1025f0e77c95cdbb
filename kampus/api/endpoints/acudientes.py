"""Endpoints de acudientes."""
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
from kampus.models import Acudiente, Usuario
from kampus.resources import Incluir, acudiente_resource
from kampus.schemas.personas import AcudienteCreate, AcudienteUpdate
from kampus.services.crud import (
    aplicar_cambios,
    crear,
    eliminar,
    obtener,
    obtener_o_404,
    verificar_referencias,
    verificar_unico,
)

router = APIRouter(prefix="/acudientes", tags=["acudientes"])

INCLUIR_LISTA = Incluir.de("user")
INCLUIR_DETALLE = Incluir.de("user", "estudiantes")
NO_ENCONTRADO = "Acudiente no encontrado"
USUARIO_EN_USO = "El usuario ya está asociado a otro acudiente."
ORDENABLES = {"id": Acudiente.id, "nombre": Acudiente.nombre, "email": Acudiente.email}


async def _verificar_usuario(db: AsyncSession, user_id: int | None, excluir_id: int | None = None) -> None:
    await verificar_referencias(db, [("user_id", Usuario, user_id, "El usuario seleccionado no existe.")])
    await verificar_unico(db, Acudiente, "user_id", user_id, USUARIO_EN_USO, excluir_id=excluir_id)


@router.get("", summary="Listar acudientes")
async def listar_acudientes(
    request: Request,
    params: ParametrosListado = Depends(parametros_listado),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_acudientes")),
):
    """`search` busca en nombre, email y teléfono."""
    q = select(Acudiente).options(*INCLUIR_LISTA.opciones(Acudiente))
    q = aplicar_busqueda(q, [Acudiente.nombre, Acudiente.email, Acudiente.telefono], params.search)
    q = aplicar_orden(q, params, ORDENABLES, [Acudiente.nombre, Acudiente.id])
    return await paginar(db, request, q, params, lambda a: acudiente_resource(a, INCLUIR_LISTA))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Crear acudiente")
async def crear_acudiente(
    body: AcudienteCreate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("crear_acudientes")),
):
    await _verificar_usuario(db, body.user_id)
    acudiente = await crear(db, Acudiente(**body.model_dump()))
    acudiente = await obtener(db, Acudiente, acudiente.id, INCLUIR_DETALLE)
    return {"data": acudiente_resource(acudiente, INCLUIR_DETALLE)}


@router.get("/{acudiente_id}", summary="Detalle de acudiente")
async def obtener_acudiente(
    acudiente_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_acudientes")),
):
    """Acudiente con su usuario y los estudiantes a su cargo."""
    acudiente = await obtener_o_404(db, Acudiente, acudiente_id, NO_ENCONTRADO, INCLUIR_DETALLE)
    return {"data": acudiente_resource(acudiente, INCLUIR_DETALLE)}


@router.put("/{acudiente_id}", summary="Actualizar acudiente")
async def actualizar_acudiente(
    acudiente_id: int,
    body: AcudienteUpdate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("editar_acudientes")),
):
    acudiente = await obtener_o_404(db, Acudiente, acudiente_id, NO_ENCONTRADO)
    cambios = body.model_dump(exclude_none=True)
    await _verificar_usuario(db, cambios.get("user_id"), excluir_id=acudiente_id)
    aplicar_cambios(acudiente, cambios)
    await db.flush()
    acudiente = await obtener(db, Acudiente, acudiente_id, INCLUIR_DETALLE)
    return {"data": acudiente_resource(acudiente, INCLUIR_DETALLE)}


@router.delete("/{acudiente_id}", summary="Eliminar acudiente")
async def eliminar_acudiente(
    acudiente_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("eliminar_acudientes")),
):
    """Elimina el acudiente y sus vínculos con estudiantes."""
    acudiente = await obtener_o_404(db, Acudiente, acudiente_id, NO_ENCONTRADO)
    await eliminar(db, acudiente)
    return {"message": "Acudiente eliminado exitosamente"}
