"""Endpoints de usuarios y de la asignación de sus roles.

Ver, editar y eliminar un usuario exige ``users.<op>.any``, o bien
``users.<op>.own`` cuando el usuario actúa sobre sí mismo.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kampus.api.endpoints.auth import (
    get_current_user,
    obtener_politica,
    require_permission,
    sin_permiso,
)
from kampus.core.database import get_db
from kampus.core.paginacion import (
    ParametrosListado,
    aplicar_busqueda,
    aplicar_orden,
    paginar,
    parametros_listado,
)
from kampus.models import Usuario, user_has_roles
from kampus.resources import Incluir, rol_resource, usuario_resource
from kampus.schemas.usuario import AsignarRolesRequest, UsuarioCreate, UsuarioUpdate
from kampus.services.crud import eliminar, obtener, obtener_o_404
from kampus.services.usuarios_service import actualizar_usuario, buscar_roles, crear_usuario

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

INCLUIR_USUARIO = Incluir.de("roles.permisos", "institucion")
NO_ENCONTRADO = "Usuario no encontrado"

ORDENABLES = {
    "id": Usuario.id,
    "nombre": Usuario.nombre,
    "apellido": Usuario.apellido,
    "email": Usuario.email,
    "username": Usuario.username,
    "estado": Usuario.estado,
    "created_at": Usuario.created_at,
}


def autorizar_sobre_usuario(request: Request, actual: Usuario, operacion: str, objetivo_id: int) -> None:
    """403 salvo que tenga users.<op>.any, o users.<op>.own sobre sí mismo."""
    permisos = [f"users.{operacion}.any"]
    if actual.id == objetivo_id:
        permisos.append(f"users.{operacion}.own")
    if obtener_politica(request).permite_alguno(actual, *permisos):
        return
    logger.info("users.%s denegado a usuario id=%s sobre id=%s", operacion, actual.id, objetivo_id)
    raise sin_permiso(f"users.{operacion}")


@router.get("", summary="Listar usuarios")
async def listar_usuarios(
    request: Request,
    params: ParametrosListado = Depends(parametros_listado),
    institucion_id: int | None = Query(None),
    estado: str | None = Query(None),
    role_id: int | None = Query(None, description="Solo usuarios con este rol"),
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("users.view.any")),
):
    q = select(Usuario).options(*INCLUIR_USUARIO.opciones(Usuario))
    if institucion_id is not None:
        q = q.where(Usuario.institucion_id == institucion_id)
    if estado:
        q = q.where(Usuario.estado == estado)
    if role_id is not None:
        q = q.where(
            Usuario.id.in_(select(user_has_roles.c.user_id).where(user_has_roles.c.role_id == role_id))
        )
    q = aplicar_busqueda(
        q,
        [Usuario.nombre, Usuario.apellido, Usuario.email, Usuario.username, Usuario.numero_documento],
        params.search,
    )
    q = aplicar_orden(q, params, ORDENABLES, [Usuario.apellido, Usuario.nombre, Usuario.id])
    return await paginar(db, request, q, params, lambda u: usuario_resource(u, INCLUIR_USUARIO))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Crear usuario")
async def crear(
    body: UsuarioCreate,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("users.create")),
):
    datos = body.model_dump(exclude={"roles"})
    roles = await buscar_roles(db, body.roles)
    usuario = await crear_usuario(db, datos, roles)
    usuario = await obtener(db, Usuario, usuario.id, INCLUIR_USUARIO)
    return {"data": usuario_resource(usuario, INCLUIR_USUARIO)}


@router.get("/{user_id}", summary="Detalle de usuario")
async def obtener_usuario(
    user_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(get_current_user),
):
    autorizar_sobre_usuario(request, current_user, "view", user_id)
    usuario = await obtener_o_404(db, Usuario, user_id, NO_ENCONTRADO, INCLUIR_USUARIO)
    return {"data": usuario_resource(usuario, INCLUIR_USUARIO)}


@router.put("/{user_id}", summary="Actualizar usuario")
async def actualizar(
    user_id: int,
    body: UsuarioUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(get_current_user),
):
    """Actualiza los datos enviados. Cambiar `roles` exige además asignar_permisos."""
    autorizar_sobre_usuario(request, current_user, "update", user_id)
    if body.roles is not None and not obtener_politica(request).permite(current_user, "asignar_permisos"):
        raise sin_permiso("asignar_permisos")
    usuario = await obtener_o_404(db, Usuario, user_id, NO_ENCONTRADO, Incluir.de("roles.permisos"))
    cambios = body.model_dump(exclude_none=True, exclude={"roles"})
    if body.roles is not None:
        usuario.roles = await buscar_roles(db, body.roles)
    await actualizar_usuario(db, usuario, cambios)
    usuario = await obtener(db, Usuario, user_id, INCLUIR_USUARIO)
    return {"data": usuario_resource(usuario, INCLUIR_USUARIO)}


@router.delete("/{user_id}", summary="Eliminar usuario")
async def eliminar_usuario(
    user_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(get_current_user),
):
    autorizar_sobre_usuario(request, current_user, "delete", user_id)
    usuario = await obtener_o_404(db, Usuario, user_id, NO_ENCONTRADO)
    await eliminar(db, usuario)
    logger.info("Usuario %s eliminado por %s", user_id, current_user.id)
    return {"message": "Usuario eliminado exitosamente"}


# --- Roles del usuario ---


@router.get("/{user_id}/roles", summary="Roles de un usuario")
async def roles_de_usuario(
    user_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(get_current_user),
):
    autorizar_sobre_usuario(request, current_user, "view", user_id)
    usuario = await obtener_o_404(db, Usuario, user_id, NO_ENCONTRADO, Incluir.de("roles.permisos"))
    sub = Incluir.de("permisos")
    return {"data": [rol_resource(r, sub) for r in usuario.roles]}


@router.get("/{user_id}/roles/{role_id}", summary="Rol de un usuario")
async def rol_de_usuario(
    user_id: int,
    role_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(get_current_user),
):
    autorizar_sobre_usuario(request, current_user, "view", user_id)
    usuario = await obtener_o_404(db, Usuario, user_id, NO_ENCONTRADO, Incluir.de("roles.permisos"))
    rol = next((r for r in usuario.roles if r.id == role_id), None)
    if rol is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="El usuario no tiene asignado este rol"
        )
    return {"data": rol_resource(rol, Incluir.de("permisos"))}


@router.post("/{user_id}/roles", summary="Sincronizar roles de un usuario")
async def asignar_roles(
    user_id: int,
    body: AsignarRolesRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Usuario = Depends(require_permission("asignar_permisos")),
):
    """Reemplaza los roles del usuario por los enviados."""
    usuario = await obtener_o_404(db, Usuario, user_id, NO_ENCONTRADO, Incluir.de("roles"))
    usuario.roles = await buscar_roles(db, body.roles)
    await db.flush()
    logger.info("Roles de usuario %s sincronizados por %s: %s", user_id, current_user.id, body.roles)
    usuario = await obtener(db, Usuario, user_id, Incluir.de("roles.permisos"))
    return {
        "message": "Roles asignados exitosamente",
        "roles": [rol_resource(r, Incluir.de("permisos")) for r in usuario.roles],
    }
