"""Alta y edición de usuarios, compartida por los endpoints de usuarios,
docentes y estudiantes (estos dos últimos crean su usuario en la misma
operación)."""
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kampus.core.errores import ErrorValidacion
from kampus.core.security import hash_password
from kampus.models import Institucion, Rol, Usuario
from kampus.services.crud import aplicar_cambios, verificar_referencias, verificar_unico

logger = logging.getLogger(__name__)

CAMPOS_USUARIO = (
    "nombre",
    "apellido",
    "email",
    "username",
    "password",
    "tipo_documento",
    "numero_documento",
    "institucion_id",
    "estado",
)

EMAIL_EN_USO = "El correo electrónico ya está en uso."
USERNAME_EN_USO = "El nombre de usuario ya está en uso."


def separar_datos_usuario(datos: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Divide un body en (datos del usuario, datos propios de la entidad)."""
    usuario = {k: v for k, v in datos.items() if k in CAMPOS_USUARIO}
    resto = {k: v for k, v in datos.items() if k not in CAMPOS_USUARIO}
    return usuario, resto


async def _verificar_unicos(db: AsyncSession, datos: dict[str, Any], excluir_id: int | None = None) -> None:
    errores: dict[str, list[str]] = {}
    for campo, mensaje in (("email", EMAIL_EN_USO), ("username", USERNAME_EN_USO)):
        try:
            await verificar_unico(db, Usuario, campo, datos.get(campo), mensaje, excluir_id=excluir_id)
        except ErrorValidacion as exc:
            errores.update(exc.errores)
    if errores:
        raise ErrorValidacion(errores)


async def buscar_roles(db: AsyncSession, ids: list[int]) -> list[Rol]:
    """Roles por id; 422 si alguno no existe."""
    if not ids:
        return []
    roles = (await db.execute(select(Rol).where(Rol.id.in_(ids)).order_by(Rol.id))).scalars().all()
    if len(roles) != len(set(ids)):
        raise ErrorValidacion.campo("roles", "Uno o más roles seleccionados no existen.")
    return list(roles)


async def buscar_rol_por_nombre(db: AsyncSession, nombre: str) -> Rol | None:
    return (await db.execute(select(Rol).where(Rol.nombre == nombre))).scalar_one_or_none()


async def crear_usuario(db: AsyncSession, datos: dict[str, Any], roles: list[Rol] | None = None) -> Usuario:
    """Valida institución y unicidad, hashea la contraseña y crea el usuario."""
    await verificar_referencias(
        db,
        [("institucion_id", Institucion, datos.get("institucion_id"), "La institución seleccionada no existe.")],
    )
    await _verificar_unicos(db, datos)
    valores = dict(datos)
    valores["password_hash"] = hash_password(valores.pop("password"))
    usuario = Usuario(**valores, roles=list(roles or []))
    db.add(usuario)
    await db.flush()
    logger.info("Usuario creado id=%s", usuario.id)
    return usuario


async def actualizar_usuario(db: AsyncSession, usuario: Usuario, cambios: dict[str, Any]) -> None:
    """Aplica cambios parciales; una contraseña nueva se guarda hasheada."""
    await verificar_referencias(
        db,
        [("institucion_id", Institucion, cambios.get("institucion_id"), "La institución seleccionada no existe.")],
    )
    await _verificar_unicos(db, cambios, excluir_id=usuario.id)
    cambios = dict(cambios)
    if "password" in cambios:
        cambios["password_hash"] = hash_password(cambios.pop("password"))
    aplicar_cambios(usuario, cambios)
    await db.flush()
