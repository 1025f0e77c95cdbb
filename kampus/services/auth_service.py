"""Servicio de autenticación: login, emisión y revocación de tokens, y el
administrador por defecto del modo desarrollo."""
import logging
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from kampus.core.config import settings
from kampus.core.security import create_access_token, hash_password, verify_password
from kampus.models import EstadoUsuario, Institucion, TokenAcceso, Usuario
from kampus.resources import Incluir
from kampus.services.crud import obtener
from kampus.services.permisos import sembrar_permisos_y_roles

logger = logging.getLogger(__name__)

# Relaciones necesarias para autorizar (roles.permisos) y para /me.
INCLUIR_SESION = Incluir.de("roles.permisos", "institucion")


async def cargar_usuario_sesion(db: AsyncSession, user_id: int) -> Usuario | None:
    return await obtener(db, Usuario, user_id, INCLUIR_SESION)


async def autenticar(db: AsyncSession, email: str, password: str) -> Usuario | None:
    """Usuario activo cuyo email y contraseña coinciden, o None."""
    q = select(Usuario).where(func.lower(Usuario.email) == email.lower())
    usuario = (await db.execute(q)).scalar_one_or_none()
    if usuario is None or not verify_password(password, usuario.password_hash):
        return None
    if usuario.estado != EstadoUsuario.ACTIVO:
        logger.info("Login rechazado para usuario inactivo id=%s", usuario.id)
        return None
    return usuario


async def emitir_token(
    db: AsyncSession,
    usuario: Usuario,
    revocar_anteriores: bool = False,
) -> tuple[str, datetime]:
    """Genera un JWT, registra su jti y devuelve (token, expira_en)."""
    if revocar_anteriores:
        await db.execute(delete(TokenAcceso).where(TokenAcceso.user_id == usuario.id))
    token, jti, expira = create_access_token(usuario.id, extra={"email": usuario.email})
    db.add(TokenAcceso(user_id=usuario.id, jti=jti, expira_en=expira))
    await db.flush()
    return token, expira


async def token_registrado(db: AsyncSession, jti: str) -> bool:
    q = select(func.count()).select_from(TokenAcceso).where(TokenAcceso.jti == jti)
    return (await db.execute(q)).scalar_one() > 0


async def revocar_token(db: AsyncSession, jti: str) -> None:
    await db.execute(delete(TokenAcceso).where(TokenAcceso.jti == jti))
    await db.flush()


async def renovar_token(db: AsyncSession, usuario: Usuario, jti_actual: str) -> tuple[str, datetime]:
    """Revoca el token actual y emite uno nuevo para el mismo usuario."""
    await revocar_token(db, jti_actual)
    token, expira = await emitir_token(db, usuario)
    logger.info("Token renovado para usuario id=%s", usuario.id)
    return token, expira


async def usuario_desarrollo(db: AsyncSession) -> Usuario:
    """Administrador por defecto del modo desarrollo; lo crea si no existe.

    Si no hay ninguna institución crea una de desarrollo para poder asociarlo.
    """
    q = select(Usuario.id).where(Usuario.email == settings.admin_dev_email)
    user_id = (await db.execute(q)).scalar_one_or_none()
    if user_id is None:
        institucion = (
            await db.execute(select(Institucion).order_by(Institucion.id).limit(1))
        ).scalar_one_or_none()
        if institucion is None:
            institucion = Institucion(nombre="Institución de desarrollo", siglas="DEV")
            db.add(institucion)
            await db.flush()
        admin = await sembrar_permisos_y_roles(db)
        usuario = Usuario(
            nombre="Administrador",
            apellido="Desarrollo",
            username="admin",
            email=settings.admin_dev_email,
            password_hash=hash_password(settings.admin_dev_password),
            institucion_id=institucion.id,
            estado=EstadoUsuario.ACTIVO,
            roles=[admin],
        )
        db.add(usuario)
        await db.flush()
        user_id = usuario.id
        logger.warning("Usuario administrador de desarrollo creado: %s", settings.admin_dev_email)
    return await cargar_usuario_sesion(db, user_id)
