"""Endpoints de autenticación y dependencias para proteger rutas.

- ``get_current_user``: exige un JWT válido y no revocado. Si al token le queda
  menos de TOKEN_REFRESH_MINUTES se emite uno nuevo y se devuelve en el header
  ``X-New-Token``.
- ``require_permission(nombre)``: además exige el permiso según la política
  de autorización activa (``app.state.politica_autorizacion``).
"""
import logging
from datetime import datetime, timezone
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from kampus.core.autorizacion import PoliticaAutorizacion, PoliticaPermisos
from kampus.core.config import settings
from kampus.core.database import get_db
from kampus.core.errores import ErrorValidacion
from kampus.core.security import decode_access_token, minutos_para_expirar
from kampus.models import EstadoUsuario, Usuario
from kampus.resources import usuario_resource
from kampus.schemas.auth import (
    LoginRequest,
    LoginResponse,
    TokenPayload,
    UsuarioActualResponse,
    VerificarTokenResponse,
)
from kampus.schemas.comun import MensajeResponse
from kampus.services.auth_service import (
    INCLUIR_SESION,
    autenticar,
    cargar_usuario_sesion,
    emitir_token,
    renovar_token,
    revocar_token,
    token_registrado,
    usuario_desarrollo,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])
security = HTTPBearer(auto_error=False)

NO_AUTENTICADO = "Usuario no autenticado"
CREDENCIALES_INCORRECTAS = "Las credenciales proporcionadas son incorrectas."


def obtener_politica(request: Request) -> PoliticaAutorizacion:
    return getattr(request.app.state, "politica_autorizacion", None) or PoliticaPermisos()


def _no_autenticado() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=NO_AUTENTICADO,
        headers={"WWW-Authenticate": "Bearer"},
    )


def leer_token(token: str) -> TokenPayload | None:
    """Decodifica el JWT y valida sus claims; None si falta alguno o no es válido."""
    payload = decode_access_token(token)
    if payload is None:
        return None
    try:
        return TokenPayload.model_validate(payload)
    except ValidationError:
        logger.info("JWT con claims inválidos rechazado")
        return None


def sin_permiso(permiso: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=f"No tienes permisos para {permiso}",
    )


async def get_current_user(
    request: Request,
    response: Response,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Usuario:
    """Dependencia: exige un JWT válido y devuelve el usuario actual con roles y permisos."""
    politica = obtener_politica(request)
    payload = leer_token(credentials.credentials) if credentials else None
    if payload is None:
        if politica.modo_desarrollo:
            return await usuario_desarrollo(db)
        raise _no_autenticado()

    if not await token_registrado(db, payload.jti):
        raise _no_autenticado()
    usuario = await cargar_usuario_sesion(db, payload.sub)
    if usuario is None or usuario.estado != EstadoUsuario.ACTIVO:
        raise _no_autenticado()

    request.state.token_payload = payload
    if minutos_para_expirar(payload.exp) < settings.token_refresh_minutes:
        nuevo, _ = await renovar_token(db, usuario, payload.jti)
        # La renovación persiste aunque la petición termine en error.
        await db.commit()
        response.headers["X-New-Token"] = nuevo
        request.state.nuevo_token = nuevo
    return usuario


def require_permission(permiso: str) -> Callable:
    """Dependencia que exige que el usuario actual tenga el permiso indicado."""

    async def _check(
        request: Request,
        current_user: Usuario = Depends(get_current_user),
    ) -> Usuario:
        if not obtener_politica(request).permite(current_user, permiso):
            logger.info("Permiso %s denegado a usuario id=%s", permiso, current_user.id)
            raise sin_permiso(permiso)
        return current_user

    return _check


@router.post(
    "/login",
    response_model=LoginResponse,
    response_model_exclude_unset=True,
    summary="Iniciar sesión",
    response_description="Token JWT y datos del usuario",
    responses={
        200: {"description": "Login correcto: {token, user}"},
        422: {"description": "Credenciales incorrectas o datos inválidos"},
    },
)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    """
    Autenticación con **email** y **contraseña**. Revoca los tokens anteriores
    del usuario y devuelve uno nuevo para el header `Authorization: Bearer <token>`.
    """
    usuario = await autenticar(db, data.email, data.password)
    if usuario is None:
        raise ErrorValidacion.campo("email", CREDENCIALES_INCORRECTAS)
    token, _ = await emitir_token(db, usuario, revocar_anteriores=True)
    usuario = await cargar_usuario_sesion(db, usuario.id)
    logger.info("Login correcto usuario id=%s", usuario.id)
    return {"token": token, "user": usuario_resource(usuario, INCLUIR_SESION)}


@router.post(
    "/logout",
    response_model=MensajeResponse,
    summary="Cerrar sesión",
    responses={200: {"description": "Token actual revocado"}, 401: {"description": "No autenticado"}},
)
async def logout(
    request: Request,
    current_user: Usuario = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Revoca solo el token con el que se hizo la petición."""
    payload = getattr(request.state, "token_payload", None)
    if payload is not None:
        await revocar_token(db, payload.jti)
    nuevo = getattr(request.state, "nuevo_token", None)
    if nuevo is not None:
        # El token renovado en esta misma petición también pertenece a la sesión.
        await revocar_token(db, leer_token(nuevo).jti)
    return {"message": "Sesión cerrada exitosamente"}


@router.get(
    "/me",
    response_model=UsuarioActualResponse,
    response_model_exclude_unset=True,
    summary="Usuario actual",
    responses={401: {"description": "No autenticado"}},
)
async def me(current_user: Usuario = Depends(get_current_user)):
    """Usuario autenticado con sus roles, permisos e institución."""
    return {"user": usuario_resource(current_user, INCLUIR_SESION)}


@router.get(
    "/verify-token",
    response_model=VerificarTokenResponse,
    response_model_exclude_unset=True,
    summary="Verificar token",
    responses={401: {"description": "Token inválido, expirado o revocado"}},
)
async def verify_token(request: Request, current_user: Usuario = Depends(get_current_user)):
    """Indica si el token es válido y, si estaba por vencer, entrega el renovado."""
    payload = getattr(request.state, "token_payload", None)
    nuevo = getattr(request.state, "nuevo_token", None)
    expira = None
    if nuevo is not None:
        expira = leer_token(nuevo).exp
    elif payload is not None:
        expira = payload.exp
    return {
        "valid": True,
        "user": usuario_resource(current_user, INCLUIR_SESION),
        "should_refresh": nuevo is not None,
        "expires_at": datetime.fromtimestamp(expira, tz=timezone.utc) if expira is not None else None,
        "new_token": nuevo,
    }
