"""Utilidades de seguridad: verificación de contraseña y JWT."""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt

from kampus.core.config import settings


def hash_password(plain_password: str) -> str:
    """Genera el hash bcrypt de la contraseña en texto."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(plain_password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Comprueba si la contraseña en texto coincide con el hash."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        return False


def create_access_token(
    subject: str | int,
    extra: dict[str, Any] | None = None,
    expire_minutes: int | None = None,
) -> tuple[str, str, datetime]:
    """Genera un JWT con sub=subject y un jti único.

    Devuelve (token, jti, expira_en); el jti se registra en la tabla
    tokens_acceso para poder revocar el token.
    """
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=expire_minutes or settings.jwt_expire_minutes)
    jti = uuid.uuid4().hex
    payload = {
        "sub": str(subject),
        "jti": jti,
        "exp": expire,
        "iat": now,
    }
    if extra:
        payload.update(extra)
    token = jwt.encode(
        payload,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return token, jti, expire


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decodifica y valida el JWT; devuelve el payload o None si es inválido."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.PyJWTError:
        return None


def minutos_para_expirar(exp: int) -> float:
    """Minutos que le quedan al token según su claim exp."""
    vence = datetime.fromtimestamp(exp, tz=timezone.utc)
    return (vence - datetime.now(timezone.utc)).total_seconds() / 60
