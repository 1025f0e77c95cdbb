"""Esquemas para autenticación y JWT."""
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from kampus.schemas.usuario import UsuarioItem


class LoginRequest(BaseModel):
    """Body del endpoint de login."""

    email: EmailStr = Field(description="Correo electrónico del usuario", examples=["admin@example.com"])
    password: str = Field(description="Contraseña en texto plano", min_length=1, examples=["123456"])


class LoginResponse(BaseModel):
    """Respuesta de login: token y usuario con roles, permisos e institución."""

    token: str = Field(description="JWT para el header Authorization: Bearer <token>")
    user: UsuarioItem


class UsuarioActualResponse(BaseModel):
    user: UsuarioItem


class VerificarTokenResponse(BaseModel):
    """Estado del token con el que se hizo la petición."""

    valid: bool
    user: UsuarioItem
    should_refresh: bool = Field(description="True si el token estaba por vencer y se renovó")
    expires_at: datetime | None = Field(description="Vencimiento del token vigente (UTC)")
    new_token: str | None = Field(description="Token renovado, si se emitió uno")


class TokenPayload(BaseModel):
    """Datos que viajan dentro del JWT (para dependencia get_current_user)."""

    sub: int = Field(description="ID del usuario")
    jti: str = Field(min_length=1, description="Identificador registrado del token")
    exp: int = Field(description="Vencimiento, segundos desde epoch")
    email: str | None = None
