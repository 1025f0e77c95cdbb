"""Estado de sesión del cliente: token actual y usuario autenticado."""
import logging
from typing import Any

logger = logging.getLogger(__name__)


class Sesion:
    """Guarda el token Bearer y el usuario devueltos por /login."""

    def __init__(self, token: str | None = None, usuario: dict[str, Any] | None = None):
        self.token = token
        self.usuario = usuario

    @property
    def autenticada(self) -> bool:
        return self.token is not None

    def iniciar(self, token: str, usuario: dict[str, Any] | None) -> None:
        self.token = token
        self.usuario = usuario

    def reemplazar_token(self, token: str) -> None:
        """El servidor renovó el token (header X-New-Token)."""
        logger.debug("Token de sesión renovado por el servidor")
        self.token = token

    def cerrar(self) -> None:
        self.token = None
        self.usuario = None

    def tiene_permiso(self, permiso: str) -> bool:
        """Según los roles y permisos del usuario que devolvió /login o /me."""
        if not self.usuario:
            return False
        return any(
            p.get("nombre") == permiso
            for rol in self.usuario.get("roles", [])
            for p in rol.get("permissions", [])
        )
