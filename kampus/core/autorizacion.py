"""Políticas de autorización por permiso.

La política se elige una sola vez al crear la aplicación (``construir_politica``)
y se guarda en ``app.state.politica_autorizacion``. Los endpoints la consultan a
través de las dependencias de ``kampus.api.endpoints.auth``.
"""
import logging
from typing import TYPE_CHECKING

from kampus.core.config import Settings

if TYPE_CHECKING:
    from kampus.models.user import Usuario

logger = logging.getLogger(__name__)


class PoliticaAutorizacion:
    """Decide si un usuario tiene un permiso."""

    nombre = "base"
    modo_desarrollo = False

    def permite(self, usuario: "Usuario", permiso: str) -> bool:
        raise NotImplementedError

    def permite_alguno(self, usuario: "Usuario", *permisos: str) -> bool:
        """True si concede al menos uno; sin permisos nunca concede."""
        return any(self.permite(usuario, p) for p in permisos)


class PoliticaPermisos(PoliticaAutorizacion):
    """Producción: el permiso debe venir de alguno de los roles del usuario."""

    nombre = "permisos"

    def permite(self, usuario: "Usuario", permiso: str) -> bool:
        return usuario.tiene_permiso(permiso)


class PoliticaPermitirTodo(PoliticaAutorizacion):
    """Desarrollo: todo permitido; las peticiones sin token usan un administrador por defecto."""

    nombre = "permitir_todo"
    modo_desarrollo = True

    def permite(self, usuario: "Usuario", permiso: str) -> bool:
        return True


def construir_politica(config: Settings) -> PoliticaAutorizacion:
    """Política según el interruptor explícito MODO_DESARROLLO."""
    if config.modo_desarrollo:
        logger.warning(
            "MODO_DESARROLLO activo: verificación de permisos desactivada. No usar en producción."
        )
        return PoliticaPermitirTodo()
    return PoliticaPermisos()
