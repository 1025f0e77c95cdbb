"""Carga de las listas de referencia del formulario de asignaciones.

Las cinco listas (docentes, asignaturas, grupos, franjas y años) se piden a la
vez. Los periodos dependen del año elegido: cada petición lleva un número de
secuencia y una respuesta que llega después de otra selección se descarta.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from kampus.cliente.http import ClienteApi, ErrorApi

logger = logging.getLogger(__name__)

RUTAS_REFERENCIAS = {
    "docentes": "/docentes",
    "asignaturas": "/asignaturas",
    "grupos": "/grupos",
    "franjas_horarias": "/franjas-horarias",
    "anios": "/anios",
}


@dataclass
class Referencias:
    docentes: list[dict[str, Any]] = field(default_factory=list)
    asignaturas: list[dict[str, Any]] = field(default_factory=list)
    grupos: list[dict[str, Any]] = field(default_factory=list)
    franjas_horarias: list[dict[str, Any]] = field(default_factory=list)
    anios: list[dict[str, Any]] = field(default_factory=list)

    def buscar(self, lista: str, id: int | None) -> dict[str, Any] | None:
        if id is None:
            return None
        return next((item for item in getattr(self, lista) if item.get("id") == id), None)


async def cargar_referencias(cliente: ClienteApi, per_page: int | None = None) -> Referencias:
    """Pide las cinco listas en paralelo; si una falla, falla la carga completa."""
    nombres = list(RUTAS_REFERENCIAS)
    listas = await asyncio.gather(
        *(cliente.listar(RUTAS_REFERENCIAS[n], per_page=per_page) for n in nombres)
    )
    logger.debug("Referencias cargadas: %s", {n: len(l) for n, l in zip(nombres, listas)})
    return Referencias(**dict(zip(nombres, listas)))


class CargadorPeriodos:
    """Periodos del año académico seleccionado."""

    def __init__(self, cliente: ClienteApi):
        self.cliente = cliente
        self.periodos: list[dict[str, Any]] = []
        self.anio_id: int | None = None
        self._secuencia = 0

    async def seleccionar(self, anio_id: int | None) -> bool:
        """Cambia de año y carga sus periodos.

        Devuelve False si mientras se esperaba la respuesta se seleccionó
        otro año; en ese caso la respuesta se ignora.
        """
        self._secuencia += 1
        mia = self._secuencia
        self.anio_id = anio_id
        if anio_id is None:
            self.periodos = []
            return True
        try:
            cuerpo = await self.cliente.get(f"/anios/{anio_id}/periodos")
        except ErrorApi:
            if mia != self._secuencia:
                return False
            self.periodos = []
            raise
        if mia != self._secuencia:
            logger.debug("Periodos del año %s descartados: llegó otra selección", anio_id)
            return False
        self.periodos = cuerpo.get("data") or []
        return True
