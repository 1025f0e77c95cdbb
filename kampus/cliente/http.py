"""Cliente HTTP de la API con httpx.

Cada petición lleva ``Authorization: Bearer <token>`` si hay sesión. Cuando
la respuesta trae ``X-New-Token`` el token de la sesión se reemplaza; un 401
cierra la sesión local y no se reintenta. Cualquier fallo termina en
``ErrorApi`` con un mensaje presentable.
"""
import logging
from typing import Any

import httpx

from kampus.cliente.sesion import Sesion
from kampus.core.config import settings

logger = logging.getLogger(__name__)

ERROR_CONEXION = "Error en la conexión con el servidor"
SIN_RESPUESTA = "No se pudo conectar con el servidor"


class ErrorApi(Exception):
    """Respuesta de error de la API (o falta de respuesta, con status None)."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        conflicto: bool = False,
        errores: dict[str, list[str]] | None = None,
        cuerpo: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.conflicto = conflicto
        self.errores = errores or {}
        self.cuerpo = cuerpo or {}

    @classmethod
    def desde_respuesta(cls, response: httpx.Response) -> "ErrorApi":
        try:
            cuerpo = response.json()
        except ValueError:
            cuerpo = {}
        if not isinstance(cuerpo, dict):
            cuerpo = {}
        return cls(
            cuerpo.get("message") or cuerpo.get("error") or ERROR_CONEXION,
            status=response.status_code,
            conflicto=bool(cuerpo.get("conflicto")),
            errores=cuerpo.get("errors"),
            cuerpo=cuerpo,
        )


class ClienteApi:
    """Envoltura de ``httpx.AsyncClient`` atada a una ``Sesion``.

    ``transport`` permite inyectar ``httpx.MockTransport`` o ``ASGITransport``.
    """

    def __init__(
        self,
        sesion: Sesion | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.sesion = sesion or Sesion()
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.cliente_timeout_segundos,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "ClienteApi":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self, extra: dict[str, str] | None) -> dict[str, str]:
        headers = dict(extra or {})
        if self.sesion.token:
            headers["Authorization"] = f"Bearer {self.sesion.token}"
        return headers

    async def solicitar(
        self,
        metodo: str,
        ruta: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Envía la petición y devuelve el cuerpo JSON, o lanza ErrorApi."""
        try:
            response = await self._http.request(
                metodo, ruta, params=params, json=json, headers=self._headers(headers)
            )
        except httpx.TimeoutException:
            logger.error("Tiempo de espera agotado en %s %s", metodo, ruta)
            raise ErrorApi(SIN_RESPUESTA)
        except httpx.TransportError as e:
            logger.error("Sin respuesta del servidor en %s %s: %s", metodo, ruta, e)
            raise ErrorApi(SIN_RESPUESTA)

        nuevo = response.headers.get("X-New-Token")
        if nuevo:
            self.sesion.reemplazar_token(nuevo)

        if response.status_code == 401:
            logger.info("401 en %s %s: se cierra la sesión local", metodo, ruta)
            self.sesion.cerrar()
        if response.is_error:
            error = ErrorApi.desde_respuesta(response)
            logger.error("Error en la respuesta %s %s: %s %s", metodo, ruta, error.status, error.message)
            raise error
        if not response.content:
            return {}
        return response.json()

    async def get(self, ruta: str, **kwargs) -> dict[str, Any]:
        return await self.solicitar("GET", ruta, **kwargs)

    async def post(self, ruta: str, **kwargs) -> dict[str, Any]:
        return await self.solicitar("POST", ruta, **kwargs)

    async def put(self, ruta: str, **kwargs) -> dict[str, Any]:
        return await self.solicitar("PUT", ruta, **kwargs)

    async def delete(self, ruta: str, **kwargs) -> dict[str, Any]:
        return await self.solicitar("DELETE", ruta, **kwargs)

    async def listar(self, ruta: str, per_page: int | None = None, **filtros: Any) -> list[dict[str, Any]]:
        """Primera página de un listado (``data``), o [] si no viene."""
        params = {"per_page": per_page or settings.cliente_per_page_referencias}
        params.update({k: v for k, v in filtros.items() if v is not None})
        cuerpo = await self.get(ruta, params=params)
        return cuerpo.get("data") or []

    async def login(self, email: str, password: str) -> dict[str, Any]:
        cuerpo = await self.post("/login", json={"email": email, "password": password})
        self.sesion.iniciar(cuerpo["token"], cuerpo.get("user"))
        return cuerpo["user"]

    async def logout(self) -> None:
        """Revoca el token en el servidor; la sesión local se cierra aunque falle."""
        try:
            await self.post("/logout")
        finally:
            self.sesion.cerrar()
