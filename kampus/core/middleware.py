"""Middlewares HTTP: registro de peticiones y headers de sesión."""
import logging
import time

from fastapi import Request

logger = logging.getLogger("kampus.peticiones")


async def registrar_peticiones(request: Request, call_next):
    """Registra método, ruta, query y cliente de cada petición, y estado y duración de la respuesta.

    Nunca se registran cuerpos ni headers: pueden llevar credenciales.
    """
    inicio = time.perf_counter()
    cliente = request.client.host if request.client else "-"
    logger.info(
        "--> %s %s%s desde %s",
        request.method,
        request.url.path,
        f"?{request.url.query}" if request.url.query else "",
        cliente,
    )
    try:
        response = await call_next(request)
    except Exception:
        logger.error(
            "<-- %s %s 500 %.1fms (excepción no controlada)",
            request.method,
            request.url.path,
            (time.perf_counter() - inicio) * 1000,
        )
        raise
    logger.info(
        "<-- %s %s %s %.1fms",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - inicio) * 1000,
    )
    return response


async def headers_de_sesion(request: Request, call_next):
    """Agrega X-New-Token cuando la petición renovó el token y X-Dev-Auth en modo desarrollo.

    La dependencia de autenticación ya pone X-New-Token en las respuestas
    normales; aquí se cubren las respuestas de error y las devueltas como
    ``Response`` por el endpoint.
    """
    response = await call_next(request)
    nuevo = getattr(request.state, "nuevo_token", None)
    if nuevo and "X-New-Token" not in response.headers:
        response.headers["X-New-Token"] = nuevo
    politica = getattr(request.app.state, "politica_autorizacion", None)
    if politica is not None and politica.modo_desarrollo:
        response.headers["X-Dev-Auth"] = "true"
    return response
