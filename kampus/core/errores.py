"""Errores de dominio y manejadores que los traducen a respuestas JSON.

Todas las respuestas de error llevan un campo ``message``. Los errores de
validación agregan ``errors`` (campo -> lista de mensajes) y los conflictos de
horario agregan ``conflicto: true`` para que el cliente los distinga.
"""
import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

MENSAJE_ERROR_INTERNO = "Error interno del servidor. Intente de nuevo más tarde."


class ErrorValidacion(Exception):
    """Datos de entrada inválidos (422) con errores por campo."""

    def __init__(self, errores: dict[str, list[str]], message: str | None = None):
        self.errores = errores
        primero = next((m for msgs in errores.values() for m in msgs), "Datos inválidos.")
        self.message = message or primero
        super().__init__(self.message)

    @classmethod
    def campo(cls, campo: str, mensaje: str) -> "ErrorValidacion":
        return cls({campo: [mensaje]})


class ConflictoHorario(Exception):
    """Dos asignaciones activas chocan en docente o grupo, franja, día y año."""

    def __init__(self, tipo: str, message: str, asignacion: dict[str, Any] | None = None):
        self.tipo = tipo
        self.message = message
        self.asignacion = asignacion
        super().__init__(message)


def _campo_desde_loc(loc: tuple) -> str:
    partes = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(partes) or "body"


def _mensaje_pydantic(msg: str) -> str:
    return msg.removeprefix("Value error, ")


def _respuesta_validacion(message: str, errores: dict[str, list[str]]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"message": message, "errors": errores},
    )


async def manejar_validacion_request(request: Request, exc: RequestValidationError):
    errores: dict[str, list[str]] = {}
    for error in exc.errors():
        errores.setdefault(_campo_desde_loc(error.get("loc", ())), []).append(
            _mensaje_pydantic(error.get("msg", "Valor inválido"))
        )
    primero = next(iter(errores.values()))[0] if errores else "Datos inválidos."
    return _respuesta_validacion(primero, errores)


async def manejar_error_validacion(request: Request, exc: ErrorValidacion):
    return _respuesta_validacion(exc.message, exc.errores)


async def manejar_conflicto(request: Request, exc: ConflictoHorario):
    logger.info("Conflicto de horario (%s) en %s %s", exc.tipo, request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "message": exc.message,
            "conflicto": True,
            "tipo_conflicto": exc.tipo,
            "asignacion_conflictiva": exc.asignacion,
        },
    )


async def manejar_http(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def manejar_integridad(request: Request, exc: IntegrityError):
    logger.warning("Violación de integridad en %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"message": "El registro viola una restricción de integridad de los datos."},
    )


async def manejar_base_datos(request: Request, exc: SQLAlchemyError):
    logger.exception("Error de base de datos en %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": MENSAJE_ERROR_INTERNO},
    )


async def manejar_inesperado(request: Request, exc: Exception):
    logger.exception("Error no controlado en %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": MENSAJE_ERROR_INTERNO},
    )


def registrar_manejadores(app: FastAPI) -> None:
    """Registra los manejadores de error en la aplicación."""
    app.add_exception_handler(RequestValidationError, manejar_validacion_request)
    app.add_exception_handler(ErrorValidacion, manejar_error_validacion)
    app.add_exception_handler(ConflictoHorario, manejar_conflicto)
    app.add_exception_handler(StarletteHTTPException, manejar_http)
    app.add_exception_handler(IntegrityError, manejar_integridad)
    app.add_exception_handler(SQLAlchemyError, manejar_base_datos)
    app.add_exception_handler(Exception, manejar_inesperado)
