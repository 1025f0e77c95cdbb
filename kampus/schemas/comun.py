"""Modelos de respuesta compartidos: sobres ``data``, paginación y mensajes.

Las rutas los declaran con ``response_model_exclude_unset=True``: una relación
que no se incluyó en la consulta no aparece en la respuesta.
"""
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class MetaPaginacion(BaseModel):
    """Metadatos de un listado paginado."""

    current_page: int = Field(description="Página actual (desde 1)")
    last_page: int = Field(description="Última página; nunca menor que 1")
    per_page: int = Field(description="Elementos por página")
    total: int = Field(description="Total de elementos que cumplen el filtro")
    desde: int | None = Field(alias="from", description="Posición del primer elemento de la página")
    hasta: int | None = Field(alias="to", description="Posición del último elemento de la página")


class LinksPaginacion(BaseModel):
    first: str
    last: str
    prev: str | None = None
    next: str | None = None


class Paginado(BaseModel, Generic[T]):
    """Sobre de los listados: ``{data, meta, links}``."""

    data: list[T]
    meta: MetaPaginacion
    links: LinksPaginacion


class Respuesta(BaseModel, Generic[T]):
    """Sobre de detalle y alta: ``{data: ...}``."""

    data: T


class Lista(BaseModel, Generic[T]):
    """Lista sin paginar: ``{data: [...]}``."""

    data: list[T]


class MensajeResponse(BaseModel):
    message: str = Field(description="Mensaje para mostrar al usuario")
