"""Paginación, búsqueda y ordenamiento del lado del servidor.

Los listados responden con el sobre:
``{data: [...], meta: {current_page, last_page, per_page, total, from, to},
links: {first, last, prev, next}}``.
"""
from math import ceil
from typing import Any, Callable, Sequence

from fastapi import HTTPException, Query, Request, status
from pydantic import BaseModel, Field
from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from kampus.core.config import settings


class ParametrosListado(BaseModel):
    """Parámetros comunes de los endpoints de listado."""

    page: int = Field(1, ge=1, description="Número de página (desde 1)")
    per_page: int = Field(description="Elementos por página")
    search: str | None = Field(default=None, description="Texto a buscar")
    sort_by: str | None = Field(default=None, description="Columna de ordenamiento")
    sort_direction: str = Field(default="asc", description="asc o desc")


def parametros_listado(
    page: int = Query(1, ge=1, description="Número de página"),
    per_page: int | None = Query(None, ge=1, description="Elementos por página"),
    search: str | None = Query(None, description="Texto a buscar"),
    sort_by: str | None = Query(None, description="Columna de ordenamiento"),
    sort_direction: str = Query("asc", description="asc o desc"),
) -> ParametrosListado:
    """Dependencia FastAPI con los parámetros de listado."""
    return ParametrosListado(
        page=page,
        per_page=min(per_page or settings.per_page_default, settings.per_page_max),
        search=search.strip() if search and search.strip() else None,
        sort_by=sort_by,
        sort_direction="desc" if sort_direction == "desc" else "asc",
    )


def calcular_meta(page: int, per_page: int, total: int) -> dict[str, Any]:
    """Metadatos de paginación; last_page nunca es menor que 1."""
    last_page = max(1, ceil(total / per_page)) if per_page > 0 else 1
    desde = (page - 1) * per_page + 1
    hasta = min(page * per_page, total)
    return {
        "current_page": page,
        "last_page": last_page,
        "per_page": per_page,
        "total": total,
        "from": desde if total and desde <= total else None,
        "to": hasta if total and desde <= total else None,
    }


def calcular_links(request: Request, page: int, last_page: int) -> dict[str, str | None]:
    def url(p: int) -> str:
        return str(request.url.include_query_params(page=p))

    return {
        "first": url(1),
        "last": url(last_page),
        "prev": url(page - 1) if page > 1 else None,
        "next": url(page + 1) if page < last_page else None,
    }


def aplicar_busqueda(q: Select, columnas: Sequence, termino: str | None) -> Select:
    """Filtra con LIKE sobre cualquiera de las columnas indicadas."""
    if not termino or not columnas:
        return q
    patron = f"%{termino}%"
    return q.where(or_(*[col.ilike(patron) for col in columnas]))


def aplicar_orden(
    q: Select,
    params: ParametrosListado,
    columnas_ordenables: dict[str, Any],
    orden_defecto: Sequence,
) -> Select:
    """Ordena por sort_by si está permitido; si no, por el orden por defecto."""
    if params.sort_by:
        columna = columnas_ordenables.get(params.sort_by)
        if columna is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"No se puede ordenar por '{params.sort_by}'",
            )
        return q.order_by(columna.desc() if params.sort_direction == "desc" else columna.asc())
    return q.order_by(*orden_defecto)


async def paginar(
    db: AsyncSession,
    request: Request,
    q: Select,
    params: ParametrosListado,
    transformar: Callable[[Any], dict],
) -> dict[str, Any]:
    """Ejecuta la consulta paginada y arma el sobre data/meta/links."""
    total_q = select(func.count()).select_from(q.order_by(None).subquery())
    total = (await db.execute(total_q)).scalar_one()

    offset = (params.page - 1) * params.per_page
    result = await db.execute(q.offset(offset).limit(params.per_page))
    items = result.scalars().unique().all()

    meta = calcular_meta(params.page, params.per_page, total)
    return {
        "data": [transformar(item) for item in items],
        "meta": meta,
        "links": calcular_links(request, params.page, meta["last_page"]),
    }
