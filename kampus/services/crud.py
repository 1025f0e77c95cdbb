"""Operaciones comunes de los endpoints CRUD: buscar o 404, validar claves
foráneas, comprobar unicidad, aplicar cambios y eliminar."""
from typing import Any, TypeVar

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from kampus.core.errores import ErrorValidacion
from kampus.resources.base import NADA, Incluir

T = TypeVar("T")


async def obtener(db: AsyncSession, modelo: type[T], id: int, incluir: Incluir = NADA) -> T | None:
    """Busca por id con las relaciones de ``incluir`` cargadas.

    populate_existing fuerza a refrescar una instancia que ya estaba en la
    sesión (por ejemplo recién creada) para que las relaciones queden cargadas.
    """
    q = (
        select(modelo)
        .where(modelo.id == id)
        .options(*incluir.opciones(modelo))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(q)
    return result.scalar_one_or_none()


async def obtener_o_404(
    db: AsyncSession,
    modelo: type[T],
    id: int,
    mensaje: str,
    incluir: Incluir = NADA,
) -> T:
    obj = await obtener(db, modelo, id, incluir)
    if obj is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=mensaje)
    return obj


async def existe(db: AsyncSession, modelo: type, id: int) -> bool:
    result = await db.execute(select(func.count()).select_from(modelo).where(modelo.id == id))
    return result.scalar_one() > 0


async def verificar_referencias(db: AsyncSession, referencias: list[tuple[str, type, Any, str]]) -> None:
    """Valida claves foráneas; cada referencia es (campo, modelo, id, mensaje).

    Las referencias con id None se ignoran. Reúne todos los errores y lanza
    un único ErrorValidacion (422) con un mensaje por campo.
    """
    errores: dict[str, list[str]] = {}
    for campo, modelo, id, mensaje in referencias:
        if id is not None and not await existe(db, modelo, id):
            errores.setdefault(campo, []).append(mensaje)
    if errores:
        raise ErrorValidacion(errores)


async def verificar_unico(
    db: AsyncSession,
    modelo: type,
    campo: str,
    valor: Any,
    mensaje: str,
    excluir_id: int | None = None,
    **filtros: Any,
) -> None:
    """Lanza 422 si ya existe otra fila con el mismo valor en ``campo``."""
    if valor is None:
        return
    q = select(func.count()).select_from(modelo).where(getattr(modelo, campo) == valor)
    for nombre, v in filtros.items():
        q = q.where(getattr(modelo, nombre) == v)
    if excluir_id is not None:
        q = q.where(modelo.id != excluir_id)
    if (await db.execute(q)).scalar_one() > 0:
        raise ErrorValidacion.campo(campo, mensaje)


def aplicar_cambios(obj: Any, cambios: dict[str, Any]) -> None:
    for campo, valor in cambios.items():
        setattr(obj, campo, valor)


async def crear(db: AsyncSession, obj: T) -> T:
    db.add(obj)
    await db.flush()
    return obj


async def eliminar(db: AsyncSession, obj: Any) -> None:
    await db.delete(obj)
    await db.flush()
