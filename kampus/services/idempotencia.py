"""Respuestas guardadas por Idempotency-Key para repetir creaciones sin duplicar."""
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kampus.models import ClaveIdempotencia


async def respuesta_guardada(db: AsyncSession, user_id: int, clave: str) -> ClaveIdempotencia | None:
    q = select(ClaveIdempotencia).where(
        ClaveIdempotencia.user_id == user_id,
        ClaveIdempotencia.clave == clave,
    )
    return (await db.execute(q)).scalar_one_or_none()


async def guardar_respuesta(
    db: AsyncSession,
    user_id: int,
    clave: str,
    status_code: int,
    respuesta: dict[str, Any],
) -> None:
    """Guarda el resultado exitoso de la petición identificada por ``clave``.

    Solo se guardan éxitos: un intento rechazado (conflicto, validación)
    puede reintentarse con la misma clave.
    """
    db.add(ClaveIdempotencia(user_id=user_id, clave=clave, status_code=status_code, respuesta=respuesta))
    await db.flush()
