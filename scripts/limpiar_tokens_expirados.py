"""Script para borrar de tokens_acceso los JWT ya vencidos."""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete

from kampus.core.database import AsyncSessionLocal, ahora_utc
from kampus.models import TokenAcceso


async def limpiar_tokens_expirados():
    async with AsyncSessionLocal() as session:
        result = await session.execute(delete(TokenAcceso).where(TokenAcceso.expira_en < ahora_utc()))
        await session.commit()
    print(f"Tokens vencidos eliminados: {result.rowcount}")


if __name__ == "__main__":
    asyncio.run(limpiar_tokens_expirados())
