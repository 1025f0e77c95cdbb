"""Script para crear las tablas y sembrar el catálogo de permisos y roles."""
import asyncio
import sys
from pathlib import Path

# Asegurar que el proyecto esté en el path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from kampus.core.database import AsyncSessionLocal, init_db
from kampus.models import Rol
from kampus.services.permisos import sembrar_permisos_y_roles


async def seed_permisos_roles():
    await init_db()
    async with AsyncSessionLocal() as session:
        await sembrar_permisos_y_roles(session)
        await session.commit()
        result = await session.execute(select(Rol).options(selectinload(Rol.permisos)).order_by(Rol.id))
        for rol in result.scalars().all():
            print(f"  = Rol {rol.nombre} (id={rol.id}): {len(rol.permisos)} permisos")
    print("Listo.")


if __name__ == "__main__":
    asyncio.run(seed_permisos_roles())
