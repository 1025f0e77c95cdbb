"""Script para insertar los grados de preescolar a undécimo en cada institución."""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from kampus.core.database import AsyncSessionLocal
from kampus.models import Grado, Institucion
from kampus.models.grado import NivelGrado

GRADOS = [
    ("Transición", NivelGrado.PREESCOLAR),
    ("Primero", NivelGrado.BASICA_PRIMARIA),
    ("Segundo", NivelGrado.BASICA_PRIMARIA),
    ("Tercero", NivelGrado.BASICA_PRIMARIA),
    ("Cuarto", NivelGrado.BASICA_PRIMARIA),
    ("Quinto", NivelGrado.BASICA_PRIMARIA),
    ("Sexto", NivelGrado.BASICA_SECUNDARIA),
    ("Séptimo", NivelGrado.BASICA_SECUNDARIA),
    ("Octavo", NivelGrado.BASICA_SECUNDARIA),
    ("Noveno", NivelGrado.BASICA_SECUNDARIA),
    ("Décimo", NivelGrado.EDUCACION_MEDIA),
    ("Undécimo", NivelGrado.EDUCACION_MEDIA),
]


async def seed_grados():
    async with AsyncSessionLocal() as session:
        instituciones = (await session.execute(select(Institucion))).scalars().all()
        if not instituciones:
            print("No hay instituciones. Ejecute primero seed_usuario_admin.py")
            return
        for institucion in instituciones:
            result = await session.execute(
                select(Grado.nombre).where(Grado.institucion_id == institucion.id)
            )
            existentes = set(result.scalars().all())
            creados = 0
            for nombre, nivel in GRADOS:
                if nombre in existentes:
                    continue
                session.add(Grado(nombre=nombre, nivel=nivel, institucion_id=institucion.id))
                creados += 1
            print(f"  + {institucion.nombre}: {creados} grados creados, {len(existentes)} existentes")
        await session.commit()
    print("Listo.")


if __name__ == "__main__":
    asyncio.run(seed_grados())
