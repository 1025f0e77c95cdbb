"""Script para crear la institución inicial y su usuario administrador."""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from kampus.core.database import AsyncSessionLocal
from kampus.core.security import hash_password
from kampus.models import Institucion, Usuario
from kampus.services.permisos import sembrar_permisos_y_roles

INSTITUCION_NOMBRE = "Institución Educativa Kampus"
INSTITUCION_SIGLAS = "IEK"
ADMIN_EMAIL = "admin@kampus.edu.co"
ADMIN_USERNAME = "admin"
# Cambiarla después del primer ingreso
ADMIN_PASSWORD_PLAIN = "cambiar-esta-clave"


async def seed_usuario_admin():
    async with AsyncSessionLocal() as session:
        rol = await sembrar_permisos_y_roles(session)

        result = await session.execute(select(Institucion).where(Institucion.nombre == INSTITUCION_NOMBRE))
        institucion = result.scalar_one_or_none()
        if not institucion:
            institucion = Institucion(nombre=INSTITUCION_NOMBRE, siglas=INSTITUCION_SIGLAS)
            session.add(institucion)
            await session.flush()
            print(f"  + Institución creada: {institucion.nombre} (id={institucion.id})")
        else:
            print(f"  = Institución existente: {institucion.nombre} (id={institucion.id})")

        result = await session.execute(select(Usuario).where(Usuario.email == ADMIN_EMAIL))
        usuario = result.scalar_one_or_none()
        if not usuario:
            usuario = Usuario(
                nombre="Administrador",
                apellido="General",
                username=ADMIN_USERNAME,
                email=ADMIN_EMAIL,
                password_hash=hash_password(ADMIN_PASSWORD_PLAIN),
                institucion_id=institucion.id,
                roles=[rol],
            )
            session.add(usuario)
            await session.flush()
            print(f"  + Administrador creado: id={usuario.id}, email={usuario.email}")
        else:
            usuario.password_hash = hash_password(ADMIN_PASSWORD_PLAIN)
            print(f"  + Contraseña restablecida para: {usuario.email}")
        await session.commit()
    print("Listo.")
    print(f"  Login: {ADMIN_EMAIL} / {ADMIN_PASSWORD_PLAIN}")


if __name__ == "__main__":
    asyncio.run(seed_usuario_admin())
