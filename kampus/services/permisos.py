"""Catálogo de permisos y roles por defecto, y su carga en la base de datos."""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from kampus.models import Permiso, Rol

logger = logging.getLogger(__name__)

ROL_ADMINISTRADOR = "Administrador"

_RECURSOS = {
    "usuarios": "usuarios",
    "roles": "roles",
    "estudiantes": "estudiantes",
    "docentes": "docentes",
    "acudientes": "acudientes",
    "instituciones": "instituciones",
    "sedes": "sedes",
    "anios": "años académicos",
    "periodos": "períodos",
    "grados": "grados",
    "grupos": "grupos",
    "areas": "áreas",
    "asignaturas": "asignaturas",
    "aulas": "aulas",
    "franjas_horarias": "franjas horarias",
    "asignaciones": "asignaciones",
}

_ACCIONES = (
    ("ver", "Ver lista de {}"),
    ("crear", "Crear {}"),
    ("editar", "Modificar {}"),
    ("eliminar", "Eliminar {}"),
)

PERMISOS: dict[str, str] = {
    f"{accion}_{recurso}": descripcion.format(etiqueta)
    for recurso, etiqueta in _RECURSOS.items()
    for accion, descripcion in _ACCIONES
}
PERMISOS.update(
    {
        "ver_permisos": "Ver lista de permisos",
        "asignar_permisos": "Asignar roles y permisos",
        "matricular_estudiantes": "Matricular y trasladar estudiantes entre grupos",
        "users.view.any": "Ver cualquier usuario",
        "users.view.own": "Ver su propio usuario",
        "users.create": "Crear usuarios",
        "users.update.any": "Editar cualquier usuario",
        "users.update.own": "Editar su propio usuario",
        "users.delete.any": "Eliminar cualquier usuario",
        "users.delete.own": "Eliminar su propio usuario",
    }
)

_SOLO_LECTURA_ACADEMICA = [
    "ver_anios",
    "ver_periodos",
    "ver_grados",
    "ver_grupos",
    "ver_areas",
    "ver_asignaturas",
    "ver_franjas_horarias",
    "ver_asignaciones",
    "users.view.own",
    "users.update.own",
]

# Nombre del rol -> permisos. None significa todos los permisos del catálogo.
ROLES: dict[str, list[str] | None] = {
    ROL_ADMINISTRADOR: None,
    "Docente": _SOLO_LECTURA_ACADEMICA + ["ver_estudiantes", "ver_docentes"],
    "Estudiante": _SOLO_LECTURA_ACADEMICA,
    "Acudiente": ["ver_estudiantes", "users.view.own", "users.update.own"],
}


async def sembrar_permisos_y_roles(db: AsyncSession) -> Rol:
    """Crea los permisos y roles que falten. Idempotente.

    Devuelve el rol Administrador con todos los permisos asignados.
    """
    existentes = {p.nombre: p for p in (await db.execute(select(Permiso))).scalars().all()}
    for nombre, descripcion in PERMISOS.items():
        if nombre not in existentes:
            permiso = Permiso(nombre=nombre, descripcion=descripcion)
            db.add(permiso)
            existentes[nombre] = permiso
    await db.flush()

    roles = {
        r.nombre: r
        for r in (await db.execute(select(Rol).options(selectinload(Rol.permisos)))).scalars().all()
    }
    for nombre, permisos in ROLES.items():
        rol = roles.get(nombre)
        if rol is None:
            rol = Rol(nombre=nombre, permisos=[])
            db.add(rol)
            roles[nombre] = rol
        nombres = PERMISOS.keys() if permisos is None else permisos
        actuales = {p.nombre for p in rol.permisos}
        for permiso in nombres:
            if permiso not in actuales:
                rol.permisos.append(existentes[permiso])
    await db.flush()
    logger.info("Catálogo de permisos sincronizado: %d permisos, %d roles", len(PERMISOS), len(ROLES))
    return roles[ROL_ADMINISTRADOR]
