"""Transformadores de usuarios, roles, permisos y docentes."""
from typing import Any

from kampus.models import Docente, Permiso, Rol, Usuario
from kampus.resources.base import NADA, Incluir, coleccion, relacion
from kampus.resources.institucion import institucion_resource


def permiso_resource(permiso: Permiso, incluir: Incluir = NADA) -> dict[str, Any]:
    return {"id": permiso.id, "nombre": permiso.nombre, "descripcion": permiso.descripcion}


def rol_resource(rol: Rol, incluir: Incluir = NADA) -> dict[str, Any]:
    return {
        "id": rol.id,
        "nombre": rol.nombre,
        "permissions": coleccion(rol, incluir, "permisos", permiso_resource),
    }


def usuario_resource(usuario: Usuario, incluir: Incluir = NADA) -> dict[str, Any]:
    datos = {
        "id": usuario.id,
        "nombre": usuario.nombre,
        "apellido": usuario.apellido,
        "username": usuario.username,
        "email": usuario.email,
        "tipo_documento": usuario.tipo_documento,
        "numero_documento": usuario.numero_documento,
        "estado": usuario.estado,
        "institucion_id": usuario.institucion_id,
        "roles": coleccion(usuario, incluir, "roles", rol_resource),
    }
    relacion(datos, usuario, incluir, "institucion", institucion_resource)
    return datos


def docente_resource(docente: Docente, incluir: Incluir = NADA) -> dict[str, Any]:
    """Docente con los datos personales de su usuario aplanados.

    nombre, apellido, email y estado vienen del usuario y solo se llenan si
    ``user`` está incluido; ``institucion`` requiere ``user.institucion``.
    """
    con_usuario = "user" in incluir
    usuario = docente.user if con_usuario else None
    institucion = None
    if usuario is not None and "institucion" in incluir.sub("user"):
        institucion = {"id": usuario.institucion.id, "nombre": usuario.institucion.nombre}

    datos = {
        "id": docente.id,
        "user_id": docente.user_id,
        "nombre": usuario.nombre if usuario else None,
        "apellido": usuario.apellido if usuario else None,
        "email": usuario.email if usuario else None,
        "estado": usuario.estado if usuario else None,
        "institucion": institucion,
        "telefono": docente.telefono,
        "especialidad": docente.especialidad,
        "fecha_contratacion": docente.fecha_contratacion,
        "salario": docente.salario,
        "horario_trabajo": docente.horario_trabajo,
    }
    relacion(datos, docente, incluir, "user", usuario_resource)
    return datos


def nombre_completo(usuario: Usuario | None) -> str | None:
    if usuario is None:
        return None
    return f"{usuario.nombre} {usuario.apellido}".strip()
