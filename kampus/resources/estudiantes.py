"""Transformadores de Estudiante y Acudiente."""
from typing import Any

from kampus.models import Acudiente, Estudiante
from kampus.resources.academico import grupo_resource
from kampus.resources.base import NADA, Incluir, coleccion, relacion
from kampus.resources.institucion import institucion_resource
from kampus.resources.usuarios import usuario_resource


def estudiante_resource(estudiante: Estudiante, incluir: Incluir = NADA) -> dict[str, Any]:
    datos = {
        "id": estudiante.id,
        "codigo_estudiantil": estudiante.codigo_estudiantil,
        "fecha_nacimiento": estudiante.fecha_nacimiento,
        "genero": estudiante.genero,
        "direccion": estudiante.direccion,
        "telefono": estudiante.telefono,
        "estado": estudiante.estado,
        "user_id": estudiante.user_id,
        "grupo_id": estudiante.grupo_id,
        "institucion_id": estudiante.institucion_id,
        "acudientes": coleccion(estudiante, incluir, "acudientes", acudiente_resource),
    }
    relacion(datos, estudiante, incluir, "user", usuario_resource)
    relacion(datos, estudiante, incluir, "grupo", grupo_resource)
    relacion(datos, estudiante, incluir, "institucion", institucion_resource)
    return datos


def acudiente_resource(acudiente: Acudiente, incluir: Incluir = NADA) -> dict[str, Any]:
    datos = {
        "id": acudiente.id,
        "nombre": acudiente.nombre,
        "telefono": acudiente.telefono,
        "email": acudiente.email,
        "user_id": acudiente.user_id,
        "estudiantes": coleccion(acudiente, incluir, "estudiantes", estudiante_resource),
    }
    relacion(datos, acudiente, incluir, "user", usuario_resource)
    return datos
