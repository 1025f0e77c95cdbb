"""Transformadores entidad -> dict para las respuestas JSON."""
from kampus.resources.academico import (
    anio_resource,
    area_resource,
    asignatura_resource,
    aula_resource,
    franja_horaria_resource,
    grado_resource,
    grupo_resource,
    periodo_resource,
)
from kampus.resources.asignacion import INCLUIR_ASIGNACION, asignacion_resource
from kampus.resources.base import NADA, Incluir
from kampus.resources.estudiantes import acudiente_resource, estudiante_resource
from kampus.resources.institucion import institucion_resource, sede_resource
from kampus.resources.usuarios import (
    docente_resource,
    permiso_resource,
    rol_resource,
    usuario_resource,
)

__all__ = [
    "Incluir",
    "NADA",
    "INCLUIR_ASIGNACION",
    "acudiente_resource",
    "anio_resource",
    "area_resource",
    "asignacion_resource",
    "asignatura_resource",
    "aula_resource",
    "docente_resource",
    "estudiante_resource",
    "franja_horaria_resource",
    "grado_resource",
    "grupo_resource",
    "institucion_resource",
    "periodo_resource",
    "permiso_resource",
    "rol_resource",
    "sede_resource",
    "usuario_resource",
]
