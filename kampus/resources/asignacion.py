"""Transformador de Asignación."""
from typing import Any

from kampus.models import Asignacion
from kampus.resources.academico import (
    anio_resource,
    asignatura_resource,
    franja_horaria_resource,
    grupo_resource,
    periodo_resource,
)
from kampus.resources.base import NADA, Incluir, marcas_tiempo, relacion
from kampus.resources.usuarios import docente_resource, nombre_completo

# Relaciones que usan el listado y el detalle de asignaciones.
INCLUIR_ASIGNACION = Incluir.de(
    "docente.user",
    "asignatura.area",
    "grupo.grado",
    "grupo.sede",
    "franja_horaria",
    "anio_academico",
    "periodo",
)


def asignacion_resource(asignacion: Asignacion, incluir: Incluir = NADA) -> dict[str, Any]:
    """Asignación con sus ids, relaciones incluidas y nombres calculados.

    nombre_docente, nombre_asignatura y nombre_grupo son None cuando la
    relación de la que salen no fue incluida.
    """
    con_docente_usuario = "docente" in incluir and "user" in incluir.sub("docente")
    datos = {
        "id": asignacion.id,
        "docente_id": asignacion.docente_id,
        "asignatura_id": asignacion.asignatura_id,
        "grupo_id": asignacion.grupo_id,
        "franja_horaria_id": asignacion.franja_horaria_id,
        "dia_semana": asignacion.dia_semana,
        "anio_academico_id": asignacion.anio_academico_id,
        "periodo_id": asignacion.periodo_id,
        "estado": asignacion.estado,
        **marcas_tiempo(asignacion),
        "nombre_docente": nombre_completo(asignacion.docente.user) if con_docente_usuario else None,
        "nombre_asignatura": asignacion.asignatura.nombre if "asignatura" in incluir else None,
        "nombre_grupo": asignacion.grupo.nombre if "grupo" in incluir else None,
    }
    relacion(datos, asignacion, incluir, "docente", docente_resource)
    relacion(datos, asignacion, incluir, "asignatura", asignatura_resource)
    relacion(datos, asignacion, incluir, "grupo", grupo_resource)
    relacion(datos, asignacion, incluir, "franja_horaria", franja_horaria_resource)
    relacion(datos, asignacion, incluir, "anio_academico", anio_resource)
    relacion(datos, asignacion, incluir, "periodo", periodo_resource)
    return datos
