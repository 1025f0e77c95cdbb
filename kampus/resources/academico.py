"""Transformadores de la estructura académica: años, periodos, grados, grupos,
áreas, asignaturas, aulas y franjas horarias."""
from typing import Any

from kampus.models import Anio, Area, Asignatura, Aula, FranjaHoraria, Grado, Grupo, Periodo
from kampus.resources.base import (
    NADA,
    Incluir,
    coleccion,
    marcas_tiempo,
    relacion,
)
from kampus.resources.institucion import institucion_resource, sede_resource
from kampus.resources.usuarios import docente_resource


def anio_resource(anio: Anio, incluir: Incluir = NADA) -> dict[str, Any]:
    datos = {
        "id": anio.id,
        "nombre": anio.nombre,
        "fecha_inicio": anio.fecha_inicio,
        "fecha_fin": anio.fecha_fin,
        "estado": anio.estado,
        "institucion_id": anio.institucion_id,
        "periodos": coleccion(anio, incluir, "periodos", periodo_resource),
    }
    relacion(datos, anio, incluir, "institucion", institucion_resource)
    return datos


def _anio_resumen(anio: Anio, incluir: Incluir = NADA) -> dict[str, Any]:
    return {"id": anio.id, "nombre": anio.nombre, "estado": anio.estado}


def periodo_resource(periodo: Periodo, incluir: Incluir = NADA) -> dict[str, Any]:
    datos = {
        "id": periodo.id,
        "nombre": periodo.nombre,
        "fecha_inicio": periodo.fecha_inicio,
        "fecha_fin": periodo.fecha_fin,
        "anio_id": periodo.anio_id,
        **marcas_tiempo(periodo),
    }
    relacion(datos, periodo, incluir, "anio", _anio_resumen)
    return datos


def grado_resource(grado: Grado, incluir: Incluir = NADA) -> dict[str, Any]:
    grupos = coleccion(grado, incluir, "grupos", grupo_resource)
    datos = {
        "id": grado.id,
        "nombre": grado.nombre,
        "nivel": grado.nivel,
        "descripcion": grado.descripcion,
        "estado": grado.estado,
        "institucion_id": grado.institucion_id,
        "grupos_count": len(grupos) if "grupos" in incluir else None,
        "grupos": grupos,
    }
    relacion(datos, grado, incluir, "institucion", institucion_resource)
    return datos


def _estudiante_en_grupo(estudiante, incluir: Incluir) -> dict[str, Any]:
    usuario = estudiante.user if "user" in incluir else None
    return {
        "id": estudiante.id,
        "codigo_estudiantil": estudiante.codigo_estudiantil,
        "estado": estudiante.estado,
        "user": (
            {"nombre": usuario.nombre, "apellido": usuario.apellido, "email": usuario.email}
            if usuario is not None
            else None
        ),
    }


def grupo_resource(grupo: Grupo, incluir: Incluir = NADA) -> dict[str, Any]:
    estudiantes = coleccion(grupo, incluir, "estudiantes", _estudiante_en_grupo)
    datos = {
        "id": grupo.id,
        "nombre": grupo.nombre,
        "descripcion": grupo.descripcion,
        "capacidad": grupo.capacidad,
        "estado": grupo.estado,
        "sede_id": grupo.sede_id,
        "anio_id": grupo.anio_id,
        "grado_id": grupo.grado_id,
        "director_docente_id": grupo.director_docente_id,
        "estudiantes_count": len(estudiantes) if "estudiantes" in incluir else None,
        "estudiantes": estudiantes,
    }
    relacion(datos, grupo, incluir, "sede", sede_resource)
    relacion(datos, grupo, incluir, "grado", grado_resource)
    relacion(datos, grupo, incluir, "anio", anio_resource)
    relacion(datos, grupo, incluir, "director_docente", docente_resource)
    return datos


def area_resource(area: Area, incluir: Incluir = NADA) -> dict[str, Any]:
    asignaturas = coleccion(area, incluir, "asignaturas", asignatura_resource)
    datos = {
        "id": area.id,
        "nombre": area.nombre,
        "descripcion": area.descripcion,
        "color": area.color,
        "institucion_id": area.institucion_id,
        "asignaturas_count": len(asignaturas) if "asignaturas" in incluir else None,
        "asignaturas": asignaturas,
    }
    relacion(datos, area, incluir, "institucion", institucion_resource)
    return datos


def asignatura_resource(asignatura: Asignatura, incluir: Incluir = NADA) -> dict[str, Any]:
    datos = {
        "id": asignatura.id,
        "nombre": asignatura.nombre,
        "porcentaje_area": asignatura.porcentaje_area,
        "area_id": asignatura.area_id,
    }
    relacion(datos, asignatura, incluir, "area", area_resource)
    return datos


def aula_resource(aula: Aula, incluir: Incluir = NADA) -> dict[str, Any]:
    datos = {
        "id": aula.id,
        "nombre": aula.nombre,
        "tipo": aula.tipo,
        "capacidad": aula.capacidad,
        "institucion_id": aula.institucion_id,
    }
    relacion(datos, aula, incluir, "institucion", institucion_resource)
    return datos


def franja_horaria_resource(franja: FranjaHoraria, incluir: Incluir = NADA) -> dict[str, Any]:
    datos = {
        "id": franja.id,
        "nombre": franja.nombre,
        "descripcion": franja.descripcion,
        "hora_inicio": franja.hora_inicio,
        "hora_fin": franja.hora_fin,
        "duracion_minutos": franja.duracion_minutos,
        "estado": franja.estado,
        "institucion_id": franja.institucion_id,
        **marcas_tiempo(franja),
    }
    relacion(datos, franja, incluir, "institucion", institucion_resource)
    return datos
