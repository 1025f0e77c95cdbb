"""Transformadores de Institución y Sede."""
from typing import Any

from kampus.models import Institucion, Sede
from kampus.resources.base import NADA, Incluir, coleccion, marcas_tiempo, relacion


def institucion_resource(institucion: Institucion, incluir: Incluir = NADA) -> dict[str, Any]:
    datos = {
        "id": institucion.id,
        "nombre": institucion.nombre,
        "siglas": institucion.siglas,
        "slogan": institucion.slogan,
        "dane": institucion.dane,
        "resolucion_aprobacion": institucion.resolucion_aprobacion,
        "direccion": institucion.direccion,
        "telefono": institucion.telefono,
        "email": institucion.email,
        "rector": institucion.rector,
        **marcas_tiempo(institucion),
    }
    datos["sedes"] = coleccion(institucion, incluir, "sedes", sede_resource)
    return datos


def sede_resource(sede: Sede, incluir: Incluir = NADA) -> dict[str, Any]:
    datos = {
        "id": sede.id,
        "institucion_id": sede.institucion_id,
        "nombre": sede.nombre,
        "direccion": sede.direccion,
        "telefono": sede.telefono,
        **marcas_tiempo(sede),
    }
    relacion(datos, sede, incluir, "institucion", institucion_resource)
    return datos
