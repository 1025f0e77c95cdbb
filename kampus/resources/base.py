"""Relaciones a incluir en una respuesta y utilidades para armarla.

``Incluir`` se construye una sola vez por endpoint a partir de rutas con
puntos (``"docente.user"``) y sirve para dos cosas: generar las opciones
``selectinload`` de la consulta y decidir qué relaciones anidadas aparecen en
la respuesta. Los transformadores nunca consultan el estado de carga del ORM.

Las fechas y horas se entregan sin formatear; el formato JSON lo dan los
modelos de respuesta de ``kampus.schemas``.
"""
from datetime import datetime
from typing import Any, Callable

from sqlalchemy.orm import selectinload


class Incluir:
    """Árbol de relaciones solicitadas."""

    __slots__ = ("_hijos",)

    def __init__(self, hijos: dict[str, "Incluir"] | None = None):
        self._hijos = hijos or {}

    @classmethod
    def de(cls, *rutas: str) -> "Incluir":
        raiz = cls()
        for ruta in rutas:
            nodo = raiz
            for parte in ruta.split("."):
                nodo = nodo._hijos.setdefault(parte, cls())
        return raiz

    def __contains__(self, relacion: str) -> bool:
        return relacion in self._hijos

    def __bool__(self) -> bool:
        return bool(self._hijos)

    def __repr__(self) -> str:
        return f"Incluir({', '.join(self.rutas()) or '-'})"

    def sub(self, relacion: str) -> "Incluir":
        """Sub-árbol de una relación (vacío si no se pidió)."""
        return self._hijos.get(relacion, NADA)

    def rutas(self) -> list[str]:
        resultado = []
        for nombre, hijo in self._hijos.items():
            subrutas = hijo.rutas()
            if subrutas:
                resultado.extend(f"{nombre}.{r}" for r in subrutas)
            else:
                resultado.append(nombre)
        return resultado

    def opciones(self, modelo: type) -> list:
        """Opciones selectinload para cargar este árbol desde ``modelo``."""
        opciones = []
        for nombre, hijo in self._hijos.items():
            atributo = getattr(modelo, nombre)
            carga = selectinload(atributo)
            if hijo:
                destino = atributo.property.mapper.class_
                carga = carga.options(*hijo.opciones(destino))
            opciones.append(carga)
        return opciones


NADA = Incluir()


def marcas_tiempo(entidad: Any) -> dict[str, datetime | None]:
    return {"created_at": entidad.created_at, "updated_at": entidad.updated_at}


def relacion(
    datos: dict[str, Any],
    entidad: Any,
    incluir: Incluir,
    nombre: str,
    transformar: Callable[[Any, Incluir], dict[str, Any]],
) -> None:
    """Agrega ``datos[nombre]`` solo si la relación fue solicitada.

    El atributo se lee únicamente cuando está en ``incluir``; leerlo sin
    haberlo cargado dispararía una carga perezosa fuera del contexto async.
    """
    if nombre in incluir:
        valor = getattr(entidad, nombre)
        datos[nombre] = transformar(valor, incluir.sub(nombre)) if valor is not None else None


def coleccion(
    entidad: Any,
    incluir: Incluir,
    nombre: str,
    transformar: Callable[[Any, Incluir], dict[str, Any]],
) -> list[dict[str, Any]]:
    """Lista transformada si la relación fue solicitada; [] si no."""
    if nombre not in incluir:
        return []
    sub = incluir.sub(nombre)
    return [transformar(v, sub) for v in getattr(entidad, nombre)]
