"""Cliente asíncrono de la API de Kampus: sesión, carga de referencias y
formulario de asignaciones."""
from kampus.cliente.formulario import FormularioAsignacion
from kampus.cliente.http import ClienteApi, ErrorApi
from kampus.cliente.referencias import CargadorPeriodos, Referencias, cargar_referencias
from kampus.cliente.sesion import Sesion

__all__ = [
    "CargadorPeriodos",
    "ClienteApi",
    "ErrorApi",
    "FormularioAsignacion",
    "Referencias",
    "Sesion",
    "cargar_referencias",
]
