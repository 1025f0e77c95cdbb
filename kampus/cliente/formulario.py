"""Formulario de asignación de horario del lado del cliente.

Mantiene un borrador con la forma de la asignación, lo valida localmente y lo
envía a la API. Si el envío falla el borrador se conserva y ``error`` queda
con un mensaje presentable; un conflicto de horario se muestra como
``"Conflicto de horario: <mensaje del servidor>"``.
"""
import inspect
import logging
import uuid
from typing import Any, Callable

from kampus.cliente.http import ClienteApi, ErrorApi
from kampus.cliente.referencias import CargadorPeriodos, Referencias, cargar_referencias

logger = logging.getLogger(__name__)

CAMPOS_REQUERIDOS = (
    "docente_id",
    "asignatura_id",
    "grupo_id",
    "franja_horaria_id",
    "dia_semana",
    "anio_academico_id",
)
CAMPOS_BORRADOR = CAMPOS_REQUERIDOS + ("periodo_id", "estado")

FALTAN_CAMPOS = "Por favor completa todos los campos requeridos"
CAMPO_OBLIGATORIO = "Este campo es obligatorio."
ERROR_GUARDANDO = "Error guardando la asignación"
ERROR_CARGANDO = "Error cargando datos iniciales"


def borrador_vacio() -> dict[str, Any]:
    borrador: dict[str, Any] = {campo: None for campo in CAMPOS_BORRADOR}
    borrador["estado"] = "activo"
    return borrador


def mensaje_de_error(error: Exception) -> str:
    """Texto a mostrar al usuario para un envío fallido."""
    if isinstance(error, ErrorApi):
        if error.conflicto:
            return f"Conflicto de horario: {error.message}"
        return error.message or ERROR_GUARDANDO
    return str(error) or ERROR_GUARDANDO


class FormularioAsignacion:
    """Crear (``asignacion=None``) o editar una asignación existente.

    ``al_completar`` recibe la asignación guardada; puede ser una función
    normal o una corrutina.
    """

    def __init__(
        self,
        cliente: ClienteApi,
        asignacion: dict[str, Any] | None = None,
        al_completar: Callable[[dict[str, Any]], Any] | None = None,
    ):
        self.cliente = cliente
        self.asignacion_id = asignacion.get("id") if asignacion else None
        self.al_completar = al_completar
        self.borrador = borrador_vacio()
        if asignacion:
            for campo in CAMPOS_BORRADOR:
                if asignacion.get(campo) is not None:
                    self.borrador[campo] = asignacion[campo]
        self.referencias = Referencias()
        self.periodos = CargadorPeriodos(cliente)
        self.errores: dict[str, list[str]] = {}
        self.error: str | None = None
        self.enviando = False
        self._clave_envio: str | None = None

    @property
    def editando(self) -> bool:
        return self.asignacion_id is not None

    async def cargar(self, per_page: int | None = None) -> None:
        """Carga las listas de referencia y, si ya hay año, sus periodos.

        Un fallo no se propaga: deja las listas vacías y ``error`` con
        ``ERROR_CARGANDO``. Los periodos se piden aunque las listas fallen.
        """
        try:
            self.referencias = await cargar_referencias(self.cliente, per_page)
        except ErrorApi as e:
            logger.warning("No se pudieron cargar las referencias: %s", e.message)
            self.error = ERROR_CARGANDO
        if self.borrador["anio_academico_id"] is None:
            return
        try:
            await self.periodos.seleccionar(self.borrador["anio_academico_id"])
        except ErrorApi as e:
            logger.warning("No se pudieron cargar los periodos: %s", e.message)
            self.error = ERROR_CARGANDO

    def actualizar(self, **campos: Any) -> None:
        """Modifica campos del borrador; cambiar el año se hace con ``cambiar_anio``."""
        for campo, valor in campos.items():
            if campo not in CAMPOS_BORRADOR:
                raise KeyError(campo)
            self.borrador[campo] = valor
            self.errores.pop(campo, None)
        self._clave_envio = None

    async def cambiar_anio(self, anio_id: int | None) -> None:
        """Cambia el año académico: quita el periodo elegido y recarga los periodos."""
        self.borrador["anio_academico_id"] = anio_id
        self.borrador["periodo_id"] = None
        self.errores.pop("anio_academico_id", None)
        self._clave_envio = None
        await self.periodos.seleccionar(anio_id)

    def validar(self) -> bool:
        self.errores = {
            campo: [CAMPO_OBLIGATORIO] for campo in CAMPOS_REQUERIDOS if self.borrador.get(campo) in (None, "")
        }
        self.error = FALTAN_CAMPOS if self.errores else None
        return not self.errores

    async def enviar(self) -> dict[str, Any] | None:
        """Valida y guarda. Devuelve la asignación guardada o None si falló.

        Reenviar el mismo borrador tras un fallo reutiliza la Idempotency-Key,
        de modo que un envío que sí llegó al servidor no se duplica. Mientras
        hay un envío en curso, otro llamado devuelve None sin hacer petición.
        """
        if self.enviando:
            return None
        if not self.validar():
            return None
        if self._clave_envio is None:
            self._clave_envio = uuid.uuid4().hex
        self.enviando = True
        try:
            if self.editando:
                cuerpo = await self.cliente.put(f"/asignaciones/{self.asignacion_id}", json=self.borrador)
            else:
                cuerpo = await self.cliente.post(
                    "/asignaciones",
                    json=self.borrador,
                    headers={"Idempotency-Key": self._clave_envio},
                )
        except ErrorApi as e:
            self.error = mensaje_de_error(e)
            self.errores = {c: m for c, m in e.errores.items() if c in CAMPOS_BORRADOR}
            logger.info("No se pudo guardar la asignación: %s", self.error)
            return None
        finally:
            self.enviando = False

        self._clave_envio = None
        self.error = None
        guardada = cuerpo.get("data", cuerpo)
        if self.al_completar is not None:
            resultado = self.al_completar(guardada)
            if inspect.isawaitable(resultado):
                await resultado
        return guardada

    def vista_previa(self) -> dict[str, dict[str, Any] | None]:
        """Elementos elegidos en el borrador, buscados en las listas cargadas."""
        periodo_id = self.borrador["periodo_id"]
        return {
            "docente": self.referencias.buscar("docentes", self.borrador["docente_id"]),
            "asignatura": self.referencias.buscar("asignaturas", self.borrador["asignatura_id"]),
            "grupo": self.referencias.buscar("grupos", self.borrador["grupo_id"]),
            "franja_horaria": self.referencias.buscar("franjas_horarias", self.borrador["franja_horaria_id"]),
            "anio_academico": self.referencias.buscar("anios", self.borrador["anio_academico_id"]),
            "periodo": next((p for p in self.periodos.periodos if p.get("id") == periodo_id), None),
        }
