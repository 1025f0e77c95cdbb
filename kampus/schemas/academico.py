"""Esquemas de la estructura académica: años, periodos, grados, grupos,
áreas, asignaturas, aulas y franjas horarias."""
from datetime import date, datetime, time

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

from kampus.models.anio import EstadoAnio
from kampus.models.aula import TipoAula
from kampus.models.franja_horaria import EstadoFranja
from kampus.models.grado import NivelGrado
from kampus.schemas.institucion import InstitucionItem, SedeItem
from kampus.schemas.usuario import DocenteItem

_ESTADOS_ANIO = (EstadoAnio.ACTIVO, EstadoAnio.INACTIVO)
_ESTADOS_ACTIVO_INACTIVO = ("activo", "inactivo")


def _fechas_en_orden(inicio: date | None, fin: date | None) -> None:
    if inicio is not None and fin is not None and fin <= inicio:
        raise ValueError("La fecha de fin debe ser posterior a la fecha de inicio.")


def _en(valor: str | None, permitidos: tuple, mensaje: str) -> str | None:
    if valor is not None and valor not in permitidos:
        raise ValueError(mensaje)
    return valor


# --- Años y periodos ---


class AnioCreate(BaseModel):
    """Body para crear un año académico."""

    nombre: str = Field(min_length=1, max_length=255, description="Nombre único, ej. 2025")
    fecha_inicio: date
    fecha_fin: date
    institucion_id: int = Field(description="ID de la institución")
    estado: str = Field(default=EstadoAnio.ACTIVO, description="activo o inactivo")

    @field_validator("estado")
    @classmethod
    def estado_valido(cls, v: str) -> str:
        return _en(v, _ESTADOS_ANIO, "El estado debe ser activo o inactivo.")

    @model_validator(mode="after")
    def fechas_validas(self):
        _fechas_en_orden(self.fecha_inicio, self.fecha_fin)
        return self


class AnioUpdate(BaseModel):
    nombre: str | None = Field(default=None, min_length=1, max_length=255)
    fecha_inicio: date | None = None
    fecha_fin: date | None = None
    institucion_id: int | None = None
    estado: str | None = None

    @field_validator("estado")
    @classmethod
    def estado_valido(cls, v: str | None) -> str | None:
        return _en(v, _ESTADOS_ANIO, "El estado debe ser activo o inactivo.")


class PeriodoCreate(BaseModel):
    """Body para crear un periodo dentro de un año (el año viene en la URL)."""

    nombre: str = Field(min_length=1, max_length=255, description="ej. Primer periodo")
    fecha_inicio: date
    fecha_fin: date

    @model_validator(mode="after")
    def fechas_validas(self):
        _fechas_en_orden(self.fecha_inicio, self.fecha_fin)
        return self


class PeriodoUpdate(BaseModel):
    nombre: str | None = Field(default=None, min_length=1, max_length=255)
    fecha_inicio: date | None = None
    fecha_fin: date | None = None


# --- Grados y grupos ---


class GradoCreate(BaseModel):
    """Body para crear un grado."""

    nombre: str = Field(min_length=1, max_length=255, description="ej. Sexto")
    nivel: str = Field(description="Nivel educativo")
    descripcion: str | None = None
    estado: str = "activo"
    institucion_id: int

    @field_validator("nivel")
    @classmethod
    def nivel_valido(cls, v: str) -> str:
        return _en(
            v,
            NivelGrado.TODOS,
            "El nivel debe ser uno de los siguientes: " + ", ".join(NivelGrado.TODOS),
        )


class GradoUpdate(BaseModel):
    nombre: str | None = Field(default=None, min_length=1, max_length=255)
    nivel: str | None = None
    descripcion: str | None = None
    estado: str | None = None
    institucion_id: int | None = None

    @field_validator("nivel")
    @classmethod
    def nivel_valido(cls, v: str | None) -> str | None:
        return _en(
            v,
            NivelGrado.TODOS,
            "El nivel debe ser uno de los siguientes: " + ", ".join(NivelGrado.TODOS),
        )


class GrupoCreate(BaseModel):
    """Body para crear un grupo."""

    nombre: str = Field(min_length=1, max_length=255, description="ej. 6-A")
    descripcion: str | None = None
    capacidad: int = Field(default=35, ge=1)
    estado: str = "activo"
    sede_id: int
    anio_id: int
    grado_id: int
    director_docente_id: int | None = None

    @field_validator("estado")
    @classmethod
    def estado_valido(cls, v: str) -> str:
        return _en(v, _ESTADOS_ACTIVO_INACTIVO, "El estado debe ser activo o inactivo.")


class GrupoUpdate(BaseModel):
    nombre: str | None = Field(default=None, min_length=1, max_length=255)
    descripcion: str | None = None
    capacidad: int | None = Field(default=None, ge=1)
    estado: str | None = None
    sede_id: int | None = None
    anio_id: int | None = None
    grado_id: int | None = None
    director_docente_id: int | None = None

    @field_validator("estado")
    @classmethod
    def estado_valido(cls, v: str | None) -> str | None:
        return _en(v, _ESTADOS_ACTIVO_INACTIVO, "El estado debe ser activo o inactivo.")


class TrasladarEstudianteRequest(BaseModel):
    """Body para trasladar un estudiante a otro grupo."""

    grupo_destino_id: int = Field(description="ID del grupo destino")


# --- Áreas y asignaturas ---


class AreaCreate(BaseModel):
    nombre: str = Field(min_length=1, max_length=255)
    descripcion: str | None = None
    color: str | None = Field(default=None, description="Color en hexadecimal, ej. #3366FF")
    institucion_id: int


class AreaUpdate(BaseModel):
    nombre: str | None = Field(default=None, min_length=1, max_length=255)
    descripcion: str | None = None
    color: str | None = None
    institucion_id: int | None = None


class AsignaturaCreate(BaseModel):
    """Body para crear una asignatura. porcentaje_area entre 0 y 100."""

    nombre: str = Field(min_length=1, max_length=255)
    porcentaje_area: float = Field(ge=0, le=100)
    area_id: int


class AsignaturaUpdate(BaseModel):
    nombre: str | None = Field(default=None, min_length=1, max_length=255)
    porcentaje_area: float | None = Field(default=None, ge=0, le=100)
    area_id: int | None = None


# --- Aulas ---


class AulaCreate(BaseModel):
    nombre: str = Field(min_length=1, max_length=255)
    tipo: str = Field(description="Salón, Laboratorio, Auditorio o Deportivo")
    capacidad: int | None = Field(default=None, ge=1)
    institucion_id: int

    @field_validator("tipo")
    @classmethod
    def tipo_valido(cls, v: str) -> str:
        return _en(v, TipoAula.TODOS, "El tipo debe ser uno de: " + ", ".join(TipoAula.TODOS))


class AulaUpdate(BaseModel):
    nombre: str | None = Field(default=None, min_length=1, max_length=255)
    tipo: str | None = None
    capacidad: int | None = Field(default=None, ge=1)
    institucion_id: int | None = None

    @field_validator("tipo")
    @classmethod
    def tipo_valido(cls, v: str | None) -> str | None:
        return _en(v, TipoAula.TODOS, "El tipo debe ser uno de: " + ", ".join(TipoAula.TODOS))


# --- Franjas horarias ---


class FranjaHorariaDatos(BaseModel):
    """Campos de una franja; la institución se toma del body o de la URL."""

    nombre: str = Field(min_length=1, max_length=255, description="ej. Primera hora")
    descripcion: str | None = None
    hora_inicio: time = Field(description="Hora de inicio HH:MM")
    hora_fin: time = Field(description="Hora de fin HH:MM")
    duracion_minutos: int = Field(default=45, ge=1)
    estado: str = EstadoFranja.ACTIVO

    @field_validator("estado")
    @classmethod
    def estado_valido(cls, v: str) -> str:
        return _en(v, EstadoFranja.TODOS, "El estado debe ser activo, inactivo o pendiente.")

    @model_validator(mode="after")
    def horas_validas(self):
        if self.hora_fin <= self.hora_inicio:
            raise ValueError("La hora de fin debe ser posterior a la hora de inicio.")
        return self


class FranjaHorariaCreate(FranjaHorariaDatos):
    institucion_id: int


class FranjaHorariaUpdate(BaseModel):
    nombre: str | None = Field(default=None, min_length=1, max_length=255)
    descripcion: str | None = None
    hora_inicio: time | None = None
    hora_fin: time | None = None
    duracion_minutos: int | None = Field(default=None, ge=1)
    estado: str | None = None

    @field_validator("estado")
    @classmethod
    def estado_valido(cls, v: str | None) -> str | None:
        return _en(v, EstadoFranja.TODOS, "El estado debe ser activo, inactivo o pendiente.")


# --- Respuestas ---


class AnioResumen(BaseModel):
    id: int
    nombre: str
    estado: str


class PeriodoItem(BaseModel):
    id: int
    nombre: str
    fecha_inicio: date
    fecha_fin: date
    anio_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    anio: AnioResumen | None = None


class AnioItem(BaseModel):
    """Año académico; ``periodos`` queda vacía si no se incluyó."""

    id: int
    nombre: str
    fecha_inicio: date
    fecha_fin: date
    estado: str
    institucion_id: int
    periodos: list[PeriodoItem] = Field(default_factory=list)
    institucion: InstitucionItem | None = None


class UsuarioDeEstudiante(BaseModel):
    nombre: str
    apellido: str
    email: str


class EstudianteEnGrupo(BaseModel):
    id: int
    codigo_estudiantil: str | None = None
    estado: str | None = None
    user: UsuarioDeEstudiante | None = None


class GradoItem(BaseModel):
    """Grado; ``grupos_count`` es null salvo que se incluyan los grupos."""

    id: int
    nombre: str
    nivel: str
    descripcion: str | None = None
    estado: str
    institucion_id: int
    grupos_count: int | None = None
    grupos: list["GrupoItem"] = Field(default_factory=list)
    institucion: InstitucionItem | None = None


class GrupoItem(BaseModel):
    """Grupo; ``estudiantes_count`` es null salvo que se incluyan los estudiantes."""

    id: int
    nombre: str
    descripcion: str | None = None
    capacidad: int
    estado: str
    sede_id: int
    anio_id: int
    grado_id: int
    director_docente_id: int | None = None
    estudiantes_count: int | None = None
    estudiantes: list[EstudianteEnGrupo] = Field(default_factory=list)
    sede: SedeItem | None = None
    grado: GradoItem | None = None
    anio: AnioItem | None = None
    director_docente: DocenteItem | None = None


class AreaItem(BaseModel):
    id: int
    nombre: str
    descripcion: str | None = None
    color: str | None = None
    institucion_id: int
    asignaturas_count: int | None = None
    asignaturas: list["AsignaturaItem"] = Field(default_factory=list)
    institucion: InstitucionItem | None = None


class AsignaturaItem(BaseModel):
    id: int
    nombre: str
    porcentaje_area: float = Field(description="Peso de la asignatura dentro del área")
    area_id: int
    area: AreaItem | None = None


class FranjaHorariaItem(BaseModel):
    """Franja horaria con las horas en formato HH:MM."""

    id: int
    nombre: str
    descripcion: str | None = None
    hora_inicio: time = Field(description="Hora de inicio HH:MM")
    hora_fin: time = Field(description="Hora de fin HH:MM")
    duracion_minutos: int
    estado: str
    institucion_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    institucion: InstitucionItem | None = None

    @field_serializer("hora_inicio", "hora_fin")
    def hora_hhmm(self, valor: time) -> str:
        return valor.strftime("%H:%M")


GradoItem.model_rebuild()
GrupoItem.model_rebuild()
AreaItem.model_rebuild()
AsignaturaItem.model_rebuild()
