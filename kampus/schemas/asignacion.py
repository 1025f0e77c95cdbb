"""Esquemas para asignaciones de horario: bodies de entrada y modelos de respuesta."""
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from kampus.models.asignacion import DiaSemana, EstadoAsignacion
from kampus.schemas.academico import AnioItem, AsignaturaItem, FranjaHorariaItem, GrupoItem, PeriodoItem
from kampus.schemas.usuario import DocenteItem


def _dia_valido(v: str | None) -> str | None:
    if v is not None and v not in DiaSemana.TODOS:
        raise ValueError("El día de la semana debe ser válido.")
    return v


def _estado_valido(v: str | None) -> str | None:
    if v is not None and v not in EstadoAsignacion.TODOS:
        raise ValueError("El estado debe ser activo o inactivo.")
    return v


class AsignacionCreate(BaseModel):
    """Body para crear una asignación: docente, asignatura y grupo en una franja y día."""

    docente_id: int = Field(description="ID del docente")
    asignatura_id: int = Field(description="ID de la asignatura")
    grupo_id: int = Field(description="ID del grupo")
    franja_horaria_id: int = Field(description="ID de la franja horaria")
    dia_semana: str = Field(description="lunes, martes, miercoles, jueves, viernes o sabado")
    anio_academico_id: int = Field(description="ID del año académico")
    periodo_id: int | None = Field(default=None, description="ID del periodo (del mismo año)")
    estado: str = Field(default=EstadoAsignacion.ACTIVO, description="activo o inactivo")

    @field_validator("dia_semana")
    @classmethod
    def dia_semana_valido(cls, v: str) -> str:
        return _dia_valido(v)

    @field_validator("estado")
    @classmethod
    def estado_valido(cls, v: str) -> str:
        return _estado_valido(v)


class AsignacionUpdate(BaseModel):
    """Body para actualizar una asignación. Los campos no enviados se conservan."""

    docente_id: int | None = None
    asignatura_id: int | None = None
    grupo_id: int | None = None
    franja_horaria_id: int | None = None
    dia_semana: str | None = None
    anio_academico_id: int | None = None
    periodo_id: int | None = None
    estado: str | None = None

    @field_validator("dia_semana")
    @classmethod
    def dia_semana_valido(cls, v: str | None) -> str | None:
        return _dia_valido(v)

    @field_validator("estado")
    @classmethod
    def estado_valido(cls, v: str | None) -> str | None:
        return _estado_valido(v)


# --- Respuestas ---


class AsignacionItem(BaseModel):
    """Asignación con sus relaciones incluidas y nombres calculados.

    Las relaciones que no se cargaron se omiten de la respuesta; los nombres
    calculados son null en ese caso.
    """

    id: int
    docente_id: int
    asignatura_id: int
    grupo_id: int
    franja_horaria_id: int
    dia_semana: str
    anio_academico_id: int
    periodo_id: int | None = None
    estado: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    nombre_docente: str | None = Field(default=None, description="Nombre y apellido del docente")
    nombre_asignatura: str | None = None
    nombre_grupo: str | None = None
    docente: DocenteItem | None = None
    asignatura: AsignaturaItem | None = None
    grupo: GrupoItem | None = None
    franja_horaria: FranjaHorariaItem | None = None
    anio_academico: AnioItem | None = None
    periodo: PeriodoItem | None = None


class ConflictoItem(BaseModel):
    asignacion: AsignacionItem
    tipo: str = Field(description="docente o grupo")


class ConflictosResponse(BaseModel):
    """Auditoría de asignaciones activas que comparten clave."""

    conflictos_docente: list[ConflictoItem]
    conflictos_grupo: list[ConflictoItem]


def asignacion_json(datos: dict) -> dict:
    """Asignación ya transformada, lista para ``JSONResponse`` o para guardar."""
    return AsignacionItem.model_validate(datos).model_dump(mode="json", exclude_unset=True)
