"""Esquemas de docentes, estudiantes y acudientes.

Docentes y estudiantes se crean junto con su usuario: el body lleva los datos
personales (nombre, apellido, email, username, password) y los propios.
"""
from datetime import date

from pydantic import BaseModel, EmailStr, Field, field_validator

from kampus.schemas.usuario import validar_estado

_GENEROS = ("M", "F", "O")


class DatosUsuario(BaseModel):
    nombre: str = Field(min_length=1, max_length=255)
    apellido: str = Field(min_length=1, max_length=255)
    email: EmailStr
    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=8)
    tipo_documento: str | None = None
    numero_documento: str | None = None
    institucion_id: int
    estado: str = "activo"

    @field_validator("estado")
    @classmethod
    def estado_valido(cls, v: str) -> str:
        return validar_estado(v)


class DatosUsuarioUpdate(BaseModel):
    nombre: str | None = Field(default=None, min_length=1, max_length=255)
    apellido: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    username: str | None = Field(default=None, min_length=1, max_length=255)
    password: str | None = Field(default=None, min_length=8)
    tipo_documento: str | None = None
    numero_documento: str | None = None
    institucion_id: int | None = None
    estado: str | None = None

    @field_validator("estado")
    @classmethod
    def estado_valido(cls, v: str | None) -> str | None:
        return validar_estado(v)


class DocenteCreate(DatosUsuario):
    """Body para crear un docente y su usuario."""

    telefono: str | None = Field(default=None, max_length=20)
    especialidad: str | None = Field(default=None, max_length=255)
    fecha_contratacion: date | None = None
    salario: float | None = Field(default=None, ge=0)
    horario_trabajo: str | None = Field(default=None, max_length=255)


class DocenteUpdate(DatosUsuarioUpdate):
    telefono: str | None = Field(default=None, max_length=20)
    especialidad: str | None = Field(default=None, max_length=255)
    fecha_contratacion: date | None = None
    salario: float | None = Field(default=None, ge=0)
    horario_trabajo: str | None = Field(default=None, max_length=255)


class VinculoAcudiente(BaseModel):
    acudiente_id: int
    parentesco: str | None = Field(default=None, description="ej. Madre, Padre, Tío")


class EstudianteCreate(DatosUsuario):
    """Body para crear un estudiante y su usuario."""

    codigo_estudiantil: str = Field(min_length=1, max_length=50)
    grupo_id: int | None = None
    fecha_nacimiento: date | None = None
    genero: str = "M"
    direccion: str | None = None
    telefono: str | None = None
    acudientes: list[VinculoAcudiente] = Field(default_factory=list)

    @field_validator("genero")
    @classmethod
    def genero_valido(cls, v: str) -> str:
        if v not in _GENEROS:
            raise ValueError("El género debe ser M, F u O")
        return v


class EstudianteUpdate(DatosUsuarioUpdate):
    codigo_estudiantil: str | None = Field(default=None, min_length=1, max_length=50)
    grupo_id: int | None = None
    fecha_nacimiento: date | None = None
    genero: str | None = None
    direccion: str | None = None
    telefono: str | None = None
    acudientes: list[VinculoAcudiente] | None = Field(
        default=None, description="Reemplaza los acudientes actuales"
    )

    @field_validator("genero")
    @classmethod
    def genero_valido(cls, v: str | None) -> str | None:
        if v is not None and v not in _GENEROS:
            raise ValueError("El género debe ser M, F u O")
        return v


class AcudienteCreate(BaseModel):
    nombre: str = Field(min_length=1, max_length=255)
    telefono: str | None = Field(default=None, max_length=50)
    email: EmailStr | None = None
    user_id: int | None = None


class AcudienteUpdate(BaseModel):
    nombre: str | None = Field(default=None, min_length=1, max_length=255)
    telefono: str | None = Field(default=None, max_length=50)
    email: EmailStr | None = None
    user_id: int | None = None
