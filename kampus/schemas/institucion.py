"""Esquemas para instituciones y sedes: bodies de entrada y modelos de respuesta."""
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class InstitucionCreate(BaseModel):
    """Body para crear una institución."""

    nombre: str = Field(description="Nombre de la institución", min_length=1, max_length=255)
    siglas: str | None = Field(default=None, max_length=10, description="Siglas (únicas)")
    slogan: str | None = None
    dane: str | None = Field(default=None, description="Código DANE")
    resolucion_aprobacion: str | None = None
    direccion: str | None = None
    telefono: str | None = None
    email: EmailStr | None = None
    rector: str | None = None


class InstitucionUpdate(BaseModel):
    """Body para actualizar una institución. Campos opcionales."""

    nombre: str | None = Field(default=None, min_length=1, max_length=255)
    siglas: str | None = Field(default=None, max_length=10)
    slogan: str | None = None
    dane: str | None = None
    resolucion_aprobacion: str | None = None
    direccion: str | None = None
    telefono: str | None = None
    email: EmailStr | None = None
    rector: str | None = None


class SedeCreate(BaseModel):
    """Body para crear una sede."""

    institucion_id: int = Field(description="ID de la institución")
    nombre: str = Field(min_length=1, max_length=255, description="Nombre de la sede")
    direccion: str = Field(min_length=1, max_length=500, description="Dirección")
    telefono: str | None = Field(default=None, max_length=20)


class SedeUpdate(BaseModel):
    institucion_id: int | None = None
    nombre: str | None = Field(default=None, min_length=1, max_length=255)
    direccion: str | None = Field(default=None, min_length=1, max_length=500)
    telefono: str | None = Field(default=None, max_length=20)


# --- Respuestas ---


class InstitucionItem(BaseModel):
    """Institución en respuestas. ``sedes`` queda vacía si no se incluyó."""

    id: int
    nombre: str
    siglas: str | None = None
    slogan: str | None = None
    dane: str | None = None
    resolucion_aprobacion: str | None = None
    direccion: str | None = None
    telefono: str | None = None
    email: str | None = None
    rector: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    sedes: list["SedeItem"] = Field(default_factory=list)


class SedeItem(BaseModel):
    id: int
    institucion_id: int
    nombre: str
    direccion: str | None = None
    telefono: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    institucion: InstitucionItem | None = None


class InstitucionResumen(BaseModel):
    id: int
    nombre: str


InstitucionItem.model_rebuild()
SedeItem.model_rebuild()
