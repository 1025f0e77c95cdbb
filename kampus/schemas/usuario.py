"""Esquemas de usuarios, roles y docentes: bodies de entrada y modelos de respuesta."""
from datetime import date

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator

from kampus.models.user import EstadoUsuario
from kampus.schemas.institucion import InstitucionItem, InstitucionResumen

_ESTADOS = (EstadoUsuario.ACTIVO, EstadoUsuario.INACTIVO)


def validar_estado(v: str | None) -> str | None:
    if v is not None and v not in _ESTADOS:
        raise ValueError("El estado debe ser activo o inactivo")
    return v


class UsuarioCreate(BaseModel):
    """Body para crear un usuario con sus roles."""

    nombre: str = Field(description="Nombre", min_length=1, max_length=255)
    apellido: str = Field(description="Apellido", min_length=1, max_length=255)
    email: EmailStr = Field(description="Correo electrónico (único)")
    username: str = Field(description="Nombre de usuario (único)", min_length=1, max_length=255)
    password: str = Field(description="Contraseña en texto", min_length=8)
    tipo_documento: str | None = Field(default=None, description="Tipo de documento")
    numero_documento: str | None = Field(default=None, description="Número de documento")
    institucion_id: int = Field(description="ID de la institución")
    estado: str = Field(default=EstadoUsuario.ACTIVO, description="activo o inactivo")
    roles: list[int] = Field(default_factory=list, description="IDs de los roles a asignar")

    @field_validator("estado")
    @classmethod
    def estado_valido(cls, v: str) -> str:
        return validar_estado(v)


class UsuarioUpdate(BaseModel):
    """Body para actualizar un usuario. Todos los campos son opcionales."""

    nombre: str | None = Field(default=None, min_length=1, max_length=255)
    apellido: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = Field(default=None, description="Si no se envía, no se modifica.")
    username: str | None = Field(default=None, min_length=1, max_length=255)
    password: str | None = Field(default=None, min_length=8, description="Nueva contraseña.")
    tipo_documento: str | None = None
    numero_documento: str | None = None
    institucion_id: int | None = None
    estado: str | None = Field(default=None, description="activo o inactivo")
    roles: list[int] | None = Field(default=None, description="Reemplaza los roles actuales.")

    @field_validator("estado")
    @classmethod
    def estado_valido(cls, v: str | None) -> str | None:
        return validar_estado(v)


class AsignarRolesRequest(BaseModel):
    """Body para sincronizar los roles de un usuario."""

    roles: list[int] = Field(
        description="IDs de los roles; reemplaza la asignación actual",
        validation_alias=AliasChoices("roles", "role_ids"),
    )


# --- Respuestas ---


class PermisoItem(BaseModel):
    id: int
    nombre: str = Field(description="ej. crear_asignaciones, users.view.any")
    descripcion: str | None = None


class RolItem(BaseModel):
    """Rol con sus permisos (vacío si no se incluyeron)."""

    id: int
    nombre: str
    permissions: list[PermisoItem] = Field(default_factory=list)


class UsuarioItem(BaseModel):
    """Usuario en respuestas; nunca incluye la contraseña ni su hash."""

    id: int
    nombre: str
    apellido: str
    username: str
    email: str
    tipo_documento: str | None = None
    numero_documento: str | None = None
    estado: str
    institucion_id: int
    roles: list[RolItem] = Field(default_factory=list)
    institucion: InstitucionItem | None = None


class DocenteItem(BaseModel):
    """Docente con los datos personales de su usuario aplanados.

    nombre, apellido, email y estado son null si el usuario no se incluyó.
    """

    id: int
    user_id: int
    nombre: str | None = None
    apellido: str | None = None
    email: str | None = None
    estado: str | None = None
    institucion: InstitucionResumen | None = None
    telefono: str | None = None
    especialidad: str | None = None
    fecha_contratacion: date | None = None
    salario: float | None = None
    horario_trabajo: str | None = None
    user: UsuarioItem | None = None
