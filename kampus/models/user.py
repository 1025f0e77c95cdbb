"""Modelo Usuario (RBAC)."""
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Identity, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo
from kampus.models.role import user_has_roles

if TYPE_CHECKING:
    from kampus.models.institucion import Institucion
    from kampus.models.role import Rol


class EstadoUsuario:
    """Valores permitidos para estado del usuario."""
    ACTIVO = "activo"
    INACTIVO = "inactivo"


class Usuario(ConMarcasTiempo, Base):
    """Usuario del sistema (administrativos, docentes, estudiantes, acudientes)."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    apellido: Mapped[str] = mapped_column(Text, nullable=False)
    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    tipo_documento: Mapped[str | None] = mapped_column(Text, nullable=True)
    numero_documento: Mapped[str | None] = mapped_column(Text, nullable=True)
    institucion_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("instituciones.id", ondelete="RESTRICT"), nullable=False
    )
    estado: Mapped[str] = mapped_column(
        Text, nullable=False, default=EstadoUsuario.ACTIVO, server_default=text("'activo'")
    )

    institucion: Mapped["Institucion"] = relationship("Institucion")
    roles: Mapped[list["Rol"]] = relationship(
        "Rol", secondary=user_has_roles, back_populates="usuarios", order_by="Rol.id"
    )

    def tiene_permiso(self, permiso: str) -> bool:
        """Requiere roles.permisos cargados (selectinload) antes de llamarse."""
        return any(p.nombre == permiso for rol in self.roles for p in rol.permisos)
