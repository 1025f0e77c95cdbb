"""Modelos Rol y Permiso (RBAC) con sus tablas de asociación."""
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Column, ForeignKey, Identity, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo

if TYPE_CHECKING:
    from kampus.models.user import Usuario


user_has_roles = Table(
    "user_has_roles",
    Base.metadata,
    Column("user_id", BigInteger, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", BigInteger, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)

role_has_permissions = Table(
    "role_has_permissions",
    Base.metadata,
    Column("role_id", BigInteger, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "permission_id",
        BigInteger,
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Permiso(ConMarcasTiempo, Base):
    """Permiso identificado por nombre, ej. crear_asignaciones, users.view.any."""

    __tablename__ = "permissions"

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    descripcion: Mapped[str | None] = mapped_column(Text, nullable=True)

    roles: Mapped[list["Rol"]] = relationship(
        "Rol", secondary=role_has_permissions, back_populates="permisos"
    )


class Rol(ConMarcasTiempo, Base):
    """Rol del usuario: Administrador, Docente, etc."""

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    permisos: Mapped[list["Permiso"]] = relationship(
        "Permiso", secondary=role_has_permissions, back_populates="roles", order_by="Permiso.id"
    )
    usuarios: Mapped[list["Usuario"]] = relationship(
        "Usuario", secondary=user_has_roles, back_populates="roles"
    )
