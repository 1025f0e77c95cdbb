"""Modelo Estudiante y asociación estudiante-acudiente."""
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Date, ForeignKey, Identity, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo

if TYPE_CHECKING:
    from kampus.models.acudiente import Acudiente
    from kampus.models.grupo import Grupo
    from kampus.models.institucion import Institucion
    from kampus.models.user import Usuario


class Estudiante(ConMarcasTiempo, Base):
    """Estudiante con código estudiantil único, asociado 1:1 a un usuario."""

    __tablename__ = "estudiantes"

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    user_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, unique=True
    )
    codigo_estudiantil: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    grupo_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("grupos.id", ondelete="SET NULL"), nullable=True
    )
    fecha_nacimiento: Mapped[date | None] = mapped_column(Date, nullable=True)
    genero: Mapped[str] = mapped_column(Text, nullable=False, default="M")
    direccion: Mapped[str | None] = mapped_column(Text, nullable=True)
    telefono: Mapped[str | None] = mapped_column(Text, nullable=True)
    institucion_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("instituciones.id", ondelete="SET NULL"), nullable=True
    )
    estado: Mapped[str] = mapped_column(
        Text, nullable=False, default="activo", server_default=text("'activo'")
    )

    user: Mapped["Usuario | None"] = relationship("Usuario")
    grupo: Mapped["Grupo | None"] = relationship("Grupo", back_populates="estudiantes")
    institucion: Mapped["Institucion | None"] = relationship("Institucion")
    acudientes: Mapped[list["Acudiente"]] = relationship(
        "Acudiente", secondary="estudiante_acudiente", viewonly=True
    )
    vinculos_acudiente: Mapped[list["EstudianteAcudiente"]] = relationship(
        "EstudianteAcudiente", cascade="all, delete-orphan"
    )


class EstudianteAcudiente(Base):
    """Tabla asociación estudiante-acudiente con el parentesco."""

    __tablename__ = "estudiante_acudiente"

    estudiante_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("estudiantes.id", ondelete="CASCADE"), primary_key=True
    )
    acudiente_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("acudientes.id", ondelete="CASCADE"), primary_key=True
    )
    parentesco: Mapped[str | None] = mapped_column(Text, nullable=True)
