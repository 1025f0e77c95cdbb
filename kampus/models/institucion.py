"""Modelo Institución (inquilino principal del sistema)."""
from typing import TYPE_CHECKING

from sqlalchemy import Identity, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo

if TYPE_CHECKING:
    from kampus.models.sede import Sede


class Institucion(ConMarcasTiempo, Base):
    """Institución educativa: agrupa sedes, años, grados, áreas, aulas y franjas."""

    __tablename__ = "instituciones"

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    siglas: Mapped[str | None] = mapped_column(Text, nullable=True)
    slogan: Mapped[str | None] = mapped_column(Text, nullable=True)
    dane: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolucion_aprobacion: Mapped[str | None] = mapped_column(Text, nullable=True)
    direccion: Mapped[str | None] = mapped_column(Text, nullable=True)
    telefono: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    rector: Mapped[str | None] = mapped_column(Text, nullable=True)

    sedes: Mapped[list["Sede"]] = relationship(
        "Sede", back_populates="institucion", cascade="all, delete-orphan", passive_deletes=True
    )
