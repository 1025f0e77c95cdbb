"""Modelo Sede (ubicación física de una institución)."""
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Identity, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo

if TYPE_CHECKING:
    from kampus.models.institucion import Institucion


class Sede(ConMarcasTiempo, Base):
    """Sede de una institución."""

    __tablename__ = "sedes"

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    institucion_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("instituciones.id", ondelete="CASCADE"), nullable=False
    )
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    direccion: Mapped[str | None] = mapped_column(Text, nullable=True)
    telefono: Mapped[str | None] = mapped_column(Text, nullable=True)

    institucion: Mapped["Institucion"] = relationship("Institucion", back_populates="sedes")
