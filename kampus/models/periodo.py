"""Modelo Periodo (subdivisión de un año académico)."""
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Date, ForeignKey, Identity, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo

if TYPE_CHECKING:
    from kampus.models.anio import Anio


class Periodo(ConMarcasTiempo, Base):
    """Periodo académico: ej. Primer periodo, pertenece a un año."""

    __tablename__ = "periodos"

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    fecha_inicio: Mapped[date] = mapped_column(Date, nullable=False)
    fecha_fin: Mapped[date] = mapped_column(Date, nullable=False)
    anio_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("anios.id", ondelete="RESTRICT"), nullable=False
    )

    anio: Mapped["Anio"] = relationship("Anio", back_populates="periodos")
