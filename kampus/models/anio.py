"""Modelo Año académico (ej. 2024-2025)."""
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Date, ForeignKey, Identity, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo

if TYPE_CHECKING:
    from kampus.models.institucion import Institucion
    from kampus.models.periodo import Periodo


class EstadoAnio:
    """Valores permitidos para estado del año académico."""
    ACTIVO = "activo"
    INACTIVO = "inactivo"


class Anio(ConMarcasTiempo, Base):
    """Año académico de una institución; agrupa periodos y grupos."""

    __tablename__ = "anios"

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    fecha_inicio: Mapped[date] = mapped_column(Date, nullable=False)
    fecha_fin: Mapped[date] = mapped_column(Date, nullable=False)
    institucion_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("instituciones.id", ondelete="CASCADE"), nullable=False
    )
    estado: Mapped[str] = mapped_column(
        Text, nullable=False, default=EstadoAnio.ACTIVO, server_default=text("'activo'")
    )

    institucion: Mapped["Institucion"] = relationship("Institucion")
    periodos: Mapped[list["Periodo"]] = relationship(
        "Periodo", back_populates="anio", order_by="Periodo.fecha_inicio"
    )
