"""Modelo FranjaHoraria (bloque de horario de una institución)."""
from datetime import time
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Identity, Integer, Text, Time, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo

if TYPE_CHECKING:
    from kampus.models.institucion import Institucion


class EstadoFranja:
    """Valores permitidos para estado de la franja."""
    ACTIVO = "activo"
    INACTIVO = "inactivo"
    PENDIENTE = "pendiente"

    TODOS = (ACTIVO, INACTIVO, PENDIENTE)


class FranjaHoraria(ConMarcasTiempo, Base):
    """Franja horaria: ej. Primera hora 07:00-07:45."""

    __tablename__ = "franjas_horarias"
    __table_args__ = (
        UniqueConstraint(
            "institucion_id", "hora_inicio", "hora_fin", name="uq_franjas_institucion_horas"
        ),
    )

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    institucion_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("instituciones.id", ondelete="CASCADE"), nullable=False
    )
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    descripcion: Mapped[str | None] = mapped_column(Text, nullable=True)
    hora_inicio: Mapped[time] = mapped_column(Time, nullable=False)
    hora_fin: Mapped[time] = mapped_column(Time, nullable=False)
    duracion_minutos: Mapped[int] = mapped_column(Integer, nullable=False, default=45)
    estado: Mapped[str] = mapped_column(
        Text, nullable=False, default=EstadoFranja.ACTIVO, server_default=text("'activo'")
    )

    institucion: Mapped["Institucion"] = relationship("Institucion")
