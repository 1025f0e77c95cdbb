"""Modelo Asignatura."""
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Identity, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo

if TYPE_CHECKING:
    from kampus.models.area import Area


class Asignatura(ConMarcasTiempo, Base):
    """Asignatura de un área con su peso porcentual dentro del área."""

    __tablename__ = "asignaturas"

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    porcentaje_area: Mapped[float] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=False)
    area_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("areas.id", ondelete="CASCADE"), nullable=False
    )

    area: Mapped["Area"] = relationship("Area", back_populates="asignaturas")
