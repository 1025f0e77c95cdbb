"""Modelo Área (agrupa asignaturas)."""
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Identity, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo

if TYPE_CHECKING:
    from kampus.models.institucion import Institucion
    from kampus.models.subject import Asignatura


class Area(ConMarcasTiempo, Base):
    """Área: Matemáticas, Ciencias Naturales, etc."""

    __tablename__ = "areas"

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    descripcion: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str | None] = mapped_column(Text, nullable=True)
    institucion_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("instituciones.id", ondelete="CASCADE"), nullable=False
    )

    institucion: Mapped["Institucion"] = relationship("Institucion")
    asignaturas: Mapped[list["Asignatura"]] = relationship(
        "Asignatura", back_populates="area", order_by="Asignatura.nombre", passive_deletes=True
    )
