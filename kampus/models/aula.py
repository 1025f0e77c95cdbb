"""Modelo Aula."""
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Identity, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo

if TYPE_CHECKING:
    from kampus.models.institucion import Institucion


class TipoAula:
    """Tipos de aula permitidos."""
    SALON = "Salón"
    LABORATORIO = "Laboratorio"
    AUDITORIO = "Auditorio"
    DEPORTIVO = "Deportivo"

    TODOS = (SALON, LABORATORIO, AUDITORIO, DEPORTIVO)


class Aula(ConMarcasTiempo, Base):
    """Espacio físico de una institución con tipo y capacidad."""

    __tablename__ = "aulas"

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    institucion_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("instituciones.id", ondelete="CASCADE"), nullable=False
    )
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    tipo: Mapped[str] = mapped_column(Text, nullable=False)
    capacidad: Mapped[int | None] = mapped_column(Integer, nullable=True)

    institucion: Mapped["Institucion"] = relationship("Institucion")
