"""Modelo Docente (extiende un usuario)."""
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Date, ForeignKey, Identity, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo

if TYPE_CHECKING:
    from kampus.models.user import Usuario


class Docente(ConMarcasTiempo, Base):
    """Docente: datos laborales asociados 1:1 a un usuario."""

    __tablename__ = "docentes"

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    telefono: Mapped[str | None] = mapped_column(Text, nullable=True)
    especialidad: Mapped[str | None] = mapped_column(Text, nullable=True)
    fecha_contratacion: Mapped[date | None] = mapped_column(Date, nullable=True)
    salario: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)
    horario_trabajo: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped["Usuario"] = relationship("Usuario")
