"""Modelo Acudiente (responsable de uno o más estudiantes)."""
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Identity, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo

if TYPE_CHECKING:
    from kampus.models.student import Estudiante
    from kampus.models.user import Usuario


class Acudiente(ConMarcasTiempo, Base):
    """Acudiente con usuario opcional."""

    __tablename__ = "acudientes"

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    user_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, unique=True
    )
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    telefono: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped["Usuario | None"] = relationship("Usuario")
    estudiantes: Mapped[list["Estudiante"]] = relationship(
        "Estudiante", secondary="estudiante_acudiente", viewonly=True
    )
