"""Modelo Grado (ej. Sexto, Once) con su nivel educativo."""
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Identity, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo

if TYPE_CHECKING:
    from kampus.models.grupo import Grupo
    from kampus.models.institucion import Institucion


class NivelGrado:
    """Niveles educativos disponibles para un grado."""
    PREESCOLAR = "Preescolar"
    BASICA_PRIMARIA = "Básica Primaria"
    BASICA_SECUNDARIA = "Básica Secundaria"
    EDUCACION_MEDIA = "Educación Media"

    TODOS = (PREESCOLAR, BASICA_PRIMARIA, BASICA_SECUNDARIA, EDUCACION_MEDIA)


class Grado(ConMarcasTiempo, Base):
    """Grado de una institución; agrupa grupos."""

    __tablename__ = "grados"
    __table_args__ = (
        UniqueConstraint("institucion_id", "nombre", name="uq_grados_institucion_nombre"),
    )

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    nivel: Mapped[str] = mapped_column(Text, nullable=False)
    descripcion: Mapped[str | None] = mapped_column(Text, nullable=True)
    estado: Mapped[str] = mapped_column(
        Text, nullable=False, default="activo", server_default=text("'activo'")
    )
    institucion_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("instituciones.id", ondelete="CASCADE"), nullable=False
    )

    institucion: Mapped["Institucion"] = relationship("Institucion")
    grupos: Mapped[list["Grupo"]] = relationship("Grupo", back_populates="grado")
