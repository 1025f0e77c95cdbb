"""Modelo Grupo (cohorte de estudiantes de un grado en un año)."""
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Identity, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo

if TYPE_CHECKING:
    from kampus.models.anio import Anio
    from kampus.models.docente import Docente
    from kampus.models.grado import Grado
    from kampus.models.sede import Sede
    from kampus.models.student import Estudiante


class Grupo(ConMarcasTiempo, Base):
    """Grupo: ej. 6-A; pertenece a un año, un grado y una sede, con director opcional."""

    __tablename__ = "grupos"

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    descripcion: Mapped[str | None] = mapped_column(Text, nullable=True)
    capacidad: Mapped[int] = mapped_column(Integer, nullable=False, default=35)
    estado: Mapped[str] = mapped_column(
        Text, nullable=False, default="activo", server_default=text("'activo'")
    )
    sede_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("sedes.id", ondelete="RESTRICT"), nullable=False
    )
    anio_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("anios.id", ondelete="RESTRICT"), nullable=False
    )
    grado_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("grados.id", ondelete="RESTRICT"), nullable=False
    )
    director_docente_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("docentes.id", ondelete="SET NULL"), nullable=True
    )

    sede: Mapped["Sede"] = relationship("Sede")
    anio: Mapped["Anio"] = relationship("Anio")
    grado: Mapped["Grado"] = relationship("Grado", back_populates="grupos")
    director_docente: Mapped["Docente | None"] = relationship("Docente")
    estudiantes: Mapped[list["Estudiante"]] = relationship("Estudiante", back_populates="grupo")
