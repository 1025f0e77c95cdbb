"""Modelo Asignacion: docente x asignatura x grupo x franja x día x año."""
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Identity, Index, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kampus.core.database import Base, ConMarcasTiempo, IdTipo

if TYPE_CHECKING:
    from kampus.models.anio import Anio
    from kampus.models.docente import Docente
    from kampus.models.franja_horaria import FranjaHoraria
    from kampus.models.grupo import Grupo
    from kampus.models.periodo import Periodo
    from kampus.models.subject import Asignatura


class DiaSemana:
    """Días de la semana en los que se puede programar una asignación."""
    LUNES = "lunes"
    MARTES = "martes"
    MIERCOLES = "miercoles"
    JUEVES = "jueves"
    VIERNES = "viernes"
    SABADO = "sabado"

    TODOS = (LUNES, MARTES, MIERCOLES, JUEVES, VIERNES, SABADO)


class EstadoAsignacion:
    """Valores permitidos para estado de la asignación."""
    ACTIVO = "activo"
    INACTIVO = "inactivo"

    TODOS = (ACTIVO, INACTIVO)


_SOLO_ACTIVAS = text("estado = 'activo'")

# Nombres de los índices únicos parciales; se usan para identificar el tipo
# de conflicto cuando la base de datos rechaza una inserción concurrente.
INDICE_CONFLICTO_DOCENTE = "uq_asignaciones_docente_horario_activo"
INDICE_CONFLICTO_GRUPO = "uq_asignaciones_grupo_horario_activo"


class Asignacion(ConMarcasTiempo, Base):
    """Asignación de horario. Solo puede haber una activa por docente (o grupo),
    franja, día y año académico."""

    __tablename__ = "asignaciones"
    __table_args__ = (
        Index(
            INDICE_CONFLICTO_DOCENTE,
            "docente_id", "franja_horaria_id", "dia_semana", "anio_academico_id",
            unique=True,
            postgresql_where=_SOLO_ACTIVAS,
            sqlite_where=_SOLO_ACTIVAS,
        ),
        Index(
            INDICE_CONFLICTO_GRUPO,
            "grupo_id", "franja_horaria_id", "dia_semana", "anio_academico_id",
            unique=True,
            postgresql_where=_SOLO_ACTIVAS,
            sqlite_where=_SOLO_ACTIVAS,
        ),
        Index("ix_asignaciones_anio_periodo", "anio_academico_id", "periodo_id"),
    )

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    docente_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("docentes.id", ondelete="RESTRICT"), nullable=False
    )
    asignatura_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("asignaturas.id", ondelete="RESTRICT"), nullable=False
    )
    grupo_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("grupos.id", ondelete="RESTRICT"), nullable=False
    )
    franja_horaria_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("franjas_horarias.id", ondelete="RESTRICT"), nullable=False
    )
    dia_semana: Mapped[str] = mapped_column(Text, nullable=False)
    anio_academico_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("anios.id", ondelete="RESTRICT"), nullable=False
    )
    periodo_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("periodos.id", ondelete="RESTRICT"), nullable=True
    )
    estado: Mapped[str] = mapped_column(
        Text, nullable=False, default=EstadoAsignacion.ACTIVO, server_default=text("'activo'")
    )

    docente: Mapped["Docente"] = relationship("Docente")
    asignatura: Mapped["Asignatura"] = relationship("Asignatura")
    grupo: Mapped["Grupo"] = relationship("Grupo")
    franja_horaria: Mapped["FranjaHoraria"] = relationship("FranjaHoraria")
    anio_academico: Mapped["Anio"] = relationship("Anio")
    periodo: Mapped["Periodo | None"] = relationship("Periodo")
