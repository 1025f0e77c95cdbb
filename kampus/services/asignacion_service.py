"""Servicio de asignaciones: validación de referencias y detección de conflictos.

Una asignación activa ocupa dos llaves de horario: (docente, franja, día, año)
y (grupo, franja, día, año). Antes de escribir se busca una asignación activa
que ocupe alguna de las dos; además, los índices únicos parciales de la tabla
rechazan la escritura si otra petición concurrente ganó la carrera, y ese
rechazo se traduce al mismo ConflictoHorario.
"""
import logging
from typing import Any

from sqlalchemy import Select, and_, case, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from kampus.core.errores import ConflictoHorario, ErrorValidacion
from kampus.models import (
    Anio,
    Asignacion,
    Asignatura,
    DiaSemana,
    Docente,
    EstadoAsignacion,
    FranjaHoraria,
    Grupo,
    Periodo,
    Sede,
)
from kampus.models.asignacion import INDICE_CONFLICTO_DOCENTE, INDICE_CONFLICTO_GRUPO
from kampus.resources import INCLUIR_ASIGNACION, asignacion_resource
from kampus.schemas.asignacion import asignacion_json
from kampus.services.crud import obtener, verificar_referencias

logger = logging.getLogger(__name__)

CONFLICTO_DOCENTE = "docente"
CONFLICTO_GRUPO = "grupo"

MENSAJES_CONFLICTO = {
    CONFLICTO_DOCENTE: "El docente ya tiene una asignación en este horario",
    CONFLICTO_GRUPO: "El grupo ya tiene una asignación en este horario",
}

CAMPOS_ASIGNACION = (
    "docente_id",
    "asignatura_id",
    "grupo_id",
    "franja_horaria_id",
    "dia_semana",
    "anio_academico_id",
    "periodo_id",
    "estado",
)

# Orden lunes..sábado para los horarios por grupo y por docente.
ORDEN_DIA = case(
    {dia: i for i, dia in enumerate(DiaSemana.TODOS)},
    value=Asignacion.dia_semana,
    else_=len(DiaSemana.TODOS),
)


async def validar_referencias(db: AsyncSession, datos: dict[str, Any]) -> None:
    """422 si alguna clave foránea no existe o el periodo no es del año indicado."""
    await verificar_referencias(
        db,
        [
            ("docente_id", Docente, datos["docente_id"], "El docente seleccionado no existe."),
            ("asignatura_id", Asignatura, datos["asignatura_id"], "La asignatura seleccionada no existe."),
            ("grupo_id", Grupo, datos["grupo_id"], "El grupo seleccionado no existe."),
            (
                "franja_horaria_id",
                FranjaHoraria,
                datos["franja_horaria_id"],
                "La franja horaria seleccionada no existe.",
            ),
            ("anio_academico_id", Anio, datos["anio_academico_id"], "El año académico seleccionado no existe."),
            ("periodo_id", Periodo, datos.get("periodo_id"), "El período seleccionado no existe."),
        ],
    )
    periodo_id = datos.get("periodo_id")
    if periodo_id is not None:
        periodo = await db.get(Periodo, periodo_id)
        if periodo.anio_id != datos["anio_academico_id"]:
            raise ErrorValidacion.campo(
                "periodo_id",
                "El período seleccionado no pertenece al año académico especificado.",
            )


def _misma_llave(tipo: str, datos: dict[str, Any]):
    columna = Asignacion.docente_id if tipo == CONFLICTO_DOCENTE else Asignacion.grupo_id
    return and_(
        columna == datos[f"{tipo}_id"],
        Asignacion.franja_horaria_id == datos["franja_horaria_id"],
        Asignacion.dia_semana == datos["dia_semana"],
        Asignacion.anio_academico_id == datos["anio_academico_id"],
        Asignacion.estado == EstadoAsignacion.ACTIVO,
    )


async def buscar_conflicto(
    db: AsyncSession,
    datos: dict[str, Any],
    excluir_id: int | None = None,
) -> tuple[str, Asignacion] | None:
    """Primera asignación activa que choca con ``datos`` (docente antes que grupo).

    Una asignación inactiva no ocupa horario, así que no choca con nada.
    """
    if datos.get("estado", EstadoAsignacion.ACTIVO) != EstadoAsignacion.ACTIVO:
        return None
    for tipo in (CONFLICTO_DOCENTE, CONFLICTO_GRUPO):
        q = (
            select(Asignacion)
            .where(_misma_llave(tipo, datos))
            .options(*INCLUIR_ASIGNACION.opciones(Asignacion))
            .order_by(Asignacion.id)
            .limit(1)
        )
        if excluir_id is not None:
            q = q.where(Asignacion.id != excluir_id)
        existente = (await db.execute(q)).scalar_one_or_none()
        if existente is not None:
            return tipo, existente
    return None


def _conflicto(tipo: str, existente: Asignacion | None) -> ConflictoHorario:
    return ConflictoHorario(
        tipo,
        MENSAJES_CONFLICTO[tipo],
        asignacion_json(asignacion_resource(existente, INCLUIR_ASIGNACION)) if existente is not None else None,
    )


def _tipo_por_integridad(error: IntegrityError) -> str | None:
    """Tipo de conflicto según el índice (PostgreSQL) o las columnas (SQLite) rechazadas."""
    texto = str(error.orig)
    if INDICE_CONFLICTO_DOCENTE in texto or "asignaciones.docente_id" in texto:
        return CONFLICTO_DOCENTE
    if INDICE_CONFLICTO_GRUPO in texto or "asignaciones.grupo_id" in texto:
        return CONFLICTO_GRUPO
    return None


async def _guardar(db: AsyncSession, datos: dict[str, Any]) -> None:
    try:
        await db.flush()
    except IntegrityError as e:
        tipo = _tipo_por_integridad(e)
        if tipo is None:
            raise
        await db.rollback()
        logger.info("Conflicto de %s detectado por la base de datos", tipo)
        encontrado = await buscar_conflicto(db, datos)
        raise _conflicto(tipo, encontrado[1] if encontrado else None) from e


async def _verificar(db: AsyncSession, datos: dict[str, Any], excluir_id: int | None = None) -> None:
    await validar_referencias(db, datos)
    encontrado = await buscar_conflicto(db, datos, excluir_id)
    if encontrado is not None:
        raise _conflicto(*encontrado)


async def crear_asignacion(db: AsyncSession, datos: dict[str, Any]) -> Asignacion:
    """Crea la asignación o lanza ErrorValidacion / ConflictoHorario."""
    await _verificar(db, datos)
    asignacion = Asignacion(**datos)
    db.add(asignacion)
    await _guardar(db, datos)
    logger.info(
        "Asignación %s creada: docente=%s grupo=%s franja=%s %s",
        asignacion.id,
        asignacion.docente_id,
        asignacion.grupo_id,
        asignacion.franja_horaria_id,
        asignacion.dia_semana,
    )
    return asignacion


async def actualizar_asignacion(
    db: AsyncSession,
    asignacion: Asignacion,
    cambios: dict[str, Any],
) -> Asignacion:
    """Aplica los cambios; el chequeo de conflictos excluye a la propia asignación."""
    datos = {campo: getattr(asignacion, campo) for campo in CAMPOS_ASIGNACION}
    datos.update(cambios)
    await _verificar(db, datos, excluir_id=asignacion.id)
    for campo, valor in cambios.items():
        setattr(asignacion, campo, valor)
    await _guardar(db, datos)
    return asignacion


def consulta_asignaciones(filtros: dict[str, Any]) -> Select:
    """SELECT de asignaciones con los filtros no nulos aplicados."""
    q = select(Asignacion).options(*INCLUIR_ASIGNACION.opciones(Asignacion))
    for campo in (
        "docente_id",
        "asignatura_id",
        "grupo_id",
        "anio_academico_id",
        "periodo_id",
        "estado",
        "dia_semana",
    ):
        valor = filtros.get(campo)
        if valor is not None:
            q = q.where(getattr(Asignacion, campo) == valor)
    institucion_id = filtros.get("institucion_id")
    if institucion_id is not None:
        q = (
            q.join(Grupo, Grupo.id == Asignacion.grupo_id)
            .join(Sede, Sede.id == Grupo.sede_id)
            .where(Sede.institucion_id == institucion_id)
        )
    return q


async def horario(db: AsyncSession, columna, valor: int) -> list[Asignacion]:
    """Asignaciones activas de un grupo o docente, de lunes a sábado y por franja."""
    q = (
        select(Asignacion)
        .join(FranjaHoraria, FranjaHoraria.id == Asignacion.franja_horaria_id)
        .where(columna == valor, Asignacion.estado == EstadoAsignacion.ACTIVO)
        .options(*INCLUIR_ASIGNACION.opciones(Asignacion))
        .order_by(ORDEN_DIA, FranjaHoraria.hora_inicio, Asignacion.id)
    )
    return list((await db.execute(q)).scalars().all())


async def detectar_conflictos(db: AsyncSession) -> dict[str, list[dict[str, Any]]]:
    """Asignaciones activas que comparten llave de horario con otra activa.

    Con los índices únicos parciales no deberían existir; sirve para auditar
    datos previos a los índices o cargados por otras herramientas.
    """
    otra = aliased(Asignacion)
    resultado: dict[str, list[dict[str, Any]]] = {}
    for tipo, columna, columna_otra in (
        (CONFLICTO_DOCENTE, Asignacion.docente_id, otra.docente_id),
        (CONFLICTO_GRUPO, Asignacion.grupo_id, otra.grupo_id),
    ):
        choca = (
            select(otra.id)
            .where(
                otra.id != Asignacion.id,
                otra.estado == EstadoAsignacion.ACTIVO,
                columna_otra == columna,
                otra.franja_horaria_id == Asignacion.franja_horaria_id,
                otra.dia_semana == Asignacion.dia_semana,
                otra.anio_academico_id == Asignacion.anio_academico_id,
            )
            .exists()
        )
        q = (
            select(Asignacion)
            .where(Asignacion.estado == EstadoAsignacion.ACTIVO, choca)
            .options(*INCLUIR_ASIGNACION.opciones(Asignacion))
            .order_by(Asignacion.id)
        )
        filas = (await db.execute(q)).scalars().all()
        resultado[f"conflictos_{tipo}"] = [
            {"asignacion": asignacion_resource(a, INCLUIR_ASIGNACION), "tipo": tipo} for a in filas
        ]
    return resultado


async def recargar(db: AsyncSession, asignacion_id: int) -> Asignacion | None:
    return await obtener(db, Asignacion, asignacion_id, INCLUIR_ASIGNACION)
