"""Modelos SQLAlchemy (tablas de la base de datos)."""
from kampus.models.institucion import Institucion
from kampus.models.sede import Sede
from kampus.models.role import Permiso, Rol, role_has_permissions, user_has_roles
from kampus.models.user import EstadoUsuario, Usuario
from kampus.models.token_acceso import TokenAcceso
from kampus.models.anio import Anio, EstadoAnio
from kampus.models.periodo import Periodo
from kampus.models.grado import Grado, NivelGrado
from kampus.models.docente import Docente
from kampus.models.grupo import Grupo
from kampus.models.area import Area
from kampus.models.subject import Asignatura
from kampus.models.aula import Aula, TipoAula
from kampus.models.franja_horaria import EstadoFranja, FranjaHoraria
from kampus.models.acudiente import Acudiente
from kampus.models.student import Estudiante, EstudianteAcudiente
from kampus.models.asignacion import Asignacion, DiaSemana, EstadoAsignacion
from kampus.models.idempotencia import ClaveIdempotencia

__all__ = [
    "Institucion",
    "Sede",
    "Permiso",
    "Rol",
    "role_has_permissions",
    "user_has_roles",
    "EstadoUsuario",
    "Usuario",
    "TokenAcceso",
    "Anio",
    "EstadoAnio",
    "Periodo",
    "Grado",
    "NivelGrado",
    "Docente",
    "Grupo",
    "Area",
    "Asignatura",
    "Aula",
    "TipoAula",
    "EstadoFranja",
    "FranjaHoraria",
    "Acudiente",
    "Estudiante",
    "EstudianteAcudiente",
    "Asignacion",
    "DiaSemana",
    "EstadoAsignacion",
    "ClaveIdempotencia",
]
