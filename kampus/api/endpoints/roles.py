"""Endpoints de consulta de roles y sus permisos."""
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kampus.api.endpoints.auth import require_permission
from kampus.core.database import get_db
from kampus.models import Rol, Usuario
from kampus.resources import Incluir, permiso_resource, rol_resource
from kampus.services.crud import obtener_o_404

router = APIRouter(prefix="/roles", tags=["roles"])

INCLUIR_ROL = Incluir.de("permisos")


@router.get("", summary="Listar roles")
async def listar_roles(
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_roles")),
):
    """Todos los roles con sus permisos (sin paginar)."""
    result = await db.execute(select(Rol).options(*INCLUIR_ROL.opciones(Rol)).order_by(Rol.id))
    return {"data": [rol_resource(r, INCLUIR_ROL) for r in result.scalars().all()]}


@router.get("/{role_id}/permissions", summary="Permisos de un rol")
async def permisos_de_rol(
    role_id: int,
    db: AsyncSession = Depends(get_db),
    _: Usuario = Depends(require_permission("ver_permisos")),
):
    rol = await obtener_o_404(db, Rol, role_id, "Rol no encontrado", INCLUIR_ROL)
    return {"data": [permiso_resource(p) for p in rol.permisos]}
