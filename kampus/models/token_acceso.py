"""Modelo TokenAcceso: registro de los JWT emitidos para poder revocarlos."""
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Identity, Text
from sqlalchemy.orm import Mapped, mapped_column

from kampus.core.database import Base, ConMarcasTiempo, IdTipo


class TokenAcceso(ConMarcasTiempo, Base):
    """Token emitido en login o renovación; borrarlo revoca el JWT."""

    __tablename__ = "tokens_acceso"

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    jti: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    expira_en: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
