"""Modelo ClaveIdempotencia: respuesta guardada por cada Idempotency-Key."""
from sqlalchemy import BigInteger, ForeignKey, Identity, Integer, JSON, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from kampus.core.database import Base, ConMarcasTiempo, IdTipo


class ClaveIdempotencia(ConMarcasTiempo, Base):
    """Resultado de una creación identificada por la clave que envió el cliente."""

    __tablename__ = "claves_idempotencia"
    __table_args__ = (UniqueConstraint("user_id", "clave", name="uq_claves_idempotencia_user_clave"),)

    id: Mapped[int] = mapped_column(IdTipo, Identity(always=True), primary_key=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    clave: Mapped[str] = mapped_column(Text, nullable=False)
    status_code: Mapped[int] = mapped_column(Integer, nullable=False)
    respuesta: Mapped[dict] = mapped_column(JSON, nullable=False)
