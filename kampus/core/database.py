"""Conexión asíncrona a PostgreSQL con SQLAlchemy 2.0."""
from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, Integer, event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from kampus.core.config import settings


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"echo": settings.debug}
    return {"echo": settings.debug, "pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


engine = create_async_engine(
    settings.database_url_async,
    **_engine_kwargs(settings.database_url_async),
)


def activar_claves_foraneas(sync_engine) -> None:
    """SQLite no aplica ON DELETE CASCADE / SET NULL sin este PRAGMA por conexión."""

    @event.listens_for(sync_engine, "connect")
    def _pragma(dbapi_conn, _registro):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


if settings.database_url_async.startswith("sqlite"):
    activar_claves_foraneas(engine.sync_engine)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# BIGINT en PostgreSQL; en SQLite la clave debe ser INTEGER para ser alias de rowid.
IdTipo = BigInteger().with_variant(Integer(), "sqlite")


def ahora_utc() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base para todos los modelos SQLAlchemy."""

    pass


class ConMarcasTiempo:
    """Columnas created_at / updated_at comunes a todas las entidades."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=ahora_utc
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=ahora_utc, onupdate=ahora_utc
    )


async def get_db():
    """Dependencia para obtener una sesión de base de datos por request."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """Inicializa la base de datos (crear tablas si no existen)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
