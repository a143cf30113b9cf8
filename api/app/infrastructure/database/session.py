"""
Gestión de sesiones de base de datos.

Los repositorios de catalogo confirman cada escritura por separado (un fallo
no revierte lo ya aplicado), por eso la sesion del request no hace commit
al final: solo descarta lo que haya quedado pendiente.
"""
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from app.core.config import settings


# Base para modelos de SQLAlchemy
Base = declarative_base()


def _create_engine_args(database_url: str) -> dict:
    """
    Construye los argumentos del engine segun el tipo de base de datos.

    - PostgreSQL: pool de conexiones con pre-ping.
    - SQLite en memoria: una sola conexion compartida (si no, cada conexion
      ve una base vacia).
    """
    args = {
        "echo": settings.DEBUG,
        "future": True,
    }

    if database_url.startswith("postgresql"):
        args.update({
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_pre_ping": True,
        })
    elif database_url.startswith("sqlite"):
        args["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url:
            args["poolclass"] = StaticPool

    return args


# Engine de base de datos
engine = create_async_engine(
    settings.effective_database_url,
    **_create_engine_args(settings.effective_database_url)
)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Sesion por request, para usar como dependencia en FastAPI.

    Yields:
        AsyncSession: Sesión de base de datos
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


async def init_db() -> None:
    """Crea las tablas de catalogo y personajes si no existen."""
    from app.infrastructure.database import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Cierra el pool de conexiones."""
    await engine.dispose()
