"""
Script para inicializar la base de datos.
Crea las tablas de catalogo (monsters, item_catalog) y characters si no existen.
Para entornos con historial de migraciones usar `alembic upgrade head`.
"""
import asyncio
from loguru import logger

from sqlalchemy import inspect

from app.infrastructure.database import models  # noqa: F401
from app.infrastructure.database.session import Base, close_db, engine, init_db


async def main():
    """Función principal para inicializar la base de datos."""
    logger.info("Inicializando base de datos...")

    try:
        await init_db()

        async with engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        missing = [name for name in Base.metadata.tables if name not in tables]
        if missing:
            raise RuntimeError(f"Tablas no creadas: {', '.join(missing)}")

        logger.success(f"Base de datos inicializada: {', '.join(sorted(Base.metadata.tables))}")
    except Exception as e:
        logger.error(f"Error al inicializar base de datos: {e}")
        raise
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
