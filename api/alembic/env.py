"""
Entorno de Alembic para las tablas de catalogo.

- La URL sale de settings (DATABASE_URL o componentes).
- Los drivers async se cambian por su par sync: asyncpg -> psycopg,
  aiosqlite -> pysqlite.
- SQLite usa batch mode (no soporta ALTER COLUMN).
"""
import sys
from pathlib import Path
from logging.config import fileConfig

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context

API_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(API_DIR))

from app.core.config import settings
from app.infrastructure.database.session import Base
from app.infrastructure.database import models  # noqa: F401

SYNC_DRIVERS = {
    "+asyncpg": "+psycopg",
    "+aiosqlite": "",
}


def sync_database_url(url: str) -> str:
    """URL equivalente con driver sincrono."""
    for async_driver, sync_driver in SYNC_DRIVERS.items():
        url = url.replace(async_driver, sync_driver)
    return url


config = context.config
config.set_main_option("sqlalchemy.url", sync_database_url(settings.effective_database_url))

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def run_migrations_offline() -> None:
    """Genera el SQL de las migraciones sin conectarse."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=_is_sqlite(url),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Ejecuta las migraciones contra la base configurada."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
