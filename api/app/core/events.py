"""
Manejadores de eventos de inicio y cierre de la aplicacion.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, List
from fastapi import FastAPI
from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.infrastructure.database.models import CatalogItemModel, CharacterModel, MonsterModel
from app.infrastructure.database.session import AsyncSessionLocal, init_db, close_db


def startup_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de inicio de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de inicio
    """
    async def startup() -> None:
        """Inicializa recursos al inicio de la aplicacion."""
        try:
            logger.add(
                settings.LOG_FILE,
                rotation="500 MB",
                retention="10 days",
                level=settings.LOG_LEVEL
            )
            logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
            logger.info(f"Entorno: {settings.ENVIRONMENT}")

            for warning in notion_config_warnings():
                logger.warning(f"CONFIG: {warning}")

            # Crea tablas si no existen (en produccion las maneja alembic)
            await init_db()
            logger.info("Base de datos inicializada")

            await _log_catalog_sizes()

            logger.success("Aplicacion iniciada correctamente")
            _print_available_urls()

        except Exception as e:
            logger.error(f"Error durante startup: {e}")
            logger.exception("Detalle del error:")
            raise

    return startup


def notion_config_warnings() -> List[str]:
    """Advertencias por configuracion de Notion incompleta."""
    warnings = []

    if not settings.NOTION_API_TOKEN:
        warnings.append("NOTION_API_TOKEN no configurado - el sync con Notion no funcionara")

    if not settings.NOTION_MONSTERS_DATABASE_ID:
        warnings.append("NOTION_MONSTERS_DATABASE_ID no configurado - sync de monstruos deshabilitado")

    item_databases = {
        "NOTION_ITEMS_ARMES_DATABASE_ID": settings.NOTION_ITEMS_ARMES_DATABASE_ID,
        "NOTION_ITEMS_OBJETS_DATABASE_ID": settings.NOTION_ITEMS_OBJETS_DATABASE_ID,
        "NOTION_ITEMS_PLANTES_DATABASE_ID": settings.NOTION_ITEMS_PLANTES_DATABASE_ID,
        "NOTION_ITEMS_POISONS_DATABASE_ID": settings.NOTION_ITEMS_POISONS_DATABASE_ID,
    }
    missing = [name for name, value in item_databases.items() if not value]
    if len(missing) == len(item_databases):
        warnings.append("Ninguna base de objetos de Notion configurada - sync de objetos deshabilitado")
    elif missing:
        warnings.append(f"Bases de objetos sin configurar (se omiten en el sync): {', '.join(missing)}")

    return warnings


async def _log_catalog_sizes() -> None:
    """Cantidad de registros locales por tabla, solo informativo."""
    try:
        async with AsyncSessionLocal() as session:
            for label, model in (
                ("monstruos", MonsterModel),
                ("objetos", CatalogItemModel),
                ("personajes", CharacterModel),
            ):
                count = await session.scalar(select(func.count()).select_from(model))
                logger.info(f"Catalogo local: {count} {label}")
    except SQLAlchemyError as e:
        logger.warning(f"No se pudo contar el catalogo local: {e}")


def _print_available_urls() -> None:
    """Imprime las URLs disponibles de la aplicacion."""
    if settings.HOST == "0.0.0.0":
        access_host = "localhost"
    else:
        access_host = settings.HOST

    base_url = f"http://{access_host}:{settings.PORT}"
    sync_url = f"{base_url}/api/v1/sync"

    logger.opt(colors=True).info("<bold><green>" + "=" * 80 + "</green></bold>")
    logger.opt(colors=True).info("<bold><green>URLS DISPONIBLES:</green></bold>")
    logger.opt(colors=True).info("<bold><green>" + "=" * 80 + "</green></bold>")
    logger.opt(colors=True).info(f"<cyan>  Swagger UI:  {base_url}/docs</cyan>")
    logger.opt(colors=True).info(f"<cyan>  Health:      {base_url}/health</cyan>")
    logger.opt(colors=True).info(f"<cyan>  Monstruos:   {sync_url}/monsters/preview</cyan>")
    logger.opt(colors=True).info(f"<cyan>  Objetos:     {sync_url}/items/preview</cyan>")
    logger.opt(colors=True).info("<bold><green>" + "=" * 80 + "</green></bold>")


def shutdown_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de cierre de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de cierre
    """
    async def shutdown() -> None:
        """Libera recursos al cerrar la aplicacion."""
        logger.info("Cerrando aplicacion...")
        await close_db()
        logger.success("Conexiones de base de datos cerradas")

    return shutdown


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Ciclo de vida de la aplicacion: startup al entrar, shutdown al salir."""
    await startup_handler(app)()
    try:
        yield
    finally:
        await shutdown_handler(app)()
