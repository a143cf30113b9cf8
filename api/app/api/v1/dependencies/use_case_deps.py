"""
Dependencias para inyeccion de casos de uso.
"""
from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.dependencies.repository_deps import build_catalog_repository
from app.application.use_cases.catalog_sync_use_cases import CatalogSyncUseCases
from app.core.config import settings
from app.domain.repositories.catalog_interfaces import IExternalCatalogSource
from app.infrastructure.database.session import get_db
from app.infrastructure.external.notion_sync.notion_client import NotionClient, NotionCredentials
from app.infrastructure.external.notion_sync.sources import NotionItemSource, NotionMonsterSource
from app.infrastructure.repositories.character_repository import CharacterRepository
from app.shared.constants.field_manifests import CATALOGS, CatalogKind


async def get_notion_client() -> AsyncGenerator[NotionClient, None]:
    """
    Dependencia para obtener un cliente de Notion por request.
    Cierra la conexion HTTP al terminar.
    """
    client = NotionClient(
        NotionCredentials(token=settings.NOTION_API_TOKEN, version=settings.NOTION_VERSION),
        base_url=settings.NOTION_API_URL,
        timeout_s=settings.NOTION_TIMEOUT_S,
        max_retries=settings.NOTION_MAX_RETRIES,
        min_backoff_s=settings.NOTION_MIN_BACKOFF_S,
        max_backoff_s=settings.NOTION_MAX_BACKOFF_S,
    )
    try:
        yield client
    finally:
        await client.close()


def build_notion_source(kind: CatalogKind, client: NotionClient) -> IExternalCatalogSource:
    """
    Fuente de Notion del catalogo indicado.

    Args:
        kind: Catalogo (monsters | items)
        client: Cliente de Notion

    Returns:
        IExternalCatalogSource: Fuente externa
    """
    if kind is CatalogKind.MONSTERS:
        return NotionMonsterSource(client, settings.NOTION_MONSTERS_DATABASE_ID)
    return NotionItemSource(
        client,
        {
            "armes": settings.NOTION_ITEMS_ARMES_DATABASE_ID,
            "objets": settings.NOTION_ITEMS_OBJETS_DATABASE_ID,
            "plantes": settings.NOTION_ITEMS_PLANTES_DATABASE_ID,
            "poisons": settings.NOTION_ITEMS_POISONS_DATABASE_ID,
        },
        content_batch_size=settings.SYNC_CONTENT_BATCH_SIZE,
    )


def build_catalog_sync_use_cases(
    kind: CatalogKind,
    db: AsyncSession,
    client: NotionClient,
) -> CatalogSyncUseCases:
    catalog = CATALOGS[kind]
    return CatalogSyncUseCases(
        source=build_notion_source(kind, client),
        store=build_catalog_repository(kind, db),
        catalog=catalog,
        dependents=CharacterRepository(db) if catalog.cascade_enabled else None,
        content_batch_size=settings.SYNC_CONTENT_BATCH_SIZE,
        preview_fetch_content=settings.SYNC_PREVIEW_FETCH_CONTENT,
    )


async def get_catalog_sync_use_cases(
    catalog: CatalogKind,
    db: AsyncSession = Depends(get_db),
    client: NotionClient = Depends(get_notion_client),
) -> CatalogSyncUseCases:
    """
    Dependencia para obtener los casos de uso de sync del catalogo
    indicado en la ruta.

    Args:
        catalog: Catalogo (path param)
        db: Sesion de base de datos
        client: Cliente de Notion

    Returns:
        CatalogSyncUseCases: Instancia de casos de uso de sync
    """
    return build_catalog_sync_use_cases(catalog, db, client)


async def get_item_sync_use_cases(
    db: AsyncSession = Depends(get_db),
    client: NotionClient = Depends(get_notion_client),
) -> CatalogSyncUseCases:
    """Casos de uso de sync del catalogo de objetos."""
    return build_catalog_sync_use_cases(CatalogKind.ITEMS, db, client)
