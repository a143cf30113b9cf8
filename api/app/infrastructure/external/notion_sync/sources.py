"""
Fuentes externas de catalogo sobre Notion.
Implementan IExternalCatalogSource para el bestiario y los objetos.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from app.application.services.content_loader import fetch_contents
from app.domain.entities.catalog import ExternalRecord
from app.domain.repositories.catalog_interfaces import IExternalCatalogSource
from app.shared.exceptions.sync import FetchError

from .mappers import ITEM_DATABASES, ItemDatabase, blocks_to_text, map_item_page, map_monster_page
from .notion_client import NotionApiError, NotionClient


async def _page_content(client: NotionClient, page_id: str) -> Optional[str]:
    """
    Texto de los bloques de una pagina.
    None si la pagina no existe o no tiene texto.
    """
    try:
        blocks = await client.list_block_children(page_id)
    except NotionApiError as e:
        if e.status_code == 404:
            logger.warning(f"Pagina {page_id} no encontrada en Notion")
            return None
        raise FetchError(f"No se pudo leer el contenido de {page_id}: {e}", source="notion") from e
    return blocks_to_text(blocks) or None


def _page_id(page: Dict[str, Any], database_label: str) -> str:
    page_id = page.get("id") if isinstance(page, dict) else None
    if not page_id:
        raise FetchError(f"Notion devolvio una pagina sin id en {database_label}", source="notion")
    return page_id


class NotionMonsterSource(IExternalCatalogSource):
    """Bestiario: una sola base de Notion, sin contenido pesado."""

    def __init__(self, client: NotionClient, database_id: str):
        self._client = client
        self._database_id = database_id

    async def fetch_all(self, fetch_content: bool = False) -> List[ExternalRecord]:
        if not self._database_id:
            raise FetchError("NOTION_MONSTERS_DATABASE_ID no esta configurado", source="notion")

        try:
            pages = await self._client.query_database(self._database_id)
        except NotionApiError as e:
            logger.error(f"Error obteniendo monstruos de Notion: {e}")
            raise FetchError(f"No se pudieron obtener los monstruos de Notion: {e}", source="notion") from e

        logger.info(f"Notion: {len(pages)} monstruo(s) obtenidos")
        return [
            ExternalRecord(external_id=_page_id(page, "Bestiaire"), fields=map_monster_page(page))
            for page in pages
        ]

    async def fetch_content_by_id(self, external_id: str) -> Optional[str]:
        return await _page_content(self._client, external_id)

    async def check_connection(self) -> List[Dict[str, Any]]:
        name = "Bestiaire"
        if not self._database_id:
            return [{"name": name, "status": "not_configured", "count": None, "error": None}]
        try:
            pages = await self._client.query_database(self._database_id)
        except NotionApiError as e:
            return [{"name": name, "status": "error", "count": None, "error": str(e)}]
        return [{"name": name, "status": "ok", "count": len(pages), "error": None}]


class NotionItemSource(IExternalCatalogSource):
    """
    Catalogo de objetos: cuatro bases de Notion (armes, objets, plantes,
    poisons). Las bases sin configurar se omiten; si una base configurada
    falla, falla todo el fetch (un set parcial generaria borrados fantasma).
    """

    def __init__(
        self,
        client: NotionClient,
        database_ids: Dict[str, str],
        content_batch_size: int = 10,
        databases: Sequence[ItemDatabase] = ITEM_DATABASES,
    ):
        """
        Args:
            client: Cliente de Notion
            database_ids: key de la base (armes, objets, ...) -> ID de Notion
            content_batch_size: Requests de contenido concurrentes por lote
        """
        self._client = client
        self._database_ids = database_ids
        self._content_batch_size = max(1, content_batch_size)
        self._databases = databases

    def _configured(self) -> List[ItemDatabase]:
        configured = []
        for database in self._databases:
            if self._database_ids.get(database.key):
                configured.append(database)
            else:
                logger.warning(f"Base de objetos '{database.key}' sin configurar, se omite")
        return configured

    async def _fetch_database(self, database: ItemDatabase) -> List[ExternalRecord]:
        pages = await self._client.query_database(self._database_ids[database.key])
        return [
            ExternalRecord(
                external_id=_page_id(page, database.label),
                fields=map_item_page(page, database),
                content_loaded=False,
            )
            for page in pages
        ]

    async def fetch_all(self, fetch_content: bool = False) -> List[ExternalRecord]:
        configured = self._configured()
        if not configured:
            raise FetchError("No hay bases de objetos de Notion configuradas", source="notion")

        records: List[ExternalRecord] = []
        for database in configured:
            try:
                records.extend(await self._fetch_database(database))
            except NotionApiError as e:
                logger.error(f"Error obteniendo objetos de {database.label}: {e}")
                raise FetchError(
                    f"No se pudieron obtener los objetos de {database.label}: {e}",
                    source=database.key,
                ) from e

        logger.info(f"Notion: {len(records)} objeto(s) obtenidos de {len(configured)} base(s)")
        if not fetch_content:
            return records
        return await self._with_contents(records)

    async def _with_contents(self, records: List[ExternalRecord]) -> List[ExternalRecord]:
        """
        Carga la descripcion de cada pagina por lotes. Cada lote termina
        completo; si alguna pagina fallo, se aborta con un solo FetchError.
        """
        batch = await fetch_contents(
            self, [record.external_id for record in records], self._content_batch_size
        )
        if batch.failures:
            failed = ", ".join(sorted(batch.failures))
            raise FetchError(
                f"No se pudo leer el contenido de {len(batch.failures)} pagina(s): {failed}",
                source="notion",
            )
        loaded = []
        for record in records:
            content = batch.contents.get(record.external_id)
            loaded.append(record.with_content({"description": content} if content else {}))
        return loaded

    async def fetch_content_by_id(self, external_id: str) -> Optional[str]:
        return await _page_content(self._client, external_id)

    async def check_connection(self) -> List[Dict[str, Any]]:
        statuses = []
        for database in self._databases:
            database_id = self._database_ids.get(database.key)
            if not database_id:
                statuses.append({"name": database.label, "status": "not_configured", "count": None, "error": None})
                continue
            try:
                pages = await self._client.query_database(database_id)
                statuses.append({"name": database.label, "status": "ok", "count": len(pages), "error": None})
            except NotionApiError as e:
                statuses.append({"name": database.label, "status": "error", "count": None, "error": str(e)})
        return statuses
