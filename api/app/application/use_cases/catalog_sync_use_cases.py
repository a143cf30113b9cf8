"""
Casos de uso de sincronizacion de catalogos (Notion -> base local).
Orquesta preview, apply seleccionado, sync completo y refresco de
descripciones para un catalogo.
"""
from typing import Dict, List, Optional

from loguru import logger

from app.application.dto.sync_dto import (
    OperationsDTO,
    RefreshDescriptionsResponseDTO,
    SourceStatusDTO,
    SyncApplyResponseDTO,
    SyncPreviewResponseDTO,
    SyncStatusResponseDTO,
)
from app.application.services.apply_engine import ApplyEngine, item_label
from app.application.services.cascade_updater import CascadeUpdater
from app.application.services.content_loader import fetch_contents
from app.application.services.field_comparator import DEFAULT_POLICY, ComparisonPolicy
from app.application.services.preview_builder import build_change_set
from app.application.services.selection import default_selection
from app.domain.entities.catalog import ExternalRecord, LocalRecord
from app.domain.entities.sync import ApplyResult, ChangeSet
from app.domain.repositories.catalog_interfaces import (
    ICatalogStore,
    IDependentStore,
    IExternalCatalogSource,
)
from app.shared.constants.field_manifests import CASCADE_FIELDS, CatalogDefinition
from app.shared.exceptions.sync import SyncException


class CatalogSyncUseCases:
    """
    Casos de uso de sincronizacion para un catalogo.
    """

    def __init__(
        self,
        source: IExternalCatalogSource,
        store: ICatalogStore,
        catalog: CatalogDefinition,
        dependents: Optional[IDependentStore] = None,
        content_batch_size: int = 10,
        preview_fetch_content: bool = False,
    ):
        self.source = source
        self.store = store
        self.catalog = catalog
        self.content_batch_size = content_batch_size
        self.preview_fetch_content = preview_fetch_content
        self.cascade = (
            CascadeUpdater(dependents)
            if dependents is not None and catalog.cascade_enabled
            else None
        )

    def _policy_for(self, records: List[ExternalRecord]) -> ComparisonPolicy:
        """
        Sin contenido cargado, el campo de contenido no se compara: la base
        local puede tener descripciones traidas en un apply anterior.
        """
        content_field = self.catalog.content_field
        if content_field and any(not record.content_loaded for record in records):
            return ComparisonPolicy.skipping([content_field])
        return DEFAULT_POLICY

    async def build_preview(self, fetch_content: Optional[bool] = None) -> ChangeSet:
        """
        Calcula el ChangeSet actual.

        Raises:
            FetchError: Si Notion no responde
        """
        if fetch_content is None:
            fetch_content = self.preview_fetch_content

        external_records = await self.source.fetch_all(fetch_content=fetch_content)
        local_records = await self.store.get_all()
        change_set = build_change_set(
            external_records,
            local_records,
            self.catalog.manifest,
            self._policy_for(external_records),
        )

        summary = change_set.summary
        logger.info(
            f"Preview de {self.catalog.kind.value}: {summary.to_add} nuevos, "
            f"{summary.to_update} a actualizar, {summary.to_delete} a eliminar, "
            f"{summary.unchanged} sin cambios"
        )
        return change_set

    async def preview(self, fetch_content: Optional[bool] = None) -> SyncPreviewResponseDTO:
        """
        Preview con la seleccion por defecto (adds + updates, nunca deletes).

        Args:
            fetch_content: Cargar el contenido pesado de Notion (mas lento)

        Returns:
            SyncPreviewResponseDTO: Items clasificados, resumen y seleccion por defecto
        """
        change_set = await self.build_preview(fetch_content)
        return SyncPreviewResponseDTO.from_change_set(change_set, default_selection(change_set))

    def _engine(self) -> ApplyEngine:
        return ApplyEngine(
            self.source,
            self.store,
            self.catalog,
            cascade=self.cascade,
            content_batch_size=self.content_batch_size,
        )

    async def apply(self, operations: OperationsDTO) -> SyncApplyResponseDTO:
        """
        Aplica la seleccion del usuario.

        Raises:
            FetchError: Si la relectura de Notion falla (nada se escribe)
        """
        result = await self._engine().apply(operations.to_domain())
        return SyncApplyResponseDTO.from_result(result)

    async def sync_all(self) -> SyncApplyResponseDTO:
        """
        Preview + seleccion por defecto + apply en una sola llamada.
        Nunca elimina registros locales.
        """
        change_set = await self.build_preview(fetch_content=False)
        operations = default_selection(change_set)
        if operations.is_empty:
            logger.info(f"Sync de {self.catalog.kind.value}: nada que aplicar")
            return SyncApplyResponseDTO.from_result(ApplyResult())

        result = await self._engine().apply(operations)
        return SyncApplyResponseDTO.from_result(result)

    async def refresh_descriptions(self) -> RefreshDescriptionsResponseDTO:
        """
        Trae de Notion el contenido de los registros locales vinculados que no
        tienen descripcion, en lotes, y refresca los inventarios.
        """
        content_field = self.catalog.content_field
        if not content_field:
            return RefreshDescriptionsResponseDTO(
                success=True,
                message=f"El catalogo {self.catalog.kind.value} no tiene contenido que refrescar",
            )

        local_records = await self.store.get_all()
        missing = [
            local for local in local_records
            if local.is_linked and not (local.fields.get(content_field) or "").strip()
        ]
        logger.info(f"{len(missing)} registro(s) sin {content_field}")

        if not missing:
            return RefreshDescriptionsResponseDTO(
                success=True,
                message="Todos los registros ya tienen descripcion",
            )

        batch = await fetch_contents(
            self.source, [local.external_id for local in missing], self.content_batch_size
        )

        errors: List[str] = []
        refreshed: List[LocalRecord] = []
        for local in missing:
            label = item_label(local.name, local.external_id)
            if local.external_id in batch.failures:
                errors.append(f"{label}: {batch.failures[local.external_id]}")
                continue
            content = batch.contents.get(local.external_id)
            if not content:
                continue
            try:
                await self.store.update_fields(local.id, {content_field: content})
            except SyncException as e:
                errors.append(e.message)
                continue
            refreshed.append(
                LocalRecord(
                    id=local.id,
                    external_id=local.external_id,
                    fields={**local.fields, content_field: content},
                    local_fields=local.local_fields,
                )
            )

        if self.cascade is not None and refreshed:
            fresh_fields: Dict[str, Dict[str, object]] = {
                local.external_id: {name: local.fields.get(name) for name in CASCADE_FIELDS}
                for local in refreshed
            }
            cascade_result = await self.cascade.run(fresh_fields)
            errors.extend(cascade_result.errors)

        logger.success(f"Refresco de descripciones: {len(refreshed)}/{len(missing)} actualizados")
        return RefreshDescriptionsResponseDTO(
            success=True,
            updated=len(refreshed),
            total=len(missing),
            errors=errors,
        )

    async def status(self) -> SyncStatusResponseDTO:
        """Estado de conexion de cada base de Notion del catalogo."""
        databases = [SourceStatusDTO(**entry) for entry in await self.source.check_connection()]
        return SyncStatusResponseDTO(
            success=any(db.status == "ok" for db in databases),
            databases=databases,
        )
