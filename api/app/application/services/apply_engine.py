"""
Motor de aplicacion de una seleccion de cambios.

Flujo:
1. Relee la fuente externa (nunca confia en los datos del preview).
2. Carga el contenido pesado faltante de los ids a agregar/actualizar.
3. Ejecuta las fases en orden fijo: delete -> update -> add.
4. Refresca en cascada las copias en registros dependientes.

Es un lote "best-effort": el fallo de un item se registra en errors y el
resto del lote continua. Solo un FetchError en la relectura inicial aborta
la operacion completa.

Sin control de concurrencia optimista: dos apply simultaneos sobre el mismo
registro resuelven por ultima escritura.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from loguru import logger

from app.application.services.cascade_updater import CascadeUpdater
from app.application.services.content_loader import fetch_contents
from app.domain.entities.catalog import ExternalRecord, LocalRecord
from app.domain.entities.sync import ApplyResult, Operations, UpdateOperation
from app.domain.repositories.catalog_interfaces import ICatalogStore, IExternalCatalogSource
from app.shared.constants.field_manifests import (
    CASCADE_FIELDS,
    EXTERNAL_ID_FIELD,
    REQUIRED_FIELD,
    CatalogDefinition,
)
from app.shared.exceptions.sync import (
    FetchError,
    ItemNotFoundError,
    SyncException,
    ValidationError,
)


def item_label(name: Optional[str], external_id: str) -> str:
    """Etiqueta legible para mensajes de error."""
    if name:
        return f"\"{name}\" ({external_id})"
    return f"({external_id})"


class ApplyEngine:
    """
    Ejecuta Operations contra el almacen local.

    Uso:
        engine = ApplyEngine(source, store, ITEM_CATALOG, cascade=CascadeUpdater(chars))
        result = await engine.apply(operations)
    """

    def __init__(
        self,
        source: IExternalCatalogSource,
        store: ICatalogStore,
        catalog: CatalogDefinition,
        cascade: Optional[CascadeUpdater] = None,
        content_batch_size: int = 10,
    ):
        self._source = source
        self._store = store
        self._catalog = catalog
        self._cascade = cascade
        self._content_batch_size = content_batch_size

    async def apply(self, operations: Operations) -> ApplyResult:
        """
        Aplica las operaciones aprobadas.

        Returns:
            ApplyResult: Conteos de lo efectivamente escrito y errores por item

        Raises:
            FetchError: Si la relectura de la fuente externa falla
        """
        logger.info(
            f"Aplicando sync de {self._catalog.kind.value}: "
            f"add={len(operations.add)}, update={len(operations.update)}, delete={len(operations.delete)}"
        )

        # 1. Datos frescos (mapa efimero por request)
        fresh_records = await self._source.fetch_all(fetch_content=False)
        fresh_by_id: Dict[str, ExternalRecord] = {}
        for record in fresh_records:
            fresh_by_id.setdefault(record.external_id, record)

        # 2. Contenido faltante
        content_failures = await self._load_missing_content(fresh_by_id, operations)

        result = ApplyResult()
        committed: List[LocalRecord] = []

        # 3. Fase delete
        await self._delete_phase(operations.delete, result)

        # 4. Fase update
        for op in operations.update:
            if not op.fields:
                continue
            label = item_label(op.name, op.external_id)
            try:
                committed.append(await self._apply_update(op, fresh_by_id, content_failures))
                result.updated += 1
            except SyncException as e:
                result.errors.append(e.message)
            except Exception as e:
                logger.exception(f"Error inesperado actualizando {label}")
                result.errors.append(f"Fallo la actualizacion de {label}: {e}")

        # 5. Fase add
        for external_id in dict.fromkeys(operations.add):
            record = fresh_by_id.get(external_id)
            label = item_label(record.name if record else None, external_id)
            try:
                committed.append(await self._apply_add(external_id, fresh_by_id, content_failures))
                result.added += 1
            except SyncException as e:
                result.errors.append(e.message)
            except Exception as e:
                logger.exception(f"Error inesperado agregando {label}")
                result.errors.append(f"Fallo el alta de {label}: {e}")

        # 6. Cascada sobre lo efectivamente escrito
        if self._cascade is not None and committed:
            cascade_result = await self._cascade.run(self._cascade_fields(committed))
            result.errors.extend(cascade_result.errors)

        if result.errors:
            logger.warning(
                f"Sync aplicado con errores: added={result.added}, updated={result.updated}, "
                f"deleted={result.deleted}, errores={len(result.errors)}"
            )
        else:
            logger.success(
                f"Sync aplicado: added={result.added}, updated={result.updated}, deleted={result.deleted}"
            )
        return result

    async def _load_missing_content(
        self,
        fresh_by_id: Dict[str, ExternalRecord],
        operations: Operations,
    ) -> Dict[str, str]:
        """
        Completa in-place el contenido de los registros que lo necesitan.
        Retorna los fallos por id externo.
        """
        content_field = self._catalog.content_field
        if not content_field:
            return {}

        wanted: List[str] = list(operations.add)
        wanted += [op.external_id for op in operations.update if content_field in op.fields]
        missing = [
            external_id
            for external_id in dict.fromkeys(wanted)
            if external_id in fresh_by_id and not fresh_by_id[external_id].content_loaded
        ]
        if not missing:
            return {}

        batch = await fetch_contents(self._source, missing, self._content_batch_size)
        for external_id, content in batch.contents.items():
            # Sin contenido en la pagina: se conserva el valor de la propiedad
            patch = {content_field: content} if content else {}
            fresh_by_id[external_id] = fresh_by_id[external_id].with_content(patch)
        return batch.failures

    async def _delete_phase(self, local_ids: Sequence[int], result: ApplyResult) -> None:
        ids = list(dict.fromkeys(local_ids))
        if not ids:
            return
        try:
            outcome = await self._store.delete_by_ids(ids)
        except Exception as e:
            logger.exception("Error inesperado en la fase de borrado")
            result.errors.append(f"Fallo la eliminacion de {len(ids)} registro(s): {e}")
            return
        result.deleted += outcome.deleted_count
        result.errors.extend(outcome.errors)

    async def _apply_update(
        self,
        op: UpdateOperation,
        fresh_by_id: Dict[str, ExternalRecord],
        content_failures: Dict[str, str],
    ) -> LocalRecord:
        entity = self._catalog.entity_label
        label = item_label(op.name, op.external_id)

        record = self._fresh_record(op.external_id, label, fresh_by_id, content_failures)
        self._validate(record, item_label(op.name or record.name, op.external_id))

        unknown = [name for name in op.fields if name not in self._catalog.field_names]
        if unknown:
            raise ValidationError(
                f"{entity} {label}: campos no sincronizables {', '.join(unknown)}",
                field=unknown[0],
            )

        local = await self._store.get_by_id(op.local_id)
        if local is None:
            raise ItemNotFoundError(
                f"{entity} {label} no existe en la base local (id {op.local_id})",
                item_id=op.local_id,
            )
        if local.external_id and local.external_id != op.external_id:
            raise ValidationError(
                f"{entity} {label}: el registro local {op.local_id} esta vinculado a {local.external_id}",
                field=EXTERNAL_ID_FIELD,
            )

        patch = {name: record.fields.get(name) for name in op.fields}
        await self._store.update_fields(op.local_id, {**patch, EXTERNAL_ID_FIELD: op.external_id})

        return LocalRecord(
            id=local.id,
            external_id=op.external_id,
            fields={**local.fields, **patch},
            local_fields=local.local_fields,
        )

    async def _apply_add(
        self,
        external_id: str,
        fresh_by_id: Dict[str, ExternalRecord],
        content_failures: Dict[str, str],
    ) -> LocalRecord:
        label = item_label(None, external_id)
        record = self._fresh_record(external_id, label, fresh_by_id, content_failures)
        self._validate(record, item_label(record.name, external_id))
        return await self._store.upsert(record)

    def _fresh_record(
        self,
        external_id: str,
        label: str,
        fresh_by_id: Dict[str, ExternalRecord],
        content_failures: Dict[str, str],
    ) -> ExternalRecord:
        entity = self._catalog.entity_label
        record = fresh_by_id.get(external_id)
        if record is None:
            raise ItemNotFoundError(
                f"{entity} {label} no encontrado en la fuente externa",
                item_id=external_id,
            )
        if external_id in content_failures:
            raise FetchError(
                f"{entity} {item_label(record.name, external_id)}: no se pudo obtener el contenido "
                f"({content_failures[external_id]})"
            )
        return record

    def _validate(self, record: ExternalRecord, label: str) -> None:
        value = record.fields.get(REQUIRED_FIELD)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(
                f"{self._catalog.entity_label} {label} no tiene {REQUIRED_FIELD}; se omite",
                field=REQUIRED_FIELD,
            )

    @staticmethod
    def _cascade_fields(committed: Sequence[LocalRecord]) -> Dict[str, Dict[str, object]]:
        return {
            local.external_id: {name: local.fields.get(name) for name in CASCADE_FIELDS}
            for local in committed
            if local.external_id
        }
