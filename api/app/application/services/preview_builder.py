"""
Constructor del preview de sincronizacion.

Une los registros externos y locales por external_id y clasifica cada par
en add / update / delete / unchanged. El resultado no se persiste: se
recalcula en cada request de preview.
"""
from __future__ import annotations

from collections import Counter
from typing import Dict, List, Sequence, Set

from loguru import logger

from app.application.services.field_comparator import DEFAULT_POLICY, ComparisonPolicy, diff
from app.domain.entities.catalog import ExternalRecord, LocalRecord
from app.domain.entities.sync import ChangeItem, ChangeSet, SyncAction, SyncSummary
from app.shared.constants.field_manifests import FieldManifest


def summarize(items: Sequence[ChangeItem]) -> SyncSummary:
    """Conteos derivados de los items (nunca recalculados por separado)."""
    counts = Counter(item.action for item in items)
    return SyncSummary(
        to_add=counts[SyncAction.ADD],
        to_update=counts[SyncAction.UPDATE],
        to_delete=counts[SyncAction.DELETE],
        unchanged=counts[SyncAction.UNCHANGED],
        total=len(items),
    )


def build_change_set(
    external_records: Sequence[ExternalRecord],
    local_records: Sequence[LocalRecord],
    manifest: FieldManifest,
    policy: ComparisonPolicy = DEFAULT_POLICY,
) -> ChangeSet:
    """
    Construye el ChangeSet.

    Orden determinista: add/update/unchanged en el orden de la fuente
    externa, luego los delete en el orden local. Los registros locales sin
    external_id (creados a mano) no participan.
    """
    # Mapa efimero, construido en cada llamada
    local_by_external_id: Dict[str, LocalRecord] = {}
    for local in local_records:
        if local.is_linked:
            local_by_external_id[local.external_id] = local

    items: List[ChangeItem] = []
    visited: Set[str] = set()

    # 1. Registros externos: add / update / unchanged
    for record in external_records:
        if record.external_id in visited:
            logger.warning(f"ID externo duplicado en la fuente, se ignora: {record.external_id}")
            continue
        visited.add(record.external_id)

        local = local_by_external_id.get(record.external_id)
        if local is None:
            items.append(
                ChangeItem(
                    action=SyncAction.ADD,
                    external_id=record.external_id,
                    name=record.name,
                )
            )
            continue

        changes = diff(record.fields, local.fields, manifest, policy)
        items.append(
            ChangeItem(
                action=SyncAction.UPDATE if changes else SyncAction.UNCHANGED,
                external_id=record.external_id,
                name=record.name or local.name,
                local_id=local.id,
                changed_fields=tuple(changes),
            )
        )

    # 2. Registros locales vinculados que ya no estan en la fuente: delete
    for local in local_records:
        if not local.is_linked or local.external_id in visited:
            continue
        items.append(
            ChangeItem(
                action=SyncAction.DELETE,
                external_id=local.external_id,
                name=local.name,
                local_id=local.id,
            )
        )

    return ChangeSet(items=tuple(items), summary=summarize(items))
