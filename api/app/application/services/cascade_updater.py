"""
Actualizador en cascada de copias desnormalizadas del catalogo.

Los inventarios de personajes guardan name/description/rarity de cada objeto
del catalogo para mostrarlos sin join. Tras un apply se reescriben esas
copias para los ids externos que cambiaron. Solo se persisten los
registros que efectivamente cambiaron: los demas no reciben escrituras y
su updated_at queda intacto.
"""
from __future__ import annotations

import copy
from dataclasses import replace
from typing import Any, Dict, Mapping, Tuple

from loguru import logger

from app.domain.entities.catalog import DependentRecord
from app.domain.entities.sync import CascadeResult
from app.domain.repositories.catalog_interfaces import IDependentStore
from app.shared.constants.field_manifests import CASCADE_FIELDS
from app.shared.exceptions.base import AppException

# Secciones del inventario que contienen entradas con referencia al catalogo
INVENTORY_SECTIONS: Tuple[str, ...] = ("equipment", "consumables", "items")

# Clave de la referencia al catalogo dentro de cada entrada
CATALOG_REFERENCE_KEY = "catalog_external_id"


def apply_to_inventory(
    inventory: Dict[str, Any],
    fresh_fields: Mapping[str, Mapping[str, Any]],
) -> int:
    """
    Reescribe in-place las entradas que referencian un id cambiado.

    Returns:
        int: Cantidad de entradas modificadas
    """
    touched = 0
    for section in INVENTORY_SECTIONS:
        entries = inventory.get(section)
        if not isinstance(entries, list):
            continue
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            reference = entry.get(CATALOG_REFERENCE_KEY)
            if not reference or reference not in fresh_fields:
                continue

            source = fresh_fields[reference]
            changed = False
            for field_name in CASCADE_FIELDS:
                value = source.get(field_name)
                if entry.get(field_name) != value:
                    entry[field_name] = value
                    changed = True
            if changed:
                touched += 1
    return touched


class CascadeUpdater:
    """
    Recorre los registros dependientes y refresca sus copias.

    Uso:
        updater = CascadeUpdater(character_repository)
        result = await updater.run({"ext-1": {"name": "...", "rarity": "..."}})
    """

    def __init__(self, dependents: IDependentStore):
        self._dependents = dependents

    async def run(self, fresh_fields: Mapping[str, Mapping[str, Any]]) -> CascadeResult:
        """
        Args:
            fresh_fields: external_id -> campos frescos (name, description, rarity)

        Returns:
            CascadeResult: Dependientes escritos, entradas tocadas y errores
        """
        result = CascadeResult()
        if not fresh_fields:
            return result

        dependents = await self._dependents.get_all_dependents()
        for dependent in dependents:
            inventory = copy.deepcopy(dependent.inventory or {})
            touched = apply_to_inventory(inventory, fresh_fields)
            if not touched:
                continue

            try:
                await self._dependents.save_dependent(replace(dependent, inventory=inventory))
            except AppException as e:
                result.errors.append(
                    f"No se pudo actualizar el inventario de \"{dependent.name}\" ({dependent.id}): {e.message}"
                )
                continue

            result.dependents_updated += 1
            result.entries_updated += touched

        if result.dependents_updated:
            logger.info(
                f"Cascada: {result.entries_updated} entrada(s) en "
                f"{result.dependents_updated} inventario(s) actualizadas"
            )
        return result
