"""
Modelo de seleccion: subconjunto del ChangeSet que el usuario aprueba.

Funciones puras. default_selection se invoca una sola vez tras el preview;
los toggles retornan un Operations nuevo.
"""
from __future__ import annotations

from typing import Tuple

from app.domain.entities.sync import ChangeItem, ChangeSet, Operations, SyncAction, UpdateOperation


def default_selection(change_set: ChangeSet) -> Operations:
    """
    Seleccion por defecto: todos los add, todos los update con todos sus
    campos cambiados. Los delete nunca se seleccionan por defecto.
    """
    add = tuple(item.external_id for item in change_set.items if item.action is SyncAction.ADD)
    update = tuple(
        _full_update(item)
        for item in change_set.items
        if item.action is SyncAction.UPDATE and item.changed_fields
    )
    return Operations(add=add, update=update, delete=())


def _full_update(item: ChangeItem) -> UpdateOperation:
    return UpdateOperation(
        external_id=item.external_id,
        local_id=item.local_id,
        fields=item.changed_field_names,
        name=item.name,
    )


def is_item_selected(operations: Operations, item: ChangeItem) -> bool:
    if item.action is SyncAction.ADD:
        return item.external_id in operations.add
    if item.action is SyncAction.UPDATE:
        return any(op.external_id == item.external_id for op in operations.update)
    if item.action is SyncAction.DELETE:
        return item.local_id in operations.delete
    return False


def set_item_selected(operations: Operations, item: ChangeItem, selected: bool) -> Operations:
    """
    Selecciona o deselecciona un item completo. Para un update, seleccionar
    implica todos sus campos cambiados.
    """
    if item.action is SyncAction.ADD:
        add = _without(operations.add, item.external_id)
        if selected:
            add = add + (item.external_id,)
        return Operations(add=add, update=operations.update, delete=operations.delete)

    if item.action is SyncAction.UPDATE:
        update = tuple(op for op in operations.update if op.external_id != item.external_id)
        if selected and item.changed_fields:
            update = update + (_full_update(item),)
        return Operations(add=operations.add, update=update, delete=operations.delete)

    if item.action is SyncAction.DELETE:
        delete = _without(operations.delete, item.local_id)
        if selected:
            delete = delete + (item.local_id,)
        return Operations(add=operations.add, update=operations.update, delete=delete)

    return operations


def set_field_selected(
    operations: Operations, item: ChangeItem, field_name: str, selected: bool
) -> Operations:
    """
    Selecciona o deselecciona un campo de un update. Un update sin campos
    equivale a deseleccionar el item.
    """
    if item.action is not SyncAction.UPDATE or field_name not in item.changed_field_names:
        return operations

    current = next((op for op in operations.update if op.external_id == item.external_id), None)
    fields = set(current.fields) if current else set()
    if selected:
        fields.add(field_name)
    else:
        fields.discard(field_name)

    others = tuple(op for op in operations.update if op.external_id != item.external_id)
    if not fields:
        return Operations(add=operations.add, update=others, delete=operations.delete)

    # Conserva el orden del manifiesto
    ordered = tuple(name for name in item.changed_field_names if name in fields)
    op = UpdateOperation(
        external_id=item.external_id,
        local_id=item.local_id,
        fields=ordered,
        name=item.name,
    )
    return Operations(add=operations.add, update=others + (op,), delete=operations.delete)


def _without(values: Tuple, value) -> Tuple:
    return tuple(v for v in values if v != value)
