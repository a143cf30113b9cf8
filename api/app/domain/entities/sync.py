"""
Entidades del motor de reconciliacion.

ChangeSet y Operations son valores de alcance request: nunca se persisten ni
se reutilizan entre preview y apply.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple


class SyncAction(str, Enum):
    """Clasificacion de cada par externo/local."""
    ADD = "add"              # En la fuente externa, no en la base local
    UPDATE = "update"        # En ambos, con diferencias
    DELETE = "delete"        # En la base local (vinculado), no en la fuente
    UNCHANGED = "unchanged"  # En ambos, identicos


class ApplyOutcome(str, Enum):
    """Resultado global de un apply."""
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class FieldChange:
    """Diferencia en un campo. Los valores son los originales, sin normalizar."""

    field: str
    label: str
    old_value: Any
    new_value: Any
    is_json_like: bool = False


@dataclass(frozen=True)
class ChangeItem:
    """Un par externo/local clasificado."""

    action: SyncAction
    external_id: str
    name: Optional[str] = None
    local_id: Optional[int] = None
    changed_fields: Tuple[FieldChange, ...] = ()

    @property
    def changed_field_names(self) -> Tuple[str, ...]:
        return tuple(change.field for change in self.changed_fields)


@dataclass(frozen=True)
class SyncSummary:
    to_add: int = 0
    to_update: int = 0
    to_delete: int = 0
    unchanged: int = 0
    total: int = 0


@dataclass(frozen=True)
class ChangeSet:
    items: Tuple[ChangeItem, ...]
    summary: SyncSummary

    def by_action(self, action: SyncAction) -> List[ChangeItem]:
        return [item for item in self.items if item.action is action]


@dataclass(frozen=True)
class UpdateOperation:
    external_id: str
    local_id: int
    fields: Tuple[str, ...]
    name: Optional[str] = None


@dataclass(frozen=True)
class Operations:
    """Subconjunto del ChangeSet aprobado por el usuario."""

    add: Tuple[str, ...] = ()
    update: Tuple[UpdateOperation, ...] = ()
    delete: Tuple[int, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.add or self.update or self.delete)


@dataclass
class DeleteResult:
    deleted_count: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class CascadeResult:
    dependents_updated: int = 0
    entries_updated: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class ApplyResult:
    """Conteos de lo efectivamente escrito, no de lo solicitado."""

    added: int = 0
    updated: int = 0
    deleted: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def committed(self) -> int:
        return self.added + self.updated + self.deleted

    @property
    def outcome(self) -> ApplyOutcome:
        if not self.errors:
            return ApplyOutcome.SUCCESS
        if self.committed > 0:
            return ApplyOutcome.PARTIAL
        return ApplyOutcome.FAILED
