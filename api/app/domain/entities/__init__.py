"""
Entidades del dominio.
"""
from app.domain.entities.catalog import ExternalRecord, LocalRecord, DependentRecord
from app.domain.entities.sync import (
    SyncAction,
    ApplyOutcome,
    FieldChange,
    ChangeItem,
    SyncSummary,
    ChangeSet,
    UpdateOperation,
    Operations,
    DeleteResult,
    CascadeResult,
    ApplyResult,
)

__all__ = [
    "ExternalRecord",
    "LocalRecord",
    "DependentRecord",
    "SyncAction",
    "ApplyOutcome",
    "FieldChange",
    "ChangeItem",
    "SyncSummary",
    "ChangeSet",
    "UpdateOperation",
    "Operations",
    "DeleteResult",
    "CascadeResult",
    "ApplyResult",
]
