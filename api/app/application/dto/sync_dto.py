"""
DTOs de la sincronizacion de catalogos con Notion.
El JSON expuesto usa camelCase (externalId, changedFields, ...).
"""
from typing import Any, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from app.domain.entities.sync import (
    ApplyOutcome,
    ApplyResult,
    ChangeItem,
    ChangeSet,
    FieldChange,
    Operations,
    SyncSummary,
    UpdateOperation,
)


class CamelModel(BaseModel):
    """Base con alias camelCase; acepta tambien snake_case."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class FieldChangeDTO(CamelModel):
    field: str = Field(..., description="Nombre del campo")
    label: str = Field(..., description="Etiqueta legible")
    old_value: Any = Field(None, description="Valor local actual")
    new_value: Any = Field(None, description="Valor en Notion")
    is_json_like: bool = False

    @classmethod
    def from_entity(cls, change: FieldChange) -> "FieldChangeDTO":
        return cls(
            field=change.field,
            label=change.label,
            old_value=change.old_value,
            new_value=change.new_value,
            is_json_like=change.is_json_like,
        )


class ChangeItemDTO(CamelModel):
    action: str = Field(..., description="add | update | delete | unchanged")
    external_id: str
    local_id: Optional[int] = None
    name: Optional[str] = None
    changed_fields: List[FieldChangeDTO] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, item: ChangeItem) -> "ChangeItemDTO":
        return cls(
            action=item.action.value,
            external_id=item.external_id,
            local_id=item.local_id,
            name=item.name,
            changed_fields=[FieldChangeDTO.from_entity(c) for c in item.changed_fields],
        )


class SyncSummaryDTO(CamelModel):
    to_add: int = 0
    to_update: int = 0
    to_delete: int = 0
    unchanged: int = 0
    total: int = 0

    @classmethod
    def from_entity(cls, summary: SyncSummary) -> "SyncSummaryDTO":
        return cls(
            to_add=summary.to_add,
            to_update=summary.to_update,
            to_delete=summary.to_delete,
            unchanged=summary.unchanged,
            total=summary.total,
        )


class UpdateOperationDTO(CamelModel):
    external_id: str
    local_id: int
    fields: List[str] = Field(default_factory=list, description="Campos a sobreescribir")
    name: Optional[str] = Field(None, description="Nombre para mensajes de error")


class OperationsDTO(CamelModel):
    """Seleccion aprobada por el usuario."""

    add: List[str] = Field(default_factory=list, description="IDs externos a agregar")
    update: List[UpdateOperationDTO] = Field(default_factory=list)
    delete: List[int] = Field(default_factory=list, description="IDs locales a eliminar")

    def to_domain(self) -> Operations:
        return Operations(
            add=tuple(self.add),
            update=tuple(
                UpdateOperation(
                    external_id=op.external_id,
                    local_id=op.local_id,
                    fields=tuple(op.fields),
                    name=op.name,
                )
                for op in self.update
            ),
            delete=tuple(self.delete),
        )

    @classmethod
    def from_domain(cls, operations: Operations) -> "OperationsDTO":
        return cls(
            add=list(operations.add),
            update=[
                UpdateOperationDTO(
                    external_id=op.external_id,
                    local_id=op.local_id,
                    fields=list(op.fields),
                    name=op.name,
                )
                for op in operations.update
            ],
            delete=list(operations.delete),
        )


class SyncPreviewResponseDTO(CamelModel):
    success: bool = True
    summary: SyncSummaryDTO
    items: List[ChangeItemDTO] = Field(default_factory=list)
    default_selection: OperationsDTO

    @classmethod
    def from_change_set(cls, change_set: ChangeSet, selection: Operations) -> "SyncPreviewResponseDTO":
        return cls(
            success=True,
            summary=SyncSummaryDTO.from_entity(change_set.summary),
            items=[ChangeItemDTO.from_entity(item) for item in change_set.items],
            default_selection=OperationsDTO.from_domain(selection),
        )


class SyncApplyRequestDTO(CamelModel):
    operations: OperationsDTO


class SyncApplyResponseDTO(CamelModel):
    success: bool
    outcome: str = Field(..., description="success | partial | failed")
    added: int = 0
    updated: int = 0
    deleted: int = 0
    errors: List[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ApplyResult) -> "SyncApplyResponseDTO":
        outcome = result.outcome
        return cls(
            success=outcome is not ApplyOutcome.FAILED,
            outcome=outcome.value,
            added=result.added,
            updated=result.updated,
            deleted=result.deleted,
            errors=list(result.errors),
        )


class RefreshDescriptionsResponseDTO(CamelModel):
    success: bool = True
    updated: int = 0
    total: int = 0
    errors: List[str] = Field(default_factory=list)
    message: Optional[str] = None


class SourceStatusDTO(CamelModel):
    name: str
    status: str = Field(..., description="ok | error | not_configured")
    count: Optional[int] = None
    error: Optional[str] = None


class SyncStatusResponseDTO(CamelModel):
    success: bool
    databases: List[SourceStatusDTO] = Field(default_factory=list)
