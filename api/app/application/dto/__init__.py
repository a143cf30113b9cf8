"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .sync_dto import (
    ChangeItemDTO,
    FieldChangeDTO,
    OperationsDTO,
    RefreshDescriptionsResponseDTO,
    SourceStatusDTO,
    SyncApplyRequestDTO,
    SyncApplyResponseDTO,
    SyncPreviewResponseDTO,
    SyncStatusResponseDTO,
    SyncSummaryDTO,
    UpdateOperationDTO,
)

__all__ = [
    "ChangeItemDTO",
    "FieldChangeDTO",
    "OperationsDTO",
    "RefreshDescriptionsResponseDTO",
    "SourceStatusDTO",
    "SyncApplyRequestDTO",
    "SyncApplyResponseDTO",
    "SyncPreviewResponseDTO",
    "SyncStatusResponseDTO",
    "SyncSummaryDTO",
    "UpdateOperationDTO",
]
