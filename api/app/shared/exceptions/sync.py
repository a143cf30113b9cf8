"""
Excepciones del motor de sincronizacion de catalogo.

Solo FetchError llega a la capa HTTP (aborta el preview o el apply completo).
El resto se registra por item en la lista de errores del resultado y el lote
continua.
"""
from typing import Any, Optional

from app.shared.exceptions.base import AppException


class SyncException(AppException):
    """Excepción base para errores de sincronizacion."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "SYNC_ERROR",
        details: Optional[dict] = None,
    ):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details,
        )


class FetchError(SyncException):
    """La fuente externa no respondio o devolvio un payload invalido."""

    def __init__(self, message: str, source: Optional[str] = None):
        details = {"source": source} if source else None
        super().__init__(
            message=message,
            status_code=502,
            error_code="FETCH_ERROR",
            details=details,
        )


class ItemNotFoundError(SyncException):
    """Un id referenciado en las operaciones ya no existe."""

    def __init__(self, message: str, item_id: Any = None):
        super().__init__(
            message=message,
            status_code=404,
            error_code="ITEM_NOT_FOUND",
            details={"id": str(item_id)} if item_id is not None else None,
        )


class ValidationError(SyncException):
    """Un registro no tiene un campo identificador requerido (p.ej. name)."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_ERROR",
            details={"field": field} if field else None,
        )


class PersistenceError(SyncException):
    """Fallo una escritura en el almacen local (constraint, conectividad)."""

    def __init__(self, message: str, item_id: Any = None):
        super().__init__(
            message=message,
            status_code=500,
            error_code="PERSISTENCE_ERROR",
            details={"id": str(item_id)} if item_id is not None else None,
        )
