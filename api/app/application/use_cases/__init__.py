"""
Casos de uso de la aplicacion.
"""
from .catalog_sync_use_cases import CatalogSyncUseCases

__all__ = ["CatalogSyncUseCases"]
