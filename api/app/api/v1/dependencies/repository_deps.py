"""
Dependencias para inyección de repositorios.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.repositories.catalog_repository import (
    CatalogItemRepository,
    MonsterRepository,
    SqlAlchemyCatalogRepository,
)
from app.shared.constants.field_manifests import CatalogKind


def build_catalog_repository(kind: CatalogKind, session: AsyncSession) -> SqlAlchemyCatalogRepository:
    """
    Repositorio del catalogo indicado.

    Args:
        kind: Catalogo (monsters | items)
        session: Sesión de base de datos

    Returns:
        SqlAlchemyCatalogRepository: Repositorio del catalogo
    """
    if kind is CatalogKind.MONSTERS:
        return MonsterRepository(session)
    return CatalogItemRepository(session)
