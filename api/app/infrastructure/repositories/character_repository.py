"""
Repositorio de personajes.
Solo expone lo que necesita la cascada: leer y reescribir inventarios.
"""
import copy
from typing import List

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.catalog import DependentRecord
from app.domain.repositories.catalog_interfaces import IDependentStore
from app.infrastructure.database.models import CharacterModel
from app.shared.exceptions.sync import ItemNotFoundError, PersistenceError


class CharacterRepository(IDependentStore):
    """
    Gestiona la tabla characters.
    """

    def __init__(self, db: AsyncSession):
        """Inicializa el repositorio con una sesion de base de datos."""
        self.db = db

    async def get_all_dependents(self) -> List[DependentRecord]:
        """
        Obtiene todos los personajes con su inventario.

        Returns:
            List[DependentRecord]: Copias independientes de la sesion
        """
        query = (
            select(CharacterModel)
            .order_by(CharacterModel.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return [
            DependentRecord(
                id=row.id,
                name=row.name,
                inventory=copy.deepcopy(row.inventory) if row.inventory else {},
                updated_at=row.updated_at,
            )
            for row in result.scalars().all()
        ]

    async def save_dependent(self, record: DependentRecord) -> None:
        """
        Reescribe el inventario del personaje.

        Args:
            record: Personaje con el inventario ya modificado

        Raises:
            ItemNotFoundError: El personaje ya no existe
            PersistenceError: Fallo de escritura
        """
        try:
            result = await self.db.execute(
                update(CharacterModel)
                .where(CharacterModel.id == record.id)
                .values(inventory=record.inventory)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.db.rollback()
                raise ItemNotFoundError(
                    f"Personaje con id {record.id} no encontrado",
                    item_id=record.id,
                )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error guardando inventario del personaje {record.id}: {e}")
            raise PersistenceError(
                f"No se pudo guardar el inventario de \"{record.name}\": {e}",
                item_id=record.id,
            ) from e
