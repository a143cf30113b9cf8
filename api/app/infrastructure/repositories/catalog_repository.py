"""
Repositorio del catalogo (monstruos y objetos).
Implementa ICatalogStore sobre SQLAlchemy async.

Cada escritura se confirma por separado: el fallo de un item hace rollback
solo de ese item y no arrastra las escrituras anteriores del lote.
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger
from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.catalog import ExternalRecord, LocalRecord
from app.domain.entities.sync import DeleteResult
from app.domain.repositories.catalog_interfaces import ICatalogStore
from app.infrastructure.database.models import CatalogItemModel, MonsterModel
from app.shared.constants.field_manifests import (
    EXTERNAL_ID_FIELD,
    ITEM_CATALOG,
    MONSTER_CATALOG,
    CatalogDefinition,
)
from app.shared.exceptions.sync import ItemNotFoundError, PersistenceError, ValidationError

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class SqlAlchemyCatalogRepository(ICatalogStore):
    """
    Repositorio generico de catalogo.

    Solo lee y escribe las columnas del manifiesto, external_id y las
    columnas locales declaradas (estas ultimas solo lectura para el sync).
    """

    def __init__(
        self,
        db: AsyncSession,
        model: Any,
        catalog: CatalogDefinition,
        local_fields: Tuple[str, ...] = (),
    ):
        """
        Args:
            db: Sesion asincrona de SQLAlchemy
            model: Modelo ORM del catalogo
            catalog: Definicion del catalogo (manifiesto y etiquetas)
            local_fields: Columnas propias del lado local
        """
        self.db = db
        self.model = model
        self.catalog = catalog
        self.local_fields = local_fields

    def _to_entity(self, row: Any) -> LocalRecord:
        return LocalRecord(
            id=row.id,
            external_id=row.external_id,
            fields={name: getattr(row, name) for name in self.catalog.field_names},
            local_fields={name: getattr(row, name) for name in self.local_fields},
        )

    async def get_all(self) -> List[LocalRecord]:
        query = (
            select(self.model)
            .order_by(self.model.id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def get_by_id(self, local_id: int) -> Optional[LocalRecord]:
        query = (
            select(self.model)
            .where(self.model.id == local_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        row = result.scalar_one_or_none()
        return self._to_entity(row) if row else None

    async def get_by_external_id(self, external_id: str) -> Optional[LocalRecord]:
        query = (
            select(self.model)
            .where(self.model.external_id == external_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        row = result.scalar_one_or_none()
        return self._to_entity(row) if row else None

    async def upsert(self, record: ExternalRecord) -> LocalRecord:
        """
        INSERT ... ON CONFLICT (external_id) DO UPDATE.
        Las columnas locales (ai_generated) y created_at no se tocan.
        """
        values: Dict[str, Any] = {EXTERNAL_ID_FIELD: record.external_id}
        for name in self.catalog.field_names:
            values[name] = record.fields.get(name)

        try:
            await self._execute_upsert(values)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error en upsert de {record.external_id}: {e}")
            raise PersistenceError(
                f"No se pudo guardar {self.catalog.entity_label} \"{record.name}\" ({record.external_id}): {e}",
                item_id=record.external_id,
            ) from e

        saved = await self.get_by_external_id(record.external_id)
        if saved is None:
            raise PersistenceError(
                f"{self.catalog.entity_label} \"{record.name}\" ({record.external_id}) no quedo guardado",
                item_id=record.external_id,
            )
        return saved

    async def _execute_upsert(self, values: Dict[str, Any]) -> None:
        dialect = self.db.get_bind().dialect.name
        insert_fn = _DIALECT_INSERTS.get(dialect)

        if insert_fn is None:
            # Otros motores: select + insert/update
            existing = await self.get_by_external_id(values[EXTERNAL_ID_FIELD])
            if existing is None:
                self.db.add(self.model(**values))
                await self.db.flush()
            else:
                await self.db.execute(
                    update(self.model)
                    .where(self.model.id == existing.id)
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )
            return

        stmt = insert_fn(self.model).values(**values)
        update_set = {name: stmt.excluded[name] for name in self.catalog.field_names}
        update_set["updated_at"] = func.now()
        stmt = stmt.on_conflict_do_update(
            index_elements=[self.model.external_id],
            set_=update_set,
        )
        await self.db.execute(stmt)

    async def update_fields(self, local_id: int, patch: Dict[str, Any]) -> None:
        """
        Actualiza solo las claves recibidas; el resto (incluidas las columnas
        locales) queda intacto.
        """
        allowed = set(self.catalog.field_names) | {EXTERNAL_ID_FIELD}
        unknown = sorted(set(patch) - allowed)
        if unknown:
            raise ValidationError(
                f"Campos no permitidos para {self.catalog.entity_label}: {', '.join(unknown)}",
                field=unknown[0],
            )
        if not patch:
            return

        try:
            result = await self.db.execute(
                update(self.model)
                .where(self.model.id == local_id)
                .values(**patch)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.db.rollback()
                raise ItemNotFoundError(
                    f"{self.catalog.entity_label} con id {local_id} no encontrado en la base local",
                    item_id=local_id,
                )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error actualizando {self.catalog.entity_label} {local_id}: {e}")
            raise PersistenceError(
                f"No se pudo actualizar {self.catalog.entity_label} con id {local_id}: {e}",
                item_id=local_id,
            ) from e

    async def delete_by_ids(self, local_ids: Sequence[int]) -> DeleteResult:
        result = DeleteResult()
        for local_id in local_ids:
            try:
                outcome = await self.db.execute(
                    delete(self.model)
                    .where(self.model.id == local_id)
                    .execution_options(synchronize_session=False)
                )
                if outcome.rowcount == 0:
                    await self.db.rollback()
                    result.errors.append(
                        f"{self.catalog.entity_label} con id {local_id} no encontrado en la base local"
                    )
                    continue
                await self.db.commit()
                result.deleted_count += 1
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(f"Error eliminando {self.catalog.entity_label} {local_id}: {e}")
                result.errors.append(
                    f"No se pudo eliminar {self.catalog.entity_label} con id {local_id}: {e}"
                )
        return result


class MonsterRepository(SqlAlchemyCatalogRepository):
    """Repositorio del bestiario."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, MonsterModel, MONSTER_CATALOG, local_fields=("ai_generated",))


class CatalogItemRepository(SqlAlchemyCatalogRepository):
    """Repositorio del catalogo de objetos."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, CatalogItemModel, ITEM_CATALOG)
