"""
Configuración de fixtures para pytest.
"""
import os

# La app se importa con una base SQLite en memoria (sin asyncpg ni Postgres)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FILE", "logs/test.log")

import copy
from typing import Any, AsyncGenerator, Dict, Iterable, List, Optional, Sequence

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.infrastructure.database.session import Base
from app.infrastructure.database import models  # noqa: F401
from app.domain.entities.catalog import DependentRecord, ExternalRecord, LocalRecord
from app.domain.entities.sync import DeleteResult
from app.domain.repositories.catalog_interfaces import (
    ICatalogStore,
    IDependentStore,
    IExternalCatalogSource,
)
from app.shared.constants.field_manifests import EXTERNAL_ID_FIELD, CatalogDefinition
from app.shared.exceptions.sync import (
    FetchError,
    ItemNotFoundError,
    PersistenceError,
    ValidationError,
)


# URL de base de datos de prueba
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Fixture que proporciona una sesión de base de datos para tests.
    Crea una base de datos en memoria para cada test.
    """
    # Crear engine de prueba (una sola conexion compartida por la base en memoria)
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Crear tablas
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Crear session factory
    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    # Proporcionar sesión
    async with async_session() as session:
        yield session

    # Limpiar
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


# =============================================================================
# Dobles de prueba para los colaboradores del motor de sincronizacion
# =============================================================================

class FakeSource(IExternalCatalogSource):
    """Fuente externa en memoria."""

    def __init__(
        self,
        records: Iterable[ExternalRecord] = (),
        contents: Optional[Dict[str, Optional[str]]] = None,
        failing_content: Iterable[str] = (),
        fetch_error: Optional[Exception] = None,
    ):
        self.records = list(records)
        self.contents = contents or {}
        self.failing_content = set(failing_content)
        self.fetch_error = fetch_error
        self.fetch_calls: List[bool] = []
        self.content_calls: List[str] = []

    async def fetch_all(self, fetch_content: bool = False) -> List[ExternalRecord]:
        self.fetch_calls.append(fetch_content)
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.records)

    async def fetch_content_by_id(self, external_id: str) -> Optional[str]:
        self.content_calls.append(external_id)
        if external_id in self.failing_content:
            raise FetchError(f"timeout leyendo {external_id}")
        return self.contents.get(external_id)

    async def check_connection(self) -> List[Dict[str, Any]]:
        return [{"name": "Fake", "status": "ok", "count": len(self.records), "error": None}]


class FakeStore(ICatalogStore):
    """Almacen local en memoria con las mismas reglas que el repositorio."""

    def __init__(self, catalog: CatalogDefinition, records: Iterable[LocalRecord] = ()):
        self.catalog = catalog
        self.rows: Dict[int, LocalRecord] = {r.id: copy.deepcopy(r) for r in records}
        self.calls: List[tuple] = []
        self.failing_writes: set = set()
        self._next_id = max(self.rows, default=0) + 1

    async def get_all(self) -> List[LocalRecord]:
        return [copy.deepcopy(r) for _, r in sorted(self.rows.items())]

    async def get_by_id(self, local_id: int) -> Optional[LocalRecord]:
        row = self.rows.get(local_id)
        return copy.deepcopy(row) if row else None

    async def upsert(self, record: ExternalRecord) -> LocalRecord:
        self.calls.append(("upsert", record.external_id))
        if record.external_id in self.failing_writes:
            raise PersistenceError(f"fallo de escritura {record.external_id}")
        fields = {name: record.fields.get(name) for name in self.catalog.field_names}
        for row in self.rows.values():
            if row.external_id == record.external_id:
                row.fields = fields
                return copy.deepcopy(row)
        row = LocalRecord(id=self._next_id, external_id=record.external_id, fields=fields)
        self.rows[row.id] = row
        self._next_id += 1
        return copy.deepcopy(row)

    async def update_fields(self, local_id: int, patch: Dict[str, Any]) -> None:
        self.calls.append(("update", local_id, dict(patch)))
        unknown = set(patch) - set(self.catalog.field_names) - {EXTERNAL_ID_FIELD}
        if unknown:
            raise ValidationError(f"campos no permitidos {sorted(unknown)}")
        if local_id in self.failing_writes:
            raise PersistenceError(f"fallo de escritura {local_id}")
        row = self.rows.get(local_id)
        if row is None:
            raise ItemNotFoundError(f"id {local_id} no encontrado")
        for key, value in patch.items():
            if key == EXTERNAL_ID_FIELD:
                row.external_id = value
            else:
                row.fields[key] = value

    async def delete_by_ids(self, local_ids: Sequence[int]) -> DeleteResult:
        self.calls.append(("delete", tuple(local_ids)))
        result = DeleteResult()
        for local_id in local_ids:
            if self.rows.pop(local_id, None) is None:
                result.errors.append(f"id {local_id} no encontrado")
            else:
                result.deleted_count += 1
        return result


class FakeDependents(IDependentStore):
    """Personajes en memoria; registra cada escritura."""

    def __init__(self, records: Iterable[DependentRecord] = ()):
        self.rows: Dict[int, DependentRecord] = {r.id: copy.deepcopy(r) for r in records}
        self.saved: List[int] = []
        self.failing: set = set()

    async def get_all_dependents(self) -> List[DependentRecord]:
        return [copy.deepcopy(r) for _, r in sorted(self.rows.items())]

    async def save_dependent(self, record: DependentRecord) -> None:
        if record.id in self.failing:
            raise PersistenceError(f"no se pudo guardar {record.id}")
        self.saved.append(record.id)
        self.rows[record.id] = copy.deepcopy(record)


@pytest.fixture
def fakes():
    """Acceso a las clases de dobles (FakeSource, FakeStore, FakeDependents)."""
    class _Fakes:
        Source = FakeSource
        Store = FakeStore
        Dependents = FakeDependents
    return _Fakes
