"""
Interfaces de los colaboradores del motor de sincronizacion.
Define el contrato que debe cumplir cualquier implementacion
(fuente externa, almacen local del catalogo y registros dependientes).
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from app.domain.entities.catalog import DependentRecord, ExternalRecord, LocalRecord
from app.domain.entities.sync import DeleteResult


class IExternalCatalogSource(ABC):
    """
    Fuente externa de registros de catalogo (Notion).
    """

    @abstractmethod
    async def fetch_all(self, fetch_content: bool = False) -> List[ExternalRecord]:
        """
        Obtiene todos los registros normalizados.

        Args:
            fetch_content: Si False, los campos de contenido pesado se omiten
                y los registros quedan con content_loaded=False

        Returns:
            List[ExternalRecord]: Registros en el orden de la fuente

        Raises:
            FetchError: Fallo de transporte o autenticacion
        """
        pass

    @abstractmethod
    async def fetch_content_by_id(self, external_id: str) -> Optional[str]:
        """
        Obtiene el contenido pesado de un registro.

        Returns:
            Optional[str]: Contenido, o None si no existe en la fuente

        Raises:
            FetchError: Fallo de transporte (incluye timeout)
        """
        pass

    @abstractmethod
    async def check_connection(self) -> List[Dict[str, Any]]:
        """
        Estado de cada base configurada: name, status, count, error.
        """
        pass


class ICatalogStore(ABC):
    """
    Almacen relacional del catalogo.
    Cada escritura es atomica por si misma.
    """

    @abstractmethod
    async def get_all(self) -> List[LocalRecord]:
        pass

    @abstractmethod
    async def get_by_id(self, local_id: int) -> Optional[LocalRecord]:
        pass

    @abstractmethod
    async def upsert(self, record: ExternalRecord) -> LocalRecord:
        """
        Inserta o actualiza por la restriccion unica de external_id.
        Solo escribe campos del manifiesto.

        Raises:
            PersistenceError: Fallo de escritura
        """
        pass

    @abstractmethod
    async def update_fields(self, local_id: int, patch: Dict[str, Any]) -> None:
        """
        Actualiza unicamente las claves recibidas.

        Raises:
            ItemNotFoundError: El registro local no existe
            ValidationError: Clave fuera del manifiesto
            PersistenceError: Fallo de escritura
        """
        pass

    @abstractmethod
    async def delete_by_ids(self, local_ids: Sequence[int]) -> DeleteResult:
        """
        Elimina registros por id local. Los fallos por id se acumulan
        en DeleteResult.errors.
        """
        pass


class IDependentStore(ABC):
    """
    Registros que embeben copias de campos del catalogo.
    Solo lo usa el actualizador en cascada.
    """

    @abstractmethod
    async def get_all_dependents(self) -> List[DependentRecord]:
        pass

    @abstractmethod
    async def save_dependent(self, record: DependentRecord) -> None:
        """
        Raises:
            PersistenceError: Fallo de escritura
        """
        pass
