"""
Carga de contenido pesado (descripciones) por lotes de tamaño fijo.

Cada lote se lanza en paralelo y se espera completo (exito o fallo) antes
de iniciar el siguiente, para respetar el limite de la API externa.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from loguru import logger

from app.domain.repositories.catalog_interfaces import IExternalCatalogSource


@dataclass
class ContentBatchResult:
    """Contenido por id y fallos aislados por id."""

    contents: Dict[str, Optional[str]] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)


def chunked(values: Sequence[str], size: int) -> List[Sequence[str]]:
    if size < 1:
        raise ValueError("El tamaño de lote debe ser >= 1")
    return [values[i:i + size] for i in range(0, len(values), size)]


async def fetch_contents(
    source: IExternalCatalogSource,
    external_ids: Sequence[str],
    batch_size: int = 10,
) -> ContentBatchResult:
    """
    Trae el contenido de cada id. Un fallo (incluido timeout) queda
    registrado para ese id y nunca afecta a los demas.

    Args:
        source: Fuente externa
        external_ids: IDs a consultar
        batch_size: Requests concurrentes por lote

    Returns:
        ContentBatchResult: contents (None = sin contenido) y failures
    """
    result = ContentBatchResult()
    if not external_ids:
        return result

    batches = chunked(list(dict.fromkeys(external_ids)), batch_size)
    logger.info(f"Cargando contenido de {len(external_ids)} registro(s) en {len(batches)} lote(s)")

    for batch in batches:
        outcomes = await asyncio.gather(
            *(source.fetch_content_by_id(external_id) for external_id in batch),
            return_exceptions=True,
        )
        for external_id, outcome in zip(batch, outcomes):
            if isinstance(outcome, BaseException):
                message = getattr(outcome, "message", None) or str(outcome) or type(outcome).__name__
                logger.warning(f"No se pudo cargar el contenido de {external_id}: {message}")
                result.failures[external_id] = message
            else:
                result.contents[external_id] = outcome

    return result
