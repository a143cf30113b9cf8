"""
Cliente minimo de la Notion REST API (sin SDK oficial).

Requisitos cubiertos:
- httpx async
- paginacion por start_cursor / next_cursor
- rate-limit/backoff (429, 5xx, timeouts)
- timeout acotado por request
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger


@dataclass(frozen=True)
class NotionCredentials:
    token: str
    version: str = "2022-06-28"


class NotionApiError(RuntimeError):
    """Error de integracion con Notion."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotionClient:
    """
    Cliente HTTP de Notion.

    No interpreta las propiedades de las paginas: eso lo hacen los mappers.
    El cliente httpx se puede inyectar (tests con MockTransport).
    """

    def __init__(
        self,
        credentials: NotionCredentials,
        *,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = "https://api.notion.com/v1",
        timeout_s: float = 30.0,
        max_retries: int = 4,
        min_backoff_s: float = 0.5,
        max_backoff_s: float = 10.0,
    ) -> None:
        self._creds = credentials
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._min_backoff_s = min_backoff_s
        self._max_backoff_s = max_backoff_s
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def query_database(self, database_id: str, page_size: int = 100) -> List[Dict[str, Any]]:
        """
        Trae todas las paginas de una base, siguiendo next_cursor.

        Args:
            database_id: ID de la base de Notion
            page_size: Paginas por request (max 100)

        Returns:
            List[Dict]: Paginas en el orden que las entrega Notion
        """
        url = f"{self._base_url}/databases/{database_id}/query"
        pages: List[Dict[str, Any]] = []
        cursor: Optional[str] = None

        while True:
            body: Dict[str, Any] = {"page_size": page_size}
            if cursor:
                body["start_cursor"] = cursor

            payload = await self._request_json("POST", url, json=body)
            pages.extend(payload.get("results") or [])

            cursor = payload.get("next_cursor")
            if not payload.get("has_more") or not cursor:
                break

        return pages

    async def list_block_children(self, block_id: str, page_size: int = 100) -> List[Dict[str, Any]]:
        """Trae todos los bloques hijos de una pagina (primer nivel)."""
        url = f"{self._base_url}/blocks/{block_id}/children"
        blocks: List[Dict[str, Any]] = []
        cursor: Optional[str] = None

        while True:
            params: Dict[str, Any] = {"page_size": page_size}
            if cursor:
                params["start_cursor"] = cursor

            payload = await self._request_json("GET", url, params=params)
            blocks.extend(payload.get("results") or [])

            cursor = payload.get("next_cursor")
            if not payload.get("has_more") or not cursor:
                break

        return blocks

    def _backoff(self, attempt: int, retry_after: Optional[str]) -> float:
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                return self._min_backoff_s
        # Exponencial simple + jitter proporcional
        base = min(self._max_backoff_s, self._min_backoff_s * (2 ** attempt))
        return base + (0.15 * base)

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Request HTTP con backoff para 429/5xx/timeout.

        Estrategia:
        - 429: respeta Retry-After si existe, si no exponencial con jitter simple.
        - 5xx y timeouts: exponencial con jitter.
        - 4xx (no 429): error inmediato (config/auth mal).
        """
        headers = {
            "Authorization": f"Bearer {self._creds.token}",
            "Notion-Version": self._creds.version,
            "Content-Type": "application/json",
        }

        for attempt in range(self._max_retries + 1):
            try:
                resp = await self._client.request(
                    method,
                    url,
                    json=json,
                    params=params,
                    headers=headers,
                    timeout=self._timeout_s,
                )
            except httpx.TimeoutException as e:
                if attempt >= self._max_retries:
                    raise NotionApiError(f"Timeout de Notion tras {attempt} reintentos: {url}") from e
                sleep_s = self._backoff(attempt, None)
                logger.warning(f"Timeout en Notion ({url}), reintento en {sleep_s:.1f}s")
                await asyncio.sleep(sleep_s)
                continue
            except httpx.HTTPError as e:
                raise NotionApiError(f"Error de red con Notion: {e}") from e

            if 200 <= resp.status_code < 300:
                try:
                    payload = resp.json()
                except ValueError as e:
                    raise NotionApiError(
                        f"Notion devolvio una respuesta que no es JSON: {url}",
                        status_code=resp.status_code,
                    ) from e
                if not isinstance(payload, dict):
                    raise NotionApiError(
                        f"Notion devolvio un payload inesperado: {url}",
                        status_code=resp.status_code,
                    )
                return payload

            # Errores recuperables
            if resp.status_code == 429 or 500 <= resp.status_code < 600:
                if attempt >= self._max_retries:
                    raise NotionApiError(
                        f"Notion error {resp.status_code} tras {attempt} reintentos: {resp.text}",
                        status_code=resp.status_code,
                    )
                sleep_s = self._backoff(attempt, resp.headers.get("Retry-After"))
                logger.warning(f"Notion respondio {resp.status_code}, reintento en {sleep_s:.1f}s")
                await asyncio.sleep(sleep_s)
                continue

            # Errores no recuperables
            raise NotionApiError(
                f"Notion request fallo {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
            )

        raise NotionApiError(f"Notion request sin respuesta: {url}")
