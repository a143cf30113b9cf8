"""
Tests unitarios del cliente de Notion usando httpx.MockTransport.

Verifica paginacion, reintentos con backoff y errores no recuperables.
"""
import json

import httpx
import pytest

from app.infrastructure.external.notion_sync.notion_client import (
    NotionApiError,
    NotionClient,
    NotionCredentials,
)


def _client(handler, **kwargs) -> NotionClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NotionClient(
        NotionCredentials(token="secret-token"),
        client=http,
        base_url="https://notion.test/v1",
        min_backoff_s=0,
        max_backoff_s=0,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_query_database_follows_cursor():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content or b"{}")
        bodies.append(body)
        if "start_cursor" not in body:
            return httpx.Response(200, json={"results": [{"id": "p1"}], "has_more": True, "next_cursor": "c2"})
        return httpx.Response(200, json={"results": [{"id": "p2"}], "has_more": False, "next_cursor": None})

    pages = await _client(handler).query_database("db1")

    assert [p["id"] for p in pages] == ["p1", "p2"]
    assert bodies[1]["start_cursor"] == "c2"


@pytest.mark.asyncio
async def test_requests_carry_auth_and_version_headers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["version"] = request.headers["Notion-Version"]
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"results": [], "has_more": False})

    await _client(handler).list_block_children("page-1")

    assert seen["auth"] == "Bearer secret-token"
    assert seen["version"] == "2022-06-28"
    assert seen["url"].startswith("https://notion.test/v1/blocks/page-1/children")


@pytest.mark.asyncio
async def test_retries_on_rate_limit_and_server_errors():
    responses = [
        httpx.Response(429, headers={"Retry-After": "0"}, json={}),
        httpx.Response(502, json={}),
        httpx.Response(200, json={"results": [{"id": "p1"}], "has_more": False}),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    pages = await _client(handler, max_retries=3).query_database("db1")

    assert pages == [{"id": "p1"}]
    assert responses == []


@pytest.mark.asyncio
async def test_retries_on_timeout():
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        if calls["n"] == 1:
            raise httpx.ReadTimeout("lento", request=request)
        return httpx.Response(200, json={"results": [], "has_more": False})

    assert await _client(handler).query_database("db1") == []
    assert calls["n"] == 2


@pytest.mark.asyncio
async def test_gives_up_after_max_retries():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    with pytest.raises(NotionApiError) as exc_info:
        await _client(handler, max_retries=2).query_database("db1")

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_client_errors_fail_immediately():
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(401, json={"message": "API token is invalid."})

    with pytest.raises(NotionApiError) as exc_info:
        await _client(handler).query_database("db1")

    assert exc_info.value.status_code == 401
    assert calls["n"] == 1


@pytest.mark.asyncio
async def test_non_json_success_body_is_api_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    client = _client(handler)

    with pytest.raises(NotionApiError) as exc_info:
        await client.query_database("db-1")

    assert exc_info.value.status_code == 200
