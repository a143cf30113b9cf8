"""
Tests unitarios de la carga de contenido por lotes.
"""
import asyncio

import pytest

from app.application.services.content_loader import chunked, fetch_contents


def test_chunked_splits_in_fixed_batches():
    assert chunked(list("abcde"), 2) == [["a", "b"], ["c", "d"], ["e"]]
    with pytest.raises(ValueError):
        chunked(["a"], 0)


@pytest.mark.asyncio
async def test_failures_are_isolated_per_id(fakes):
    source = fakes.Source(contents={"e1": "Texto", "e3": None}, failing_content=["e2"])

    result = await fetch_contents(source, ["e1", "e2", "e3"], batch_size=2)

    assert result.contents == {"e1": "Texto", "e3": None}
    assert list(result.failures) == ["e2"]


@pytest.mark.asyncio
async def test_batches_never_overlap():
    in_flight = 0
    peak = 0

    class SlowSource:
        async def fetch_content_by_id(self, external_id):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0)
            in_flight -= 1
            return external_id.upper()

    result = await fetch_contents(SlowSource(), [f"e{i}" for i in range(7)], batch_size=3)

    assert peak <= 3
    assert len(result.contents) == 7
    assert result.failures == {}


@pytest.mark.asyncio
async def test_duplicate_ids_are_fetched_once(fakes):
    source = fakes.Source(contents={"e1": "Texto"})
    await fetch_contents(source, ["e1", "e1"])
    assert source.content_calls == ["e1"]
