from __future__ import annotations

import asyncio

import pytest
from conftest import page_payload, product_payload
from vendorama_search.errors import DecodeError, HttpStatusError, NetworkError
from vendorama_search.fetcher import ResultPageFetcher


@pytest.mark.asyncio
async def test_fetch_success_returns_page(fake_client):
    fake_client.queue(page_payload([product_payload(1, 1)], total=4, vendor=[{"vendor_id": 1}]))
    fetcher = ResultPageFetcher(fake_client)

    result = await fetcher.fetch([("vq", "shoes")])

    assert result is not None and result.ok
    assert result.page is not None
    assert [p.id for p in result.page.products] == ["1.1"]
    assert result.page.total_count == 4
    assert len(result.page.vendors) == 1
    assert fetcher.has_searched is True
    assert fetcher.busy is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [NetworkError("down"), HttpStatusError("bad", status_code=500), DecodeError("junk")],
)
async def test_fetch_failure_returns_typed_error(fake_client, error):
    fake_client.queue(error)
    fetcher = ResultPageFetcher(fake_client)

    result = await fetcher.fetch([("vq", "shoes"), ("page", "3")])

    assert result is not None
    assert result.ok is False
    assert result.page is None
    assert result.error is error
    assert fetcher.has_searched is True
    assert fetcher.busy is False


@pytest.mark.asyncio
async def test_second_fetch_while_in_flight_is_noop(fake_client):
    fake_client.gate = asyncio.Event()
    fake_client.queue(page_payload([product_payload(1, 1)], total=1))
    fetcher = ResultPageFetcher(fake_client)

    first = asyncio.create_task(fetcher.fetch([("vq", "a")]))
    await asyncio.sleep(0)
    assert fetcher.busy is True

    second = await fetcher.fetch([("vq", "b")])
    assert second is None
    assert len(fake_client.calls) == 1

    fake_client.gate.set()
    result = await first
    assert result is not None and result.ok
    assert fetcher.busy is False


@pytest.mark.asyncio
async def test_force_bypass_cache_is_forwarded(fake_client):
    fake_client.queue(page_payload([], total=0))
    fetcher = ResultPageFetcher(fake_client)

    await fetcher.fetch([("vq", "a")], force_bypass_cache=True)

    assert fake_client.force_flags == [True]


def test_reset_clears_has_searched(fake_client):
    fetcher = ResultPageFetcher(fake_client)
    fetcher.has_searched = True
    fetcher.reset()
    assert fetcher.has_searched is False
