from __future__ import annotations

import asyncio
from typing import Any

import pytest
from vendorama_search.config import Settings
from vendorama_search.models import ProductsResponse

BASE_URL = "https://api.vendorama.test/app/ios/1/"


def product_payload(vendor_id: int, product_id: int, **overrides: Any) -> dict:
    payload = {
        "name": f"Item {vendor_id}.{product_id}",
        "price": "$10.00",
        "sale_price": "",
        "image": f"/img/{product_id}.jpg",
        "url": f"https://shop.example/{product_id}",
        "product_id": product_id,
        "vendor_id": vendor_id,
        "vendor_name": f"Vendor {vendor_id}",
        "summary": "",
        "suburb": "Ponsonby",
        "vc": 1200,
    }
    payload.update(overrides)
    return payload


def page_payload(
    products: list[dict], total: int, *, vendor: list[dict] | None = None, page: int = 1
) -> dict:
    payload: dict[str, Any] = {
        "results": products,
        "total_rs": total,
        "page": page,
        "per_page": 20,
    }
    if vendor is not None:
        payload["vendor"] = vendor
    return payload


class FakeSearchClient:
    """Stands in for VendoramaClient.search with queued payloads."""

    def __init__(self, settings: Settings, responses: list[Any] | None = None) -> None:
        self.settings = settings
        self.responses: list[Any] = list(responses or [])
        self.calls: list[list[tuple[str, str]]] = []
        self.force_flags: list[bool] = []
        self.gate: asyncio.Event | None = None

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    async def search(self, params, *, force_refresh: bool = False) -> ProductsResponse:
        self.calls.append(list(params))
        self.force_flags.append(force_refresh)
        if self.gate is not None:
            await self.gate.wait()
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return ProductsResponse.model_validate(item)

    def params(self, index: int = -1) -> dict[str, str]:
        return dict(self.calls[index])


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url=BASE_URL, api_key="test-key")


@pytest.fixture
def fake_client(settings: Settings) -> FakeSearchClient:
    return FakeSearchClient(settings)
