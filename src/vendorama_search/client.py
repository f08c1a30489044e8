"""HTTP client for the Vendorama app API."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Tuple

import httpx
from pydantic import SecretStr, TypeAdapter, ValidationError

from .collaborators import IdentityProvider
from .config import Settings
from .errors import DecodeError, HttpStatusError, NetworkError
from .models import CategoryItem, ProductsResponse, SuggestResponse

logger = logging.getLogger(__name__)

QueryItems = Sequence[Tuple[str, str]]

_category_list = TypeAdapter(List[CategoryItem])


def _secret_value(value: SecretStr | str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, SecretStr):
        return value.get_secret_value()
    return str(value)


class VendoramaClient:
    """HTTP client for the Vendorama search API."""

    def __init__(
        self,
        settings: Settings,
        identity: IdentityProvider | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.identity = identity
        self.http = http or httpx.AsyncClient(
            base_url=settings.api_base_url,
            timeout=httpx.Timeout(
                connect=10.0,
                read=settings.request_timeout,
                write=10.0,
                pool=10.0,
            ),
        )

    async def aclose(self) -> None:
        await self.http.aclose()

    def _auth_params(self) -> List[Tuple[str, str]]:
        items = [("api_key", _secret_value(self.settings.api_key))]
        if self.identity is None:
            return items
        token = self.identity.token()
        if token:
            items.append(("token", token))
        user_id = self.identity.user_id()
        if user_id:
            items.append(("user_id", str(user_id)))
        return items

    async def call(
        self,
        path: str,
        *,
        params: QueryItems | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | httpx.Timeout | None = None,
    ) -> Any:
        query = [*(params or []), *self._auth_params()]
        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)
        try:
            response = await self.http.request(
                "GET",
                path,
                params=query,
                headers=request_headers,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.TimeoutException as exc:
            raise NetworkError(f"search_timeout: Request to {path or '/'} timed out") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"search_connection_failed: {exc}") from exc

        if self.settings.debug_logging:
            logger.debug("GET %s -> %s", response.request.url, response.status_code)

        if response.status_code < 200 or response.status_code >= 300:
            raise HttpStatusError(
                f"search_http_{response.status_code}", status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"search_invalid_json: {response.text[:300]}") from exc

    async def search(
        self, params: QueryItems, *, force_refresh: bool = False
    ) -> ProductsResponse:
        headers = {"Cache-Control": "no-cache"} if force_refresh else None
        payload = await self.call("", params=params, headers=headers)
        try:
            return ProductsResponse.model_validate(payload)
        except ValidationError as exc:
            raise DecodeError(f"search_unexpected_shape: {exc.error_count()} errors") from exc

    async def get_categories(self, parent_id: Optional[int] = None) -> List[CategoryItem]:
        params = [("id", str(parent_id))] if parent_id is not None else None
        payload = await self.call("categories", params=params)
        return self._decode_items(payload)

    async def get_locations(self, parent_id: Optional[int] = None) -> List[CategoryItem]:
        params = [("id", str(parent_id))] if parent_id is not None else None
        payload = await self.call("location", params=params)
        return self._decode_items(payload)

    async def suggest(self, query: str) -> List[str]:
        payload = await self.call("suggest", params=[("vq", query)])
        try:
            decoded = SuggestResponse.model_validate(payload)
        except ValidationError as exc:
            raise DecodeError("suggest_unexpected_shape") from exc
        return decoded.results[: self.settings.suggestion_limit]

    @staticmethod
    def _decode_items(payload: Any) -> List[CategoryItem]:
        try:
            return _category_list.validate_python(payload)
        except ValidationError as exc:
            raise DecodeError("lookup_unexpected_shape") from exc
