"""Single-flight page fetcher for one search session."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional, Sequence, Tuple

from .client import VendoramaClient
from .errors import FetchError
from .models import Page
from .otel import fetch_span

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one page fetch: exactly one of ``page`` / ``error`` is set."""

    page: Optional[Page] = None
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.page is not None


class ResultPageFetcher:
    """
    Performs one paged search request at a time.

    A call made while another is outstanding returns None without touching
    the network. The fetcher never mutates session state; it only reports
    the decoded page or the failure.
    """

    def __init__(self, client: VendoramaClient) -> None:
        self.client = client
        self._busy = False
        self.has_searched = False

    @property
    def busy(self) -> bool:
        return self._busy

    def reset(self) -> None:
        self.has_searched = False

    async def fetch(
        self, params: Sequence[Tuple[str, str]], force_bypass_cache: bool = False
    ) -> Optional[FetchResult]:
        if self._busy:
            logger.debug("search_fetch_skipped_in_flight")
            return None

        self._busy = True
        page_number = next((int(v) for k, v in params if k == "page"), 1)
        try:
            with fetch_span(
                "vendorama.search.fetch",
                {"search.page": page_number, "search.force_refresh": force_bypass_cache},
            ):
                response = await self.client.search(params, force_refresh=force_bypass_cache)
        except FetchError as exc:
            logger.warning("search_fetch_failed page=%s error=%s", page_number, exc)
            return FetchResult(error=exc)
        finally:
            self._busy = False
            self.has_searched = True

        logger.debug(
            "search_fetch_decoded page=%s items=%s total=%s vendors=%s",
            page_number,
            len(response.results),
            response.total_rs,
            len(response.vendor or []),
        )
        return FetchResult(page=Page.from_response(response))
