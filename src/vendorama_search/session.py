"""
Search session state machine.

A ``SearchSession`` owns everything the result screen renders: the active
mode and its target, filters, the accumulated result list, paging and the
back-navigation history. All mutation goes through its methods, which run on
one event loop; the HTTP request inside the fetcher is the only await point,
so page results are applied strictly one after another.

Modes are mutually exclusive: a plain search is identified by its query text,
a vendor search by the vendor id and a related search by the composite id of
the product it was started from. Starting any of them clears the other two.
The one exception is the vendor auto-upgrade: a plain search whose response
carries exactly one vendor turns into a vendor search for that storefront.
"""

from __future__ import annotations

from enum import Enum
import logging
from typing import List, Optional, Set, Tuple, Union

from .client import VendoramaClient
from .collaborators import FavoriteIds, ProductCache
from .config import Settings
from .dedup import filter_new
from .errors import FetchError, InvalidStateError
from .fetcher import FetchResult, ResultPageFetcher
from .filters import FilterSet
from .history import HistoryEntry, HistoryStack
from .models import Product, SearchMode, Vendor, vendor_favorite_id
from .query_builder import QueryState, build_params
from .taxonomy import TOP_LEVEL_LIMIT, TaxonomyCache, compute_parent_category_id

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    LOADED = "loaded"


class SearchSession:
    """Query intent, filters, paging and history for one browsing context."""

    def __init__(
        self,
        client: VendoramaClient,
        settings: Settings | None = None,
        *,
        fetcher: ResultPageFetcher | None = None,
        history: HistoryStack | None = None,
        taxonomy: TaxonomyCache | None = None,
        product_cache: ProductCache | None = None,
        favorites: FavoriteIds | None = None,
    ) -> None:
        self.settings = settings or client.settings
        self.client = client
        self.fetcher = fetcher or ResultPageFetcher(client)
        self.history = history or HistoryStack()
        self.taxonomy = taxonomy
        self.product_cache = product_cache
        self.favorites = favorites

        self.mode = SearchMode.SEARCH
        self.query = ""
        self.filters = FilterSet()
        self.within_vendor_search = False
        self.vendor_target_id: Optional[str] = None
        self.related_target_id: Optional[str] = None

        self.products: List[Product] = []
        self.vendors: List[Vendor] = []
        self.current_page = 1
        self.has_more = True
        self.total_count: Optional[int] = None
        self.status = SessionStatus.IDLE
        self.last_error: Optional[FetchError] = None
        # Set only when a fetch result is applied; discarded fetches leave it alone
        self.has_searched = False

        self._seen_ids: Set[str] = set()
        # Bumped whenever the session is replaced; stale fetch results are dropped
        self._generation = 0
        # Cache bypass wanted by whichever operation started the pending fetch
        self._bypass_cache = False

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self.status is SessionStatus.FETCHING

    @property
    def active_filters_count(self) -> int:
        return self.filters.active_count

    @property
    def can_go_back(self) -> bool:
        return self.history.can_go_back

    @property
    def seen_ids(self) -> frozenset[str]:
        return frozenset(self._seen_ids)

    @property
    def target(self) -> Tuple[SearchMode, Optional[str]]:
        """Mode plus the value that identifies the current result set."""
        if self.mode is SearchMode.VENDOR:
            return self.mode, self.vendor_target_id
        if self.mode is SearchMode.RELATED:
            return self.mode, self.related_target_id
        return self.mode, self.query

    def is_favorite(self, product: Product) -> bool:
        return self.favorites is not None and product.id in self.favorites.favorites

    def is_vendor_favorite(self, vendor_id: Union[int, str]) -> bool:
        return self.favorites is not None and vendor_favorite_id(vendor_id) in self.favorites.favorites

    def query_state(self) -> QueryState:
        return QueryState(
            mode=self.mode,
            query=self.query,
            filters=self.filters.copy(),
            within_vendor_search=self.within_vendor_search,
            vendor_target_id=self.vendor_target_id,
            related_target_id=self.related_target_id,
            page=self.current_page,
        )

    def snapshot(self) -> HistoryEntry:
        return HistoryEntry(
            products=tuple(self.products),
            query=self.query,
            mode=self.mode,
            filters=self.filters.copy(),
            within_vendor_search=self.within_vendor_search,
            vendor_target_id=self.vendor_target_id,
            related_target_id=self.related_target_id,
            seen_ids=frozenset(self._seen_ids),
            total_count=self.total_count,
        )

    # ------------------------------------------------------------------
    # Session transitions
    # ------------------------------------------------------------------

    async def search(self, text: Optional[str] = None, filters: Optional[FilterSet] = None) -> None:
        """Start a plain keyword search; ``None`` keeps the current text/filters."""
        self._begin_session()
        self.mode = SearchMode.SEARCH
        if text is not None:
            self.query = text
        if filters is not None:
            self.filters = filters.copy()
        self.vendor_target_id = None
        self.related_target_id = None
        self.within_vendor_search = False
        self.filters.vendor_category_id = None
        await self._fetch_page(append=False)

    async def search_vendor(self, vendor_id: Union[int, str, None]) -> None:
        """Show one vendor's storefront."""
        vendor_id = str(vendor_id).strip() if vendor_id is not None else ""
        if not vendor_id:
            logger.debug("search_vendor_ignored_missing_id")
            return
        self._begin_session()
        self.mode = SearchMode.VENDOR
        self.vendor_target_id = vendor_id
        self.related_target_id = None
        self.query = ""
        self.filters.vendor_category_id = None
        await self._fetch_page(append=False)

    async def search_related(self, product: Union[Product, str]) -> None:
        """Show items related to ``product`` (a Product or its composite id)."""
        related_id = product.id if isinstance(product, Product) else str(product).strip()
        if not related_id:
            logger.debug("search_related_ignored_missing_id")
            return
        self._begin_session()
        self.mode = SearchMode.RELATED
        self.related_target_id = related_id
        self.vendor_target_id = None
        self.query = ""
        self.within_vendor_search = False
        self.filters.vendor_category_id = None
        self.filters.vendor_location_id = None
        await self._fetch_page(append=False)

    async def search_within_vendor(self, text: str) -> None:
        """Narrow the current storefront to ``text`` without leaving vendor mode."""
        if self.mode is not SearchMode.VENDOR or self.is_loading:
            return
        self.query = text
        self.within_vendor_search = True
        await self.refresh_first_page()

    async def search_category(self, vc: int) -> None:
        """
        Browse a single category (as when tapping a product's category).

        Clears every other filter and query, resolves display names through
        the taxonomy cache when one is available, then reloads page one.
        """
        if vc <= 0:
            return
        self.reset_filters()
        info = await self.taxonomy.resolve_category(vc) if self.taxonomy else None
        if vc < TOP_LEVEL_LIMIT:
            self.filters.select_top_category(vc, info.parent_name if info else None)
        else:
            parent_id = compute_parent_category_id(vc)
            if parent_id is None:
                return
            self.filters.select_top_category(parent_id, info.parent_name if info else None)
            self.filters.select_sub_category(vc, info.sub_name if info else None)
        await self.refresh_first_page()

    async def load_next_page(self) -> None:
        """Fetch and append the next page; no-op unless more pages are expected."""
        if self.status is not SessionStatus.LOADED or not self.has_more:
            return
        if self.fetcher.busy or self._missing_target():
            return
        self.current_page += 1
        self.status = SessionStatus.FETCHING
        await self._fetch_page(append=True)

    async def load_next_page_if_needed(self, item: Optional[Product]) -> None:
        """Infinite-scroll hook: call with the item that just became visible."""
        if item is None or not self.products:
            return
        threshold = max(len(self.products) - self.settings.scroll_lookahead, 0)
        index = next((i for i, p in enumerate(self.products) if p.id == item.id), None)
        if index is not None and index >= threshold:
            await self.load_next_page()

    async def refresh_first_page(self) -> None:
        """Reload page one of the current session, bypassing HTTP caches."""
        if self.status is SessionStatus.FETCHING:
            return
        if self._missing_target():
            return
        # Anything still in flight was requested for the result set being replaced
        self._generation += 1
        self._bypass_cache = True
        self.current_page = 1
        self.has_more = True
        self.total_count = None
        self.products = []
        if self.mode is not SearchMode.VENDOR:
            self.vendors = []
        self._seen_ids = set()
        self.status = SessionStatus.FETCHING
        await self._fetch_page(append=False, force_refresh=True)

    def go_back(self) -> bool:
        """Restore the previous result set; pagination stays off until a new search."""
        entry = self.history.pop()
        if entry is None:
            return False
        self._generation += 1
        self.products = list(entry.products)
        self.query = entry.query
        self.mode = entry.mode
        self.filters = entry.filters.copy()
        self.within_vendor_search = entry.within_vendor_search
        self.vendor_target_id = entry.vendor_target_id
        self.related_target_id = entry.related_target_id
        self.total_count = entry.total_count
        self.current_page = 1
        self.vendors = []
        self.has_more = False
        self._seen_ids = set(entry.seen_ids) or {p.id for p in self.products}
        self.status = SessionStatus.LOADED
        logger.debug("search_history_restored mode=%s products=%s", self.mode.value, len(self.products))
        return True

    def reset_filters(self) -> None:
        """Return to a blank search: no text, mode, filters or results."""
        self._generation += 1
        self.mode = SearchMode.SEARCH
        self.query = ""
        self.within_vendor_search = False
        self.vendor_target_id = None
        self.related_target_id = None
        self.filters = FilterSet()
        self.products = []
        self.vendors = []
        self.total_count = None
        self.current_page = 1
        self.has_more = True
        self._seen_ids = set()
        self.last_error = None
        self.has_searched = False
        self._bypass_cache = False
        self.status = SessionStatus.IDLE
        self.fetcher.reset()

    def clear_history(self) -> None:
        self.history.clear()

    def reset(self) -> None:
        """App-level reset (home/logo): blank session and no history."""
        self.reset_filters()
        self.clear_history()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _begin_session(self) -> None:
        if self.products:
            self.history.push(self.snapshot())
        self._generation += 1
        self.products = []
        self.vendors = []
        self.current_page = 1
        self.has_more = True
        self.total_count = None
        self._seen_ids = set()
        self.last_error = None
        self._bypass_cache = False
        self.status = SessionStatus.FETCHING

    def _missing_target(self) -> bool:
        if self.mode is SearchMode.VENDOR:
            return not self.vendor_target_id
        if self.mode is SearchMode.RELATED:
            return not self.related_target_id
        return False

    def _settle_without_fetch(self) -> None:
        self.status = SessionStatus.LOADED if self.products or self.has_searched else SessionStatus.IDLE

    async def _fetch_page(self, *, append: bool, force_refresh: bool = False) -> None:
        while True:
            if self.fetcher.busy:
                # The running fetch belongs to a superseded session; it picks this one up when it lands
                logger.debug("search_fetch_deferred target=%s", self.target)
                return

            generation = self._generation
            target = self.target
            try:
                params = build_params(
                    self.query_state(), max_query_length=self.settings.max_query_length
                )
            except InvalidStateError as exc:
                logger.warning("search_fetch_aborted reason=%s page=%s", exc, self.current_page)
                if append:
                    self.current_page -= 1
                self._settle_without_fetch()
                return

            if self.settings.debug_logging:
                logger.debug(
                    "search_fetch page=%s mode=%s params=%s",
                    self.current_page,
                    self.mode.value,
                    "&".join(f"{k}={v}" for k, v in params),
                )

            result = await self.fetcher.fetch(params, force_bypass_cache=force_refresh)
            if result is None:
                return

            if generation != self._generation or target != self.target:
                logger.info("search_result_discarded target=%s current=%s", target, self.target)
                if self.status is SessionStatus.FETCHING:
                    append = self.current_page > 1
                    force_refresh = self._bypass_cache and not append
                    continue
                return

            self._apply(result, append=append)
            return

    def _apply(self, result: FetchResult, *, append: bool) -> None:
        self.has_searched = True
        if result.page is None:
            self.last_error = result.error
            logger.warning(
                "search_fetch_failed mode=%s page=%s error=%s",
                self.mode.value,
                self.current_page,
                result.error,
            )
            if append:
                # Retry the same page on the next scroll instead of skipping it
                self.current_page -= 1
            self.status = SessionStatus.LOADED
            return

        page = result.page
        self.last_error = None
        kept, self._seen_ids = filter_new(page.products, self._seen_ids)
        self.total_count = page.total_count
        if append:
            self.products = [*self.products, *kept]
        else:
            self.products = kept

        if self.mode is SearchMode.SEARCH and len(page.vendors) == 1:
            self._upgrade_to_vendor(page.vendors[0])

        if self.mode is SearchMode.VENDOR:
            if append and self.vendors:
                self.vendors = [*self.vendors, *page.vendors]
            else:
                self.vendors = list(page.vendors)
        else:
            self.vendors = []

        if len(self.products) >= page.total_count or not kept:
            self.has_more = False
            logger.debug("search_pages_exhausted page=%s count=%s", self.current_page, len(self.products))

        self.status = SessionStatus.LOADED
        if self.product_cache is not None and kept:
            self.product_cache.update_cache(kept)

    def _upgrade_to_vendor(self, vendor: Vendor) -> None:
        if vendor.vendor_id is None:
            return
        logger.info("search_matched_single_vendor vendor_id=%s", vendor.vendor_id)
        self.mode = SearchMode.VENDOR
        self.query = ""
        self.vendor_target_id = str(vendor.vendor_id)
        self.related_target_id = None
