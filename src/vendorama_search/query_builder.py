"""
Request parameter composition for the base search endpoint.

Pure functions only: the session hands over a ``QueryState`` and gets back an
ordered list of ``(key, value)`` pairs ready for the HTTP client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .errors import InvalidStateError
from .filters import FilterSet
from .models import SearchMode

MAX_QUERY_LENGTH = 100

# Lower-cased feed names the server interprets itself; they are not user queries
RESERVED_QUERIES = frozenset(
    {
        "new",
        "trending",
        "similar",
        "new arrivals",
        "for you",
    }
)

Params = List[Tuple[str, str]]


@dataclass(frozen=True)
class QueryState:
    """Everything the builder reads from a session."""

    mode: SearchMode = SearchMode.SEARCH
    query: str = ""
    filters: FilterSet = field(default_factory=FilterSet)
    within_vendor_search: bool = False
    vendor_target_id: Optional[str] = None
    related_target_id: Optional[str] = None
    page: int = 1


def _trimmed_lower(text: Optional[str], max_length: int) -> str:
    if not text:
        return ""
    return text.strip().lower()[:max_length]


def is_reserved_query(text: Optional[str]) -> bool:
    if not text:
        return False
    return text.strip().lower() in RESERVED_QUERIES


def normalize_query(text: Optional[str], max_length: int = MAX_QUERY_LENGTH) -> Optional[str]:
    """Trim, lower-case and truncate a user query; None when empty or reserved."""
    if not text or not text.strip() or is_reserved_query(text):
        return None
    return _trimmed_lower(text, max_length)


def _id_selection(
    multi: Iterable[int], single: Optional[int], top: Optional[int]
) -> Optional[str]:
    ids = sorted(multi)
    if ids:
        return ",".join(str(i) for i in ids)
    if single is not None:
        return str(single)
    if top is not None:
        return str(top)
    return None


def category_param(filters: FilterSet) -> Optional[str]:
    return _id_selection(filters.sub_category_ids, filters.sub_category_id, filters.top_category_id)


def location_param(filters: FilterSet) -> Optional[str]:
    return _id_selection(filters.sub_location_ids, filters.sub_location_id, filters.top_location_id)


def _target_params(state: QueryState, max_length: int) -> Params:
    params: Params = []
    filters = state.filters

    if state.mode is SearchMode.RELATED:
        if not state.related_target_id:
            raise InvalidStateError("related_target_missing")
        params.append(("vs", state.related_target_id))
        return params

    if state.mode is SearchMode.VENDOR:
        if not state.vendor_target_id:
            raise InvalidStateError("vendor_target_missing")
        params.append(("vu", state.vendor_target_id))
        if filters.vendor_category_id is not None:
            params.append(("ci", str(filters.vendor_category_id)))
        if filters.vendor_location_id is not None:
            params.append(("nm", str(filters.vendor_location_id)))
        vq = normalize_query(state.query, max_length)
        if state.within_vendor_search and vq:
            params.append(("vq", vq))
        return params

    vq = normalize_query(state.query, max_length)
    if vq:
        params.append(("vq", vq))
    else:
        # Reserved feed names go through untouched so the server can pick its own feed
        raw = _trimmed_lower(state.query, max_length)
        if raw and filters.active_count == 0:
            params.append(("vq", raw))

    vc = category_param(filters)
    if vc is not None:
        params.append(("vc", vc))
    vl = location_param(filters)
    if vl is not None:
        params.append(("vl", vl))
    return params


def build_params(state: QueryState, *, max_query_length: int = MAX_QUERY_LENGTH) -> Params:
    """
    Compose the request parameters for ``state``.

    Raises InvalidStateError when the active mode has no target id.
    """
    params = _target_params(state, max_query_length)
    filters = state.filters

    if filters.price_from is not None:
        params.append(("price_from", str(filters.price_from)))
    if filters.price_to is not None:
        params.append(("price_to", str(filters.price_to)))
    if filters.on_sale:
        params.append(("onsale", "1"))
    if filters.restricted:
        params.append(("restricted", "1"))
    if state.page > 1:
        params.append(("page", str(state.page)))
    return params
