"""
Read-through name cache for categories and locations.

Category codes below 999 are top-level; larger codes are sub-categories whose
parent is derived from the numeric range they fall into. Names are fetched
lazily from the lookup endpoints and kept for the lifetime of the cache.
Lookup failures leave the cache as it was and are only logged.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, List, Optional

from .client import VendoramaClient
from .errors import FetchError
from .models import CategoryItem

logger = logging.getLogger(__name__)

TOP_LEVEL_LIMIT = 999

# (low, high, parent) inclusive ranges of sub-category codes
_PARENT_RANGES = (
    (1000, 1499, 100),
    (1500, 1999, 150),
    (2000, 2499, 200),
    (2500, 2999, 250),
    (3000, 3499, 300),
    (3500, 3999, 350),
    (4000, 4499, 400),
    (4500, 4999, 450),
    (5000, 5499, 500),
    (5500, 5999, 550),
    (6000, 6499, 600),
    (9000, 9999, 900),
)


def compute_parent_category_id(category_id: int) -> Optional[int]:
    """Parent of a category code; top-level codes are their own parent."""
    for low, high, parent in _PARENT_RANGES:
        if low <= category_id <= high:
            return parent
    if category_id >= 1000:
        return (category_id // 1000) * 100
    if category_id > 0:
        return category_id
    return None


def clean_category_name(raw: Optional[str]) -> Optional[str]:
    """Strip the trailing product count, e.g. ``"Clothing (335,117)"`` -> ``"Clothing"``."""
    if not raw:
        return raw
    name = raw.strip()
    if "(" in name:
        name = name[: name.index("(")]
    cleaned = name.strip().strip(",").strip()
    return cleaned or None


@dataclass(frozen=True)
class CategoryInfo:
    parent_id: int
    parent_name: Optional[str] = None
    sub_id: Optional[int] = None
    sub_name: Optional[str] = None

    @property
    def title(self) -> str:
        parent = clean_category_name(self.parent_name) or ""
        if self.sub_id is not None:
            sub = clean_category_name(self.sub_name) or ""
            if sub:
                return f"{parent} › {sub}"
        return parent


class TaxonomyCache:
    """Lazily populated id -> name lookups backed by the API."""

    def __init__(self, client: VendoramaClient) -> None:
        self.client = client
        self.top_categories: List[CategoryItem] = []
        self.sub_categories: Dict[int, List[CategoryItem]] = {}
        self.top_locations: List[CategoryItem] = []
        self.sub_locations: Dict[int, List[CategoryItem]] = {}

    async def ensure_top_categories(self) -> None:
        if self.top_categories:
            return
        try:
            self.top_categories = await self.client.get_categories()
        except FetchError as exc:
            logger.info("category_lookup_failed parent=None error=%s", exc)

    async def ensure_sub_categories(self, parent_id: int) -> None:
        if parent_id in self.sub_categories:
            return
        try:
            self.sub_categories[parent_id] = await self.client.get_categories(parent_id)
        except FetchError as exc:
            logger.info("category_lookup_failed parent=%s error=%s", parent_id, exc)

    async def ensure_top_locations(self) -> None:
        if self.top_locations:
            return
        try:
            self.top_locations = await self.client.get_locations()
        except FetchError as exc:
            logger.info("location_lookup_failed parent=None error=%s", exc)

    async def ensure_sub_locations(self, parent_id: int) -> None:
        if parent_id in self.sub_locations:
            return
        try:
            self.sub_locations[parent_id] = await self.client.get_locations(parent_id)
        except FetchError as exc:
            logger.info("location_lookup_failed parent=%s error=%s", parent_id, exc)

    def category_info(self, vc: int) -> Optional[CategoryInfo]:
        """Resolve a category code from what is already cached; no network."""
        top_names = {item.id: item.name for item in self.top_categories}
        if vc < TOP_LEVEL_LIMIT:
            if vc <= 0:
                return None
            return CategoryInfo(parent_id=vc, parent_name=top_names.get(vc))
        parent_id = compute_parent_category_id(vc)
        if parent_id is None:
            return None
        sub_name = next(
            (item.name for item in self.sub_categories.get(parent_id, []) if item.id == vc),
            None,
        )
        return CategoryInfo(
            parent_id=parent_id,
            parent_name=top_names.get(parent_id),
            sub_id=vc,
            sub_name=sub_name,
        )

    async def resolve_category(self, vc: int) -> Optional[CategoryInfo]:
        """Load whatever names ``vc`` needs, then resolve it."""
        await self.ensure_top_categories()
        if vc >= TOP_LEVEL_LIMIT:
            parent_id = compute_parent_category_id(vc)
            if parent_id is not None:
                await self.ensure_sub_categories(parent_id)
        return self.category_info(vc)

    async def location_name(self, location_id: int, parent_id: Optional[int] = None) -> Optional[str]:
        if parent_id is None:
            await self.ensure_top_locations()
            items = self.top_locations
        else:
            await self.ensure_sub_locations(parent_id)
            items = self.sub_locations.get(parent_id, [])
        return next((item.name for item in items if item.id == location_id), None)
