"""Filter selection applied on top of a search session."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Set


def parse_price_text(text: Optional[str]) -> Optional[int]:
    """Keep the digits of a price field; empty input means no bound."""
    if not text:
        return None
    digits = "".join(ch for ch in text.strip() if ch.isdigit())
    if not digits:
        return None
    return int(digits)


@dataclass
class FilterSet:
    """
    Price, flag, category and location filters.

    Sub-selections only make sense under their parent, so choosing a new
    top-level category or location drops whatever sub-selection was made
    before. When both a multi-select set and a single sub id are present the
    set wins at request time.
    """

    price_from: Optional[int] = None
    price_to: Optional[int] = None
    on_sale: bool = False
    restricted: bool = False

    top_category_id: Optional[int] = None
    top_category_name: Optional[str] = None
    sub_category_id: Optional[int] = None
    sub_category_name: Optional[str] = None
    sub_category_ids: Set[int] = field(default_factory=set)

    top_location_id: Optional[int] = None
    top_location_name: Optional[str] = None
    sub_location_id: Optional[int] = None
    sub_location_name: Optional[str] = None
    sub_location_ids: Set[int] = field(default_factory=set)

    # Vendor storefront refinements (sent as ci / nm in vendor mode)
    vendor_category_id: Optional[int] = None
    vendor_location_id: Optional[int] = None

    def __post_init__(self) -> None:
        for bound in (self.price_from, self.price_to):
            if bound is not None and bound < 0:
                raise ValueError("price bounds must be non-negative")

    @property
    def has_category(self) -> bool:
        return (
            self.top_category_id is not None
            or self.sub_category_id is not None
            or bool(self.sub_category_ids)
        )

    @property
    def has_location(self) -> bool:
        return (
            self.top_location_id is not None
            or self.sub_location_id is not None
            or bool(self.sub_location_ids)
        )

    @property
    def active_count(self) -> int:
        """Number of filter groups the user has turned on (restricted excluded)."""
        count = 0
        if self.price_from is not None or self.price_to is not None:
            count += 1
        if self.on_sale:
            count += 1
        if self.has_category:
            count += 1
        if self.has_location:
            count += 1
        return count

    def set_price_range(self, price_from: Optional[int], price_to: Optional[int]) -> None:
        for bound in (price_from, price_to):
            if bound is not None and bound < 0:
                raise ValueError("price bounds must be non-negative")
        self.price_from = price_from
        self.price_to = price_to

    def select_top_category(self, category_id: Optional[int], name: Optional[str] = None) -> None:
        self.top_category_id = category_id
        self.top_category_name = name if category_id is not None else None
        self.sub_category_id = None
        self.sub_category_name = None
        self.sub_category_ids = set()

    def select_sub_category(self, category_id: Optional[int], name: Optional[str] = None) -> None:
        self.sub_category_id = category_id
        self.sub_category_name = name if category_id is not None else None

    def toggle_sub_category(self, category_id: int) -> None:
        if category_id in self.sub_category_ids:
            self.sub_category_ids.discard(category_id)
        else:
            self.sub_category_ids.add(category_id)

    def select_top_location(self, location_id: Optional[int], name: Optional[str] = None) -> None:
        self.top_location_id = location_id
        self.top_location_name = name if location_id is not None else None
        self.sub_location_id = None
        self.sub_location_name = None
        self.sub_location_ids = set()

    def select_sub_location(self, location_id: Optional[int], name: Optional[str] = None) -> None:
        self.sub_location_id = location_id
        self.sub_location_name = name if location_id is not None else None

    def toggle_sub_location(self, location_id: int) -> None:
        if location_id in self.sub_location_ids:
            self.sub_location_ids.discard(location_id)
        else:
            self.sub_location_ids.add(location_id)

    def clear(self) -> None:
        """Drop every filter, including the vendor refinements."""
        cleared = FilterSet()
        for name in self.__dataclass_fields__:
            setattr(self, name, getattr(cleared, name))

    def copy(self) -> "FilterSet":
        return replace(
            self,
            sub_category_ids=set(self.sub_category_ids),
            sub_location_ids=set(self.sub_location_ids),
        )
