"""
Wire models for the Vendorama search API.

Vendor ids (and a few other numeric fields) arrive as integers on some
endpoints and as numeric strings on others. Every such field is parsed at
this boundary so the rest of the package only ever sees ``int``/``None`` or,
for product identity fields, ``str``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

# product_id of a favorite that points at a storefront rather than an item
VENDOR_ONLY_PRODUCT_ID = "0"


class SearchMode(str, Enum):
    """Which target identifies the current result set."""

    SEARCH = "search"
    VENDOR = "vendor"
    RELATED = "related"


def parse_flexible_int(value: Any) -> Optional[int]:
    """Return ``value`` as an int when it is an int or a numeric string, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return None
        try:
            return int(trimmed)
        except ValueError:
            return None
    return None


def _identity_str(value: Any) -> Any:
    # ints become strings; anything else is left for pydantic to reject
    if isinstance(value, bool):
        raise ValueError("boolean is not a valid identifier")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return value


FlexibleInt = Annotated[Optional[int], BeforeValidator(parse_flexible_int)]
IdentityStr = Annotated[str, BeforeValidator(_identity_str)]


def composite_id(vendor_id: str | int, product_id: str | int) -> str:
    """Build the ``"{vendor_id}.{product_id}"`` identity key."""
    return f"{vendor_id}.{product_id}"


def vendor_favorite_id(vendor_id: str | int) -> str:
    """Composite id used to favorite a storefront instead of a product."""
    return composite_id(vendor_id, VENDOR_ONLY_PRODUCT_ID)


class Product(BaseModel):
    """A search result item. Identity is the vendor/product composite."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    price: str = ""
    sale_price: str = ""
    image: str = ""
    url: str = ""
    product_id: IdentityStr
    vendor_id: IdentityStr
    vendor_name: str = ""
    summary: str = ""
    suburb: str = ""
    vc: IdentityStr = ""

    @property
    def id(self) -> str:
        return composite_id(self.vendor_id, self.product_id)


class VendorCategory(BaseModel):
    """Category scoped to a single vendor's storefront."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: FlexibleInt = None
    name: Optional[str] = None


class Vendor(BaseModel):
    """Vendor profile as returned alongside vendor-scoped results."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    vendor_id: FlexibleInt = None
    name: Optional[str] = None
    url: Optional[str] = None
    thumb: Optional[str] = None
    username: Optional[str] = None

    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    description: Optional[str] = None

    products: FlexibleInt = None
    licence: FlexibleInt = None
    category_id: FlexibleInt = None
    nzbn: FlexibleInt = None
    gender: FlexibleInt = None
    restricted: FlexibleInt = None
    views: FlexibleInt = None
    clicks: FlexibleInt = None
    likes: FlexibleInt = None
    categories: Optional[List[VendorCategory]] = None

    @property
    def favorite_id(self) -> Optional[str]:
        if self.vendor_id is None:
            return None
        return vendor_favorite_id(self.vendor_id)


class ProductsResponse(BaseModel):
    """Body of the base search endpoint."""

    model_config = ConfigDict(extra="ignore")

    results: List[Product]
    total_rs: int
    page: int = 1
    per_page: int = 0
    vendor: Optional[List[Vendor]] = Field(default=None, description="Present on vendor matches")


class CategoryItem(BaseModel):
    """Entry of the categories and location lookup endpoints."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str


class SuggestResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    results: List[str] = Field(default_factory=list)


@dataclass(frozen=True)
class Page:
    """One decoded page of search results."""

    products: List[Product]
    total_count: int
    vendors: List[Vendor] = field(default_factory=list)
    page: int = 1
    per_page: int = 0

    @classmethod
    def from_response(cls, response: ProductsResponse) -> "Page":
        return cls(
            products=list(response.results),
            total_count=response.total_rs,
            vendors=list(response.vendor or []),
            page=response.page,
            per_page=response.per_page,
        )
