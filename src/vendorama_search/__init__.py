"""Search session core for the Vendorama marketplace client."""

from .client import VendoramaClient
from .config import Settings
from .errors import (
    DecodeError,
    FetchError,
    HttpStatusError,
    InvalidStateError,
    NetworkError,
    SearchError,
)
from .filters import FilterSet
from .history import HistoryEntry, HistoryStack
from .models import Page, Product, SearchMode, Vendor
from .session import SearchSession, SessionStatus
from .taxonomy import TaxonomyCache

__version__ = "0.1.0"

__all__ = [
    "DecodeError",
    "FetchError",
    "FilterSet",
    "HistoryEntry",
    "HistoryStack",
    "HttpStatusError",
    "InvalidStateError",
    "NetworkError",
    "Page",
    "Product",
    "SearchError",
    "SearchMode",
    "SearchSession",
    "SessionStatus",
    "Settings",
    "TaxonomyCache",
    "Vendor",
    "VendoramaClient",
]
