"""Interfaces of the services the search core consumes but does not own."""

from __future__ import annotations

from typing import AbstractSet, Iterable, Optional, Protocol, runtime_checkable

from .models import Product


@runtime_checkable
class IdentityProvider(Protocol):
    """Signed-in user identity appended to every API request when present."""

    def token(self) -> Optional[str]: ...

    def user_id(self) -> Optional[int]: ...


@runtime_checkable
class ProductCache(Protocol):
    """Receives every product merged into a session (favorites keep these for display)."""

    def update_cache(self, products: Iterable[Product]) -> None: ...


@runtime_checkable
class FavoriteIds(Protocol):
    """Read-only view of the favorited composite ids."""

    @property
    def favorites(self) -> AbstractSet[str]: ...
