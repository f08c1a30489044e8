"""Cross-page deduplication of search results."""

from __future__ import annotations

from typing import AbstractSet, Iterable, List, Set, Tuple

from .models import Product


def filter_new(
    products: Iterable[Product], seen_ids: AbstractSet[str]
) -> Tuple[List[Product], Set[str]]:
    """
    Keep products whose composite id has not been seen yet.

    Returns the kept products in iteration order and a new seen-id set; the
    set passed in is left untouched. Duplicates inside ``products`` itself
    are dropped as well.
    """
    updated: Set[str] = set(seen_ids)
    kept: List[Product] = []
    for product in products:
        if product.id in updated:
            continue
        updated.add(product.id)
        kept.append(product)
    return kept, updated
