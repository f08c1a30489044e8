"""Search-as-you-type suggestions."""

from __future__ import annotations

import logging
from typing import List

from .client import VendoramaClient
from .errors import FetchError

logger = logging.getLogger(__name__)


async def fetch_suggestions(client: VendoramaClient, text: str) -> List[str]:
    """Suggestions for ``text``; empty when the text is blank or the lookup fails."""
    query = (text or "").strip()[: client.settings.max_query_length]
    if not query:
        return []
    try:
        return await client.suggest(query)
    except FetchError as exc:
        logger.info("suggest_failed query=%r error=%s", query, exc)
        return []
