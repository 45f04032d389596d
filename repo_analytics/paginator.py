"""Page-number pagination over GitHub list endpoints."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

LOGGER = logging.getLogger(__name__)


class SupportsGet(Protocol):
    async def get(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any: ...


async def fetch_all(
    client: SupportsGet,
    path: str,
    params: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    *,
    page_size: int = 100,
) -> list[Any]:
    """Fetch every page of ``path`` and return the concatenated items.

    Pages are requested from 1 upwards until one holds fewer than
    ``page_size`` items. Failures are not retried; the first failing page
    aborts the whole pagination.
    """

    items: list[Any] = []
    page = 1
    while True:
        query = dict(params or {})
        query.update({"per_page": page_size, "page": page})
        data = await client.get(path, params=query, headers=headers)
        batch = list(data or [])
        items.extend(batch)
        if len(batch) < page_size:
            break
        page += 1
    LOGGER.debug("Fetched %s items from %s over %s pages", len(items), path, page)
    return items


__all__ = ["fetch_all", "SupportsGet"]
