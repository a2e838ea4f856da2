"""Directional lineage link queries."""

from __future__ import annotations

import httpx

from lineage_explorer.client.http import LineageApiClient
from lineage_explorer.client.models import LineageLink
from lineage_explorer.errors import BackendUnavailable
from lineage_explorer.log import get_logger

logger = get_logger(__name__)


class LinkFetcher:
    """Fetch the links that start or end at a resource.

    Both calls are stateless.  No links is an empty list, never an error;
    any transport, HTTP or decoding failure is raised as
    :class:`~lineage_explorer.errors.BackendUnavailable` without retrying.
    """

    def __init__(self, api: LineageApiClient) -> None:
        self.api = api

    async def fetch_as_source(self, resource: str, parent: str) -> list[LineageLink]:
        """Links where *resource* is the source (its downstream side)."""
        return await self._fetch(resource, parent, role="source")

    async def fetch_as_target(self, resource: str, parent: str) -> list[LineageLink]:
        """Links where *resource* is the target (its upstream side)."""
        return await self._fetch(resource, parent, role="target")

    async def _fetch(self, resource: str, parent: str, role: str) -> list[LineageLink]:
        try:
            if role == "source":
                raw = await self.api.search_links(parent, source=resource)
            else:
                raw = await self.api.search_links(parent, target=resource)
            links = [LineageLink.from_api(item) for item in raw]
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            logger.error(
                "lineage.link_fetch_failed", resource=resource, role=role, error=str(exc)
            )
            raise BackendUnavailable(
                "An error occurred while fetching data lineage.",
                operation=f"search_links:{role}",
                resource=resource,
            ) from exc

        logger.info("lineage.links_fetched", resource=resource, role=role, count=len(links))
        return links
