"""Single-resource lineage exploration.

``LineageQueryService.explore_direction`` fans out the two directional link
queries, waits for both, then annotates every link with its producing
process using one batched lookup.  Process annotation is enrichment: if it
fails the links are still returned, each with ``process == ""``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from lineage_explorer.client.fetcher import LinkFetcher
from lineage_explorer.client.http import LineageApiClient
from lineage_explorer.client.models import LineageLink
from lineage_explorer.client.processes import ProcessResolver
from lineage_explorer.errors import EnrichmentDegraded
from lineage_explorer.log import get_logger

logger = get_logger(__name__)


@dataclass
class LineageResult:
    """Annotated links around one resource.

    ``upstream_links`` have the resource as their target; ``downstream_links``
    have it as their source.
    """

    upstream_links: list[LineageLink] = field(default_factory=list)
    downstream_links: list[LineageLink] = field(default_factory=list)


class LineageQueryService:
    def __init__(self, fetcher: LinkFetcher, resolver: ProcessResolver) -> None:
        self.fetcher = fetcher
        self.resolver = resolver

    @classmethod
    def from_client(cls, api: LineageApiClient) -> "LineageQueryService":
        return cls(LinkFetcher(api), ProcessResolver(api))

    async def explore_direction(self, resource: str, parent: str) -> LineageResult:
        """Return the annotated upstream and downstream links of *resource*.

        Raises:
            BackendUnavailable: If either directional fetch fails.  No
                partial result is returned.
        """
        downstream, upstream = await asyncio.gather(
            self.fetcher.fetch_as_source(resource, parent),
            self.fetcher.fetch_as_target(resource, parent),
        )

        link_ids = {link.id for link in downstream} | {link.id for link in upstream}
        processes: dict[str, str] = {}
        if link_ids:
            try:
                processes = await self.resolver.resolve_processes(link_ids, parent)
            except EnrichmentDegraded as exc:
                # Links are still usable without their process names.
                logger.warning(
                    "lineage.enrichment_degraded",
                    resource=resource,
                    link_count=exc.link_count,
                    error=exc.message,
                )

        return LineageResult(
            upstream_links=[
                link.with_process(processes.get(link.id, "")) for link in upstream
            ],
            downstream_links=[
                link.with_process(processes.get(link.id, "")) for link in downstream
            ],
        )
