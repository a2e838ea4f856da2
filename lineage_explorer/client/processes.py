"""Process lookups: batched link -> process resolution and drill-down."""

from __future__ import annotations

import asyncio
from typing import Any, Iterable

import httpx

from lineage_explorer.client.http import LineageApiClient
from lineage_explorer.client.models import Process
from lineage_explorer.errors import BackendUnavailable, EnrichmentDegraded
from lineage_explorer.log import get_logger

logger = get_logger(__name__)


class ProcessResolver:
    """Map link identities to the process that produced them."""

    def __init__(self, api: LineageApiClient) -> None:
        self.api = api

    async def resolve_processes(
        self, link_ids: Iterable[str], parent: str
    ) -> dict[str, str]:
        """Return ``{link_id: process_name}`` for every id in *link_ids*.

        One ``batchSearchLinkProcesses`` lookup covers the whole set.  Links
        the backend reports no process for map to ``""``.  An empty set
        returns ``{}`` without a request.

        Raises:
            EnrichmentDegraded: If the batch lookup fails.
        """
        ids = sorted(set(link_ids))
        if not ids:
            return {}

        try:
            process_links = await self.api.batch_search_link_processes(parent, ids)
            mapping = {link_id: "" for link_id in ids}
            for entry in process_links:
                for link in entry.get("links") or []:
                    name = link.get("link")
                    if name in mapping:
                        mapping[name] = entry.get("process") or ""
        except (httpx.HTTPError, ValueError, TypeError, AttributeError) as exc:
            # ValueError covers a body that is not JSON.
            raise EnrichmentDegraded(
                f"Process resolution failed: {exc}", link_count=len(ids)
            ) from exc
        return mapping


async def list_processes(api: LineageApiClient, parent: str) -> list[Process]:
    """Return every process under *parent*."""
    try:
        raw = await api.list_processes(parent)
    except (httpx.HTTPError, ValueError) as exc:
        raise BackendUnavailable(
            "An error occurred while listing lineage processes.",
            operation="list_processes",
            resource=parent,
        ) from exc
    return [Process.from_api(p) for p in raw]


async def get_process_and_job_details(
    api: LineageApiClient, process: str
) -> dict[str, Any]:
    """Fetch a process, its runs and the BigQuery job it ran.

    The process and its runs are requested concurrently.  The job is looked
    up in the process's origin project using its ``bigquery_job_id``
    attribute; ``jobDetails`` is ``None`` for processes without one.
    """
    try:
        details, runs = await asyncio.gather(
            api.get_process(process), api.list_runs(process)
        )
        parsed = Process.from_api(details)

        job_details = None
        if parsed.bigquery_job_id and parsed.origin_project:
            job_details = await api.get_bigquery_job(
                parsed.origin_project,
                parsed.bigquery_job_id,
                location=parsed.origin_location,
            )
    except (httpx.HTTPError, ValueError) as exc:
        raise BackendUnavailable(
            "An error occurred while fetching data lineage query.",
            operation="get_process_and_job_details",
            resource=process,
        ) from exc

    if job_details is None:
        logger.info("lineage.process_without_job", process=process)

    return {"processDetails": details, "processRuns": runs, "jobDetails": job_details}
