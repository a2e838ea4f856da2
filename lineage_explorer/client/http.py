"""Async HTTP client for the Data Lineage and BigQuery REST APIs.

Usage::

    async with LineageApiClient(access_token=token) as api:
        links = await api.search_links(parent, source=fqn)

Every method returns raw JSON dicts.  HTTP errors surface as
``httpx.HTTPError`` and a body that is not JSON as ``ValueError``; both are
translated into the domain taxonomy by the callers
(:mod:`lineage_explorer.client.fetcher`,
:mod:`lineage_explorer.client.processes`).
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from lineage_explorer.config import settings


class LineageApiClient:
    """Thin wrapper around a shared :class:`httpx.AsyncClient`.

    Args:
        access_token: Bearer token forwarded to the cloud APIs.  Empty means
            no ``Authorization`` header is sent.
        transport: Optional custom transport (tests pass
            ``httpx.MockTransport``).
    """

    def __init__(
        self,
        access_token: str = "",
        *,
        lineage_url: Optional[str] = None,
        bigquery_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.lineage_url = (lineage_url or settings.lineage_api_url).rstrip("/")
        self.bigquery_url = (bigquery_url or settings.bigquery_api_url).rstrip("/")
        headers = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._client = httpx.AsyncClient(
            headers=headers,
            timeout=timeout if timeout is not None else settings.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "LineageApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        response = await self._client.request(method, url, **kwargs)
        response.raise_for_status()
        if not response.content:
            return {}
        return response.json()

    async def _paginate(
        self,
        method: str,
        url: str,
        key: str,
        *,
        body: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        """Collect *key* items across every page of a list-style call."""
        items: list[dict[str, Any]] = []
        token: Optional[str] = None
        while True:
            if method == "POST":
                payload = dict(body or {})
                if token:
                    payload["pageToken"] = token
                data = await self._request("POST", url, json=payload)
            else:
                query = dict(params or {})
                if token:
                    query["pageToken"] = token
                data = await self._request("GET", url, params=query)

            items.extend(data.get(key, []))
            token = data.get("nextPageToken")
            if not token:
                return items

    # ------------------------------------------------------------------
    # Data Lineage API
    # ------------------------------------------------------------------

    async def search_links(
        self,
        parent: str,
        *,
        source: Optional[str] = None,
        target: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """Return links whose source (or target) has the given FQN."""
        if (source is None) == (target is None):
            raise ValueError("Exactly one of 'source' or 'target' must be given.")
        body: dict[str, Any] = {}
        if source is not None:
            body["source"] = {"fullyQualifiedName": source}
        else:
            body["target"] = {"fullyQualifiedName": target}
        return await self._paginate(
            "POST", f"{self.lineage_url}/{parent}:searchLinks", "links", body=body
        )

    async def batch_search_link_processes(
        self,
        parent: str,
        links: list[str],
        page_size: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Return ``processLinks`` entries (``{process, links: [{link}]}``)."""
        body = {
            "links": links,
            "pageSize": page_size or settings.process_batch_page_size,
        }
        return await self._paginate(
            "POST",
            f"{self.lineage_url}/{parent}:batchSearchLinkProcesses",
            "processLinks",
            body=body,
        )

    async def list_processes(self, parent: str) -> list[dict[str, Any]]:
        return await self._paginate(
            "GET", f"{self.lineage_url}/{parent}/processes", "processes"
        )

    async def get_process(self, name: str) -> dict[str, Any]:
        return await self._request("GET", f"{self.lineage_url}/{name}")

    async def list_runs(
        self, process: str, page_size: Optional[int] = None
    ) -> list[dict[str, Any]]:
        """Return the first page of runs for *process* (most recent first)."""
        data = await self._request(
            "GET",
            f"{self.lineage_url}/{process}/runs",
            params={"pageSize": page_size or settings.process_runs_page_size},
        )
        return data.get("runs", [])

    # ------------------------------------------------------------------
    # BigQuery API
    # ------------------------------------------------------------------

    async def get_bigquery_job(
        self,
        project: str,
        job_id: str,
        location: Optional[str] = None,
    ) -> dict[str, Any]:
        params = {"location": location} if location else None
        return await self._request(
            "GET",
            f"{self.bigquery_url}/projects/{project}/jobs/{job_id}",
            params=params,
        )
