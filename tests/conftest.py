"""Shared fixtures: an in-memory stand-in for the Data Lineage API.

``FakeLineageApi`` exposes the same coroutine methods as
``LineageApiClient`` and records every call, so tests can assert on the
number of backend round-trips without any network access.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

import httpx
import pytest
import structlog

PARENT = "projects/p1/locations/us"


def link_name(suffix: str) -> str:
    return f"{PARENT}/links/{suffix}"


def process_name(suffix: str) -> str:
    return f"{PARENT}/processes/{suffix}"


class FakeLineageApi:
    def __init__(self) -> None:
        self.links: list[dict[str, Any]] = []
        self.process_of: dict[str, str] = {}
        self.processes: dict[str, dict[str, Any]] = {}
        self.runs: dict[str, list[dict[str, Any]]] = {}
        self.jobs: dict[tuple[str, str], dict[str, Any]] = {}
        self.fail_links_for: set[str] = set()
        self.fail_all_links = False
        self.fail_processes = False
        self.calls: list[tuple[str, Any]] = []
        self.closed = False

    # -- setup ----------------------------------------------------------

    def add_link(self, suffix: str, source: str, target: str, process: str = "") -> str:
        name = link_name(suffix)
        self.links.append(
            {
                "name": name,
                "source": {"fullyQualifiedName": source},
                "target": {"fullyQualifiedName": target},
                "startTime": "2024-01-01T00:00:00Z",
            }
        )
        if process:
            self.process_of[name] = process_name(process)
        return name

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    # -- LineageApiClient surface ----------------------------------------

    async def __aenter__(self) -> "FakeLineageApi":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.closed = True

    async def search_links(
        self, parent: str, *, source: Optional[str] = None, target: Optional[str] = None
    ) -> list[dict[str, Any]]:
        resource = source if source is not None else target
        self.calls.append(("search_links", (parent, "source" if source else "target", resource)))
        if self.fail_all_links or resource in self.fail_links_for:
            raise httpx.ConnectError("lineage backend unreachable")
        key = "source" if source is not None else "target"
        return [link for link in self.links if link[key]["fullyQualifiedName"] == resource]

    async def batch_search_link_processes(
        self, parent: str, links: list[str], page_size: Optional[int] = None
    ) -> list[dict[str, Any]]:
        self.calls.append(("batch_search_link_processes", (parent, tuple(links))))
        if self.fail_processes:
            raise httpx.ReadTimeout("batch lookup timed out")
        grouped: dict[str, list[dict[str, str]]] = {}
        for name in links:
            process = self.process_of.get(name)
            if process:
                grouped.setdefault(process, []).append({"link": name})
        return [{"process": p, "links": ls} for p, ls in grouped.items()]

    async def list_processes(self, parent: str) -> list[dict[str, Any]]:
        self.calls.append(("list_processes", parent))
        return list(self.processes.values())

    async def get_process(self, name: str) -> dict[str, Any]:
        self.calls.append(("get_process", name))
        if name not in self.processes:
            raise httpx.HTTPStatusError(
                "404 Not Found",
                request=httpx.Request("GET", f"https://example.test/{name}"),
                response=httpx.Response(404),
            )
        return self.processes[name]

    async def list_runs(self, process: str, page_size: Optional[int] = None) -> list[dict[str, Any]]:
        self.calls.append(("list_runs", process))
        return self.runs.get(process, [])

    async def get_bigquery_job(
        self, project: str, job_id: str, location: Optional[str] = None
    ) -> dict[str, Any]:
        self.calls.append(("get_bigquery_job", (project, job_id, location)))
        return self.jobs[(project, job_id)]


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo any logging configuration a test (or a CLI run) installed."""
    root_level = logging.getLogger().level
    yield
    structlog.reset_defaults()
    logging.getLogger().setLevel(root_level)


@pytest.fixture()
def fake_api() -> FakeLineageApi:
    return FakeLineageApi()
