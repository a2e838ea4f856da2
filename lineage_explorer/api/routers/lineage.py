"""One-shot lineage query endpoints.

Routes
------
POST /lineage                       Links in both directions, with processes
POST /lineage-downstream            Links where fqn is the source
POST /lineage-upstream              Links where fqn is the target
POST /lineage-processes             Every process under parent
POST /get-process-and-job-details   Process, its runs and its BigQuery job
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from lineage_explorer.api.deps import api_client
from lineage_explorer.client.fetcher import LinkFetcher
from lineage_explorer.client.processes import get_process_and_job_details, list_processes
from lineage_explorer.errors import require_fields
from lineage_explorer.service import LineageQueryService

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

# Missing fields are rejected by ``require_fields`` (HTTP 400), not by pydantic.

class LineageRequest(BaseModel):
    parent: Optional[str] = None
    fqn: Optional[str] = None


class ProcessesRequest(BaseModel):
    parent: Optional[str] = None


class ProcessDetailsRequest(BaseModel):
    process: Optional[str] = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/lineage")
async def lineage(body: LineageRequest, request: Request) -> dict[str, Any]:
    """Return both link directions, each link annotated with its process."""
    require_fields(parent=body.parent, fqn=body.fqn)
    async with api_client(request) as api:
        result = await LineageQueryService.from_client(api).explore_direction(
            body.fqn, body.parent
        )
    return {
        "sourceLinks": [link.to_json() for link in result.downstream_links],
        "targetLinks": [link.to_json() for link in result.upstream_links],
    }


@router.post("/lineage-downstream")
async def lineage_downstream(body: LineageRequest, request: Request) -> dict[str, Any]:
    """Return links where ``fqn`` is the source."""
    require_fields(parent=body.parent, fqn=body.fqn)
    async with api_client(request) as api:
        links = await LinkFetcher(api).fetch_as_source(body.fqn, body.parent)
    return {"sourceLinks": [link.to_json() for link in links]}


@router.post("/lineage-upstream")
async def lineage_upstream(body: LineageRequest, request: Request) -> dict[str, Any]:
    """Return links where ``fqn`` is the target."""
    require_fields(parent=body.parent, fqn=body.fqn)
    async with api_client(request) as api:
        links = await LinkFetcher(api).fetch_as_target(body.fqn, body.parent)
    return {"targetLinks": [link.to_json() for link in links]}


@router.post("/lineage-processes")
async def lineage_processes(body: ProcessesRequest, request: Request) -> dict[str, Any]:
    """List every lineage process in ``parent``."""
    require_fields(parent=body.parent)
    async with api_client(request) as api:
        processes = await list_processes(api, body.parent)
    return {"processes": [p.to_json() for p in processes]}


@router.post("/get-process-and-job-details")
async def process_and_job_details(
    body: ProcessDetailsRequest, request: Request
) -> dict[str, Any]:
    """Drill into the process behind an edge."""
    require_fields(process=body.process)
    async with api_client(request) as api:
        return await get_process_and_job_details(api, body.process)
