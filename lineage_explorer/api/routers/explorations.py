"""Incremental graph exploration endpoints.

Routes
------
POST   /explorations               Start a session rooted at {parent, fqn}
GET    /explorations/{id}          Current nodes + edges with affordance flags
POST   /explorations/{id}/expand   Expand one node: {fqn, direction}
DELETE /explorations/{id}          End the session and discard its graph

Sessions live in memory on ``app.state.explorations`` and are never
persisted.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel

from lineage_explorer.api.deps import api_client
from lineage_explorer.errors import ValidationError, require_fields
from lineage_explorer.graph.controller import ExpansionController
from lineage_explorer.graph.models import Direction
from lineage_explorer.graph.session import ExplorationSession
from lineage_explorer.service import LineageQueryService

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class ExplorationCreate(BaseModel):
    parent: Optional[str] = None
    fqn: Optional[str] = None


class ExpandRequest(BaseModel):
    fqn: Optional[str] = None
    direction: str = "both"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _get_session(request: Request, session_id: str) -> ExplorationSession:
    session = request.app.state.explorations.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Exploration '{session_id}' not found.")
    return session


def _session_dict(session: ExplorationSession) -> dict[str, Any]:
    return {"id": session.id, "parent": session.parent, "graph": session.model.snapshot()}


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", status_code=201)
def start_exploration(body: ExplorationCreate, request: Request) -> dict[str, Any]:
    """Create a session whose graph holds only the root node."""
    require_fields(parent=body.parent, fqn=body.fqn)
    session = request.app.state.explorations.start(body.parent, body.fqn)
    return _session_dict(session)


@router.get("/{session_id}")
def get_exploration(session_id: str, request: Request) -> dict[str, Any]:
    """Return the session's graph as currently explored."""
    return _session_dict(_get_session(request, session_id))


@router.post("/{session_id}/expand")
async def expand_node(
    session_id: str, body: ExpandRequest, request: Request
) -> dict[str, Any]:
    """Fetch one node's unexplored side(s) and merge them into the graph."""
    session = _get_session(request, session_id)
    require_fields(fqn=body.fqn)
    try:
        direction = Direction.parse(body.direction)
    except ValueError as exc:
        raise ValidationError(str(exc), field="direction") from exc

    if body.fqn not in session.model:
        raise HTTPException(status_code=404, detail=f"Node '{body.fqn}' not in exploration.")

    async with api_client(request) as api:
        controller = ExpansionController(session.model, LineageQueryService.from_client(api))
        delta = await controller.expand(body.fqn, direction)

    if delta is None:
        raise HTTPException(status_code=409, detail=f"Node '{body.fqn}' is already loading.")
    return {
        "delta": delta.to_json(),
        "node": session.model.node(body.fqn).to_json(),
    }


@router.delete("/{session_id}", status_code=204, response_class=Response, response_model=None)
def end_exploration(session_id: str, request: Request) -> Response:
    """Discard the session and its graph."""
    if not request.app.state.explorations.end(session_id):
        raise HTTPException(status_code=404, detail=f"Exploration '{session_id}' not found.")
    return Response(status_code=204)
