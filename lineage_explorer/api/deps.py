"""Request helpers shared by the routers."""

from __future__ import annotations

from fastapi import Request

from lineage_explorer.client.http import LineageApiClient


def bearer_token(request: Request) -> str:
    """Return the caller's bearer token, or ``""`` if none was sent."""
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def api_client(request: Request) -> LineageApiClient:
    """Build a cloud API client that forwards the caller's token.

    The factory lives on ``app.state`` so tests can swap in a fake.
    """
    return request.app.state.client_factory(bearer_token(request))
