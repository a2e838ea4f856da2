"""Per-node expansion state machine.

``collapsed -> loading(direction) -> expanded(direction)``

A node that is loading ignores further expand requests.  A failed fetch
puts the node back in the state it had before the request, so the action
can simply be retried.
"""

from __future__ import annotations

from typing import Optional

from lineage_explorer.graph.models import NO_DIRECTION, Direction, GraphDelta
from lineage_explorer.graph.state import GraphStateModel
from lineage_explorer.log import get_logger
from lineage_explorer.service import LineageQueryService

logger = get_logger(__name__)


class ExpansionController:
    def __init__(self, model: GraphStateModel, service: LineageQueryService) -> None:
        self.model = model
        self.service = service

    async def expand(self, resource: str, direction: Direction) -> Optional[GraphDelta]:
        """Expand *resource* in *direction* and return the graph delta.

        Returns ``None`` when the node is already loading.  Directions that
        were fetched before are skipped; if nothing is left to fetch an
        empty delta is returned without calling the backend.

        Raises:
            KeyError: If *resource* is not in the graph.
            BackendUnavailable: If the link fetch fails.  The node keeps its
                previous state and the graph is unchanged.
        """
        node = self.model.node(resource)
        if node.is_loading:
            logger.info(
                "graph.expansion_ignored",
                resource=resource,
                loading=node.loading_direction.label,
            )
            return None

        pending = direction & ~node.state.explored
        if pending == NO_DIRECTION:
            return GraphDelta()

        prior = node.state
        self.model.set_state(resource, prior.begin_loading(pending))
        try:
            result = await self.service.explore_direction(resource, node.parent)
        except BaseException as exc:
            # Cancellation included; a node never stays loading.
            self.model.set_state(resource, prior)
            logger.warning(
                "graph.expansion_failed",
                resource=resource,
                direction=pending.label,
                error=str(exc) or type(exc).__name__,
            )
            raise

        delta = self.model.merge_exploration(
            resource, result.upstream_links, result.downstream_links, pending
        )
        logger.info(
            "graph.expanded",
            resource=resource,
            direction=pending.label,
            new_nodes=len(delta.nodes),
            new_edges=len(delta.edges),
        )
        return delta
