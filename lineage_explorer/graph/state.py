"""In-memory model of an explored lineage graph.

The model is pure data: nodes keyed by resource, edges keyed by link id, and
a secondary index on the ``(source, target, process)`` triple.  Only
:meth:`GraphStateModel.merge_exploration` adds to it after the root is
seeded, and merging is idempotent and order-independent, so concurrent
expansions of different nodes can land in any order.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Optional

from lineage_explorer.client.models import LineageLink
from lineage_explorer.graph.models import (
    Direction,
    ExpansionState,
    GraphDelta,
    GraphEdge,
    GraphNode,
)


class GraphStateModel:
    def __init__(self) -> None:
        self._nodes: dict[str, GraphNode] = {}
        self._edges: dict[str, GraphEdge] = {}
        self._triples: set[tuple[str, str, str]] = set()
        self.root: Optional[GraphNode] = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def __contains__(self, resource: object) -> bool:
        return resource in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[GraphNode]:
        return iter(self._nodes.values())

    @property
    def nodes(self) -> list[GraphNode]:
        return list(self._nodes.values())

    @property
    def edges(self) -> list[GraphEdge]:
        return list(self._edges.values())

    def node(self, resource: str) -> GraphNode:
        """Return the node for *resource*; raises ``KeyError`` if unknown."""
        try:
            return self._nodes[resource]
        except KeyError:
            raise KeyError(f"Resource not in graph: {resource!r}") from None

    def has_edge(self, link: LineageLink | GraphEdge) -> bool:
        if isinstance(link, LineageLink):
            link = GraphEdge.from_link(link)
        return link.link_id in self._edges or link.triple in self._triples

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready view of every node and edge."""
        return {
            "root": self.root.resource_id if self.root else None,
            "nodes": [n.to_json() for n in self._nodes.values()],
            "edges": [e.to_json() for e in self._edges.values()],
        }

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_root(self, resource: str, parent: str) -> GraphNode:
        if self.root is not None:
            raise ValueError(f"Graph already has a root: {self.root.resource_id!r}")
        node = GraphNode(resource_id=resource, parent=parent, is_root=True)
        self._nodes[resource] = node
        self.root = node
        return node

    def set_state(self, resource: str, state: ExpansionState) -> None:
        self.node(resource).state = state

    def merge_exploration(
        self,
        center: str,
        upstream_links: Iterable[LineageLink],
        downstream_links: Iterable[LineageLink],
        direction: Direction,
    ) -> GraphDelta:
        """Merge the links fetched around *center* and return what was new.

        Only the sides included in *direction* are merged.  Each other-side
        resource gets a node if it has none yet; each link is added unless
        an edge with the same link id or the same ``(source, target,
        process)`` triple already exists.  Finally *center* is marked as
        explored in *direction*.
        """
        center_node = self.node(center)
        delta = GraphDelta()

        sides: list[Iterable[LineageLink]] = []
        if direction & Direction.UPSTREAM:
            sides.append(upstream_links)
        if direction & Direction.DOWNSTREAM:
            sides.append(downstream_links)

        for links in sides:
            for link in links:
                other = link.other_side(center)
                # Every edge has both endpoints as nodes, even a link that
                # does not touch center.
                for resource in dict.fromkeys((other, link.source, link.target)):
                    if resource not in self._nodes:
                        node = GraphNode(
                            resource_id=resource,
                            parent=link.scope or center_node.parent,
                        )
                        self._nodes[resource] = node
                        delta.nodes.append(node)

                edge = GraphEdge.from_link(link)
                if not self.has_edge(edge):
                    self._edges[edge.link_id] = edge
                    self._triples.add(edge.triple)
                    delta.edges.append(edge)

        center_node.state = center_node.state.mark_explored(direction)
        return delta
