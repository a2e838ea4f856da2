"""Typed records for the explored lineage graph.

A :class:`GraphNode` owns one :class:`ExpansionState`, a frozen value that
is either *collapsed* (nothing explored), *loading* a direction, or
*expanded* in one or both directions.  The upstream/downstream fetch flags
and the renderer's affordance flags are all derived from it, so a node can
never be loading a side that is already fetched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, Flag
from typing import Any, Optional

from lineage_explorer.client.models import LineageLink


class Direction(Flag):
    UPSTREAM = 1
    DOWNSTREAM = 2
    BOTH = UPSTREAM | DOWNSTREAM

    @classmethod
    def parse(cls, value: str) -> "Direction":
        try:
            return _DIRECTION_BY_LABEL[value.strip().lower()]
        except KeyError:
            raise ValueError(
                f"Unknown direction {value!r}; expected upstream, downstream or both."
            ) from None

    @property
    def label(self) -> str:
        return _LABEL_BY_VALUE.get(self.value, "none")


NO_DIRECTION = Direction(0)

_DIRECTION_BY_LABEL = {
    "upstream": Direction.UPSTREAM,
    "downstream": Direction.DOWNSTREAM,
    "both": Direction.BOTH,
}
_LABEL_BY_VALUE = {d.value: label for label, d in _DIRECTION_BY_LABEL.items()}


class Phase(str, Enum):
    COLLAPSED = "collapsed"
    LOADING = "loading"
    EXPANDED = "expanded"


@dataclass(frozen=True)
class ExpansionState:
    """Per-node expansion state.

    ``explored`` accumulates the directions already fetched and never
    shrinks.  ``loading`` is the direction currently being fetched, if any,
    and must not overlap ``explored``.
    """

    explored: Direction = NO_DIRECTION
    loading: Optional[Direction] = None

    def __post_init__(self) -> None:
        if self.loading is not None:
            if not self.loading:
                raise ValueError("A loading state needs a direction.")
            if self.loading & self.explored:
                raise ValueError(
                    f"Cannot load {self.loading.label}: already explored "
                    f"{self.explored.label}."
                )

    @property
    def phase(self) -> Phase:
        if self.loading is not None:
            return Phase.LOADING
        if self.explored:
            return Phase.EXPANDED
        return Phase.COLLAPSED

    def begin_loading(self, direction: Direction) -> "ExpansionState":
        if self.loading is not None:
            raise ValueError(f"Already loading {self.loading.label}.")
        return ExpansionState(explored=self.explored, loading=direction)

    def mark_explored(self, direction: Direction) -> "ExpansionState":
        """Record *direction* as fetched, clearing it from ``loading``."""
        explored = self.explored | direction
        loading = None
        if self.loading is not None and self.loading & ~explored:
            loading = self.loading & ~explored
        return ExpansionState(explored=explored, loading=loading)


@dataclass
class GraphNode:
    resource_id: str
    parent: str
    is_root: bool = False
    state: ExpansionState = field(default_factory=ExpansionState)

    @property
    def is_upstream_fetched(self) -> bool:
        return bool(self.state.explored & Direction.UPSTREAM)

    @property
    def is_downstream_fetched(self) -> bool:
        return bool(self.state.explored & Direction.DOWNSTREAM)

    @property
    def is_loading(self) -> bool:
        return self.state.loading is not None

    @property
    def loading_direction(self) -> Optional[Direction]:
        return self.state.loading

    def _loading(self, direction: Direction) -> bool:
        return self.state.loading is not None and bool(self.state.loading & direction)

    @property
    def show_upstream_icon(self) -> bool:
        return (
            not self.is_root
            and not self.is_upstream_fetched
            and not self._loading(Direction.UPSTREAM)
        )

    @property
    def show_downstream_icon(self) -> bool:
        return (
            not self.is_root
            and not self.is_downstream_fetched
            and not self._loading(Direction.DOWNSTREAM)
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "resourceId": self.resource_id,
            "parent": self.parent,
            "isRoot": self.is_root,
            "isUpstreamFetched": self.is_upstream_fetched,
            "isDownstreamFetched": self.is_downstream_fetched,
            "expansionState": self.state.phase.value,
            "loadingDirection": self.loading_direction.label if self.is_loading else None,
            "showUpStreamIcon": self.show_upstream_icon,
            "showDownStreamIcon": self.show_downstream_icon,
        }


@dataclass(frozen=True)
class GraphEdge:
    """A lineage link placed in the graph."""

    link_id: str
    source: str
    target: str
    process: str = ""

    @property
    def triple(self) -> tuple[str, str, str]:
        return (self.source, self.target, self.process)

    @classmethod
    def from_link(cls, link: LineageLink) -> "GraphEdge":
        return cls(
            link_id=link.id, source=link.source, target=link.target, process=link.process
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.link_id,
            "source": self.source,
            "target": self.target,
            "process": self.process,
        }


@dataclass
class GraphDelta:
    """Nodes and edges newly added by one merge."""

    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.edges

    def to_json(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_json() for n in self.nodes],
            "edges": [e.to_json() for e in self.edges],
        }
