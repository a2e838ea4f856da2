"""Graph package: the explored lineage graph, its expansion state and sessions.

Public re-exports so callers can write::

    from lineage_explorer.graph import GraphStateModel, ExpansionController
"""

from lineage_explorer.graph.controller import ExpansionController
from lineage_explorer.graph.models import (
    Direction,
    ExpansionState,
    GraphDelta,
    GraphEdge,
    GraphNode,
    Phase,
)
from lineage_explorer.graph.session import ExplorationRegistry, ExplorationSession
from lineage_explorer.graph.state import GraphStateModel

__all__ = [
    "Direction",
    "ExpansionController",
    "ExpansionState",
    "ExplorationRegistry",
    "ExplorationSession",
    "GraphDelta",
    "GraphEdge",
    "GraphNode",
    "GraphStateModel",
    "Phase",
]
