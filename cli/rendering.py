"""Utilities for rendering an explored lineage graph in the CLI."""

from __future__ import annotations

import json
from typing import Dict, List, Set

from lineage_explorer.graph.models import GraphEdge, GraphNode
from lineage_explorer.graph.state import GraphStateModel


def _short(resource: str) -> str:
    """``bigquery:proj.ds.table`` -> ``table``."""
    return resource.rsplit(".", 1)[-1] or resource


def _short_process(process: str) -> str:
    return process.rsplit("/", 1)[-1] if process else "?"


def _markers(node: GraphNode) -> str:
    """Affordance markers: ``+up`` / ``+down`` for unexplored sides."""
    marks = []
    if node.show_upstream_icon:
        marks.append("+up")
    if node.show_downstream_icon:
        marks.append("+down")
    if node.is_loading:
        marks.append("…")
    return f"  ({', '.join(marks)})" if marks else ""


def render_tree(model: GraphStateModel) -> str:
    """Render the graph as two ASCII trees hanging off the root.

    The upstream tree follows edges from target to source, the downstream
    tree from source to target.  Each child line carries the short name of
    the process that produced the link.  A resource reached twice is shown
    once; later occurrences are marked ``(seen)``.
    """
    if model.root is None:
        return "Graph has no root."

    upstream: Dict[str, List[GraphEdge]] = {}
    downstream: Dict[str, List[GraphEdge]] = {}
    for edge in model.edges:
        upstream.setdefault(edge.target, []).append(edge)
        downstream.setdefault(edge.source, []).append(edge)

    root_id = model.root.resource_id
    lines = [f"◆ {root_id}"]

    for label, adj, pick in (
        ("upstream", upstream, lambda e: e.source),
        ("downstream", downstream, lambda e: e.target),
    ):
        children = sorted(adj.get(root_id, []), key=pick)
        if not children:
            continue
        lines.append(f"{label}:")
        visited: Set[str] = {root_id}

        def _render(node_id: str, edge: GraphEdge, prefix: str, is_last: bool) -> None:
            connector = "└── " if is_last else "├── "
            node = model.node(node_id)
            if node_id in visited:
                lines.append(
                    f"{prefix}{connector}[{_short_process(edge.process)}] {_short(node_id)} (seen)"
                )
                return
            visited.add(node_id)
            lines.append(
                f"{prefix}{connector}[{_short_process(edge.process)}] "
                f"{_short(node_id)}{_markers(node)}"
            )
            child_prefix = prefix + ("    " if is_last else "│   ")
            grandchildren = sorted(adj.get(node_id, []), key=pick)
            for i, child_edge in enumerate(grandchildren):
                _render(pick(child_edge), child_edge, child_prefix, i == len(grandchildren) - 1)

        for i, edge in enumerate(children):
            _render(pick(edge), edge, "", i == len(children) - 1)

    return "\n".join(lines)


def render_list(model: GraphStateModel) -> str:
    """One line per edge: ``source -> target  [process]``."""
    if not model.edges:
        return "No lineage links found."
    return "\n".join(
        f"{e.source} -> {e.target}  [{e.process or 'unknown process'}]"
        for e in sorted(model.edges, key=lambda e: (e.source, e.target, e.link_id))
    )


def render_json(model: GraphStateModel) -> str:
    return json.dumps(model.snapshot(), indent=2)
