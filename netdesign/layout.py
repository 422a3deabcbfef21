"""Hierarchical up-down layout for the topology graph.

Level is the longest directed path from the root, so a backup device that
hangs off its primary by a dashed edge sits one row below it. Within a level
nodes keep their insertion order and are centred on x = 0.
"""

from typing import Dict, Tuple

import networkx as nx

from .topology import NetworkGraph

LEVEL_SEPARATION = 150
NODE_SPACING = 200


def to_networkx(graph: NetworkGraph) -> nx.DiGraph:
    g = nx.DiGraph()
    for node in graph.nodes:
        g.add_node(node.id, label=node.label, kind=node.kind)
    for edge in graph.edges:
        g.add_edge(edge.source, edge.target, dashed=edge.dashed)
    return g


def node_levels(graph: NetworkGraph) -> Dict[str, int]:
    g = to_networkx(graph)
    levels = {}
    for node_id in nx.topological_sort(g):
        preds = [levels[p] + 1 for p in g.predecessors(node_id)]
        levels[node_id] = max(preds) if preds else 0
    return levels


def hierarchical_layout(graph: NetworkGraph, level_separation: int = LEVEL_SEPARATION,
                        node_spacing: int = NODE_SPACING) -> Dict[str, Tuple[float, float]]:
    """Map node id -> (x, y) in pixels, y growing downwards."""
    levels = node_levels(graph)
    rows: Dict[int, list] = {}
    for node in graph.nodes:
        rows.setdefault(levels[node.id], []).append(node.id)

    positions = {}
    for level, row in rows.items():
        offset = (len(row) - 1) / 2
        for i, node_id in enumerate(row):
            positions[node_id] = ((i - offset) * node_spacing, level * level_separation)
    return positions


def layout_bounds(positions: Dict[str, Tuple[float, float]]) -> Tuple[float, float, float, float]:
    """(min_x, min_y, max_x, max_y) of the laid-out nodes."""
    if not positions:
        return 0.0, 0.0, 0.0, 0.0
    xs = [p[0] for p in positions.values()]
    ys = [p[1] for p in positions.values()]
    return min(xs), min(ys), max(xs), max(ys)
