"""
Exposure sweep: every host that state seeded on a source at time x could reach by time y,
with the earliest time each host is reached. Same window rules as reachability.py.
"""

from __future__ import annotations

from typing import Dict

from reachability import ReachabilityEngine
from schema import HostId, Timestamp
from temporal_graph import TemporalGraph
from traversal import breadth_first_search


def exposure_times(
    graph: TemporalGraph,
    source: HostId,
    x: Timestamp,
    y: Timestamp,
) -> Dict[HostId, Timestamp]:
    """
    Returns dict host -> earliest reachable timestamp in [x, y], source included.
    Empty when the source has no snapshot in the window.
    """
    start = ReachabilityEngine(graph).start_snapshot(source, x, y)
    if start is None:
        return {}

    state = breadth_first_search(
        start,
        graph.out_neighbors,
        allow=lambda node: node.ts <= y,
    )
    earliest: Dict[HostId, Timestamp] = {}
    for node in state.discovered:
        seen = earliest.get(node.host)
        if seen is None or node.ts < seen:
            earliest[node.host] = node.ts
    return earliest
