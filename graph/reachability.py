"""
Time-respecting reachability: could state present on a source host at time x reach a
target host by time y?

Policy:
    - the walk starts at the source's earliest snapshot with ts >= x
    - contact edges cross instantly in either direction; temporal edges only go forward
    - only snapshots with ts <= y are explored
    - unknown hosts, x > y and sources with no snapshot in [x, y] give no path (not errors)
    - BFS, so the returned witness has the fewest hops; ties follow discovery order
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from logging_config import get_logger
from schema import HostId, Snapshot, Timestamp
from temporal_graph import TemporalGraph
from traversal import breadth_first_search

logger = get_logger(__name__)


class ReachabilityEngine:
    def __init__(self, graph: TemporalGraph):
        self.graph = graph

    def start_snapshot(self, source: HostId, x: Timestamp, y: Timestamp) -> Optional[Snapshot]:
        if x > y:
            return None
        start = self.graph.snapshot_at_or_after(source, x)
        if start is None or start.ts > y:
            return None
        return start

    def query(
        self, source: HostId, target: HostId, x: Timestamp, y: Timestamp
    ) -> Optional[List[Snapshot]]:
        start = self.start_snapshot(source, x, y)
        if start is None:
            logger.debug("No snapshot of host %s in [%s, %s]", source, x, y)
            return None
        if not self.graph.host_snapshots(target):
            logger.debug("Target host %s never communicates", target)
            return None

        state = breadth_first_search(
            start,
            self.graph.out_neighbors,
            accept=lambda node: node.host == target,
            allow=lambda node: node.ts <= y,
        )
        if state.found is None:
            logger.debug("No path %s -> %s in [%s, %s] (%d snapshots explored)",
                         source, target, x, y, len(state.discovered))
            return None
        path = state.path_to(state.found)
        logger.debug("Path %s -> %s in [%s, %s]: %d hops", source, target, x, y, len(path) - 1)
        return path

    def query_pairs(
        self, source: HostId, target: HostId, x: Timestamp, y: Timestamp
    ) -> Optional[List[Tuple[HostId, Timestamp]]]:
        path = self.query(source, target, x, y)
        if path is None:
            return None
        return [node.as_pair() for node in path]

    def is_reachable(self, source: HostId, target: HostId, x: Timestamp, y: Timestamp) -> bool:
        return self.query(source, target, x, y) is not None


def query_infection(
    graph: TemporalGraph, source: HostId, target: HostId, x: Timestamp, y: Timestamp
) -> Optional[List[Snapshot]]:
    return ReachabilityEngine(graph).query(source, target, x, y)
