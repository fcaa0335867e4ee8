"""
Contact components: hosts grouped by contact edges inside an optional time window,
ignoring time order. Diagnostic companion to reachability (disjoint components can never
infect each other).
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Set, Tuple

from schema import HostId, Timestamp, cluster_id
from temporal_graph import TemporalGraph
from traversal import depth_first_search


def host_contact_adjacency(
    graph: TemporalGraph,
    window_start: Optional[Timestamp] = None,
    window_end: Optional[Timestamp] = None,
) -> Dict[HostId, Set[HostId]]:
    adj: Dict[HostId, Set[HostId]] = defaultdict(set)
    for a, b in graph.contact_edges():
        if window_start is not None and a.ts < window_start:
            continue
        if window_end is not None and a.ts > window_end:
            continue
        adj[a.host].add(b.host)
        adj[b.host].add(a.host)
    return adj


def contact_components(
    graph: TemporalGraph,
    window_start: Optional[Timestamp] = None,
    window_end: Optional[Timestamp] = None,
) -> List[List[HostId]]:
    """
    Connected components of the host contact graph within [window_start, window_end].
    Each component is a sorted host list; components are ordered by smallest host.
    Hosts with no contact in the window are left out.
    """
    adj = host_contact_adjacency(graph, window_start, window_end)
    hosts = sorted(adj)
    state = depth_first_search(hosts, lambda h: sorted(adj[h]))

    # roots have no predecessor; every other host joins its root's component
    root_of: Dict[HostId, HostId] = {}
    for h in state.discovered:
        parent = state.pred[h]
        root_of[h] = h if parent is None else root_of[parent]
    groups: Dict[HostId, List[HostId]] = defaultdict(list)
    for h in hosts:
        groups[root_of[h]].append(h)
    return sorted((sorted(members) for members in groups.values()), key=lambda m: m[0])


def run_clustering(
    graph: TemporalGraph,
    window_start: Optional[Timestamp] = None,
    window_end: Optional[Timestamp] = None,
    min_size: int = 1,
) -> List[Tuple[str, List[HostId]]]:
    """Returns list of (cluster_id, [host_ids]) for components of at least min_size hosts."""
    out: List[Tuple[str, List[HostId]]] = []
    for comp in contact_components(graph, window_start, window_end):
        if len(comp) >= min_size:
            out.append((cluster_id(comp), comp))
    return out
