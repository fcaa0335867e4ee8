"""
Time-expanded contact graph.

One Snapshot per (host, distinct timestamp at which the host communicates). Two edge kinds:
    - contact: both snapshots of one communication, traversable in both directions
    - temporal: a host's snapshot to its next snapshot, forward in time only

The directed out-neighbor adjacency is the only stored edge structure; the undirected
display view and the edge listings are derived from it.
"""

from __future__ import annotations

from bisect import bisect_left
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from logging_config import get_logger
from schema import Communication, HostId, Snapshot, Timestamp

logger = get_logger(__name__)


class TemporalGraph:
    """Immutable result of build_temporal_graph. Safe to share between concurrent readers."""

    def __init__(
        self,
        out: Dict[Snapshot, List[Snapshot]],
        host_snapshots: Dict[HostId, List[Snapshot]],
        contacts: List[Tuple[Snapshot, Snapshot]],
    ):
        self._out = {node: tuple(neighbors) for node, neighbors in out.items()}
        self._host_snapshots = {host: tuple(snaps) for host, snaps in host_snapshots.items()}
        self._host_times = {
            host: [s.ts for s in snaps] for host, snaps in self._host_snapshots.items()
        }
        self._contacts = tuple(contacts)

    # ---- nodes ----

    @property
    def node_count(self) -> int:
        return len(self._out)

    @property
    def edge_count(self) -> int:
        """Directed out-neighbor entries (a contact counts twice, a temporal edge once)."""
        return sum(len(n) for n in self._out.values())

    def nodes(self) -> Iterator[Snapshot]:
        return iter(self._out)

    def __contains__(self, node: object) -> bool:
        return node in self._out

    def __len__(self) -> int:
        return len(self._out)

    def hosts(self) -> List[HostId]:
        return list(self._host_snapshots)

    def host_snapshots(self, host: HostId) -> List[Snapshot]:
        return list(self._host_snapshots.get(host, ()))

    def timestamps(self, host: HostId) -> List[Timestamp]:
        return list(self._host_times.get(host, ()))

    def host_mapping(self) -> Dict[HostId, List[Snapshot]]:
        return {host: list(snaps) for host, snaps in self._host_snapshots.items()}

    def snapshot_at_or_after(self, host: HostId, ts: Timestamp) -> Optional[Snapshot]:
        """Earliest snapshot of host with timestamp >= ts, or None."""
        times = self._host_times.get(host)
        if not times:
            return None
        i = bisect_left(times, ts)
        if i == len(times):
            return None
        return self._host_snapshots[host][i]

    # ---- edges ----

    def out_neighbors(self, node: Snapshot) -> Tuple[Snapshot, ...]:
        return self._out.get(node, ())

    def contact_edges(self) -> List[Tuple[Snapshot, Snapshot]]:
        """One entry per recorded communication, duplicates included, in build order."""
        return list(self._contacts)

    def temporal_edges(self) -> List[Tuple[Snapshot, Snapshot]]:
        edges = []
        for snaps in self._host_snapshots.values():
            edges.extend(zip(snaps, snaps[1:]))
        return edges

    def adjacency(self) -> Dict[Snapshot, List[Snapshot]]:
        """Undirected view: every node with all nodes it shares a contact or temporal edge with."""
        view: Dict[Snapshot, List[Snapshot]] = {node: [] for node in self._out}
        seen: Set[Tuple[Snapshot, Snapshot]] = set()
        for node, neighbors in self._out.items():
            for other in neighbors:
                if (node, other) not in seen:
                    seen.add((node, other))
                    view[node].append(other)
                if (other, node) not in seen:
                    seen.add((other, node))
                    view[other].append(node)
        return view


def sort_communications(events: Iterable[Communication]) -> List[Communication]:
    """Stable sort on timestamp only; equal timestamps keep input order."""
    return sorted(events, key=lambda c: c.ts)


def build_temporal_graph(events: Iterable[Communication]) -> TemporalGraph:
    """
    Build the time-expanded graph in one pass over the timestamp-sorted events.
    O(n + m log m): the sort is the only super-linear step.
    """
    ordered = sort_communications(events)

    out: Dict[Snapshot, List[Snapshot]] = {}
    host_snapshots: Dict[HostId, List[Snapshot]] = {}
    latest: Dict[HostId, Snapshot] = {}
    contacts: List[Tuple[Snapshot, Snapshot]] = []
    linked: Set[Tuple[Snapshot, Snapshot]] = set()

    def resolve(host: HostId, ts: Timestamp) -> Snapshot:
        prev = latest.get(host)
        if prev is not None and prev.ts == ts:
            return prev
        node = Snapshot(host, ts)
        out[node] = []
        host_snapshots.setdefault(host, []).append(node)
        if prev is not None:
            # prev.ts < ts because events are sorted
            out[prev].append(node)
        latest[host] = node
        return node

    for c in ordered:
        a = resolve(c.host_a, c.ts)
        b = resolve(c.host_b, c.ts)
        contacts.append((a, b))
        if a == b or (a, b) in linked:
            continue
        linked.add((a, b))
        linked.add((b, a))
        out[a].append(b)
        out[b].append(a)

    graph = TemporalGraph(out, host_snapshots, contacts)
    logger.info(
        "Built temporal graph: %d events, %d hosts, %d snapshots, %d contact edges, %d temporal edges",
        len(ordered),
        len(host_snapshots),
        graph.node_count,
        len(contacts),
        graph.node_count - len(host_snapshots),
    )
    return graph
