"""
Event store: collects communications until the graph is built, then becomes read-only.
Adding after build, building twice and querying before build raise InvalidStateError.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from logging_config import get_logger
from reachability import ReachabilityEngine
from schema import Communication, HostId, InvalidStateError, Snapshot, Timestamp
from temporal_graph import TemporalGraph, build_temporal_graph

logger = get_logger(__name__)


class EventStore:
    def __init__(self, events: Optional[Iterable[Communication]] = None):
        self._communications: List[Communication] = []
        self._graph: Optional[TemporalGraph] = None
        self._engine: Optional[ReachabilityEngine] = None
        if events is not None:
            self.extend(events)

    @property
    def built(self) -> bool:
        return self._graph is not None

    @property
    def communications(self) -> Tuple[Communication, ...]:
        """Recorded events in insertion order."""
        return tuple(self._communications)

    def __len__(self) -> int:
        return len(self._communications)

    def add_communication(self, host_a: HostId, host_b: HostId, ts: Timestamp) -> Communication:
        if self.built:
            logger.warning("Rejected communication (%s, %s, %s): graph already built", host_a, host_b, ts)
            raise InvalidStateError("graph already built; no further communications accepted")
        c = Communication(host_a, host_b, ts)
        self._communications.append(c)
        return c

    def extend(self, events: Iterable[Communication]) -> None:
        for c in events:
            self.add_communication(c.host_a, c.host_b, c.ts)

    def build(self) -> TemporalGraph:
        if self.built:
            raise InvalidStateError("graph already built")
        self._graph = build_temporal_graph(self._communications)
        self._engine = ReachabilityEngine(self._graph)
        return self._graph

    @property
    def graph(self) -> TemporalGraph:
        if self._graph is None:
            raise InvalidStateError("graph not built yet")
        return self._graph

    @property
    def engine(self) -> ReachabilityEngine:
        if self._engine is None:
            raise InvalidStateError("graph not built yet")
        return self._engine

    def host_mapping(self) -> Dict[HostId, List[Snapshot]]:
        return self.graph.host_mapping()

    def query(
        self, source: HostId, target: HostId, x: Timestamp, y: Timestamp
    ) -> Optional[List[Snapshot]]:
        """Witness path from source (infected at x) to target by time y, or None."""
        return self.engine.query(source, target, x, y)
