"""Plain-text rendering of the trace mapping, adjacency and witness paths."""

from __future__ import annotations

from typing import Iterable, Optional

from schema import Snapshot
from temporal_graph import TemporalGraph


def format_host_mapping(graph: TemporalGraph) -> str:
    lines = ["Node Timestamps:"]
    for host, snaps in graph.host_mapping().items():
        lines.append(f"({host}) ->\t" + "\t".join(str(s) for s in snaps))
    return "\n".join(lines)


def format_adjacency(graph: TemporalGraph) -> str:
    lines = ["Adjacency List:"]
    for node, neighbors in graph.adjacency().items():
        lines.append(f"{node} ->\t" + "\t".join(str(n) for n in neighbors))
    return "\n".join(lines)


def format_graph(graph: TemporalGraph) -> str:
    return format_host_mapping(graph) + "\n" + format_adjacency(graph)


def format_path(path: Optional[Iterable[Snapshot]]) -> str:
    if path is None:
        return "no path"
    return " -> ".join(str(node) for node in path)
