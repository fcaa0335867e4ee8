"""Unit tests for contact components."""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "graph"))

from clustering import contact_components, host_contact_adjacency, run_clustering
from schema import Communication
from temporal_graph import build_temporal_graph

GRAPH = build_temporal_graph([
    Communication(1, 2, 1),
    Communication(2, 3, 5),
    Communication(7, 8, 2),
    Communication(9, 9, 3),
    Communication(3, 7, 20),
])


def test_components_whole_timeline() -> None:
    assert contact_components(GRAPH) == [[1, 2, 3, 7, 8], [9]]


def test_components_in_window() -> None:
    assert contact_components(GRAPH, 0, 10) == [[1, 2, 3], [7, 8], [9]]
    assert contact_components(GRAPH, 4, 10) == [[2, 3]]
    assert contact_components(GRAPH, 21, 30) == []


def test_adjacency_in_window() -> None:
    adj = host_contact_adjacency(GRAPH, 0, 4)
    assert adj[1] == {2}
    assert adj[9] == {9}
    assert 3 not in adj


def test_run_clustering_min_size() -> None:
    out = run_clustering(GRAPH, 0, 10, min_size=2)
    assert out == [("clu:1:3", [1, 2, 3]), ("clu:7:2", [7, 8])]
