"""Unit tests for the temporal graph builder."""
from __future__ import annotations

import random
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "graph"))

from schema import Communication, Snapshot
from temporal_graph import build_temporal_graph, sort_communications

S = Snapshot

EVENTS = [
    Communication(1, 2, 10),
    Communication(2, 3, 20),
    Communication(1, 4, 5),
]


def test_sort_is_stable_on_timestamp() -> None:
    events = [Communication(9, 8, 5), Communication(1, 2, 3), Communication(7, 6, 5)]
    assert sort_communications(events) == [
        Communication(1, 2, 3),
        Communication(9, 8, 5),
        Communication(7, 6, 5),
    ]


def test_one_snapshot_per_distinct_timestamp() -> None:
    events = [
        Communication(1, 2, 5),
        Communication(1, 3, 5),
        Communication(1, 4, 7),
        Communication(4, 1, 7),
        Communication(1, 2, 9),
    ]
    g = build_temporal_graph(events)
    assert g.timestamps(1) == [5, 7, 9]
    assert g.timestamps(2) == [5, 9]
    assert g.timestamps(3) == [5]
    assert g.timestamps(4) == [7]
    assert g.node_count == 7


def test_host_snapshots_strictly_increasing() -> None:
    rng = random.Random(7)
    events = [Communication(rng.randrange(6), rng.randrange(6), rng.randrange(20)) for _ in range(200)]
    g = build_temporal_graph(events)
    for host in g.hosts():
        times = g.timestamps(host)
        assert all(a < b for a, b in zip(times, times[1:]))
        assert len(times) == len({c.ts for c in events if host in (c.host_a, c.host_b)})


def test_out_neighbors_scenario_graph() -> None:
    g = build_temporal_graph(EVENTS)
    assert list(g.out_neighbors(S(1, 5))) == [S(4, 5), S(1, 10)]
    assert list(g.out_neighbors(S(4, 5))) == [S(1, 5)]
    assert list(g.out_neighbors(S(1, 10))) == [S(2, 10)]
    assert list(g.out_neighbors(S(2, 10))) == [S(1, 10), S(2, 20)]
    assert list(g.out_neighbors(S(2, 20))) == [S(3, 20)]
    assert list(g.out_neighbors(S(3, 20))) == [S(2, 20)]
    assert g.edge_count == 8


def test_contact_edges_are_mutual() -> None:
    g = build_temporal_graph(EVENTS)
    for c in EVENTS:
        a, b = S(c.host_a, c.ts), S(c.host_b, c.ts)
        assert b in g.out_neighbors(a)
        assert a in g.out_neighbors(b)


def test_temporal_edges_forward_only() -> None:
    g = build_temporal_graph(EVENTS)
    assert sorted(g.temporal_edges(), key=lambda e: e[0].host) == [
        (S(1, 5), S(1, 10)),
        (S(2, 10), S(2, 20)),
    ]
    assert S(1, 5) not in g.out_neighbors(S(1, 10))
    assert S(2, 10) not in g.out_neighbors(S(2, 20))


def test_same_graph_for_any_insertion_order() -> None:
    events = [
        Communication(1, 2, 10),
        Communication(2, 3, 20),
        Communication(1, 4, 5),
        Communication(3, 4, 20),
        Communication(5, 1, 10),
    ]
    g1 = build_temporal_graph(events)
    shuffled = list(events)
    random.Random(3).shuffle(shuffled)
    g2 = build_temporal_graph(shuffled)
    assert set(g1.nodes()) == set(g2.nodes())
    assert g1.host_mapping() == g2.host_mapping()
    for node in g1.nodes():
        assert set(g1.out_neighbors(node)) == set(g2.out_neighbors(node))


def test_duplicate_events_collapse() -> None:
    g = build_temporal_graph([Communication(1, 2, 4), Communication(1, 2, 4), Communication(2, 1, 4)])
    assert set(g.nodes()) == {S(1, 4), S(2, 4)}
    assert list(g.out_neighbors(S(1, 4))) == [S(2, 4)]
    assert list(g.out_neighbors(S(2, 4))) == [S(1, 4)]
    assert len(g.contact_edges()) == 3


def test_self_contact_adds_no_edge() -> None:
    g = build_temporal_graph([Communication(1, 1, 4)])
    assert list(g.nodes()) == [S(1, 4)]
    assert list(g.out_neighbors(S(1, 4))) == []


def test_snapshot_at_or_after() -> None:
    g = build_temporal_graph(EVENTS)
    assert g.snapshot_at_or_after(1, 0) == S(1, 5)
    assert g.snapshot_at_or_after(1, 5) == S(1, 5)
    assert g.snapshot_at_or_after(1, 6) == S(1, 10)
    assert g.snapshot_at_or_after(1, 11) is None
    assert g.snapshot_at_or_after(99, 0) is None


def test_adjacency_view_is_undirected() -> None:
    g = build_temporal_graph(EVENTS)
    view = g.adjacency()
    assert set(view[S(1, 10)]) == {S(1, 5), S(2, 10)}
    assert set(view[S(2, 20)]) == {S(2, 10), S(3, 20)}
    for node, neighbors in view.items():
        for other in neighbors:
            assert node in view[other]


def test_mapping_is_a_copy() -> None:
    g = build_temporal_graph(EVENTS)
    mapping = g.host_mapping()
    mapping[1].clear()
    assert g.timestamps(1) == [5, 10]
    assert g.host_snapshots(99) == []


def test_empty_graph() -> None:
    g = build_temporal_graph([])
    assert g.node_count == 0
    assert g.hosts() == []
    assert g.adjacency() == {}
