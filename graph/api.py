"""
REST API for the contact graph (Flask).
Endpoints: ingest communications, build, introspection, infection queries, clusters, Neo4j export.
"""

from __future__ import annotations

from typing import Any, Dict

from flask import Flask, jsonify, request

from clustering import run_clustering
from config import load_settings
from event_store import EventStore
from logging_config import get_logger, setup_logging
from neo4j_store import Neo4jStore
from propagation import exposure_times
from schema import Communication, InvalidStateError, Snapshot

app = Flask(__name__)
logger = get_logger(__name__)

# One store per process; reset_state() starts over (tests, demo)
STATE: Dict[str, Any] = {"store": EventStore()}


def reset_state() -> None:
    STATE["store"] = EventStore()


def get_store() -> EventStore:
    return STATE["store"]


def get_neo4j_store() -> Neo4jStore:
    settings = load_settings()
    return Neo4jStore(settings.neo4j_uri, settings.neo4j_user, settings.neo4j_password)


def _strict_int(value: Any, name: str) -> int:
    # JSON numbers only; bools, floats and numeric strings are rejected
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer, got {value!r}")
    return value


def _int_arg(body: Dict[str, Any], key: str) -> int:
    return _strict_int(body[key], key)


def _parse_communication(item: Any) -> Communication:
    if isinstance(item, dict):
        return Communication(
            _int_arg(item, "host_a"), _int_arg(item, "host_b"), _int_arg(item, "ts")
        )
    if isinstance(item, list) and len(item) == 3:
        a, b, t = item
        return Communication(
            _strict_int(a, "host_a"), _strict_int(b, "host_b"), _strict_int(t, "ts")
        )
    raise TypeError(f"expected object or [host_a, host_b, ts], got {item!r}")


@app.errorhandler(InvalidStateError)
def handle_invalid_state(e: InvalidStateError):
    return jsonify({"error": str(e)}), 409


# ---- Ingest ----

@app.route("/api/v1/communications", methods=["POST"])
def ingest_communications():
    body = request.get_json(silent=True) or {}
    store = get_store()
    try:
        if "communications" in body:
            items = body["communications"]
            if not isinstance(items, list):
                raise TypeError("communications must be a list")
            events = [_parse_communication(item) for item in items]
        else:
            events = [_parse_communication(body)]
    except (KeyError, TypeError, ValueError) as e:
        return jsonify({"error": f"invalid communication: {e}"}), 400
    store.extend(events)
    return jsonify({"status": "ok", "accepted": len(events), "total": len(store)}), 201


@app.route("/api/v1/graph/build", methods=["POST"])
def build_graph():
    graph = get_store().build()
    return jsonify({
        "status": "ok",
        "hosts": len(graph.hosts()),
        "snapshots": graph.node_count,
        "edges": graph.edge_count,
    }), 200


# ---- Introspection ----

@app.route("/api/v1/graph/hosts")
def host_mapping():
    graph = get_store().graph
    data = {str(h): [s.ts for s in snaps] for h, snaps in graph.host_mapping().items()}
    return jsonify({"data": data}), 200


@app.route("/api/v1/graph/hosts/<int:host>")
def host_timestamps(host: int):
    graph = get_store().graph
    return jsonify({"host": host, "timestamps": graph.timestamps(host)}), 200


@app.route("/api/v1/graph/snapshots/<int:host>/<int:ts>/neighbors")
def snapshot_neighbors(host: int, ts: int):
    graph = get_store().graph
    node = Snapshot(host, ts)
    if node not in graph:
        return jsonify({"error": "snapshot not found"}), 404
    return jsonify({
        "snapshot": list(node.as_pair()),
        "out_neighbors": [list(n.as_pair()) for n in graph.out_neighbors(node)],
    }), 200


# ---- Infection queries ----

@app.route("/api/v1/infection/query", methods=["POST"])
def infection_query():
    body = request.get_json(silent=True) or {}
    try:
        source = _int_arg(body, "source")
        target = _int_arg(body, "target")
        x = _int_arg(body, "x")
        y = _int_arg(body, "y")
    except (KeyError, TypeError, ValueError) as e:
        return jsonify({"error": f"invalid query: {e}"}), 400
    path = get_store().engine.query_pairs(source, target, x, y)
    return jsonify({
        "reachable": path is not None,
        "path": [list(p) for p in path] if path else [],
    }), 200


@app.route("/api/v1/infection/exposure", methods=["POST"])
def infection_exposure():
    body = request.get_json(silent=True) or {}
    try:
        source = _int_arg(body, "source")
        x = _int_arg(body, "x")
        y = _int_arg(body, "y")
    except (KeyError, TypeError, ValueError) as e:
        return jsonify({"error": f"invalid query: {e}"}), 400
    times = exposure_times(get_store().graph, source, x, y)
    return jsonify({"exposed": {str(h): t for h, t in times.items()}}), 200


# ---- Clustering ----

@app.route("/api/v1/clusters")
def clusters():
    ws = request.args.get("window_start", type=int)
    we = request.args.get("window_end", type=int)
    min_size = request.args.get("min_size", default=1, type=int)
    found = run_clustering(get_store().graph, ws, we, min_size)
    return jsonify({"clusters": [{"cluster_id": cid, "hosts": hosts} for cid, hosts in found]}), 200


# ---- Neo4j ----

@app.route("/api/v1/graph/export", methods=["POST"])
def export_graph():
    graph = get_store().graph
    settings = load_settings()
    neo = get_neo4j_store()
    try:
        neo.ensure_indexes()
        counts = neo.export_graph(graph, settings.export_batch_size)
    finally:
        neo.close()
    return jsonify({"status": "ok", **counts}), 200


@app.route("/api/v1/health")
def health():
    return jsonify({"status": "ok", "built": get_store().built}), 200


def main():
    settings = load_settings()
    setup_logging(settings)
    logger.info("Starting contact graph API on %s:%d", settings.api_host, settings.api_port)
    app.run(host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
