#!/usr/bin/env python3
"""
Command line for the contact graph: load an event file, build, then query or report.
Exit codes: 0 ok / path found, 1 no path, 2 usage or input error.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from neo4j.exceptions import DriverError, Neo4jError

from clustering import run_clustering
from config import load_settings
from event_store import EventStore
from loader import load_communications
from logging_config import get_logger, setup_logging
from neo4j_store import Neo4jStore
from propagation import exposure_times
from report import format_graph, format_path

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ctgraph", description="Time-respecting contact graph queries")
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--events", type=Path, required=True, help="Events file (.csv, .jsonl or text triples)")
    common.add_argument("--config", type=Path, default=None, help="Config YAML")
    sub = p.add_subparsers(dest="command", required=True)

    q = sub.add_parser("query", parents=[common], help="Find a witness path source -> target")
    q.add_argument("--source", type=int, required=True)
    q.add_argument("--target", type=int, required=True)
    q.add_argument("--x", type=int, required=True, help="Earliest infection time of source")
    q.add_argument("--y", type=int, required=True, help="Latest exposure time of target")

    sub.add_parser("show", parents=[common], help="Print trace mapping and adjacency")

    e = sub.add_parser("exposure", parents=[common], help="Hosts reachable from source in [x, y]")
    e.add_argument("--source", type=int, required=True)
    e.add_argument("--x", type=int, required=True)
    e.add_argument("--y", type=int, required=True)

    c = sub.add_parser("clusters", parents=[common], help="Contact components")
    c.add_argument("--window-start", type=int, default=None)
    c.add_argument("--window-end", type=int, default=None)
    c.add_argument("--min-size", type=int, default=1)

    sub.add_parser("export-neo4j", parents=[common], help="Write the built graph to Neo4j")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args.config)
    except (OSError, ValueError) as e:
        print(f"config error: {e}", file=sys.stderr)
        return 2
    setup_logging(settings)

    try:
        events = load_communications(args.events)
    except (OSError, ValueError) as e:
        print(f"cannot load events from {args.events}: {e}", file=sys.stderr)
        return 2
    store = EventStore(events)
    graph = store.build()

    if args.command == "query":
        path = store.query(args.source, args.target, args.x, args.y)
        print(format_path(path))
        return 0 if path is not None else 1

    if args.command == "show":
        print(format_graph(graph))
        return 0

    if args.command == "exposure":
        times = exposure_times(graph, args.source, args.x, args.y)
        for host in sorted(times, key=lambda h: (times[h], h)):
            print(f"{host}\t{times[host]}")
        return 0

    if args.command == "clusters":
        for cid, hosts in run_clustering(graph, args.window_start, args.window_end, args.min_size):
            print(f"{cid}\t" + ",".join(str(h) for h in hosts))
        return 0

    if args.command == "export-neo4j":
        try:
            neo = Neo4jStore(settings.neo4j_uri, settings.neo4j_user, settings.neo4j_password)
            try:
                neo.ensure_indexes()
                counts = neo.export_graph(graph, settings.export_batch_size)
            finally:
                neo.close()
        except (Neo4jError, DriverError) as e:
            print(f"neo4j error at {settings.neo4j_uri}: {e}", file=sys.stderr)
            return 2
        print(f"Exported {counts['snapshots']} snapshots, {counts['contacts']} contacts, "
              f"{counts['temporal']} temporal edges")
        return 0

    return 2


if __name__ == "__main__":
    sys.exit(main())
