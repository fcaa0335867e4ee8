"""
Neo4j interchange: store raw communications and export a built temporal graph.

    (:Host {host_id})-[:COMMUNICATED {ts, seq}]->(:Host)
    (:Host)-[:HAS_SNAPSHOT]->(:Snapshot {snapshot_id, host_id, ts})
    (:Snapshot)-[:CONTACT]->(:Snapshot), (:Snapshot)-[:NEXT]->(:Snapshot)
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from neo4j import GraphDatabase
from neo4j.exceptions import Neo4jError

from logging_config import get_logger
from schema import Communication, Snapshot
from temporal_graph import TemporalGraph

logger = get_logger(__name__)


def _chunks(rows: List[Dict[str, Any]], size: int) -> Iterable[List[Dict[str, Any]]]:
    for i in range(0, len(rows), size):
        yield rows[i : i + size]


def _snapshot_row(s: Snapshot) -> Dict[str, Any]:
    return {"snapshot_id": s.snapshot_id, "host_id": s.host, "ts": s.ts}


class Neo4jStore:
    def __init__(self, uri: str, user: str, password: str):
        self._driver = GraphDatabase.driver(uri, auth=(user, password))

    def close(self):
        self._driver.close()

    def _run(self, query: str, **params):
        with self._driver.session() as session:
            return session.run(query, params)

    def run_list(self, query: str, **params) -> List[Dict[str, Any]]:
        """Run query and return list of record dicts (consumes result inside session)."""
        with self._driver.session() as session:
            result = session.run(query, params)
            return [dict(rec) for rec in result]

    def ensure_indexes(self):
        index_queries = [
            "CREATE INDEX host_host_id IF NOT EXISTS FOR (h:Host) ON (h.host_id)",
            "CREATE INDEX snapshot_snapshot_id IF NOT EXISTS FOR (s:Snapshot) ON (s.snapshot_id)",
            "CREATE INDEX snapshot_ts IF NOT EXISTS FOR (s:Snapshot) ON (s.ts)",
        ]
        for q in index_queries:
            try:
                self._run(q)
            except Neo4jError as e:
                logger.warning("Index creation failed (%s): %s", q, e)

    def _last_sequence(self) -> int:
        rows = self.run_list(
            """
            MATCH (:Host)-[c:COMMUNICATED]->(:Host)
            RETURN coalesce(max(c.seq), -1) AS last
            """
        )
        return int(rows[0]["last"]) if rows else -1

    def record_communications(self, events: Iterable[Communication], batch_size: int = 500) -> int:
        """Store events with a store-wide insertion sequence, the tiebreak for equal timestamps."""
        start = self._last_sequence() + 1
        rows = [{**c.to_dict(), "seq": start + i} for i, c in enumerate(events)]
        for batch in _chunks(rows, batch_size):
            self._run(
                """
                UNWIND $rows AS row
                MERGE (a:Host {host_id: row.host_a})
                MERGE (b:Host {host_id: row.host_b})
                CREATE (a)-[:COMMUNICATED {ts: row.ts, seq: row.seq}]->(b)
                """,
                rows=batch,
            )
        return len(rows)

    def load_communications(self) -> List[Communication]:
        rows = self.run_list(
            """
            MATCH (a:Host)-[c:COMMUNICATED]->(b:Host)
            RETURN a.host_id AS host_a, b.host_id AS host_b, c.ts AS ts
            ORDER BY c.ts, c.seq
            """
        )
        return [Communication.from_dict(r) for r in rows]

    def export_graph(self, graph: TemporalGraph, batch_size: int = 500) -> Dict[str, int]:
        """Write snapshots, CONTACT and NEXT relationships. Returns counts written."""
        snapshots = [_snapshot_row(s) for s in graph.nodes()]
        for batch in _chunks(snapshots, batch_size):
            self._run(
                """
                UNWIND $rows AS row
                MERGE (h:Host {host_id: row.host_id})
                MERGE (s:Snapshot {snapshot_id: row.snapshot_id})
                SET s.host_id = row.host_id, s.ts = row.ts
                MERGE (h)-[:HAS_SNAPSHOT]->(s)
                """,
                rows=batch,
            )

        contacts = []
        seen = set()
        for a, b in graph.contact_edges():
            key = frozenset((a, b))
            if a == b or key in seen:
                continue
            seen.add(key)
            contacts.append({"src": a.snapshot_id, "dst": b.snapshot_id})
        for batch in _chunks(contacts, batch_size):
            self._run(
                """
                UNWIND $rows AS row
                MATCH (a:Snapshot {snapshot_id: row.src}), (b:Snapshot {snapshot_id: row.dst})
                MERGE (a)-[:CONTACT]->(b)
                """,
                rows=batch,
            )

        temporal = [
            {"src": a.snapshot_id, "dst": b.snapshot_id} for a, b in graph.temporal_edges()
        ]
        for batch in _chunks(temporal, batch_size):
            self._run(
                """
                UNWIND $rows AS row
                MATCH (a:Snapshot {snapshot_id: row.src}), (b:Snapshot {snapshot_id: row.dst})
                MERGE (a)-[:NEXT]->(b)
                """,
                rows=batch,
            )

        counts = {"snapshots": len(snapshots), "contacts": len(contacts), "temporal": len(temporal)}
        logger.info("Exported temporal graph to Neo4j: %s", counts)
        return counts
