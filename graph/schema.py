"""
Contact graph schema: communication events, host snapshots and id conventions.
A snapshot is a host as it exists at one timestamp; identity is (host, ts).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

HostId = int
Timestamp = int


class InvalidStateError(RuntimeError):
    """Operation not allowed in the current build state of the graph."""


def snapshot_id(host: HostId, ts: Timestamp) -> str:
    return f"snap:{host}@{ts}"


def cluster_id(members: Iterable[HostId]) -> str:
    ordered = sorted(members)
    if not ordered:
        return "clu:empty"
    return f"clu:{ordered[0]}:{len(ordered)}"


@dataclass(frozen=True)
class Communication:
    host_a: HostId
    host_b: HostId
    ts: Timestamp

    def as_tuple(self) -> Tuple[HostId, HostId, Timestamp]:
        return (self.host_a, self.host_b, self.ts)

    def to_dict(self) -> dict:
        return {"host_a": self.host_a, "host_b": self.host_b, "ts": self.ts}

    @classmethod
    def from_dict(cls, d: dict) -> "Communication":
        return cls(host_a=int(d["host_a"]), host_b=int(d["host_b"]), ts=int(d["ts"]))


@dataclass(frozen=True)
class Snapshot:
    """Host `host` at timestamp `ts`. Equality and hashing use both fields only."""

    host: HostId
    ts: Timestamp

    @property
    def snapshot_id(self) -> str:
        return snapshot_id(self.host, self.ts)

    def as_pair(self) -> Tuple[HostId, Timestamp]:
        return (self.host, self.ts)

    def __str__(self) -> str:
        return f"({self.host}, {self.ts})"
