"""
Load communication events from disk: .csv, .jsonl, or plain text triples.
"""

from __future__ import annotations

import csv
import json
import re
from pathlib import Path
from typing import List

from schema import Communication

CSV_HEADER = ["host_a", "host_b", "ts"]
_SPLIT = re.compile(r"[\s,]+")


def _triple(values, lineno: int) -> Communication:
    if len(values) != 3:
        raise ValueError(f"line {lineno}: expected 3 values (host_a, host_b, ts), got {len(values)}")
    try:
        a, b, t = (int(v) for v in values)
    except (TypeError, ValueError):
        raise ValueError(f"line {lineno}: non-integer value in {list(values)!r}") from None
    return Communication(a, b, t)


def parse_line(line: str, lineno: int = 1) -> Communication:
    return _triple([p for p in _SPLIT.split(line.strip()) if p], lineno)


def _load_csv(path: Path) -> List[Communication]:
    out: List[Communication] = []
    with open(path, newline="") as f:
        for lineno, row in enumerate(csv.reader(f), start=1):
            cells = [c.strip() for c in row]
            if not cells or not any(cells) or cells[0].startswith("#"):
                continue
            if lineno == 1 and [c.lower() for c in cells] == CSV_HEADER:
                continue
            out.append(_triple(cells, lineno))
    return out


def _load_jsonl(path: Path) -> List[Communication]:
    out: List[Communication] = []
    with open(path) as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"line {lineno}: invalid JSON ({e.msg})") from None
            if isinstance(obj, dict):
                try:
                    out.append(_triple([obj["host_a"], obj["host_b"], obj["ts"]], lineno))
                except KeyError as e:
                    raise ValueError(f"line {lineno}: missing field {e.args[0]}") from None
            elif isinstance(obj, list):
                out.append(_triple(obj, lineno))
            else:
                raise ValueError(f"line {lineno}: expected object or array")
    return out


def _load_text(path: Path) -> List[Communication]:
    out: List[Communication] = []
    with open(path) as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            out.append(parse_line(line, lineno))
    return out


def load_communications(path: Path) -> List[Communication]:
    path = Path(path)
    ext = path.suffix.lower()
    if ext == ".csv":
        return _load_csv(path)
    if ext in (".jsonl", ".ndjson"):
        return _load_jsonl(path)
    return _load_text(path)
