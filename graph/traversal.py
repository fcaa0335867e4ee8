"""
Generic directed traversal with white/gray/black coloring and predecessor tracking.

All marking lives in a TraversalState owned by one call, keyed by node, so concurrent
traversals over the same shared graph never interfere.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Dict, Hashable, Iterable, List, Optional

WHITE = "w"  # undiscovered
GRAY = "g"  # discovered, not finished
BLACK = "b"  # finished

Neighbors = Callable[[Hashable], Iterable[Hashable]]


@dataclass
class TraversalState:
    color: Dict[Hashable, str] = field(default_factory=dict)
    pred: Dict[Hashable, Optional[Hashable]] = field(default_factory=dict)
    discovered: List[Hashable] = field(default_factory=list)
    finished: List[Hashable] = field(default_factory=list)
    found: Optional[Hashable] = None

    def color_of(self, node: Hashable) -> str:
        return self.color.get(node, WHITE)

    def discover(self, node: Hashable, parent: Optional[Hashable]) -> None:
        self.color[node] = GRAY
        self.pred[node] = parent
        self.discovered.append(node)

    def finish(self, node: Hashable) -> None:
        self.color[node] = BLACK
        self.finished.append(node)

    def path_to(self, node: Hashable) -> List[Hashable]:
        """Follow predecessors back to the root; returns root..node."""
        if node not in self.pred:
            raise KeyError(node)
        path = [node]
        parent = self.pred[node]
        while parent is not None:
            path.append(parent)
            parent = self.pred[parent]
        path.reverse()
        return path


def breadth_first_search(
    start: Hashable,
    neighbors: Neighbors,
    accept: Optional[Callable[[Hashable], bool]] = None,
    allow: Optional[Callable[[Hashable], bool]] = None,
) -> TraversalState:
    """
    BFS from start. Nodes failing `allow` are never discovered. Stops as soon as a node
    satisfying `accept` is discovered (start included) and records it in state.found.
    """
    state = TraversalState()
    state.discover(start, None)
    if accept is not None and accept(start):
        state.found = start
        return state
    queue = deque([start])
    while queue:
        u = queue.popleft()
        for v in neighbors(u):
            if state.color_of(v) != WHITE:
                continue
            if allow is not None and not allow(v):
                continue
            state.discover(v, u)
            if accept is not None and accept(v):
                state.found = v
                return state
            queue.append(v)
        state.finish(u)
    return state


def depth_first_search(nodes: Iterable[Hashable], neighbors: Neighbors) -> TraversalState:
    """Full DFS over every node in `nodes` (in order), iterative. Finish order is recorded."""
    state = TraversalState()
    for root in nodes:
        if state.color_of(root) != WHITE:
            continue
        state.discover(root, None)
        stack = [(root, iter(neighbors(root)))]
        while stack:
            u, it = stack[-1]
            advanced = False
            for v in it:
                if state.color_of(v) == WHITE:
                    state.discover(v, u)
                    stack.append((v, iter(neighbors(v))))
                    advanced = True
                    break
            if not advanced:
                stack.pop()
                state.finish(u)
    return state
