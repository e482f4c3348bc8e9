"""Node status table and the min-priority frontier used by the local solver."""

import heapq
import itertools
from enum import IntEnum
from typing import Dict, List, Tuple

Node = Tuple[int, int]


class NodeStatus(IntEnum):
    FAR = 0
    CONSIDERED = 1
    ACCEPTED = 2


class Frontier:
    """
    Min-priority queue of Considered nodes keyed by tentative value.

    push() doubles as decrease-key: the old heap entry is invalidated in
    place and a fresh one inserted. Equal keys pop in insertion order.
    One instance belongs to one solve call.
    """

    _REMOVED = None

    def __init__(self):
        self._heap: List[list] = []
        self._entries: Dict[Node, list] = {}
        self._counter = itertools.count()

    def push(self, node: Node, value: float) -> None:
        """Insert node, or move it to a new (normally smaller) key."""
        entry = self._entries.pop(node, None)
        if entry is not None:
            entry[-1] = self._REMOVED
        entry = [value, next(self._counter), node]
        self._entries[node] = entry
        heapq.heappush(self._heap, entry)

    def pop_min(self) -> Tuple[Node, float]:
        """
        Remove and return the node with the smallest key.

        Raises:
            KeyError: If the frontier is empty
        """
        while self._heap:
            value, _, node = heapq.heappop(self._heap)
            if node is not self._REMOVED:
                del self._entries[node]
                return node, value
        raise KeyError("pop from an empty frontier")

    def key(self, node: Node) -> float:
        return self._entries[node][0]

    def __contains__(self, node: Node) -> bool:
        return node in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
