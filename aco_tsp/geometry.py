from __future__ import annotations

import csv
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np


# =================================================================================
# NODES
# =================================================================================

@dataclass(frozen=True)
class GraphNode:
    '''
    A city placed on the plane.

    Attributes:
        id: 1-based id, unique for the life of the NodeSet that created it
        x, y: coordinates
    '''
    id: int
    x: float
    y: float


class NodeSet:
    '''
    Ordered collection of graph nodes.

    Owns the id counter: ids start at 1, grow monotonically and are never
    reused, even after a removal. Only reset() restarts the counter.
    `version` changes on every mutation so that matrices built for an older
    version can be detected as stale.
    '''

    def __init__(self) -> None:
        self._nodes: list[GraphNode] = []
        self._next_id = 1
        self.version = 0

    # ---- Mutation ------------------------------------------------------------
    def add(self, x: float, y: float) -> GraphNode:
        node = GraphNode(self._next_id, float(x), float(y))
        self._next_id += 1
        self._nodes.append(node)
        self.version += 1
        return node

    def extend(self, points: Iterable[Sequence[float]]) -> list[GraphNode]:
        return [self.add(x, y) for x, y in points]

    def remove(self, node_id: int) -> GraphNode:
        for k, node in enumerate(self._nodes):
            if node.id == node_id:
                del self._nodes[k]
                self.version += 1
                return node
        raise KeyError(node_id)

    def reset(self) -> None:
        self._nodes.clear()
        self._next_id = 1
        self.version += 1

    # ---- Access --------------------------------------------------------------
    @property
    def nodes(self) -> tuple[GraphNode, ...]:
        return tuple(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self):
        return iter(self._nodes)

    def __getitem__(self, index: int) -> GraphNode:
        return self._nodes[index]

    def positions(self) -> np.ndarray:
        return node_positions(self._nodes)

    def ids_for(self, cities: Sequence[int]) -> list[int]:
        '''Maps 1-based city numbers (position in the current order) to node ids.'''
        return [self._nodes[c - 1].id for c in cities]

    # ---- Construction helpers -------------------------------------------------
    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]]) -> NodeSet:
        ns = cls()
        ns.extend(points)
        return ns

    @classmethod
    def random(cls, n: int, rng: np.random.Generator | None = None, *, scale: float = 1.0) -> NodeSet:
        '''n nodes placed uniformly in the square [0, scale]^2.'''
        rng = rng if rng is not None else np.random.default_rng()
        return cls.from_points(rng.random((n, 2)) * scale)

    @classmethod
    def from_csv(cls, path: str | Path) -> NodeSet:
        '''Loads `x,y` rows; blank lines are ignored.'''
        with open(path, encoding="utf-8", newline="") as f:
            rows = [row for row in csv.reader(f) if row]
        try:
            points = [(float(row[0]), float(row[1])) for row in rows]
        except (IndexError, ValueError) as exc:
            raise ValueError(f"{path}: expected rows of 'x,y' numbers") from exc
        return cls.from_points(points)


# =================================================================================
# DISTANCES
# =================================================================================

def node_positions(nodes: Sequence[GraphNode]) -> np.ndarray:
    if not nodes:
        return np.zeros((0, 2))
    return np.array([(node.x, node.y) for node in nodes], dtype=float)


def build_distance_matrix(nodes: Sequence[GraphNode] | np.ndarray) -> np.ndarray:
    '''
    Euclidean distance matrix D[i, j] between the i-th and j-th node.

    Indexed by position in `nodes`, not by node id. Symmetric with a zero
    diagonal. Accepts GraphNodes or an (n, 2) coordinate array.
    '''
    pos = nodes if isinstance(nodes, np.ndarray) else node_positions(nodes)
    pos = np.asarray(pos, dtype=float).reshape(-1, 2)
    diff = pos[:, np.newaxis, :] - pos[np.newaxis, :, :]
    return np.sqrt(np.sum(diff * diff, axis=-1))
