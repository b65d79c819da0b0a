from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, replace

import numpy as np

from .errors import DataCorruptionError, NoFeasibleMoveError

# Tolerance when comparing a recorded tour length with a recomputed one
LENGTH_TOLERANCE = 1e-9


# =================================================================================
# ANT
# =================================================================================

@dataclass(frozen=True)
class Ant:
    '''
    One tour-construction agent.

    Cities are 1-based positions in the current node order; subtract 1 to
    index the distance and pheromone matrices.

    Attributes:
        id: 1..n_ants, stable for the run
        current_city: last city in `path`
        path: visited cities in visiting order, no duplicates
        path_length: sum of the path's edges; once the path covers every
            city it also includes the closing edge back to the start
    '''
    id: int
    current_city: int
    path: tuple[int, ...]
    path_length: float = 0.0

    @classmethod
    def start(cls, ant_id: int, city: int) -> Ant:
        return cls(ant_id, city, (city,), 0.0)

    def is_complete(self, n: int) -> bool:
        return len(self.path) == n

    def as_dict(self) -> dict:
        return {"id": self.id, "currentCity": self.current_city,
                "path": list(self.path), "pathLength": self.path_length}


def ant_count(n: int, ant_factor: float) -> int:
    if n <= 0:
        return 0
    return max(1, math.floor(n * ant_factor))


def initialize_ants(n: int, ant_factor: float, rng: np.random.Generator) -> list[Ant]:
    # Each ant starts at its own uniformly drawn city
    count = ant_count(n, ant_factor)
    starts = rng.integers(1, n + 1, size=count) if count else []
    return [Ant.start(k + 1, int(city)) for k, city in enumerate(starts)]


# --- Objective Function: closed or open path length ---
def tour_length(path: Sequence[int], distance: np.ndarray, *, closed: bool) -> float:
    if len(path) < 2:
        return 0.0
    idx = np.asarray(path) - 1
    total = float(np.sum(distance[idx[:-1], idx[1:]]))
    if closed:
        total += float(distance[idx[-1], idx[0]])
    return total


# =================================================================================
# TRANSITION RULE
# =================================================================================

def transition_probabilities(current: int, candidates: Sequence[int], pheromone: np.ndarray,
                             distance: np.ndarray, alpha: float, beta: float) -> np.ndarray:
    '''
    P(j) proportional to tau[i, j]^alpha * (1 / d[i, j])^beta over `candidates`.

    A candidate sitting on top of the current city (d == 0) has infinite
    attractiveness: the first such candidate gets probability 1. When the
    weights sum to zero or overflow, the distribution falls back to uniform.
    '''
    i = current - 1
    idx = np.asarray(candidates) - 1
    d = distance[i, idx]

    coincident = np.flatnonzero(d == 0)
    if coincident.size:
        probs = np.zeros(len(idx))
        probs[coincident[0]] = 1.0
        return probs

    with np.errstate(over="ignore", invalid="ignore"):
        weights = (pheromone[i, idx] ** alpha) * ((1.0 / d) ** beta)
        total = weights.sum()
    if not np.isfinite(total) or total <= 0:
        return np.full(len(idx), 1.0 / len(idx))
    return weights / total


def roulette(probs: np.ndarray, r: float) -> int:
    '''Index of the first non-zero entry whose cumulative probability reaches r.'''
    probs = np.asarray(probs, dtype=float)
    cumulative = np.cumsum(probs)
    hits = np.flatnonzero((cumulative >= r) & (probs > 0))
    if hits.size:
        return int(hits[0])
    # rounding can leave the last cumulative value a hair below r
    positive = np.flatnonzero(probs > 0)
    return int(positive[-1]) if positive.size else len(probs) - 1


def choose_next_city(ant: Ant, pheromone: np.ndarray, distance: np.ndarray,
                     alpha: float = 1.0, beta: float = 5.0,
                     rng: np.random.Generator | None = None) -> int:
    '''Roulette-wheel choice of the next unvisited city for `ant`.'''
    n = distance.shape[0]
    visited = set(ant.path)
    remaining = [c for c in range(1, n + 1) if c not in visited]
    if not remaining:
        raise NoFeasibleMoveError(f"ant {ant.id} has already visited all {n} cities")

    rng = rng if rng is not None else np.random.default_rng()
    probs = transition_probabilities(ant.current_city, remaining, pheromone, distance, alpha, beta)
    return remaining[roulette(probs, rng.random())]


# =================================================================================
# TOUR CONSTRUCTION
# =================================================================================

def advance(ant: Ant, pheromone: np.ndarray, distance: np.ndarray,
            alpha: float = 1.0, beta: float = 5.0,
            rng: np.random.Generator | None = None) -> Ant:
    # the input ant is left unchanged
    city = choose_next_city(ant, pheromone, distance, alpha, beta, rng)
    path = ant.path + (city,)
    complete = len(path) == distance.shape[0]
    return replace(ant, current_city=city, path=path,
                   path_length=tour_length(path, distance, closed=complete))


def build_tour(ant: Ant, pheromone: np.ndarray, distance: np.ndarray,
               alpha: float = 1.0, beta: float = 5.0,
               rng: np.random.Generator | None = None) -> Ant:
    '''Advances `ant` until it has visited every city.'''
    n = distance.shape[0]
    if len(ant.path) == n:
        # a single-city graph: the start city already closes the tour
        return replace(ant, path_length=tour_length(ant.path, distance, closed=True))
    while len(ant.path) < n:
        ant = advance(ant, pheromone, distance, alpha, beta, rng)
    return ant


def validate_tour(ant: Ant, distance: np.ndarray) -> None:
    '''Raises DataCorruptionError unless `ant` holds a complete, consistent tour.'''
    n = distance.shape[0]
    if len(ant.path) != n:
        raise DataCorruptionError(f"ant {ant.id}: path has {len(ant.path)} cities, expected {n}", ant.id)
    if set(ant.path) != set(range(1, n + 1)):
        raise DataCorruptionError(f"ant {ant.id}: path is not a permutation: {list(ant.path)}", ant.id)
    if ant.current_city != ant.path[-1]:
        raise DataCorruptionError(f"ant {ant.id}: current city {ant.current_city} is not the path end", ant.id)
    expected = tour_length(ant.path, distance, closed=True)
    if not math.isclose(ant.path_length, expected, rel_tol=LENGTH_TOLERANCE, abs_tol=LENGTH_TOLERANCE):
        raise DataCorruptionError(
            f"ant {ant.id}: recorded length {ant.path_length} != tour length {expected}", ant.id)
