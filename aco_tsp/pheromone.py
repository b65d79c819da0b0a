from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np

from .errors import DataCorruptionError


# =================================================================================
# PHEROMONE FIELD
# =================================================================================

# --- Initialization: tau0 on every cell ---
def initialize(n: int, c: float = 1.0) -> np.ndarray:
    if c <= 0:
        raise ValueError(f"initial pheromone must be > 0, got {c}")
    return np.full((n, n), float(c))


# --- Evaporation: (1 - rho) * tau on every cell, in place ---
def evaporate(matrix: np.ndarray, rho: float) -> np.ndarray:
    if not 0.0 <= rho < 1.0:
        raise ValueError(f"rho must be in [0, 1), got {rho}")
    matrix *= (1.0 - rho)
    return matrix


# =================================================================================
# DEPOSIT
# =================================================================================

def closed_edges(path: Sequence[int]) -> list[tuple[int, int]]:
    '''0-based edges of a closed tour over 1-based cities, closing edge included.'''
    n = len(path)
    if n < 2:
        return []
    return [(path[k] - 1, path[(k + 1) % n] - 1) for k in range(n)]


def check_depositable(path: Sequence[int], length: float, n: int, ant_id: int | None = None) -> None:
    '''
    Raises DataCorruptionError when a complete tour cannot carry a deposit:
    repeated city or a non-positive / non-finite length.
    '''
    if len(set(path)) != len(path):
        raise DataCorruptionError(f"ant {ant_id}: tour revisits a city: {list(path)}", ant_id)
    if len(path) == n and n >= 2 and not (np.isfinite(length) and length > 0):
        raise DataCorruptionError(f"ant {ant_id}: tour length is {length}", ant_id)


def deposit(matrix: np.ndarray, tours: Iterable, q: float) -> np.ndarray:
    '''
    Adds q / L to both directions of every edge of each complete tour.

    `tours` holds objects with `path`, `path_length` and `id` (Ant) or
    (path, length) pairs. Incomplete tours are left out. Every tour is
    checked before the matrix is touched, so a corrupt tour raises without
    leaving a partial update behind.
    '''
    n = matrix.shape[0]
    accepted = []
    for tour in tours:
        if hasattr(tour, "path"):
            path, length, ant_id = tour.path, tour.path_length, tour.id
        else:
            (path, length), ant_id = tour, None
        if len(path) != n:
            continue
        check_depositable(path, length, n, ant_id)
        if n >= 2:
            accepted.append((path, length))

    for path, length in accepted:
        add_on_tour(matrix, path, q / length)
    return matrix


def add_on_tour(matrix: np.ndarray, path: Sequence[int], amount: float) -> None:
    '''Symmetric in-place reinforcement of a closed tour.'''
    edges = closed_edges(path)
    if not edges:
        return
    a, b = np.array(edges).T
    # np.add.at accumulates repeated (a, b) pairs, e.g. both edges of a 2-city tour
    np.add.at(matrix, (a, b), amount)
    np.add.at(matrix, (b, a), amount)
