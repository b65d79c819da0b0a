import numpy as np
import pytest

from aco_tsp import pheromone
from aco_tsp.ants import Ant
from aco_tsp.errors import DataCorruptionError


@pytest.mark.parametrize("n,c", [(0, 1.0), (1, 1.0), (5, 0.3)])
def test_initialize(n, c):
    tau = pheromone.initialize(n, c)
    assert tau.shape == (n, n)
    assert np.all(tau == c)


def test_initialize_rejects_non_positive():
    with pytest.raises(ValueError):
        pheromone.initialize(3, 0.0)


def test_evaporate_applies_to_every_cell():
    tau = pheromone.initialize(4, 2.0)
    pheromone.evaporate(tau, 0.5)
    assert np.all(tau == 1.0)


def test_evaporate_rejects_rho_out_of_range():
    with pytest.raises(ValueError):
        pheromone.evaporate(pheromone.initialize(2), 1.0)


def test_deposit_on_closed_tour_symmetric():
    tau = np.zeros((3, 3))
    pheromone.deposit(tau, [Ant(1, 3, (1, 2, 3), 12.0)], q=12.0)
    expected = np.array([[0, 1, 1], [1, 0, 1], [1, 1, 0]], dtype=float)
    assert np.array_equal(tau, expected)


def test_deposit_skips_incomplete_tours():
    tau = pheromone.initialize(4)
    pheromone.deposit(tau, [Ant(1, 2, (1, 2), 1.0)], q=500.0)
    assert np.all(tau == 1.0)


def test_deposit_accepts_path_length_pairs():
    tau = np.zeros((3, 3))
    pheromone.deposit(tau, [((1, 3, 2), 6.0)], q=6.0)
    assert tau[0, 2] == tau[2, 0] == 1.0


@pytest.mark.parametrize("ant", [
    Ant(1, 3, (1, 2, 3), 0.0),
    Ant(2, 2, (1, 2, 2), 10.0),
])
def test_deposit_rejects_corrupt_tour_without_touching_matrix(ant):
    tau = pheromone.initialize(3)
    good = Ant(3, 3, (1, 2, 3), 12.0)
    with pytest.raises(DataCorruptionError):
        pheromone.deposit(tau, [good, ant], q=1.0)
    assert np.all(tau == 1.0)


def test_single_city_tour_deposits_nothing():
    tau = pheromone.initialize(1)
    pheromone.deposit(tau, [Ant(1, 1, (1,), 0.0)], q=500.0)
    assert tau.tolist() == [[1.0]]


def test_evaporate_then_deposit_never_negative(rng):
    n = 6
    tau = pheromone.initialize(n)
    for _ in range(20):
        tours = [tuple(int(c) for c in rng.permutation(n) + 1) for _ in range(4)]
        pheromone.evaporate(tau, 0.9)
        pheromone.deposit(tau, [(t, float(rng.uniform(1, 10))) for t in tours], q=500.0)
        assert np.all(tau >= 0)
