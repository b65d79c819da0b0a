import numpy as np
import pytest

from aco_tsp import pheromone
from aco_tsp.ants import (Ant, advance, ant_count, build_tour, choose_next_city, initialize_ants,
                          roulette, tour_length, transition_probabilities, validate_tour)
from aco_tsp.errors import DataCorruptionError, NoFeasibleMoveError
from aco_tsp.geometry import NodeSet, build_distance_matrix


class FixedDraw:
    '''Stands in for a numpy Generator with a fixed uniform draw.'''

    def __init__(self, r):
        self.r = r

    def random(self):
        return self.r


@pytest.mark.parametrize("n,factor,expected", [(0, 0.8, 0), (1, 0.8, 1), (5, 0.8, 4), (10, 0.8, 8), (3, 2.0, 6)])
def test_ant_count(n, factor, expected):
    assert ant_count(n, factor) == expected


def test_initialize_ants(rng):
    ants = initialize_ants(10, 0.8, rng)
    assert [a.id for a in ants] == list(range(1, 9))
    for ant in ants:
        assert 1 <= ant.current_city <= 10
        assert ant.path == (ant.current_city,)
        assert ant.path_length == 0


def test_initialize_ants_empty_graph(rng):
    assert initialize_ants(0, 0.8, rng) == []


def test_n_minus_one_advances_give_permutation(rng):
    n = 9
    D = build_distance_matrix(NodeSet.random(n, rng).nodes)
    tau = pheromone.initialize(n)
    for ant in initialize_ants(n, 1.0, rng):
        for _ in range(n - 1):
            ant = advance(ant, tau, D, rng=rng)
        assert sorted(ant.path) == list(range(1, n + 1))
        assert ant.current_city == ant.path[-1]
        assert ant.path_length == pytest.approx(tour_length(ant.path, D, closed=True))
        validate_tour(ant, D)
        with pytest.raises(NoFeasibleMoveError):
            choose_next_city(ant, tau, D, rng=rng)


def test_advance_does_not_mutate_and_leaves_path_open(square, rng):
    D = build_distance_matrix(square.nodes)
    tau = pheromone.initialize(4)
    ant = Ant.start(1, 1)
    moved = advance(ant, tau, D, rng=rng)
    assert ant.path == (1,)
    assert len(moved.path) == 2
    # open path: no closing edge yet
    assert moved.path_length == D[0, moved.current_city - 1]


def test_no_feasible_move_is_an_assertion_error():
    D = np.zeros((1, 1))
    with pytest.raises(AssertionError):
        choose_next_city(Ant.start(1, 1), np.ones((1, 1)), D)


def test_coincident_city_is_forced():
    D = build_distance_matrix(NodeSet.from_points([(0, 0), (5, 0), (1, 1), (1, 1)]).nodes)
    tau = pheromone.initialize(4)
    ant = Ant.start(1, 3)
    for r in (0.0, 0.5, 0.999):
        assert choose_next_city(ant, tau, D, rng=FixedDraw(r)) == 4


def test_first_coincident_city_wins():
    D = build_distance_matrix(NodeSet.from_points([(0, 0), (0, 0), (0, 0), (9, 9)]).nodes)
    probs = transition_probabilities(1, [2, 3, 4], np.ones((4, 4)), D, 1.0, 5.0)
    assert probs.tolist() == [1.0, 0.0, 0.0]


def test_zero_pheromone_falls_back_to_uniform(square):
    D = build_distance_matrix(square.nodes)
    probs = transition_probabilities(1, [2, 3, 4], np.zeros((4, 4)), D, 1.0, 5.0)
    assert probs == pytest.approx([1 / 3] * 3)


def test_probabilities_follow_weights(square):
    D = build_distance_matrix(square.nodes)
    probs = transition_probabilities(1, [2, 3], np.ones((4, 4)), D, 1.0, 2.0)
    # 1/1^2 against 1/sqrt(2)^2
    assert probs == pytest.approx([2 / 3, 1 / 3])


def test_roulette_inverse_cdf():
    probs = np.array([0.2, 0.3, 0.5])
    assert roulette(probs, 0.0) == 0
    assert roulette(probs, 0.2) == 0
    assert roulette(probs, 0.21) == 1
    assert roulette(probs, 0.5) == 1
    assert roulette(probs, 0.99) == 2


def test_roulette_clamps_rounding():
    assert roulette(np.array([0.3, 0.3, 0.3]), 0.95) == 2
    assert roulette(np.array([0.5, 0.45, 0.0]), 0.99) == 1


def test_roulette_never_picks_zero_probability():
    assert roulette(np.array([0.0, 1.0, 0.0]), 0.0) == 1
    assert roulette(np.array([0.0, 0.0, 0.4, 0.6]), 0.0) == 2
    assert roulette(np.array([0.0, 0.0, 0.4, 0.6]), 0.4) == 2


def test_build_tour_single_city():
    D = np.zeros((1, 1))
    ant = build_tour(Ant.start(1, 1), np.ones((1, 1)), D)
    assert ant.path == (1,)
    assert ant.path_length == 0


def test_triangle_tour_length_any_order(triangle):
    D = build_distance_matrix(triangle.nodes)
    for path in [(1, 2, 3), (2, 1, 3), (3, 2, 1)]:
        assert tour_length(path, D, closed=True) == 12


@pytest.mark.parametrize("ant", [
    Ant(1, 2, (1, 2), 3.0),
    Ant(1, 2, (1, 2, 2), 6.0),
    Ant(1, 3, (1, 2, 3), 11.0),
    Ant(1, 1, (1, 2, 3), 12.0),
])
def test_validate_tour_rejects(ant, triangle):
    D = build_distance_matrix(triangle.nodes)
    with pytest.raises(DataCorruptionError) as err:
        validate_tour(ant, D)
    assert err.value.ant_id == 1


def test_as_dict_for_display():
    assert Ant(2, 3, (1, 3), 5.0).as_dict() == {"id": 2, "currentCity": 3, "path": [1, 3], "pathLength": 5.0}
