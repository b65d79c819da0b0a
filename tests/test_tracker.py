import math

from aco_tsp.tracker import BestTour


def test_empty():
    best = BestTour()
    assert best.order == ()
    assert math.isinf(best.length)
    assert not best.found


def test_strictly_shorter_replaces():
    best = BestTour().consider([1, 2, 3], 10.0)
    assert best == BestTour((1, 2, 3), 10.0)
    assert best.consider([3, 2, 1], 9.5).order == (3, 2, 1)


def test_tie_keeps_earlier():
    best = BestTour().consider([1, 2, 3], 10.0)
    assert best.consider([2, 1, 3], 10.0) is best
    assert best.consider([2, 1, 3], 11.0) is best
