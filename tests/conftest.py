import matplotlib
import numpy as np
import pytest

matplotlib.use("Agg")

from aco_tsp import NodeSet  # noqa: E402


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def triangle():
    # 3-4-5 right triangle: every tour has length 12
    return NodeSet.from_points([(0, 0), (3, 0), (3, 4)])


@pytest.fixture
def square():
    return NodeSet.from_points([(0, 0), (1, 0), (1, 1), (0, 1)])
