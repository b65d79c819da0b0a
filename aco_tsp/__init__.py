"""Ant Colony Optimization for the Euclidean traveling salesman problem.

- aco_tsp.geometry: GraphNode, NodeSet, distance matrix
- aco_tsp.pheromone: pheromone field (initialize / evaporate / deposit)
- aco_tsp.ants: Ant, transition rule, tour construction
- aco_tsp.colony: simulation loop, Colony session
- aco_tsp.plotting: matplotlib helpers for results
"""
from .ants import Ant, advance, choose_next_city, initialize_ants
from .colony import Colony, ColonyState, IterationRecord, RunResult, run_iteration, run_simulation
from .config import ACOConfig
from .errors import ColonyError, ConfigError, DataCorruptionError, InvalidStateError, NoFeasibleMoveError
from .geometry import GraphNode, NodeSet, build_distance_matrix
from .tracker import BestTour

__all__ = [
    "ACOConfig", "Ant", "BestTour", "Colony", "ColonyState", "GraphNode", "IterationRecord", "NodeSet",
    "RunResult", "advance", "build_distance_matrix", "choose_next_city", "initialize_ants",
    "run_iteration", "run_simulation",
    "ColonyError", "ConfigError", "DataCorruptionError", "InvalidStateError", "NoFeasibleMoveError",
]
