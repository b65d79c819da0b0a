from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field

import numpy as np

from . import pheromone as field_ops
from .ants import Ant, build_tour, initialize_ants, validate_tour
from .config import REPORT_EVERY, ACOConfig
from .errors import DataCorruptionError, InvalidStateError
from .geometry import GraphNode, NodeSet, build_distance_matrix
from .tracker import BestTour

logger = logging.getLogger(__name__)


# =================================================================================
# RUN STATE & RESULTS
# =================================================================================

@dataclass(frozen=True, eq=False)
class ColonyState:
    '''
    Everything one iteration reads: distance, pheromone, ants and best tour.

    Steps take a state and return a new one; the matrices of a state handed
    to run_iteration are never written to.
    '''
    distance: np.ndarray
    pheromone: np.ndarray
    ants: tuple[Ant, ...]
    best: BestTour = BestTour()

    @property
    def n(self) -> int:
        return self.distance.shape[0]

    @classmethod
    def build(cls, nodes: Sequence[GraphNode] | NodeSet, config: ACOConfig,
              rng: np.random.Generator) -> ColonyState:
        '''Distance, pheromone, ants and best tour for the given nodes, all rebuilt together.'''
        nodes = list(nodes)
        if not nodes:
            raise InvalidStateError("no nodes to run on")
        distance = build_distance_matrix(nodes)
        n = len(nodes)
        return cls(distance=distance,
                   pheromone=field_ops.initialize(n, config.tau0),
                   ants=tuple(initialize_ants(n, config.ant_factor, rng)))

    def check(self) -> None:
        '''Raises InvalidStateError if the matrices are missing or do not match.'''
        if self.distance.ndim != 2 or self.distance.shape[0] != self.distance.shape[1]:
            raise InvalidStateError(f"distance matrix is not square: {self.distance.shape}")
        if self.n == 0:
            raise InvalidStateError("distance matrix is empty")
        if self.pheromone.shape != self.distance.shape:
            raise InvalidStateError(
                f"pheromone {self.pheromone.shape} does not match distance {self.distance.shape}")
        if not self.ants:
            raise InvalidStateError("ants have not been initialized")
        if any(not 1 <= city <= self.n for ant in self.ants for city in ant.path):
            raise InvalidStateError("ants refer to cities outside the current node set")


@dataclass
class IterationRecord:
    iteration: int
    best_length: float
    iteration_best_length: float
    tour_lengths: list[float]
    skipped: int = 0
    pheromone: np.ndarray | None = None


@dataclass
class RunResult:
    '''
    Outcome of one run.

    Attributes:
        best: shortest complete tour found (cities are 1-based positions)
        ants: ants as they stood after the last iteration
        history: one record per finished iteration
        iterations: number of finished iterations
        cancelled: the run stopped early on request
    '''
    best: BestTour = field(default_factory=BestTour)
    ants: tuple[Ant, ...] = ()
    history: list[IterationRecord] = field(default_factory=list)
    iterations: int = 0
    cancelled: bool = False

    @property
    def best_order(self) -> list[int]:
        return list(self.best.order)

    @property
    def best_length(self) -> float:
        return self.best.length


# =================================================================================
# SIMULATION LOOP
# =================================================================================

def construct_tours(state: ColonyState, config: ACOConfig, rng: np.random.Generator) -> list[Ant]:
    '''Phase 1: every ant restarts on a random city and builds one full tour.'''
    ants = initialize_ants(state.n, config.ant_factor, rng)
    return [build_tour(ant, state.pheromone, state.distance, config.alpha, config.beta, rng)
            for ant in ants]


def run_iteration(state: ColonyState, config: ACOConfig, rng: np.random.Generator,
                  iteration: int = 0, *, keep_pheromone: bool = False) -> tuple[ColonyState, IterationRecord]:
    '''
    One full iteration: tour construction, then evaporation + deposit and
    best-tour bookkeeping. Returns the next state and a record of the iteration.
    '''
    ants = construct_tours(state, config, rng)
    return update(state, ants, config, iteration, keep_pheromone=keep_pheromone)


def update(state: ColonyState, ants: Sequence[Ant], config: ACOConfig, iteration: int = 0,
           *, keep_pheromone: bool = False) -> tuple[ColonyState, IterationRecord]:
    '''
    Phase 2 for a finished set of ants. Malformed ants are logged and left
    out of both the deposit and the best-tour comparison; the rest of the
    colony carries on.
    '''
    valid: list[Ant] = []
    skipped = 0
    for ant in ants:
        try:
            validate_tour(ant, state.distance)
            field_ops.check_depositable(ant.path, ant.path_length, state.n, ant.id)
        except DataCorruptionError as exc:
            skipped += 1
            logger.warning("Iteration %d: skipping ant: %s", iteration, exc)
            continue
        valid.append(ant)

    # Pheromone update: evaporation on every cell, then deposit
    tau = field_ops.evaporate(state.pheromone.copy(), config.rho)
    field_ops.deposit(tau, valid, config.q)

    best = state.best
    for ant in valid:
        best = best.consider(ant.path, ant.path_length)

    # Elitist deposit on the best-so-far tour
    if config.elite_weight > 0 and best.found and best.length > 0:
        field_ops.add_on_tour(tau, best.order, config.elite_weight * config.q / best.length)

    lengths = [ant.path_length for ant in valid]
    record = IterationRecord(
        iteration=iteration,
        best_length=best.length,
        iteration_best_length=min(lengths) if lengths else float("inf"),
        tour_lengths=lengths,
        skipped=skipped,
        pheromone=tau.copy() if keep_pheromone else None,
    )
    return ColonyState(state.distance, tau, tuple(ants), best), record


def run_state(state: ColonyState, config: ACOConfig, rng: np.random.Generator, *,
              cancel: threading.Event | None = None,
              on_iteration: Callable[[IterationRecord, ColonyState], None] | None = None,
              keep_pheromone_history: bool = False) -> RunResult:
    '''Runs config.n_iterations iterations from `state`. Raises InvalidStateError on a bad state.'''
    state.check()
    history: list[IterationRecord] = []
    cancelled = False

    for it in range(1, config.n_iterations + 1):
        if cancel is not None and cancel.is_set():
            logger.info("Run cancelled before iteration %d", it)
            cancelled = True
            break

        state, record = run_iteration(state, config, rng, it, keep_pheromone=keep_pheromone_history)
        history.append(record)
        logger.debug("Iteration %d: iteration best %.4f, best %.4f, skipped %d",
                     it, record.iteration_best_length, record.best_length, record.skipped)
        if on_iteration is not None:
            on_iteration(record, state)

        if it % REPORT_EVERY == 0:
            logger.info("[Iteration %d/%d] Current Best Length: %.4f", it, config.n_iterations, state.best.length)

    return RunResult(best=state.best, ants=state.ants, history=history,
                     iterations=len(history), cancelled=cancelled)


def run_simulation(nodes: Sequence[GraphNode] | NodeSet, config: ACOConfig | None = None, *,
                   rng: np.random.Generator | None = None,
                   cancel: threading.Event | None = None,
                   on_iteration: Callable[[IterationRecord, ColonyState], None] | None = None,
                   keep_pheromone_history: bool = False) -> RunResult:
    '''
    Builds a fresh state for `nodes` and runs the colony on it.

    An invalid configuration raises ConfigError before anything runs. With
    no nodes the run is skipped: a warning is logged and the result holds
    an empty best tour.
    '''
    config = (config or ACOConfig()).validate()
    rng = rng if rng is not None else np.random.default_rng(config.seed)
    try:
        state = ColonyState.build(nodes, config, rng)
        return run_state(state, config, rng, cancel=cancel, on_iteration=on_iteration,
                         keep_pheromone_history=keep_pheromone_history)
    except InvalidStateError as exc:
        logger.warning("Simulation skipped: %s", exc)
        return RunResult()


# =================================================================================
# SESSION
# =================================================================================

class Colony:
    '''
    A colony bound to a NodeSet.

    prepare() rebuilds the matrices, ants and best tour for the node set's
    current version. Every run() starts with a prepare(), so a run never
    sees stale matrices and never inherits an earlier run's trails. Runs can
    be pushed to a worker thread with start_background() or submit() and
    stopped between iterations with cancel(). Runs are single-flight: a
    run() or submit() while another run is pending raises RuntimeError.
    Used as a context manager, the colony cancels and joins its worker on exit.
    '''

    def __init__(self, nodes: NodeSet | None = None, config: ACOConfig | None = None) -> None:
        self.nodes = nodes if nodes is not None else NodeSet()
        self.config = (config or ACOConfig()).validate()
        self.rng = np.random.default_rng(self.config.seed)
        self.state: ColonyState | None = None
        self.result: RunResult | None = None
        self._prepared_version: int | None = None
        self._cancel = threading.Event()
        self._lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._future: Future | None = None
        self._active = False

    @property
    def is_stale(self) -> bool:
        return self.state is None or self._prepared_version != self.nodes.version

    def configure(self, **changes) -> ACOConfig:
        '''Replaces config fields; invalid values raise ConfigError and leave the old config in place.'''
        self.config = self.config.replace(**changes)
        if "seed" in changes:
            self.rng = np.random.default_rng(self.config.seed)
        return self.config

    def prepare(self) -> ColonyState:
        with self._lock:
            self.state = None
            self.result = None
            version = self.nodes.version
            self.state = ColonyState.build(self.nodes, self.config, self.rng)
            self._prepared_version = version
            return self.state

    def run(self, *, on_iteration: Callable[[IterationRecord, ColonyState], None] | None = None,
            keep_pheromone_history: bool = False) -> RunResult:
        '''
        Runs the colony on the current nodes. With no nodes this is a no-op
        that logs a warning and returns an empty result.
        '''
        self._claim(foreground=True)
        self._cancel.clear()
        try:
            return self._run(on_iteration=on_iteration, keep_pheromone_history=keep_pheromone_history)
        finally:
            self._active = False

    def _run(self, *, on_iteration: Callable[[IterationRecord, ColonyState], None] | None = None,
             keep_pheromone_history: bool = False) -> RunResult:
        try:
            # every run starts from a fresh pheromone field, ants and best tour
            state = self.prepare()
            version = self._prepared_version

            def observe(record: IterationRecord, new_state: ColonyState) -> None:
                with self._lock:
                    self.state = new_state
                if on_iteration is not None:
                    on_iteration(record, new_state)

            result = run_state(state, self.config, self.rng, cancel=self._cancel,
                               on_iteration=observe, keep_pheromone_history=keep_pheromone_history)
        except InvalidStateError as exc:
            logger.warning("Simulation skipped: %s", exc)
            result = RunResult()
            version = self.nodes.version

        with self._lock:
            if version != self.nodes.version:
                logger.warning("Node set changed during the run; result refers to the previous nodes")
            self.result = result
        return result

    def best(self) -> BestTour:
        '''Best tour of the last run, or an empty one if the nodes changed since.'''
        if self.result is None or self.is_stale:
            return BestTour()
        return self.result.best

    def snapshot(self) -> list[Ant]:
        '''Current ants, for live display.'''
        with self._lock:
            return list(self.state.ants) if self.state is not None else []

    # ---- Background execution ----------------------------------------------------
    @property
    def running(self) -> bool:
        return self._active or (self._future is not None and not self._future.done())

    def _claim(self, foreground: bool = False) -> None:
        # one run at a time: runs share self.rng and the cancel flag
        with self._lock:
            if self.running:
                raise RuntimeError("a colony run is already in progress")
            self._active = foreground

    def cancel(self) -> None:
        '''Asks a running simulation to stop at the next iteration boundary.'''
        self._cancel.set()

    def submit(self, executor: Executor, **kwargs) -> Future:
        self._claim()
        # cleared before the worker starts so an immediate cancel() still applies
        self._cancel.clear()
        self._future = executor.submit(self._run, **kwargs)
        return self._future

    def start_background(self, **kwargs) -> Future:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="colony")
        return self.submit(self._executor, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

    def __enter__(self) -> Colony:
        return self

    def __exit__(self, *exc_info) -> None:
        if self.running:
            self.cancel()
        self.shutdown(wait=True)
