from __future__ import annotations

from dataclasses import asdict, dataclass, replace

from .errors import ConfigError

# =================================================================================
# ALGORITHM CONFIGURATION
# =================================================================================

# --- Core ACO Parameters ---
ALPHA = 1.0             # Influence of the pheromone trail (tau^alpha)
BETA = 5.0              # Influence of heuristic information (eta^beta, eta = 1/d)
RHO = 0.5               # Pheromone evaporation rate
Q = 500.0               # Pheromone deposit constant
TAU0 = 1.0              # Initial pheromone level on every edge
ANT_FACTOR = 0.8        # Ants per city
N_ITERATIONS = 100      # Number of algorithm iterations
ELITE_WEIGHT = 0.0      # Extra deposit on the best-so-far tour (0 = plain Ant System)

# --- Reporting ---
REPORT_EVERY = 10       # Progress line every N iterations


@dataclass(frozen=True)
class ACOConfig:
    '''
    Parameters of one colony run.

    Attributes:
        alpha: pheromone exponent
        beta: inverse-distance exponent
        rho: evaporation rate, 0 <= rho < 1
        q: deposit constant
        tau0: initial pheromone on every cell
        ant_factor: ants per city, floor(n * ant_factor), at least 1
        n_iterations: fixed number of iterations
        elite_weight: elitist deposit weight (0 disables it)
        seed: seed for the run's random generator (None = fresh entropy)
    '''
    alpha: float = ALPHA
    beta: float = BETA
    rho: float = RHO
    q: float = Q
    tau0: float = TAU0
    ant_factor: float = ANT_FACTOR
    n_iterations: int = N_ITERATIONS
    elite_weight: float = ELITE_WEIGHT
    seed: int | None = None

    def validate(self) -> ACOConfig:
        '''Raises ConfigError on the first invalid field, returns self otherwise.'''
        if not 0.0 <= self.rho < 1.0:
            raise ConfigError(f"rho must be in [0, 1), got {self.rho}")
        if self.q < 0 or (self.q == 0 and self.rho != 0):
            # q == 0 only makes sense for a frozen field (no evaporation)
            raise ConfigError(f"q must be > 0, got {self.q}")
        if self.n_iterations < 1:
            raise ConfigError(f"n_iterations must be >= 1, got {self.n_iterations}")
        if self.tau0 <= 0:
            raise ConfigError(f"tau0 must be > 0, got {self.tau0}")
        if self.ant_factor <= 0:
            raise ConfigError(f"ant_factor must be > 0, got {self.ant_factor}")
        if self.alpha < 0 or self.beta < 0:
            raise ConfigError(f"alpha and beta must be >= 0, got {self.alpha}, {self.beta}")
        if self.elite_weight < 0:
            raise ConfigError(f"elite_weight must be >= 0, got {self.elite_weight}")
        return self

    def replace(self, **changes) -> ACOConfig:
        return replace(self, **changes).validate()

    def as_dict(self) -> dict:
        return asdict(self)
