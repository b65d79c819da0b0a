'''Exceptions raised by the colony.'''


class ColonyError(Exception):
    '''Base class for every error raised by aco_tsp.'''


class ConfigError(ColonyError, ValueError):
    '''Invalid run configuration; raised before any work is done.'''


class InvalidStateError(ColonyError):
    '''A run was requested with no nodes or with matrices not built for the current nodes.'''


class NoFeasibleMoveError(ColonyError, AssertionError):
    '''A move was requested for an ant whose tour is already complete.'''


class DataCorruptionError(ColonyError):
    '''An ant's tour breaks an invariant (wrong size, repeated city, bad length).'''

    def __init__(self, message: str, ant_id: int | None = None) -> None:
        super().__init__(message)
        self.ant_id = ant_id
