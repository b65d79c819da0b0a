from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class BestTour:
    '''Shortest complete tour seen so far. Empty: no order, infinite length.'''
    order: tuple[int, ...] = ()
    length: float = math.inf

    @property
    def found(self) -> bool:
        return bool(self.order)

    def consider(self, order: Sequence[int], length: float) -> BestTour:
        '''A new BestTour if `length` is strictly shorter, otherwise self.'''
        if length < self.length:
            return BestTour(tuple(order), float(length))
        return self
