"""
Fitness-proportional (roulette-wheel) parent selection.
"""

import logging
from typing import Any, Sequence

import torch

from .base import SelectionStrategy


logger = logging.getLogger(__name__)


class RouletteWheelSelector(SelectionStrategy):
    """
    Pick a parent with probability proportional to its share of total fitness.

    When the total fitness is not positive, or the running sum never reaches
    the draw because some scores are negative, the first entry of the pool is
    returned. That fallback favours pool order over a uniform choice; callers
    pass the pool sorted by rank, so it returns the best candidate.
    """

    def select(
        self,
        pool: Sequence[Any],
        fitnesses: Sequence[float],
        generator: torch.Generator,
    ) -> Any:
        if len(pool) != len(fitnesses):
            raise ValueError(
                f"pool has {len(pool)} entries but {len(fitnesses)} fitness scores"
            )
        if not pool:
            raise ValueError("cannot select from an empty pool")

        total = float(sum(fitnesses))
        if total <= 0.0:
            logger.debug("Total fitness %.3f <= 0, selecting first parent", total)
            return pool[0]

        draw = torch.rand(1, generator=generator).item() * total
        running = 0.0
        for candidate, fitness in zip(pool, fitnesses):
            running += fitness
            if running >= draw:
                return candidate

        return pool[0]
