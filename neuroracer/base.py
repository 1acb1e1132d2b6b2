"""
Base abstractions for the neuroevolution system.

The core never touches simulation objects directly. It talks to an
Environment through integer handles, and environments are built from
ControllableAgents, the single capability shared by every way of driving
a car (genetic loop, scripted evaluation, RL-style stepping).
"""

from abc import ABC, abstractmethod
from typing import Any, List, Sequence

import torch

from .fitness import Telemetry


class ControllableAgent(ABC):
    """Something that observes, accepts a control vector and reports telemetry."""

    @abstractmethod
    def reset(self, spawn_config: Any = None) -> None:
        """Return to the spawn configuration and clear telemetry."""
        pass

    @abstractmethod
    def observe(self) -> Sequence[float]:
        """Current observation vector (sensor readings plus velocity)."""
        pass

    @abstractmethod
    def step(self, control: Sequence[float], dt: float) -> None:
        """Apply a control vector and advance by dt."""
        pass

    @abstractmethod
    def telemetry(self) -> Telemetry:
        """Counters accumulated since the last reset."""
        pass

    @property
    @abstractmethod
    def active(self) -> bool:
        """False once the agent has been deactivated (crashed, episode over)."""
        pass

    @abstractmethod
    def reactivate(self) -> None:
        """Mark the agent active again so its final state can be read."""
        pass

    def close(self) -> None:
        """Release any resources held by the agent."""
        pass


class Environment(ABC):
    """Handle-based view of the simulation used by the generation manager."""

    @abstractmethod
    def spawn(self, count: int, spawn_config: Any = None) -> List[int]:
        """
        Instantiate or reset `count` agents at a shared spawn configuration.

        Returns:
            One handle per agent, in spawn order
        """
        pass

    @abstractmethod
    def is_active(self, handle: int) -> bool:
        pass

    @abstractmethod
    def observe(self, handle: int) -> Sequence[float]:
        pass

    @abstractmethod
    def apply_control(self, handle: int, control: Sequence[float]) -> None:
        """Queue a control vector for the next advance()."""
        pass

    @abstractmethod
    def advance(self, dt: float) -> None:
        """Advance the simulation by one tick."""
        pass

    @abstractmethod
    def reactivate(self, handle: int) -> None:
        pass

    @abstractmethod
    def telemetry(self, handle: int) -> Telemetry:
        pass

    @abstractmethod
    def release(self, handles: Sequence[int]) -> None:
        """Tear down the agents behind these handles."""
        pass

    def close(self) -> None:
        pass


class SelectionStrategy(ABC):
    """Abstract interface for parent selection in evolution."""

    @abstractmethod
    def select(
        self,
        pool: Sequence[Any],
        fitnesses: Sequence[float],
        generator: torch.Generator,
    ) -> Any:
        """
        Select one parent from the pool.

        Args:
            pool: Candidate parents
            fitnesses: Fitness of each candidate, parallel to pool
            generator: Random context for the draw

        Returns:
            The selected parent
        """
        pass

    def select_parents(
        self,
        pool: Sequence[Any],
        fitnesses: Sequence[float],
        n_parents: int,
        generator: torch.Generator,
    ) -> List[Any]:
        """Draw `n_parents` independently (repeats allowed)."""
        return [self.select(pool, fitnesses, generator) for _ in range(n_parents)]
