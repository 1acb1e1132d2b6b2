"""
Agent registry: the handle-based Environment over ControllableAgents.

Agents are created on demand by a factory and pooled, so later generations
reset existing agents instead of rebuilding them. Every spawn hands out
fresh handles; handles from a released generation are rejected.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from .base import ControllableAgent, Environment
from .fitness import Telemetry


logger = logging.getLogger(__name__)


AgentFactory = Callable[[int], ControllableAgent]


class AgentRegistry(Environment):
    """Environment backed by a pool of ControllableAgents."""

    def __init__(self, agent_factory: AgentFactory):
        """
        Args:
            agent_factory: Called with the pool index to build a new agent
        """
        self.agent_factory = agent_factory
        self._pool: List[ControllableAgent] = []
        self._live: Dict[int, ControllableAgent] = {}
        self._pending: Dict[int, Sequence[float]] = {}
        self._next_handle = 0

    def spawn(self, count: int, spawn_config: Any = None) -> List[int]:
        in_use = {id(agent) for agent in self._live.values()}
        free = [agent for agent in self._pool if id(agent) not in in_use]
        while len(free) < count:
            agent = self.agent_factory(len(self._pool))
            self._pool.append(agent)
            free.append(agent)

        handles = []
        for agent in free[:count]:
            agent.reset(spawn_config)
            handle = self._next_handle
            self._next_handle += 1
            self._live[handle] = agent
            handles.append(handle)

        logger.debug("Spawned %d agents (pool size %d)", count, len(self._pool))
        return handles

    def agent(self, handle: int) -> ControllableAgent:
        try:
            return self._live[handle]
        except KeyError:
            raise KeyError(f"Unknown or released agent handle {handle}") from None

    def is_active(self, handle: int) -> bool:
        return self.agent(handle).active

    def observe(self, handle: int) -> Sequence[float]:
        return self.agent(handle).observe()

    def apply_control(self, handle: int, control: Sequence[float]) -> None:
        self.agent(handle)
        self._pending[handle] = control

    def advance(self, dt: float) -> None:
        pending, self._pending = self._pending, {}
        for handle, control in pending.items():
            agent = self._live.get(handle)
            if agent is not None and agent.active:
                agent.step(control, dt)

    def reactivate(self, handle: int) -> None:
        agent = self.agent(handle)
        if not agent.active:
            agent.reactivate()

    def telemetry(self, handle: int) -> Telemetry:
        return self.agent(handle).telemetry()

    def release(self, handles: Sequence[int]) -> None:
        for handle in handles:
            self._live.pop(handle, None)
            self._pending.pop(handle, None)

    @property
    def live_handles(self) -> List[int]:
        return list(self._live)

    @property
    def pool_size(self) -> int:
        return len(self._pool)

    def close(self) -> None:
        self._live.clear()
        self._pending.clear()
        for agent in self._pool:
            agent.close()
        self._pool.clear()
