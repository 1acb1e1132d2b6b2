"""
Gymnasium adapter for the ControllableAgent capability.

Lets the generation manager evolve controllers for any continuous-control
gymnasium environment. Telemetry mapping:

- every step counts as one frame
- the step reward accumulates into both total_distance_traveled and
  total_speed_accumulated (so average_speed is the mean reward per step)
- a terminated or truncated episode deactivates the agent
- checkpoints, track limits and next-checkpoint distance stay at 0, since
  gymnasium does not say whether termination means success or failure
"""

import logging
from typing import Any, Callable, Optional, Sequence

import gymnasium as gym
import numpy as np

from .base import ControllableAgent
from .config import NetworkConfig
from .errors import ConfigurationError
from .fitness import Telemetry


logger = logging.getLogger(__name__)


# Short names accepted by the CLI
ENV_NAMES = {
    'mountaincar': 'MountainCarContinuous-v0',
    'pendulum': 'Pendulum-v1',
    'lunarlander': 'LunarLanderContinuous-v3',
}


def get_env_name(name: str) -> str:
    """Get gymnasium environment id from a short name."""
    return ENV_NAMES.get(name, name)


class GymAgent(ControllableAgent):
    """Drive one gymnasium environment with control vectors in [-1, 1]."""

    def __init__(self, env, seed: Optional[int] = None):
        action_space = env.action_space
        if not hasattr(action_space, 'low') or not hasattr(action_space, 'high'):
            raise ConfigurationError(
                f"GymAgent needs a Box action space, got {action_space}"
            )
        self.env = env
        self.seed = seed
        self._low = np.asarray(action_space.low, dtype=np.float32).reshape(-1)
        self._high = np.asarray(action_space.high, dtype=np.float32).reshape(-1)
        self._bounded = bool(np.all(np.isfinite(self._low)) and np.all(np.isfinite(self._high)))
        self._action_shape = action_space.shape

        self._obs = None
        self._active = False
        self._telemetry = Telemetry()

    @property
    def n_inputs(self) -> int:
        return int(np.prod(self.env.observation_space.shape))

    @property
    def n_outputs(self) -> int:
        return int(self._low.size)

    def reset(self, spawn_config: Any = None) -> None:
        seed = spawn_config if spawn_config is not None else self.seed
        obs, _ = self.env.reset(seed=seed)
        self._obs = np.asarray(obs, dtype=np.float32).reshape(-1)
        self._active = True
        self._telemetry = Telemetry()

    def observe(self) -> np.ndarray:
        return self._obs

    def step(self, control: Sequence[float], dt: float) -> None:
        action = self._to_action(control)
        obs, reward, terminated, truncated, _ = self.env.step(action)
        self._obs = np.asarray(obs, dtype=np.float32).reshape(-1)

        t = self._telemetry
        t.frames_elapsed += 1
        t.total_speed_accumulated += float(reward)
        t.total_distance_traveled += float(reward)

        if terminated or truncated:
            self._active = False

    def _to_action(self, control: Sequence[float]) -> np.ndarray:
        c = np.clip(np.asarray(control, dtype=np.float32).reshape(-1), -1.0, 1.0)
        if self._bounded:
            c = self._low + (c + 1.0) * 0.5 * (self._high - self._low)
        return c.reshape(self._action_shape)

    def telemetry(self) -> Telemetry:
        t = self._telemetry
        return Telemetry(
            total_speed_accumulated=t.total_speed_accumulated,
            frames_elapsed=t.frames_elapsed,
            total_distance_traveled=t.total_distance_traveled,
            checkpoints_passed=t.checkpoints_passed,
            track_limit_violations=t.track_limit_violations,
            distance_to_next_checkpoint=t.distance_to_next_checkpoint,
        )

    @property
    def active(self) -> bool:
        return self._active

    def reactivate(self) -> None:
        self._active = True

    def close(self) -> None:
        if hasattr(self.env, 'close'):
            self.env.close()


def make_gym_factory(env_name: str, seed: Optional[int] = None, **make_kwargs) -> Callable[[int], GymAgent]:
    """Agent factory for AgentRegistry that builds one env per pool slot."""
    env_id = get_env_name(env_name)

    def factory(index: int) -> GymAgent:
        logger.debug(f"Creating {env_id} for pool slot {index}")
        return GymAgent(gym.make(env_id, **make_kwargs), seed=seed)

    return factory


def network_config_for(env_name: str, n_hidden_layers: int, neurons_per_hidden_layer: int) -> NetworkConfig:
    """Topology whose input/output widths match the env's spaces."""
    env = gym.make(get_env_name(env_name))
    try:
        probe = GymAgent(env)
        return NetworkConfig(
            n_inputs=probe.n_inputs,
            n_outputs=probe.n_outputs,
            n_hidden_layers=n_hidden_layers,
            neurons_per_hidden_layer=neurons_per_hidden_layer,
        )
    finally:
        env.close()
