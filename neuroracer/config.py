"""
Configuration and constants for the neuroevolution system.
"""

import copy
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigurationError


# ============================================================================
# Observation / control layout
# ============================================================================

# 9 forward rays + 6 rear rays, followed by the velocity (x, y)
NUM_RAYCASTS = 15
NUM_VELOCITY_COMPONENTS = 2
DEFAULT_NUM_INPUTS = NUM_RAYCASTS + NUM_VELOCITY_COMPONENTS

# steering, throttle/brake
DEFAULT_NUM_OUTPUTS = 2


# ============================================================================
# Fitness Weights
# ============================================================================

DEFAULT_FITNESS_WEIGHTS = {
    'average_speed': 10.0,
    'distance_traveled': 1.0,
    'checkpoints_passed': 200.0,
    'track_limit_violations': -1000.0,
    'next_checkpoint_distance': -1.0,
}


@dataclass
class FitnessWeights:
    """Weights of the linear fitness model. Negative values are penalties."""
    average_speed: float = DEFAULT_FITNESS_WEIGHTS['average_speed']
    distance_traveled: float = DEFAULT_FITNESS_WEIGHTS['distance_traveled']
    checkpoints_passed: float = DEFAULT_FITNESS_WEIGHTS['checkpoints_passed']
    track_limit_violations: float = DEFAULT_FITNESS_WEIGHTS['track_limit_violations']
    next_checkpoint_distance: float = DEFAULT_FITNESS_WEIGHTS['next_checkpoint_distance']


@dataclass
class NetworkConfig:
    """Topology of every controller network in a population."""
    n_inputs: int = DEFAULT_NUM_INPUTS
    n_outputs: int = DEFAULT_NUM_OUTPUTS
    n_hidden_layers: int = 2
    neurons_per_hidden_layer: int = 10

    def validate(self) -> None:
        for name in ('n_inputs', 'n_outputs', 'n_hidden_layers', 'neurons_per_hidden_layer'):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")


@dataclass
class EvolutionConfig:
    """Configuration for an evolution run.

    Durations are in simulation seconds; each tick advances the timer by ``dt``.
    """

    # Population
    population_size: int = 10
    n_generations: int = 10
    elite_fraction: float = 0.1

    # Variation
    mutation_rate: float = 0.05
    mutation_strength: float = 0.2
    reproduce_sexually: bool = True
    use_elitism: bool = True

    # Generation timing (exploration curriculum)
    generation_duration: float = 10.0
    generation_duration_increase: float = 0.5
    max_generation_duration: float = 45.0
    dt: float = 0.02

    seed: int = 42

    network: NetworkConfig = field(default_factory=NetworkConfig)
    fitness_weights: FitnessWeights = field(default_factory=FitnessWeights)

    def validate(self) -> None:
        """Raise ConfigurationError if the settings cannot produce a run."""
        if (not isinstance(self.population_size, int) or isinstance(self.population_size, bool)
                or self.population_size <= 0):
            raise ConfigurationError(
                f"population_size must be a positive integer, got {self.population_size!r}"
            )
        if self.n_generations < 0:
            raise ConfigurationError(f"n_generations must be >= 0, got {self.n_generations}")
        if not 0.0 < self.elite_fraction <= 1.0:
            raise ConfigurationError(
                f"elite_fraction must be in (0, 1], got {self.elite_fraction}"
            )
        if self.generation_duration <= 0 or self.max_generation_duration <= 0:
            raise ConfigurationError("generation durations must be positive")
        if self.generation_duration_increase < 0:
            raise ConfigurationError("generation_duration_increase must be >= 0")
        if self.dt <= 0:
            raise ConfigurationError(f"dt must be positive, got {self.dt}")
        self.network.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'EvolutionConfig':
        """Create from dictionary, ignoring unknown keys."""
        d = dict(d)
        network = NetworkConfig(**{
            k: v for k, v in (d.pop('network', None) or {}).items()
            if k in NetworkConfig.__dataclass_fields__
        })
        weights = FitnessWeights(**{
            k: v for k, v in (d.pop('fitness_weights', None) or {}).items()
            if k in FitnessWeights.__dataclass_fields__
        })
        kwargs = {k: v for k, v in d.items() if k in cls.__dataclass_fields__}
        return cls(network=network, fitness_weights=weights, **kwargs)

    @classmethod
    def from_yaml(cls, path: str) -> 'EvolutionConfig':
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: expected a mapping at the top level")
        return cls.from_dict(data)

    def to_yaml(self, path: str):
        """Save configuration to YAML file."""
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    def clone(self) -> 'EvolutionConfig':
        return copy.deepcopy(self)


# ============================================================================
# Presets
# ============================================================================

PRESETS = {
    'default': {},
    'quick': {
        'population_size': 20,
        'n_generations': 5,
        'elite_fraction': 0.2,
        'generation_duration': 5.0,
        'max_generation_duration': 10.0,
    },
    'long': {
        'population_size': 50,
        'n_generations': 200,
        'elite_fraction': 0.1,
        'mutation_rate': 0.03,
        'mutation_strength': 0.15,
        'generation_duration': 10.0,
        'generation_duration_increase': 1.0,
        'max_generation_duration': 90.0,
    },
}


def get_preset(name: str, overrides: Optional[Dict[str, Any]] = None) -> EvolutionConfig:
    """Build a config from a named preset plus optional overrides."""
    if name not in PRESETS:
        raise ConfigurationError(
            f"Unknown preset {name!r}; choose from {sorted(PRESETS)}"
        )
    data = copy.deepcopy(PRESETS[name])
    data.update(overrides or {})
    return EvolutionConfig.from_dict(data)
