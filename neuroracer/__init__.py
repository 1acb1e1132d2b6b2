"""
neuroracer: neuroevolution of feedforward driving controllers

A generational genetic algorithm that scores a population of controller
networks with a weighted fitness over driving telemetry, keeps the elite,
and breeds the next generation by roulette selection, crossover and mutation.
"""

__version__ = "0.1.0"

from .errors import NeuroRacerError, ConfigurationError, ShapeMismatch, TopologyMismatch
from .config import (
    EvolutionConfig, NetworkConfig, FitnessWeights,
    DEFAULT_FITNESS_WEIGHTS, PRESETS, get_preset,
)
from .network import FeedForwardNetwork
from .fitness import Telemetry, FitnessFunction
from .base import ControllableAgent, Environment, SelectionStrategy
from .selection import RouletteWheelSelector
from .environment import AgentRegistry
from .engine import (
    GenerationManager, GenerationPhase, GenerationState, GenerationSummary, Genome,
)
from .utils import setup_logger, make_generator, format_time

__all__ = [
    # Errors
    'NeuroRacerError', 'ConfigurationError', 'ShapeMismatch', 'TopologyMismatch',
    # Configuration
    'EvolutionConfig', 'NetworkConfig', 'FitnessWeights',
    'DEFAULT_FITNESS_WEIGHTS', 'PRESETS', 'get_preset',
    # Core components
    'FeedForwardNetwork',
    'Telemetry', 'FitnessFunction',
    'RouletteWheelSelector',
    'GenerationManager', 'GenerationPhase', 'GenerationState', 'GenerationSummary', 'Genome',
    # Environment interfaces
    'ControllableAgent', 'Environment', 'SelectionStrategy', 'AgentRegistry',
    # Utilities
    'setup_logger', 'make_generator', 'format_time',
]
