"""
Exception taxonomy for the neuroevolution core.
"""


class NeuroRacerError(Exception):
    """Base class for all errors raised by neuroracer."""


class ConfigurationError(NeuroRacerError, ValueError):
    """Invalid topology, population size or evolution settings at setup."""


class ShapeMismatch(NeuroRacerError, ValueError):
    """Observation length does not match the network's input width."""

    def __init__(self, expected: int, actual):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Expected observation of length {expected}, got shape {actual}"
        )


class TopologyMismatch(NeuroRacerError, RuntimeError):
    """Crossover or copy between networks of different shape."""
