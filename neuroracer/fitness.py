"""
Linear fitness model over per-agent driving telemetry.

    fitness = avg_speed * w_speed
            + distance * w_distance
            + checkpoints * w_checkpoints
            + track_limit_hits * w_track_limits
            + next_checkpoint_distance * w_next_checkpoint

Fitness values are unbounded; only their relative order matters.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from .config import FitnessWeights
from .utils import safe_divide


@dataclass
class Telemetry:
    """Performance counters accumulated by the environment during a generation."""
    total_speed_accumulated: float = 0.0
    frames_elapsed: int = 0
    total_distance_traveled: float = 0.0
    checkpoints_passed: int = 0
    track_limit_violations: int = 0
    distance_to_next_checkpoint: float = 0.0

    @property
    def average_speed(self) -> float:
        # No frames yet means no speed rather than a division error
        return safe_divide(self.total_speed_accumulated, self.frames_elapsed)


class FitnessFunction:
    """Weighted linear combination of telemetry fields."""

    def __init__(self, weights: Optional[FitnessWeights] = None):
        self.weights = weights or FitnessWeights()

    def breakdown(self, telemetry: Telemetry) -> Dict[str, float]:
        """Each weighted term of the fitness, keyed by weight name."""
        w = self.weights
        return {
            'average_speed': telemetry.average_speed * w.average_speed,
            'distance_traveled': telemetry.total_distance_traveled * w.distance_traveled,
            'checkpoints_passed': telemetry.checkpoints_passed * w.checkpoints_passed,
            'track_limit_violations': telemetry.track_limit_violations * w.track_limit_violations,
            'next_checkpoint_distance': (
                telemetry.distance_to_next_checkpoint * w.next_checkpoint_distance
            ),
        }

    def __call__(self, telemetry: Telemetry) -> float:
        return float(sum(self.breakdown(telemetry).values()))

    def __repr__(self) -> str:
        return f"FitnessFunction({self.weights})"
