"""
Unit tests for the linear fitness function.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import unittest

from neuroracer import FitnessFunction, FitnessWeights, Telemetry


class TestTelemetry(unittest.TestCase):

    def test_average_speed(self):
        t = Telemetry(total_speed_accumulated=50.0, frames_elapsed=10)
        self.assertEqual(t.average_speed, 5.0)

    def test_average_speed_without_frames_is_zero(self):
        t = Telemetry(total_speed_accumulated=50.0, frames_elapsed=0)
        self.assertEqual(t.average_speed, 0.0)


class TestFitnessFunction(unittest.TestCase):

    def setUp(self):
        self.telemetry = Telemetry(
            total_speed_accumulated=120.0,
            frames_elapsed=60,
            total_distance_traveled=35.5,
            checkpoints_passed=3,
            track_limit_violations=1,
            distance_to_next_checkpoint=4.25,
        )

    def test_default_weights(self):
        # 2*10 + 35.5*1 + 3*200 + 1*-1000 + 4.25*-1
        self.assertAlmostEqual(FitnessFunction()(self.telemetry), -348.75)

    def test_custom_weights(self):
        weights = FitnessWeights(
            average_speed=1.0,
            distance_traveled=2.0,
            checkpoints_passed=3.0,
            track_limit_violations=4.0,
            next_checkpoint_distance=5.0,
        )
        expected = 2.0 * 1 + 35.5 * 2 + 3 * 3 + 1 * 4 + 4.25 * 5
        self.assertAlmostEqual(FitnessFunction(weights)(self.telemetry), expected)

    def test_zero_frames_does_not_raise(self):
        fn = FitnessFunction()
        score = fn(Telemetry(total_speed_accumulated=10.0, frames_elapsed=0,
                             checkpoints_passed=1))
        self.assertAlmostEqual(score, 200.0)

    def test_empty_telemetry_scores_zero(self):
        self.assertEqual(FitnessFunction()(Telemetry()), 0.0)

    def test_unbounded(self):
        fn = FitnessFunction(FitnessWeights(track_limit_violations=-1000.0))
        worse = fn(Telemetry(track_limit_violations=1000))
        self.assertLess(worse, -1e5)

    def test_breakdown_sums_to_fitness(self):
        fn = FitnessFunction()
        terms = fn.breakdown(self.telemetry)
        self.assertEqual(set(terms), {
            'average_speed', 'distance_traveled', 'checkpoints_passed',
            'track_limit_violations', 'next_checkpoint_distance',
        })
        self.assertAlmostEqual(sum(terms.values()), fn(self.telemetry))
        self.assertAlmostEqual(terms['track_limit_violations'], -1000.0)


if __name__ == '__main__':
    unittest.main(verbosity=2)
