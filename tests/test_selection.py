"""
Unit tests for roulette-wheel selection.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import unittest

from neuroracer import RouletteWheelSelector, make_generator


class TestRouletteWheel(unittest.TestCase):

    def setUp(self):
        self.selector = RouletteWheelSelector()

    def test_zero_fitness_member_never_chosen(self):
        for seed in range(200):
            with self.subTest(seed=seed):
                picked = self.selector.select(['A', 'B'], [10.0, 0.0], make_generator(seed))
                self.assertEqual(picked, 'A')

    def test_all_zero_returns_first(self):
        generator = make_generator(0)
        for _ in range(50):
            self.assertEqual(self.selector.select(['A', 'B', 'C'], [0.0, 0.0, 0.0], generator), 'A')

    def test_negative_total_returns_first(self):
        generator = make_generator(0)
        for _ in range(50):
            self.assertEqual(self.selector.select(['A', 'B'], [-5.0, -1.0], generator), 'A')

    def test_proportional(self):
        generator = make_generator(123)
        n = 8000
        picks = [self.selector.select(['A', 'B'], [5.0, 3.0], generator) for _ in range(n)]
        share = picks.count('A') / n
        self.assertAlmostEqual(share, 5.0 / 8.0, delta=0.03)

    def test_unsorted_pool(self):
        generator = make_generator(5)
        picks = [self.selector.select(['A', 'B', 'C'], [1.0, 0.0, 3.0], generator)
                 for _ in range(4000)]
        self.assertNotIn('B', picks)
        self.assertAlmostEqual(picks.count('C') / len(picks), 0.75, delta=0.03)

    def test_reproducible(self):
        a = [self.selector.select(list('ABCD'), [4, 3, 2, 1], g)
             for g in [make_generator(9)] for _ in range(100)]
        b = [self.selector.select(list('ABCD'), [4, 3, 2, 1], g)
             for g in [make_generator(9)] for _ in range(100)]
        self.assertEqual(a, b)

    def test_select_parents_allows_repeats(self):
        parents = self.selector.select_parents(['A', 'B'], [1.0, 0.0], 5, make_generator(0))
        self.assertEqual(parents, ['A'] * 5)

    def test_length_mismatch(self):
        with self.assertRaises(ValueError):
            self.selector.select(['A', 'B'], [1.0], make_generator(0))

    def test_empty_pool(self):
        with self.assertRaises(ValueError):
            self.selector.select([], [], make_generator(0))


if __name__ == '__main__':
    unittest.main(verbosity=2)
