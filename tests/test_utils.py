"""
Tests for shared helpers.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
import unittest

import torch

from neuroracer.utils import format_time, make_generator, safe_divide, setup_logger


class TestUtils(unittest.TestCase):

    def test_format_time(self):
        self.assertEqual(format_time(42.0), '42.0s')
        self.assertEqual(format_time(90.0), '1.5m')
        self.assertEqual(format_time(7200.0), '2.0h')

    def test_safe_divide(self):
        self.assertEqual(safe_divide(3.0, 2), 1.5)
        self.assertEqual(safe_divide(3.0, 0), 0.0)
        self.assertEqual(safe_divide(3.0, 0, default=-1.0), -1.0)

    def test_make_generator_seeded(self):
        a = torch.rand(3, generator=make_generator(5))
        b = torch.rand(3, generator=make_generator(5))
        self.assertTrue(torch.equal(a, b))

    def test_setup_logger_adds_one_handler(self):
        name = 'neuroracer.test_utils'
        logger = setup_logger(name, 'debug')
        setup_logger(name, 'WARNING')
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.level, logging.WARNING)
        logger.handlers.clear()


if __name__ == '__main__':
    unittest.main(verbosity=2)
