"""
Tests for the command line entry point.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import contextlib
import io
import unittest

from neuroracer import ConfigurationError
from neuroracer.cli import build_config, main, parse_args


class TestCLI(unittest.TestCase):

    def test_overrides_applied(self):
        args = parse_args([
            '--env', 'mountaincar', '--preset', 'quick',
            '--population', '6', '--asexual', '--no-elitism', '--neurons', '5',
            '--dt', '0.1',
        ])
        config = build_config(args)
        self.assertEqual(config.population_size, 6)
        self.assertFalse(config.reproduce_sexually)
        self.assertFalse(config.use_elitism)
        self.assertEqual(config.dt, 0.1)
        self.assertEqual(config.network.n_inputs, 2)
        self.assertEqual(config.network.n_outputs, 1)
        self.assertEqual(config.network.neurons_per_hidden_layer, 5)

    def test_dt_defaults_to_config(self):
        config = build_config(parse_args(['--env', 'mountaincar']))
        self.assertEqual(config.dt, 0.02)

    def test_dry_run_prints_config(self):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            main(['--env', 'pendulum', '--dry-run', '--log-level', 'WARNING'])
        self.assertIn('Pendulum-v1', out.getvalue())
        self.assertIn('Network: 3 -> 2x10 -> 1', out.getvalue())

    def test_invalid_config_exits(self):
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            with self.assertRaises(SystemExit) as ctx:
                main(['--population', '0', '--dry-run', '--log-level', 'WARNING'])
        self.assertEqual(ctx.exception.code, 2)
        self.assertIn('population_size', err.getvalue())

    def test_zero_hidden_layers_exits(self):
        for flags in (['--hidden-layers', '0'], ['--neurons', '0']):
            with self.subTest(flags=flags):
                err = io.StringIO()
                with contextlib.redirect_stderr(err):
                    with self.assertRaises(SystemExit) as ctx:
                        main(['--env', 'mountaincar', '--dry-run', '--log-level', 'WARNING'] + flags)
                self.assertEqual(ctx.exception.code, 2)

    def test_explicit_zero_not_replaced_by_default(self):
        args = parse_args(['--hidden-layers', '0', '--neurons', '0'])
        with self.assertRaises(ConfigurationError):
            build_config(args)


if __name__ == '__main__':
    unittest.main(verbosity=2)
