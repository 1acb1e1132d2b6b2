"""
Tests for the handle-based agent registry.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import unittest

from neuroracer import AgentRegistry, ControllableAgent, Telemetry


class CountingAgent(ControllableAgent):

    def __init__(self, index):
        self.index = index
        self.spawn_configs = []
        self.steps = []
        self.closed = False
        self._active = False
        self._distance = 0.0

    def reset(self, spawn_config=None):
        self.spawn_configs.append(spawn_config)
        self._active = True
        self._distance = 0.0

    def observe(self):
        return [float(self.index)]

    def step(self, control, dt):
        self.steps.append((list(control), dt))
        self._distance += dt

    def telemetry(self):
        return Telemetry(total_distance_traveled=self._distance, frames_elapsed=len(self.steps))

    @property
    def active(self):
        return self._active

    def reactivate(self):
        self._active = True

    def close(self):
        self.closed = True


class TestAgentRegistry(unittest.TestCase):

    def setUp(self):
        self.built = []

        def factory(index):
            agent = CountingAgent(index)
            self.built.append(agent)
            return agent

        self.registry = AgentRegistry(factory)

    def test_spawn_issues_unique_handles(self):
        handles = self.registry.spawn(3, spawn_config='start')
        self.assertEqual(len(set(handles)), 3)
        self.assertEqual(len(self.built), 3)
        self.assertTrue(all(a.spawn_configs == ['start'] for a in self.built))
        self.assertEqual([self.registry.observe(h) for h in handles], [[0.0], [1.0], [2.0]])

    def test_agents_reused_after_release(self):
        first = self.registry.spawn(3)
        self.registry.release(first)
        second = self.registry.spawn(3)
        self.assertEqual(self.registry.pool_size, 3)
        self.assertTrue(set(first).isdisjoint(second))
        self.assertTrue(all(len(a.spawn_configs) == 2 for a in self.built))

    def test_pool_grows_when_needed(self):
        self.registry.spawn(2)
        self.registry.spawn(2)
        self.assertEqual(self.registry.pool_size, 4)
        self.assertEqual(len(self.registry.live_handles), 4)

    def test_released_handle_rejected(self):
        handles = self.registry.spawn(1)
        self.registry.release(handles)
        with self.assertRaises(KeyError):
            self.registry.observe(handles[0])
        with self.assertRaises(KeyError):
            self.registry.apply_control(handles[0], [0.0])

    def test_advance_steps_agents_with_controls(self):
        a, b, c = self.registry.spawn(3)
        self.registry.apply_control(a, [0.5, -0.5])
        self.registry.apply_control(c, [1.0, 1.0])
        self.registry.advance(0.1)
        self.assertEqual(self.built[0].steps, [([0.5, -0.5], 0.1)])
        self.assertEqual(self.built[1].steps, [])
        self.assertEqual(len(self.built[2].steps), 1)

        # Controls are consumed by advance
        self.registry.advance(0.1)
        self.assertEqual(len(self.built[0].steps), 1)

    def test_inactive_agents_not_stepped(self):
        (h,) = self.registry.spawn(1)
        self.built[0]._active = False
        self.assertFalse(self.registry.is_active(h))
        self.registry.apply_control(h, [0.0])
        self.registry.advance(0.1)
        self.assertEqual(self.built[0].steps, [])

    def test_reactivate_and_telemetry(self):
        (h,) = self.registry.spawn(1)
        self.registry.apply_control(h, [0.0])
        self.registry.advance(0.5)
        self.built[0]._active = False
        self.registry.reactivate(h)
        self.assertTrue(self.registry.is_active(h))
        t = self.registry.telemetry(h)
        self.assertEqual(t.total_distance_traveled, 0.5)
        self.assertEqual(t.frames_elapsed, 1)

    def test_close(self):
        self.registry.spawn(2)
        self.registry.close()
        self.assertTrue(all(a.closed for a in self.built))
        self.assertEqual(self.registry.pool_size, 0)
        self.assertEqual(self.registry.live_handles, [])


if __name__ == '__main__':
    unittest.main(verbosity=2)
