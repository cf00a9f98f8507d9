import logging
import unittest

import numpy as np

from rikcore.kinematics import ee_pose, forward_kinematics
from rikcore.resolver import IKResolver, ResolverParams, TickState

L = 60.0


class TestResolverParams(unittest.TestCase):
    def test_defaults(self):
        p = ResolverParams()
        self.assertEqual(p.link_length, 60.0)
        self.assertEqual(p.damping, 10.0)
        self.assertEqual(p.orientation_gain, 2.0)
        self.assertEqual(p.period, 0.01)
        np.testing.assert_allclose(p.gain, np.eye(2))

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            ResolverParams(link_length=0.0)
        with self.assertRaises(ValueError):
            ResolverParams(damping=-1.0)
        with self.assertRaises(ValueError):
            ResolverParams(period=0.0)

    def test_non_finite_values(self):
        for kwargs in ({"link_length": float("nan")}, {"damping": float("nan")},
                       {"period": float("nan")}, {"orientation_gain": float("inf")},
                       {"gain": [[1.0, 0.0], [0.0, float("nan")]]}):
            with self.assertRaises(ValueError):
                ResolverParams(**kwargs)

    def test_scalar_gain(self):
        np.testing.assert_allclose(ResolverParams(gain=0.5).gain, 0.5 * np.eye(2))


class TestResolve(unittest.TestCase):
    def setUp(self):
        self.resolver = IKResolver(ResolverParams(link_length=L))

    def test_zero_error_gives_zero_command(self):
        q = np.array([0.4, -0.3, 0.8])
        pose = ee_pose(q, L)
        out = self.resolver.resolve(q, [pose.x, pose.y, pose.phi])
        np.testing.assert_allclose(out.v_primary, np.zeros(3), atol=1e-12)
        np.testing.assert_allclose(out.command, np.zeros(3), atol=1e-12)
        self.assertEqual(out.orientation_error, 0.0)

    def test_end_to_end_scenario(self):
        q = np.zeros(3)
        target = [170.0, 10.0, 0.1]
        out = self.resolver.resolve(q, target)
        np.testing.assert_allclose(out.position_error, [-10.0, 10.0], atol=1e-10)
        self.assertAlmostEqual(out.orientation_error, 0.1)
        self.assertGreater(np.linalg.norm(out.command), 0.0)
        self.assertTrue(np.all(np.isfinite(out.command)))
        # amortiguado: ||v1|| <= ||e|| / (2k)
        self.assertLessEqual(np.linalg.norm(out.v_primary), np.linalg.norm([-10.0, 10.0]) / 20.0 + 1e-12)

        q_next = self.resolver.step(q, target, dt=0.01)
        before = np.linalg.norm(np.asarray(target[:2]) - forward_kinematics(q, L))
        after = np.linalg.norm(np.asarray(target[:2]) - forward_kinematics(q_next, L))
        self.assertLess(after, before)

    def test_command_is_sum_of_parts(self):
        out = self.resolver.resolve([0.3, 0.2, -0.4], [100.0, 50.0, 1.0])
        np.testing.assert_allclose(out.command, out.v_primary + out.v_secondary)
        np.testing.assert_allclose(out.v_secondary, out.null_space @ (2.0 * out.orientation_error * np.ones(3)))

    def test_orientation_only_error_uses_null_space(self):
        q = np.array([0.3, 0.9, -0.5])
        pose = ee_pose(q, L)
        out = self.resolver.resolve(q, [pose.x, pose.y, pose.phi + 0.2])
        np.testing.assert_allclose(out.v_primary, np.zeros(3), atol=1e-12)
        self.assertGreater(np.linalg.norm(out.v_secondary), 0.0)
        # la orientación neta avanza hacia el objetivo
        self.assertGreater(out.command.sum(), 0.0)

    def test_reported_null_space_is_the_one_applied(self):
        out = self.resolver.resolve([0.3, 0.2, -0.4], [100.0, 50.0, 1.0])
        q0_dot = 2.0 * out.orientation_error * np.ones(3)
        np.testing.assert_array_equal(out.v_secondary, out.null_space @ q0_dot)

    def test_deterministic(self):
        a = self.resolver.command([0.1, 0.2, 0.3], [120.0, 40.0, 0.5])
        b = self.resolver.command([0.1, 0.2, 0.3], [120.0, 40.0, 0.5])
        np.testing.assert_array_equal(a, b)

    def test_malformed_inputs(self):
        with self.assertRaises(ValueError):
            self.resolver.resolve([0.0, 0.0], [1.0, 2.0, 3.0])
        with self.assertRaises(ValueError):
            self.resolver.resolve([0.0, 0.0, 0.0], [1.0, 2.0])

    def test_logs_null_space_at_debug(self):
        with self.assertLogs("rikcore.resolver", level=logging.DEBUG) as cm:
            self.resolver.resolve([0.1, 0.2, 0.3], [120.0, 40.0, 0.5])
        self.assertTrue(any("N:" in line for line in cm.output))


class TestTick(unittest.TestCase):
    def setUp(self):
        self.resolver = IKResolver()

    def test_initial_state_is_zero(self):
        s = TickState()
        np.testing.assert_array_equal(s.joints, np.zeros(3))
        np.testing.assert_array_equal(s.target, np.zeros(3))

    def test_missing_snapshot_keeps_previous(self):
        s = TickState().update(joints=[0.1, 0.2, 0.3], target=[150.0, 20.0, 0.4])
        s2 = s.update()
        np.testing.assert_array_equal(s2.joints, [0.1, 0.2, 0.3])
        np.testing.assert_array_equal(s2.target, [150.0, 20.0, 0.4])
        s3 = s2.update(target=[100.0, 0.0, 0.0])
        np.testing.assert_array_equal(s3.joints, [0.1, 0.2, 0.3])
        np.testing.assert_array_equal(s3.target, [100.0, 0.0, 0.0])

    def test_held_snapshot_does_not_alias_input(self):
        buf = np.array([150.0, 20.0, 0.4])
        joints = np.array([0.1, 0.2, 0.3])
        s = TickState().update(joints=joints, target=buf)
        buf[:] = 0.0
        joints[:] = 9.0
        np.testing.assert_array_equal(s.update().target, [150.0, 20.0, 0.4])
        np.testing.assert_array_equal(s.update().joints, [0.1, 0.2, 0.3])

    def test_update_does_not_mutate(self):
        s = TickState()
        s.update(joints=[1.0, 1.0, 1.0])
        np.testing.assert_array_equal(s.joints, np.zeros(3))

    def test_tick_publishes_every_time(self):
        s, out1 = self.resolver.tick(TickState(), joints=[0.0, 0.0, 0.0], target=[170.0, 10.0, 0.1])
        s, out2 = self.resolver.tick(s)
        np.testing.assert_array_equal(out1.command, out2.command)

    def test_bad_snapshot_rejected(self):
        with self.assertRaises(ValueError):
            TickState().update(target=[1.0, 2.0])


if __name__ == "__main__":
    unittest.main()
