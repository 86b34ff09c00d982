"""Unit tests for SplinePath and QuinticPath."""

import numpy as np
import pytest

from pathsampler.path import QuinticPath, SplinePath


class TestSplinePath:
    def test_passes_through_waypoints(self):
        times = [0.0, 1.0, 2.0]
        positions = [[0.0, 1.0], [1.0, 0.0], [0.5, 0.5]]
        path = SplinePath(times, positions)

        for t, q in zip(times, positions):
            value, ok = path.eval(t)
            assert ok
            assert np.allclose(value, q)

    def test_clamped_ends_have_zero_velocity(self):
        path = SplinePath([0.0, 1.0, 2.0], [[0.0], [1.0], [0.0]])
        assert np.allclose(path.derivative(0.0, 1), 0.0)
        assert np.allclose(path.derivative(2.0, 1), 0.0)

    def test_outside_range_fails(self):
        path = SplinePath([0.0, 1.0], [[0.0], [1.0]])
        value, ok = path.eval(1.5)
        assert not ok
        assert value.shape == (1,)

    def test_from_samples(self):
        path = SplinePath.from_samples([[0.0], [1.0], [2.0]], duration=4.0, start_time=1.0)
        assert path.time_range == (1.0, 5.0)
        assert path.length == pytest.approx(4.0)
        assert path.output_size == 1

    def test_invalid_knots(self):
        with pytest.raises(ValueError):
            SplinePath([0.0, 0.0], [[0.0], [1.0]])
        with pytest.raises(ValueError):
            SplinePath([0.0, 1.0, 2.0], [[0.0], [1.0]])
        with pytest.raises(ValueError):
            SplinePath([0.0], [[0.0]])

    def test_derivative_order_must_be_positive(self):
        path = SplinePath([0.0, 1.0], [[0.0], [1.0]])
        with pytest.raises(ValueError):
            path.derivative(0.5, 0)


class TestQuinticPath:
    def test_endpoints_and_rest(self):
        start, end = np.zeros(3), np.array([1.0, -2.0, 0.5])
        path = QuinticPath(start, end, duration=2.0, start_time=1.0)

        q0, ok0 = path.eval(1.0)
        q1, ok1 = path.eval(3.0)
        assert ok0 and ok1
        assert np.allclose(q0, start)
        assert np.allclose(q1, end)
        for t in (1.0, 3.0):
            assert np.allclose(path.derivative(t, 1), 0.0)
            assert np.allclose(path.derivative(t, 2), 0.0)

    def test_midpoint_is_halfway(self):
        path = QuinticPath([0.0], [2.0], duration=1.0)
        q, ok = path.eval(0.5)
        assert ok
        assert q[0] == pytest.approx(1.0)
        # Peak velocity of the quintic scaling is 15/8 of the mean
        assert path.derivative(0.5, 1)[0] == pytest.approx(2.0 * 15.0 / 8.0)

    def test_velocity_matches_finite_difference(self):
        path = QuinticPath([0.0, 1.0], [1.0, 3.0], duration=1.5)
        t, h = 0.4, 1e-6
        fd = (path.eval(t + h)[0] - path.eval(t - h)[0]) / (2 * h)
        assert np.allclose(path.derivative(t, 1), fd, atol=1e-5)

    def test_outside_range_fails(self):
        path = QuinticPath([0.0], [1.0], duration=1.0)
        _, ok = path.eval(-0.1)
        assert not ok

    def test_unsupported_order(self):
        path = QuinticPath([0.0], [1.0], duration=1.0)
        with pytest.raises(ValueError):
            path.derivative(0.5, 3)

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            QuinticPath([0.0], [1.0], duration=0.0)
        with pytest.raises(ValueError):
            QuinticPath([0.0], [1.0, 2.0], duration=1.0)
