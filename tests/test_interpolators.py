"""
Unit tests for the natural cubic spline used by tabulated ephemerides.
"""

import numpy as np
import pytest
from scipy.interpolate import CubicSpline as ScipyCubicSpline

from interpolators import CubicSpline, create_interpolators


@pytest.fixture
def knots():
    x = np.array([0.0, 0.7, 1.5, 2.0, 3.2, 4.0, 5.5])
    y = np.column_stack([np.sin(x), np.cos(2 * x), x**2])
    return x, y


class TestCubicSpline:
    """Natural cubic spline against scipy's reference implementation."""

    @pytest.mark.parametrize('nu', [0, 1, 2])
    def test_matches_scipy_natural_spline(self, knots, nu):
        x, y = knots
        ours = CubicSpline(x, y)
        reference = ScipyCubicSpline(x, y, bc_type='natural')
        x_new = np.linspace(0.0, 5.5, 57)

        np.testing.assert_allclose(ours(x_new, nu=nu), reference(x_new, nu=nu), rtol=1e-10, atol=1e-10)

    def test_reproduces_knot_values(self, knots):
        x, y = knots
        np.testing.assert_allclose(CubicSpline(x, y)(x), y, atol=1e-14)

    def test_scalar_input_on_one_dimensional_data(self):
        spline = CubicSpline([0.0, 1.0, 2.0], [0.0, 1.0, 0.0])
        value = spline(1.0)

        assert isinstance(value, float)
        assert value == pytest.approx(1.0)

    def test_scalar_input_on_vector_data(self, knots):
        x, y = knots
        assert CubicSpline(x, y)(2.5).shape == (3,)

    def test_two_points_are_linear(self):
        spline = CubicSpline([1.0, 3.0], [2.0, 6.0])
        assert spline(2.0) == pytest.approx(4.0)
        assert spline(2.5, nu=1) == pytest.approx(2.0)

    def test_axis_argument(self, knots):
        x, y = knots
        np.testing.assert_allclose(CubicSpline(x, y.T, axis=1)(x), y, atol=1e-14)

    def test_derivative_spline(self, knots):
        x, y = knots
        spline = CubicSpline(x, y)
        x_new = np.linspace(0.1, 5.4, 20)

        np.testing.assert_allclose(spline.derivative()(x_new), spline(x_new, nu=1), atol=1e-12)
        np.testing.assert_allclose(spline.derivative(2)(x_new), spline(x_new, nu=2), atol=1e-12)


class TestExtrapolation:
    """Behaviour outside the tabulated interval."""

    def test_linear_extrapolation_continues_end_slopes(self, knots):
        x, y = knots
        spline = CubicSpline(x, y, extrapolation_mode='linear')
        slope_start = spline(x[0], nu=1)
        slope_end = spline(x[-1], nu=1)

        np.testing.assert_allclose(spline(x[0] - 0.5), y[0] - 0.5 * slope_start, atol=1e-12)
        np.testing.assert_allclose(spline(x[-1] + 1.0), y[-1] + slope_end, atol=1e-12)
        np.testing.assert_allclose(spline(x[-1] + 1.0, nu=1), slope_end, atol=1e-12)
        np.testing.assert_allclose(spline(x[-1] + 1.0, nu=2), np.zeros(3))

    def test_constant_extrapolation(self, knots):
        x, y = knots
        spline = CubicSpline(x, y, extrapolation_mode='constant')

        np.testing.assert_allclose(spline(np.array([-2.0, 9.0])), y[[0, -1]])
        np.testing.assert_allclose(spline(9.0, nu=1), np.zeros(3))

    def test_extrapolation_disabled_raises(self, knots):
        x, y = knots
        spline = CubicSpline(x, y, allow_extrapolation=False)

        with pytest.raises(ValueError, match='outside range'):
            spline(6.0)


class TestValidation:
    """Invalid spline input."""

    @pytest.mark.parametrize('x, y', [
        ([0.0], [1.0]),
        ([0.0, 1.0, 1.0], [1.0, 2.0, 3.0]),
        ([[0.0, 1.0]], [1.0, 2.0]),
        ([0.0, 1.0, 2.0], [1.0, 2.0]),
    ])
    def test_invalid_knots(self, x, y):
        with pytest.raises(ValueError):
            CubicSpline(x, y)

    def test_unsupported_derivative_order(self, knots):
        x, y = knots
        with pytest.raises(ValueError):
            CubicSpline(x, y)(1.0, nu=3)

    def test_unsupported_boundary_condition(self, knots):
        x, y = knots
        with pytest.raises(ValueError):
            CubicSpline(x, y, bc_type='clamped')


def test_create_interpolators():
    times = np.linspace(0.0, 100.0, 11)
    positions = np.column_stack([times, 2 * times, -times])
    velocities = np.tile([1.0, 2.0, -1.0], (len(times), 1))

    pos_interp, vel_interp = create_interpolators(times, positions, velocities)

    np.testing.assert_allclose(pos_interp(55.0), [55.0, 110.0, -55.0])
    np.testing.assert_allclose(vel_interp(55.0), [1.0, 2.0, -1.0])
