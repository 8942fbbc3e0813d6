from typing import Tuple, Union

import numpy as np


class CubicSpline:
    """
    Natural cubic spline through (x, y) with vector-valued ordinates.

    Each interval i stores the coefficients of
    y(x) = a + b*t + c*t**2 + d*t**3 with t = x - x[i].
    Outside [x[0], x[-1]] the spline is extended linearly (slope of the end
    segment) or held constant, or evaluation raises if extrapolation is off.
    """

    def __init__(self, x: np.ndarray, y: np.ndarray, axis: int = 0,
                 bc_type: str = 'natural', allow_extrapolation: bool = True,
                 extrapolation_mode: str = 'linear'):

        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)

        if x.ndim != 1:
            raise ValueError("x must be a one-dimensional array")
        if x.shape[0] < 2:
            raise ValueError("At least 2 points are required for interpolation")
        if not np.all(np.diff(x) > 0):
            raise ValueError("x must be strictly increasing")
        if bc_type.lower() != 'natural':
            raise ValueError(f"Unsupported boundary condition: {bc_type}")
        if extrapolation_mode.lower() not in ('linear', 'constant'):
            raise ValueError(f"Unsupported extrapolation mode: {extrapolation_mode}")

        if axis != 0:
            y = np.moveaxis(y, axis, 0)
        if y.shape[0] != x.shape[0]:
            raise ValueError(f"x and y lengths differ: {x.shape[0]} != {y.shape[0]}")

        self.x = x.copy()
        self.axis = axis
        self.bc_type = bc_type.lower()
        self.allow_extrapolation = allow_extrapolation
        self.extrapolation_mode = extrapolation_mode.lower()

        self.y_shape = y.shape
        self.n_points = len(x)
        self.y_original = y.reshape(self.n_points, -1).copy()
        self.n_components = self.y_original.shape[1]

        self.coeffs = self._compute_coeffs(self.x, self.y_original)

    @staticmethod
    def _compute_coeffs(x: np.ndarray, y: np.ndarray) -> np.ndarray:
        n = len(x)
        h = np.diff(x)
        slopes = np.diff(y, axis=0) / h[:, None]

        coeffs = np.zeros((n - 1, 4, y.shape[1]))
        coeffs[:, 0] = y[:-1]

        if n == 2:
            coeffs[:, 1] = slopes
            return coeffs

        # Second derivatives at the knots, zero at both ends (natural spline).
        lower = h[:-1].copy()
        diag = 2 * (h[:-1] + h[1:])
        upper = h[1:].copy()
        rhs = 6 * (slopes[1:] - slopes[:-1])

        m = np.zeros_like(y)
        m[1:-1] = _solve_tridiagonal(lower, diag, upper, rhs)

        coeffs[:, 1] = slopes - h[:, None] * (2 * m[:-1] + m[1:]) / 6
        coeffs[:, 2] = m[:-1] / 2
        coeffs[:, 3] = (m[1:] - m[:-1]) / (6 * h[:, None])
        return coeffs

    def _end_slopes(self) -> Tuple[np.ndarray, np.ndarray]:
        _, b, c, d = self.coeffs[-1]
        h = self.x[-1] - self.x[-2]
        return self.coeffs[0, 1], b + 2 * c * h + 3 * d * h**2

    def __call__(self, x_new: Union[float, np.ndarray], nu: int = 0) -> Union[float, np.ndarray]:
        if nu not in (0, 1, 2):
            raise ValueError("Only derivatives up to order 2 are supported")

        x_new = np.asarray(x_new, dtype=float)
        scalar_input = x_new.ndim == 0
        x_flat = x_new.reshape(-1)

        below_min = x_flat < self.x[0]
        above_max = x_flat > self.x[-1]

        if not self.allow_extrapolation and (np.any(below_min) or np.any(above_max)):
            outside = x_flat[below_min | above_max]
            raise ValueError(f"Points outside range [{self.x[0]}, {self.x[-1]}]: {outside[:5]}")

        idx = np.clip(np.searchsorted(self.x, x_flat, side='right') - 1, 0, self.n_points - 2)
        t = (x_flat - self.x[idx])[:, None]
        a, b, c, d = (self.coeffs[idx, k] for k in range(4))

        if nu == 0:
            result = a + t * (b + t * (c + t * d))
        elif nu == 1:
            result = b + t * (2 * c + 3 * t * d)
        else:
            result = 2 * c + 6 * d * t

        if np.any(below_min) or np.any(above_max):
            start_slope, end_slope = self._end_slopes()
            for mask, y_end, slope, x_end in ((below_min, self.y_original[0], start_slope, self.x[0]),
                                              (above_max, self.y_original[-1], end_slope, self.x[-1])):
                if not np.any(mask):
                    continue
                if self.extrapolation_mode == 'constant':
                    slope = np.zeros_like(slope)
                dt = (x_flat[mask] - x_end)[:, None]
                if nu == 0:
                    result[mask] = y_end + slope * dt
                elif nu == 1:
                    result[mask] = np.broadcast_to(slope, (dt.shape[0], self.n_components))
                else:
                    result[mask] = 0.0

        component_shape = self.y_shape[1:]
        if scalar_input:
            if not component_shape:
                return result.item()
            return result.reshape(component_shape)
        return result.reshape(x_new.shape + component_shape)

    def derivative(self, nu: int = 1) -> 'CubicSpline':
        """Spline of the nu-th derivative, sharing knots and extrapolation settings."""
        if nu < 0:
            raise ValueError("Derivative order must be non-negative")

        deriv = CubicSpline.__new__(CubicSpline)
        deriv.__dict__.update(self.__dict__)

        coeffs = self.coeffs.copy()
        for _ in range(nu):
            shifted = np.zeros_like(coeffs)
            shifted[:, 0] = coeffs[:, 1]
            shifted[:, 1] = 2 * coeffs[:, 2]
            shifted[:, 2] = 3 * coeffs[:, 3]
            coeffs = shifted
        deriv.coeffs = coeffs

        _, b, c, d = coeffs[-1]
        h = self.x[-1] - self.x[-2]
        last = coeffs[-1, 0] + b * h + c * h**2 + d * h**3
        deriv.y_original = np.vstack([coeffs[:, 0], last])
        return deriv


def _solve_tridiagonal(lower: np.ndarray, diag: np.ndarray, upper: np.ndarray,
                       rhs: np.ndarray) -> np.ndarray:
    """
    Thomas algorithm for a tridiagonal system with one right-hand side per
    column of ``rhs``. ``lower[0]`` and ``upper[-1]`` are ignored.
    """
    n = len(diag)
    cp = np.zeros(n)
    dp = np.zeros_like(rhs)

    cp[0] = upper[0] / diag[0]
    dp[0] = rhs[0] / diag[0]
    for i in range(1, n):
        denom = diag[i] - lower[i] * cp[i - 1]
        cp[i] = upper[i] / denom
        dp[i] = (rhs[i] - lower[i] * dp[i - 1]) / denom

    solution = np.zeros_like(rhs)
    solution[-1] = dp[-1]
    for i in range(n - 2, -1, -1):
        solution[i] = dp[i] - cp[i] * solution[i + 1]
    return solution


def create_interpolators(time_s: np.ndarray, positions: np.ndarray, velocities: np.ndarray,
                         allow_extrapolation: bool = True) -> Tuple[CubicSpline, CubicSpline]:
    pos_interp = CubicSpline(
        time_s, positions, axis=0,
        allow_extrapolation=allow_extrapolation,
        extrapolation_mode='linear'
    )
    vel_interp = CubicSpline(
        time_s, velocities, axis=0,
        allow_extrapolation=allow_extrapolation,
        extrapolation_mode='linear'
    )
    return pos_interp, vel_interp
