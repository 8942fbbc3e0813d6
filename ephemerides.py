"""
State functions of bodies: callables mapping an epoch (seconds since J2000
TDB) to a Cartesian state [x, y, z, vx, vy, vz] in a common inertial frame.

These are the link-end providers handed to LightTimeCalculator. They are
analytic or interpolated; nothing here reads ephemeris files.
"""
import logging
from typing import Callable, Optional

import numpy as np
from scipy.optimize import newton

from interpolators import create_interpolators

logger = logging.getLogger('ephemerides')


class ConstantEphemeris:
    """Body at rest."""

    def __init__(self, state):
        state = np.asarray(state, dtype=float)
        if state.shape != (6,):
            raise ValueError(f"State must have 6 components, got shape {state.shape}")
        self.state = state

    def __call__(self, epoch: float) -> np.ndarray:
        return self.state.copy()


class LinearMotionEphemeris:
    """Body in uniform rectilinear motion through ``state`` at ``reference_epoch``."""

    def __init__(self, state, reference_epoch: float = 0.0):
        state = np.asarray(state, dtype=float)
        if state.shape != (6,):
            raise ValueError(f"State must have 6 components, got shape {state.shape}")
        self.state = state
        self.reference_epoch = float(reference_epoch)

    def __call__(self, epoch: float) -> np.ndarray:
        dt = epoch - self.reference_epoch
        return np.concatenate([self.state[:3] + self.state[3:] * dt, self.state[3:]])


class KeplerEphemeris:
    """
    Two-body elliptic orbit defined by classical elements at a reference epoch.

    Angles in radians; length and gravitational parameter units define the
    units of the returned state. If ``central_body`` is given, its state is
    added so the result is expressed relative to the common origin.
    """

    def __init__(self, semi_major_axis: float, eccentricity: float, inclination: float,
                 raan: float, argument_of_periapsis: float, mean_anomaly_at_epoch: float,
                 reference_epoch: float, gravitational_parameter: float,
                 central_body: Optional[Callable[[float], np.ndarray]] = None):
        if semi_major_axis <= 0:
            raise ValueError(f"Semi-major axis must be positive, got {semi_major_axis}")
        if not 0 <= eccentricity < 1:
            raise ValueError(f"Only elliptic orbits are supported, got eccentricity {eccentricity}")
        if gravitational_parameter <= 0:
            raise ValueError(f"Gravitational parameter must be positive, got {gravitational_parameter}")

        self.a = float(semi_major_axis)
        self.e = float(eccentricity)
        self.mean_anomaly_at_epoch = float(mean_anomaly_at_epoch)
        self.reference_epoch = float(reference_epoch)
        self.mu = float(gravitational_parameter)
        self.central_body = central_body
        self.mean_motion = np.sqrt(self.mu / self.a**3)

        cos_O, sin_O = np.cos(raan), np.sin(raan)
        cos_i, sin_i = np.cos(inclination), np.sin(inclination)
        cos_w, sin_w = np.cos(argument_of_periapsis), np.sin(argument_of_periapsis)

        # Perifocal to inertial, 3-1-3 sequence.
        self.rotation = np.array([
            [cos_O * cos_w - sin_O * sin_w * cos_i, -cos_O * sin_w - sin_O * cos_w * cos_i, sin_O * sin_i],
            [sin_O * cos_w + cos_O * sin_w * cos_i, -sin_O * sin_w + cos_O * cos_w * cos_i, -cos_O * sin_i],
            [sin_w * sin_i, cos_w * sin_i, cos_i],
        ])

    def eccentric_anomaly(self, epoch: float) -> float:
        mean_anomaly = self.mean_anomaly_at_epoch + self.mean_motion * (epoch - self.reference_epoch)
        mean_anomaly = np.mod(mean_anomaly, 2 * np.pi)
        e = self.e
        return newton(
            lambda E: E - e * np.sin(E) - mean_anomaly,
            x0=mean_anomaly if e < 0.8 else np.pi,
            fprime=lambda E: 1 - e * np.cos(E),
            tol=1e-14,
            maxiter=50,
        )

    def __call__(self, epoch: float) -> np.ndarray:
        E = self.eccentric_anomaly(epoch)
        cos_E, sin_E = np.cos(E), np.sin(E)
        root = np.sqrt(1 - self.e**2)

        r = self.a * (1 - self.e * cos_E)
        r_pqw = self.a * np.array([cos_E - self.e, root * sin_E, 0.0])
        v_pqw = np.sqrt(self.mu * self.a) / r * np.array([-sin_E, root * cos_E, 0.0])

        state = np.concatenate([self.rotation @ r_pqw, self.rotation @ v_pqw])
        if self.central_body is not None:
            state = state + np.asarray(self.central_body(epoch), dtype=float)
        return state


class TabulatedEphemeris:
    """Cubic-spline interpolation of tabulated positions and velocities."""

    def __init__(self, times: np.ndarray, positions: np.ndarray, velocities: np.ndarray,
                 allow_extrapolation: bool = False):
        times = np.asarray(times, dtype=float)
        positions = np.asarray(positions, dtype=float)
        velocities = np.asarray(velocities, dtype=float)
        if positions.shape != (len(times), 3) or velocities.shape != (len(times), 3):
            raise ValueError(f"Expected positions and velocities of shape ({len(times)}, 3), "
                             f"got {positions.shape} and {velocities.shape}")

        self.pos_interp, self.vel_interp = create_interpolators(
            times, positions, velocities, allow_extrapolation=allow_extrapolation)
        self.start_epoch = times[0]
        self.end_epoch = times[-1]
        logger.debug(f"Tabulated ephemeris with {len(times)} points "
                     f"over [{self.start_epoch:.3f}, {self.end_epoch:.3f}]")

    @classmethod
    def from_state_function(cls, state_function: Callable[[float], np.ndarray],
                            times: np.ndarray, **kwargs) -> 'TabulatedEphemeris':
        states = np.array([state_function(t) for t in times], dtype=float)
        return cls(times, states[:, :3], states[:, 3:6], **kwargs)

    def __call__(self, epoch: float) -> np.ndarray:
        return np.concatenate([self.pos_interp(epoch), self.vel_interp(epoch)])
