import logging
from typing import Callable

import numpy as np

from light_time import SPEED_OF_LIGHT, LightTimeCorrectionFunction

logger = logging.getLogger('light_time_corrections')


def time_difference_correction(scale: float = 1e-3) -> LightTimeCorrectionFunction:
    """Correction proportional to the elapsed time between transmission and reception."""
    def correction(transmitter_state, receiver_state, transmission_epoch, reception_epoch):
        return (reception_epoch - transmission_epoch) * scale
    return correction


def position_difference_correction(scale: float = 1e-3,
                                   speed_of_light: float = SPEED_OF_LIGHT) -> LightTimeCorrectionFunction:
    """Correction proportional to the link-end separation, converted to seconds."""
    def correction(transmitter_state, receiver_state, transmission_epoch, reception_epoch):
        separation = np.asarray(receiver_state[:3]) - np.asarray(transmitter_state[:3])
        return np.linalg.norm(separation) * scale / speed_of_light
    return correction


def velocity_difference_correction(scale: float = 1e-3,
                                   speed_of_light: float = SPEED_OF_LIGHT) -> LightTimeCorrectionFunction:
    """Correction proportional to the link-end relative speed, as a fraction of c."""
    def correction(transmitter_state, receiver_state, transmission_epoch, reception_epoch):
        relative_velocity = np.asarray(receiver_state[3:6]) - np.asarray(transmitter_state[3:6])
        return np.linalg.norm(relative_velocity) * scale / speed_of_light
    return correction


class ConstantDelayCorrection:
    """Fixed additive path delay, e.g. a tropospheric plus ionospheric budget."""

    def __init__(self, delay: float):
        self.delay = float(delay)

    def __call__(self, transmitter_state, receiver_state, transmission_epoch, reception_epoch) -> float:
        return self.delay

    def __repr__(self):
        return f"ConstantDelayCorrection(delay={self.delay!r})"


class ShapiroCorrection:
    """
    First-order relativistic (Shapiro) delay caused by one gravitating body.

        dt = (1 + gamma) * GM / c**3 * ln((r1 + r2 + r12) / (r1 + r2 - r12))

    r1 and r2 are the distances of the transmitter and receiver from the body,
    r12 the distance between the link ends. The body position is taken at
    the mid epoch of the leg. Units of ``gravitational_parameter`` and
    ``speed_of_light`` must match the units of the states.
    """

    def __init__(self, body_position_function: Callable[[float], np.ndarray],
                 gravitational_parameter: float, gamma: float = 1.0,
                 speed_of_light: float = SPEED_OF_LIGHT, name: str = 'body'):
        if not callable(body_position_function):
            raise TypeError("Body position function must be callable")
        self.body_position_function = body_position_function
        self.gravitational_parameter = float(gravitational_parameter)
        self.gamma = float(gamma)
        self.speed_of_light = float(speed_of_light)
        self.name = name

    def __call__(self, transmitter_state, receiver_state, transmission_epoch, reception_epoch) -> float:
        t_mid = (transmission_epoch + reception_epoch) / 2
        r_body = np.asarray(self.body_position_function(t_mid), dtype=float)[:3]

        r_emit = np.asarray(transmitter_state[:3], dtype=float)
        r_obs = np.asarray(receiver_state[:3], dtype=float)

        r1 = np.linalg.norm(r_emit - r_body)
        r2 = np.linalg.norm(r_obs - r_body)
        r12 = np.linalg.norm(r_obs - r_emit)

        if r1 + r2 - r12 <= 0:
            logger.debug(f"Degenerate Shapiro geometry for {self.name}: r1={r1}, r2={r2}, r12={r12}")
            return 0.0

        factor = (1 + self.gamma) * self.gravitational_parameter / self.speed_of_light**3
        return factor * np.log((r1 + r2 + r12) / (r1 + r2 - r12))

    def __repr__(self):
        return (f"ShapiroCorrection(name={self.name!r}, "
                f"gravitational_parameter={self.gravitational_parameter!r}, gamma={self.gamma!r})")
