import logging
from typing import Callable, Dict, Sequence, Tuple

import numpy as np
import astropy.units as u
from astropy.constants import c as _c

logger = logging.getLogger('light_time')

SPEED_OF_LIGHT = _c.to(u.m / u.s).value
SPEED_OF_LIGHT_KM_S = _c.to(u.km / u.s).value

DEFAULT_LIGHT_TIME_TOLERANCE = 1e-12
DEFAULT_MAX_ITERATIONS = 20

StateFunction = Callable[[float], np.ndarray]
LightTimeCorrectionFunction = Callable[[np.ndarray, np.ndarray, float, float], float]


class LightTimeCalculator:
    """
    One-way light time between a transmitter and a receiver.

    The calculator iterates the epoch of the free link end until the
    geometric light time converges, then applies the correction chain either
    once (``iterate_corrections=False``) or inside a second iteration that
    re-evaluates states and corrections at the corrected epochs
    (``iterate_corrections=True``).

    With ``iterate_corrections=False`` the corrections are evaluated with the
    link-end states of the converged geometric solution only, and the states
    are not re-evaluated at the corrected epoch. This is an approximation
    that degrades for large, state-dependent corrections.
    """

    def __init__(self, transmitter_state_function: StateFunction,
                 receiver_state_function: StateFunction,
                 correction_functions: Sequence[LightTimeCorrectionFunction] = (),
                 iterate_corrections: bool = False, *,
                 speed_of_light: float = SPEED_OF_LIGHT,
                 tolerance: float = DEFAULT_LIGHT_TIME_TOLERANCE,
                 max_iterations: int = DEFAULT_MAX_ITERATIONS):
        if not callable(transmitter_state_function):
            raise TypeError("Transmitter state function must be callable")
        if not callable(receiver_state_function):
            raise TypeError("Receiver state function must be callable")

        correction_functions = tuple(correction_functions)
        for i, correction in enumerate(correction_functions):
            if not callable(correction):
                raise TypeError(f"Light-time correction {i} is not callable: {correction!r}")

        if not speed_of_light > 0:
            raise ValueError(f"Speed of light must be positive, got {speed_of_light}")
        if not tolerance > 0:
            raise ValueError(f"Light-time tolerance must be positive, got {tolerance}")
        if max_iterations < 1:
            raise ValueError(f"Maximum number of iterations must be at least 1, got {max_iterations}")

        self._transmitter_state_function = transmitter_state_function
        self._receiver_state_function = receiver_state_function
        self._correction_functions = correction_functions
        self._iterate_corrections = bool(iterate_corrections)
        self._speed_of_light = float(speed_of_light)
        self._tolerance = float(tolerance)
        self._max_iterations = int(max_iterations)

    @property
    def correction_functions(self) -> Tuple[LightTimeCorrectionFunction, ...]:
        return self._correction_functions

    @property
    def iterate_corrections(self) -> bool:
        return self._iterate_corrections

    @property
    def speed_of_light(self) -> float:
        return self._speed_of_light

    @property
    def tolerance(self) -> float:
        return self._tolerance

    @property
    def max_iterations(self) -> int:
        return self._max_iterations

    def compute_light_time(self, epoch: float, is_reception_time: bool = True) -> float:
        return self.compute_light_time_solution(epoch, is_reception_time)['light_time']

    def compute_relative_range_vector(self, epoch: float, is_reception_time: bool = True) -> np.ndarray:
        """Receiver minus transmitter position at the converged link-end epochs."""
        solution = self.compute_light_time_solution(epoch, is_reception_time)
        return solution['receiver_state'][:3] - solution['transmitter_state'][:3]

    def compute_light_time_with_link_end_states(
            self, epoch: float, is_reception_time: bool = True) -> Tuple[float, np.ndarray, np.ndarray]:
        """
        Light time together with the link-end states at the converged epochs.

        The states are evaluated at the epochs implied by the previous
        estimate, and the returned light time is the estimate computed from
        them. The gap between the epoch difference and the light time is at most the tolerance when the solution
        converged, and by the last iteration change when it did not.

        :return: (light_time, receiver_state, transmitter_state)
        """
        solution = self.compute_light_time_solution(epoch, is_reception_time)
        return solution['light_time'], solution['receiver_state'], solution['transmitter_state']

    def compute_light_time_solution(self, epoch: float, is_reception_time: bool = True) -> Dict:
        epoch = float(epoch)
        logger.debug(f"Solving light time at {epoch:.6f} "
                     f"({'reception' if is_reception_time else 'transmission'} fixed)")

        try:
            solution = self._converge(epoch, is_reception_time, self._geometric_estimate)

            if not self._correction_functions:
                return solution

            correction = self.total_correction(
                solution['transmitter_state'], solution['receiver_state'],
                solution['transmission_epoch'], solution['reception_epoch'])
            solution['correction'] = correction
            solution['light_time'] = solution['geometric_light_time'] + correction
            logger.debug(f"Correction at geometric solution: {correction:.15e} s")

            if not np.isfinite(solution['light_time']):
                logger.warning(f"Non-finite corrected light time {solution['light_time']} at epoch {epoch}")
                solution['converged'] = False
                return solution

            if not self._iterate_corrections:
                return solution

            geometric_iterations = solution['iterations']
            geometric_converged = solution['converged']
            solution = self._converge(epoch, is_reception_time, self._corrected_estimate,
                                      initial_light_time=solution['light_time'])
            solution['iterations'] += geometric_iterations
            solution['converged'] = geometric_converged and solution['converged']
            return solution

        except Exception as e:
            logger.error(f"Light-time solution failed at {epoch} "
                         f"(is_reception_time={is_reception_time}): {e}")
            raise

    def total_correction(self, transmitter_state: np.ndarray, receiver_state: np.ndarray,
                         transmission_epoch: float, reception_epoch: float) -> float:
        total = 0.0
        for correction in self._correction_functions:
            total += correction(transmitter_state, receiver_state, transmission_epoch, reception_epoch)
        return total

    def _geometric_estimate(self, transmitter_state, receiver_state, transmission_epoch, reception_epoch):
        distance = np.linalg.norm(receiver_state[:3] - transmitter_state[:3])
        return distance / self._speed_of_light, 0.0

    def _corrected_estimate(self, transmitter_state, receiver_state, transmission_epoch, reception_epoch):
        geometric, _ = self._geometric_estimate(transmitter_state, receiver_state,
                                                transmission_epoch, reception_epoch)
        correction = self.total_correction(transmitter_state, receiver_state,
                                           transmission_epoch, reception_epoch)
        return geometric, correction

    def _link_end_states(self, epoch, is_reception_time, light_time):
        if is_reception_time:
            reception_epoch = epoch
            transmission_epoch = epoch - light_time
        else:
            transmission_epoch = epoch
            reception_epoch = epoch + light_time
        transmitter_state = np.asarray(self._transmitter_state_function(transmission_epoch), dtype=float)
        receiver_state = np.asarray(self._receiver_state_function(reception_epoch), dtype=float)
        return transmission_epoch, reception_epoch, transmitter_state, receiver_state

    def _converge(self, epoch, is_reception_time, estimate, initial_light_time=None):
        """
        Fixed-point iteration on the light time.

        Without an initial light time both link ends start at ``epoch``
        (zero delay). ``estimate`` maps the current link-end states and epochs
        to a (geometric, correction) pair whose sum is the next light time.
        """
        if initial_light_time is None:
            transmission_epoch, reception_epoch, transmitter_state, receiver_state = \
                self._link_end_states(epoch, is_reception_time, 0.0)
            geometric, correction = estimate(transmitter_state, receiver_state,
                                             transmission_epoch, reception_epoch)
            light_time = geometric + correction
        else:
            light_time = initial_light_time

        converged = False
        iterations = 0
        while iterations < self._max_iterations:
            iterations += 1
            transmission_epoch, reception_epoch, transmitter_state, receiver_state = \
                self._link_end_states(epoch, is_reception_time, light_time)
            geometric, correction = estimate(transmitter_state, receiver_state,
                                             transmission_epoch, reception_epoch)
            new_light_time = geometric + correction
            change = abs(new_light_time - light_time)

            logger.debug(f"Iter {iterations}: light_time={new_light_time:.15f}, "
                         f"geometric={geometric:.15f}, correction={correction:.3e}, change={change:.3e}")

            if not np.isfinite(new_light_time):
                logger.warning(f"Non-finite light time {new_light_time} at epoch {epoch}, stopping iteration")
                light_time = new_light_time
                break

            light_time = new_light_time
            if change < self._tolerance:
                converged = True
                break
        else:
            logger.warning(f"Light time at epoch {epoch} not converged after {iterations} iterations, "
                           f"last change {change:.3e} s exceeds tolerance {self._tolerance:.3e} s")

        return {
            'light_time': light_time,
            'geometric_light_time': geometric,
            'correction': correction,
            'transmission_epoch': transmission_epoch,
            'reception_epoch': reception_epoch,
            'transmitter_state': transmitter_state,
            'receiver_state': receiver_state,
            'iterations': iterations,
            'converged': converged,
        }
