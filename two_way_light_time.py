import logging
from typing import Dict

import numpy as np

from light_time import LightTimeCalculator

logger = logging.getLogger('two_way_light_time')


class TwoWayLightTimeCalculator:
    """
    Round-trip light time: ground transmitter -> turnaround body -> ground receiver.

    ``uplink`` has the turnaround body as receiver, ``downlink`` has it as
    transmitter. The down-leg is solved first with the reception epoch
    fixed; the up-leg is then solved with its reception fixed at the
    down-leg transmission (turnaround) epoch.
    """

    def __init__(self, uplink: LightTimeCalculator, downlink: LightTimeCalculator):
        self.uplink = uplink
        self.downlink = downlink

    def compute_two_way_light_time(self, reception_epoch: float) -> Dict:
        logger.debug(f"Solving two-way light time with reception at {reception_epoch:.6f}")

        down = self.downlink.compute_light_time_solution(reception_epoch, is_reception_time=True)
        turnaround_epoch = down['transmission_epoch']
        logger.debug(f"Down-leg: tau_D={down['light_time']:.12f} s, turnaround at {turnaround_epoch:.6f}")

        up = self.uplink.compute_light_time_solution(turnaround_epoch, is_reception_time=True)
        logger.debug(f"Up-leg: tau_U={up['light_time']:.12f} s, transmission at {up['transmission_epoch']:.6f}")

        converged = down['converged'] and up['converged']
        if not converged:
            logger.warning(f"Two-way light time at {reception_epoch} not fully converged "
                           f"(down-leg: {down['converged']}, up-leg: {up['converged']})")

        return {
            'transmission_epoch': up['transmission_epoch'],
            'turnaround_epoch': turnaround_epoch,
            'reception_epoch': down['reception_epoch'],
            'light_time_up': up['light_time'],
            'light_time_down': down['light_time'],
            'total_light_time': up['light_time'] + down['light_time'],
            'transmitter_state': up['transmitter_state'],
            'turnaround_state': down['transmitter_state'],
            'receiver_state': down['receiver_state'],
            'converged': converged,
        }

    def compute_total_light_time(self, reception_epoch: float) -> float:
        return self.compute_two_way_light_time(reception_epoch)['total_light_time']


def range_rate(transmitter_state: np.ndarray, receiver_state: np.ndarray) -> float:
    """Rate of change of the link-end separation, projected on the line of sight."""
    r_vec = receiver_state[:3] - transmitter_state[:3]
    distance = np.linalg.norm(r_vec)
    r_hat = r_vec / distance if distance > 0 else np.zeros(3)
    return float(np.dot(receiver_state[3:6] - transmitter_state[3:6], r_hat))
