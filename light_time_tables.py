import logging
from typing import Iterable

import numpy as np
import pandas as pd
from tqdm import tqdm

from light_time import LightTimeCalculator
from two_way_light_time import range_rate

logger = logging.getLogger('light_time_tables')

COLUMNS = ['epoch', 'light_time_s', 'geometric_light_time_s', 'correction_s',
           'transmission_epoch', 'reception_epoch', 'range_m', 'range_rate_m_s',
           'iterations', 'converged']


def tabulate_light_times(calculator: LightTimeCalculator, epochs: Iterable[float],
                         is_reception_time: bool = True, progress: bool = False) -> pd.DataFrame:
    """
    Solve the light time at every epoch and collect the solutions in a DataFrame.

    Epochs whose state evaluation fails are logged and skipped. Range and
    range rate are in the units of the states (metres for SI ephemerides).
    """
    epochs = np.asarray(list(epochs), dtype=float)
    logger.info(f"Tabulating light time at {len(epochs)} epochs "
                f"({'reception' if is_reception_time else 'transmission'} fixed)")

    rows = []
    failures = 0
    for epoch in tqdm(epochs, total=len(epochs), desc="Solving light time", disable=not progress):
        try:
            solution = calculator.compute_light_time_solution(epoch, is_reception_time)
        except Exception as e:
            failures += 1
            logger.warning(f"Skipping epoch {epoch}: {e}")
            continue

        tx_state = solution['transmitter_state']
        rx_state = solution['receiver_state']
        rows.append({
            'epoch': epoch,
            'light_time_s': solution['light_time'],
            'geometric_light_time_s': solution['geometric_light_time'],
            'correction_s': solution['correction'],
            'transmission_epoch': solution['transmission_epoch'],
            'reception_epoch': solution['reception_epoch'],
            'range_m': float(np.linalg.norm(rx_state[:3] - tx_state[:3])),
            'range_rate_m_s': range_rate(tx_state, rx_state),
            'iterations': solution['iterations'],
            'converged': solution['converged'],
        })

    if failures:
        logger.warning(f"Light time failed at {failures}/{len(epochs)} epochs")

    unconverged = sum(not row['converged'] for row in rows)
    if unconverged:
        logger.warning(f"{unconverged}/{len(rows)} light-time solutions did not converge")

    logger.info(f"Successfully solved {len(rows)}/{len(epochs)} epochs")
    return pd.DataFrame(rows, columns=COLUMNS)
