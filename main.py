import logging

import numpy as np

from create_graphs import plot_light_time_series
from ephemerides import KeplerEphemeris
from epochs import tdb_seconds_to_utc
from light_time import LightTimeCalculator, SPEED_OF_LIGHT
from light_time_corrections import ConstantDelayCorrection, ShapiroCorrection
from light_time_tables import tabulate_light_times
from two_way_light_time import TwoWayLightTimeCalculator

logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    filename='light_time_debug.log',
    filemode='w'
)
logger = logging.getLogger('main')

GM_SUN = 1.32712440018e20  # m^3/s^2
GM_EARTH = 3.986004418e14
GM_MOON = 4.9028e12

TEST_EPOCH = 1.0e6  # s since J2000 TDB


def build_earth_moon_ephemerides():
    """Heliocentric Earth and Moon states from mean Keplerian elements (J2000 ecliptic)."""
    sun = lambda t: np.zeros(6)
    earth = KeplerEphemeris(
        semi_major_axis=1.49598023e11, eccentricity=0.0167086,
        inclination=0.0, raan=0.0,
        argument_of_periapsis=np.deg2rad(102.9373), mean_anomaly_at_epoch=np.deg2rad(357.529),
        reference_epoch=0.0, gravitational_parameter=GM_SUN + GM_EARTH + GM_MOON,
        central_body=sun,
    )
    moon = KeplerEphemeris(
        semi_major_axis=3.84399e8, eccentricity=0.0549,
        inclination=np.deg2rad(5.145), raan=np.deg2rad(125.08),
        argument_of_periapsis=np.deg2rad(318.15), mean_anomaly_at_epoch=np.deg2rad(135.27),
        reference_epoch=0.0, gravitational_parameter=GM_EARTH + GM_MOON,
        central_body=earth,
    )
    return sun, earth, moon


def main():
    print("1. BUILDING EARTH-MOON EPHEMERIDES...")
    sun, earth, moon = build_earth_moon_ephemerides()

    print("2. ONE-WAY LIGHT TIME EARTH -> MOON...")
    newtonian = LightTimeCalculator(earth, moon)
    light_time = newtonian.compute_light_time(TEST_EPOCH, is_reception_time=True)
    range_vector = newtonian.compute_relative_range_vector(TEST_EPOCH, is_reception_time=True)
    print(f"   Reception at {tdb_seconds_to_utc(TEST_EPOCH)} UTC")
    print(f"   Newtonian light time: {light_time:.12f} s")
    print(f"   Range: {np.linalg.norm(range_vector):.3f} m "
          f"({np.linalg.norm(range_vector) / SPEED_OF_LIGHT:.12f} s)")

    corrections = [
        ShapiroCorrection(sun, GM_SUN, name='sun'),
        ShapiroCorrection(earth, GM_EARTH, name='earth'),
        ConstantDelayCorrection(3.0e-9),
    ]
    for iterate in (False, True):
        corrected = LightTimeCalculator(earth, moon, corrections, iterate_corrections=iterate)
        solution = corrected.compute_light_time_solution(TEST_EPOCH, is_reception_time=True)
        print(f"   Corrected light time (iterate_corrections={iterate}): "
              f"{solution['light_time']:.12f} s, correction {solution['correction'] * 1e9:.3f} ns, "
              f"{solution['iterations']} iterations")

    print("3. TWO-WAY LIGHT TIME EARTH -> MOON -> EARTH...")
    two_way = TwoWayLightTimeCalculator(
        uplink=LightTimeCalculator(earth, moon, corrections, iterate_corrections=True),
        downlink=LightTimeCalculator(moon, earth, corrections, iterate_corrections=True),
    )
    result = two_way.compute_two_way_light_time(TEST_EPOCH)
    print(f"   Up: {result['light_time_up']:.12f} s, down: {result['light_time_down']:.12f} s, "
          f"total: {result['total_light_time']:.12f} s")

    print("4. LIGHT TIME OVER ONE DAY...")
    calculator = LightTimeCalculator(earth, moon, corrections, iterate_corrections=True)
    epochs = TEST_EPOCH + np.arange(0.0, 86400.0, 600.0)
    df = tabulate_light_times(calculator, epochs, is_reception_time=True, progress=True)
    print(df[['epoch', 'light_time_s', 'correction_s', 'range_rate_m_s']].describe())

    path = plot_light_time_series(df, title='Earth -> Moon light time')
    logger.info(f"Light-time plot written to {path}")
    print(f"   Plot saved to {path}")


if __name__ == '__main__':
    main()
