"""
Pytest configuration and fixtures for light-time tests.
"""

import os
import sys
from pathlib import Path

import numpy as np
import pytest

os.environ.setdefault('MPLBACKEND', 'Agg')

# Modules live at the repository root
sys.path.insert(0, str(Path(__file__).parent.parent))

from ephemerides import ConstantEphemeris, KeplerEphemeris  # noqa: E402

GM_SUN = 1.32712440018e20
GM_EARTH = 3.986004418e14
GM_MOON = 4.9028e12

TEST_EPOCH = 1.0e6


@pytest.fixture
def test_epoch():
    """Reference epoch, seconds since J2000 TDB."""
    return TEST_EPOCH


@pytest.fixture
def static_pair():
    """Two bodies at rest, 3.8e8 m apart."""
    distance = 3.8e8
    transmitter = ConstantEphemeris([1.0e7, -2.0e6, 5.0e5, 0.0, 0.0, 0.0])
    receiver = ConstantEphemeris([1.0e7 + distance, -2.0e6, 5.0e5, 0.0, 0.0, 0.0])
    return transmitter, receiver, distance


@pytest.fixture
def earth_moon():
    """Heliocentric Earth and Moon from mean Keplerian elements."""
    earth = KeplerEphemeris(
        semi_major_axis=1.49598023e11, eccentricity=0.0167086,
        inclination=0.0, raan=0.0,
        argument_of_periapsis=np.deg2rad(102.9373), mean_anomaly_at_epoch=np.deg2rad(357.529),
        reference_epoch=0.0, gravitational_parameter=GM_SUN + GM_EARTH + GM_MOON,
    )
    moon = KeplerEphemeris(
        semi_major_axis=3.84399e8, eccentricity=0.0549,
        inclination=np.deg2rad(5.145), raan=np.deg2rad(125.08),
        argument_of_periapsis=np.deg2rad(318.15), mean_anomaly_at_epoch=np.deg2rad(135.27),
        reference_epoch=0.0, gravitational_parameter=GM_EARTH + GM_MOON,
        central_body=earth,
    )
    return earth, moon
