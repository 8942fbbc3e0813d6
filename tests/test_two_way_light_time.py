"""
Unit tests for the two-way light-time composition.
"""

import numpy as np
import pytest

from ephemerides import ConstantEphemeris
from light_time import LightTimeCalculator, SPEED_OF_LIGHT
from light_time_corrections import ConstantDelayCorrection
from two_way_light_time import TwoWayLightTimeCalculator, range_rate


class TestTwoWayLightTime:

    def test_static_round_trip(self, static_pair, test_epoch):
        ground, spacecraft, distance = static_pair
        two_way = TwoWayLightTimeCalculator(
            uplink=LightTimeCalculator(ground, spacecraft),
            downlink=LightTimeCalculator(spacecraft, ground),
        )

        result = two_way.compute_two_way_light_time(test_epoch)

        one_way = distance / SPEED_OF_LIGHT
        assert result['total_light_time'] == pytest.approx(2 * one_way, rel=1e-14)
        assert result['turnaround_epoch'] == pytest.approx(test_epoch - one_way, abs=1e-9)
        assert result['transmission_epoch'] == pytest.approx(test_epoch - 2 * one_way, abs=1e-9)
        assert result['converged']

    def test_legs_share_turnaround_epoch(self, earth_moon, test_epoch):
        earth, moon = earth_moon
        uplink = LightTimeCalculator(earth, moon)
        two_way = TwoWayLightTimeCalculator(uplink=uplink, downlink=LightTimeCalculator(moon, earth))

        result = two_way.compute_two_way_light_time(test_epoch)
        up = uplink.compute_light_time_solution(result['turnaround_epoch'], is_reception_time=True)

        assert result['reception_epoch'] == test_epoch
        assert up['light_time'] == result['light_time_up']
        assert result['total_light_time'] == result['light_time_up'] + result['light_time_down']
        assert 2.3 < result['total_light_time'] < 2.8
        np.testing.assert_array_equal(result['turnaround_state'], moon(result['turnaround_epoch']))

    def test_corrections_applied_on_both_legs(self, static_pair, test_epoch):
        ground, spacecraft, distance = static_pair
        delay = 1.0e-6
        corrections = [ConstantDelayCorrection(delay)]
        two_way = TwoWayLightTimeCalculator(
            uplink=LightTimeCalculator(ground, spacecraft, corrections, iterate_corrections=True),
            downlink=LightTimeCalculator(spacecraft, ground, corrections, iterate_corrections=True),
        )

        total = two_way.compute_total_light_time(test_epoch)

        assert total == pytest.approx(2 * (distance / SPEED_OF_LIGHT + delay), rel=1e-14)


class TestRangeRate:

    def test_receding(self):
        tx = np.array([0.0, 0.0, 0.0, 0.0, 0.0, 0.0])
        rx = np.array([10.0, 0.0, 0.0, 3.0, 4.0, 0.0])
        assert range_rate(tx, rx) == pytest.approx(3.0)

    def test_coincident_link_ends(self):
        state = np.array([1.0, 1.0, 1.0, 5.0, 0.0, 0.0])
        assert range_rate(state, ConstantEphemeris(state)(0.0)) == 0.0
