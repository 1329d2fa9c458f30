"""
Tests for the simple powertrain torque curve.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from pyvehicle.powertrain import (NEUTRAL_GEAR_RATIO, DriveMode, SimplePowertrain,
                                  SimplePowertrainParameters)
from pyvehicle.presets import hmmwv_powertrain
from pyvehicle.shafts import Shaft


@pytest.fixture
def powertrain():
    pt = SimplePowertrain(hmmwv_powertrain())
    pt.initialize()
    return pt


class TestTorqueCurve:
    """Linear speed-torque characteristic."""

    @pytest.mark.parametrize("speed", [-100.0, 0.0, 50.0, 1000.0])
    def test_zero_throttle(self, powertrain, speed):
        powertrain.update(0.0, 0.0, speed)
        assert powertrain.get_motor_torque() == pytest.approx(0.0)
        assert powertrain.get_output_torque() == pytest.approx(0.0)

    def test_stall_torque(self, powertrain):
        powertrain.update(0.0, 1.0, 0.0)
        assert powertrain.get_motor_speed() == 0.0
        assert powertrain.get_motor_torque() == pytest.approx(2400.0 / 0.3)
        assert powertrain.get_output_torque() == pytest.approx(2400.0 / 0.3 / 0.3)

    def test_no_torque_at_max_speed(self, powertrain):
        p = powertrain.parameters
        powertrain.update(0.0, 1.0, p.max_speed * p.forward_gear_ratio)
        assert powertrain.get_motor_speed() == pytest.approx(p.max_speed)
        assert powertrain.get_motor_torque() == pytest.approx(0.0, abs=1e-9)

    def test_half_throttle_half_speed(self, powertrain):
        p = powertrain.parameters
        powertrain.update(0.0, 0.5, 0.5 * p.max_speed * p.forward_gear_ratio)
        assert powertrain.get_motor_torque() == pytest.approx(0.25 * p.max_torque)


class TestDriveModes:
    """Gear ratio selection."""

    def test_initialize_selects_forward(self):
        pt = SimplePowertrain(hmmwv_powertrain())
        pt.set_drive_mode(DriveMode.REVERSE)
        driveshaft = Shaft("driveshaft", 0.5)
        pt.initialize(driveshaft)
        assert pt.drive_mode == DriveMode.FORWARD
        assert pt.current_gear_ratio == pytest.approx(0.3)
        assert pt.driveshaft is driveshaft

    def test_reverse(self, powertrain):
        powertrain.set_drive_mode(DriveMode.REVERSE)
        powertrain.update(0.0, 1.0, 0.0)
        assert powertrain.current_gear_ratio == pytest.approx(-0.3)
        assert powertrain.get_output_torque() == pytest.approx(-2400.0 / 0.3 / 0.3)

    def test_neutral(self, powertrain):
        powertrain.set_drive_mode(DriveMode.NEUTRAL)
        assert powertrain.current_gear_ratio == NEUTRAL_GEAR_RATIO
        powertrain.update(0.0, 1.0, 100.0)
        assert abs(powertrain.get_output_torque()) < 1e-12

    def test_mode_by_value(self, powertrain):
        powertrain.set_drive_mode("reverse")
        assert powertrain.drive_mode == DriveMode.REVERSE
        with pytest.raises(ValueError):
            powertrain.set_drive_mode("park")


class TestParameters:
    """Parameter validation and serialization."""

    @pytest.mark.parametrize("forward, reverse, torque, speed", [
        (0.0, -0.3, 8000.0, 2000.0),
        (0.3, 0.3, 8000.0, 2000.0),
        (0.3, -0.3, 0.0, 2000.0),
        (0.3, -0.3, 8000.0, -1.0),
    ])
    def test_invalid(self, forward, reverse, torque, speed):
        with pytest.raises(ValueError):
            SimplePowertrainParameters(forward, reverse, torque, speed)

    def test_round_trip(self):
        parameters = hmmwv_powertrain()
        assert SimplePowertrainParameters.from_dict(parameters.to_dict()) == parameters


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
