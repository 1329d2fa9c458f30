"""
Tests for the 2WD shaft driveline.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest

from pyvehicle.driveline import DrivelineParameters, ShaftsDriveline2WD
from pyvehicle.presets import hmmwv_driveline
from pyvehicle.rigid_body import Body
from pyvehicle.scene import Scene
from pyvehicle.shafts import Shaft
from pyvehicle.vehicle_types import Axle, DriveType, WheelId


def build(drive_type=DriveType.RWD):
    scene = Scene()
    chassis = Body("chassis", 3500.0, (125.8, 497.4, 531.4), fixed=True)
    scene.add(chassis)
    axle_left = Shaft("axle_L", 0.4)
    axle_right = Shaft("axle_R", 0.4)
    scene.add(axle_left)
    scene.add(axle_right)
    driveline = ShaftsDriveline2WD(hmmwv_driveline(), drive_type=drive_type)
    driveline.initialize(chassis, axle_left, axle_right)
    return scene, chassis, driveline, axle_left, axle_right


class TestInitialization:
    """Shaft network creation."""

    def test_creates_shafts_and_relations(self):
        scene, chassis, driveline, axle_left, axle_right = build()
        assert len(scene.shafts) == 4
        assert len(scene.shaft_relations) == 2
        assert driveline.get_driveshaft().name == "driveline_driveshaft"
        assert driveline.differential.shafts == (driveline.differentialbox, axle_left, axle_right)
        assert driveline.conical_gear.truss is chassis

    def test_driven_axle(self):
        assert ShaftsDriveline2WD(hmmwv_driveline()).driven_axle == Axle.REAR
        assert ShaftsDriveline2WD(hmmwv_driveline(), drive_type=DriveType.FWD).driven_axle == Axle.FRONT

    def test_double_initialize(self):
        scene, chassis, driveline, axle_left, axle_right = build()
        with pytest.raises(RuntimeError):
            driveline.initialize(chassis, axle_left, axle_right)

    def test_detached_axle_rejected(self):
        scene = Scene()
        chassis = Body("chassis", 3500.0, (1.0, 1.0, 1.0), fixed=True)
        scene.add(chassis)
        axle_left = Shaft("axle_L", 0.4)
        scene.add(axle_left)
        driveline = ShaftsDriveline2WD(hmmwv_driveline())
        with pytest.raises(RuntimeError):
            driveline.initialize(chassis, axle_left, Shaft("axle_R", 0.4))
        assert not driveline.is_initialized
        assert len(scene.shafts) == 1

    def test_detached_chassis_rejected(self):
        driveline = ShaftsDriveline2WD(hmmwv_driveline())
        with pytest.raises(RuntimeError):
            driveline.initialize(Body("chassis", 1.0, (1.0, 1.0, 1.0)), Shaft("l", 1.0), Shaft("r", 1.0))

    def test_queries_require_initialize(self):
        driveline = ShaftsDriveline2WD(hmmwv_driveline())
        with pytest.raises(RuntimeError):
            driveline.get_driveshaft_speed()

    def test_parameters_validation(self):
        with pytest.raises(ValueError):
            DrivelineParameters(driveshaft_inertia=0.5, differentialbox_inertia=0.6, conical_gear_ratio=0.0)
        with pytest.raises(ValueError):
            DrivelineParameters(driveshaft_inertia=-0.5, differentialbox_inertia=0.6, conical_gear_ratio=-0.2)
        data = hmmwv_driveline().to_dict()
        assert DrivelineParameters.from_dict(data) == hmmwv_driveline()


class TestWheelTorques:
    """Torque split to the wheels."""

    def test_equal_torque_on_driven_wheels(self):
        print("\n--- Testing driveline torque split ---")
        scene, chassis, driveline, axle_left, axle_right = build()
        driveline.apply_driveshaft_torque(100.0)
        scene.solve_shafts()

        rear_left = driveline.get_wheel_torque(WheelId.REAR_LEFT)
        rear_right = driveline.get_wheel_torque(WheelId.REAR_RIGHT)
        assert rear_left == pytest.approx(rear_right)
        assert abs(rear_left) > 0.0
        assert driveline.get_wheel_torque(WheelId.FRONT_LEFT) == 0.0
        assert driveline.get_wheel_torque(WheelId.FRONT_RIGHT) == 0.0
        print(f"✓ Rear wheel torques: {rear_left:.2f} / {rear_right:.2f} N*m")

    def test_wheel_torque_sign_follows_axle_acceleration(self):
        scene, chassis, driveline, axle_left, axle_right = build()
        driveline.apply_driveshaft_torque(100.0)
        scene.solve_shafts()
        # The differential reaction is the only torque on each axle shaft
        assert axle_left.acceleration * axle_left.inertia == pytest.approx(
            -driveline.get_wheel_torque(WheelId.REAR_LEFT))

    def test_fwd_drives_front_wheels(self):
        scene, chassis, driveline, axle_left, axle_right = build(DriveType.FWD)
        driveline.apply_driveshaft_torque(100.0)
        scene.solve_shafts()
        assert driveline.get_wheel_torque(WheelId.REAR_RIGHT) == 0.0
        assert driveline.get_wheel_torque(WheelId.FRONT_LEFT) == pytest.approx(
            driveline.get_wheel_torque(WheelId.FRONT_RIGHT))

    def test_invalid_wheel(self):
        scene, chassis, driveline, axle_left, axle_right = build()
        with pytest.raises(ValueError):
            driveline.get_wheel_torque(4)

    def test_gearbox_reaction_reaches_chassis(self):
        scene, chassis, driveline, axle_left, axle_right = build()
        driveline.apply_driveshaft_torque(100.0)
        scene.solve_shafts()
        _, torque = scene.get_body_loads(chassis)
        assert np.linalg.norm(torque) > 0.0
        assert np.allclose(torque, driveline.conical_gear.get_torque_reaction_on_truss())

    def test_axle_speeds_stay_equal(self):
        scene, chassis, driveline, axle_left, axle_right = build()
        driveline.apply_driveshaft_torque(100.0)
        for _ in range(50):
            scene.do_step(1e-3)
        assert axle_left.get_speed() == pytest.approx(axle_right.get_speed())
        assert driveline.differential.get_violation() == pytest.approx(0.0, abs=1e-9)
        assert driveline.conical_gear.get_violation() == pytest.approx(0.0, abs=1e-9)


class TestDestroy:
    """Teardown releases the owned items."""

    def test_destroy(self):
        scene, chassis, driveline, axle_left, axle_right = build()
        driveline.destroy()
        assert scene.shafts == [axle_left, axle_right]
        assert not scene.shaft_relations
        assert not driveline.is_initialized


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
