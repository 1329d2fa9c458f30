"""
Integration tests for the vehicle assembly.

Builds complete HMMWV-like vehicles on a fixed chassis and exercises the
per-step update, the queries, the diagnostics and teardown.
"""

import sys
import os
import io
import json
import dataclasses
import numpy as np
import pytest

# Add parent directory to path for pyvehicle imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from pyvehicle.presets import hmmwv_double_wishbone_vehicle, hmmwv_solid_axle_vehicle
from pyvehicle.scene import Scene
from pyvehicle.suspension import SuspensionKind, TireForce
from pyvehicle.vehicle import ChassisParameters, Vehicle, VehicleParameters
from pyvehicle.vehicle_types import DebugFlags, DriveType, Side, VisualizationType, WheelId


def zero_tire_forces():
    return [TireForce() for _ in WheelId]


def build_vehicle(parameters=None, **kwargs):
    scene = Scene("vehicle")
    vehicle = Vehicle(scene, parameters or hmmwv_solid_axle_vehicle(), fixed=True, **kwargs)
    vehicle.initialize([0.0, 0.0, 1.0])
    return scene, vehicle


class TestInitialization:
    """Construction and initialization order."""

    def test_solid_axle_vehicle(self):
        print("\n--- Testing solid axle vehicle ---")
        scene, vehicle = build_vehicle()
        assert vehicle.is_initialized
        assert vehicle.front_suspension.kind == SuspensionKind.SOLID_AXLE
        assert vehicle.rear_suspension.kind == SuspensionKind.SOLID_AXLE
        assert max(scene.compute_constraint_violations().values()) < 1e-12
        print(f"✓ {vehicle}")

    def test_double_wishbone_vehicle(self):
        scene, vehicle = build_vehicle(hmmwv_double_wishbone_vehicle())
        assert vehicle.front_suspension.kind == SuspensionKind.DOUBLE_WISHBONE_REDUCED
        assert len(scene.joints) == 2 * 12
        assert len(scene.brakes) == 4

    def test_subsystems_are_connected(self):
        scene, vehicle = build_vehicle()
        assert vehicle.powertrain.driveshaft is vehicle.driveline.get_driveshaft()
        assert vehicle.driveline.differential.shafts[1] is vehicle.rear_suspension.get_axle(Side.LEFT)
        assert vehicle.driveline.differential.shafts[2] is vehicle.rear_suspension.get_axle(Side.RIGHT)
        for which, brake in vehicle.brakes.items():
            assert brake.revolute.body2 is vehicle.get_wheel_body(which)
        assert vehicle.front_suspension.steerable
        assert not vehicle.rear_suspension.steerable

    def test_wheel_mass_lumped_on_spindle(self):
        scene, vehicle = build_vehicle()
        p = vehicle.parameters
        spindle = vehicle.get_wheel_body(WheelId.REAR_RIGHT)
        assert spindle.mass == pytest.approx(p.rear_suspension.spindle_mass + p.wheel.mass)

    def test_fwd_drives_front_axle(self):
        parameters = dataclasses.replace(hmmwv_solid_axle_vehicle(), drive_type=DriveType.FWD)
        scene, vehicle = build_vehicle(parameters)
        assert vehicle.front_suspension.driven
        assert not vehicle.rear_suspension.driven
        assert vehicle.driveline.differential.shafts[1] is vehicle.front_suspension.get_axle(Side.LEFT)

    def test_double_initialize(self):
        scene, vehicle = build_vehicle()
        with pytest.raises(RuntimeError):
            vehicle.initialize([0.0, 0.0, 1.0])

    def test_wheel_positions(self):
        scene, vehicle = build_vehicle()
        front_left = vehicle.get_wheel_pos(WheelId.FRONT_LEFT)
        front_right = vehicle.get_wheel_pos(WheelId.FRONT_RIGHT)
        rear_left = vehicle.get_wheel_pos(WheelId.REAR_LEFT)
        assert front_left[1] < 0.0 < front_right[1]
        assert front_left[0] < 0.0 < rear_left[0]
        assert front_left[1] == pytest.approx(-front_right[1])

    def test_visualization_assets(self):
        scene, vehicle = build_vehicle(chassis_visualization=VisualizationType.MESH,
                                       wheel_visualization=VisualizationType.MESH)
        assert vehicle.chassis.assets[0].name == "hmmwv_chassis"
        assert vehicle.get_wheel_body(WheelId.FRONT_LEFT).assets[0].name == "hmmwv_rim_L"


class TestUpdate:
    """Per-step distribution of driver inputs and tire forces."""

    def test_update_requires_initialize(self):
        vehicle = Vehicle(Scene(), hmmwv_solid_axle_vehicle(), fixed=True)
        with pytest.raises(RuntimeError):
            vehicle.update(0.0, 0.0, 0.0, 0.0, zero_tire_forces())

    def test_inputs_reach_subsystems(self):
        scene, vehicle = build_vehicle()
        tierod = vehicle.front_suspension.tierod[Side.RIGHT]
        anchor = tierod.get_endpoint1_local()
        forces = zero_tire_forces()
        forces[WheelId.FRONT_RIGHT] = TireForce(force=np.array([0.0, 100.0, 5000.0]))

        vehicle.update(0.0, 0.5, 0.25, 0.3, forces)

        gain = vehicle.parameters.steering_gain
        assert np.allclose(tierod.get_endpoint1_local() - anchor, [0.0, 0.25 * gain, 0.0])
        assert vehicle.driveline.get_driveshaft().get_applied_torque() == pytest.approx(
            vehicle.powertrain.get_output_torque())
        assert vehicle.powertrain.get_output_torque() == pytest.approx(0.5 * 2400.0 / 0.3 / 0.3)
        assert np.allclose(vehicle.get_wheel_body(WheelId.FRONT_RIGHT).get_applied_force(),
                           [0.0, 100.0, 5000.0])
        for brake in vehicle.brakes.values():
            assert brake.get_modulation() == pytest.approx(0.3)

    @pytest.mark.parametrize("throttle, steering, braking, count", [
        (float('nan'), 0.0, 0.0, 4),
        (0.0, float('inf'), 0.0, 4),
        (0.0, 0.0, float('nan'), 4),
        (0.5, 0.5, 0.5, 3),
    ])
    def test_invalid_inputs_leave_state_unchanged(self, throttle, steering, braking, count):
        scene, vehicle = build_vehicle()
        tierod = vehicle.front_suspension.tierod[Side.LEFT]
        anchor = tierod.get_endpoint1_local()

        with pytest.raises(ValueError):
            vehicle.update(0.0, throttle, steering, braking, zero_tire_forces()[:count])

        assert np.array_equal(tierod.get_endpoint1_local(), anchor)
        assert vehicle.driveline.get_driveshaft().get_applied_torque() == 0.0
        assert all(brake.get_modulation() == 0.0 for brake in vehicle.brakes.values())

    def test_non_finite_tire_force(self):
        scene, vehicle = build_vehicle()
        forces = zero_tire_forces()
        forces[WheelId.REAR_LEFT] = TireForce(force=np.array([0.0, 0.0, np.inf]))
        with pytest.raises(ValueError):
            vehicle.update(0.0, 0.0, 0.0, 0.0, forces)
        assert np.allclose(vehicle.get_wheel_body(WheelId.REAR_LEFT).get_applied_force(), 0.0)

    def test_braking_does_not_change_spring_forces(self):
        scene, vehicle = build_vehicle()
        before = [vehicle.get_spring_force(which) for which in WheelId]

        vehicle.update(0.0, 0.0, 0.0, 1.0, zero_tire_forces())
        scene.do_step(1e-3)

        after = [vehicle.get_spring_force(which) for which in WheelId]
        assert after == pytest.approx(before)

    def test_throttle_drives_rear_wheels(self):
        print("\n--- Testing wheel torques ---")
        scene, vehicle = build_vehicle()
        vehicle.update(0.0, 1.0, 0.0, 0.0, zero_tire_forces())
        scene.do_step(1e-3)

        rear_left = vehicle.get_wheel_torque(WheelId.REAR_LEFT)
        rear_right = vehicle.get_wheel_torque(WheelId.REAR_RIGHT)
        assert rear_left == pytest.approx(rear_right)
        assert abs(rear_left) > 0.0
        assert vehicle.get_wheel_torque(WheelId.FRONT_LEFT) == 0.0
        assert vehicle.get_wheel_omega(WheelId.REAR_LEFT) == pytest.approx(
            vehicle.get_wheel_omega(WheelId.REAR_RIGHT))
        assert vehicle.get_wheel_omega(WheelId.REAR_LEFT) != 0.0
        assert vehicle.get_driveshaft_speed() != 0.0
        print(f"✓ Rear wheel torque {rear_left:.1f} N*m")

    def test_tire_moment_spins_wheel_with_its_inertia(self):
        scene, vehicle = build_vehicle()
        p = vehicle.parameters
        # Leave the axle shaft driven by the tire moment alone
        scene.remove(vehicle.driveline.differential)
        forces = zero_tire_forces()
        forces[WheelId.REAR_LEFT] = TireForce(moment=np.array([0.0, 100.0, 0.0]))
        vehicle.update(0.0, 0.0, 0.0, 0.0, forces)
        scene.do_step(1e-3)

        spin_inertia = (p.rear_suspension.axle_inertia + p.rear_suspension.spindle_inertia[1] +
                        p.wheel.inertia[1])
        expected = 100.0 / spin_inertia * 1e-3
        assert vehicle.get_wheel_omega(WheelId.REAR_LEFT) == pytest.approx(expected)
        assert vehicle.get_wheel_omega(WheelId.REAR_RIGHT) == pytest.approx(0.0)

    def test_braked_wheels_do_not_spin(self):
        scene, vehicle = build_vehicle()
        # At light throttle the brake capacity exceeds the torque at each wheel
        vehicle.update(0.0, 0.05, 0.0, 1.0, zero_tire_forces())
        scene.do_step(1e-3)
        assert vehicle.get_wheel_omega(WheelId.REAR_LEFT) == pytest.approx(0.0, abs=1e-9)
        assert vehicle.get_wheel_omega(WheelId.REAR_RIGHT) == pytest.approx(0.0, abs=1e-9)


class TestQueries:
    """Wheel and spring queries."""

    @pytest.mark.parametrize("which", [4, -1, True, "FRONT_LEFT"])
    def test_invalid_wheel_id(self, which):
        scene, vehicle = build_vehicle()
        with pytest.raises(ValueError):
            vehicle.get_wheel_pos(which)
        with pytest.raises(ValueError):
            vehicle.get_wheel_torque(which)

    def test_wheel_state_queries(self):
        scene, vehicle = build_vehicle()
        body = vehicle.get_wheel_body(WheelId.FRONT_LEFT)
        body.set_linear_velocity([1.0, 0.0, 0.0])
        body.set_angular_velocity([0.0, -4.0, 0.0])
        assert np.allclose(vehicle.get_wheel_lin_vel(WheelId.FRONT_LEFT), [1.0, 0.0, 0.0])
        assert np.allclose(vehicle.get_wheel_ang_vel(WheelId.FRONT_LEFT), [0.0, -4.0, 0.0])
        assert vehicle.get_wheel_omega(WheelId.FRONT_LEFT) == pytest.approx(-4.0)
        assert np.allclose(vehicle.get_wheel_rot(WheelId.FRONT_LEFT).as_matrix(), np.eye(3))

    def test_spring_queries(self):
        scene, vehicle = build_vehicle()
        for which in WheelId:
            assert vehicle.get_spring_length(which) > 0.0
        assert vehicle.get_spring_force(WheelId.REAR_LEFT) == pytest.approx(
            vehicle.get_spring_force(WheelId.REAR_RIGHT))


class TestDiagnostics:
    """Text reports and teardown."""

    def test_debug_log(self):
        scene, vehicle = build_vehicle()
        out = io.StringIO()
        vehicle.debug_log(DebugFlags.SHOCKS | DebugFlags.CONSTRAINTS, out)
        text = out.getvalue()
        assert "Spring, Shock info" in text
        assert "Forces [lbf]" in text
        assert "FRONT-RIGHT suspension constraint violation" in text
        assert "RearSusp_distTierod_L" in text

    def test_spring_design_errors(self):
        scene, vehicle = build_vehicle()
        errors = vehicle.get_spring_design_errors()
        front_force, rear_force = vehicle.parameters.design_spring_force
        front_length, _ = vehicle.parameters.design_spring_length
        assert front_force == pytest.approx(3491.0 * 4.44822)
        assert rear_force == pytest.approx(6388.0 * 4.44822)
        assert errors[WheelId.FRONT_LEFT][0] == pytest.approx(
            vehicle.get_spring_force(WheelId.FRONT_LEFT) - front_force)
        assert errors[WheelId.REAR_RIGHT][0] == pytest.approx(
            vehicle.get_spring_force(WheelId.REAR_RIGHT) - rear_force)
        assert errors[WheelId.FRONT_RIGHT][1] == pytest.approx(
            vehicle.get_spring_length(WheelId.FRONT_RIGHT) - front_length)

        out = io.StringIO()
        vehicle.debug_log(DebugFlags.SHOCKS, out)
        text = out.getvalue()
        assert "error relative to design" in text
        assert "Force error [lbf]" in text
        assert "Length error [in]" in text

    def test_no_design_report_without_design_values(self):
        parameters = dataclasses.replace(hmmwv_solid_axle_vehicle(),
                                         design_spring_force=None, design_spring_length=None)
        scene, vehicle = build_vehicle(parameters)
        assert vehicle.get_spring_design_errors()[WheelId.FRONT_LEFT] == (None, None)
        out = io.StringIO()
        vehicle.debug_log(DebugFlags.SHOCKS, out)
        assert "error relative to design" not in out.getvalue()

    def test_debug_log_shocks_only(self):
        scene, vehicle = build_vehicle()
        out = io.StringIO()
        vehicle.debug_log(DebugFlags.SHOCKS, out)
        assert "constraint violation" not in out.getvalue()

    def test_log_hardpoint_locations(self):
        scene, vehicle = build_vehicle()
        out = io.StringIO()
        vehicle.log_hardpoint_locations(out)
        text = out.getvalue()
        assert "FRONT suspension hardpoint locations" in text
        assert "REAR suspension hardpoint locations" in text
        assert "TIEROD_K" in text

    def test_destroy(self):
        scene, vehicle = build_vehicle()
        vehicle.destroy()
        assert not vehicle.is_initialized
        assert not scene.bodies
        assert not scene.joints
        assert not scene.force_elements
        assert not scene.shafts
        assert not scene.shaft_relations
        assert not scene.couplings
        assert not scene.brakes


class TestParameters:
    """Vehicle description serialization."""

    def test_json_round_trip(self):
        for parameters in (hmmwv_solid_axle_vehicle(), hmmwv_double_wishbone_vehicle()):
            data = json.loads(json.dumps(parameters.to_dict()))
            assert VehicleParameters.from_dict(data) == parameters

    def test_invalid_design_values(self):
        with pytest.raises(ValueError):
            dataclasses.replace(hmmwv_solid_axle_vehicle(), design_spring_force=(1.0,))
        with pytest.raises(ValueError):
            dataclasses.replace(hmmwv_solid_axle_vehicle(), design_spring_length=(0.3, float('nan')))

    def test_chassis_center_of_mass(self):
        parameters = hmmwv_solid_axle_vehicle()
        scene, vehicle = build_vehicle(parameters)
        assert np.allclose(vehicle.chassis.com, np.array([3.8, 0.585, -18.329]) * 0.0254)
        assert np.allclose(vehicle.chassis.get_com_position(),
                           np.array([0.0, 0.0, 1.0]) + vehicle.chassis.com)

        data = parameters.chassis.to_dict()
        del data['com']
        assert ChassisParameters.from_dict(data).com == (0.0, 0.0, 0.0)

    def test_unknown_suspension_parameters(self):
        with pytest.raises(ValueError):
            dataclasses.replace(hmmwv_solid_axle_vehicle(), front_suspension=object())


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
