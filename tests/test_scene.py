"""
Tests for scene bookkeeping and position-level assembly.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest

from scipy.spatial.transform import Rotation

from pyvehicle.constraints import DistanceJoint, SphericalJoint
from pyvehicle.rigid_body import Body
from pyvehicle.scene import AssemblyResult, Scene
from pyvehicle.shafts import Shaft
from pyvehicle.spring_damper import SpringDamper


class TestBody:
    """Mass properties, pose transforms and accumulators."""

    @pytest.mark.parametrize("mass, inertia", [
        (0.0, (1.0, 1.0, 1.0)),
        (-1.0, (1.0, 1.0, 1.0)),
        (1.0, (1.0, 0.0, 1.0)),
        (1.0, (1.0, 1.0)),
        (1.0, [[1.0, 0.5, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]),
    ])
    def test_invalid_mass_properties(self, mass, inertia):
        with pytest.raises(ValueError):
            Body("body", mass, inertia)

    def test_center_of_mass(self):
        assert np.allclose(Body("body", 1.0, (1.0, 1.0, 1.0)).com, 0.0)
        with pytest.raises(ValueError):
            Body("body", 1.0, (1.0, 1.0, 1.0), com=(0.1, 0.2))

    def test_mass_unit(self):
        body = Body("body", 10.0, (1.0, 1.0, 1.0), mass_unit='lb')
        assert body.mass == pytest.approx(4.53592)

    def test_point_transforms(self):
        body = Body("body", 1.0, (1.0, 1.0, 1.0))
        body.set_position([1.0, 2.0, 3.0])
        body.set_rotation(Rotation.from_euler('z', 90, degrees=True))

        point = body.point_to_global([1.0, 0.0, 0.0])
        assert np.allclose(point, [1.0, 3.0, 3.0])
        assert np.allclose(body.point_to_local(point), [1.0, 0.0, 0.0])
        assert np.allclose(body.direction_to_global([1.0, 0.0, 0.0]), [0.0, 1.0, 0.0])
        print("✓ Local/global transforms are consistent")

    def test_accumulated_force_at_point(self):
        body = Body("body", 1.0, (1.0, 1.0, 1.0))
        body.accumulate_force([0.0, 0.0, 10.0], point=[1.0, 0.0, 0.0])
        body.accumulate_torque([1.0, 0.0, 0.0])
        assert np.allclose(body.get_applied_force(), [0.0, 0.0, 10.0])
        assert np.allclose(body.get_applied_torque(), [1.0, -10.0, 0.0])

        body.empty_accumulators()
        assert np.allclose(body.get_applied_force(), 0.0)
        assert np.allclose(body.get_applied_torque(), 0.0)

    def test_add_mass(self):
        body = Body("spindle", 15.0, (0.04, 0.06, 0.04))
        body.add_mass(35.0, (0.7, 1.1, 0.7))
        assert body.mass == pytest.approx(50.0)
        assert np.allclose(np.diag(body.inertia), [0.74, 1.16, 0.74])
        with pytest.raises(ValueError):
            body.add_mass(0.0, (1.0, 1.0, 1.0))


class TestAttachment:
    """add() and remove() preconditions."""

    def test_add_and_remove_body(self):
        scene = Scene("test")
        body = Body("body", 1.0, (1.0, 1.0, 1.0))
        scene.add(body)
        assert body.scene is scene
        assert scene.bodies == [body]

        scene.remove(body)
        assert body.scene is None
        assert scene.bodies == []

    def test_double_add_rejected(self):
        scene = Scene()
        body = Body("body", 1.0, (1.0, 1.0, 1.0))
        scene.add(body)
        with pytest.raises(RuntimeError, match="already attached"):
            scene.add(body)
        with pytest.raises(RuntimeError):
            Scene("other").add(body)

    def test_remove_detached_rejected(self):
        scene = Scene()
        with pytest.raises(ValueError):
            scene.remove(Shaft("shaft", 1.0))

    def test_unsupported_type_rejected(self):
        with pytest.raises(TypeError):
            Scene().add("not a body")

    def test_joint_requires_attached_bodies(self):
        scene = Scene()
        b1 = Body("b1", 1.0, (1.0, 1.0, 1.0))
        b2 = Body("b2", 1.0, (1.0, 1.0, 1.0))
        scene.add(b1)
        joint = SphericalJoint("joint", b1, b2, [0.0, 0.0, 0.0])
        with pytest.raises(RuntimeError, match="b2"):
            scene.add(joint)

        scene.add(b2)
        scene.add(joint)
        assert scene.joints == [joint]

    def test_force_element_requires_attached_bodies(self):
        scene = Scene()
        b1 = Body("b1", 1.0, (1.0, 1.0, 1.0))
        b2 = Body("b2", 1.0, (1.0, 1.0, 1.0))
        b2.set_position([0.0, 0.0, 1.0])
        spring = SpringDamper("spring", b1, b2, [0, 0, 0], [0, 0, 1], 100.0, 1.0, 1.0)
        with pytest.raises(RuntimeError):
            scene.add(spring)


class TestAssembly:
    """Minimum-displacement assembly of violated joints."""

    def test_nothing_to_assemble(self):
        scene = Scene()
        result = scene.assemble()
        assert result.success
        assert result.iterations == 0

    def test_satisfied_joints_do_not_move_bodies(self):
        scene = Scene()
        ground = Body("ground", 1.0, (1.0, 1.0, 1.0), fixed=True)
        body = Body("body", 1.0, (1.0, 1.0, 1.0))
        body.set_position([0.5, 0.0, 0.0])
        scene.add(ground)
        scene.add(body)
        scene.add(SphericalJoint("ball", ground, body, [0.0, 0.0, 0.0]))

        result = scene.assemble()
        assert result.success
        assert np.allclose(body.get_position(), [0.5, 0.0, 0.0])

    def test_violated_joint_is_repaired(self):
        print("\n--- Testing assembly ---")
        scene = Scene()
        ground = Body("ground", 1.0, (1.0, 1.0, 1.0), fixed=True)
        body = Body("body", 1.0, (1.0, 1.0, 1.0))
        body.set_position([0.5, 0.0, 0.0])
        scene.add(ground)
        scene.add(body)
        ball = SphericalJoint("ball", ground, body, [0.0, 0.0, 0.0])
        link = DistanceJoint("link", ground, body, [0.0, 1.0, 0.0], [0.5, 0.0, 0.0])
        scene.add(ball)
        scene.add(link)

        body.set_position([0.6, 0.05, 0.0])
        assert ball.get_physical_error() > 0.05

        result = scene.assemble()
        print(result)
        name, violation = result.get_max_violation()
        assert result.success
        assert violation < 1e-5
        assert set(result.violations) == {"ball", "link"}
        assert ground.get_position() == pytest.approx([0.0, 0.0, 0.0])
        print("✓ Assembly test passed")

    def test_result_repr(self):
        result = AssemblyResult(success=True, message="ok", iterations=3, violations={"a": 1e-9, "b": 2e-9})
        assert result.get_max_violation() == ("b", 2e-9)
        assert "✓" in repr(result)


class TestStepping:
    """do_step() argument checks and loads gathering."""

    def test_step_size_must_be_positive(self):
        scene = Scene()
        for dt in (0.0, -1e-3, float('nan')):
            with pytest.raises(ValueError):
                scene.do_step(dt)
        assert scene.time == 0.0

    def test_step_advances_time(self):
        scene = Scene()
        scene.do_step(0.25)
        scene.do_step(0.25)
        assert scene.time == pytest.approx(0.5)

    def test_body_loads_include_springs(self):
        scene = Scene()
        chassis = Body("chassis", 10.0, (1.0, 1.0, 1.0), fixed=True)
        axle = Body("axle", 5.0, (1.0, 1.0, 1.0))
        axle.set_position([0.0, 0.0, 1.0])
        scene.add(chassis)
        scene.add(axle)
        scene.add(SpringDamper("spring", chassis, axle, [0, 0, 0], [0, 0, 1], 100.0, 0.0, 1.5))
        axle.accumulate_force([1.0, 0.0, 0.0])

        force, torque = scene.get_body_loads(axle)
        assert np.allclose(force, [1.0, 0.0, 50.0])
        assert np.allclose(torque, 0.0)

        force, _ = scene.get_body_loads(chassis)
        assert np.allclose(force, [0.0, 0.0, -50.0])

    def test_body_loads_about_center_of_mass(self):
        scene = Scene()
        chassis = Body("chassis", 10.0, (1.0, 1.0, 1.0), com=(0.1, 0.0, -0.5))
        chassis.set_position([1.0, 0.0, 1.0])
        scene.add(chassis)
        chassis.accumulate_force([0.0, 0.0, 100.0])
        chassis.accumulate_torque([0.0, 3.0, 0.0])

        force, torque = scene.get_body_loads(chassis)
        assert np.allclose(force, [0.0, 0.0, 100.0])
        # The accumulated force acts at the reference origin, not at the COM
        assert np.allclose(torque, [0.0, 3.0 + 10.0, 0.0])
        assert np.allclose(chassis.get_com_position(), [1.1, 0.0, 0.5])

    def test_body_loads_require_attached_body(self):
        with pytest.raises(ValueError):
            Scene().get_body_loads(Body("body", 1.0, (1.0, 1.0, 1.0)))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
