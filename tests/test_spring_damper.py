"""
Tests for the translational spring-damper force element.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest

from pyvehicle.rigid_body import Body
from pyvehicle.spring_damper import SpringDamper


K = 1000.0
C = 50.0


def make_shock(rest_length: float, damping: float = C) -> SpringDamper:
    chassis = Body("chassis", 10.0, (1.0, 1.0, 1.0), fixed=True)
    axle = Body("axle", 5.0, (1.0, 1.0, 1.0))
    axle.set_position([0.0, 0.0, 1.0])
    return SpringDamper("shock", chassis, axle, [0.0, 0.0, 0.0], [0.0, 0.0, 1.0],
                        K, damping, rest_length)


class TestSpringForce:
    """Force sign conventions: positive pushes the ends apart."""

    def test_zero_force_at_rest_length(self):
        shock = make_shock(1.0)
        assert shock.get_length() == pytest.approx(1.0)
        assert shock.get_force() == pytest.approx(0.0)
        assert np.allclose(shock.get_force_vector(), 0.0)

    def test_compressed_spring_pushes_apart(self):
        shock = make_shock(1.2)
        assert shock.get_length_change() == pytest.approx(-0.2)
        assert shock.get_force() == pytest.approx(0.2 * K)
        # Force on body2 points from body1 toward body2
        assert np.allclose(shock.get_force_vector(), [0.0, 0.0, 0.2 * K])

    def test_extended_spring_pulls_together(self):
        shock = make_shock(0.8)
        assert shock.get_force() == pytest.approx(-0.2 * K)

    def test_length_in_inches(self):
        shock = make_shock(1.0)
        assert shock.get_length(unit='in') == pytest.approx(1.0 / 0.0254)


class TestDamping:
    """Damping opposes the rate of change of length."""

    def test_extension_rate(self):
        shock = make_shock(1.0)
        shock.body2.set_linear_velocity([0.0, 0.0, 0.5])
        assert shock.get_length_rate() == pytest.approx(0.5)
        assert shock.get_force() == pytest.approx(-C * 0.5)

    def test_lateral_velocity_does_not_damp(self):
        shock = make_shock(1.0)
        shock.body2.set_linear_velocity([0.3, 0.0, 0.0])
        assert shock.get_force() == pytest.approx(0.0)

    def test_zero_damping_allowed(self):
        shock = make_shock(1.0, damping=0.0)
        shock.body2.set_linear_velocity([0.0, 0.0, 1.0])
        assert shock.get_force() == pytest.approx(0.0)


class TestAccumulation:
    """apply_forces() loads both bodies with equal and opposite forces."""

    def test_equal_and_opposite(self):
        shock = make_shock(1.1)
        shock.apply_forces()
        f1 = shock.body1.get_applied_force()
        f2 = shock.body2.get_applied_force()
        assert np.allclose(f1 + f2, 0.0)
        assert np.allclose(f2, [0.0, 0.0, 0.1 * K])
        # Attachment points lie on the body origins: no torque
        assert np.allclose(shock.body2.get_applied_torque(), 0.0)


class TestValidation:
    """Invalid coefficients are rejected at construction."""

    @pytest.mark.parametrize("k, c, rest", [
        (0.0, C, 1.0),
        (-K, C, 1.0),
        (K, -1.0, 1.0),
        (K, C, 0.0),
        (float('nan'), C, 1.0),
    ])
    def test_invalid_coefficients(self, k, c, rest):
        chassis = Body("chassis", 10.0, (1.0, 1.0, 1.0), fixed=True)
        axle = Body("axle", 5.0, (1.0, 1.0, 1.0))
        with pytest.raises(ValueError):
            SpringDamper("shock", chassis, axle, [0, 0, 0], [0, 0, 1], k, c, rest)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
