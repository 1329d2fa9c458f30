"""
Joint type definitions for vehicle subsystems.

This module defines the kinematic joint kinds used by the suspension
templates together with the number of relative degrees of freedom each
kind removes between its two bodies.
"""

from enum import Enum


class JointType(Enum):
    """
    Kinematic joint kinds.

    A joint relates two bodies through markers created from a shared
    hardpoint-derived anchor.
    """
    REVOLUTE = "revolute"      # Shared point and rotation axis (kingpin, spindle)
    SPHERICAL = "spherical"    # Shared point (ball joint)
    UNIVERSAL = "universal"    # Shared point, two perpendicular rotation axes
    DISTANCE = "distance"      # Fixed distance between two points (two-force link)


# Relative degrees of freedom removed by each joint kind
JOINT_CONSTRAINED_DOF = {
    JointType.REVOLUTE: 5,
    JointType.SPHERICAL: 3,
    JointType.UNIVERSAL: 4,
    JointType.DISTANCE: 1,
}
