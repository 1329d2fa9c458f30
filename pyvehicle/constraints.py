"""
Kinematic joints between rigid bodies.

Each joint relates two bodies through markers fixed in the body frames. The
markers are created from a global anchor (point, and axes where relevant)
using the current body poses, so a joint built on correctly positioned
bodies starts with zero violation.

The residual vector returned by evaluate() has one entry per constrained
degree of freedom and is zero when the joint is satisfied. Position
residuals are in meters, axis residuals are dimensionless.
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import List, Tuple, Union

from .geometry_utils import as_vector3, frame_from_axis, unit_vector
from .joint_types import JointType, JOINT_CONSTRAINED_DOF
from .rigid_body import Body


class Joint(ABC):
    """
    Base class for all kinematic joints.

    Attributes:
        name: Joint identifier
        body1: First body
        body2: Second body
        scene: Scene the joint is attached to (None if detached)
    """

    joint_type: JointType

    def __init__(self, name: str, body1: Body, body2: Body):
        """
        Initialize a joint.

        Args:
            name: Joint identifier
            body1: First body
            body2: Second body

        Raises:
            ValueError: If a body is missing or both bodies are the same
        """
        if body1 is None or body2 is None:
            raise ValueError(f"Joint '{name}' requires two bodies")
        if body1 is body2:
            raise ValueError(f"Joint '{name}' cannot connect body '{body1.name}' to itself")
        self.name = name
        self.body1 = body1
        self.body2 = body2
        self.scene = None

    @property
    def constrained_dof(self) -> int:
        """Number of relative degrees of freedom removed by this joint."""
        return JOINT_CONSTRAINED_DOF[self.joint_type]

    @abstractmethod
    def evaluate(self) -> np.ndarray:
        """
        Evaluate the constraint residual.

        Returns:
            Residual vector of length constrained_dof (0 = satisfied)
        """
        pass

    def get_violation(self) -> np.ndarray:
        """Get the current constraint violation vector."""
        return self.evaluate()

    def get_physical_error(self) -> float:
        """Get the norm of the violation vector."""
        return float(np.linalg.norm(self.evaluate()))

    def get_bodies(self) -> List[Body]:
        """Return both bodies."""
        return [self.body1, self.body2]

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}('{self.name}', "
                f"{self.body1.name} <-> {self.body2.name}, "
                f"error={self.get_physical_error():.3e})")


class _PointJoint(Joint):
    """Joint whose two markers share a common point."""

    def __init__(self, name: str, body1: Body, body2: Body,
                 location: Union[np.ndarray, Tuple[float, float, float]]):
        super().__init__(name, body1, body2)
        point = as_vector3(location, "location")
        self._marker1 = body1.point_to_local(point)
        self._marker2 = body2.point_to_local(point)

    def get_location(self) -> np.ndarray:
        """Get the global joint location (marker on body1)."""
        return self.body1.point_to_global(self._marker1)

    def _point_residual(self) -> np.ndarray:
        return self.body2.point_to_global(self._marker2) - self.body1.point_to_global(self._marker1)


class SphericalJoint(_PointJoint):
    """Ball joint: the two markers stay coincident."""

    joint_type = JointType.SPHERICAL

    def evaluate(self) -> np.ndarray:
        """Marker separation [dx, dy, dz]."""
        return self._point_residual()


class RevoluteJoint(_PointJoint):
    """
    Revolute joint: coincident markers and a common rotation axis.

    The axis is the z axis of a frame built at the anchor; the residual
    holds the marker separation plus the components of body1's axis along
    body2's x and y frame axes.
    """

    joint_type = JointType.REVOLUTE

    def __init__(self, name: str, body1: Body, body2: Body,
                 location: Union[np.ndarray, Tuple[float, float, float]],
                 axis: Union[np.ndarray, Tuple[float, float, float]]):
        """
        Initialize a revolute joint.

        Args:
            name: Joint identifier
            body1: First body
            body2: Second body
            location: Global anchor point
            axis: Global rotation axis direction
        """
        super().__init__(name, body1, body2, location)
        frame = frame_from_axis(axis)
        self._frame1 = body1.get_rotation_matrix().T @ frame
        self._frame2 = body2.get_rotation_matrix().T @ frame

    def get_axis(self) -> np.ndarray:
        """Get the global rotation axis (as seen by body1)."""
        return self.body1.get_rotation_matrix() @ self._frame1[:, 2]

    def get_relative_angular_speed(self) -> float:
        """Angular speed of body2 relative to body1 about the joint axis (rad/s)."""
        relative = self.body2.get_angular_velocity() - self.body1.get_angular_velocity()
        return float(np.dot(relative, self.get_axis()))

    def evaluate(self) -> np.ndarray:
        """Marker separation plus two axis misalignment terms."""
        z1 = self.body1.get_rotation_matrix() @ self._frame1[:, 2]
        frame2 = self.body2.get_rotation_matrix() @ self._frame2
        return np.concatenate([self._point_residual(),
                               [np.dot(z1, frame2[:, 0]), np.dot(z1, frame2[:, 1])]])


class UniversalJoint(_PointJoint):
    """
    Universal (Cardan) joint: coincident markers, cross axes kept perpendicular.

    axis1 is fixed in body1, axis2 in body2.
    """

    joint_type = JointType.UNIVERSAL

    def __init__(self, name: str, body1: Body, body2: Body,
                 location: Union[np.ndarray, Tuple[float, float, float]],
                 axis1: Union[np.ndarray, Tuple[float, float, float]],
                 axis2: Union[np.ndarray, Tuple[float, float, float]]):
        """
        Initialize a universal joint.

        Args:
            name: Joint identifier
            body1: First body
            body2: Second body
            location: Global anchor point
            axis1: Global direction of the cross axis fixed in body1
            axis2: Global direction of the cross axis fixed in body2

        Raises:
            ValueError: If the two axes are not perpendicular
        """
        super().__init__(name, body1, body2, location)
        a1 = unit_vector(axis1, "axis1")
        a2 = unit_vector(axis2, "axis2")
        if abs(np.dot(a1, a2)) > 1e-6:
            raise ValueError(f"Universal joint '{name}' axes must be perpendicular")
        self._axis1 = body1.direction_to_local(a1)
        self._axis2 = body2.direction_to_local(a2)

    def evaluate(self) -> np.ndarray:
        """Marker separation plus the cosine between the cross axes."""
        a1 = self.body1.direction_to_global(self._axis1)
        a2 = self.body2.direction_to_global(self._axis2)
        return np.concatenate([self._point_residual(), [np.dot(a1, a2)]])


class DistanceJoint(Joint):
    """
    Distance constraint between a point on body1 and a point on body2.

    Models a massless two-force link (tie rod, reduced control arm). The
    imposed distance is the initial distance between the two points and
    never changes; the endpoint on body1 may be moved (steering).
    """

    joint_type = JointType.DISTANCE

    def __init__(self, name: str, body1: Body, body2: Body,
                 point1: Union[np.ndarray, Tuple[float, float, float]],
                 point2: Union[np.ndarray, Tuple[float, float, float]]):
        """
        Initialize a distance constraint.

        Args:
            name: Joint identifier
            body1: Body carrying the first endpoint
            body2: Body carrying the second endpoint
            point1: Global position of the first endpoint
            point2: Global position of the second endpoint

        Raises:
            ValueError: If the endpoints coincide
        """
        super().__init__(name, body1, body2)
        p1 = as_vector3(point1, "point1")
        p2 = as_vector3(point2, "point2")
        self.distance = float(np.linalg.norm(p2 - p1))
        if self.distance < 1e-9:
            raise ValueError(f"Distance constraint '{name}' endpoints are too close together (zero length)")
        self._endpoint1 = body1.point_to_local(p1)
        self._endpoint2 = body2.point_to_local(p2)

    def get_endpoint1_local(self) -> np.ndarray:
        """Get the first endpoint in body1 coordinates."""
        return self._endpoint1.copy()

    def set_endpoint1_local(self, point: Union[np.ndarray, Tuple[float, float, float]]) -> None:
        """Move the first endpoint (body1 coordinates); the imposed distance is unchanged."""
        self._endpoint1 = as_vector3(point, "endpoint1")

    def get_endpoint2_local(self) -> np.ndarray:
        """Get the second endpoint in body2 coordinates."""
        return self._endpoint2.copy()

    def get_endpoint1(self) -> np.ndarray:
        """Get the global position of the first endpoint."""
        return self.body1.point_to_global(self._endpoint1)

    def get_endpoint2(self) -> np.ndarray:
        """Get the global position of the second endpoint."""
        return self.body2.point_to_global(self._endpoint2)

    def get_current_distance(self) -> float:
        """Get the current distance between the endpoints (m)."""
        return float(np.linalg.norm(self.get_endpoint2() - self.get_endpoint1()))

    def evaluate(self) -> np.ndarray:
        """Distance error [current - imposed]."""
        return np.array([self.get_current_distance() - self.distance])

    def __repr__(self) -> str:
        return (f"DistanceJoint('{self.name}', "
                f"target={self.distance:.4f} m, "
                f"current={self.get_current_distance():.4f} m)")
