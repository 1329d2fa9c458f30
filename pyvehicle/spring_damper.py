import numpy as np
from typing import Tuple, Union

from .geometry_utils import as_vector3
from .rigid_body import Body
from .units import from_m


class SpringDamper:
    """
    Linear translational spring-damper between two attachment points on two bodies.

    The force acts along the line between the points:

        force = -k * (length - rest_length) - c * length_rate

    Sign conventions:
    - Positive length change = extension (points move apart)
    - Positive force = pushes the points apart (compression)
    - Negative force = pulls the points together (tension)

    The force therefore always opposes the displacement from rest length and
    the rate of length change. Coefficients and rest length are fixed at
    construction.

    All positions are stored internally in meters (m), forces in newtons (N).
    """

    def __init__(self,
                 name: str,
                 body1: Body,
                 body2: Body,
                 point1: Union[np.ndarray, Tuple[float, float, float]],
                 point2: Union[np.ndarray, Tuple[float, float, float]],
                 spring_coefficient: float,
                 damping_coefficient: float,
                 rest_length: float):
        """
        Initialize a spring-damper.

        Args:
            name: Identifier for the element
            body1: Body carrying the first attachment point
            body2: Body carrying the second attachment point
            point1: Global position of the first attachment point
            point2: Global position of the second attachment point
            spring_coefficient: Stiffness k in N/m (must be positive)
            damping_coefficient: Damping c in N*s/m (must be non-negative)
            rest_length: Free length in m (must be positive)

        Raises:
            ValueError: If a coefficient or the rest length is invalid
        """
        if body1 is None or body2 is None:
            raise ValueError(f"Spring-damper '{name}' requires two bodies")
        if not np.isfinite(spring_coefficient) or spring_coefficient <= 0.0:
            raise ValueError(f"Spring coefficient must be positive, got {spring_coefficient}")
        if not np.isfinite(damping_coefficient) or damping_coefficient < 0.0:
            raise ValueError(f"Damping coefficient must be non-negative, got {damping_coefficient}")
        if not np.isfinite(rest_length) or rest_length <= 0.0:
            raise ValueError(f"Rest length must be positive, got {rest_length}")

        self.name = name
        self.body1 = body1
        self.body2 = body2
        self.scene = None

        self._spring_coefficient = float(spring_coefficient)
        self._damping_coefficient = float(damping_coefficient)
        self._rest_length = float(rest_length)

        self._point1 = body1.point_to_local(as_vector3(point1, "point1"))
        self._point2 = body2.point_to_local(as_vector3(point2, "point2"))

    @property
    def spring_coefficient(self) -> float:
        """Stiffness in N/m."""
        return self._spring_coefficient

    @property
    def damping_coefficient(self) -> float:
        """Damping in N*s/m."""
        return self._damping_coefficient

    @property
    def rest_length(self) -> float:
        """Free length in m."""
        return self._rest_length

    def get_endpoints(self) -> Tuple[np.ndarray, np.ndarray]:
        """Get the global positions of both attachment points."""
        return self.body1.point_to_global(self._point1), self.body2.point_to_global(self._point2)

    def get_length(self, unit: str = 'm') -> float:
        """
        Get the current distance between the attachment points.

        Args:
            unit: Unit for output (default: 'm')

        Returns:
            Length in specified unit
        """
        p1, p2 = self.get_endpoints()
        return from_m(float(np.linalg.norm(p2 - p1)), unit)

    def get_length_change(self, unit: str = 'm') -> float:
        """Get the change in length from rest length (positive = extension)."""
        return from_m(self.get_length() - self._rest_length, unit)

    def get_axis(self) -> np.ndarray:
        """Unit vector from the first to the second attachment point."""
        p1, p2 = self.get_endpoints()
        direction = p2 - p1
        length = np.linalg.norm(direction)
        if length < 1e-12:
            return np.array([0.0, 0.0, 1.0])  # Default direction if collapsed
        return direction / length

    def get_length_rate(self) -> float:
        """Get the rate of change of length (m/s, positive = extending)."""
        p1, p2 = self.get_endpoints()
        relative_velocity = self.body2.get_point_velocity(p2) - self.body1.get_point_velocity(p1)
        return float(np.dot(relative_velocity, self.get_axis()))

    def get_force(self) -> float:
        """
        Get the current scalar force.

        Returns:
            Force in N (positive pushes the points apart)
        """
        extension = self.get_length() - self._rest_length
        return (-self._spring_coefficient * extension
                - self._damping_coefficient * self.get_length_rate())

    def get_force_vector(self) -> np.ndarray:
        """Get the force acting on body2 at its attachment point (N, global)."""
        return self.get_force() * self.get_axis()

    def apply_forces(self) -> None:
        """Accumulate the element force on both bodies (equal and opposite)."""
        p1, p2 = self.get_endpoints()
        force = self.get_force_vector()
        self.body2.accumulate_force(force, p2)
        self.body1.accumulate_force(-force, p1)

    def __repr__(self) -> str:
        return (f"SpringDamper('{self.name}', "
                f"k={self._spring_coefficient:.1f} N/m, "
                f"c={self._damping_coefficient:.1f} N*s/m, "
                f"rest_length={self._rest_length:.4f} m, "
                f"length={self.get_length():.4f} m)")
