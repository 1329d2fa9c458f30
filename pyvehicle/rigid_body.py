"""
Rigid body used by the vehicle subsystem templates.

A Body carries mass properties, a pose (position of its reference frame and
orientation), linear and angular velocity, and force/torque accumulators
that collect loads applied during a simulation step. Bodies are attached to
a Scene, which owns the bookkeeping of the mechanical system.

Positions are stored in meters (m), mass in kilograms (kg). Velocities,
forces and torques are expressed in the global frame.
"""

import numpy as np
from typing import List, Optional, Tuple, Union
from scipy.spatial.transform import Rotation

from .geometry_utils import as_vector3
from .units import to_m, from_m, to_kg


def _inertia_matrix(inertia: Union[np.ndarray, Tuple[float, float, float]]) -> np.ndarray:
    """
    Build and validate a 3x3 inertia tensor.

    Args:
        inertia: Diagonal moments [Ixx, Iyy, Izz] or a full symmetric 3x3 tensor

    Returns:
        3x3 inertia tensor

    Raises:
        ValueError: If the tensor is malformed, not symmetric or not positive definite
    """
    array = np.array(inertia, dtype=float)
    if array.shape == (3,):
        array = np.diag(array)
    elif array.shape != (3, 3):
        raise ValueError(f"Inertia must be [Ixx, Iyy, Izz] or a 3x3 tensor, got shape {array.shape}")
    if not np.all(np.isfinite(array)):
        raise ValueError("Inertia must be finite")
    if not np.allclose(array, array.T):
        raise ValueError("Inertia tensor must be symmetric")
    if np.min(np.linalg.eigvalsh(array)) <= 0.0:
        raise ValueError(f"Inertia tensor must be positive definite, got {array.tolist()}")
    return array


class Body:
    """
    Rigid mass with pose, velocity and load accumulators.

    Attributes:
        name: Identifier for the body
        mass: Mass in kg
        inertia: 3x3 inertia tensor about the center of mass, body axes
        com: Center of mass in body coordinates (m)
        fixed: True if the body is fixed to ground
        scene: Scene the body is attached to (None if detached)
        assets: Visualization descriptors attached to the body
    """

    def __init__(self,
                 name: str,
                 mass: float,
                 inertia: Union[np.ndarray, Tuple[float, float, float]],
                 mass_unit: str = 'kg',
                 fixed: bool = False,
                 com: Optional[Union[np.ndarray, Tuple[float, float, float]]] = None):
        """
        Initialize a rigid body.

        Args:
            name: Identifier for the body
            mass: Mass of the body (must be positive)
            inertia: Diagonal moments or full 3x3 inertia tensor (kg*m^2)
            mass_unit: Unit of input mass (default: 'kg')
            fixed: Fix the body to ground (default: False)
            com: Center of mass in body coordinates, m (default: reference origin)

        Raises:
            ValueError: If mass or inertia are not physically valid
        """
        self.name = name
        mass_kg = float(to_kg(mass, mass_unit))
        if not np.isfinite(mass_kg) or mass_kg <= 0.0:
            raise ValueError(f"Body '{name}' mass must be positive, got {mass}")
        self.mass = mass_kg
        self.inertia = _inertia_matrix(inertia)
        self.fixed = fixed
        self.com = np.zeros(3) if com is None else as_vector3(com, "com")

        self.scene = None
        self.assets: List[object] = []

        self._position = np.zeros(3)
        self._rotation = Rotation.identity()
        self._linear_velocity = np.zeros(3)
        self._angular_velocity = np.zeros(3)

        self._force = np.zeros(3)
        self._torque = np.zeros(3)

    @property
    def is_attached(self) -> bool:
        """True if the body belongs to a scene."""
        return self.scene is not None

    # Pose

    def set_position(self, position: Union[np.ndarray, Tuple[float, float, float]], unit: str = 'm') -> None:
        """
        Set the position of the body reference frame.

        Args:
            position: New 3D position [x, y, z]
            unit: Unit of input position (default: 'm')
        """
        self._position = to_m(as_vector3(position, "position"), unit)

    def get_position(self, unit: str = 'm') -> np.ndarray:
        """
        Get the position of the body reference frame.

        Args:
            unit: Unit for output (default: 'm')

        Returns:
            Position in specified unit
        """
        return from_m(self._position.copy(), unit)

    def set_rotation(self, rotation: Union[Rotation, np.ndarray]) -> None:
        """
        Set the body orientation.

        Args:
            rotation: scipy Rotation, or a 3x3 rotation matrix
        """
        if isinstance(rotation, Rotation):
            self._rotation = rotation
        else:
            self._rotation = Rotation.from_matrix(np.array(rotation, dtype=float))

    def get_rotation(self) -> Rotation:
        """Get the body orientation."""
        return self._rotation

    def get_rotation_matrix(self) -> np.ndarray:
        """Get the body orientation as a 3x3 rotation matrix (columns = body axes)."""
        return self._rotation.as_matrix()

    def get_quaternion(self) -> np.ndarray:
        """Get the body orientation as a unit quaternion [x, y, z, w]."""
        return self._rotation.as_quat()

    # Velocity

    def set_linear_velocity(self, velocity: Union[np.ndarray, Tuple[float, float, float]]) -> None:
        """Set the linear velocity of the reference frame origin (m/s)."""
        self._linear_velocity = as_vector3(velocity, "velocity")

    def get_linear_velocity(self) -> np.ndarray:
        """Get the linear velocity of the reference frame origin (m/s)."""
        return self._linear_velocity.copy()

    def set_angular_velocity(self, omega: Union[np.ndarray, Tuple[float, float, float]]) -> None:
        """Set the angular velocity (rad/s, global frame)."""
        self._angular_velocity = as_vector3(omega, "angular velocity")

    def get_angular_velocity(self) -> np.ndarray:
        """Get the angular velocity (rad/s, global frame)."""
        return self._angular_velocity.copy()

    def get_point_velocity(self, point: Union[np.ndarray, Tuple[float, float, float]]) -> np.ndarray:
        """
        Get the velocity of a material point of the body.

        Args:
            point: Global position of the point (m)

        Returns:
            Global velocity of the point (m/s)
        """
        arm = as_vector3(point, "point") - self._position
        return self._linear_velocity + np.cross(self._angular_velocity, arm)

    # Frame transformations

    def point_to_global(self, local_point: Union[np.ndarray, Tuple[float, float, float]]) -> np.ndarray:
        """Transform a point from body coordinates to global coordinates."""
        return self._position + self._rotation.apply(as_vector3(local_point, "point"))

    def point_to_local(self, global_point: Union[np.ndarray, Tuple[float, float, float]]) -> np.ndarray:
        """Transform a point from global coordinates to body coordinates."""
        return self._rotation.inv().apply(as_vector3(global_point, "point") - self._position)

    def direction_to_global(self, local_direction: Union[np.ndarray, Tuple[float, float, float]]) -> np.ndarray:
        """Rotate a direction from body coordinates to global coordinates."""
        return self._rotation.apply(as_vector3(local_direction, "direction"))

    def direction_to_local(self, global_direction: Union[np.ndarray, Tuple[float, float, float]]) -> np.ndarray:
        """Rotate a direction from global coordinates to body coordinates."""
        return self._rotation.inv().apply(as_vector3(global_direction, "direction"))

    # Mass properties

    def get_com_position(self) -> np.ndarray:
        """Get the center of mass position (m, global)."""
        return self.point_to_global(self.com)

    def get_axial_inertia(self, axis: Union[np.ndarray, Tuple[float, float, float]]) -> float:
        """
        Moment of inertia about a global direction through the center of mass.

        Args:
            axis: Unit direction in global coordinates

        Returns:
            Axial moment of inertia in kg*m^2
        """
        axis_vec = as_vector3(axis, "axis")
        R = self._rotation.as_matrix()
        return float(axis_vec @ (R @ self.inertia @ R.T) @ axis_vec)

    def add_mass(self, mass: float, inertia: Union[np.ndarray, Tuple[float, float, float]]) -> None:
        """
        Lump an additional rigidly attached mass onto this body.

        The added inertia is expressed in body axes about the center of mass
        (e.g. a wheel centered on its spindle).

        Args:
            mass: Additional mass in kg (must be positive)
            inertia: Additional diagonal moments or 3x3 tensor
        """
        if not np.isfinite(mass) or mass <= 0.0:
            raise ValueError(f"Added mass must be positive, got {mass}")
        self.mass += float(mass)
        self.inertia = self.inertia + _inertia_matrix(inertia)

    # Load accumulators

    def accumulate_force(self,
                         force: Union[np.ndarray, Tuple[float, float, float]],
                         point: Optional[Union[np.ndarray, Tuple[float, float, float]]] = None) -> None:
        """
        Add a force to the accumulator.

        Args:
            force: Global force vector (N)
            point: Global application point; the reference origin if None
        """
        force_vec = as_vector3(force, "force")
        self._force += force_vec
        if point is not None:
            arm = as_vector3(point, "point") - self._position
            self._torque += np.cross(arm, force_vec)

    def accumulate_torque(self, torque: Union[np.ndarray, Tuple[float, float, float]]) -> None:
        """Add a global torque (N*m) to the accumulator."""
        self._torque += as_vector3(torque, "torque")

    def empty_accumulators(self) -> None:
        """Reset the force and torque accumulators."""
        self._force = np.zeros(3)
        self._torque = np.zeros(3)

    def get_applied_force(self) -> np.ndarray:
        """Get the accumulated force (N, global)."""
        return self._force.copy()

    def get_applied_torque(self) -> np.ndarray:
        """Get the accumulated torque about the reference origin (N*m, global)."""
        return self._torque.copy()

    def add_asset(self, asset: object) -> None:
        """Attach a visualization descriptor."""
        self.assets.append(asset)

    def __repr__(self) -> str:
        return (f"Body('{self.name}', mass={self.mass:.3f} kg, "
                f"position={self._position}, fixed={self.fixed})")


if __name__ == "__main__":
    print("=" * 70)
    print("RIGID BODY TEST")
    print("=" * 70)

    body = Body("test_body", mass=10.0, inertia=[1.0, 2.0, 3.0])
    body.set_position([0.0, 1.0, 0.5])
    body.set_rotation(Rotation.from_euler('z', 90, degrees=True))
    print(f"\n{body}")

    local = np.array([1.0, 0.0, 0.0])
    print(f"Local {local} -> global {body.point_to_global(local)}")

    body.set_angular_velocity([0.0, 0.0, 2.0])
    print(f"Point velocity: {body.get_point_velocity(body.point_to_global(local))}")

    print("\n--- Testing error handling ---")
    try:
        Body("bad", mass=0.0, inertia=[1, 1, 1])
        print("ERROR: Should have raised ValueError")
    except ValueError as e:
        print(f"✓ Correctly caught error: {e}")

    print("\n✓ All tests completed successfully!")
