"""
One-dimensional rotational elements for driveline modeling.

A Shaft is a single rotational degree of freedom with scalar inertia.
Shaft relations impose linear velocity-level constraints between shafts:

    sum_i(c_i * omega_i) = 0

The constraint multiplier (lambda) computed by the scene gives the reaction
torque on each member shaft as c_i * lambda. Ratios are fixed at
construction.
"""

import numpy as np
from abc import ABC
from typing import Sequence, Tuple, Union

from .geometry_utils import unit_vector
from .rigid_body import Body


class Shaft:
    """
    Rotational degree of freedom with scalar inertia.

    Attributes:
        name: Identifier for the shaft
        inertia: Rotational inertia in kg*m^2
        fixed: True if the shaft cannot rotate
        speed: Angular speed in rad/s
        angle: Accumulated rotation angle in rad
        acceleration: Angular acceleration from the last shaft solve (rad/s^2)
    """

    def __init__(self, name: str, inertia: float, fixed: bool = False):
        """
        Initialize a shaft.

        Args:
            name: Identifier for the shaft
            inertia: Rotational inertia in kg*m^2 (must be positive)
            fixed: Fix the shaft to ground (default: False)

        Raises:
            ValueError: If the inertia is not positive
        """
        if not np.isfinite(inertia) or inertia <= 0.0:
            raise ValueError(f"Shaft '{name}' inertia must be positive, got {inertia}")
        self.name = name
        self.inertia = float(inertia)
        self.fixed = fixed
        self.speed = 0.0
        self.angle = 0.0
        self.acceleration = 0.0
        self.scene = None
        self._applied_torque = 0.0

    def set_speed(self, speed: float) -> None:
        """Set the angular speed (rad/s)."""
        self.speed = float(speed)

    def get_speed(self) -> float:
        """Get the angular speed (rad/s)."""
        return self.speed

    def set_applied_torque(self, torque: float) -> None:
        """Set the external torque acting on the shaft (N*m); persists until changed."""
        self._applied_torque = float(torque)

    def get_applied_torque(self) -> float:
        """Get the external torque acting on the shaft (N*m)."""
        return self._applied_torque

    def __repr__(self) -> str:
        return f"Shaft('{self.name}', inertia={self.inertia:.4f} kg*m^2, speed={self.speed:.4f} rad/s)"


class ShaftRelation(ABC):
    """
    Base class for linear kinematic relations between shafts.

    Attributes:
        name: Relation identifier
        shafts: Member shafts, in coefficient order
    """

    def __init__(self, name: str, shafts: Sequence[Shaft], coefficients: Sequence[float]):
        for shaft in shafts:
            if shaft is None:
                raise ValueError(f"Shaft relation '{name}' requires all member shafts")
        if len(set(id(shaft) for shaft in shafts)) != len(shafts):
            raise ValueError(f"Shaft relation '{name}' members must be distinct shafts")
        self.name = name
        self.shafts: Tuple[Shaft, ...] = tuple(shafts)
        self._coefficients = np.array(coefficients, dtype=float)
        self.scene = None
        self.multiplier = 0.0

    def get_coefficients(self) -> np.ndarray:
        """Get the constraint coefficients c_i (one per member shaft)."""
        return self._coefficients.copy()

    def get_violation(self) -> float:
        """Velocity-level violation sum_i(c_i * omega_i)."""
        speeds = np.array([shaft.speed for shaft in self.shafts])
        return float(np.dot(self._coefficients, speeds))

    def get_torque_reaction(self, index: int) -> float:
        """Reaction torque on the member shaft at `index` (N*m)."""
        return float(self._coefficients[index] * self.multiplier)

    def __repr__(self) -> str:
        members = ", ".join(shaft.name for shaft in self.shafts)
        return f"{self.__class__.__name__}('{self.name}', [{members}])"


class ShaftsGear(ShaftRelation):
    """
    Fixed transmission ratio between two shafts: omega2 = ratio * omega1.
    """

    def __init__(self, name: str, shaft1: Shaft, shaft2: Shaft, ratio: float):
        """
        Initialize a gear pair.

        Args:
            name: Relation identifier
            shaft1: Input shaft
            shaft2: Output shaft
            ratio: Transmission ratio omega2 / omega1 (non-zero)

        Raises:
            ValueError: If the ratio is zero or not finite
        """
        if not np.isfinite(ratio) or ratio == 0.0:
            raise ValueError(f"Gear '{name}' transmission ratio must be non-zero, got {ratio}")
        super().__init__(name, [shaft1, shaft2], [ratio, -1.0])
        self.ratio = float(ratio)

    def get_torque_reaction_on1(self) -> float:
        """Reaction torque on the input shaft (N*m)."""
        return self.get_torque_reaction(0)

    def get_torque_reaction_on2(self) -> float:
        """Reaction torque on the output shaft (N*m)."""
        return self.get_torque_reaction(1)


class ShaftsGearboxAngled(ShaftsGear):
    """
    Gear pair between two non-parallel shafts supported by a truss body.

    Models bevel (conical) gears: besides the ratio constraint, the housing
    receives the reaction of the torques transmitted to both shafts, about
    the two shaft directions fixed in the truss body.
    """

    def __init__(self, name: str, shaft1: Shaft, shaft2: Shaft, truss: Body,
                 dir1: Union[np.ndarray, Tuple[float, float, float]],
                 dir2: Union[np.ndarray, Tuple[float, float, float]],
                 ratio: float):
        """
        Initialize an angled gearbox.

        Args:
            name: Relation identifier
            shaft1: Input shaft
            shaft2: Output shaft
            truss: Body carrying the gearbox housing
            dir1: Direction of shaft1 in truss coordinates
            dir2: Direction of shaft2 in truss coordinates
            ratio: Transmission ratio omega2 / omega1 (non-zero)
        """
        super().__init__(name, shaft1, shaft2, ratio)
        if truss is None:
            raise ValueError(f"Angled gearbox '{name}' requires a truss body")
        self.truss = truss
        self.dir1 = unit_vector(dir1, "dir1")
        self.dir2 = unit_vector(dir2, "dir2")

    def get_torque_reaction_on_truss(self) -> np.ndarray:
        """Reaction torque on the truss body (N*m, global frame)."""
        on_shafts = (self.get_torque_reaction_on1() * self.truss.direction_to_global(self.dir1) +
                     self.get_torque_reaction_on2() * self.truss.direction_to_global(self.dir2))
        return -on_shafts


class ShaftsPlanetary(ShaftRelation):
    """
    Three-member epicyclic relation (Willis formula).

    With carrier speed omega1 and member speeds omega2, omega3:

        omega3 - omega1 = t0 * (omega2 - omega1)

    An open differential uses t0 = -1, i.e. omega1 = (omega2 + omega3) / 2,
    and splits the carrier torque equally between shafts 2 and 3.
    """

    def __init__(self, name: str, carrier: Shaft, shaft2: Shaft, shaft3: Shaft, ordinary_ratio: float):
        """
        Initialize a planetary relation.

        Args:
            name: Relation identifier
            carrier: Carrier shaft
            shaft2: First member shaft
            shaft3: Second member shaft
            ordinary_ratio: Willis ratio t0 (finite, not 1)

        Raises:
            ValueError: If the ordinary ratio is degenerate
        """
        if not np.isfinite(ordinary_ratio) or ordinary_ratio == 1.0:
            raise ValueError(f"Planetary '{name}' ordinary ratio must be finite and != 1, got {ordinary_ratio}")
        super().__init__(name, [carrier, shaft2, shaft3],
                         [1.0 - ordinary_ratio, ordinary_ratio, -1.0])
        self.ordinary_ratio = float(ordinary_ratio)

    def get_torque_reaction_on1(self) -> float:
        """Reaction torque on the carrier (N*m)."""
        return self.get_torque_reaction(0)

    def get_torque_reaction_on2(self) -> float:
        """Reaction torque on the first member shaft (N*m)."""
        return self.get_torque_reaction(1)

    def get_torque_reaction_on3(self) -> float:
        """Reaction torque on the second member shaft (N*m)."""
        return self.get_torque_reaction(2)


class ShaftBodyCoupling:
    """
    1:1, backlash-free coupling between a shaft and a body spin axis.

    Used to connect a wheel spindle to its axle shaft: torques applied to
    the body about the axis drive the shaft, and the body spin about the
    axis follows the shaft speed.
    """

    def __init__(self, name: str, shaft: Shaft, body: Body,
                 axis: Union[np.ndarray, Tuple[float, float, float]]):
        """
        Initialize a shaft-body coupling.

        Args:
            name: Coupling identifier
            shaft: Coupled shaft
            body: Coupled body
            axis: Spin axis in body coordinates
        """
        if shaft is None or body is None:
            raise ValueError(f"Coupling '{name}' requires a shaft and a body")
        self.name = name
        self.shaft = shaft
        self.body = body
        self.axis = unit_vector(axis, "axis")
        self.scene = None

    def get_axis(self) -> np.ndarray:
        """Spin axis in global coordinates."""
        return self.body.direction_to_global(self.axis)

    def __repr__(self) -> str:
        return f"ShaftBodyCoupling('{self.name}', {self.shaft.name} <-> {self.body.name})"
