"""
Shared construction algorithm for suspension templates.

A suspension is built from a parameter object holding a hardpoint table for
the right side, masses, inertias and spring/damper coefficients. The left
side always uses the mirrored table, and both sides run through the same
per-side routine, so the two halves of a suspension can never diverge.

Suspension frame (same orientation as the chassis frame):
- x: longitudinal (+ rear)
- y: lateral (+ right)
- z: vertical (+ up)

Subclasses provide the per-kind topology:
- _create_side(): bodies owned by one side, created at construction
- _initialize_side(): positions bodies and creates joints and force elements
"""

import logging
import numpy as np
from abc import ABC, abstractmethod
from dataclasses import MISSING, dataclass, field, fields
from enum import Enum
from typing import Dict, List, Optional, TextIO, Tuple, Type, Union

from scipy.spatial.transform import Rotation

from .constraints import DistanceJoint, Joint, RevoluteJoint
from .geometry_utils import as_vector3
from .hardpoints import HardpointTable
from .rigid_body import Body
from .shafts import Shaft, ShaftBodyCoupling
from .spring_damper import SpringDamper
from .units import from_m
from .vehicle_types import Side, VisualizationType

logger = logging.getLogger(__name__)

# Spin axis of every spindle, in chassis coordinates
SPINDLE_AXIS = np.array([0.0, 1.0, 0.0])

SIDE_SUFFIX = {Side.LEFT: "_L", Side.RIGHT: "_R"}


class SuspensionKind(Enum):
    """Suspension topology variants."""
    SOLID_AXLE = "solid_axle"
    DOUBLE_WISHBONE_REDUCED = "double_wishbone_reduced"


@dataclass
class TireForce:
    """
    Tire force and moment acting on a wheel spindle.

    Attributes:
        force: Force vector in N (global)
        moment: Moment vector in N*m (global)
        point: Application point (global); the spindle center if None
    """
    force: np.ndarray = field(default_factory=lambda: np.zeros(3))
    moment: np.ndarray = field(default_factory=lambda: np.zeros(3))
    point: Optional[np.ndarray] = None

    def is_finite(self) -> bool:
        """True if every component is a finite number."""
        values = [self.force, self.moment] + ([] if self.point is None else [self.point])
        return all(np.all(np.isfinite(np.asarray(value, dtype=float))) for value in values)


def require_positive(name: str, value: float) -> None:
    """Raise ValueError unless `value` is a finite positive number."""
    if not np.isfinite(value) or value <= 0.0:
        raise ValueError(f"{name} must be positive, got {value}")


def require_inertia(name: str, value: Union[np.ndarray, Tuple[float, float, float]]) -> None:
    """Raise ValueError unless `value` holds three finite positive principal moments."""
    moments = np.asarray(value, dtype=float)
    if moments.shape != (3,) or not np.all(np.isfinite(moments)) or np.any(moments <= 0.0):
        raise ValueError(f"{name} must be three positive moments [Ixx, Iyy, Izz], got {value}")


class SuspensionParameters:
    """
    Serialization shared by suspension parameter dataclasses.

    Subclasses are dataclasses with a `hardpoints` field and set
    `point_ids` to their hardpoint enumeration.
    """

    point_ids: Type[Enum]

    def _check_hardpoints(self) -> None:
        if not isinstance(self.hardpoints, HardpointTable) or self.hardpoints.point_ids is not self.point_ids:
            raise ValueError(f"{type(self).__name__} requires a {self.point_ids.__name__} hardpoint table")

    def _check_spring(self) -> None:
        require_positive("Spring coefficient", self.spring_coefficient)
        if not np.isfinite(self.damping_coefficient) or self.damping_coefficient < 0.0:
            raise ValueError(f"Damping coefficient must be non-negative, got {self.damping_coefficient}")
        require_positive("Spring rest length", self.spring_rest_length)
        require_positive("Axle inertia", self.axle_inertia)

    def to_dict(self, unit: str = 'm') -> dict:
        """
        Serialize the parameters to a dictionary.

        Args:
            unit: Unit for the serialized hardpoints (default: 'm')

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        data = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, HardpointTable):
                data[item.name] = value.to_dict(unit)
            elif isinstance(value, (tuple, list, np.ndarray)):
                data[item.name] = [float(v) for v in value]
            else:
                data[item.name] = float(value)
        return data

    @classmethod
    def from_dict(cls, data: dict):
        """
        Deserialize parameters from a dictionary.

        Raises:
            KeyError: If required fields are missing
            ValueError: If data is invalid
        """
        values = {}
        for item in fields(cls):
            if item.name not in data and item.default is not MISSING:
                continue
            if item.name == 'hardpoints':
                values[item.name] = HardpointTable.from_dict(cls.point_ids, data['hardpoints'])
            elif isinstance(data[item.name], list):
                values[item.name] = tuple(data[item.name])
            else:
                values[item.name] = data[item.name]
        return cls(**values)


class Suspension(ABC):
    """
    Base class for a two-sided suspension subsystem.

    Per-side items are stored in dictionaries keyed by Side. Every scene item
    created by the suspension is owned by it and released by destroy().

    Attributes:
        name: Identifier used as prefix for all created items
        parameters: Variant parameter object
        steerable: Whether apply_steering() is allowed
        driven: Whether axle shafts are created for the driveline
        visualization: Kind of visualization assets to attach
        location: Mount location in chassis coordinates (m), set by initialize
    """

    kind: SuspensionKind

    def __init__(self,
                 name: str,
                 parameters: SuspensionParameters,
                 steerable: bool = False,
                 driven: bool = False,
                 visualization: VisualizationType = VisualizationType.NONE):
        self.name = name
        self.parameters = parameters
        self.steerable = steerable
        self.driven = driven
        self.visualization = visualization

        self.chassis: Optional[Body] = None
        self.location: Optional[np.ndarray] = None

        self.spindle: Dict[Side, Body] = {}
        self.axle: Dict[Side, Shaft] = {}
        self.coupling: Dict[Side, ShaftBodyCoupling] = {}
        self.revolute: Dict[Side, RevoluteJoint] = {}
        self.tierod: Dict[Side, DistanceJoint] = {}
        self.spring: Dict[Side, SpringDamper] = {}
        self._tierod_marker: Dict[Side, np.ndarray] = {}
        self._side_joints: Dict[Side, List[Joint]] = {Side.LEFT: [], Side.RIGHT: []}

        self._owned: List[object] = []
        self._scene = None

        for side in Side:
            self.spindle[side] = Body(f"{name}_spindle{SIDE_SUFFIX[side]}",
                                      parameters.spindle_mass, parameters.spindle_inertia)
            self._create_side(side, SIDE_SUFFIX[side])

    @property
    def is_initialized(self) -> bool:
        """True once initialize() has been called."""
        return self.chassis is not None

    @abstractmethod
    def _create_side(self, side: Side, suffix: str) -> None:
        """Create the bodies of one side (not yet positioned nor attached)."""
        pass

    @abstractmethod
    def _initialize_side(self, side: Side, chassis: Body, points: Dict[Enum, np.ndarray]) -> None:
        """Position the bodies of one side and create its joints and force elements."""
        pass

    def _initialize_shared(self, chassis: Body, points: Dict[Enum, np.ndarray]) -> None:
        """Position bodies shared by both sides (right-side global points)."""
        pass

    def _own(self, item):
        self._scene.add(item)
        self._owned.append(item)
        return item

    def _place(self, body: Body, position: np.ndarray, rotation: Rotation) -> Body:
        body.set_position(position)
        body.set_rotation(rotation)
        return self._own(body)

    def _add_joint(self, side: Side, joint: Joint) -> Joint:
        self._side_joints[side].append(self._own(joint))
        return joint

    def initialize(self, chassis: Body, location: Union[np.ndarray, Tuple[float, float, float]]) -> None:
        """
        Attach the suspension to a chassis at a mount location.

        Local hardpoints (right table, and its mirror for the left side) are
        translated by `location` and transformed through the chassis frame.

        Args:
            chassis: Chassis body, attached to a scene
            location: Suspension frame origin in chassis coordinates (m)

        Raises:
            RuntimeError: If the chassis is missing or detached, or the
                suspension is already initialized
        """
        if self.is_initialized:
            raise RuntimeError(f"Suspension '{self.name}' is already initialized")
        if chassis is None or chassis.scene is None:
            raise RuntimeError(f"Suspension '{self.name}' requires a chassis attached to a scene")

        self.chassis = chassis
        self.location = as_vector3(location, "location")
        self._scene = chassis.scene

        right = self.parameters.hardpoints
        tables = {Side.RIGHT: right, Side.LEFT: right.mirror()}
        global_points = {
            side: {point_id: chassis.point_to_global(position)
                   for point_id, position in table.translated(self.location).items()}
            for side, table in tables.items()
        }

        self._initialize_shared(chassis, global_points[Side.RIGHT])
        for side in Side:
            self._initialize_side(side, chassis, global_points[side])
            self._tierod_marker[side] = self.tierod[side].get_endpoint1_local()
            if self.driven:
                self._initialize_axle(side)

        logger.debug("Initialized %s suspension '%s' at %s (%d items)",
                     self.kind.value, self.name, self.location, len(self._owned))

    def _initialize_axle(self, side: Side) -> None:
        suffix = SIDE_SUFFIX[side]
        axle = self._own(Shaft(f"{self.name}_axle{suffix}", self.parameters.axle_inertia))
        self.axle[side] = axle
        self.coupling[side] = self._own(
            ShaftBodyCoupling(f"{self.name}_axle_to_spindle{suffix}", axle, self.spindle[side], SPINDLE_AXIS))

    def _require_initialized(self) -> None:
        if not self.is_initialized:
            raise RuntimeError(f"Suspension '{self.name}' is not initialized")

    # Spindle queries

    def get_spindle(self, side: Side) -> Body:
        """Get the spindle body of one side."""
        return self.spindle[Side(side)]

    def get_spindle_pos(self, side: Side) -> np.ndarray:
        """Get the spindle position (m, global)."""
        return self.get_spindle(side).get_position()

    def get_spindle_rot(self, side: Side) -> Rotation:
        """Get the spindle orientation."""
        return self.get_spindle(side).get_rotation()

    def get_spindle_lin_vel(self, side: Side) -> np.ndarray:
        """Get the spindle linear velocity (m/s, global)."""
        return self.get_spindle(side).get_linear_velocity()

    def get_spindle_ang_vel(self, side: Side) -> np.ndarray:
        """Get the spindle angular velocity (rad/s, global)."""
        return self.get_spindle(side).get_angular_velocity()

    def get_axle(self, side: Side) -> Shaft:
        """
        Get the axle shaft of one side.

        Raises:
            RuntimeError: If the suspension is not driven or not initialized
        """
        if not self.driven:
            raise RuntimeError(f"Suspension '{self.name}' is not driven and has no axle shafts")
        self._require_initialized()
        return self.axle[Side(side)]

    def get_axle_speed(self, side: Side) -> float:
        """
        Get the wheel spin speed (rad/s).

        The axle shaft speed for a driven suspension, otherwise the spindle
        angular velocity about its spin axis.
        """
        side = Side(side)
        if self.driven and side in self.axle:
            return self.axle[side].get_speed()
        spindle = self.spindle[side]
        axis = spindle.direction_to_global(SPINDLE_AXIS)
        return float(np.dot(spindle.get_angular_velocity(), axis))

    def get_revolute(self, side: Side) -> RevoluteJoint:
        """Get the spindle revolute joint of one side (brake attachment)."""
        self._require_initialized()
        return self.revolute[Side(side)]

    # Inputs

    def apply_tire_force(self, side: Side, tire_force: TireForce) -> None:
        """
        Replace the loads on a spindle with a tire force and moment.

        Args:
            side: Suspension side
            tire_force: Force, moment and optional application point
        """
        spindle = self.get_spindle(side)
        spindle.empty_accumulators()
        point = spindle.get_position() if tire_force.point is None else tire_force.point
        spindle.accumulate_force(tire_force.force, point)
        spindle.accumulate_torque(tire_force.moment)

    def apply_steering(self, displ: float) -> None:
        """
        Shift the chassis-side tie-rod anchors along the lateral axis.

        The tie-rod distance constraints are kept; only their chassis
        endpoints move, relative to the initial anchors.

        Args:
            displ: Lateral displacement in m (0 restores the initial anchors)

        Raises:
            RuntimeError: If the suspension is not steerable or not initialized
        """
        if not self.steerable:
            raise RuntimeError(f"Suspension '{self.name}' is not steerable")
        self._require_initialized()
        shift = np.array([0.0, float(displ), 0.0])
        for side in Side:
            self.tierod[side].set_endpoint1_local(self._tierod_marker[side] + shift)

    # Spring queries

    def get_spring_force(self, side: Side) -> float:
        """Get the spring-damper force (N, positive pushes the ends apart)."""
        self._require_initialized()
        return self.spring[Side(side)].get_force()

    def get_spring_length(self, side: Side) -> float:
        """Get the spring-damper length (m)."""
        self._require_initialized()
        return self.spring[Side(side)].get_length()

    def get_joints(self, side: Side) -> List[Joint]:
        """Get the joints created for one side."""
        return list(self._side_joints[Side(side)])

    # Diagnostics

    def log_hardpoint_locations(self, ref: Union[np.ndarray, Tuple[float, float, float]],
                                out: TextIO, inches: bool = False) -> None:
        """
        Write the right-side hardpoints, offset by a reference point.

        Args:
            ref: Reference point, in the output unit
            out: Text stream receiving the report
            inches: Report in inches instead of meters
        """
        unit = 'in' if inches else 'm'
        offset = as_vector3(ref, "ref")
        for point_id, position in self.parameters.hardpoints.items():
            x, y, z = offset + from_m(position, unit)
            print(f"{point_id.name:>12}  {x:7.3f}  {y:7.3f}  {z:7.3f}", file=out)

    def log_constraint_violations(self, side: Side, out: TextIO) -> None:
        """
        Write the violation vector of every joint of one side.

        Args:
            side: Suspension side
            out: Text stream receiving the report
        """
        self._require_initialized()
        for joint in self._side_joints[Side(side)]:
            values = "  ".join(f"{value:.3e}" for value in joint.get_violation())
            print(f"{joint.name:>28}  {values}", file=out)

    def destroy(self) -> None:
        """Remove every owned item from the scene."""
        for item in reversed(self._owned):
            if item.scene is not None:
                item.scene.remove(item)
        self._owned = []

        # Bodies are kept and can be placed again by initialize()
        self.chassis = None
        self.location = None
        self._scene = None
        self.axle = {}
        self.coupling = {}
        self.revolute = {}
        self.tierod = {}
        self.spring = {}
        self._tierod_marker = {}
        self._side_joints = {Side.LEFT: [], Side.RIGHT: []}
        logger.debug("Destroyed suspension '%s'", self.name)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}('{self.name}', steerable={self.steerable}, "
                f"driven={self.driven}, initialized={self.is_initialized})")
