"""
2WD driveline built from shafts.

The driveshaft (input of the bevel gear pair) drives the rotating box of the
differential through an angled gearbox whose housing is the chassis, so the
pitch reaction of the bevel gears is transmitted to the chassis. An open
differential (planetary with ordinary ratio -1) splits the box torque
equally between the left and right axle shafts of the driven suspension.

    driveshaft --[conical gear]--> differential box --[differential]--> axle L
                                                                     \\-> axle R
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .geometry_utils import unit_vector
from .rigid_body import Body
from .shafts import Shaft, ShaftsGearboxAngled, ShaftsPlanetary
from .suspension import require_positive
from .vehicle_types import Axle, DriveType, Side, WheelId, wheel_location

logger = logging.getLogger(__name__)

# Willis ratio of an open differential
DIFFERENTIAL_RATIO = -1.0


@dataclass
class DrivelineParameters:
    """
    Driveline parameters.

    Attributes:
        driveshaft_inertia: Driveshaft inertia (kg*m^2)
        differentialbox_inertia: Differential box inertia (kg*m^2)
        conical_gear_ratio: Bevel gear ratio, box speed / driveshaft speed
    """
    driveshaft_inertia: float
    differentialbox_inertia: float
    conical_gear_ratio: float

    def __post_init__(self):
        require_positive("Driveshaft inertia", self.driveshaft_inertia)
        require_positive("Differential box inertia", self.differentialbox_inertia)
        if not np.isfinite(self.conical_gear_ratio) or self.conical_gear_ratio == 0.0:
            raise ValueError(f"Conical gear ratio must be non-zero, got {self.conical_gear_ratio}")

    def to_dict(self) -> dict:
        return {
            'driveshaft_inertia': float(self.driveshaft_inertia),
            'differentialbox_inertia': float(self.differentialbox_inertia),
            'conical_gear_ratio': float(self.conical_gear_ratio),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'DrivelineParameters':
        return cls(**{key: data[key] for key in ('driveshaft_inertia',
                                                 'differentialbox_inertia',
                                                 'conical_gear_ratio')})


class ShaftsDriveline2WD:
    """
    Shaft-based driveline for a single driven axle.

    Attributes:
        parameters: Driveline parameters
        drive_type: RWD or FWD (selects the driven axle)
        dir_motor_block: Driveshaft direction in chassis coordinates
        dir_axle: Axle direction in chassis coordinates
    """

    def __init__(self,
                 parameters: DrivelineParameters,
                 dir_motor_block: Union[np.ndarray, Tuple[float, float, float]] = (1.0, 0.0, 0.0),
                 dir_axle: Union[np.ndarray, Tuple[float, float, float]] = (0.0, 1.0, 0.0),
                 drive_type: DriveType = DriveType.RWD,
                 name: str = "driveline"):
        """
        Initialize the driveline template.

        Args:
            parameters: Driveline parameters
            dir_motor_block: Direction of the driveshaft (gearbox input), chassis coordinates
            dir_axle: Direction of the axle (gearbox output), chassis coordinates
            drive_type: Driven axle (default: RWD)
            name: Prefix for the created shafts and relations
        """
        self.name = name
        self.parameters = parameters
        self.drive_type = DriveType(drive_type)
        self.dir_motor_block = unit_vector(dir_motor_block, "dir_motor_block")
        self.dir_axle = unit_vector(dir_axle, "dir_axle")

        self.driveshaft: Optional[Shaft] = None
        self.differentialbox: Optional[Shaft] = None
        self.conical_gear: Optional[ShaftsGearboxAngled] = None
        self.differential: Optional[ShaftsPlanetary] = None

    @property
    def driven_axle(self) -> Axle:
        """Axle receiving the drive torque."""
        return Axle.REAR if self.drive_type == DriveType.RWD else Axle.FRONT

    @property
    def is_initialized(self) -> bool:
        return self.driveshaft is not None

    def initialize(self, chassis: Body, axle_left: Shaft, axle_right: Shaft) -> None:
        """
        Create the shaft network on the driven axle.

        Args:
            chassis: Chassis body (gearbox truss), attached to a scene
            axle_left: Left axle shaft of the driven suspension
            axle_right: Right axle shaft of the driven suspension

        Raises:
            RuntimeError: If already initialized, or the chassis or an axle shaft is not
                attached to the chassis scene
        """
        if self.is_initialized:
            raise RuntimeError(f"Driveline '{self.name}' is already initialized")
        if chassis is None or chassis.scene is None:
            raise RuntimeError(f"Driveline '{self.name}' requires a chassis attached to a scene")
        scene = chassis.scene
        for axle in (axle_left, axle_right):
            if axle is None or axle.scene is not scene:
                raise RuntimeError(f"Driveline '{self.name}' requires both axle shafts attached to the chassis scene")

        p = self.parameters

        # Connection of the driveline to the transmission
        self.driveshaft = Shaft(f"{self.name}_driveshaft", p.driveshaft_inertia)
        scene.add(self.driveshaft)

        # Rotating box of the differential
        self.differentialbox = Shaft(f"{self.name}_differentialbox", p.differentialbox_inertia)
        scene.add(self.differentialbox)

        self.conical_gear = ShaftsGearboxAngled(f"{self.name}_conicalgear",
                                                self.driveshaft, self.differentialbox, chassis,
                                                self.dir_motor_block, self.dir_axle,
                                                p.conical_gear_ratio)
        scene.add(self.conical_gear)

        # Carrier is the differential box
        self.differential = ShaftsPlanetary(f"{self.name}_differential",
                                            self.differentialbox, axle_left, axle_right,
                                            DIFFERENTIAL_RATIO)
        scene.add(self.differential)

        logger.debug("Initialized %s driveline '%s' (conical ratio %.4f)",
                     self.drive_type.name, self.name, p.conical_gear_ratio)

    def _require_initialized(self) -> None:
        if not self.is_initialized:
            raise RuntimeError(f"Driveline '{self.name}' is not initialized")

    def get_driveshaft(self) -> Shaft:
        """Get the driveshaft (powertrain connection)."""
        self._require_initialized()
        return self.driveshaft

    def get_driveshaft_speed(self) -> float:
        """Get the driveshaft angular speed (rad/s)."""
        return self.get_driveshaft().get_speed()

    def apply_driveshaft_torque(self, torque: float) -> None:
        """Set the torque delivered by the powertrain to the driveshaft (N*m)."""
        self.get_driveshaft().set_applied_torque(torque)

    def get_wheel_torque(self, which: WheelId) -> float:
        """
        Get the torque delivered to a wheel by the driveline (N*m).

        The negated reaction of the differential on the matching axle shaft
        for the driven axle, zero for the other axle.

        Raises:
            ValueError: If `which` is not a valid wheel identifier
        """
        axle, side = wheel_location(which)
        self._require_initialized()
        if axle != self.driven_axle:
            return 0.0
        # Member 2 of the differential is the left axle, member 3 the right
        if side == Side.LEFT:
            return -self.differential.get_torque_reaction_on2()
        return -self.differential.get_torque_reaction_on3()

    def destroy(self) -> None:
        """Remove the owned shafts and relations from the scene."""
        for item in (self.differential, self.conical_gear, self.differentialbox, self.driveshaft):
            if item is not None and item.scene is not None:
                item.scene.remove(item)
        self.driveshaft = self.differentialbox = None
        self.conical_gear = self.differential = None

    def __repr__(self) -> str:
        return (f"ShaftsDriveline2WD('{self.name}', {self.drive_type.name}, "
                f"conical_ratio={self.parameters.conical_gear_ratio:.4f})")
