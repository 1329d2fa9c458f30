"""
Vehicle composition and per-step orchestration.

A Vehicle owns one chassis body, a front and a rear suspension, a 2WD
driveline, a simple powertrain, four wheels and four brakes. The suspension
kind of each axle is selected by the type of its parameter object.

Initialization order (each step references items created by the previous):
    suspensions -> wheels -> driveline -> powertrain -> brakes

Per step, update() distributes driver inputs and tire forces; the scene then
advances the mechanical state, and the query methods read it back.
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, TextIO, Tuple, Union

from scipy.spatial.transform import Rotation

from .brake import BrakeParameters, BrakeSimple
from .double_wishbone_reduced import DoubleWishboneReduced, DoubleWishboneReducedParameters
from .driveline import DrivelineParameters, ShaftsDriveline2WD
from .powertrain import SimplePowertrain, SimplePowertrainParameters
from .rigid_body import Body
from .solid_axle import SolidAxle, SolidAxleParameters
from .geometry_utils import as_vector3
from .suspension import (Suspension, SuspensionKind, SuspensionParameters, TireForce,
                         require_inertia, require_positive)
from .units import from_m, from_newtons
from .vehicle_types import (Axle, DebugFlags, DriveType, Side, VisualizationType, WheelId,
                            wheel_location)
from .visualization import BoxShape, MeshShape
from .wheel import Wheel, WheelParameters

logger = logging.getLogger(__name__)

# Suspension class and parameter class for each kind
SUSPENSION_KINDS = {
    SuspensionKind.SOLID_AXLE: (SolidAxle, SolidAxleParameters),
    SuspensionKind.DOUBLE_WISHBONE_REDUCED: (DoubleWishboneReduced, DoubleWishboneReducedParameters),
}


def suspension_kind(parameters: SuspensionParameters) -> SuspensionKind:
    """
    Get the suspension kind described by a parameter object.

    Raises:
        ValueError: If the parameter object is not a known suspension parameter type
    """
    for kind, (_, parameter_class) in SUSPENSION_KINDS.items():
        if isinstance(parameters, parameter_class):
            return kind
    raise ValueError(f"Unknown suspension parameters type: {type(parameters).__name__}")


def create_suspension(name: str,
                      parameters: SuspensionParameters,
                      steerable: bool = False,
                      driven: bool = False,
                      visualization: VisualizationType = VisualizationType.NONE) -> Suspension:
    """
    Create the suspension matching a parameter object.

    Args:
        name: Suspension name
        parameters: SolidAxleParameters or DoubleWishboneReducedParameters
        steerable: Allow steering input
        driven: Create axle shafts
        visualization: Kind of visualization assets

    Returns:
        New, uninitialized suspension
    """
    suspension_class, _ = SUSPENSION_KINDS[suspension_kind(parameters)]
    return suspension_class(name, parameters, steerable=steerable, driven=driven, visualization=visualization)


def _suspension_to_dict(parameters: SuspensionParameters) -> dict:
    data = parameters.to_dict()
    data['kind'] = suspension_kind(parameters).value
    return data


def _suspension_from_dict(data: dict) -> SuspensionParameters:
    _, parameter_class = SUSPENSION_KINDS[SuspensionKind(data['kind'])]
    return parameter_class.from_dict(data)


def _optional_pair(value) -> Optional[Tuple[float, float]]:
    return None if value is None else tuple(float(v) for v in value)


@dataclass
class ChassisParameters:
    """
    Chassis parameters.

    Attributes:
        mass: Sprung mass (kg)
        inertia: Principal moments roll, pitch, yaw about the COM (kg*m^2)
        com: Center of mass in chassis coordinates (m)
        mesh_name: Mesh name used for MESH visualization
        mesh_file: Mesh file used for MESH visualization
    """
    mass: float
    inertia: Tuple[float, float, float]
    com: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    mesh_name: str = "chassis"
    mesh_file: str = "chassis.obj"

    def __post_init__(self):
        require_positive("Chassis mass", self.mass)
        require_inertia("Chassis inertia", self.inertia)
        as_vector3(self.com, "com")

    def to_dict(self) -> dict:
        return {'mass': float(self.mass),
                'inertia': [float(v) for v in self.inertia],
                'com': [float(v) for v in self.com],
                'mesh_name': self.mesh_name,
                'mesh_file': self.mesh_file}

    @classmethod
    def from_dict(cls, data: dict) -> 'ChassisParameters':
        return cls(mass=data['mass'], inertia=tuple(data['inertia']),
                   com=tuple(data.get('com', (0.0, 0.0, 0.0))),
                   mesh_name=data.get('mesh_name', "chassis"),
                   mesh_file=data.get('mesh_file', "chassis.obj"))


@dataclass
class VehicleParameters:
    """
    Complete vehicle description.

    Attributes:
        chassis: Chassis parameters
        front_suspension: Front suspension parameters (kind selected by type)
        rear_suspension: Rear suspension parameters (kind selected by type)
        front_location: Front suspension mount in chassis coordinates (m)
        rear_location: Rear suspension mount in chassis coordinates (m)
        wheel: Wheel parameters (all four wheels)
        brake: Brake parameters (all four brakes)
        driveline: Driveline parameters
        powertrain: Powertrain parameters
        drive_type: Driven axle
        steering_gain: Tie-rod displacement per unit steering input (m)
        dir_motor_block: Driveshaft direction in chassis coordinates
        dir_axle: Axle direction in chassis coordinates
        design_spring_force: Front and rear spring force at design ride height (N), optional
        design_spring_length: Front and rear spring length at design ride height (m), optional
    """
    chassis: ChassisParameters
    front_suspension: SuspensionParameters
    rear_suspension: SuspensionParameters
    front_location: Tuple[float, float, float]
    rear_location: Tuple[float, float, float]
    wheel: WheelParameters
    brake: BrakeParameters
    driveline: DrivelineParameters
    powertrain: SimplePowertrainParameters
    drive_type: DriveType = DriveType.RWD
    steering_gain: float = 0.08
    dir_motor_block: Tuple[float, float, float] = (1.0, 0.0, 0.0)
    dir_axle: Tuple[float, float, float] = (0.0, 1.0, 0.0)
    design_spring_force: Optional[Tuple[float, float]] = None
    design_spring_length: Optional[Tuple[float, float]] = None

    def __post_init__(self):
        suspension_kind(self.front_suspension)
        suspension_kind(self.rear_suspension)
        self.drive_type = DriveType(self.drive_type)
        if not np.isfinite(self.steering_gain):
            raise ValueError(f"Steering gain must be finite, got {self.steering_gain}")
        for name in ('design_spring_force', 'design_spring_length'):
            value = getattr(self, name)
            if value is not None and (len(value) != 2 or not np.all(np.isfinite(value))):
                raise ValueError(f"{name} must be two finite values (front, rear), got {value}")

    def to_dict(self) -> dict:
        """
        Serialize the vehicle description to a dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            'chassis': self.chassis.to_dict(),
            'front_suspension': _suspension_to_dict(self.front_suspension),
            'rear_suspension': _suspension_to_dict(self.rear_suspension),
            'front_location': [float(v) for v in self.front_location],
            'rear_location': [float(v) for v in self.rear_location],
            'wheel': self.wheel.to_dict(),
            'brake': self.brake.to_dict(),
            'driveline': self.driveline.to_dict(),
            'powertrain': self.powertrain.to_dict(),
            'drive_type': self.drive_type.value,
            'steering_gain': float(self.steering_gain),
            'dir_motor_block': [float(v) for v in self.dir_motor_block],
            'dir_axle': [float(v) for v in self.dir_axle],
            'design_spring_force': _optional_pair(self.design_spring_force),
            'design_spring_length': _optional_pair(self.design_spring_length),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'VehicleParameters':
        """
        Deserialize a vehicle description from a dictionary.

        Raises:
            KeyError: If required fields are missing
            ValueError: If data is invalid
        """
        return cls(
            chassis=ChassisParameters.from_dict(data['chassis']),
            front_suspension=_suspension_from_dict(data['front_suspension']),
            rear_suspension=_suspension_from_dict(data['rear_suspension']),
            front_location=tuple(data['front_location']),
            rear_location=tuple(data['rear_location']),
            wheel=WheelParameters.from_dict(data['wheel']),
            brake=BrakeParameters.from_dict(data['brake']),
            driveline=DrivelineParameters.from_dict(data['driveline']),
            powertrain=SimplePowertrainParameters.from_dict(data['powertrain']),
            drive_type=DriveType(data.get('drive_type', DriveType.RWD.value)),
            steering_gain=data.get('steering_gain', 0.08),
            dir_motor_block=tuple(data.get('dir_motor_block', (1.0, 0.0, 0.0))),
            dir_axle=tuple(data.get('dir_axle', (0.0, 1.0, 0.0))),
            design_spring_force=_optional_pair(data.get('design_spring_force')),
            design_spring_length=_optional_pair(data.get('design_spring_length')),
        )


class Vehicle:
    """
    Wheeled vehicle assembled from subsystem templates.

    Attributes:
        scene: Scene holding every mechanical item of the vehicle
        parameters: Vehicle description
        chassis: Chassis body
        front_suspension: Steerable front suspension
        rear_suspension: Rear suspension
        driveline: 2WD driveline
        powertrain: Simple powertrain
        wheels: Wheels by WheelId
        brakes: Brakes by WheelId
    """

    def __init__(self,
                 scene,
                 parameters: VehicleParameters,
                 fixed: bool = False,
                 chassis_visualization: VisualizationType = VisualizationType.NONE,
                 wheel_visualization: VisualizationType = VisualizationType.NONE,
                 suspension_visualization: VisualizationType = VisualizationType.NONE):
        """
        Create the chassis and all subsystems.

        Args:
            scene: Scene receiving the vehicle items
            parameters: Vehicle description
            fixed: Fix the chassis to ground (default: False)
            chassis_visualization: Chassis assets (default: NONE)
            wheel_visualization: Wheel assets (default: NONE)
            suspension_visualization: Suspension assets (default: NONE)
        """
        self.scene = scene
        self.parameters = parameters
        p = parameters

        self.chassis = Body("chassis", p.chassis.mass, p.chassis.inertia, fixed=fixed, com=p.chassis.com)
        if chassis_visualization == VisualizationType.PRIMITIVES:
            self.chassis.add_asset(BoxShape((5.0, 1.7, 0.4), np.array([0.0, 0.0, -0.4])))
            self.chassis.add_asset(BoxShape((4.0, 1.7, 0.4), np.array([0.5, 0.0, 0.0])))
        elif chassis_visualization == VisualizationType.MESH:
            self.chassis.add_asset(MeshShape(p.chassis.mesh_name, p.chassis.mesh_file))
        scene.add(self.chassis)

        front_driven = p.drive_type == DriveType.FWD
        self.front_suspension = create_suspension("FrontSusp", p.front_suspension,
                                                  steerable=True, driven=front_driven,
                                                  visualization=suspension_visualization)
        self.rear_suspension = create_suspension("RearSusp", p.rear_suspension,
                                                 steerable=False, driven=not front_driven,
                                                 visualization=suspension_visualization)

        self.wheels: Dict[WheelId, Wheel] = {
            which: Wheel(f"wheel_{which.name}", p.wheel, wheel_location(which)[1], wheel_visualization)
            for which in WheelId
        }

        self.driveline = ShaftsDriveline2WD(p.driveline, p.dir_motor_block, p.dir_axle, p.drive_type)
        self.powertrain = SimplePowertrain(p.powertrain)

        self.brakes: Dict[WheelId, BrakeSimple] = {
            which: BrakeSimple(f"brake_{which.name}", p.brake) for which in WheelId
        }

        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _suspension(self, axle: Axle) -> Suspension:
        return self.front_suspension if axle == Axle.FRONT else self.rear_suspension

    def _locate(self, which: WheelId) -> Tuple[Suspension, Side]:
        axle, side = wheel_location(which)
        return self._suspension(axle), side

    def initialize(self,
                   position: Union[np.ndarray, Tuple[float, float, float]],
                   rotation: Optional[Union[Rotation, np.ndarray]] = None) -> None:
        """
        Position the chassis and initialize every subsystem.

        Args:
            position: Chassis reference position (m, global)
            rotation: Chassis orientation (default: identity)

        Raises:
            RuntimeError: If the vehicle is already initialized
        """
        if self._initialized:
            raise RuntimeError("Vehicle is already initialized")

        self.chassis.set_position(position)
        self.chassis.set_rotation(Rotation.identity() if rotation is None else rotation)

        p = self.parameters
        self.front_suspension.initialize(self.chassis, p.front_location)
        self.rear_suspension.initialize(self.chassis, p.rear_location)

        for which, wheel in self.wheels.items():
            suspension, side = self._locate(which)
            wheel.initialize(suspension.get_spindle(side))

        driven = self._suspension(self.driveline.driven_axle)
        self.driveline.initialize(self.chassis, driven.get_axle(Side.LEFT), driven.get_axle(Side.RIGHT))

        self.powertrain.initialize(self.driveline.get_driveshaft())

        for which, brake in self.brakes.items():
            suspension, side = self._locate(which)
            brake.initialize(suspension.get_revolute(side))

        self._initialized = True
        logger.debug("Initialized vehicle: %s front, %s rear, %s",
                     self.front_suspension.kind.value, self.rear_suspension.kind.value,
                     self.driveline.drive_type.name)

    def update(self,
               time: float,
               throttle: float,
               steering: float,
               braking: float,
               tire_forces: Sequence[TireForce]) -> None:
        """
        Distribute driver inputs and tire forces for the current step.

        All inputs are validated before any subsystem is touched.

        Args:
            time: Simulation time (s)
            throttle: Throttle input in [0, 1]
            steering: Steering input in [-1, 1]
            braking: Braking input in [0, 1]
            tire_forces: Four TireForce objects indexed by WheelId

        Raises:
            RuntimeError: If the vehicle is not initialized
            ValueError: If an input is not finite or tire_forces does not hold four TireForce
        """
        if not self._initialized:
            raise RuntimeError("Vehicle is not initialized")
        for name, value in (("time", time), ("throttle", throttle),
                            ("steering", steering), ("braking", braking)):
            if not np.isfinite(value):
                raise ValueError(f"Vehicle input '{name}' must be finite, got {value}")
        if len(tire_forces) != len(WheelId):
            raise ValueError(f"Expected {len(WheelId)} tire forces, got {len(tire_forces)}")
        for which in WheelId:
            tire_force = tire_forces[which]
            if not isinstance(tire_force, TireForce) or not tire_force.is_finite():
                raise ValueError(f"Invalid tire force for {which.name}: {tire_force!r}")

        displ = self.parameters.steering_gain * steering
        self.front_suspension.apply_steering(displ)

        self.powertrain.update(time, throttle, self.driveline.get_driveshaft_speed())
        self.driveline.apply_driveshaft_torque(self.powertrain.get_output_torque())

        for which in WheelId:
            suspension, side = self._locate(which)
            suspension.apply_tire_force(side, tire_forces[which])

        for brake in self.brakes.values():
            brake.apply_modulation(braking)

    # Queries

    def get_wheel_body(self, which: WheelId) -> Body:
        """Get the spindle body carrying a wheel."""
        suspension, side = self._locate(which)
        return suspension.get_spindle(side)

    def get_wheel_pos(self, which: WheelId) -> np.ndarray:
        suspension, side = self._locate(which)
        return suspension.get_spindle_pos(side)

    def get_wheel_rot(self, which: WheelId) -> Rotation:
        suspension, side = self._locate(which)
        return suspension.get_spindle_rot(side)

    def get_wheel_lin_vel(self, which: WheelId) -> np.ndarray:
        suspension, side = self._locate(which)
        return suspension.get_spindle_lin_vel(side)

    def get_wheel_ang_vel(self, which: WheelId) -> np.ndarray:
        suspension, side = self._locate(which)
        return suspension.get_spindle_ang_vel(side)

    def get_wheel_omega(self, which: WheelId) -> float:
        """Get the wheel spin speed (rad/s)."""
        suspension, side = self._locate(which)
        return suspension.get_axle_speed(side)

    def get_spring_force(self, which: WheelId) -> float:
        """Get the spring-damper force at a wheel (N)."""
        suspension, side = self._locate(which)
        return suspension.get_spring_force(side)

    def get_spring_length(self, which: WheelId) -> float:
        """Get the spring-damper length at a wheel (m)."""
        suspension, side = self._locate(which)
        return suspension.get_spring_length(side)

    def get_wheel_torque(self, which: WheelId) -> float:
        """Get the driveline torque delivered to a wheel (N*m)."""
        return self.driveline.get_wheel_torque(which)

    def get_driveshaft_speed(self) -> float:
        return self.driveline.get_driveshaft_speed()

    # Diagnostics

    def log_hardpoint_locations(self, out: TextIO, inches: bool = True) -> None:
        """
        Write the right-side hardpoints of both suspensions in chassis coordinates.

        Args:
            out: Text stream receiving the report
            inches: Report in inches (default: True)
        """
        unit = 'in' if inches else 'm'
        p = self.parameters
        for label, suspension, location in (("FRONT", self.front_suspension, p.front_location),
                                            ("REAR", self.rear_suspension, p.rear_location)):
            print(f"\n---- {label} suspension hardpoint locations (RIGHT side)", file=out)
            suspension.log_hardpoint_locations(from_m(np.asarray(location, dtype=float), unit), out, inches=inches)
        print("", file=out)

    def log_constraint_violations(self, out: TextIO) -> None:
        """Write the joint violations of all four suspension corners."""
        for which in (WheelId.FRONT_RIGHT, WheelId.FRONT_LEFT, WheelId.REAR_RIGHT, WheelId.REAR_LEFT):
            suspension, side = self._locate(which)
            print(f"\n---- {which.name.replace('_', '-')} suspension constraint violation\n", file=out)
            suspension.log_constraint_violations(side, out)

    def get_spring_design_errors(self) -> Dict[WheelId, Tuple[Optional[float], Optional[float]]]:
        """
        Get the spring force and length errors relative to the design values.

        Returns:
            Mapping of WheelId -> (force error in N, length error in m); an
            entry is None when the corresponding design value is not set
        """
        p = self.parameters
        errors = {}
        for which in WheelId:
            index = 0 if wheel_location(which)[0] == Axle.FRONT else 1
            force_error = None
            length_error = None
            if p.design_spring_force is not None:
                force_error = self.get_spring_force(which) - p.design_spring_force[index]
            if p.design_spring_length is not None:
                length_error = self.get_spring_length(which) - p.design_spring_length[index]
            errors[which] = (force_error, length_error)
        return errors

    def _log_spring_design_errors(self, out: TextIO) -> None:
        p = self.parameters
        if p.design_spring_force is None and p.design_spring_length is None:
            return
        errors = self.get_spring_design_errors()
        print("---- Spring force, length error relative to design", file=out)
        if p.design_spring_force is not None:
            print("Force error [lbf]:", file=out)
            for which in WheelId:
                print(f"  {which.name} = {from_newtons(errors[which][0], 'lbf'):.3f}", file=out)
        if p.design_spring_length is not None:
            print("Length error [in]:", file=out)
            for which in WheelId:
                print(f"  {which.name} = {from_m(errors[which][1], 'in'):.3f}", file=out)
        print("", file=out)

    def debug_log(self, what: DebugFlags, out: TextIO) -> None:
        """
        Write selected debug reports.

        Args:
            what: Combination of DebugFlags.SHOCKS and DebugFlags.CONSTRAINTS
            out: Text stream receiving the report
        """
        what = DebugFlags(what)
        if what & DebugFlags.SHOCKS:
            print("---- Spring, Shock info", file=out)
            print("Forces [lbf]:", file=out)
            for which in WheelId:
                print(f"  {which.name} = {from_newtons(self.get_spring_force(which), 'lbf'):.3f}", file=out)
            print("Lengths [in]:", file=out)
            for which in WheelId:
                print(f"  {which.name} = {from_m(self.get_spring_length(which), 'in'):.3f}", file=out)
            print("", file=out)
            self._log_spring_design_errors(out)
        if what & DebugFlags.CONSTRAINTS:
            self.log_constraint_violations(out)

    def destroy(self) -> None:
        """Remove every item owned by the vehicle from the scene."""
        for brake in self.brakes.values():
            brake.destroy()
        self.driveline.destroy()
        self.rear_suspension.destroy()
        self.front_suspension.destroy()
        if self.chassis.scene is not None:
            self.chassis.scene.remove(self.chassis)
        self._initialized = False
        logger.debug("Destroyed vehicle")

    def __repr__(self) -> str:
        return (f"Vehicle(front={self.front_suspension.kind.value}, "
                f"rear={self.rear_suspension.kind.value}, "
                f"drive={self.driveline.drive_type.name}, initialized={self._initialized})")
