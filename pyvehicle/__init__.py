"""
pyvehicle - Wheeled vehicle multibody templates.

This package assembles a vehicle model (chassis, suspensions, driveline,
powertrain, wheels and brakes) from parametrized templates that create
rigid bodies, joints, spring-dampers and shafts in a mechanical scene, and
distributes driver inputs and tire forces to them once per step.

All internal calculations use SI units:
- meters (m) for length
- kilograms (kg) for mass
- newtons (N) and newton-meters (N*m) for forces and torques

Basic usage:
    >>> from pyvehicle import Scene, Vehicle, WheelId, TireForce
    >>> from pyvehicle.presets import hmmwv_solid_axle_vehicle
    >>> scene = Scene()
    >>> vehicle = Vehicle(scene, hmmwv_solid_axle_vehicle(), fixed=True)
    >>> vehicle.initialize([0.0, 0.0, 1.0])
    >>> vehicle.update(0.0, 0.5, 0.0, 0.0, [TireForce() for _ in WheelId])
    >>> scene.do_step(1e-3)
"""

# Version information
__version__ = "0.1.0"
__author__ = "pyvehicle contributors"

# Identifiers
from .vehicle_types import (
    Side,
    WheelId,
    Axle,
    DriveType,
    VisualizationType,
    DebugFlags,
    wheel_location,
)

# Mechanical scene
from .rigid_body import Body
from .joint_types import JointType, JOINT_CONSTRAINED_DOF
from .constraints import (
    Joint,
    SphericalJoint,
    RevoluteJoint,
    UniversalJoint,
    DistanceJoint,
)
from .spring_damper import SpringDamper
from .shafts import (
    Shaft,
    ShaftRelation,
    ShaftsGear,
    ShaftsGearboxAngled,
    ShaftsPlanetary,
    ShaftBodyCoupling,
)
from .scene import Scene, AssemblyResult

# Hardpoints
from .hardpoints import HardpointTable, mirror

# Subsystem templates
from .suspension import Suspension, SuspensionKind, TireForce
from .solid_axle import SolidAxle, SolidAxleParameters, SolidAxlePoint
from .double_wishbone_reduced import (
    DoubleWishboneReduced,
    DoubleWishboneReducedParameters,
    DoubleWishbonePoint,
)
from .driveline import ShaftsDriveline2WD, DrivelineParameters
from .powertrain import SimplePowertrain, SimplePowertrainParameters, DriveMode
from .wheel import Wheel, WheelParameters
from .brake import BrakeSimple, BrakeParameters

# Vehicle
from .vehicle import (
    Vehicle,
    VehicleParameters,
    ChassisParameters,
    create_suspension,
)

# Define public API
__all__ = [
    # Version
    '__version__',
    '__author__',

    # Identifiers
    'Side',
    'WheelId',
    'Axle',
    'DriveType',
    'VisualizationType',
    'DebugFlags',
    'wheel_location',

    # Mechanical scene
    'Body',
    'JointType',
    'JOINT_CONSTRAINED_DOF',
    'Joint',
    'SphericalJoint',
    'RevoluteJoint',
    'UniversalJoint',
    'DistanceJoint',
    'SpringDamper',
    'Shaft',
    'ShaftRelation',
    'ShaftsGear',
    'ShaftsGearboxAngled',
    'ShaftsPlanetary',
    'ShaftBodyCoupling',
    'Scene',
    'AssemblyResult',

    # Hardpoints
    'HardpointTable',
    'mirror',

    # Subsystem templates
    'Suspension',
    'SuspensionKind',
    'TireForce',
    'SolidAxle',
    'SolidAxleParameters',
    'SolidAxlePoint',
    'DoubleWishboneReduced',
    'DoubleWishboneReducedParameters',
    'DoubleWishbonePoint',
    'ShaftsDriveline2WD',
    'DrivelineParameters',
    'SimplePowertrain',
    'SimplePowertrainParameters',
    'DriveMode',
    'Wheel',
    'WheelParameters',
    'BrakeSimple',
    'BrakeParameters',

    # Vehicle
    'Vehicle',
    'VehicleParameters',
    'ChassisParameters',
    'create_suspension',
]
