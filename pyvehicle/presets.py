"""
HMMWV-like parameter sets.

Hardpoints are given in inches for the right side, in the suspension frame
(x rearward, y to the right, z up). Masses in kg, inertias in kg*m^2,
spring coefficients in N/m and damping coefficients in N*s/m.
"""

from .brake import BrakeParameters
from .double_wishbone_reduced import DoubleWishbonePoint, DoubleWishboneReducedParameters
from .driveline import DrivelineParameters
from .hardpoints import HardpointTable
from .powertrain import SimplePowertrainParameters
from .solid_axle import SolidAxlePoint, SolidAxleParameters
from .units import to_m, to_newtons
from .vehicle import ChassisParameters, VehicleParameters
from .vehicle_types import DriveType
from .wheel import WheelParameters

# Suspension mount locations in chassis coordinates (m)
FRONT_LOCATION = tuple(to_m(v, 'in') for v in (-66.59, 0.0, 1.039))
REAR_LOCATION = tuple(to_m(v, 'in') for v in (66.4, 0.0, 1.039))

# Chassis center of mass in chassis coordinates (m)
CHASSIS_COM = tuple(to_m(v, 'in') for v in (3.8, 0.585, -18.329))

# Spring force and length at design ride height, front and rear
DESIGN_SPRING_FORCE = (to_newtons(3491.0, 'lbf'), to_newtons(6388.0, 'lbf'))
DESIGN_SPRING_LENGTH = (to_m(14.35, 'in'), to_m(14.35, 'in'))

SOLID_AXLE_FRONT_POINTS = {
    'AXLE_OUTER': (0.0, 34.0, 0.0),
    'SHOCK_A': (-4.0, 24.0, 2.0),
    'SHOCK_C': (-3.0, 23.0, 16.0),
    'KNUCKLE_L': (0.0, 32.0, -3.5),
    'KNUCKLE_U': (0.0, 31.0, 4.5),
    'LL_A': (4.0, 20.0, -4.0),
    'LL_C': (28.0, 19.0, -1.0),
    'UL_A': (3.0, 6.0, 6.0),
    'UL_C': (24.0, 16.0, 9.0),
    'TIEROD_C': (5.0, 2.0, 2.0),
    'TIEROD_K': (5.0, 31.5, -1.0),
    'SPINDLE': (0.0, 36.0, 0.0),
    'KNUCKLE_CM': (0.0, 32.5, 0.5),
    'AXLE_CM': (0.0, 0.0, 0.0),
}

# Links point forward to the chassis on the rear axle; upper links are
# angled in plan view to locate the axle laterally
SOLID_AXLE_REAR_POINTS = dict(SOLID_AXLE_FRONT_POINTS, **{
    'SHOCK_A': (4.0, 24.0, 2.0),
    'SHOCK_C': (3.0, 23.0, 16.0),
    'LL_A': (-4.0, 20.0, -4.0),
    'LL_C': (-28.0, 19.0, -1.0),
    'UL_A': (-3.0, 6.0, 6.0),
    'UL_C': (-24.0, 16.0, 9.0),
    'TIEROD_C': (-5.0, 2.0, 2.0),
    'TIEROD_K': (-5.0, 31.5, -1.0),
})

DOUBLE_WISHBONE_FRONT_POINTS = {
    'SPINDLE': (-1.59, 35.815, -1.035),
    'UPRIGHT': (-1.59, 29.5675, -1.035),
    'UCA_F': (-1.8864, 17.5575, 9.6308),
    'UCA_B': (-10.5596, 18.8085, 7.6992),
    'UCA_U': (-2.088, 28.17, 8.484),
    'LCA_F': (8.79, 12.09, 0.0),
    'LCA_B': (-8.79, 12.09, 0.0),
    'LCA_U': (-1.40, 30.965, -4.65),
    'SHOCK_C': (4.095, 19.598, 12.722),
    'SHOCK_U': (3.827, 21.385, -1.835),
    'TIEROD_C': (-9.855, 17.655, 2.135),
    'TIEROD_U': (-6.922, 32.327, -0.643),
}

DOUBLE_WISHBONE_REAR_POINTS = dict(DOUBLE_WISHBONE_FRONT_POINTS, **{
    'TIEROD_C': (8.79, 16.38, 2.723),
    'TIEROD_U': (6.704, 32.327, -0.358),
})


def hmmwv_solid_axle_front() -> SolidAxleParameters:
    return SolidAxleParameters(
        hardpoints=HardpointTable(SolidAxlePoint, SOLID_AXLE_FRONT_POINTS, unit='in'),
        axle_tube_mass=124.0,
        spindle_mass=14.705,
        ul_mass=12.0,
        ll_mass=15.0,
        knuckle_mass=30.0,
        axle_tube_inertia=(22.21, 0.0775, 22.21),
        spindle_inertia=(0.04117, 0.07352, 0.04117),
        ul_inertia=(0.0255, 0.0255, 0.0124),
        ll_inertia=(0.0514, 0.0514, 0.0204),
        knuckle_inertia=(0.1, 0.1, 0.1),
        axle_inertia=0.4,
        spring_coefficient=167062.0,
        damping_coefficient=22459.0,
        spring_rest_length=0.450,
    )


def hmmwv_solid_axle_rear() -> SolidAxleParameters:
    return SolidAxleParameters(
        hardpoints=HardpointTable(SolidAxlePoint, SOLID_AXLE_REAR_POINTS, unit='in'),
        axle_tube_mass=124.0,
        spindle_mass=14.705,
        ul_mass=12.0,
        ll_mass=15.0,
        knuckle_mass=30.0,
        axle_tube_inertia=(22.21, 0.0775, 22.21),
        spindle_inertia=(0.04117, 0.07352, 0.04117),
        ul_inertia=(0.0255, 0.0255, 0.0124),
        ll_inertia=(0.0514, 0.0514, 0.0204),
        knuckle_inertia=(0.1, 0.1, 0.1),
        axle_inertia=0.4,
        spring_coefficient=369149.0,
        damping_coefficient=35024.0,
        spring_rest_length=0.434,
    )


def hmmwv_double_wishbone_front() -> DoubleWishboneReducedParameters:
    return DoubleWishboneReducedParameters(
        hardpoints=HardpointTable(DoubleWishbonePoint, DOUBLE_WISHBONE_FRONT_POINTS, unit='in'),
        spindle_mass=14.705,
        upright_mass=19.45,
        spindle_inertia=(0.04117, 0.07352, 0.04117),
        upright_inertia=(0.1656, 0.1934, 0.04367),
        axle_inertia=0.4,
        spring_coefficient=167062.0,
        damping_coefficient=22459.0,
        spring_rest_length=0.4062,
    )


def hmmwv_double_wishbone_rear() -> DoubleWishboneReducedParameters:
    return DoubleWishboneReducedParameters(
        hardpoints=HardpointTable(DoubleWishbonePoint, DOUBLE_WISHBONE_REAR_POINTS, unit='in'),
        spindle_mass=14.705,
        upright_mass=19.45,
        spindle_inertia=(0.04117, 0.07352, 0.04117),
        upright_inertia=(0.1656, 0.1934, 0.04367),
        axle_inertia=0.4,
        spring_coefficient=369149.0,
        damping_coefficient=35024.0,
        spring_rest_length=0.4162,
    )


def hmmwv_chassis() -> ChassisParameters:
    return ChassisParameters(mass=7747.0 / 2.2, inertia=(125.8, 497.4, 531.4), com=CHASSIS_COM,
                             mesh_name="hmmwv_chassis", mesh_file="hmmwv/hmmwv_chassis.obj")


def hmmwv_wheel() -> WheelParameters:
    return WheelParameters(mass=18.8, inertia=(0.4634, 0.6243, 0.4634),
                           radius=to_m(18.5, 'in'), width=to_m(10.0, 'in'),
                           mesh_name="hmmwv_rim", mesh_file="hmmwv/hmmwv_rim.obj")


def hmmwv_brake() -> BrakeParameters:
    return BrakeParameters(max_torque=4000.0)


def hmmwv_driveline() -> DrivelineParameters:
    return DrivelineParameters(driveshaft_inertia=0.5,
                               differentialbox_inertia=0.6,
                               conical_gear_ratio=-0.2433)


def hmmwv_powertrain() -> SimplePowertrainParameters:
    return SimplePowertrainParameters(forward_gear_ratio=0.3,
                                      reverse_gear_ratio=-0.3,
                                      max_torque=2400.0 / 0.3,
                                      max_speed=2000.0)


def _hmmwv_vehicle(front, rear) -> VehicleParameters:
    return VehicleParameters(
        chassis=hmmwv_chassis(),
        front_suspension=front,
        rear_suspension=rear,
        front_location=FRONT_LOCATION,
        rear_location=REAR_LOCATION,
        wheel=hmmwv_wheel(),
        brake=hmmwv_brake(),
        driveline=hmmwv_driveline(),
        powertrain=hmmwv_powertrain(),
        drive_type=DriveType.RWD,
        steering_gain=0.08,
        design_spring_force=DESIGN_SPRING_FORCE,
        design_spring_length=DESIGN_SPRING_LENGTH,
    )


def hmmwv_solid_axle_vehicle() -> VehicleParameters:
    """HMMWV with solid axles front and rear, rear-wheel drive."""
    return _hmmwv_vehicle(hmmwv_solid_axle_front(), hmmwv_solid_axle_rear())


def hmmwv_double_wishbone_vehicle() -> VehicleParameters:
    """HMMWV with reduced double wishbones front and rear, rear-wheel drive."""
    return _hmmwv_vehicle(hmmwv_double_wishbone_front(), hmmwv_double_wishbone_rear())
