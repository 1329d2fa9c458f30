"""
Solid axle suspension modeled with bodies and constraints.

A single axle tube carries a knuckle on each side through a kingpin revolute.
Each side has an upper and a lower link, attached with spherical joints to
the axle tube and to the chassis (4-link), a tie rod modeled as a distance
constraint between chassis and knuckle, and a shock spring-damper between
axle tube and chassis. The spindle spins in a revolute joint on the knuckle.

All points are given for the right half of the suspension and mirrored for
the left half.
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from .constraints import RevoluteJoint, SphericalJoint, DistanceJoint
from .geometry_utils import midpoint
from .hardpoints import HardpointTable
from .rigid_body import Body
from .spring_damper import SpringDamper
from .suspension import (SIDE_SUFFIX, SPINDLE_AXIS, Suspension, SuspensionKind, SuspensionParameters,
                         require_inertia, require_positive)
from .vehicle_types import Side, VisualizationType
from .visualization import (add_cylinder, add_visualization_knuckle, add_visualization_link,
                            add_visualization_spindle)


class SolidAxlePoint(Enum):
    """Hardpoints of the solid axle suspension."""
    AXLE_OUTER = "outer axle point"
    SHOCK_A = "shock, axle"
    SHOCK_C = "shock, chassis"
    KNUCKLE_L = "lower knuckle point"
    KNUCKLE_U = "upper knuckle point"
    LL_A = "lower link, axle"
    LL_C = "lower link, chassis"
    UL_A = "upper link, axle"
    UL_C = "upper link, chassis"
    TIEROD_C = "tierod, chassis"
    TIEROD_K = "tierod, knuckle"
    SPINDLE = "spindle location"
    KNUCKLE_CM = "knuckle, center of mass"
    AXLE_CM = "axle, center of mass"


@dataclass
class SolidAxleParameters(SuspensionParameters):
    """
    Parameters of a solid axle suspension.

    Masses in kg, inertias as principal moments in kg*m^2, radii and
    lengths in m, spring coefficient in N/m, damping in N*s/m.
    """
    hardpoints: HardpointTable
    axle_tube_mass: float
    spindle_mass: float
    ul_mass: float
    ll_mass: float
    knuckle_mass: float
    axle_tube_inertia: Tuple[float, float, float]
    spindle_inertia: Tuple[float, float, float]
    ul_inertia: Tuple[float, float, float]
    ll_inertia: Tuple[float, float, float]
    knuckle_inertia: Tuple[float, float, float]
    axle_inertia: float
    spring_coefficient: float
    damping_coefficient: float
    spring_rest_length: float
    axle_tube_radius: float = 0.0476
    spindle_radius: float = 0.1
    spindle_width: float = 0.02
    ul_radius: float = 0.0254
    ll_radius: float = 0.0254
    knuckle_radius: float = 0.05

    point_ids = SolidAxlePoint

    def __post_init__(self):
        self._check_hardpoints()
        for name in ('axle_tube_mass', 'spindle_mass', 'ul_mass', 'll_mass', 'knuckle_mass',
                     'axle_tube_radius', 'spindle_radius', 'spindle_width',
                     'ul_radius', 'll_radius', 'knuckle_radius'):
            require_positive(name, getattr(self, name))
        for name in ('axle_tube_inertia', 'spindle_inertia', 'ul_inertia', 'll_inertia', 'knuckle_inertia'):
            require_inertia(name, getattr(self, name))
        self._check_spring()


class SolidAxle(Suspension):
    """
    Solid axle suspension template.

    Topology per side: knuckle, upper link, lower link and spindle bodies;
    spindle revolute, kingpin revolute, four spherical link joints, tie-rod
    distance constraint and shock spring-damper. The axle tube body is
    shared by both sides.
    """

    kind = SuspensionKind.SOLID_AXLE

    def __init__(self,
                 name: str,
                 parameters: SolidAxleParameters,
                 steerable: bool = False,
                 driven: bool = False,
                 visualization: VisualizationType = VisualizationType.NONE):
        """
        Create the bodies of a solid axle suspension.

        Args:
            name: Identifier used as prefix for all created items
            parameters: Solid axle parameters
            steerable: Allow steering through the tie rods (default: False)
            driven: Create axle shafts for the driveline (default: False)
            visualization: Kind of visualization assets (default: NONE)

        Raises:
            ValueError: If the parameter object is not a SolidAxleParameters
        """
        if not isinstance(parameters, SolidAxleParameters):
            raise ValueError(f"SolidAxle '{name}' requires SolidAxleParameters")
        self.knuckle: Dict[Side, Body] = {}
        self.upper_link: Dict[Side, Body] = {}
        self.lower_link: Dict[Side, Body] = {}
        self.kingpin: Dict[Side, RevoluteJoint] = {}
        self.axle_tube = Body(f"{name}_axleTube", parameters.axle_tube_mass, parameters.axle_tube_inertia)
        super().__init__(name, parameters, steerable, driven, visualization)

    def _create_side(self, side: Side, suffix: str) -> None:
        p = self.parameters
        self.knuckle[side] = Body(f"{self.name}_knuckle{suffix}", p.knuckle_mass, p.knuckle_inertia)
        self.upper_link[side] = Body(f"{self.name}_upperLink{suffix}", p.ul_mass, p.ul_inertia)
        self.lower_link[side] = Body(f"{self.name}_lowerLink{suffix}", p.ll_mass, p.ll_inertia)

    def _initialize_shared(self, chassis: Body, points: Dict[Enum, np.ndarray]) -> None:
        self._place(self.axle_tube, points[SolidAxlePoint.AXLE_CM], chassis.get_rotation())

    def _initialize_side(self, side: Side, chassis: Body, points: Dict[Enum, np.ndarray]) -> None:
        P = SolidAxlePoint
        p = self.parameters
        name = self.name
        suffix = SIDE_SUFFIX[side]
        rotation = chassis.get_rotation()

        knuckle = self._place(self.knuckle[side], points[P.KNUCKLE_CM], rotation)
        upper_link = self._place(self.upper_link[side], midpoint(points[P.UL_A], points[P.UL_C]), rotation)
        lower_link = self._place(self.lower_link[side], midpoint(points[P.LL_A], points[P.LL_C]), rotation)
        spindle = self._place(self.spindle[side], points[P.SPINDLE], rotation)

        spin_axis = chassis.direction_to_global(SPINDLE_AXIS)
        self.revolute[side] = self._add_joint(
            side, RevoluteJoint(f"{name}_revolute{suffix}", knuckle, spindle, points[P.SPINDLE], spin_axis))

        # Kingpin axis runs from the lower to the upper knuckle point
        self.kingpin[side] = self._add_joint(
            side, RevoluteJoint(f"{name}_revoluteKingpin{suffix}", self.axle_tube, knuckle,
                                midpoint(points[P.KNUCKLE_U], points[P.KNUCKLE_L]),
                                points[P.KNUCKLE_U] - points[P.KNUCKLE_L]))

        self._add_joint(side, SphericalJoint(f"{name}_sphericalUpperLink{suffix}",
                                             self.axle_tube, upper_link, points[P.UL_A]))
        self._add_joint(side, SphericalJoint(f"{name}_sphericalLowerLink{suffix}",
                                             self.axle_tube, lower_link, points[P.LL_A]))
        self._add_joint(side, SphericalJoint(f"{name}_sphericalUpperLinkChassis{suffix}",
                                             chassis, upper_link, points[P.UL_C]))
        self._add_joint(side, SphericalJoint(f"{name}_sphericalLowerLinkChassis{suffix}",
                                             chassis, lower_link, points[P.LL_C]))

        self.tierod[side] = self._add_joint(
            side, DistanceJoint(f"{name}_distTierod{suffix}", chassis, knuckle,
                                points[P.TIEROD_C], points[P.TIEROD_K]))

        self.spring[side] = self._own(
            SpringDamper(f"{name}_shock{suffix}", chassis, self.axle_tube,
                         points[P.SHOCK_C], points[P.SHOCK_A],
                         p.spring_coefficient, p.damping_coefficient, p.spring_rest_length))

        if self.visualization == VisualizationType.PRIMITIVES:
            add_cylinder(self.axle_tube, points[P.AXLE_CM], points[P.AXLE_OUTER], p.axle_tube_radius)
            add_visualization_link(upper_link, points[P.UL_A], points[P.UL_C], p.ul_radius)
            add_visualization_link(lower_link, points[P.LL_A], points[P.LL_C], p.ll_radius)
            add_visualization_knuckle(knuckle, points[P.KNUCKLE_U], points[P.KNUCKLE_L],
                                      points[P.SPINDLE], p.knuckle_radius)
            add_visualization_spindle(spindle, p.spindle_radius, p.spindle_width)
