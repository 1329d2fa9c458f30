"""
Double wishbone suspension with control arms reduced to distance constraints.

The upper and lower control arms are replaced by two massless two-force
links each, running from their chassis pivots (front and back) to the ball
joint on the upright. This removes the arm bodies from the model at the cost
of the arm inertia and compliance, while keeping the wheel kinematics.

Per side: upright and spindle bodies, spindle revolute, four control arm
distance constraints, tie-rod distance constraint and shock spring-damper.
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from .constraints import DistanceJoint, RevoluteJoint
from .hardpoints import HardpointTable
from .rigid_body import Body
from .spring_damper import SpringDamper
from .suspension import (SIDE_SUFFIX, SPINDLE_AXIS, Suspension, SuspensionKind, SuspensionParameters,
                         require_inertia, require_positive)
from .vehicle_types import Side, VisualizationType
from .visualization import add_visualization_spindle, add_visualization_upright


class DoubleWishbonePoint(Enum):
    """Hardpoints of the reduced double wishbone suspension."""
    SPINDLE = "spindle location"
    UPRIGHT = "upright location"
    UCA_F = "upper control arm, chassis front"
    UCA_B = "upper control arm, chassis back"
    UCA_U = "upper control arm, upright"
    LCA_F = "lower control arm, chassis front"
    LCA_B = "lower control arm, chassis back"
    LCA_U = "lower control arm, upright"
    SHOCK_C = "shock, chassis"
    SHOCK_U = "shock, upright"
    TIEROD_C = "tierod, chassis"
    TIEROD_U = "tierod, upright"


@dataclass
class DoubleWishboneReducedParameters(SuspensionParameters):
    """
    Parameters of a reduced double wishbone suspension.

    Masses in kg, inertias as principal moments in kg*m^2, lengths in m.
    """
    hardpoints: HardpointTable
    spindle_mass: float
    upright_mass: float
    spindle_inertia: Tuple[float, float, float]
    upright_inertia: Tuple[float, float, float]
    axle_inertia: float
    spring_coefficient: float
    damping_coefficient: float
    spring_rest_length: float
    spindle_radius: float = 0.15
    spindle_width: float = 0.06
    upright_radius: float = 0.025

    point_ids = DoubleWishbonePoint

    def __post_init__(self):
        self._check_hardpoints()
        for name in ('spindle_mass', 'upright_mass', 'spindle_radius', 'spindle_width', 'upright_radius'):
            require_positive(name, getattr(self, name))
        require_inertia('spindle_inertia', self.spindle_inertia)
        require_inertia('upright_inertia', self.upright_inertia)
        self._check_spring()


class DoubleWishboneReduced(Suspension):
    """
    Reduced double wishbone suspension template.

    The control arms carry no mass; the upright is held by five distance
    constraints (four arm links and the tie rod).
    """

    kind = SuspensionKind.DOUBLE_WISHBONE_REDUCED

    def __init__(self,
                 name: str,
                 parameters: DoubleWishboneReducedParameters,
                 steerable: bool = False,
                 driven: bool = False,
                 visualization: VisualizationType = VisualizationType.NONE):
        if not isinstance(parameters, DoubleWishboneReducedParameters):
            raise ValueError(f"DoubleWishboneReduced '{name}' requires DoubleWishboneReducedParameters")
        self.upright: Dict[Side, Body] = {}
        super().__init__(name, parameters, steerable, driven, visualization)

    def _create_side(self, side: Side, suffix: str) -> None:
        p = self.parameters
        self.upright[side] = Body(f"{self.name}_upright{suffix}", p.upright_mass, p.upright_inertia)

    def _initialize_side(self, side: Side, chassis: Body, points: Dict[Enum, np.ndarray]) -> None:
        P = DoubleWishbonePoint
        p = self.parameters
        name = self.name
        suffix = SIDE_SUFFIX[side]
        rotation = chassis.get_rotation()

        upright = self._place(self.upright[side], points[P.UPRIGHT], rotation)
        spindle = self._place(self.spindle[side], points[P.SPINDLE], rotation)

        self.revolute[side] = self._add_joint(
            side, RevoluteJoint(f"{name}_revolute{suffix}", upright, spindle,
                                points[P.SPINDLE], chassis.direction_to_global(SPINDLE_AXIS)))

        for arm, pivot, ball in (("UCA_F", P.UCA_F, P.UCA_U), ("UCA_B", P.UCA_B, P.UCA_U),
                                 ("LCA_F", P.LCA_F, P.LCA_U), ("LCA_B", P.LCA_B, P.LCA_U)):
            self._add_joint(side, DistanceJoint(f"{name}_dist{arm}{suffix}", chassis, upright,
                                                points[pivot], points[ball]))

        self.tierod[side] = self._add_joint(
            side, DistanceJoint(f"{name}_distTierod{suffix}", chassis, upright,
                                points[P.TIEROD_C], points[P.TIEROD_U]))

        self.spring[side] = self._own(
            SpringDamper(f"{name}_shock{suffix}", chassis, upright,
                         points[P.SHOCK_C], points[P.SHOCK_U],
                         p.spring_coefficient, p.damping_coefficient, p.spring_rest_length))

        if self.visualization == VisualizationType.PRIMITIVES:
            add_visualization_upright(upright, (points[P.UCA_U], points[P.LCA_U], points[P.TIEROD_U]),
                                      p.upright_radius)
            add_visualization_spindle(spindle, p.spindle_radius, p.spindle_width)
