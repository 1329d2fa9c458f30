"""
Wheel attached to a suspension spindle.

The wheel does not create a body of its own: its mass and inertia are lumped
onto the spindle it is attached to, and its visualization assets are added
to the spindle.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple

from .rigid_body import Body
from .suspension import SIDE_SUFFIX, require_inertia, require_positive
from .vehicle_types import Side, VisualizationType
from .visualization import CylinderShape, MeshShape

logger = logging.getLogger(__name__)


@dataclass
class WheelParameters:
    """
    Wheel parameters.

    Attributes:
        mass: Wheel mass (kg)
        inertia: Principal moments (kg*m^2), spin axis along local y
        radius: Visualization radius (m)
        width: Visualization width (m)
        mesh_name: Mesh name used for MESH visualization
        mesh_file: Mesh file used for MESH visualization
    """
    mass: float
    inertia: Tuple[float, float, float]
    radius: float
    width: float
    mesh_name: str = "wheel"
    mesh_file: str = "wheel.obj"

    def __post_init__(self):
        require_positive("Wheel mass", self.mass)
        require_inertia("Wheel inertia", self.inertia)
        require_positive("Wheel radius", self.radius)
        require_positive("Wheel width", self.width)

    def to_dict(self) -> dict:
        return {
            'mass': float(self.mass),
            'inertia': [float(v) for v in self.inertia],
            'radius': float(self.radius),
            'width': float(self.width),
            'mesh_name': self.mesh_name,
            'mesh_file': self.mesh_file,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WheelParameters':
        return cls(mass=data['mass'],
                   inertia=tuple(data['inertia']),
                   radius=data['radius'],
                   width=data['width'],
                   mesh_name=data.get('mesh_name', "wheel"),
                   mesh_file=data.get('mesh_file', "wheel.obj"))


class Wheel:
    """
    Wheel on one side of the vehicle.

    Attributes:
        name: Identifier for the wheel
        parameters: Wheel parameters
        side: Vehicle side (selects the mirrored mesh)
        spindle: Spindle body carrying the wheel (non-owning, set by initialize)
    """

    def __init__(self, name: str, parameters: WheelParameters, side: Side,
                 visualization: VisualizationType = VisualizationType.NONE):
        self.name = name
        self.parameters = parameters
        self.side = Side(side)
        self.visualization = visualization
        self.spindle: Optional[Body] = None

    def initialize(self, spindle: Body) -> None:
        """
        Lump the wheel onto a spindle body.

        Args:
            spindle: Spindle body, attached to a scene

        Raises:
            RuntimeError: If the wheel is already initialized or the spindle is detached
        """
        if self.spindle is not None:
            raise RuntimeError(f"Wheel '{self.name}' is already initialized")
        if spindle is None or spindle.scene is None:
            raise RuntimeError(f"Wheel '{self.name}' requires a spindle attached to a scene")

        p = self.parameters
        spindle.add_mass(p.mass, p.inertia)
        self.spindle = spindle

        if self.visualization == VisualizationType.PRIMITIVES:
            half = np.array([0.0, p.width / 2.0, 0.0])
            spindle.add_asset(CylinderShape(half, -half, p.radius))
        elif self.visualization == VisualizationType.MESH:
            spindle.add_asset(MeshShape(p.mesh_name + SIDE_SUFFIX[self.side], p.mesh_file))

        logger.debug("Initialized wheel '%s' on spindle '%s'", self.name, spindle.name)

    def __repr__(self) -> str:
        return f"Wheel('{self.name}', mass={self.parameters.mass:.2f} kg, side={self.side.name})"
