"""
Visualization descriptors attached to bodies.

Descriptors are plain data for an external renderer: primitive shapes are
expressed in body coordinates and meshes are referenced by name and file.
Nothing here loads or draws geometry.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Tuple

from .rigid_body import Body


@dataclass
class CylinderShape:
    """Cylinder between two points in body coordinates."""
    p1: np.ndarray
    p2: np.ndarray
    radius: float


@dataclass
class SphereShape:
    """Sphere centered at a point in body coordinates."""
    center: np.ndarray
    radius: float


@dataclass
class BoxShape:
    """Axis-aligned box in body coordinates."""
    lengths: Tuple[float, float, float]
    center: np.ndarray = field(default_factory=lambda: np.zeros(3))


@dataclass
class MeshShape:
    """Reference to a mesh file (never loaded by this package)."""
    name: str
    filename: str


def add_cylinder(body: Body, p1: np.ndarray, p2: np.ndarray, radius: float) -> CylinderShape:
    """
    Attach a cylinder between two global points.

    Args:
        body: Body receiving the asset
        p1: First end point (global)
        p2: Second end point (global)
        radius: Cylinder radius in m

    Returns:
        The attached CylinderShape
    """
    shape = CylinderShape(body.point_to_local(p1), body.point_to_local(p2), float(radius))
    body.add_asset(shape)
    return shape


def add_visualization_link(link: Body, pt_axle: np.ndarray, pt_chassis: np.ndarray, radius: float) -> None:
    """Add a cylinder between the two end points of a link body."""
    add_cylinder(link, pt_axle, pt_chassis, radius)


def add_visualization_knuckle(knuckle: Body, pt_upper: np.ndarray, pt_lower: np.ndarray,
                              pt_spindle: np.ndarray, radius: float) -> None:
    """Add the kingpin cylinder and the arm reaching out to the spindle."""
    add_cylinder(knuckle, pt_upper, pt_lower, radius)
    add_cylinder(knuckle, (np.asarray(pt_upper) + np.asarray(pt_lower)) / 2.0, pt_spindle, radius)


def add_visualization_spindle(spindle: Body, radius: float, width: float) -> None:
    """Add a disc centered on the spindle, along its local lateral axis."""
    half = np.array([0.0, width / 2.0, 0.0])
    shape = CylinderShape(half, -half, float(radius))
    spindle.add_asset(shape)


def add_visualization_upright(upright: Body, points: Tuple[np.ndarray, ...], radius: float) -> None:
    """Add a small sphere at each upright attachment point."""
    for point in points:
        upright.add_asset(SphereShape(upright.point_to_local(point), float(radius)))
