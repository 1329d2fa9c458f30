"""
Geometric utility functions for subsystem assembly.

This module provides geometric calculation utilities including:
- Orthonormal joint frames built from a single axis
- Lateral mirroring of points
- Validation of 3D vectors
"""

import numpy as np
from typing import Union, Tuple


def as_vector3(value: Union[np.ndarray, Tuple[float, float, float]], name: str = "vector") -> np.ndarray:
    """
    Convert a value to a float 3-vector.

    Args:
        value: Sequence or array with three components
        name: Name used in error messages

    Returns:
        New float array of shape (3,)

    Raises:
        ValueError: If the value does not have exactly three components
    """
    array = np.array(value, dtype=float)
    if array.shape != (3,):
        raise ValueError(f"{name} must be a 3-element array [x, y, z], got shape {array.shape}")
    return array


def unit_vector(value: Union[np.ndarray, Tuple[float, float, float]], name: str = "axis") -> np.ndarray:
    """
    Normalize a 3-vector.

    Raises:
        ValueError: If the vector has (near) zero length
    """
    vector = as_vector3(value, name)
    norm = np.linalg.norm(vector)
    if norm < 1e-12:
        raise ValueError(f"{name} has zero length")
    return vector / norm


def frame_from_axis(axis: Union[np.ndarray, Tuple[float, float, float]]) -> np.ndarray:
    """
    Build a right-handed orthonormal frame whose z column is the given axis.

    The x column is chosen perpendicular to the axis using the coordinate
    direction least aligned with it, so the frame is well defined for any
    non-zero axis.

    Args:
        axis: Direction of the frame z axis

    Returns:
        3x3 rotation matrix with columns [x, y, z]

    Examples:
        >>> R = frame_from_axis([0, 0, 1])
        >>> np.allclose(R[:, 2], [0, 0, 1])
        True
    """
    z = unit_vector(axis)
    helper = np.zeros(3)
    helper[np.argmin(np.abs(z))] = 1.0
    x = np.cross(helper, z)
    x /= np.linalg.norm(x)
    y = np.cross(z, x)
    return np.column_stack([x, y, z])


def mirror_point(point: Union[np.ndarray, Tuple[float, float, float]]) -> np.ndarray:
    """
    Mirror a point across the vehicle longitudinal-vertical (XZ) plane.

    Args:
        point: 3D point [x, y, z]

    Returns:
        New point [x, -y, z]
    """
    mirrored = as_vector3(point, "point")
    mirrored[1] = -mirrored[1]
    return mirrored


def midpoint(point1: np.ndarray, point2: np.ndarray) -> np.ndarray:
    """Return the point halfway between two points."""
    return (np.asarray(point1, dtype=float) + np.asarray(point2, dtype=float)) / 2.0
