"""
Hardpoint tables for suspension templates.

A hardpoint table maps every member of a point enumeration (SPINDLE,
UPRIGHT, SHOCK_C, ...) to a 3D coordinate in the suspension-local frame.
Tables are authored for the right side of the vehicle; the left side is
always derived with mirror().

All positions are stored internally in meters (m).
"""

import numpy as np
from enum import Enum
from typing import Dict, Iterator, Mapping, Tuple, Type, Union

from .geometry_utils import as_vector3, mirror_point
from .units import to_m, from_m


class HardpointTable:
    """
    Complete, immutable mapping from point identifiers to 3D coordinates.

    Every member of `point_ids` must be assigned; there are no defaults.
    Keys may be given as enum members or as member names.

    Attributes:
        point_ids: Enumeration class of the point identifiers
    """

    def __init__(self,
                 point_ids: Type[Enum],
                 points: Mapping[Union[Enum, str], Union[np.ndarray, Tuple[float, float, float]]],
                 unit: str = 'm'):
        """
        Initialize a hardpoint table.

        Args:
            point_ids: Enumeration class listing every required point
            points: Mapping from point identifier (member or name) to position
            unit: Unit of input positions (default: 'm')

        Raises:
            KeyError: If any identifier of the enumeration has no coordinate
            ValueError: If an unknown identifier is given or a position is malformed
        """
        self.point_ids = point_ids
        values: Dict[Enum, np.ndarray] = {}
        for key, position in points.items():
            point_id = self._resolve(key)
            values[point_id] = to_m(as_vector3(position, point_id.name), unit)

        missing = [member.name for member in point_ids if member not in values]
        if missing:
            raise KeyError(f"Hardpoint table for {point_ids.__name__} is missing points: {missing}")

        self._points = {member: values[member] for member in point_ids}

    def _resolve(self, key: Union[Enum, str]) -> Enum:
        if isinstance(key, self.point_ids):
            return key
        if isinstance(key, str) and key in self.point_ids.__members__:
            return self.point_ids[key]
        raise ValueError(f"Unknown hardpoint '{key}' for {self.point_ids.__name__}")

    def __getitem__(self, point_id: Union[Enum, str]) -> np.ndarray:
        return self._points[self._resolve(point_id)].copy()

    def __iter__(self) -> Iterator[Enum]:
        return iter(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HardpointTable):
            return NotImplemented
        return (self.point_ids is other.point_ids and
                all(np.array_equal(self._points[p], other._points[p]) for p in self._points))

    def items(self):
        """Iterate over (point_id, position) pairs in enumeration order."""
        for point_id, position in self._points.items():
            yield point_id, position.copy()

    def get_position(self, point_id: Union[Enum, str], unit: str = 'm') -> np.ndarray:
        """
        Get the position of a hardpoint.

        Args:
            point_id: Point identifier (member or name)
            unit: Unit for output (default: 'm')

        Returns:
            Position in specified unit
        """
        return from_m(self[point_id], unit)

    def mirror(self) -> 'HardpointTable':
        """
        Create the opposite-side table by negating every Y coordinate.

        Returns:
            New HardpointTable; mirroring twice reproduces the original
        """
        return HardpointTable(self.point_ids,
                              {point_id: mirror_point(position) for point_id, position in self._points.items()})

    def translated(self, offset: Union[np.ndarray, Tuple[float, float, float]]) -> Dict[Enum, np.ndarray]:
        """
        Get all positions shifted by an offset (in meters).

        Returns:
            Dictionary mapping point identifier to shifted position
        """
        shift = as_vector3(offset, "offset")
        return {point_id: position + shift for point_id, position in self._points.items()}

    def to_dict(self, unit: str = 'm') -> dict:
        """
        Serialize the table to a dictionary.

        Args:
            unit: Unit for the serialized positions (default: 'm')

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            'unit': unit,
            'points': {point_id.name: from_m(position, unit).tolist()
                       for point_id, position in self._points.items()},
        }

    @classmethod
    def from_dict(cls, point_ids: Type[Enum], data: dict) -> 'HardpointTable':
        """
        Deserialize a table from a dictionary.

        Args:
            point_ids: Enumeration class of the point identifiers
            data: Dictionary with 'points' and optional 'unit'

        Returns:
            New HardpointTable instance

        Raises:
            KeyError: If required fields or points are missing
        """
        return cls(point_ids, data['points'], unit=data.get('unit', 'm'))

    def __repr__(self) -> str:
        return f"HardpointTable({self.point_ids.__name__}, points={len(self._points)})"


def mirror(table: HardpointTable) -> HardpointTable:
    """Return the lateral mirror image of a hardpoint table."""
    return table.mirror()
