"""
Identifier enumerations shared by the vehicle subsystems.

Coordinate system (vehicle and suspension frames):
- x: longitudinal (+ rear, - front)
- y: lateral (+ right, - left)
- z: vertical (+ up, - down)
"""

from enum import Enum, IntEnum, IntFlag


class Side(IntEnum):
    """Vehicle side of a suspension corner."""
    LEFT = 0
    RIGHT = 1


class WheelId(IntEnum):
    """Wheel identifiers, also the index order of per-wheel input arrays."""
    FRONT_LEFT = 0
    FRONT_RIGHT = 1
    REAR_LEFT = 2
    REAR_RIGHT = 3


class Axle(Enum):
    """Axle location of a suspension."""
    FRONT = "front"
    REAR = "rear"


class DriveType(Enum):
    """Driveline configuration (single driven axle)."""
    RWD = "rwd"
    FWD = "fwd"


class VisualizationType(Enum):
    """Kind of visualization assets attached to bodies."""
    NONE = "none"
    PRIMITIVES = "primitives"
    MESH = "mesh"


class DebugFlags(IntFlag):
    """Selection of vehicle debug reports."""
    SHOCKS = 1
    CONSTRAINTS = 2


# Closed mapping from wheel identifier to its axle and side
WHEEL_LOCATIONS = {
    WheelId.FRONT_LEFT: (Axle.FRONT, Side.LEFT),
    WheelId.FRONT_RIGHT: (Axle.FRONT, Side.RIGHT),
    WheelId.REAR_LEFT: (Axle.REAR, Side.LEFT),
    WheelId.REAR_RIGHT: (Axle.REAR, Side.RIGHT),
}


def wheel_location(which) -> tuple:
    """
    Resolve a wheel identifier to its (axle, side) pair.

    Args:
        which: WheelId member or its integer value

    Returns:
        Tuple of (Axle, Side)

    Raises:
        ValueError: If `which` is not a valid wheel identifier
    """
    if isinstance(which, bool):
        raise ValueError(f"Invalid wheel identifier: {which!r}")
    try:
        wheel_id = WheelId(which)
    except ValueError:
        raise ValueError(f"Invalid wheel identifier: {which!r}") from None
    return WHEEL_LOCATIONS[wheel_id]
