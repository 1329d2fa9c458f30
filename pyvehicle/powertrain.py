"""
Simple powertrain model.

- single gear transmission with forward and reverse ratios
- linear speed-torque curve (DC motor like)
- no torque converter, no differential (handled by the driveline)
"""

import logging
import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .shafts import Shaft
from .suspension import require_positive

logger = logging.getLogger(__name__)

# Gear ratio used in NEUTRAL; drives the output torque to zero
NEUTRAL_GEAR_RATIO = 1e20


class DriveMode(Enum):
    """Transmission drive mode."""
    FORWARD = "forward"
    REVERSE = "reverse"
    NEUTRAL = "neutral"


@dataclass
class SimplePowertrainParameters:
    """
    Simple powertrain parameters.

    Attributes:
        forward_gear_ratio: Motor to driveshaft ratio in forward (> 0)
        reverse_gear_ratio: Motor to driveshaft ratio in reverse (< 0)
        max_torque: Motor stall torque (N*m)
        max_speed: Motor no-load speed (rad/s)
    """
    forward_gear_ratio: float
    reverse_gear_ratio: float
    max_torque: float
    max_speed: float

    def __post_init__(self):
        require_positive("Forward gear ratio", self.forward_gear_ratio)
        if not np.isfinite(self.reverse_gear_ratio) or self.reverse_gear_ratio >= 0.0:
            raise ValueError(f"Reverse gear ratio must be negative, got {self.reverse_gear_ratio}")
        require_positive("Max motor torque", self.max_torque)
        require_positive("Max motor speed", self.max_speed)

    def to_dict(self) -> dict:
        return {
            'forward_gear_ratio': float(self.forward_gear_ratio),
            'reverse_gear_ratio': float(self.reverse_gear_ratio),
            'max_torque': float(self.max_torque),
            'max_speed': float(self.max_speed),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SimplePowertrainParameters':
        return cls(forward_gear_ratio=data['forward_gear_ratio'],
                   reverse_gear_ratio=data['reverse_gear_ratio'],
                   max_torque=data['max_torque'],
                   max_speed=data['max_speed'])


class SimplePowertrain:
    """
    Torque-curve powertrain keyed by drive mode.

    Attributes:
        parameters: Powertrain parameters
        drive_mode: Current drive mode
        current_gear_ratio: Gear ratio selected by the drive mode
        motor_speed: Motor speed from the last update (rad/s)
        motor_torque: Motor torque from the last update (N*m)
        shaft_torque: Torque at the driveshaft from the last update (N*m)
        driveshaft: Driveshaft fed by the powertrain (non-owning)
    """

    def __init__(self, parameters: SimplePowertrainParameters):
        self.parameters = parameters
        self.drive_mode = DriveMode.FORWARD
        self.current_gear_ratio = parameters.forward_gear_ratio
        self.motor_speed = 0.0
        self.motor_torque = 0.0
        self.shaft_torque = 0.0
        self.driveshaft: Optional[Shaft] = None

    def initialize(self, driveshaft: Optional[Shaft] = None) -> None:
        """
        Select FORWARD and optionally record the driveshaft.

        Args:
            driveshaft: Driveshaft fed by the powertrain (default: None)
        """
        self.driveshaft = driveshaft
        self.set_drive_mode(DriveMode.FORWARD)
        logger.debug("Initialized simple powertrain (ratio %.4f)", self.current_gear_ratio)

    def set_drive_mode(self, mode: DriveMode) -> None:
        """
        Change the drive mode and the active gear ratio.

        Args:
            mode: FORWARD, REVERSE or NEUTRAL
        """
        mode = DriveMode(mode)
        self.drive_mode = mode
        if mode == DriveMode.FORWARD:
            self.current_gear_ratio = self.parameters.forward_gear_ratio
        elif mode == DriveMode.REVERSE:
            self.current_gear_ratio = self.parameters.reverse_gear_ratio
        else:
            self.current_gear_ratio = NEUTRAL_GEAR_RATIO

    def update(self, time: float, throttle: float, shaft_speed: float) -> None:
        """
        Compute motor and shaft torques.

        Throttle is used as given; callers clamp it to [0, 1].

        Args:
            time: Simulation time (s)
            throttle: Throttle input
            shaft_speed: Driveshaft angular speed (rad/s)
        """
        p = self.parameters
        self.motor_speed = shaft_speed / self.current_gear_ratio
        self.motor_torque = (p.max_torque - self.motor_speed * (p.max_torque / p.max_speed)) * throttle
        self.shaft_torque = self.motor_torque / self.current_gear_ratio

    def get_motor_speed(self) -> float:
        return self.motor_speed

    def get_motor_torque(self) -> float:
        return self.motor_torque

    def get_output_torque(self) -> float:
        """Torque delivered to the driveshaft (N*m)."""
        return self.shaft_torque

    def __repr__(self) -> str:
        return (f"SimplePowertrain(mode={self.drive_mode.name}, "
                f"ratio={self.current_gear_ratio:.4g}, shaft_torque={self.shaft_torque:.2f} N*m)")


if __name__ == "__main__":
    print("=" * 70)
    print("SIMPLE POWERTRAIN TEST")
    print("=" * 70)

    powertrain = SimplePowertrain(SimplePowertrainParameters(
        forward_gear_ratio=0.3, reverse_gear_ratio=-0.3, max_torque=8000.0, max_speed=2000.0))
    powertrain.initialize()

    for speed in (0.0, 300.0, 600.0):
        powertrain.update(0.0, 1.0, speed)
        print(f"shaft speed {speed:6.1f} rad/s -> motor torque {powertrain.motor_torque:8.2f} N*m, "
              f"shaft torque {powertrain.shaft_torque:8.2f} N*m")

    powertrain.update(0.0, 1.0, 2000.0 * 0.3)
    assert abs(powertrain.motor_torque) < 1e-9
    print("✓ Zero motor torque at max speed")

    powertrain.set_drive_mode(DriveMode.NEUTRAL)
    powertrain.update(0.0, 1.0, 0.0)
    assert abs(powertrain.shaft_torque) < 1e-9
    print("✓ Neutral drives shaft torque to zero")
