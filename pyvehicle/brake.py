"""
Simple brake acting on a wheel spindle revolute joint.

The brake produces a friction torque of `modulation * max_torque` about the
revolute axis, opposing the spin of the spindle relative to its carrier.
The scene applies it with stick-slip behavior.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Optional

from .constraints import RevoluteJoint

logger = logging.getLogger(__name__)


@dataclass
class BrakeParameters:
    """
    Brake parameters.

    Attributes:
        max_torque: Brake torque at full modulation (N*m)
    """
    max_torque: float

    def __post_init__(self):
        if not np.isfinite(self.max_torque) or self.max_torque <= 0.0:
            raise ValueError(f"Brake max torque must be positive, got {self.max_torque}")

    def to_dict(self) -> dict:
        return {'max_torque': float(self.max_torque)}

    @classmethod
    def from_dict(cls, data: dict) -> 'BrakeParameters':
        return cls(max_torque=data['max_torque'])


class BrakeSimple:
    """
    Brake with torque proportional to the braking input.

    Attributes:
        name: Identifier for the brake
        parameters: Brake parameters
        revolute: Spindle revolute joint (non-owning, set by initialize)
        applied_torque: Brake torque applied during the last scene step (N*m)
    """

    def __init__(self, name: str, parameters: BrakeParameters):
        self.name = name
        self.parameters = parameters
        self.revolute: Optional[RevoluteJoint] = None
        self.scene = None
        self.applied_torque = 0.0
        self._modulation = 0.0

    def initialize(self, revolute: RevoluteJoint) -> None:
        """
        Attach the brake to a spindle revolute joint.

        Args:
            revolute: Revolute joint between the spindle carrier and the spindle

        Raises:
            RuntimeError: If the joint is not attached to a scene or the brake is already initialized
        """
        if self.revolute is not None:
            raise RuntimeError(f"Brake '{self.name}' is already initialized")
        if revolute is None or revolute.scene is None:
            raise RuntimeError(f"Brake '{self.name}' requires a revolute joint attached to a scene")
        self.revolute = revolute
        revolute.scene.add(self)
        logger.debug("Initialized brake '%s' on joint '%s'", self.name, revolute.name)

    def apply_modulation(self, modulation: float) -> None:
        """
        Set the braking input.

        Args:
            modulation: Braking input in [0, 1]
        """
        self._modulation = float(modulation)

    def get_modulation(self) -> float:
        """Get the current braking input."""
        return self._modulation

    def get_brake_torque(self) -> float:
        """Get the current maximum friction torque (N*m)."""
        return self._modulation * self.parameters.max_torque

    def destroy(self) -> None:
        """Detach the brake from its scene."""
        if self.scene is not None:
            self.scene.remove(self)
        self.revolute = None

    def __repr__(self) -> str:
        return (f"BrakeSimple('{self.name}', "
                f"max_torque={self.parameters.max_torque:.1f} N*m, "
                f"modulation={self._modulation:.3f})")
