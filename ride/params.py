"""
Ride configuration parameters
"""

from dataclasses import dataclass, field, replace
from enum import IntEnum
import math


class RotationDirection(IntEnum):
    """Rotation direction seen from above"""

    CLOCKWISE = -1
    COUNTER_CLOCKWISE = 1


@dataclass(frozen=True)
class RampParams:
    """Time constants for exponential ramping (s)"""

    platform_ramp_time: float = 2.0
    windmill_ramp_time: float = 2.0
    tilt_ramp_time: float = 1.0  # Hydraulic actuator


@dataclass(frozen=True)
class OperatorControls:
    """Operator targets the simulation ramps toward"""

    platform_speed: float = 0.5  # rad/s
    windmill_speed: float = 1.0  # rad/s
    tilt_angle: float = 0.0  # rad
    platform_direction: RotationDirection = RotationDirection.COUNTER_CLOCKWISE
    windmill_direction: RotationDirection = RotationDirection.COUNTER_CLOCKWISE


@dataclass(frozen=True)
class RideConfiguration:
    """Physical and timing configuration of the ride"""

    time_step: float = 0.01  # s (10ms fixed physics step)
    num_cabins: int = 8
    # Platform geometry
    windmill_radius: float = 9.0  # m (secondary platform radius, cabins sit on its edge)
    platform_radius: float = 6.0  # m (2/3 of the windmill radius)
    pivot_radius: float = 2.0  # m (platform centre to tilt pivot point)
    secondary_platform_offset: float = 2.0  # m (pivot point to windmill centre, outward)
    # Tilt range
    min_tilt_angle: float = 0.0  # rad
    max_tilt_angle: float = math.radians(25.0)  # rad
    ramping: RampParams = field(default_factory=RampParams)
    initial_controls: OperatorControls = field(default_factory=OperatorControls)

    def __post_init__(self) -> None:
        """Validate parameters"""
        if self.time_step <= 0:
            raise ValueError(f"time_step must be positive, got {self.time_step}")
        if self.num_cabins < 1:
            raise ValueError(f"num_cabins must be at least 1, got {self.num_cabins}")
        for name in ("windmill_radius", "platform_radius", "pivot_radius"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.min_tilt_angle > self.max_tilt_angle:
            raise ValueError(
                f"min_tilt_angle ({self.min_tilt_angle}) exceeds max_tilt_angle ({self.max_tilt_angle})"
            )
        ramping = self.ramping
        if min(ramping.platform_ramp_time, ramping.windmill_ramp_time, ramping.tilt_ramp_time) < 0:
            raise ValueError("ramp time constants must be non-negative")
        if not self.min_tilt_angle <= self.initial_controls.tilt_angle <= self.max_tilt_angle:
            raise ValueError(
                f"initial tilt angle {self.initial_controls.tilt_angle} is outside "
                f"[{self.min_tilt_angle}, {self.max_tilt_angle}]"
            )

    def clamp_tilt(self, tilt_angle: float) -> float:
        """
        Clamp a tilt angle into the mechanical range

        Args:
            tilt_angle: Requested tilt angle (rad)

        Returns:
            Tilt angle within [min_tilt_angle, max_tilt_angle]
        """
        return max(self.min_tilt_angle, min(self.max_tilt_angle, tilt_angle))

    def with_overrides(self, **changes) -> "RideConfiguration":
        """Return a validated copy with some fields replaced"""
        return replace(self, **changes)
