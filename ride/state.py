"""
Simulation state representation
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

import numpy as np

from ride.params import RotationDirection

if TYPE_CHECKING:
    from ride.motor import MotorState


@dataclass
class PlatformParams:
    """Main platform rotation"""

    angular_velocity: float  # rad/s (signed)
    direction: RotationDirection
    target_angular_velocity: float  # rad/s (magnitude)


@dataclass
class WindmillParams:
    """Windmill (secondary platform) rotation about its own centre"""

    angular_velocity: float  # rad/s (signed)
    direction: RotationDirection
    target_angular_velocity: float  # rad/s (magnitude)


@dataclass
class TiltParams:
    """
    Tilt mechanism

    The windmill tilts about a horizontal axis through the pivot point, tangent
    to the circle of radius pivot_radius. The pivot rotates with the platform.
    """

    pivot_radius: float  # m
    tilt_angle: float  # rad
    target_tilt_angle: float  # rad
    secondary_platform_offset: float  # m
    tilt_rate: float = 0.0  # rad/s, slope over the last tick


@dataclass
class CabinState:
    """Derived state of one cabin (fixed to the windmill)"""

    cabin_angle: float  # rad, fixed angle on the windmill
    distance_from_center: float  # m, from windmill centre
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))  # m
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))  # m/s
    acceleration: np.ndarray = field(default_factory=lambda: np.zeros(3))  # m/s²
    radial_acceleration: float = 0.0  # m/s²
    tangential_acceleration: float = 0.0  # m/s²
    total_acceleration: float = 0.0  # m/s²
    g_force: float = 0.0

    def to_array(self) -> np.ndarray:
        """Flatten to [pos(3), vel(3), acc(3), radial, tangential, total, g]"""
        return np.concatenate([
            self.position,
            self.velocity,
            self.acceleration,
            [self.radial_acceleration, self.tangential_acceleration, self.total_acceleration, self.g_force],
        ])


@dataclass
class SimulationState:
    """Complete simulation state at one point in time"""

    time: float  # s
    platform: PlatformParams
    tilt: TiltParams
    windmill: WindmillParams
    platform_phase: float  # rad, [0, 2π)
    windmill_phase: float  # rad, [0, 2π)
    cabins: List[CabinState] = field(default_factory=list)

    def to_array(self) -> np.ndarray:
        """
        Flatten every numeric field into one vector

        Layout: [time, platform(3), tilt(5), windmill(3), platform_phase,
        windmill_phase, cabin_0(13), cabin_1(13), ...]
        """
        head = np.array([
            self.time,
            self.platform.angular_velocity,
            float(self.platform.direction),
            self.platform.target_angular_velocity,
            self.tilt.pivot_radius,
            self.tilt.tilt_angle,
            self.tilt.target_tilt_angle,
            self.tilt.secondary_platform_offset,
            self.tilt.tilt_rate,
            self.windmill.angular_velocity,
            float(self.windmill.direction),
            self.windmill.target_angular_velocity,
            self.platform_phase,
            self.windmill_phase,
        ])
        if not self.cabins:
            return head
        return np.concatenate([head] + [cabin.to_array() for cabin in self.cabins])


@dataclass
class MainsSupply:
    """Mains supply feeding the drives"""

    voltage: float  # V line-to-line
    frequency: float  # Hz
    available: bool
    total_power: float  # W


@dataclass
class ElectricalSystemState:
    """Snapshot of the ride's electrical system"""

    platform_motor: "MotorState"
    windmill_motor: "MotorState"
    hydraulic_motor: "MotorState"
    mains_supply: MainsSupply


@dataclass
class HydraulicState:
    """Snapshot of the tilt hydraulics"""

    pump_motor: "MotorState"
    pressure: float  # bar
    target_pressure: float  # bar
    cylinder_position: float  # 0-1 over the tilt range
    target_position: float  # 0-1 over the tilt range
    oil_temperature: float  # °C
    flow_rate: float  # L/min
