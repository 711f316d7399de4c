"""
Cabin kinematics from superposed rotating and tilting frames

The motion of a cabin is the composition of:
1. Windmill rotation about the windmill centre (cabins are fixed to it)
2. Tilt of the windmill about a horizontal axis through the pivot point,
   tangent to the pivot circle; the windmill centre sits
   secondary_platform_offset outward from the pivot
3. Platform rotation about the vertical axis (the pivot rides on it)

Frames (right-handed, z up):
- disc frame: windmill plane, origin at the windmill centre
- platform frame: x axis through the pivot point, origin at platform centre
- world frame: platform frame rotated by platform_phase about z

Velocity and acceleration come from central finite differences of the
position function. All functions are pure: they take explicit parameter
structs and return new values.
"""

from dataclasses import dataclass
from typing import Tuple
import math

import numpy as np

from ride.state import CabinState, SimulationState

GRAVITY = 9.81  # m/s²
GRAVITY_VECTOR = np.array([0.0, 0.0, -GRAVITY])
FD_STEP = 1e-4  # s, finite-difference window
TWO_PI = 2 * math.pi


@dataclass(frozen=True)
class FrameGeometry:
    """Fixed geometry of the tilt mechanism"""

    pivot_radius: float  # m, platform centre to pivot point
    secondary_platform_offset: float  # m, pivot point to windmill centre


@dataclass(frozen=True)
class FramePose:
    """Instantaneous frame angles"""

    platform_phase: float  # rad
    windmill_phase: float  # rad
    tilt_angle: float  # rad

    def advanced(self, rates: "FrameRates", dt: float) -> "FramePose":
        """Pose after dt at constant rates (dt may be negative)"""
        return FramePose(
            self.platform_phase + rates.platform * dt,
            self.windmill_phase + rates.windmill * dt,
            self.tilt_angle + rates.tilt * dt,
        )


@dataclass(frozen=True)
class FrameRates:
    """Angular rates of the frames (rad/s)"""

    platform: float
    windmill: float
    tilt: float = 0.0


def wrap_phase(angle: float) -> float:
    """Wrap an angle into [0, 2π)"""
    wrapped = angle % TWO_PI
    # A tiny negative angle rounds up to exactly 2π
    if wrapped >= TWO_PI:
        return 0.0
    return wrapped


def frame_inputs(state: SimulationState) -> Tuple[FramePose, FrameRates, FrameGeometry]:
    """Extract frame parameters from the simulation state"""
    pose = FramePose(state.platform_phase, state.windmill_phase, state.tilt.tilt_angle)
    rates = FrameRates(state.platform.angular_velocity, state.windmill.angular_velocity, state.tilt.tilt_rate)
    geometry = FrameGeometry(state.tilt.pivot_radius, state.tilt.secondary_platform_offset)
    return pose, rates, geometry


def cabin_position(
    cabin_angle: float,
    cabin_distance: float,
    pose: FramePose,
    geometry: FrameGeometry,
) -> np.ndarray:
    """
    World-frame position of a cabin

    Args:
        cabin_angle: Fixed angle of the cabin on the windmill (rad)
        cabin_distance: Distance from the windmill centre (m)
        pose: Platform phase, windmill phase and tilt angle
        geometry: Pivot radius and secondary platform offset

    Returns:
        Position [x, y, z] (m), z measured from the platform plane
    """
    # Disc frame, relative to the pivot point before tilting
    angle = cabin_angle + pose.windmill_phase
    radial = geometry.secondary_platform_offset + cabin_distance * np.cos(angle)
    lateral = cabin_distance * np.sin(angle)

    # Tilt about the pivot axis lifts the outward side
    cos_tilt = np.cos(pose.tilt_angle)
    sin_tilt = np.sin(pose.tilt_angle)
    x_platform = geometry.pivot_radius + radial * cos_tilt
    y_platform = lateral
    z_platform = radial * sin_tilt

    # Platform rotation about vertical
    cos_plat = np.cos(pose.platform_phase)
    sin_plat = np.sin(pose.platform_phase)
    return np.array([
        x_platform * cos_plat - y_platform * sin_plat,
        x_platform * sin_plat + y_platform * cos_plat,
        z_platform,
    ])


def cabin_velocity(
    cabin_angle: float,
    cabin_distance: float,
    pose: FramePose,
    rates: FrameRates,
    geometry: FrameGeometry,
    delta: float = FD_STEP,
) -> np.ndarray:
    """World-frame velocity (m/s) by central difference of cabin_position"""
    before = cabin_position(cabin_angle, cabin_distance, pose.advanced(rates, -delta / 2), geometry)
    after = cabin_position(cabin_angle, cabin_distance, pose.advanced(rates, delta / 2), geometry)
    return (after - before) / delta


def cabin_acceleration(
    cabin_angle: float,
    cabin_distance: float,
    pose: FramePose,
    rates: FrameRates,
    geometry: FrameGeometry,
    delta: float = FD_STEP,
) -> np.ndarray:
    """
    World-frame acceleration (m/s²) by central difference of cabin_velocity

    Rates are held constant across the window, so angular accelerations of
    the frames do not contribute.
    """
    before = cabin_velocity(cabin_angle, cabin_distance, pose.advanced(rates, -delta / 2), rates, geometry, delta)
    after = cabin_velocity(cabin_angle, cabin_distance, pose.advanced(rates, delta / 2), rates, geometry, delta)
    return (after - before) / delta


def decompose_acceleration(
    acceleration: np.ndarray, position: np.ndarray, velocity: np.ndarray
) -> Tuple[float, float]:
    """
    Split acceleration into horizontal radial and tangential components

    Radial is positive away from the ride axis. Tangential is positive along
    the cabin's horizontal direction of travel (counter-clockwise when the
    cabin is not moving horizontally).

    Args:
        acceleration: Acceleration vector (m/s²)
        position: Position vector (m)
        velocity: Velocity vector (m/s)

    Returns:
        Tuple of (radial, tangential) in m/s²
    """
    horizontal_distance = math.hypot(position[0], position[1])
    if horizontal_distance < 1e-10:
        return 0.0, float(np.linalg.norm(acceleration))

    radial_unit = np.array([position[0], position[1]]) / horizontal_distance
    tangential_unit = np.array([-radial_unit[1], radial_unit[0]])
    if velocity[0] * tangential_unit[0] + velocity[1] * tangential_unit[1] < 0:
        tangential_unit = -tangential_unit

    radial = float(acceleration[0] * radial_unit[0] + acceleration[1] * radial_unit[1])
    tangential = float(acceleration[0] * tangential_unit[0] + acceleration[1] * tangential_unit[1])
    return radial, tangential


def compute_g_force(acceleration: np.ndarray) -> float:
    """G-force = |acceleration| / g"""
    return float(np.linalg.norm(acceleration)) / GRAVITY


def update_cabin_physics(cabin_angle: float, cabin_distance: float, state: SimulationState) -> CabinState:
    """
    Compute the full kinematic state of one cabin

    The felt g-force is taken from the specific force (acceleration minus
    gravity), so a cabin at rest reads 1 g.

    Args:
        cabin_angle: Fixed angle of the cabin on the windmill (rad)
        cabin_distance: Distance from the windmill centre (m)
        state: Current simulation state (phases, rates, tilt)

    Returns:
        New CabinState
    """
    pose, rates, geometry = frame_inputs(state)

    position = cabin_position(cabin_angle, cabin_distance, pose, geometry)
    velocity = cabin_velocity(cabin_angle, cabin_distance, pose, rates, geometry)
    acceleration = cabin_acceleration(cabin_angle, cabin_distance, pose, rates, geometry)

    radial, tangential = decompose_acceleration(acceleration, position, velocity)

    return CabinState(
        cabin_angle=cabin_angle,
        distance_from_center=cabin_distance,
        position=position,
        velocity=velocity,
        acceleration=acceleration,
        radial_acceleration=radial,
        tangential_acceleration=tangential,
        total_acceleration=float(np.linalg.norm(acceleration)),
        g_force=compute_g_force(acceleration - GRAVITY_VECTOR),
    )
