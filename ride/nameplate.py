"""
Induction motor nameplate data and unit conversions

Nameplates are typical of ride drives on a 380V / 50Hz 3-phase supply.
"""

from dataclasses import dataclass
from typing import Dict
import math


@dataclass(frozen=True)
class MotorNameplate:
    """Rated values of a 3-phase induction motor"""

    name: str
    rated_power: float  # W
    rated_voltage: float  # V line-to-line
    poles: int
    rated_frequency: float  # Hz
    rated_current: float  # A per phase
    power_factor: float  # 0-1
    efficiency: float  # 0-1
    rated_torque: float  # Nm
    starting_torque_multiplier: float  # × rated torque
    breakdown_torque_multiplier: float  # × rated torque
    starting_current_multiplier: float  # × rated current (locked rotor)
    rotor_inertia: float  # kg·m²


MOTOR_SPECS: Dict[str, MotorNameplate] = {
    # 15 kW, 4-pole: 1500 RPM synchronous, ~1460 RPM rated
    "platform": MotorNameplate(
        name="Main Platform Drive",
        rated_power=15000.0,
        rated_voltage=380.0,
        poles=4,
        rated_frequency=50.0,
        rated_current=27.9,
        power_factor=0.89,
        efficiency=0.919,
        rated_torque=98.1,  # P / ω at 1460 RPM
        starting_torque_multiplier=2.0,
        breakdown_torque_multiplier=2.5,
        starting_current_multiplier=7.0,
        rotor_inertia=0.35,
    ),
    # 7.5 kW, 4-pole
    "windmill": MotorNameplate(
        name="Windmill Drive",
        rated_power=7500.0,
        rated_voltage=380.0,
        poles=4,
        rated_frequency=50.0,
        rated_current=14.5,
        power_factor=0.87,
        efficiency=0.905,
        rated_torque=49.1,
        starting_torque_multiplier=2.2,
        breakdown_torque_multiplier=2.6,
        starting_current_multiplier=7.5,
        rotor_inertia=0.15,
    ),
    # 3 kW, 4-pole tilt pump
    "hydraulic": MotorNameplate(
        name="Hydraulic Pump",
        rated_power=3000.0,
        rated_voltage=380.0,
        poles=4,
        rated_frequency=50.0,
        rated_current=6.2,
        power_factor=0.85,
        efficiency=0.87,
        rated_torque=19.5,
        starting_torque_multiplier=2.0,
        breakdown_torque_multiplier=2.3,
        starting_current_multiplier=6.5,
        rotor_inertia=0.05,
    ),
}


def rpm_to_rad_per_sec(rpm: float) -> float:
    """Convert RPM to rad/s"""
    return rpm * 2 * math.pi / 60


def rad_per_sec_to_rpm(rad_per_sec: float) -> float:
    """Convert rad/s to RPM"""
    return rad_per_sec * 60 / (2 * math.pi)


def synchronous_speed(poles: int, frequency: float) -> float:
    """
    Synchronous speed of the stator field

    Args:
        poles: Number of motor poles
        frequency: Supply frequency (Hz)

    Returns:
        Synchronous speed (rad/s)
    """
    # n_sync = 120 * f / p (RPM)
    return rpm_to_rad_per_sec(120 * frequency / poles)

