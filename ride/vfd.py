"""
Variable frequency drive: frequency ramp, V/Hz law and direction interlock

A VFD reverses an induction motor by swapping two output phases (B and C).
Swapping the phase sequence while the rotor still carries kinetic energy
plugs the motor, so the reversal is guarded by an interlock that only lets
the sequence change once both shaft speed and output frequency are near zero.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
import logging

logger = logging.getLogger(__name__)

# Both shaft speed (rad/s) and output frequency (Hz) must be below this
# before the phase sequence may change
REVERSAL_SPEED_EPSILON = 0.5
# Frequency error (Hz) below which the ramp snaps onto its target
FREQUENCY_SNAP = 0.01
# Frequency (Hz) below which the low-frequency voltage boost applies
BOOST_CORNER_FREQUENCY = 10.0


class MotorDirection(IntEnum):
    """Phase sequence of the drive output"""

    FORWARD = 1  # A-B-C
    REVERSE = -1  # A-C-B


class ReversalState(Enum):
    """Direction interlock states"""

    STEADY = "STEADY"
    PENDING_REVERSAL = "PENDING_REVERSAL"


@dataclass
class DirectionInterlock:
    """
    Two-state interlock guarding the phase-sequence swap

    STEADY: current_direction == target_direction.
    PENDING_REVERSAL: a different direction was requested while the motor was
    moving; the drive must ramp to zero before update() lets the swap happen.
    """

    target_direction: MotorDirection = MotorDirection.FORWARD
    current_direction: MotorDirection = MotorDirection.FORWARD
    state: ReversalState = ReversalState.STEADY

    @property
    def pending(self) -> bool:
        return self.state is ReversalState.PENDING_REVERSAL

    @staticmethod
    def is_safe_to_swap(shaft_speed: float, output_frequency: float) -> bool:
        """True when the rotor has no appreciable kinetic energy"""
        return shaft_speed < REVERSAL_SPEED_EPSILON and output_frequency < REVERSAL_SPEED_EPSILON

    def request(self, direction: MotorDirection, shaft_speed: float, output_frequency: float) -> None:
        """
        Request a direction

        Args:
            direction: Requested phase sequence
            shaft_speed: Present shaft speed (rad/s, ≥ 0)
            output_frequency: Present drive output frequency (Hz)
        """
        if direction == self.target_direction:
            return
        self.target_direction = direction

        if direction == self.current_direction:
            # Original direction requested again before the swap: cancel
            self.state = ReversalState.STEADY
        elif self.is_safe_to_swap(shaft_speed, output_frequency):
            self._swap()
        else:
            self.state = ReversalState.PENDING_REVERSAL

    def update(self, shaft_speed: float, output_frequency: float) -> bool:
        """
        Advance the interlock

        Returns:
            True if the phase sequence was swapped on this call
        """
        if self.state is ReversalState.PENDING_REVERSAL and self.is_safe_to_swap(shaft_speed, output_frequency):
            self._swap()
            return True
        return False

    def _swap(self) -> None:
        logger.debug("Phase sequence swap: %s -> %s", self.current_direction.name, self.target_direction.name)
        self.current_direction = self.target_direction
        self.state = ReversalState.STEADY


@dataclass
class VFDSettings:
    """Drive settings and ramp state"""

    target_frequency: float = 0.0  # Hz, requested by the operator
    max_frequency: float = 60.0  # Hz
    acceleration_time: float = 8.0  # s, 0 -> max_frequency
    deceleration_time: float = 10.0  # s, max_frequency -> 0
    output_frequency: float = 0.0  # Hz
    v_per_hz_ratio: float = 380.0 / 50.0  # V/Hz (7.6 for 380V/50Hz)
    low_frequency_boost: float = 5.0  # % voltage boost at 0 Hz
    dc_bus_voltage: float = 540.0  # V, rectified 380V supply
    interlock: DirectionInterlock = field(default_factory=DirectionInterlock)

    @property
    def target_direction(self) -> MotorDirection:
        return self.interlock.target_direction

    @property
    def current_direction(self) -> MotorDirection:
        return self.interlock.current_direction

    @property
    def direction_change_pending(self) -> bool:
        return self.interlock.pending

    @property
    def effective_target_frequency(self) -> float:
        """Frequency the ramp is heading for; zero while a reversal is pending"""
        if self.interlock.pending:
            return 0.0
        return self.target_frequency

    @property
    def acceleration_rate(self) -> float:
        """Hz/s"""
        return self.max_frequency / self.acceleration_time

    @property
    def deceleration_rate(self) -> float:
        """Hz/s"""
        return self.max_frequency / self.deceleration_time


def ramp_frequency(output: float, target: float, acceleration_rate: float, deceleration_rate: float, dt: float) -> float:
    """
    Trapezoidal frequency ramp

    Args:
        output: Present output frequency (Hz)
        target: Frequency to ramp toward (Hz)
        acceleration_rate: Ramp-up rate (Hz/s)
        deceleration_rate: Ramp-down rate (Hz/s)
        dt: Time step (s)

    Returns:
        New output frequency (Hz)
    """
    error = target - output
    if abs(error) < FREQUENCY_SNAP:
        return target
    if error > 0:
        return min(output + acceleration_rate * dt, target)
    return max(output - deceleration_rate * dt, target)


def output_voltage(frequency: float, settings: VFDSettings, rated_voltage: float) -> float:
    """
    Drive output voltage (line-to-line) under V/Hz control

    Below the boost corner frequency the voltage is raised to compensate the
    stator resistance drop; the result never exceeds the motor rating.
    """
    voltage = frequency * settings.v_per_hz_ratio
    if 0 < frequency < BOOST_CORNER_FREQUENCY:
        voltage *= 1 + (settings.low_frequency_boost / 100) * (1 - frequency / BOOST_CORNER_FREQUENCY)
    return min(voltage, rated_voltage)
