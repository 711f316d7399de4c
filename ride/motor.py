"""
3-phase induction motor driven by a VFD

Physics model:
1. The VFD ramps output frequency (trapezoidal) and sets voltage by V/Hz
2. Rotor speed lags the synchronous speed by the slip
3. Torque follows the Kloss approximation of the torque-slip curve
4. Current is estimated from torque, with magnetising and stall terms
5. Phase currents are 120° apart; reverse swaps phases B and C
6. A first-order thermal model tracks winding temperature

Faults are represented as data: a tripped motor coasts and ignores commands
until reset().
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet
import logging
import math

from ride.nameplate import MOTOR_SPECS, MotorNameplate, synchronous_speed
from ride.vfd import MotorDirection, VFDSettings, output_voltage, ramp_frequency

logger = logging.getLogger(__name__)

AMBIENT_TEMPERATURE = 25.0  # °C
MAX_TEMPERATURE = 120.0  # °C, class F insulation limit
THERMAL_TIME_CONSTANT = 300.0  # s
RATED_TEMPERATURE_RISE = 70.0  # °C above ambient at rated losses

BREAKDOWN_SLIP = 0.20
LOCKED_ROTOR_TORQUE_FRACTION = 0.5  # × breakdown torque at s ≥ 1
RATED_SLIP = 0.03
LOW_FREQUENCY_TORQUE_CORNER = 10.0  # Hz
NO_LOAD_CURRENT_FRACTION = 0.35
OVERCURRENT_TRIP = 2.0  # × rated current, instantaneous
OVERLOAD_CURRENT = 1.5  # × rated current
OVERLOAD_TIME = 60.0  # s above OVERLOAD_CURRENT before tripping
COAST_FRICTION = 0.05  # 1/s speed decay while faulted


class MotorOperatingState(Enum):
    STOPPED = "STOPPED"
    ACCELERATING = "ACCELERATING"
    RUNNING = "RUNNING"
    DECELERATING = "DECELERATING"
    FAULT = "FAULT"


class MotorFault(Enum):
    NONE = "NONE"
    OVERCURRENT = "OVERCURRENT"
    OVERVOLTAGE = "OVERVOLTAGE"
    UNDERVOLTAGE = "UNDERVOLTAGE"
    OVERTEMPERATURE = "OVERTEMPERATURE"
    GROUND_FAULT = "GROUND_FAULT"
    PHASE_LOSS = "PHASE_LOSS"
    OVERLOAD = "OVERLOAD"


# Allowed operating-state transitions. FAULT is left only through reset().
TRANSITIONS: Dict[MotorOperatingState, FrozenSet[MotorOperatingState]] = {
    MotorOperatingState.STOPPED: frozenset({
        MotorOperatingState.ACCELERATING,
        MotorOperatingState.FAULT,
    }),
    MotorOperatingState.ACCELERATING: frozenset({
        MotorOperatingState.RUNNING,
        MotorOperatingState.DECELERATING,
        MotorOperatingState.STOPPED,
        MotorOperatingState.FAULT,
    }),
    MotorOperatingState.RUNNING: frozenset({
        MotorOperatingState.ACCELERATING,
        MotorOperatingState.DECELERATING,
        MotorOperatingState.STOPPED,
        MotorOperatingState.FAULT,
    }),
    MotorOperatingState.DECELERATING: frozenset({
        MotorOperatingState.STOPPED,
        MotorOperatingState.RUNNING,
        MotorOperatingState.ACCELERATING,
        MotorOperatingState.FAULT,
    }),
    MotorOperatingState.FAULT: frozenset({
        MotorOperatingState.STOPPED,
    }),
}


@dataclass
class PhaseValues:
    """One phase of the drive output"""

    voltage: float  # V line-to-neutral
    current: float  # A RMS
    phase_angle: float  # rad
    power: float  # W


@dataclass
class ThreePhaseElectrical:
    """3-phase electrical snapshot"""

    phase_a: PhaseValues
    phase_b: PhaseValues
    phase_c: PhaseValues
    neutral_current: float  # A, zero for a balanced load
    line_voltage: float  # V line-to-line
    total_power: float  # W
    reactive_power: float  # VAR
    apparent_power: float  # VA
    power_factor: float

    @classmethod
    def idle(cls, line_voltage: float) -> "ThreePhaseElectrical":
        """Energised but carrying no current"""
        line_to_neutral = line_voltage / math.sqrt(3)
        return cls(
            phase_a=PhaseValues(line_to_neutral, 0.0, 0.0, 0.0),
            phase_b=PhaseValues(line_to_neutral, 0.0, 2 * math.pi / 3, 0.0),
            phase_c=PhaseValues(line_to_neutral, 0.0, 4 * math.pi / 3, 0.0),
            neutral_current=0.0,
            line_voltage=line_voltage,
            total_power=0.0,
            reactive_power=0.0,
            apparent_power=0.0,
            power_factor=1.0,
        )


@dataclass
class MotorState:
    """Complete state of one motor and its drive"""

    nameplate: MotorNameplate
    vfd: VFDSettings
    electrical: ThreePhaseElectrical
    operating_state: MotorOperatingState = MotorOperatingState.STOPPED
    fault: MotorFault = MotorFault.NONE
    shaft_speed: float = 0.0  # rad/s, never negative
    slip: float = 0.0
    output_torque: float = 0.0  # Nm
    load_torque: float = 0.0  # Nm
    mechanical_power: float = 0.0  # W
    electrical_power: float = 0.0  # W
    current: float = 0.0  # A RMS per phase
    temperature: float = AMBIENT_TEMPERATURE  # °C
    runtime: float = 0.0  # s with the shaft turning
    overload_time: float = 0.0  # s continuously above OVERLOAD_CURRENT


def create_motor_state(
    nameplate: MotorNameplate,
    acceleration_time: float = 8.0,
    deceleration_time: float = 10.0,
    max_frequency: float = 60.0,
) -> MotorState:
    """Default state of a stopped, healthy motor"""
    vfd = VFDSettings(
        max_frequency=max_frequency,
        acceleration_time=acceleration_time,
        deceleration_time=deceleration_time,
        v_per_hz_ratio=nameplate.rated_voltage / nameplate.rated_frequency,
    )
    return MotorState(
        nameplate=nameplate,
        vfd=vfd,
        electrical=ThreePhaseElectrical.idle(nameplate.rated_voltage),
    )


def kloss_torque(slip: float, breakdown_torque: float, breakdown_slip: float = BREAKDOWN_SLIP) -> float:
    """
    Kloss approximation of the induction motor torque-slip curve

    T(s) = 2 * Tb * sb / (s + sb² / s), peaking at Tb when s = sb. A locked
    rotor (s ≥ 1) gives half the breakdown torque.

    Args:
        slip: Motor slip (0-1)
        breakdown_torque: Peak (breakdown) torque Tb (Nm)
        breakdown_slip: Slip sb at which the peak occurs

    Returns:
        Torque (Nm)
    """
    if slip <= 0:
        return 0.0
    if slip >= 1:
        return LOCKED_ROTOR_TORQUE_FRACTION * breakdown_torque
    return 2 * breakdown_torque * breakdown_slip / (slip + breakdown_slip ** 2 / slip)


class MotorDriveModel:
    """Simulates one VFD-controlled induction motor"""

    def __init__(
        self,
        nameplate: MotorNameplate,
        acceleration_time: float = 8.0,
        deceleration_time: float = 10.0,
        max_frequency: float = 60.0,
    ) -> None:
        """
        Initialize motor and drive

        Args:
            nameplate: Motor rated values
            acceleration_time: VFD ramp time 0 -> max_frequency (s)
            deceleration_time: VFD ramp time max_frequency -> 0 (s)
            max_frequency: VFD maximum output frequency (Hz)
        """
        self.nameplate = nameplate
        self._acceleration_time = acceleration_time
        self._deceleration_time = deceleration_time
        self._max_frequency = max_frequency
        self.state = self._fresh_state()

    def _fresh_state(self) -> MotorState:
        return create_motor_state(
            self.nameplate,
            acceleration_time=self._acceleration_time,
            deceleration_time=self._deceleration_time,
            max_frequency=self._max_frequency,
        )

    @property
    def is_faulted(self) -> bool:
        return self.state.fault is not MotorFault.NONE

    def get_state(self) -> MotorState:
        """Current motor state (read-only by contract)"""
        return self.state

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def set_target_frequency(self, frequency: float) -> None:
        """Set the speed command (Hz), clamped to [0, max_frequency]"""
        if self.is_faulted:
            return
        self.state.vfd.target_frequency = max(0.0, min(frequency, self.state.vfd.max_frequency))

    def set_direction(self, direction: MotorDirection) -> None:
        """
        Request a rotation direction

        If the motor is turning, the drive ramps to zero before swapping the
        phase sequence; see DirectionInterlock.
        """
        if self.is_faulted:
            return
        self.state.vfd.interlock.request(
            MotorDirection(direction), self.state.shaft_speed, self.state.vfd.output_frequency
        )

    def set_load_torque(self, torque: float) -> None:
        """Set external load torque (Nm), clamped to ≥ 0"""
        self.state.load_torque = max(0.0, torque)

    def set_acceleration_time(self, seconds: float) -> None:
        self._acceleration_time = max(0.5, seconds)
        self.state.vfd.acceleration_time = self._acceleration_time

    def set_deceleration_time(self, seconds: float) -> None:
        self._deceleration_time = max(0.5, seconds)
        self.state.vfd.deceleration_time = self._deceleration_time

    def trip(self, fault: MotorFault) -> None:
        """
        Trip the drive

        The first fault latches; later trips do not overwrite it.

        Args:
            fault: Cause of the trip
        """
        if fault is MotorFault.NONE:
            raise ValueError("cannot trip with MotorFault.NONE")
        if self.is_faulted:
            return
        logger.warning(
            "%s tripped: %s at %.1f rad/s, %.1f A, %.1f °C",
            self.nameplate.name, fault.value, self.state.shaft_speed, self.state.current, self.state.temperature,
        )
        self.state.fault = fault
        self.state.operating_state = MotorOperatingState.FAULT
        self.state.vfd.target_frequency = 0.0
        self.state.vfd.output_frequency = 0.0
        # Inverter output is off
        self.state.electrical = ThreePhaseElectrical.idle(0.0)
        self.state.current = 0.0
        self.state.output_torque = 0.0
        self.state.slip = 0.0
        self.state.mechanical_power = 0.0
        self.state.electrical_power = 0.0

    def reset(self) -> None:
        """Clear any fault and return to the default stopped state"""
        if self.is_faulted:
            logger.info("%s fault %s reset", self.nameplate.name, self.state.fault.value)
        self.state = self._fresh_state()

    # ------------------------------------------------------------------
    # Model
    # ------------------------------------------------------------------

    def _scaled_breakdown_torque(self, frequency: float) -> float:
        # Constant-flux scaling with (f / f_rated)²
        plate = self.nameplate
        freq_ratio = frequency / plate.rated_frequency
        return plate.rated_torque * freq_ratio * freq_ratio * plate.breakdown_torque_multiplier

    def breakdown_torque(self, frequency: float) -> float:
        """Peak torque available at an output frequency, boost included (Nm)"""
        return self._scaled_breakdown_torque(frequency) * self._low_frequency_torque_boost(frequency)

    @staticmethod
    def _low_frequency_torque_boost(frequency: float) -> float:
        if 0 < frequency < LOW_FREQUENCY_TORQUE_CORNER:
            return 1 + (LOW_FREQUENCY_TORQUE_CORNER - frequency) / 20
        return 1.0

    def available_torque(self, slip: float, frequency: float) -> float:
        """Motor torque at a slip and output frequency (Nm)"""
        breakdown = self._scaled_breakdown_torque(frequency)
        return kloss_torque(slip, breakdown) * self._low_frequency_torque_boost(frequency)

    def calculate_current(self, torque: float, frequency: float, voltage: float, stalled: bool = False) -> float:
        """
        Estimate RMS phase current

        Args:
            torque: Motor output torque (Nm)
            frequency: Output frequency (Hz)
            voltage: Output line voltage (V)
            stalled: Load exceeds the breakdown torque (locked-rotor region)

        Returns:
            Current per phase (A)
        """
        plate = self.nameplate
        if frequency <= 0:
            return 0.0

        no_load_current = plate.rated_current * NO_LOAD_CURRENT_FRACTION
        torque_ratio = torque / plate.rated_torque
        current = no_load_current + (plate.rated_current - no_load_current) * min(torque_ratio, 1.5)

        # Magnetising current dominates at low frequency
        freq_ratio = frequency / plate.rated_frequency
        if freq_ratio < 0.2:
            current *= 1 + (0.2 - freq_ratio) * 0.5

        if stalled:
            locked_rotor_current = plate.starting_current_multiplier * plate.rated_current
            current = max(current, locked_rotor_current * voltage / plate.rated_voltage)

        return current

    def _update_electrical(self, frequency: float, current: float) -> None:
        plate = self.nameplate
        vfd = self.state.vfd
        voltage = output_voltage(frequency, vfd, plate.rated_voltage)
        line_to_neutral = voltage / math.sqrt(3)
        power_factor = plate.power_factor
        phase_angle = math.acos(power_factor)
        phase_power = line_to_neutral * current * power_factor

        # Forward A(0°) B(120°) C(240°); reverse swaps B and C
        b_angle, c_angle = 2 * math.pi / 3, 4 * math.pi / 3
        if vfd.current_direction is MotorDirection.REVERSE:
            b_angle, c_angle = c_angle, b_angle

        self.state.electrical = ThreePhaseElectrical(
            phase_a=PhaseValues(line_to_neutral, current, 0.0, phase_power),
            phase_b=PhaseValues(line_to_neutral, current, b_angle, phase_power),
            phase_c=PhaseValues(line_to_neutral, current, c_angle, phase_power),
            neutral_current=0.0,
            line_voltage=voltage,
            total_power=3 * phase_power,
            reactive_power=3 * line_to_neutral * current * math.sin(phase_angle),
            apparent_power=3 * line_to_neutral * current,
            power_factor=power_factor,
        )

    def _update_temperature(self, dt: float) -> None:
        """First-order lag toward a temperature set by the losses"""
        plate = self.nameplate
        alpha = 1 - math.exp(-dt / THERMAL_TIME_CONSTANT)

        if self.is_faulted:
            target = AMBIENT_TEMPERATURE
        else:
            losses = self.state.electrical_power - self.state.mechanical_power
            normalized = losses / (plate.rated_power * (1 - plate.efficiency))
            target = AMBIENT_TEMPERATURE + RATED_TEMPERATURE_RISE * min(max(normalized, 0.0), 1.5)

        self.state.temperature += (target - self.state.temperature) * alpha

        if not self.is_faulted and self.state.temperature > MAX_TEMPERATURE:
            self.trip(MotorFault.OVERTEMPERATURE)

    def _update_frequency(self, dt: float) -> None:
        vfd = self.state.vfd
        vfd.interlock.update(self.state.shaft_speed, vfd.output_frequency)
        vfd.output_frequency = ramp_frequency(
            vfd.output_frequency,
            vfd.effective_target_frequency,
            vfd.acceleration_rate,
            vfd.deceleration_rate,
            dt,
        )

    def _transition(self, new_state: MotorOperatingState) -> None:
        current = self.state.operating_state
        if new_state is current:
            return
        if new_state not in TRANSITIONS[current]:
            logger.debug("%s: holding %s, %s not reachable", self.nameplate.name, current.value, new_state.value)
            return
        self.state.operating_state = new_state

    def _derive_operating_state(self) -> MotorOperatingState:
        output = self.state.vfd.output_frequency
        target = self.state.vfd.effective_target_frequency
        if output == 0 and self.state.shaft_speed < 0.01:
            return MotorOperatingState.STOPPED
        if output < target:
            return MotorOperatingState.ACCELERATING
        if output > target or output == 0:
            return MotorOperatingState.DECELERATING
        return MotorOperatingState.RUNNING

    def step(self, dt: float, reflected_load_inertia: float = 0.0) -> None:
        """
        Advance the motor by one time step

        Args:
            dt: Time step (s)
            reflected_load_inertia: Load inertia seen at the motor shaft (kg·m²)
        """
        state = self.state
        plate = self.nameplate

        if self.is_faulted:
            # Coast down, inverter off
            state.shaft_speed *= 1 - COAST_FRICTION * dt
            if state.shaft_speed < 0.01:
                state.shaft_speed = 0.0
            self._update_temperature(dt)
            return

        self._update_frequency(dt)
        frequency = state.vfd.output_frequency

        sync_speed = synchronous_speed(plate.poles, frequency)
        if sync_speed > 0:
            state.slip = min(1.0, max(0.0, (sync_speed - state.shaft_speed) / sync_speed))
        else:
            state.slip = 0.0

        torque = self.available_torque(state.slip, frequency)
        state.output_torque = torque

        # α = τ / J
        net_torque = torque - state.load_torque
        angular_acceleration = net_torque / (plate.rotor_inertia + reflected_load_inertia)
        state.shaft_speed += angular_acceleration * dt
        if state.shaft_speed < 0:
            # No reverse spin without a phase-sequence swap
            state.shaft_speed = 0.0

        state.mechanical_power = torque * state.shaft_speed
        state.electrical_power = state.mechanical_power / plate.efficiency

        voltage = output_voltage(frequency, state.vfd, plate.rated_voltage)
        stalled = frequency > 0 and state.load_torque > self.breakdown_torque(frequency)
        state.current = self.calculate_current(torque, frequency, voltage, stalled)

        if state.current > plate.rated_current * OVERCURRENT_TRIP:
            self.trip(MotorFault.OVERCURRENT)
            return

        if state.current > plate.rated_current * OVERLOAD_CURRENT:
            state.overload_time += dt
            if state.overload_time > OVERLOAD_TIME:
                self.trip(MotorFault.OVERLOAD)
                return
        else:
            state.overload_time = 0.0

        self._update_electrical(frequency, state.current)
        self._update_temperature(dt)
        if self.is_faulted:
            return

        self._transition(self._derive_operating_state())

        if state.shaft_speed > 0.1:
            state.runtime += dt

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_output_speed(self) -> float:
        """Shaft speed signed by the phase sequence (rad/s)"""
        return self.state.shaft_speed * int(self.state.vfd.current_direction)

    def get_absolute_speed(self) -> float:
        """Shaft speed magnitude (rad/s)"""
        return self.state.shaft_speed

    def get_speed_percent(self) -> float:
        """Shaft speed as a percentage of rated speed"""
        rated_speed = synchronous_speed(self.nameplate.poles, self.nameplate.rated_frequency) * (1 - RATED_SLIP)
        return self.state.shaft_speed / rated_speed * 100

    def get_direction(self) -> MotorDirection:
        return self.state.vfd.current_direction

    def is_direction_change_pending(self) -> bool:
        return self.state.vfd.direction_change_pending


def create_platform_motor() -> MotorDriveModel:
    """Main platform drive, 8s/10s ramps"""
    return MotorDriveModel(MOTOR_SPECS["platform"], acceleration_time=8.0, deceleration_time=10.0)


def create_windmill_motor() -> MotorDriveModel:
    """Windmill drive, 6s/8s ramps"""
    return MotorDriveModel(MOTOR_SPECS["windmill"], acceleration_time=6.0, deceleration_time=8.0)


def create_hydraulic_motor() -> MotorDriveModel:
    return MotorDriveModel(MOTOR_SPECS["hydraulic"])
