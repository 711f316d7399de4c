"""
Fixed-timestep simulation engine for the ride
"""

from typing import List, Optional
import logging
import math

from ride.kinematics import update_cabin_physics, wrap_phase
from ride.motor import (
    MotorDriveModel,
    MotorFault,
    MotorState,
    create_hydraulic_motor,
    create_platform_motor,
    create_windmill_motor,
)
from ride.nameplate import rad_per_sec_to_rpm
from ride.params import RideConfiguration, RotationDirection
from ride.state import (
    ElectricalSystemState,
    HydraulicState,
    MainsSupply,
    PlatformParams,
    SimulationState,
    TiltParams,
    WindmillParams,
)
from ride.vfd import MotorDirection

logger = logging.getLogger(__name__)

# Gear ratios (motor RPM / load RPM)
PLATFORM_GEAR_RATIO = 150.0
WINDMILL_GEAR_RATIO = 100.0
# Load inertia at the platform / windmill side of the gearbox (kg·m²)
PLATFORM_LOAD_INERTIA = 500.0
WINDMILL_LOAD_INERTIA = 200.0
HYDRAULIC_PUMP_INERTIA = 0.01  # kg·m² at the motor shaft
HYDRAULIC_LOAD_FRACTION = 0.6  # pump load at rated speed, fraction of rated torque
HYDRAULIC_LINE_FREQUENCY = 50.0  # Hz, pump runs at line frequency
# Load torque heuristic
FRICTION_TORQUE_FRACTION = 0.1  # of rated torque at FRICTION_REFERENCE_SPEED
FRICTION_REFERENCE_SPEED = 150.0  # rad/s at the motor shaft
LOAD_VARIATION_FRACTION = 0.05  # of rated torque
LOAD_VARIATION_FREQUENCY = 0.5  # rad/s
# Mains and hydraulics
MAINS_VOLTAGE = 380.0  # V
MAINS_FREQUENCY = 50.0  # Hz
HYDRAULIC_RATED_PRESSURE = 160.0  # bar
HYDRAULIC_RATED_FLOW = 40.0  # L/min


def ramp_value(current: float, target: float, time_constant: float, dt: float) -> float:
    """
    Exponential approach toward a target

    Args:
        current: Present value
        target: Target value
        time_constant: Time constant (s); ≤ 0 jumps straight to the target
        dt: Time step (s)

    Returns:
        New value
    """
    if time_constant <= 0:
        return target
    alpha = 1 - math.exp(-dt / time_constant)
    return current + (target - current) * alpha


class SimulationEngine:
    """
    Deterministic ride simulation

    The engine is the only writer of SimulationState and the motor states.
    Objects handed out by the get_* methods are live views: read them, do not
    modify them.
    """

    def __init__(self, config: Optional[RideConfiguration] = None, use_motor_simulation: bool = True) -> None:
        """
        Initialize engine

        Args:
            config: Ride configuration (defaults to RideConfiguration())
            use_motor_simulation: Drive the platform and windmill through the
                motor models; otherwise use the simple ramp model
        """
        self.config = config if config is not None else RideConfiguration()
        self.use_motor_simulation = use_motor_simulation
        self.state = self._create_initial_state()

        self.platform_motor = create_platform_motor()
        self.windmill_motor = create_windmill_motor()
        self.hydraulic_motor = create_hydraulic_motor()
        self.hydraulic_running = False
        self.mains_available = True

        self._running = False
        self._paused = False
        self._last_update_time: Optional[float] = None
        self._accumulator = 0.0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def _create_initial_state(self) -> SimulationState:
        """Build the initial state; a pure function of the configuration"""
        config = self.config
        controls = config.initial_controls
        state = SimulationState(
            time=0.0,
            platform=PlatformParams(
                angular_velocity=controls.platform_speed * int(controls.platform_direction),
                direction=controls.platform_direction,
                target_angular_velocity=controls.platform_speed,
            ),
            tilt=TiltParams(
                pivot_radius=config.pivot_radius,
                tilt_angle=controls.tilt_angle,
                target_tilt_angle=controls.tilt_angle,
                secondary_platform_offset=config.secondary_platform_offset,
            ),
            windmill=WindmillParams(
                angular_velocity=controls.windmill_speed * int(controls.windmill_direction),
                direction=controls.windmill_direction,
                target_angular_velocity=controls.windmill_speed,
            ),
            platform_phase=0.0,
            windmill_phase=0.0,
        )
        # Cabins evenly spaced on the windmill edge
        angle_step = 2 * math.pi / config.num_cabins
        state.cabins = [
            update_cabin_physics(i * angle_step, config.windmill_radius, state)
            for i in range(config.num_cabins)
        ]
        return state

    def get_state(self) -> SimulationState:
        return self.state

    def get_config(self) -> RideConfiguration:
        return self.config

    @property
    def is_running(self) -> bool:
        """True when started and not paused"""
        return self._running and not self._paused

    @property
    def is_paused(self) -> bool:
        return self._paused

    # ------------------------------------------------------------------
    # Operator controls
    # ------------------------------------------------------------------

    def update_controls(
        self,
        platform_speed: Optional[float] = None,
        windmill_speed: Optional[float] = None,
        tilt_angle: Optional[float] = None,
        platform_direction: Optional[RotationDirection] = None,
        windmill_direction: Optional[RotationDirection] = None,
    ) -> None:
        """
        Set operator targets; the simulation ramps toward them

        Only the given fields change. Instantaneous rates are never touched.

        Args:
            platform_speed: Target platform angular speed (rad/s)
            windmill_speed: Target windmill angular speed (rad/s)
            tilt_angle: Target tilt (rad), clamped into the tilt range
            platform_direction: Platform rotation direction
            windmill_direction: Windmill rotation direction
        """
        if platform_speed is not None:
            self.state.platform.target_angular_velocity = platform_speed
        if windmill_speed is not None:
            self.state.windmill.target_angular_velocity = windmill_speed
        if tilt_angle is not None:
            self.state.tilt.target_tilt_angle = self.config.clamp_tilt(tilt_angle)
        if platform_direction is not None:
            self.state.platform.direction = RotationDirection(platform_direction)
        if windmill_direction is not None:
            self.state.windmill.direction = RotationDirection(windmill_direction)

    # ------------------------------------------------------------------
    # Time stepping
    # ------------------------------------------------------------------

    def calculate_load_torque(self, motor_speed: float, rated_torque: float) -> float:
        """
        Heuristic load torque on a drive motor

        Args:
            motor_speed: Motor shaft speed (rad/s)
            rated_torque: Motor rated torque (Nm)

        Returns:
            Load torque (Nm), never negative
        """
        friction = rated_torque * FRICTION_TORQUE_FRACTION * (motor_speed / FRICTION_REFERENCE_SPEED)
        variation = rated_torque * LOAD_VARIATION_FRACTION * math.sin(self.state.time * LOAD_VARIATION_FREQUENCY)
        return max(0.0, friction + variation)

    def _step_motors(self, dt: float) -> None:
        platform = self.platform_motor
        windmill = self.windmill_motor
        hydraulic = self.hydraulic_motor

        platform.set_load_torque(
            self.calculate_load_torque(platform.get_absolute_speed(), platform.nameplate.rated_torque)
        )
        windmill.set_load_torque(
            self.calculate_load_torque(windmill.get_absolute_speed(), windmill.nameplate.rated_torque)
        )
        # Pump torque rises with the square of speed
        pump_speed_fraction = hydraulic.get_speed_percent() / 100
        hydraulic.set_load_torque(
            hydraulic.nameplate.rated_torque * HYDRAULIC_LOAD_FRACTION * pump_speed_fraction ** 2
            if self.hydraulic_running
            else 0.0
        )

        # J_reflected = J_load / ratio²
        platform.step(dt, PLATFORM_LOAD_INERTIA / PLATFORM_GEAR_RATIO ** 2)
        windmill.step(dt, WINDMILL_LOAD_INERTIA / WINDMILL_GEAR_RATIO ** 2)
        hydraulic.step(dt, HYDRAULIC_PUMP_INERTIA)

        # Output speeds are already signed by the phase sequence
        self.state.platform.angular_velocity = self.motor_speed_to_platform_speed(platform.get_output_speed())
        self.state.windmill.angular_velocity = self.motor_speed_to_windmill_speed(windmill.get_output_speed())

    def _step_simple_ramp(self, dt: float) -> None:
        ramping = self.config.ramping
        platform = self.state.platform
        windmill = self.state.windmill
        platform.angular_velocity = ramp_value(
            platform.angular_velocity,
            platform.target_angular_velocity * int(platform.direction),
            ramping.platform_ramp_time,
            dt,
        )
        windmill.angular_velocity = ramp_value(
            windmill.angular_velocity,
            windmill.target_angular_velocity * int(windmill.direction),
            ramping.windmill_ramp_time,
            dt,
        )

    def step(self, dt: float) -> None:
        """
        Advance the simulation by one time step

        Does nothing while paused.

        Args:
            dt: Time step (s); use the configured fixed step for determinism
        """
        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")
        if self._paused:
            return

        state = self.state
        if self.use_motor_simulation:
            self._step_motors(dt)
        else:
            self._step_simple_ramp(dt)

        # Hydraulic tilt always ramps exponentially
        previous_tilt = state.tilt.tilt_angle
        state.tilt.tilt_angle = ramp_value(
            previous_tilt, state.tilt.target_tilt_angle, self.config.ramping.tilt_ramp_time, dt
        )
        state.tilt.tilt_rate = (state.tilt.tilt_angle - previous_tilt) / dt

        state.platform_phase = wrap_phase(state.platform_phase + state.platform.angular_velocity * dt)
        state.windmill_phase = wrap_phase(state.windmill_phase + state.windmill.angular_velocity * dt)

        state.cabins = [
            update_cabin_physics(cabin.cabin_angle, cabin.distance_from_center, state)
            for cabin in state.cabins
        ]

        state.time += dt

    def update(self, current_time: float) -> int:
        """
        Drive the simulation from a wall clock

        Elapsed wall time is accumulated and drained in whole fixed steps, so
        results do not depend on how often this is called.

        Args:
            current_time: Wall-clock time (s)

        Returns:
            Number of fixed steps taken
        """
        if not self._running:
            return 0
        if self._last_update_time is None or self._paused:
            # Paused wall time is not accumulated
            self._last_update_time = current_time
            return 0

        frame_time = current_time - self._last_update_time
        self._last_update_time = current_time
        if frame_time <= 0:
            return 0

        self._accumulator += frame_time
        fixed_dt = self.config.time_step
        steps = 0
        while self._accumulator >= fixed_dt:
            self.step(fixed_dt)
            self._accumulator -= fixed_dt
            steps += 1
        return steps

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        logger.info("Simulation started")
        self._running = True
        self._paused = False
        self._last_update_time = None

    def pause(self) -> None:
        logger.info("Simulation paused at t=%.3fs", self.state.time)
        self._paused = True

    def resume(self) -> None:
        logger.info("Simulation resumed at t=%.3fs", self.state.time)
        self._paused = False

    def reset(self, clear_motor_faults: bool = False) -> None:
        """
        Stop and rebuild the simulation state from the configuration

        Motor states are kept unless clear_motor_faults is set.

        Args:
            clear_motor_faults: Also reset every motor (see reset_motor_faults)
        """
        logger.info("Simulation reset")
        self._running = False
        self._paused = False
        self._last_update_time = None
        self._accumulator = 0.0
        self.state = self._create_initial_state()
        if clear_motor_faults:
            self.reset_motor_faults()

    def simulate_power_loss(self) -> None:
        """Trip every motor with a phase-loss fault; the ride coasts down"""
        logger.warning("Mains power lost at t=%.3fs", self.state.time)
        self.mains_available = False
        for motor in self._motors():
            motor.trip(MotorFault.PHASE_LOSS)

    # ------------------------------------------------------------------
    # Motor control
    # ------------------------------------------------------------------

    def _motors(self) -> List[MotorDriveModel]:
        return [self.platform_motor, self.windmill_motor, self.hydraulic_motor]

    def get_platform_motor_state(self) -> MotorState:
        return self.platform_motor.get_state()

    def get_windmill_motor_state(self) -> MotorState:
        return self.windmill_motor.get_state()

    def get_hydraulic_motor_state(self) -> MotorState:
        return self.hydraulic_motor.get_state()

    def set_platform_motor_frequency(self, frequency: float) -> None:
        """Set platform VFD target frequency (Hz)"""
        self.platform_motor.set_target_frequency(frequency)

    def set_windmill_motor_frequency(self, frequency: float) -> None:
        """Set windmill VFD target frequency (Hz)"""
        self.windmill_motor.set_target_frequency(frequency)

    def set_platform_motor_direction(self, direction: MotorDirection) -> None:
        """Set platform motor direction; the VFD ramps to zero before reversing"""
        self.platform_motor.set_direction(direction)

    def set_windmill_motor_direction(self, direction: MotorDirection) -> None:
        self.windmill_motor.set_direction(direction)

    def start_hydraulic_motor(self) -> None:
        self.hydraulic_running = True
        self.hydraulic_motor.set_target_frequency(HYDRAULIC_LINE_FREQUENCY)

    def stop_hydraulic_motor(self) -> None:
        self.hydraulic_running = False
        self.hydraulic_motor.set_target_frequency(0.0)

    def emergency_stop_motors(self) -> None:
        """Ramp every drive to zero frequency"""
        logger.warning("Emergency stop at t=%.3fs", self.state.time)
        for motor in self._motors():
            motor.set_target_frequency(0.0)
        self.hydraulic_running = False

    def reset_motor_faults(self) -> None:
        """Reset every motor to its default stopped state and restore mains"""
        for motor in self._motors():
            motor.reset()
        self.hydraulic_running = False
        self.mains_available = True

    def set_motor_simulation_enabled(self, enabled: bool) -> None:
        self.use_motor_simulation = enabled

    def apply_speed_targets(self) -> None:
        """
        Command the drives from the current speed and direction targets

        Converts target angular speeds into VFD frequencies and rotation
        directions into phase sequences.
        """
        platform = self.state.platform
        windmill = self.state.windmill
        self.platform_motor.set_direction(self.rotation_to_motor_direction(platform.direction))
        self.platform_motor.set_target_frequency(
            self.platform_speed_to_motor_frequency(platform.target_angular_velocity)
        )
        self.windmill_motor.set_direction(self.rotation_to_motor_direction(windmill.direction))
        self.windmill_motor.set_target_frequency(
            self.windmill_speed_to_motor_frequency(windmill.target_angular_velocity)
        )

    # ------------------------------------------------------------------
    # Gear ratio conversions
    # ------------------------------------------------------------------

    @staticmethod
    def rotation_to_motor_direction(direction: RotationDirection) -> MotorDirection:
        """Counter-clockwise maps to forward"""
        if direction == RotationDirection.COUNTER_CLOCKWISE:
            return MotorDirection.FORWARD
        return MotorDirection.REVERSE

    @staticmethod
    def _speed_to_frequency(speed: float, gear_ratio: float, motor: MotorDriveModel) -> float:
        # f = n_motor * poles / 120
        motor_rpm = rad_per_sec_to_rpm(abs(speed)) * gear_ratio
        frequency = motor_rpm * motor.nameplate.poles / 120
        return min(motor.state.vfd.max_frequency, max(0.0, frequency))

    def platform_speed_to_motor_frequency(self, platform_speed: float) -> float:
        """
        VFD frequency that drives the platform at a given speed

        Args:
            platform_speed: Platform angular velocity (rad/s, sign ignored)

        Returns:
            Frequency (Hz), clamped to the drive range; slip is not compensated
        """
        return self._speed_to_frequency(platform_speed, PLATFORM_GEAR_RATIO, self.platform_motor)

    def windmill_speed_to_motor_frequency(self, windmill_speed: float) -> float:
        return self._speed_to_frequency(windmill_speed, WINDMILL_GEAR_RATIO, self.windmill_motor)

    @staticmethod
    def motor_speed_to_platform_speed(motor_speed: float) -> float:
        return motor_speed / PLATFORM_GEAR_RATIO

    @staticmethod
    def motor_speed_to_windmill_speed(motor_speed: float) -> float:
        return motor_speed / WINDMILL_GEAR_RATIO

    # ------------------------------------------------------------------
    # System read models
    # ------------------------------------------------------------------

    def get_electrical_system_state(self) -> ElectricalSystemState:
        """Motor states plus the mains supply totals"""
        total_power = sum(motor.state.electrical_power for motor in self._motors())
        return ElectricalSystemState(
            platform_motor=self.platform_motor.state,
            windmill_motor=self.windmill_motor.state,
            hydraulic_motor=self.hydraulic_motor.state,
            mains_supply=MainsSupply(
                voltage=MAINS_VOLTAGE if self.mains_available else 0.0,
                frequency=MAINS_FREQUENCY if self.mains_available else 0.0,
                available=self.mains_available,
                total_power=total_power,
            ),
        )

    def get_hydraulic_state(self) -> HydraulicState:
        """Tilt hydraulics derived from the pump motor and tilt state"""
        pump = self.hydraulic_motor
        speed_fraction = min(max(pump.get_speed_percent() / 100, 0.0), 1.0)
        return HydraulicState(
            pump_motor=pump.state,
            pressure=HYDRAULIC_RATED_PRESSURE * speed_fraction,
            target_pressure=HYDRAULIC_RATED_PRESSURE if self.hydraulic_running else 0.0,
            cylinder_position=self._tilt_fraction(self.state.tilt.tilt_angle),
            target_position=self._tilt_fraction(self.state.tilt.target_tilt_angle),
            oil_temperature=pump.state.temperature,
            flow_rate=HYDRAULIC_RATED_FLOW * speed_fraction,
        )

    def _tilt_fraction(self, tilt_angle: float) -> float:
        span = self.config.max_tilt_angle - self.config.min_tilt_angle
        if span <= 0:
            return 0.0
        return (tilt_angle - self.config.min_tilt_angle) / span
