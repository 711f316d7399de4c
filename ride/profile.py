"""
Ride profile runs and parameter sweeps
"""

from typing import Any, Dict, List, Optional
import logging

import numpy as np

from ride.analysis import RideAnalyzer
from ride.motor import MotorFault
from ride.params import RideConfiguration
from ride.simulator import SimulationEngine

logger = logging.getLogger(__name__)


def run_ride_profile(
    duration: float = 30.0,
    platform_speed: float = 0.5,
    windmill_speed: float = 1.0,
    tilt_angle: float = 0.0,
    use_motor_simulation: bool = True,
    config: Optional[RideConfiguration] = None,
    record_every: int = 1,
) -> Dict[str, Any]:
    """
    Run the ride from rest at fixed operator settings and record the profile

    Args:
        duration: Simulated time (s)
        platform_speed: Target platform speed (rad/s)
        windmill_speed: Target windmill speed (rad/s)
        tilt_angle: Target tilt angle (rad)
        use_motor_simulation: Drive through the motor models
        config: Ride configuration (defaults to RideConfiguration())
        record_every: Record one sample every this many steps

    Returns:
        Dictionary with the recorded time series, analysis and engine
    """
    if duration <= 0:
        raise ValueError(f"duration must be positive, got {duration}")
    if record_every < 1:
        raise ValueError(f"record_every must be at least 1, got {record_every}")

    engine = SimulationEngine(config, use_motor_simulation=use_motor_simulation)
    engine.update_controls(platform_speed=platform_speed, windmill_speed=windmill_speed, tilt_angle=tilt_angle)
    if use_motor_simulation:
        engine.apply_speed_targets()
        if engine.state.tilt.target_tilt_angle != engine.state.tilt.tilt_angle:
            engine.start_hydraulic_motor()

    dt = engine.config.time_step
    n_steps = int(round(duration / dt))
    motors = [engine.platform_motor, engine.windmill_motor, engine.hydraulic_motor]

    time: List[float] = []
    states: List[np.ndarray] = []
    g_force: List[List[float]] = []
    radial: List[List[float]] = []
    tangential: List[List[float]] = []
    total: List[List[float]] = []
    power: List[List[float]] = []
    current: List[List[float]] = []
    temperature: List[List[float]] = []
    faults: List[str] = []

    def record() -> None:
        state = engine.get_state()
        time.append(state.time)
        states.append(state.to_array())
        g_force.append([cabin.g_force for cabin in state.cabins])
        radial.append([cabin.radial_acceleration for cabin in state.cabins])
        tangential.append([cabin.tangential_acceleration for cabin in state.cabins])
        total.append([cabin.total_acceleration for cabin in state.cabins])
        power.append([motor.state.electrical_power for motor in motors])
        current.append([motor.state.current for motor in motors])
        temperature.append([motor.state.temperature for motor in motors])
        for motor in motors:
            if motor.state.fault is not MotorFault.NONE:
                faults.append(f"{motor.nameplate.name}: {motor.state.fault.value}")

    record()
    for i in range(1, n_steps + 1):
        engine.step(dt)
        if i % record_every == 0 or i == n_steps:
            record()

    t = np.array(time)
    cabin_g_force = np.array(g_force)
    cabin_acceleration = {
        "radial": np.array(radial),
        "tangential": np.array(tangential),
        "total": np.array(total),
    }
    motor_power = np.array(power)
    motor_current = np.array(current)
    motor_temperature = np.array(temperature)

    analysis = RideAnalyzer().analyze(
        t,
        cabin_g_force,
        cabin_acceleration["radial"],
        cabin_acceleration["tangential"],
        cabin_acceleration["total"],
        motor_power,
        motor_current,
        motor_temperature,
        faults,
    )

    return {
        "time": t,
        "state": np.array(states),
        "cabin_g_force": cabin_g_force,
        "cabin_acceleration": cabin_acceleration,
        "motor_power": motor_power,
        "motor_current": motor_current,
        "motor_temperature": motor_temperature,
        "motor_faults": sorted(set(faults)),
        "analysis": analysis,
        "engine": engine,
    }


def run_speed_sweep(
    windmill_speeds: List[float],
    duration: float = 30.0,
    platform_speed: float = 0.5,
    tilt_angle: float = 0.0,
    use_motor_simulation: bool = True,
    config: Optional[RideConfiguration] = None,
    record_every: int = 1,
) -> Dict[float, Dict[str, Any]]:
    """
    Run the ride profile for multiple windmill speeds

    Args:
        windmill_speeds: Target windmill speeds (rad/s)
        duration: Simulated time per run (s)
        platform_speed: Target platform speed (rad/s)
        tilt_angle: Target tilt angle (rad)
        use_motor_simulation: Drive through the motor models
        config: Ride configuration shared by every run
        record_every: Record one sample every this many steps

    Returns:
        Dictionary with results for each windmill speed
    """
    results: Dict[float, Dict[str, Any]] = {}
    for windmill_speed in windmill_speeds:
        logger.info("Running profile at windmill speed %.2f rad/s", windmill_speed)
        results[windmill_speed] = run_ride_profile(
            duration=duration,
            platform_speed=platform_speed,
            windmill_speed=windmill_speed,
            tilt_angle=tilt_angle,
            use_motor_simulation=use_motor_simulation,
            config=config,
            record_every=record_every,
        )
    return results


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    speeds = [0.5, 1.0, 1.5, 2.0]  # rad/s
    results = run_speed_sweep(speeds, duration=30.0, tilt_angle=np.radians(20.0), record_every=10)

    print("Ride Profile Results:")
    print("-" * 80)
    for speed, data in results.items():
        analysis = data["analysis"]
        print(f"\nWindmill speed: {speed:.2f} rad/s")
        print(f"  Peak g-force: {analysis['peak_g_force']:.2f} g")
        print(f"  Mean g-force: {analysis['mean_g_force']:.2f} g")
        print(f"  Exceeds g limit: {analysis['exceeds_g_limit']}")
        print(f"  Peak radial acceleration: {analysis['peak_radial_acceleration']:.2f} m/s²")
        print(f"  Peak tangential acceleration: {analysis['peak_tangential_acceleration']:.2f} m/s²")
        print(f"  Energy consumed: {analysis['energy_consumed_kwh']:.3f} kWh")
        print(f"  Peak platform current: {analysis['peak_current']['platform']:.1f} A")
        print(f"  Peak motor temperature: {max(analysis['peak_temperature'].values()):.1f} °C")
        print(f"  Faults: {', '.join(analysis['faults']) or 'none'}")


if __name__ == "__main__":
    main()
