"""
Ride profile analysis
"""

from typing import Any, Dict, List, Optional

import numpy as np
from scipy.integrate import trapezoid

J_PER_KWH = 3.6e6


class RideAnalyzer:
    """Summarizes recorded ride profiles for passenger loads and drive usage"""

    def __init__(self, g_force_limit: float = 5.0, motor_names: Optional[List[str]] = None) -> None:
        """
        Initialize ride analyzer

        Args:
            g_force_limit: Sustained g-force considered excessive
            motor_names: Names matching the motor columns of the recorded arrays
        """
        self.g_force_limit = g_force_limit
        self.motor_names = motor_names if motor_names is not None else ["platform", "windmill", "hydraulic"]

    def analyze(
        self,
        t: np.ndarray,
        cabin_g_force: np.ndarray,
        radial_acceleration: np.ndarray,
        tangential_acceleration: np.ndarray,
        total_acceleration: np.ndarray,
        motor_power: np.ndarray,
        motor_current: np.ndarray,
        motor_temperature: np.ndarray,
        motor_faults: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Analyze a recorded ride profile

        Args:
            t: Time array [N]
            cabin_g_force: G-force history [N x cabins]
            radial_acceleration: Radial acceleration history [N x cabins]
            tangential_acceleration: Tangential acceleration history [N x cabins]
            total_acceleration: Acceleration magnitude history [N x cabins]
            motor_power: Electrical power history [N x motors] (W)
            motor_current: Phase current history [N x motors] (A)
            motor_temperature: Winding temperature history [N x motors] (°C)
            motor_faults: Fault names observed during the run

        Returns:
            Dictionary with analysis results
        """
        if len(t) == 0:
            raise ValueError("cannot analyze an empty profile")

        peak_g_force = float(np.max(cabin_g_force))
        mean_g_force = float(np.mean(cabin_g_force))
        # Time any cabin spends above the limit
        over_limit = np.any(cabin_g_force > self.g_force_limit, axis=1)
        dt = np.diff(t, prepend=t[0])
        time_over_limit = float(np.sum(dt[over_limit]))

        total_power = np.sum(motor_power, axis=1)
        energy = float(trapezoid(total_power, t)) if len(t) > 1 else 0.0
        energy_per_motor = {
            name: float(trapezoid(motor_power[:, i], t)) if len(t) > 1 else 0.0
            for i, name in enumerate(self.motor_names)
        }

        peak_current = {name: float(np.max(motor_current[:, i])) for i, name in enumerate(self.motor_names)}
        peak_temperature = {name: float(np.max(motor_temperature[:, i])) for i, name in enumerate(self.motor_names)}

        faults = sorted(set(motor_faults or []))

        return {
            "peak_g_force": peak_g_force,
            "mean_g_force": mean_g_force,
            "min_g_force": float(np.min(cabin_g_force)),
            "exceeds_g_limit": peak_g_force > self.g_force_limit,
            "time_over_g_limit": time_over_limit,
            "peak_radial_acceleration": float(np.max(np.abs(radial_acceleration))),
            "peak_tangential_acceleration": float(np.max(np.abs(tangential_acceleration))),
            "peak_total_acceleration": float(np.max(total_acceleration)),
            "peak_power": float(np.max(total_power)),
            "energy_consumed": energy,  # J
            "energy_consumed_kwh": energy / J_PER_KWH,
            "energy_per_motor": energy_per_motor,
            "peak_current": peak_current,
            "peak_temperature": peak_temperature,
            "faults": faults,
            "faulted": bool(faults),
        }
