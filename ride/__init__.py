"""
Windmill Ride Simulation

This package simulates a windmill-style amusement ride: a rotating main
platform carrying a tilting windmill whose cabins are driven by VFD-controlled
induction motors, reporting cabin kinematics and passenger g-forces.
"""

from ride.params import RideConfiguration, RampParams, OperatorControls, RotationDirection
from ride.state import SimulationState, CabinState
from ride.motor import MotorDriveModel, MotorFault, MotorOperatingState
from ride.vfd import MotorDirection
from ride.kinematics import update_cabin_physics, compute_g_force
from ride.simulator import SimulationEngine
from ride.analysis import RideAnalyzer
from ride.profile import run_ride_profile, run_speed_sweep

__all__ = [
    "RideConfiguration",
    "RampParams",
    "OperatorControls",
    "RotationDirection",
    "SimulationState",
    "CabinState",
    "MotorDriveModel",
    "MotorFault",
    "MotorOperatingState",
    "MotorDirection",
    "update_cabin_physics",
    "compute_g_force",
    "SimulationEngine",
    "RideAnalyzer",
    "run_ride_profile",
    "run_speed_sweep",
]
