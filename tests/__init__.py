"""
Test suite for the Windmill Ride Simulation.

This package contains unit tests organized by component:
- test_ride_params.py: Tests for RideConfiguration and its parts
- test_kinematics.py: Tests for cabin kinematics and g-force
- test_direction_interlock.py: Tests for the VFD ramp and reversal interlock
- test_motor.py: Tests for the induction motor drive model
- test_simulation.py: Tests for the simulation engine
- test_ride_analysis.py: Tests for ride profile analysis
- test_integration.py: Integration tests for profile runs and sweeps
"""
