"""
Unit tests for cabin kinematics.

Tests frame composition, finite-difference derivatives, acceleration
decomposition and g-force calculation.
"""

import math

import numpy as np
import pytest

from ride.kinematics import (
    GRAVITY,
    FrameGeometry,
    FramePose,
    FrameRates,
    cabin_position,
    compute_g_force,
    decompose_acceleration,
    update_cabin_physics,
    wrap_phase,
)
from ride.params import RotationDirection
from ride.state import PlatformParams, SimulationState, TiltParams, WindmillParams


def make_state(
    platform_speed: float = 0.0,
    windmill_speed: float = 0.0,
    tilt_angle: float = 0.0,
    platform_phase: float = 0.0,
    windmill_phase: float = 0.0,
) -> SimulationState:
    """Build a simulation state with the default ride geometry"""
    return SimulationState(
        time=0.0,
        platform=PlatformParams(platform_speed, RotationDirection.COUNTER_CLOCKWISE, abs(platform_speed)),
        tilt=TiltParams(pivot_radius=2.0, tilt_angle=tilt_angle, target_tilt_angle=tilt_angle, secondary_platform_offset=2.0),
        windmill=WindmillParams(windmill_speed, RotationDirection.COUNTER_CLOCKWISE, abs(windmill_speed)),
        platform_phase=platform_phase,
        windmill_phase=windmill_phase,
    )


class TestWrapPhase:
    """Test suite for phase wrapping"""

    def test_wraps_into_range(self) -> None:
        """Test that angles are wrapped into [0, 2π)"""
        assert abs(wrap_phase(3 * math.pi) - math.pi) < 1e-12
        assert abs(wrap_phase(-math.pi / 2) - 1.5 * math.pi) < 1e-12
        assert wrap_phase(0.0) == 0.0

    def test_tiny_negative_angle_never_returns_two_pi(self) -> None:
        """Test that rounding cannot produce exactly 2π"""
        wrapped = wrap_phase(-1e-20)

        assert 0.0 <= wrapped < 2 * math.pi


class TestCabinPosition:
    """Test suite for the frame composition"""

    @pytest.fixture
    def geometry(self) -> FrameGeometry:
        """Default tilt geometry"""
        return FrameGeometry(pivot_radius=2.0, secondary_platform_offset=2.0)

    def test_flat_position(self, geometry: FrameGeometry) -> None:
        """Test cabin position with no tilt and zero phases"""
        position = cabin_position(0.0, 9.0, FramePose(0.0, 0.0, 0.0), geometry)

        # pivot 2m + offset 2m + radius 9m along x
        assert np.allclose(position, [13.0, 0.0, 0.0])

    def test_tilt_lifts_outward_side(self, geometry: FrameGeometry) -> None:
        """Test that tilting raises the outer cabin and lowers the inner one"""
        pose = FramePose(0.0, 0.0, math.radians(20.0))
        outer = cabin_position(0.0, 9.0, pose, geometry)
        inner = cabin_position(math.pi, 9.0, pose, geometry)

        assert outer[2] > 0
        assert inner[2] < 0
        assert abs(outer[2] - 11.0 * math.sin(math.radians(20.0))) < 1e-9

    def test_distance_from_windmill_centre_preserved(self, geometry: FrameGeometry) -> None:
        """Test that cabins stay on the windmill rim for any pose"""
        pose = FramePose(1.1, 2.3, 0.35)
        centre_radial = geometry.secondary_platform_offset
        centre_platform = np.array([
            geometry.pivot_radius + centre_radial * math.cos(0.35),
            0.0,
            centre_radial * math.sin(0.35),
        ])
        rotation = np.array([
            [math.cos(1.1), -math.sin(1.1), 0.0],
            [math.sin(1.1), math.cos(1.1), 0.0],
            [0.0, 0.0, 1.0],
        ])
        centre = rotation @ centre_platform

        for angle in np.linspace(0, 2 * math.pi, 8, endpoint=False):
            position = cabin_position(angle, 9.0, pose, geometry)
            assert abs(np.linalg.norm(position - centre) - 9.0) < 1e-9

    def test_platform_phase_rotates_about_vertical(self, geometry: FrameGeometry) -> None:
        """Test that platform rotation keeps height and horizontal distance"""
        base = cabin_position(0.5, 9.0, FramePose(0.0, 0.0, 0.2), geometry)
        rotated = cabin_position(0.5, 9.0, FramePose(1.0, 0.0, 0.2), geometry)

        assert abs(base[2] - rotated[2]) < 1e-12
        assert abs(math.hypot(base[0], base[1]) - math.hypot(rotated[0], rotated[1])) < 1e-9


class TestCabinPhysics:
    """Test suite for update_cabin_physics"""

    def test_cabin_at_rest_reads_one_g(self) -> None:
        """Test that a stationary cabin feels exactly gravity"""
        cabin = update_cabin_physics(0.0, 9.0, make_state())

        assert np.array_equal(cabin.velocity, np.zeros(3))
        assert np.array_equal(cabin.acceleration, np.zeros(3))
        assert abs(cabin.g_force - 1.0) < 1e-12

    def test_windmill_only_g_force(self) -> None:
        """Test centripetal g-force for a flat windmill spinning at 1 rad/s"""
        omega = 1.0
        radius = 9.0
        cabin = update_cabin_physics(0.0, radius, make_state(windmill_speed=omega))

        centripetal = omega ** 2 * radius
        expected = math.sqrt(centripetal ** 2 + GRAVITY ** 2) / GRAVITY
        assert abs(cabin.g_force - expected) < 1e-6
        assert abs(cabin.total_acceleration - centripetal) < 1e-5

    def test_windmill_only_velocity(self) -> None:
        """Test that rim speed equals ω·r"""
        cabin = update_cabin_physics(0.7, 9.0, make_state(windmill_speed=1.5))

        assert abs(np.linalg.norm(cabin.velocity) - 13.5) < 1e-6

    def test_platform_only_radial_acceleration(self) -> None:
        """Test that pure platform rotation gives inward radial acceleration"""
        omega = 0.5
        cabin = update_cabin_physics(0.0, 9.0, make_state(platform_speed=omega))

        # Cabin at 13m from the ride axis
        assert abs(cabin.radial_acceleration - (-omega ** 2 * 13.0)) < 1e-5
        assert abs(cabin.tangential_acceleration) < 1e-5

    def test_state_is_not_mutated(self) -> None:
        """Test that computing cabin physics leaves the input state untouched"""
        state = make_state(platform_speed=0.5, windmill_speed=1.0, tilt_angle=0.2)
        before = state.to_array()

        update_cabin_physics(1.0, 9.0, state)

        assert np.array_equal(state.to_array(), before)

    def test_cabin_state_array_layout(self) -> None:
        """Test that CabinState flattens to 13 values"""
        cabin = update_cabin_physics(0.0, 9.0, make_state(windmill_speed=1.0))

        assert cabin.to_array().shape == (13,)


class TestAccelerationDecomposition:
    """Test suite for decompose_acceleration and compute_g_force"""

    def test_degenerate_position_on_axis(self) -> None:
        """Test that a cabin on the ride axis reports all acceleration as tangential"""
        radial, tangential = decompose_acceleration(
            np.array([3.0, 4.0, 0.0]), np.zeros(3), np.zeros(3)
        )

        assert radial == 0.0
        assert tangential == 5.0

    def test_tangential_follows_direction_of_travel(self) -> None:
        """Test that tangential acceleration is positive along the velocity"""
        position = np.array([10.0, 0.0, 0.0])
        acceleration = np.array([0.0, -2.0, 0.0])

        _, along_cw = decompose_acceleration(acceleration, position, np.array([0.0, -1.0, 0.0]))
        _, along_ccw = decompose_acceleration(acceleration, position, np.array([0.0, 1.0, 0.0]))

        assert along_cw == 2.0
        assert along_ccw == -2.0

    def test_radial_positive_outward(self) -> None:
        """Test radial sign convention"""
        radial, _ = decompose_acceleration(np.array([0.0, 4.0, 1.0]), np.array([0.0, 5.0, 0.0]), np.zeros(3))

        assert radial == 4.0

    def test_compute_g_force(self) -> None:
        """Test that g-force is the acceleration magnitude over g"""
        assert abs(compute_g_force(np.array([0.0, 0.0, GRAVITY])) - 1.0) < 1e-12
        assert abs(compute_g_force(np.array([3 * GRAVITY, 4 * GRAVITY, 0.0])) - 5.0) < 1e-12

    def test_frame_rates_default_tilt(self) -> None:
        """Test that tilt rate defaults to zero"""
        assert FrameRates(1.0, 2.0).tilt == 0.0
