"""
Unit tests for the VFD frequency ramp, V/Hz law and direction interlock.
"""

import pytest

from ride.vfd import (
    DirectionInterlock,
    MotorDirection,
    ReversalState,
    VFDSettings,
    output_voltage,
    ramp_frequency,
)


class TestDirectionInterlock:
    """Test suite for the reversal interlock state machine"""

    @pytest.fixture
    def interlock(self) -> DirectionInterlock:
        """Create an interlock in the default forward state"""
        return DirectionInterlock()

    def test_default_state(self, interlock: DirectionInterlock) -> None:
        """Test that a new interlock is steady and forward"""
        assert interlock.state is ReversalState.STEADY
        assert interlock.current_direction == MotorDirection.FORWARD
        assert interlock.target_direction == MotorDirection.FORWARD
        assert not interlock.pending

    def test_immediate_swap_when_stopped(self, interlock: DirectionInterlock) -> None:
        """Test that a stopped motor reverses without a pending phase"""
        interlock.request(MotorDirection.REVERSE, shaft_speed=0.0, output_frequency=0.0)

        assert interlock.current_direction == MotorDirection.REVERSE
        assert not interlock.pending

    def test_pending_while_moving(self, interlock: DirectionInterlock) -> None:
        """Test that a reversal waits while the shaft is turning"""
        interlock.request(MotorDirection.REVERSE, shaft_speed=100.0, output_frequency=40.0)

        assert interlock.pending
        assert interlock.current_direction == MotorDirection.FORWARD
        assert interlock.target_direction == MotorDirection.REVERSE

    def test_pending_while_frequency_nonzero(self, interlock: DirectionInterlock) -> None:
        """Test that a stationary shaft with live output frequency still waits"""
        interlock.request(MotorDirection.REVERSE, shaft_speed=0.0, output_frequency=5.0)

        assert interlock.pending

    def test_swap_once_safe(self, interlock: DirectionInterlock) -> None:
        """Test that update swaps only when speed and frequency are near zero"""
        interlock.request(MotorDirection.REVERSE, shaft_speed=100.0, output_frequency=40.0)

        assert interlock.update(shaft_speed=10.0, output_frequency=0.0) is False
        assert interlock.update(shaft_speed=0.1, output_frequency=2.0) is False
        assert interlock.update(shaft_speed=0.1, output_frequency=0.1) is True
        assert interlock.current_direction == MotorDirection.REVERSE
        assert interlock.state is ReversalState.STEADY

    def test_rerequest_original_direction_cancels(self, interlock: DirectionInterlock) -> None:
        """Test that asking for the current direction cancels a pending reversal"""
        interlock.request(MotorDirection.REVERSE, shaft_speed=100.0, output_frequency=40.0)
        interlock.request(MotorDirection.FORWARD, shaft_speed=90.0, output_frequency=35.0)

        assert not interlock.pending
        assert interlock.current_direction == MotorDirection.FORWARD
        assert interlock.update(shaft_speed=0.0, output_frequency=0.0) is False

    def test_same_direction_request_is_noop(self, interlock: DirectionInterlock) -> None:
        """Test that requesting the target direction changes nothing"""
        interlock.request(MotorDirection.FORWARD, shaft_speed=100.0, output_frequency=40.0)

        assert interlock.state is ReversalState.STEADY


class TestVFDSettings:
    """Test suite for drive settings"""

    def test_effective_target_zero_while_pending(self) -> None:
        """Test that the ramp heads for zero during a pending reversal"""
        settings = VFDSettings(target_frequency=40.0)
        settings.interlock.request(MotorDirection.REVERSE, shaft_speed=100.0, output_frequency=40.0)

        assert settings.direction_change_pending
        assert settings.effective_target_frequency == 0.0
        assert settings.target_frequency == 40.0

    def test_ramp_rates(self) -> None:
        """Test ramp rates derived from max frequency and ramp times"""
        settings = VFDSettings(max_frequency=60.0, acceleration_time=8.0, deceleration_time=10.0)

        assert settings.acceleration_rate == 7.5  # Hz/s
        assert settings.deceleration_rate == 6.0  # Hz/s


class TestFrequencyRamp:
    """Test suite for the trapezoidal frequency ramp"""

    def test_ramp_up_limited_by_rate(self) -> None:
        """Test that acceleration is limited by the ramp rate"""
        assert ramp_frequency(0.0, 50.0, 7.5, 6.0, 1.0) == 7.5

    def test_ramp_down_limited_by_rate(self) -> None:
        """Test that deceleration is limited by the ramp rate"""
        assert ramp_frequency(50.0, 0.0, 7.5, 6.0, 1.0) == 44.0

    def test_ramp_does_not_overshoot(self) -> None:
        """Test that the ramp stops at the target"""
        assert ramp_frequency(49.0, 50.0, 7.5, 6.0, 1.0) == 50.0
        assert ramp_frequency(1.0, 0.0, 7.5, 6.0, 1.0) == 0.0

    def test_snaps_within_tolerance(self) -> None:
        """Test that a tiny error snaps onto the target"""
        assert ramp_frequency(49.995, 50.0, 7.5, 6.0, 0.0) == 50.0


class TestOutputVoltage:
    """Test suite for the V/Hz law"""

    @pytest.fixture
    def settings(self) -> VFDSettings:
        """Default 380V/50Hz drive settings"""
        return VFDSettings()

    def test_rated_point(self, settings: VFDSettings) -> None:
        """Test that rated frequency gives rated voltage"""
        assert abs(output_voltage(50.0, settings, 380.0) - 380.0) < 1e-9

    def test_zero_frequency(self, settings: VFDSettings) -> None:
        """Test that zero frequency gives zero voltage"""
        assert output_voltage(0.0, settings, 380.0) == 0.0

    def test_low_frequency_boost(self, settings: VFDSettings) -> None:
        """Test the voltage boost below 10 Hz"""
        # 5Hz: 38V raised by 5% × (1 - 5/10)
        assert abs(output_voltage(5.0, settings, 380.0) - 38.0 * 1.025) < 1e-9

    def test_clamped_to_rated_voltage(self, settings: VFDSettings) -> None:
        """Test that field weakening above base frequency caps voltage"""
        assert output_voltage(60.0, settings, 380.0) == 380.0
