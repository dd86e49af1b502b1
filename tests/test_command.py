"""
Tests for the command state: sanitizing, derived quantities and consistency
under concurrent writers.
"""

import math
import threading

import pytest

from thrustersim.actuator import ActuatorModel
from thrustersim.command import CommandState


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def model():
    """Return a default model with a dynamic coefficient."""
    return ActuatorModel()


@pytest.fixture
def commands(model):
    """Return command state with default bounds."""
    return CommandState(model, -1000.0, 1000.0)


# =============================================================================
# Sanitizing
# =============================================================================

class TestSanitize:

    def test_nan_becomes_zero(self, commands):
        commands.setThrust(float('nan'))
        assert commands.snapshot() == (0.0, 0.0)

    def test_infinite_becomes_zero(self, commands):
        commands.setAngVel(float('inf'))
        assert commands.snapshot()[1] == 0.0

    def test_clamped_to_max(self, commands):
        commands.setThrust(5000.0)
        assert commands.snapshot()[0] == 1000.0

    def test_clamped_to_min(self, commands):
        commands.setThrust(-5000.0)
        assert commands.snapshot()[0] == -1000.0

    def test_rate_command_uses_same_bounds(self, commands):
        commands.setAngVel(2000.0)
        assert commands.snapshot()[1] == 1000.0

    def test_bounds(self, commands):
        assert commands.bounds == (-1000.0, 1000.0)


# =============================================================================
# Derived quantities
# =============================================================================

class TestDerived:

    def test_thrust_derives_rate(self, commands):
        commands.setThrust(100.0)
        thrust, angVel = commands.snapshot()
        assert thrust == 100.0
        assert angVel == pytest.approx(math.sqrt(100.0 / (1000.0 * 0.02**4)))

    def test_rate_derives_thrust(self, commands):
        commands.setAngVel(10.0)
        thrust, angVel = commands.snapshot()
        assert angVel == 10.0
        assert thrust == pytest.approx(0.016)

    def test_latest_command_wins(self, commands):
        commands.setThrust(1.0)
        commands.setThrust(-4.0)
        assert commands.snapshot()[0] == -4.0

    def test_refresh_follows_advance_velocity(self, model):
        model.alpha2 = 0.5
        commands = CommandState(model, -1000.0, 1000.0)
        commands.setThrust(50.0)
        commands.setAdvanceVel(2.0)
        _, before = commands.snapshot()
        _, after = commands.refresh()
        assert model.advanceVel == 2.0
        assert model.Kt > 1.0
        assert abs(after) < abs(before)

    def test_refresh_keeps_thrust(self, commands):
        commands.setThrust(12.0)
        assert commands.refresh()[0] == 12.0


# =============================================================================
# Concurrency
# =============================================================================

class TestConcurrency:

    def test_snapshot_pairs_stay_consistent(self):
        model = ActuatorModel(thrustCoefficient=0.5, thrustCoefficientSet=True)
        commands = CommandState(model, -1000.0, 1000.0)
        stop = threading.Event()

        def writer():
            value = 0.0
            while not stop.is_set():
                value = (value + 7.0) % 900.0
                commands.setThrust(value)

        thread = threading.Thread(target=writer)
        thread.start()
        try:
            for _ in range(2000):
                thrust, angVel = commands.snapshot()
                assert angVel == pytest.approx(model.thrustToAngVel(thrust))
        finally:
            stop.set()
            thread.join()
