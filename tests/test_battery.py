"""
Tests for the battery gate.
"""

import pytest

from thrustersim.battery import (BatteryReading, EnablementGate,
                                 hasSufficientBattery)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def gate():
    """Return a gate owned by model 'auv'."""
    return EnablementGate('auv')


# =============================================================================
# hasSufficientBattery
# =============================================================================

def test_no_battery_is_sufficient():
    assert hasSufficientBattery([], 'auv')


def test_other_models_are_ignored():
    readings = [BatteryReading('b1', 'other', 0.0)]
    assert hasSufficientBattery(readings, 'auv')


def test_any_depleted_owned_battery(depleted):
    readings = [depleted('auv', 0.8), depleted('auv', 0.0)]
    assert not hasSufficientBattery(readings, 'auv')


def test_negative_charge_is_depleted(depleted):
    assert not hasSufficientBattery([depleted('auv', -0.1)], 'auv')


# =============================================================================
# EnablementGate
# =============================================================================

def test_enabled_at_start(gate):
    assert gate.enabled


def test_disables_and_recovers(gate, depleted):
    assert not gate.evaluate([depleted('auv', 0.0)])
    assert not gate.enabled
    assert gate.evaluate([depleted('auv', 0.2)])
    assert gate.enabled
