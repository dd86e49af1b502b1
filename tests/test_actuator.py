"""
Tests for the propeller conversion model: thrust <-> angular velocity, sign
handling and the one-directional thrust coefficient update.
"""

import logging
import math

import pytest

from thrustersim import actuator
from thrustersim.actuator import ActuatorModel


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fixed():
    """Return a model with a fixed thrust coefficient."""
    return ActuatorModel(fluidDensity=1025.0,
                         propellerDiameter=0.1,
                         thrustCoefficient=0.4,
                         thrustCoefficientSet=True)


@pytest.fixture
def dynamic():
    """Return a model whose coefficient follows the advance velocity."""
    model = ActuatorModel(fluidDensity=1000.0,
                          propellerDiameter=0.02,
                          wakeFraction=0.2,
                          alpha1=1.0,
                          alpha2=0.5)
    model.advanceVel = 2.0
    return model


# =============================================================================
# Conversions
# =============================================================================

class TestConversions:

    @pytest.mark.parametrize('thrust', [-1000.0, -3.2, 0.0, 7.0, 1000.0])
    def test_round_trip_recovers_thrust(self, fixed, thrust):
        angVel = fixed.thrustToAngVel(thrust)
        assert fixed.angVelToThrust(angVel) == pytest.approx(thrust, abs=1e-9)

    def test_round_trip_negative_coefficient(self):
        model = ActuatorModel(thrustCoefficient=-0.5,
                              thrustCoefficientSet=True)
        angVel = model.thrustToAngVel(12.0)
        assert angVel < 0.0
        assert model.angVelToThrust(angVel) == pytest.approx(12.0)

    @pytest.mark.parametrize('thrust,Kt', [(5.0, 0.3), (-5.0, 0.3),
                                           (5.0, -0.3), (-5.0, -0.3)])
    def test_sign_follows_thrust_times_coefficient(self, thrust, Kt):
        model = ActuatorModel(thrustCoefficient=Kt, thrustCoefficientSet=True)
        angVel = model.thrustToAngVel(thrust)
        assert math.copysign(1.0, angVel) == math.copysign(1.0, thrust * Kt)

    def test_zero_thrust_gives_zero_rate(self, fixed):
        assert fixed.thrustToAngVel(0.0) == 0.0

    def test_quadratic_relation(self):
        thrust = actuator.thrustFromAngVel(10.0, 1000.0, 1.0, 0.02)
        assert thrust == pytest.approx(1000.0 * 0.02**4 * 100.0)
        assert actuator.thrustFromAngVel(-10.0, 1000.0, 1.0, 0.02) == \
            pytest.approx(-thrust)

    def test_hundred_newton_scenario(self):
        model = ActuatorModel(fluidDensity=1000.0, propellerDiameter=0.02,
                              alpha1=1.0, alpha2=0.0)
        angVel = model.thrustToAngVel(100.0)
        assert angVel > 0.0
        assert angVel == pytest.approx(math.sqrt(100.0 / (1000.0 * 0.02**4)))


# =============================================================================
# Thrust coefficient
# =============================================================================

class TestThrustCoefficient:

    def test_formula(self):
        Kt = actuator.thrustCoefficient(1.0, 0.5, 0.2, 2.0, 100.0, 0.02)
        assert Kt == pytest.approx(1.0 + 0.5 * (0.8 * 2.0) / (100.0 * 0.02))

    def test_thrust_path_updates_coefficient(self, dynamic):
        dynamic.thrustToAngVel(50.0, angVel=100.0)
        assert dynamic.Kt == pytest.approx(1.4)

    def test_rate_path_never_updates_coefficient(self, dynamic):
        dynamic.angVelToThrust(100.0)
        assert dynamic.Kt == 1.0

    def test_no_update_at_rest(self, dynamic):
        dynamic.thrustToAngVel(50.0, angVel=0.0)
        assert dynamic.Kt == 1.0

    def test_no_update_below_epsilon(self, dynamic):
        dynamic.thrustToAngVel(50.0, angVel=actuator.EPSILON / 2)
        assert dynamic.Kt == 1.0

    def test_fixed_coefficient_is_kept(self, fixed):
        fixed.advanceVel = 3.0
        fixed.thrustToAngVel(50.0, angVel=100.0)
        assert fixed.Kt == 0.4

    def test_update_uses_new_coefficient(self, dynamic):
        angVel = dynamic.thrustToAngVel(50.0, angVel=100.0)
        expected = math.sqrt(50.0 / (1000.0 * 1.4 * 0.02**4))
        assert angVel == pytest.approx(expected)

    def test_from_config(self):
        from thrustersim.config import loadConfig
        cfg = loadConfig({'joint_name': 'j', 'thrust_coefficient': 0.7,
                          'propeller_diameter': 0.3})
        model = ActuatorModel.fromConfig(cfg)
        assert model.Kt == 0.7
        assert model.thrustCoefficientSet
        assert model.propellerDiameter == 0.3

    def test_zero_coefficient_is_rejected(self, caplog):
        model = ActuatorModel(propellerDiameter=0.5, wakeFraction=0.0,
                              alpha1=1.0, alpha2=-1.0)
        model.advanceVel = 2.0
        with caplog.at_level(logging.WARNING):
            angVel = model.thrustToAngVel(1000.0, angVel=4.0)
        assert model.Kt == 1.0
        assert angVel == pytest.approx(4.0)
        assert 'Keeping' in caplog.text

    def test_non_finite_coefficient_is_rejected(self, dynamic):
        dynamic.advanceVel = float('nan')
        angVel = dynamic.thrustToAngVel(50.0, angVel=100.0)
        assert dynamic.Kt == 1.0
        assert math.isfinite(angVel)
