"""
Tests for parameter parsing, defaults and recovery from inconsistent values.
"""

import logging

import numpy as np
import pytest

from thrustersim.config import (ConfigError, OperationMode, ThrusterConfig,
                                loadConfig)


# =============================================================================
# Defaults
# =============================================================================

class TestDefaults:

    @pytest.fixture
    def cfg(self):
        return loadConfig({'joint_name': 'prop'}, 'auv')

    def test_namespace_is_model_name(self, cfg):
        assert cfg.namespace == 'auv'

    def test_mode_and_control(self, cfg):
        assert cfg.opmode == OperationMode.ForceCmd
        assert not cfg.velocityControl
        assert cfg.topic == ''

    def test_bounds(self, cfg):
        assert (cfg.cmdMin, cfg.cmdMax) == (-1000.0, 1000.0)

    def test_physical(self, cfg):
        assert cfg.fluidDensity == 1000.0
        assert cfg.propellerDiameter == 0.02
        assert cfg.wakeFraction == 0.2
        assert (cfg.alpha1, cfg.alpha2) == (1.0, 0.0)
        assert cfg.thrustCoefficient == 1.0
        assert not cfg.thrustCoefficientSet

    def test_gains(self, cfg):
        assert (cfg.pGain, cfg.iGain, cfg.dGain) == (0.1, 0.0, 0.0)
        assert (cfg.iMax, cfg.iMin) == (1.0, -1.0)

    def test_placeholders(self, cfg):
        assert np.allclose(cfg.jointAxis, [0.0, 0.0, 1.0])
        assert np.allclose(cfg.jointPose.R, np.eye(3))

    def test_immutable(self, cfg):
        with pytest.raises(AttributeError):
            cfg.pGain = 1.0

    def test_str_lists_mode(self, cfg):
        assert 'ForceCmd' in str(cfg)


# =============================================================================
# Parsing
# =============================================================================

class TestParsing:

    def test_missing_joint_name(self):
        with pytest.raises(ConfigError):
            loadConfig({'namespace': 'auv'})

    def test_blank_joint_name(self):
        with pytest.raises(ConfigError):
            loadConfig({'joint_name': '  '})

    def test_text_values(self):
        cfg = loadConfig({'joint_name': 'prop',
                          'use_angvel_cmd': 'true',
                          'velocity_control': '1',
                          'p_gain': '0.5',
                          'max_thrust_cmd': '20'})
        assert cfg.opmode == OperationMode.AngVelCmd
        assert cfg.velocityControl
        assert cfg.pGain == 0.5
        assert cfg.cmdMax == 20.0

    def test_false_text(self):
        cfg = loadConfig({'joint_name': 'prop', 'use_angvel_cmd': 'false'})
        assert cfg.opmode == OperationMode.ForceCmd

    def test_explicit_namespace_and_topic(self):
        cfg = loadConfig({'joint_name': 'prop', 'namespace': 'ns',
                          'topic': 'thrust'}, 'auv')
        assert (cfg.namespace, cfg.topic) == ('ns', 'thrust')

    def test_fixed_coefficient(self):
        cfg = loadConfig({'joint_name': 'prop', 'thrust_coefficient': 0.3})
        assert cfg.thrustCoefficient == 0.3
        assert cfg.thrustCoefficientSet

    def test_dataclass_direct(self):
        cfg = ThrusterConfig(jointName='j')
        assert cfg.opmode == OperationMode.ForceCmd


# =============================================================================
# Recovery
# =============================================================================

class TestRecovery:

    def test_inverted_bounds_revert(self, caplog):
        with caplog.at_level(logging.ERROR):
            cfg = loadConfig({'joint_name': 'prop',
                              'max_thrust_cmd': -5.0,
                              'min_thrust_cmd': 5.0})
        assert (cfg.cmdMin, cfg.cmdMax) == (-1000.0, 1000.0)
        assert 'max_thrust_cmd' in caplog.text

    def test_equal_bounds_kept(self):
        cfg = loadConfig({'joint_name': 'prop',
                          'max_thrust_cmd': 3.0,
                          'min_thrust_cmd': 3.0})
        assert (cfg.cmdMin, cfg.cmdMax) == (3.0, 3.0)

    @pytest.mark.parametrize('key,default', [('propeller_diameter', 0.02),
                                             ('fluid_density', 1000.0)])
    @pytest.mark.parametrize('value', [0.0, -1.0])
    def test_non_positive_physical(self, caplog, key, default, value):
        with caplog.at_level(logging.ERROR):
            cfg = loadConfig({'joint_name': 'prop', key: value})
        attr = 'propellerDiameter' if key == 'propeller_diameter' \
            else 'fluidDensity'
        assert getattr(cfg, attr) == default
        assert key in caplog.text

    def test_alphas_with_fixed_coefficient_warn(self, caplog):
        with caplog.at_level(logging.WARNING):
            cfg = loadConfig({'joint_name': 'prop',
                              'thrust_coefficient': 0.3,
                              'alpha_2': 0.5})
        assert cfg.thrustCoefficientSet
        assert 'alpha_2' in caplog.text

    def test_integral_and_derivative_not_applied(self, caplog):
        with caplog.at_level(logging.WARNING):
            cfg = loadConfig({'joint_name': 'prop',
                              'i_gain': 0.5,
                              'd_gain': 0.2})
        assert (cfg.iGain, cfg.dGain) == (0.0, 0.0)
        assert 'i_gain' in caplog.text
        assert 'd_gain' in caplog.text

    def test_zero_coefficient_stays_dynamic(self, caplog):
        with caplog.at_level(logging.ERROR):
            cfg = loadConfig({'joint_name': 'prop',
                              'thrust_coefficient': 0.0})
        assert not cfg.thrustCoefficientSet
        assert cfg.thrustCoefficient == 1.0
        assert 'thrust_coefficient' in caplog.text

    @pytest.mark.parametrize('key,attr,default', [
        ('p_gain', 'pGain', 0.1),
        ('wake_fraction', 'wakeFraction', 0.2),
        ('alpha_2', 'alpha2', 0.0),
        ('max_thrust_cmd', 'cmdMax', 1000.0),
        ('fluid_density', 'fluidDensity', 1000.0),
    ])
    @pytest.mark.parametrize('value', ['fast', None, float('nan')])
    def test_unusable_number_uses_default(self, caplog, key, attr, default,
                                          value):
        with caplog.at_level(logging.ERROR):
            cfg = loadConfig({'joint_name': 'prop', key: value})
        assert getattr(cfg, attr) == default
        assert key in caplog.text
