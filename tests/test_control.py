"""
Tests for the PID law, the dead band and the spin axis / wrench helpers.
"""

import math

import numpy as np
import pytest

from thrustersim import gnc
from thrustersim.actuator import ActuatorModel
from thrustersim.control import (PID, ControlLoop, DEADBAND, spinAxisWorld,
                                 wrench)


# =============================================================================
# PID
# =============================================================================

class TestPID:

    def test_proportional_sign(self):
        pid = PID(p=2.0)
        assert pid.update(-3.0, 0.1) == pytest.approx(6.0)

    def test_zero_dt_returns_zero(self):
        pid = PID(p=2.0)
        assert pid.update(1.0, 0.0) == 0.0
        assert pid.pErr == 0.0

    def test_non_finite_error_returns_zero(self):
        pid = PID(p=2.0)
        assert pid.update(float('nan'), 0.1) == 0.0
        assert pid.update(float('inf'), 0.1) == 0.0

    def test_output_limits(self):
        pid = PID(p=100.0, cmdMax=5.0, cmdMin=-5.0)
        assert pid.update(-1.0, 0.1) == 5.0
        assert pid.update(1.0, 0.1) == -5.0

    def test_no_limits_when_max_below_min(self):
        pid = PID(p=100.0)
        assert pid.update(-1.0, 0.1) == pytest.approx(100.0)

    def test_integral_limits(self):
        pid = PID(i=10.0, iMax=1.0, iMin=-1.0)
        for _ in range(10):
            pid.update(-1.0, 0.5)
        assert pid.iErr == -1.0
        assert pid.cmd == pytest.approx(1.0)

    def test_derivative(self):
        pid = PID(d=1.0)
        pid.update(1.0, 0.5)
        assert pid.dErr == pytest.approx(2.0)
        assert pid.cmd == pytest.approx(-2.0)

    def test_offset(self):
        pid = PID(cmdOffset=0.5)
        assert pid.update(0.0, 0.1) == 0.5

    def test_reset(self):
        pid = PID(p=1.0, i=1.0)
        pid.update(2.0, 0.1)
        pid.reset()
        assert (pid.pErr, pid.iErr, pid.dErr, pid.cmd) == (0.0, 0.0, 0.0, 0.0)


# =============================================================================
# Control loop
# =============================================================================

class TestControlLoop:

    @pytest.fixture
    def loop(self):
        return ControlLoop(ActuatorModel(), pGain=0.1)

    def test_pid_limits_from_thrust_bounds(self, loop):
        assert loop.pid.cmdMax == pytest.approx(2500.0)
        assert loop.pid.cmdMin == pytest.approx(-2500.0)

    def test_inside_dead_band(self, loop):
        out = loop.step(0.01, 0.05, 0.0, 0.0)
        assert out.torque == 0.0
        assert out.velocitySetpoint is None

    def test_at_dead_band_edge(self, loop):
        assert loop.step(0.01, DEADBAND, 0.0, 0.0).torque == 0.0

    def test_outside_dead_band(self, loop):
        out = loop.step(0.01, 0.0, 0.0, 1.0)
        assert out.torque == pytest.approx(0.1)
        assert out.angVelFeedback == 0.0

    def test_too_fast_gives_negative_torque(self, loop):
        assert loop.step(0.01, 5.0, 0.0, 1.0).torque == pytest.approx(-0.4)

    def test_torque_clamped(self):
        loop = ControlLoop(ActuatorModel(), pGain=10.0)
        assert loop.step(0.01, 0.0, 0.0, 1000.0).torque == \
            pytest.approx(2500.0)

    def test_velocity_control(self):
        loop = ControlLoop(ActuatorModel(), velocityControl=True)
        out = loop.step(0.01, 3.0, 0.016, 10.0)
        assert loop.pid is None
        assert out.torque == 0.0
        assert out.velocitySetpoint == 10.0
        assert out.angVelFeedback == 10.0
        assert out.thrustFeedback == 0.016


# =============================================================================
# Geometry
# =============================================================================

class TestGeometry:

    def test_identity(self):
        axis = spinAxisWorld(gnc.Pose(), gnc.Pose(), [0.0, 0.0, 2.0])
        assert np.allclose(axis, [0.0, 0.0, 1.0])

    def test_link_yaw(self):
        link = gnc.Pose.fromEuler([1.0, 2.0, 3.0], 0.0, 0.0, math.pi / 2)
        axis = spinAxisWorld(link, gnc.Pose(), [1.0, 0.0, 0.0])
        assert np.allclose(axis, [0.0, 1.0, 0.0])

    def test_joint_pose_composes(self):
        link = gnc.Pose.fromEuler([0.0, 0.0, 0.0], 0.0, 0.0, math.pi / 2)
        joint = gnc.Pose.fromEuler([0.5, 0.0, 0.0], 0.0, 0.0, math.pi / 2)
        axis = spinAxisWorld(link, joint, [1.0, 0.0, 0.0])
        assert np.allclose(axis, [-1.0, 0.0, 0.0])

    def test_zero_axis_stays_zero(self):
        axis = spinAxisWorld(gnc.Pose(), gnc.Pose(), [0.0, 0.0, 0.0])
        assert np.allclose(axis, 0.0)

    def test_wrench(self):
        force, torque = wrench(np.array([0.0, 1.0, 0.0]), 3.0, -0.5)
        assert np.allclose(force, [0.0, 3.0, 0.0])
        assert np.allclose(torque, [0.0, -0.5, 0.0])
