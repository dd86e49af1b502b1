"""
Shared fixtures for the thruster test suite: a recording fake host, default
parameter sets and a synchronous transport node.
"""

import matplotlib
matplotlib.use('Agg')

import numpy as np
import pytest

from thrustersim import gnc
from thrustersim.battery import BatteryReading
from thrustersim.host import Host, UpdateInfo
from thrustersim.transport import Node


# =============================================================================
# Fake host
# =============================================================================

class FakeHost(Host):
    """Host double with settable state that records every call."""

    def __init__(self, model='auv', joint='prop_joint', link='prop'):
        self.model = model
        self.joint = joint
        self.link = link
        self.axis = np.array([1.0, 0.0, 0.0])
        self.jPose = gnc.Pose()
        self.linkPose = gnc.Pose()
        self.angVel = np.zeros(3)
        self.linVel = np.zeros(3)
        self.readings = []
        self.wrenches = []
        self.jointCmds = []

    def modelName(self, model):
        return self.model

    def jointByName(self, model, name):
        return 11 if (model == self.model and name == self.joint) else None

    def linkByName(self, model, name):
        return 12 if (model == self.model and name == self.link) else None

    def jointAxis(self, joint):
        return self.axis

    def jointPose(self, joint):
        return self.jPose

    def jointChildLink(self, joint):
        return self.link

    def worldPose(self, link):
        return self.linkPose

    def worldAngularVelocity(self, link):
        return self.angVel

    def worldLinearVelocity(self, link):
        return self.linVel

    def addWorldWrench(self, link, force, torque):
        self.wrenches.append((np.array(force), np.array(torque)))

    def setJointVelocityCmd(self, joint, velocity):
        self.jointCmds.append(velocity)

    def batteryReadings(self):
        return list(self.readings)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def host():
    """Return a fake host with one model, joint and link."""
    return FakeHost()


@pytest.fixture
def node():
    """Return a synchronous transport node."""
    return Node()


@pytest.fixture
def params():
    """Return the end-to-end parameter set: dynamic Kt, alpha1=1, alpha2=0."""
    return {
        'joint_name': 'prop_joint',
        'alpha_1': 1.0,
        'alpha_2': 0.0,
        'fluid_density': 1000.0,
        'propeller_diameter': 0.02,
    }


@pytest.fixture
def info():
    """Return one 10 ms step."""
    return UpdateInfo(dt=0.01)


@pytest.fixture
def depleted():
    """Return a factory for battery readings owned by a model."""
    def make(owner, soc):
        return BatteryReading(entity=('battery', owner), parent=owner, soc=soc)
    return make
