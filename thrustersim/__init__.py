"""
thrusterSim: Propeller Thruster Actuator Model for Physics Simulations

Converts thrust or propeller rate commands into a propeller spin rate, closes
the propeller control loop, applies the resulting force and torque to a rigid
body through an injected host interface, and publishes the complementary
feedback quantity.

Modules
-------
actuator : Thrust / angular velocity conversion and thrust coefficient
command : Thread-safe command state
control : PID law and per-step control loop
battery : Battery gate for thruster stepping
config : Parameter parsing and defaults
host : Host collaborator interface
transport : In-process publish/subscribe ports
thruster : Thruster controller orchestration
simulator : Single-thruster test bench
plotTimeSeries : Visualization and plotting utilities
gnc : Math helpers
logger : Logging configuration and utilities

Examples
--------
### Bench run with a thrust step:

>>> import thrustersim as ts
>>>
>>> sim = ts.Simulator(
...     name="Step",
...     N=500,
...     params={'joint_name': 'propeller_joint', 'p_gain': 0.01},
...     command=lambda t: 100.0 if t >= 1.0 else 0.0,
... )
>>> data = sim.run()

### Wiring a thruster into another host:

>>> node = ts.transport.Node(threaded=True)
>>> thruster = ts.ThrusterController(myHost, node)
>>> thruster.configure(modelId, {'joint_name': 'prop', 'use_angvel_cmd': True})
>>> # every step:
>>> thruster.preUpdate(info); physics(); thruster.postUpdate(info)
"""

# Core modules - import for direct access
from . import logger
from . import gnc
from . import actuator
from . import command
from . import control
from . import battery
from . import config
from . import host
from . import transport
from . import thruster
from . import simulator
from . import plotTimeSeries

# Classes and functions for convenience
from .actuator import ActuatorModel
from .command import CommandState
from .control import ControlLoop, PID
from .battery import EnablementGate, BatteryReading
from .config import ThrusterConfig, OperationMode, ConfigError, loadConfig
from .host import Host, UpdateInfo
from .thruster import ThrusterController
from .simulator import Simulator, BenchHost

# Version info
__version__ = "0.1.0"

__all__ = [
    # Modules
    'actuator',
    'battery',
    'command',
    'config',
    'control',
    'gnc',
    'host',
    'logger',
    'plotTimeSeries',
    'simulator',
    'thruster',
    'transport',
    # Main classes
    'ActuatorModel',
    'BatteryReading',
    'BenchHost',
    'CommandState',
    'ConfigError',
    'ControlLoop',
    'EnablementGate',
    'Host',
    'OperationMode',
    'PID',
    'Simulator',
    'ThrusterConfig',
    'ThrusterController',
    'UpdateInfo',
    'loadConfig',
]
