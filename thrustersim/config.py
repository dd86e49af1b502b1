"""
Thruster configuration: parameter parsing, defaults and validation.

The host hands the controller a flat mapping of parameter names to values, as
read from the scene description. loadConfig() turns that mapping into an
immutable ThrusterConfig, applying defaults and recovering locally from
inconsistent values.


Classes
-------
OperationMode
    Meaning of the scalar on the command channel.
ThrusterConfig
    Immutable thruster parameters.
ConfigError
    Fatal configuration problem for one thruster instance.


Functions
---------
loadConfig(params, modelName)
    Parse parameter mapping into a ThrusterConfig.


Notes
-----
**Recognized parameters:**

=====================  =========  ==========================================
Name                   Default    Meaning
=====================  =========  ==========================================
joint_name             required   Propeller joint driving the thruster
namespace              model      Namespace prefix for topics
topic                  ''         Custom command topic
use_angvel_cmd         False      Command channel carries rad/s, not N
thrust_coefficient     1 (free)   Fixes Kt, disables dynamic update
propeller_diameter     0.02       Propeller diameter (m)
fluid_density          1000       Fluid density (kg/m^3)
wake_fraction          0.2        Wake fraction
alpha_1                1          Open-water constant
alpha_2                0          Open-water constant
max_thrust_cmd         1000       Upper command bound
min_thrust_cmd         -1000      Lower command bound
velocity_control       False      Write rad/s to the joint instead of PID
p_gain                 0.1        PID proportional gain
i_gain                 0          Not applied, see below
d_gain                 0          Not applied, see below
=====================  =========  ==========================================

**Integral and derivative gains:** ``i_gain`` and ``d_gain`` are accepted but
not applied, the propeller PID always runs with zero integral and derivative
gains. A supplied value is reported with a warning.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Tuple
import numpy as np
from thrustersim import gnc
from thrustersim import logger

#-----------------------------------------------------------------------------#

# Global Variables
log = logger.addLog('cfg')

# Defaults
CMD_MAX = 1000.0
CMD_MIN = -1000.0
P_GAIN = 0.1
I_GAIN = 0.0
D_GAIN = 0.0
I_MAX = 1.0
I_MIN = -1.0

###############################################################################

class ConfigError(ValueError):
    """Configuration problem that leaves a thruster instance inert."""

###############################################################################

class OperationMode(Enum):
    """Interpretation of the command channel scalar."""

    ForceCmd = 0
    """Command is a thrust in N, feedback is the propeller rate."""

    AngVelCmd = 1
    """Command is a propeller rate in rad/s, feedback is the thrust."""

###############################################################################

@dataclass(frozen=True, eq=False)
class ThrusterConfig:
    """
    Immutable thruster parameters.

    Joint axis and joint pose are resolved from the host once the joint is
    known, see ThrusterController.configure().


    Attributes
    ----------
    jointName : str
        Propeller joint name.
    namespace : str
        Topic namespace.
    topic : str
        Custom command topic, empty for the default topic scheme.
    opmode : OperationMode
        Command channel interpretation.
    cmdMin, cmdMax : float
        Command bounds, applied to thrust or rad/s depending on opmode.
    velocityControl : bool
        Direct joint velocity control instead of PID torque control.
    fluidDensity : float
        Fluid density in kg/m^3.
    propellerDiameter : float
        Propeller diameter in m.
    wakeFraction : float
        Wake fraction.
    alpha1, alpha2 : float
        Open-water diagram constants.
    thrustCoefficient : float
        Initial (or fixed) thrust coefficient.
    thrustCoefficientSet : bool
        True if thrustCoefficient was supplied, disabling dynamic updates.
    pGain, iGain, dGain : float
        PID gains.
    iMax, iMin : float
        PID integral term bounds.
    jointAxis : ndarray, shape (3,)
        Unit spin axis in the joint frame.
    jointPose : gnc.Pose
        Joint pose in the child link frame.
    """

    jointName: str
    namespace: str = ''
    topic: str = ''
    opmode: OperationMode = OperationMode.ForceCmd
    cmdMin: float = CMD_MIN
    cmdMax: float = CMD_MAX
    velocityControl: bool = False
    fluidDensity: float = 1000.0
    propellerDiameter: float = 0.02
    wakeFraction: float = 0.2
    alpha1: float = 1.0
    alpha2: float = 0.0
    thrustCoefficient: float = 1.0
    thrustCoefficientSet: bool = False
    pGain: float = P_GAIN
    iGain: float = I_GAIN
    dGain: float = D_GAIN
    iMax: float = I_MAX
    iMin: float = I_MIN
    jointAxis: np.ndarray = field(default_factory=lambda: np.array([0.,0.,1.]))
    jointPose: gnc.Pose = field(default_factory=gnc.Pose)

    def __str__(self)->str:
        return '\n'.join([
            f"Thruster [{self.namespace}/{self.jointName}]",
            f"  mode:        {self.opmode.name}",
            f"  control:     "
            f"{'velocity' if self.velocityControl else 'PID torque'}",
            f"  cmd bounds:  [{self.cmdMin}, {self.cmdMax}]",
            f"  rho, D:      {self.fluidDensity}, {self.propellerDiameter}",
            f"  Kt:          {self.thrustCoefficient}"
            f" ({'fixed' if self.thrustCoefficientSet else 'dynamic'})",
            f"  w, a1, a2:   {self.wakeFraction}, {self.alpha1}, "
            f"{self.alpha2}",
            f"  p, i, d:     {self.pGain}, {self.iGain}, {self.dGain}",
        ])

###############################################################################

def _toBool(value:Any)->bool:
    """Scene values may arrive as text."""
    if (isinstance(value, str)):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)

#-----------------------------------------------------------------------------#

def _number(params:Mapping[str,Any], key:str, default:float)->float:
    """Read finite float, falling back to default if absent or unusable."""
    if (key not in params):
        return default
    try:
        value = float(params[key])
    except (TypeError, ValueError):
        log.error('<%s> is not a number, got %r. Using default %s.',
                  key, params[key], default)
        return default
    if (not np.isfinite(value)):
        log.error('<%s> must be finite, got %s. Using default %s.',
                  key, value, default)
        return default
    return value

#-----------------------------------------------------------------------------#

def _positive(params:Mapping[str,Any], key:str, default:float)->float:
    """Read strictly positive float, falling back to default."""
    value = _number(params, key, default)
    if (value <= 0.0):
        log.error('<%s> must be positive, got %s. Using default %s.',
                  key, value, default)
        return default
    return value

#-----------------------------------------------------------------------------#

def _bounds(params:Mapping[str,Any])->Tuple[float,float]:
    """Read command bounds, reverting to defaults if max < min."""
    cmdMax = _number(params, 'max_thrust_cmd', CMD_MAX)
    cmdMin = _number(params, 'min_thrust_cmd', CMD_MIN)
    if (cmdMax < cmdMin):
        log.error('<max_thrust_cmd> must be greater than or equal to '
                  '<min_thrust_cmd>. Revert to using default values: '
                  'min: %s, max: %s', CMD_MIN, CMD_MAX)
        return CMD_MIN, CMD_MAX
    return cmdMin, cmdMax

###############################################################################

def loadConfig(params:Mapping[str,Any],
               modelName:str = '',
               )->ThrusterConfig:
    """
    Parse a parameter mapping into a ThrusterConfig.


    Parameters
    ----------
    params : mapping
        Parameter names to values, see module notes for the recognized names.
        Values may be numbers, booleans or their text form.
    modelName : str
        Name of the model owning the thruster, the default namespace.


    Returns
    -------
    cfg : ThrusterConfig
        Parsed configuration. Joint axis and pose hold placeholders until the
        joint is resolved against the host.


    Raises
    ------
    ConfigError
        If joint_name is missing or empty.


    Notes
    -----
    Recoverable problems are logged and replaced by defaults:

    - max_thrust_cmd < min_thrust_cmd: both bounds revert to defaults.
    - Non-numeric or non-finite numbers: default used.
    - Non-positive propeller_diameter or fluid_density: default used.
    - Zero thrust_coefficient: ignored, the coefficient stays dynamic.
    - alpha_1 / alpha_2 together with thrust_coefficient: alphas ignored.
    - i_gain / d_gain supplied: not applied, gains stay zero.
    """

    jointName = str(params.get('joint_name', '')).strip()
    if (not jointName):
        raise ConfigError("Missing <joint_name>. Plugin won't be initialized.")

    namespace = str(params.get('namespace', modelName))

    kw = {}
    if ('thrust_coefficient' in params):
        Kt = _number(params, 'thrust_coefficient', 0.0)
        if (Kt == 0.0):
            log.error('<thrust_coefficient> must be a nonzero number, got '
                      '%r. Ignoring it, the coefficient stays dynamic.',
                      params['thrust_coefficient'])
        else:
            kw['thrustCoefficient'] = Kt
            kw['thrustCoefficientSet'] = True

    for key, attr in (('alpha_1', 'alpha1'), ('alpha_2', 'alpha2')):
        if (key in params):
            kw[attr] = _number(params, key, 1.0 if key == 'alpha_1' else 0.0)
            if (kw.get('thrustCoefficientSet', False)):
                log.warning('The [%s] value will be ignored as a '
                            '[thrust_coefficient] was also defined. Remove '
                            '[thrust_coefficient] to let the alpha values '
                            'update the thrust coefficient.', key)

    kw['wakeFraction'] = _number(params, 'wake_fraction', 0.2)

    opmode = OperationMode.ForceCmd
    if (_toBool(params.get('use_angvel_cmd', False))):
        opmode = OperationMode.AngVelCmd

    cmdMin, cmdMax = _bounds(params)

    velocityControl = _toBool(params.get('velocity_control', False))
    pGain = _number(params, 'p_gain', P_GAIN)
    for key in ('i_gain', 'd_gain'):
        if (key in params):
            log.warning('<%s> is not applied by the propeller controller, '
                        'the gain stays at 0.', key)

    cfg = ThrusterConfig(
        jointName=jointName,
        namespace=namespace,
        topic=str(params.get('topic', '')),
        opmode=opmode,
        cmdMin=cmdMin,
        cmdMax=cmdMax,
        velocityControl=velocityControl,
        fluidDensity=_positive(params, 'fluid_density', 1000.0),
        propellerDiameter=_positive(params, 'propeller_diameter', 0.02),
        pGain=pGain,
        **kw,
    )
    log.debug('Loaded configuration\n%s', cfg)
    return cfg
