"""
Propeller control law and per-step thruster control loop.

Implements the Control block of the thruster: given the commanded propeller
rate, it either closes a PID loop on the measured spin rate and returns a
torque for the host to apply, or hands the commanded rate straight to the
propeller joint as a velocity setpoint.


Classes
-------
PID
    Scalar PID controller with integral and command limits.
ControlOutput
    Result of one control step.
ControlLoop
    PID-Torque-Control or Direct-Velocity-Control, chosen at configuration.


Functions
---------
spinAxisWorld(linkWorldPose, jointPose, jointAxis)
    Propeller spin axis expressed in the world frame.
wrench(axis, thrust, torque)
    World force and torque vectors along the spin axis.


Notes
-----
**Control state:**

The control state is a configuration choice, not a runtime mode. With
``velocityControl`` off the loop owns a PID and the joint is driven by torque;
with it on there is no PID at all and the commanded rate is written to the
joint.

**Dead band:**

The PID is only updated when the rate error exceeds DEADBAND (0.1 rad/s). Below
it the torque is zero, which keeps the propeller from chattering around the
setpoint.

**Sign convention:**

The error is measured minus commanded and the PID output is the negated gain
sum, so a propeller spinning too slowly receives a positive torque.


References
----------
[1] Astrom, K.J. and Murray, R.M. (2008). Feedback Systems: An Introduction for
Scientists and Engineers. Princeton University Press.
http://www.cds.caltech.edu/~murray/amwiki
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
from numpy.typing import NDArray
import numpy as np
import math
from thrustersim.actuator import ActuatorModel
from thrustersim import gnc
from thrustersim import logger

#-----------------------------------------------------------------------------#

# Type Aliases
NPFltArr = NDArray[np.float64]

# Global Variables
log = logger.addLog('ctrl')

# Rate error below which no torque is applied (rad/s)
DEADBAND = 0.1

###############################################################################

class PID:
    """
    Scalar PID controller.

    Parameters
    ----------
    p, i, d : float
        Proportional, integral and derivative gains.
    iMax, iMin : float
        Integral term limits. Ignored if iMax < iMin.
    cmdMax, cmdMin : float
        Output limits. Ignored if cmdMax < cmdMin.
    cmdOffset : float
        Constant added to the output before limiting.
    """

    def __init__(self,
                 p:float = 0.0,
                 i:float = 0.0,
                 d:float = 0.0,
                 iMax:float = -1.0,
                 iMin:float = 0.0,
                 cmdMax:float = -1.0,
                 cmdMin:float = 0.0,
                 cmdOffset:float = 0.0,
                 )->None:
        self.pGain = p
        self.iGain = i
        self.dGain = d
        self.iMax = iMax
        self.iMin = iMin
        self.cmdMax = cmdMax
        self.cmdMin = cmdMin
        self.cmdOffset = cmdOffset
        self.reset()

    #--------------------------------------------------------------------------
    def reset(self)->None:
        """Clear the error history and the last command."""
        self.pErrLast = 0.0
        self.pErr = 0.0
        self.iErr = 0.0
        self.dErr = 0.0
        self.cmd = 0.0

    #--------------------------------------------------------------------------
    def update(self, error:float, dt:float)->float:
        """
        Advance the controller one step.


        Parameters
        ----------
        error : float
            Measured value minus target value.
        dt : float
            Step duration in seconds.


        Returns
        -------
        cmd : float
            Control output. Zero (state untouched) if dt is zero or the error
            is not finite.


        Notes
        -----
        - **Integral:** iErr <- clamp(iErr + i * dt * e, iMin, iMax). The
          gain is folded into the accumulator so the limits bound the output
          contribution directly.
        - **Output:** cmd = -p*e - iErr - d*(e - e_last)/dt + offset, clamped to
          [cmdMin, cmdMax].
        """

        if ((dt == 0.0) or (not math.isfinite(error))):
            return 0.0

        self.pErr = error
        pTerm = self.pGain * self.pErr

        self.iErr = self.iErr + self.iGain * dt * self.pErr
        if (self.iMax >= self.iMin):
            self.iErr = gnc.saturation(self.iErr, self.iMin, self.iMax)

        self.dErr = (self.pErr - self.pErrLast) / dt
        self.pErrLast = self.pErr
        dTerm = self.dGain * self.dErr

        self.cmd = -pTerm - self.iErr - dTerm + self.cmdOffset
        if (self.cmdMax >= self.cmdMin):
            self.cmd = gnc.saturation(self.cmd, self.cmdMin, self.cmdMax)

        return self.cmd

    def __repr__(self)->str:
        return (f"PID(p={self.pGain}, i={self.iGain}, d={self.dGain}, "
                f"i=[{self.iMin}, {self.iMax}], "
                f"cmd=[{self.cmdMin}, {self.cmdMax}])")

###############################################################################

@dataclass
class ControlOutput:
    """
    Result of one control step.

    Attributes
    ----------
    torque : float
        Torque about the spin axis (N m). Zero under velocity control.
    angVelFeedback : float
        Measured spin rate (PID control) or commanded rate (velocity control).
    thrustFeedback : float
        Commanded thrust (N).
    velocitySetpoint : float or None
        Joint velocity setpoint, only under velocity control.
    """

    torque: float = 0.0
    angVelFeedback: float = 0.0
    thrustFeedback: float = 0.0
    velocitySetpoint: Optional[float] = None

###############################################################################

def spinAxisWorld(linkWorldPose:gnc.Pose,
                  jointPose:gnc.Pose,
                  jointAxis:Sequence[float],
                  )->NPFltArr:
    """
    Express the propeller spin axis in the world frame.


    Parameters
    ----------
    linkWorldPose : gnc.Pose
        Current pose of the driven link in the world.
    jointPose : gnc.Pose
        Fixed pose of the propeller joint in the link frame.
    jointAxis : array_like, shape (3,)
        Fixed spin axis in the joint frame.


    Returns
    -------
    axis : ndarray, shape (3,)
        Unit spin axis in the world frame.
    """

    jointWorldPose = linkWorldPose * jointPose
    return gnc.normalize(jointWorldPose.rotateVector(jointAxis))

###############################################################################

def wrench(axis:NPFltArr,
           thrust:float,
           torque:float,
           )->Tuple[NPFltArr,NPFltArr]:
    """Force and torque vectors (world frame) along the spin axis."""
    return axis * thrust, axis * torque

###############################################################################

class ControlLoop:
    """
    Per-step propeller control.


    Parameters
    ----------
    model : ActuatorModel
        Conversion model, used to size the PID output limits.
    velocityControl : bool
        True for Direct-Velocity-Control, False for PID-Torque-Control.
    pGain, iGain, dGain : float
        PID gains.
    iMax, iMin : float
        PID integral limits.
    cmdMax, cmdMin : float
        Command bounds. The PID output limits are the propeller rates these
        bounds map to when read as thrust.


    Attributes
    ----------
    pid : PID or None
        Propeller rate controller, None under velocity control.
    """

    def __init__(self,
                 model:ActuatorModel,
                 velocityControl:bool = False,
                 pGain:float = 0.1,
                 iGain:float = 0.0,
                 dGain:float = 0.0,
                 iMax:float = 1.0,
                 iMin:float = -1.0,
                 cmdMax:float = 1000.0,
                 cmdMin:float = -1000.0,
                 )->None:
        self.velocityControl = velocityControl
        self.pid = None
        if (velocityControl):
            log.debug('Using velocity control for propeller joint.')
        else:
            log.debug('Using PID controller for propeller joint.')
            self.pid = PID(pGain, iGain, dGain, iMax, iMin,
                           model.thrustToAngVel(cmdMax),
                           model.thrustToAngVel(cmdMin))

    #--------------------------------------------------------------------------
    def step(self,
             dt:float,
             currentAngular:float,
             thrust:float,
             angVel:float,
             )->ControlOutput:
        """
        Compute one control step.


        Parameters
        ----------
        dt : float
            Step duration in seconds.
        currentAngular : float
            Measured link angular rate about the world spin axis (rad/s).
        thrust : float
            Commanded thrust (N).
        angVel : float
            Commanded propeller rate (rad/s).


        Returns
        -------
        out : ControlOutput
            Torque, feedback values and, under velocity control, the joint
            setpoint.
        """

        if (self.velocityControl):
            return ControlOutput(torque=0.0,
                                 angVelFeedback=angVel,
                                 thrustFeedback=thrust,
                                 velocitySetpoint=angVel)

        torque = 0.0
        error = currentAngular - angVel
        if (abs(error) > DEADBAND):
            torque = self.pid.update(error, dt)

        return ControlOutput(torque=torque,
                             angVelFeedback=currentAngular,
                             thrustFeedback=thrust)
