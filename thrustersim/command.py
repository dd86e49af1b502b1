"""
Thread-safe holder of the latest thruster command.

Commands arrive on the transport thread at any time while the control step
runs on the simulation thread. CommandState keeps the commanded thrust and the
commanded propeller angular velocity behind a single lock, and every writer
recomputes the counterpart quantity before releasing it, so readers always see
a consistent pair.


Classes
-------
CommandState
    Commanded thrust / angular velocity pair with guarded entry points.
"""

from typing import Tuple
import threading
from thrustersim.actuator import ActuatorModel
from thrustersim import gnc
from thrustersim import logger

#-----------------------------------------------------------------------------#

# Global Variables
log = logger.addLog('cmd')

###############################################################################

class CommandState:
    """
    Latest commanded thrust and propeller angular velocity.

    Commands are most-recent-wins: there is no queue and no timeout, a command
    holds until the next one replaces it.


    Parameters
    ----------
    model : ActuatorModel
        Conversion model shared with the control step.
    cmdMin, cmdMax : float
        Command bounds. The same interval clamps thrust commands (N) and
        angular velocity commands (rad/s).


    Notes
    -----
    The lock covers the stored values, the derived values and the actuator
    model's coefficient update. It is never held across calls into the host
    or the transport.
    """

    def __init__(self,
                 model:ActuatorModel,
                 cmdMin:float,
                 cmdMax:float,
                 )->None:
        self._model = model
        self._cmdMin = cmdMin
        self._cmdMax = cmdMax
        self._lock = threading.Lock()
        self._thrust = 0.0
        self._angVel = 0.0

    #--------------------------------------------------------------------------
    def _sanitize(self, raw:float)->float:
        return gnc.saturation(gnc.fixnan(float(raw)),
                              self._cmdMin,
                              self._cmdMax)

    #--------------------------------------------------------------------------
    def setThrust(self, raw:float)->None:
        """
        Store a thrust command and derive the propeller angular velocity.

        Parameters
        ----------
        raw : float
            Thrust command in N. NaN becomes 0, then the value is clamped to
            the command bounds.
        """

        with self._lock:
            self._thrust = self._sanitize(raw)
            self._angVel = self._model.thrustToAngVel(self._thrust,
                                                      self._angVel)
        log.debug('Thrust command %.4g N', raw)

    #--------------------------------------------------------------------------
    def setAngVel(self, raw:float)->None:
        """
        Store an angular velocity command and derive the thrust.

        Parameters
        ----------
        raw : float
            Propeller angular velocity command in rad/s. NaN becomes 0, then
            the value is clamped to the command bounds.
        """

        with self._lock:
            self._angVel = self._sanitize(raw)
            self._thrust = self._model.angVelToThrust(self._angVel)
        log.debug('Angular velocity command %.4g rad/s', raw)

    #--------------------------------------------------------------------------
    def snapshot(self)->Tuple[float,float]:
        """Return (thrust, angVel) read under the lock."""
        with self._lock:
            return self._thrust, self._angVel

    #--------------------------------------------------------------------------
    def refresh(self)->Tuple[float,float]:
        """
        Re-derive the angular velocity from the thrust for a control step.

        Returns
        -------
        thrust : float
            Commanded thrust in N.
        angVel : float
            Propeller angular velocity in rad/s at the current thrust
            coefficient.

        Notes
        -----
        Called once per step. When the coefficient is dynamic this is where it
        follows the vehicle speed between commands.
        """

        with self._lock:
            self._angVel = self._model.thrustToAngVel(self._thrust,
                                                      self._angVel)
            return self._thrust, self._angVel

    #--------------------------------------------------------------------------
    def setAdvanceVel(self, speed:float)->None:
        """Store the vehicle speed used by the next coefficient update."""
        with self._lock:
            self._model.advanceVel = speed

    @property
    def bounds(self)->Tuple[float,float]:
        """Command bounds (cmdMin, cmdMax)."""
        return self._cmdMin, self._cmdMax
