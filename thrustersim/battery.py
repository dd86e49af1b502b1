"""
Battery gate for thruster stepping.

The thruster does not model batteries. It only reads the state of charge
readings the host exposes and decides whether the next control step may run.


Classes
-------
BatteryReading
    State of charge reported for one battery entity.
EnablementGate
    Remembers the gate decision between steps.


Functions
---------
hasSufficientBattery(readings, owner)
    True unless a battery owned by the thruster model is depleted.
"""

from dataclasses import dataclass
from typing import Hashable, Iterable
from thrustersim import logger

#-----------------------------------------------------------------------------#

# Global Variables
log = logger.addLog('batt')

###############################################################################

@dataclass(frozen=True)
class BatteryReading:
    """
    State of charge of one battery.

    Attributes
    ----------
    entity : hashable
        Battery identifier.
    parent : hashable
        Identifier of the entity owning the battery.
    soc : float
        State of charge. Zero or below means depleted.
    """

    entity: Hashable
    parent: Hashable
    soc: float

###############################################################################

def hasSufficientBattery(readings:Iterable[BatteryReading],
                         owner:Hashable,
                         )->bool:
    """
    Check the batteries owned by a model.


    Parameters
    ----------
    readings : iterable of BatteryReading
        All charge readings known to the host.
    owner : hashable
        Model identifier owning the thruster.


    Returns
    -------
    sufficient : bool
        False if any reading owned by owner has soc <= 0. True otherwise,
        including when the model has no battery at all.
    """

    result = True
    for r in readings:
        if ((r.parent == owner) and (r.soc <= 0)):
            result = False
    return result

###############################################################################

class EnablementGate:
    """
    Gate deciding whether the next control step runs.

    The decision is taken after a step completes and applies to the following
    step, so losing power never interrupts a step already in progress.


    Parameters
    ----------
    owner : hashable
        Model identifier owning the thruster.


    Attributes
    ----------
    enabled : bool
        Current gate state, True at start.
    """

    def __init__(self, owner:Hashable)->None:
        self.owner = owner
        self.enabled = True

    def evaluate(self, readings:Iterable[BatteryReading])->bool:
        """Update and return the gate state from the current readings."""
        enabled = hasSufficientBattery(readings, self.owner)
        if (enabled != self.enabled):
            log.debug('Thruster on %s %s', self.owner,
                      'enabled' if enabled else 'disabled, battery depleted')
        self.enabled = enabled
        return enabled
