"""
Host collaborator interface consumed by the thruster controller.

The controller never touches simulation storage directly. Everything it needs
from the physics host goes through the abstract Host class, using opaque
identifiers for models, joints and links. A test double only has to implement
these methods.


Classes
-------
UpdateInfo
    Per-step timing information supplied by the host.
Host
    Abstract host interface.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Hashable, Iterable, Optional
from numpy.typing import NDArray
import numpy as np
from thrustersim.battery import BatteryReading
from thrustersim import gnc

#-----------------------------------------------------------------------------#

# Type Aliases
NPFltArr = NDArray[np.float64]

###############################################################################

@dataclass(frozen=True)
class UpdateInfo:
    """
    Step information.

    Attributes
    ----------
    dt : float
        Step duration in seconds, authoritative for the PID.
    simTime : float
        Simulation time at the start of the step in seconds.
    iterations : int
        Step counter.
    paused : bool
        True if the host is paused. Paused steps are skipped.
    """

    dt: float
    simTime: float = 0.0
    iterations: int = 0
    paused: bool = False

###############################################################################

class Host(ABC):
    """
    Physics host operations used by the thruster.

    Identifiers are opaque hashable values. Lookups return None when the
    requested entity does not exist.
    """

    @abstractmethod
    def modelName(self, model:Hashable)->str:
        """Name of the model entity."""

    @abstractmethod
    def jointByName(self, model:Hashable, name:str)->Optional[Hashable]:
        """Joint identifier by name within a model, None if unknown."""

    @abstractmethod
    def linkByName(self, model:Hashable, name:str)->Optional[Hashable]:
        """Link identifier by name within a model, None if unknown."""

    @abstractmethod
    def jointAxis(self, joint:Hashable)->NPFltArr:
        """Joint axis in the joint frame, shape (3,)."""

    @abstractmethod
    def jointPose(self, joint:Hashable)->gnc.Pose:
        """Joint pose in its child link frame."""

    @abstractmethod
    def jointChildLink(self, joint:Hashable)->str:
        """Name of the child link of the joint."""

    @abstractmethod
    def worldPose(self, link:Hashable)->gnc.Pose:
        """Current link pose in the world."""

    @abstractmethod
    def worldAngularVelocity(self, link:Hashable)->NPFltArr:
        """Current link angular velocity in the world frame, shape (3,)."""

    @abstractmethod
    def worldLinearVelocity(self, link:Hashable)->NPFltArr:
        """Current link linear velocity in the world frame, shape (3,)."""

    @abstractmethod
    def addWorldWrench(self,
                       link:Hashable,
                       force:NPFltArr,
                       torque:NPFltArr,
                       )->None:
        """Apply a world frame force and torque to the link for this step."""

    @abstractmethod
    def setJointVelocityCmd(self, joint:Hashable, velocity:float)->None:
        """Create or update the joint velocity command."""

    @abstractmethod
    def batteryReadings(self)->Iterable[BatteryReading]:
        """All state of charge readings known to the host."""
