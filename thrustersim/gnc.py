"""
Math utilities supporting the thruster model and its host bench.

Provides the scalar guards used on every inbound command, rotation matrices
and a small rigid transform class used to carry the propeller joint axis into
the world frame.

Functions
---------
**Scalar Guards**
    fixnan(value) : Replace NaN (and infinities) with zero.
    saturation(value, limit, maxLimit) : Clamp value to interval.
    sgn(value) : Sign convention used by the propeller relations.
**Rotations**
    Rzyx(phi, theta, psi) : Rotation matrix in SO(3) using zyx convention.
    normalize(v) : Unit vector, zero vector stays zero.

Classes
-------
Pose
    Rigid transform (position and rotation) with composition.

References
----------
[1] Fossen, T.I. Python Vehicle Simulator. GitHub repository.
https://github.com/cybergalactic/PythonVehicleSimulator
"""

from __future__ import annotations
from typing import Optional, Sequence
from numpy.typing import NDArray
import numpy as np
import math
from thrustersim import logger

#-----------------------------------------------------------------------------#

# Type Aliases
NPFltArr = NDArray[np.float64]

# Global Variables
log = logger.addLog('gnc')

###############################################################################

def fixnan(value:float)->float:
    """
    Replace non-finite command values with zero.

    Parameters
    ----------
    value : float
        Raw scalar value.

    Returns
    -------
    value : float
        The input value, or 0.0 when the input is NaN or infinite.
    """

    if (math.isnan(value) or math.isinf(value)):
        return 0.0
    return float(value)

###############################################################################

def saturation(value:float,
               limit:float,
               maxLimit:Optional[float]=None,
               )->float:
    """
    Clamp value to specified interval.

    Parameters
    ----------
    value : float
        Value to limit.
    limit : float
        Lower limit if maxLimit provided, else absolute limit for symmetric
        interval.
    maxLimit : float, optional
        Upper limit. If None, uses symmetric interval [-limit, +limit].

    Returns
    -------
    clamped : float
        Value restricted to [limit, maxLimit] or [-limit, +limit].

    Examples
    --------
    >>> saturation(5.0, 2.0)         # interval [-2, 2]
    2.0
    >>> saturation(5.0, 0.0, 10.0)   # interval [0, 10]
    5.0
    >>> saturation(-5.0, -3.0, 3.0)  # interval [-3, 3]
    -3.0
    """

    if (maxLimit is None):
        maxLimit = abs(limit)
        lowLimit = -maxLimit
    else:
        lowLimit = limit

    return float(np.clip(value, lowLimit, maxLimit))

###############################################################################

def sgn(value:float)->float:
    """+1.0 for strictly positive values, -1.0 otherwise (zero included)."""
    return 1.0 if (value > 0) else -1.0

###############################################################################

def Rzyx(phi:float,
         theta:float,
         psi:float,
         )->NPFltArr:
    """
    Compute the 3x3 Euler angle rotation matrix R in SO(3) using the zyx
    convention.


    Parameters
    ----------
    phi : float
        Roll angle in radians.
    theta : float
        Pitch angle in radians.
    psi : float
        Yaw angle in radians.


    Returns
    -------
    R : ndarray, shape (3, 3)
        Rotation matrix from the child frame to the parent frame.
    """

    cphi = math.cos(phi)
    sphi = math.sin(phi)
    cth  = math.cos(theta)
    sth  = math.sin(theta)
    cpsi = math.cos(psi)
    spsi = math.sin(psi)

    R = np.array([
        [ cpsi*cth, -spsi*cphi+cpsi*sth*sphi,  spsi*sphi+cpsi*cphi*sth ],
        [ spsi*cth,  cpsi*cphi+sphi*sth*spsi, -cpsi*sphi+sth*spsi*cphi ],
        [ -sth,      cth*sphi,                 cth*cphi ] ])

    return R

###############################################################################

def normalize(v:Sequence[float])->NPFltArr:
    """
    Scale vector to unit length.

    Parameters
    ----------
    v : array_like, shape (3,)
        Input vector.

    Returns
    -------
    u : ndarray, shape (3,)
        Unit vector along v. A zero length vector is returned unchanged.
    """

    v = np.asarray(v, dtype=float)
    norm = np.linalg.norm(v)
    if (norm == 0.0):
        log.debug('Normalizing zero length vector')
        return v
    return v / norm

###############################################################################

class Pose:
    """
    Rigid transform from a child frame to a parent frame.

    A point p expressed in the child frame maps to pos + R @ p in the parent
    frame. Poses compose left to right like frame chains: for a link pose in
    the world and a joint pose in the link, ``linkPose * jointPose`` is the
    joint pose in the world.


    Parameters
    ----------
    pos : array_like, shape (3,), optional
        Origin of the child frame in the parent frame (m). Default zero.
    R : array_like, shape (3, 3), optional
        Rotation from child to parent frame. Default identity.
    """

    def __init__(self,
                 pos:Optional[Sequence[float]]=None,
                 R:Optional[NPFltArr]=None,
                 )->None:
        self.pos = (np.zeros(3) if (pos is None)
                    else np.asarray(pos, dtype=float))
        self.R = np.eye(3) if (R is None) else np.asarray(R, dtype=float)

    @classmethod
    def fromEuler(cls,
                  pos:Sequence[float],
                  phi:float=0.0,
                  theta:float=0.0,
                  psi:float=0.0,
                  )->Pose:
        """Build pose from position and zyx Euler angles in radians."""
        return cls(pos, Rzyx(phi, theta, psi))

    def __mul__(self, other:Pose)->Pose:
        return Pose(self.pos + self.R @ other.pos, self.R @ other.R)

    def rotateVector(self, v:Sequence[float])->NPFltArr:
        """Rotate a child frame vector into the parent frame (no offset)."""
        return self.R @ np.asarray(v, dtype=float)

    def __repr__(self)->str:
        return f"Pose(pos={self.pos.tolist()}, R={self.R.tolist()})"
