"""
Propeller actuator model: conversion between thrust and angular velocity.

Implements the open-water propeller relation used by the thruster controller.
Thrust is proportional to the square of the propeller rotation rate,

    T = rho * Kt * D^4 * |n| * n

where rho is the fluid density, D the propeller diameter, n the propeller
angular velocity and Kt the thrust coefficient. The thrust coefficient is
either fixed by configuration or tracked from the advance velocity of the
vehicle through the linear approximation of the open-water diagram,

    Kt = alpha1 + alpha2 * J,    J = ((1 - w) * Va) / (n * D)

with w the wake fraction and Va the advance velocity.


Classes
-------
ActuatorModel
    Holds the propeller constants and the dynamic thrust coefficient.


Functions
---------
thrustCoefficient(alpha1, alpha2, wakeFraction, advanceVel, angVel, diameter)
    Linear open-water thrust coefficient.
angVelFromThrust(thrust, density, Kt, diameter)
    Signed propeller angular velocity that produces a thrust.
thrustFromAngVel(angVel, density, Kt, diameter)
    Thrust produced at a propeller angular velocity.


Notes
-----
The coefficient is only recomputed on the thrust -> angular velocity path.
Converting angular velocity to thrust never touches the coefficient. Both
directions are used by the command handlers and the control step, so moving
the update, or adding it to the other direction, changes the simulated
behavior.


References
----------
[1] Fossen, T.I. (1994). Guidance and Control of Ocean Vehicles. Wiley. p.246.

[2] Fossen, T.I. (2021). Handbook of Marine Craft Hydrodynamics and Motion
Control. 2nd Edition, Wiley. https://www.fossen.biz/wiley
"""

import math
import sys
from thrustersim import gnc
from thrustersim import logger

#-----------------------------------------------------------------------------#

# Global Variables
log = logger.addLog('act')

# Smallest propeller rate that allows a coefficient update
EPSILON = sys.float_info.epsilon

###############################################################################

def thrustCoefficient(alpha1:float,
                      alpha2:float,
                      wakeFraction:float,
                      advanceVel:float,
                      angVel:float,
                      diameter:float,
                      )->float:
    """
    Compute the thrust coefficient from the open-water diagram approximation.


    Parameters
    ----------
    alpha1 : float
        Open-water diagram constant (intercept).
    alpha2 : float
        Open-water diagram constant (slope in advance ratio).
    wakeFraction : float
        Relative speed reduction of the water at the propeller.
    advanceVel : float
        Linear speed of the vehicle in m/s.
    angVel : float
        Propeller angular velocity in rad/s. Must not be zero.
    diameter : float
        Propeller diameter in m.


    Returns
    -------
    Kt : float
        Thrust coefficient.
    """

    return alpha1 + alpha2 * (((1 - wakeFraction) * advanceVel)
                              / (angVel * diameter))

###############################################################################

def angVelFromThrust(thrust:float,
                     density:float,
                     Kt:float,
                     diameter:float,
                     )->float:
    """
    Compute the signed propeller angular velocity producing a given thrust.


    Parameters
    ----------
    thrust : float
        Thrust in N.
    density : float
        Fluid density in kg/m^3.
    Kt : float
        Thrust coefficient.
    diameter : float
        Propeller diameter in m.


    Returns
    -------
    angVel : float
        Propeller angular velocity in rad/s. Positive when thrust * Kt > 0,
        negative otherwise. Zero thrust gives a zero magnitude.
    """

    n = math.sqrt(abs(thrust / (density * Kt * diameter**4)))
    return gnc.sgn(thrust * Kt) * n

###############################################################################

def thrustFromAngVel(angVel:float,
                     density:float,
                     Kt:float,
                     diameter:float,
                     )->float:
    """
    Compute the thrust produced at a given propeller angular velocity.


    Parameters
    ----------
    angVel : float
        Propeller angular velocity in rad/s.
    density : float
        Fluid density in kg/m^3.
    Kt : float
        Thrust coefficient.
    diameter : float
        Propeller diameter in m.


    Returns
    -------
    thrust : float
        Thrust in N, with the sign of Kt * angVel.
    """

    return Kt * diameter**4 * abs(angVel) * angVel * density

###############################################################################

class ActuatorModel:
    """
    Propeller model with a fixed or dynamically updated thrust coefficient.


    Parameters
    ----------
    fluidDensity : float
        Fluid density in kg/m^3. Validated positive by configuration.
    propellerDiameter : float
        Propeller diameter in m. Validated positive by configuration.
    thrustCoefficient : float
        Initial thrust coefficient.
    thrustCoefficientSet : bool
        True if the coefficient is fixed by configuration. A fixed coefficient
        is never recomputed.
    wakeFraction : float
        Wake fraction used in the coefficient update.
    alpha1, alpha2 : float
        Open-water diagram constants used in the coefficient update.


    Attributes
    ----------
    Kt : float
        Current thrust coefficient.
    advanceVel : float
        Latest linear speed of the vehicle in m/s. Written by the controller
        after each step.
    """

    def __init__(self,
                 fluidDensity:float = 1000.0,
                 propellerDiameter:float = 0.02,
                 thrustCoefficient:float = 1.0,
                 thrustCoefficientSet:bool = False,
                 wakeFraction:float = 0.2,
                 alpha1:float = 1.0,
                 alpha2:float = 0.0,
                 )->None:
        self.fluidDensity = fluidDensity
        self.propellerDiameter = propellerDiameter
        self.Kt = thrustCoefficient
        self.thrustCoefficientSet = thrustCoefficientSet
        self.wakeFraction = wakeFraction
        self.alpha1 = alpha1
        self.alpha2 = alpha2
        self.advanceVel = 0.0

    @classmethod
    def fromConfig(cls, cfg)->'ActuatorModel':
        """Build model from a ThrusterConfig."""
        return cls(fluidDensity=cfg.fluidDensity,
                   propellerDiameter=cfg.propellerDiameter,
                   thrustCoefficient=cfg.thrustCoefficient,
                   thrustCoefficientSet=cfg.thrustCoefficientSet,
                   wakeFraction=cfg.wakeFraction,
                   alpha1=cfg.alpha1,
                   alpha2=cfg.alpha2)

    #--------------------------------------------------------------------------
    def updateThrustCoefficient(self, angVel:float)->float:
        """
        Recompute the thrust coefficient at the current operating point.

        Parameters
        ----------
        angVel : float
            Current propeller angular velocity in rad/s. Must not be zero.

        Returns
        -------
        Kt : float
            The new thrust coefficient, also stored on the model. A zero or
            non-finite result is rejected with a warning and the previous
            coefficient is kept.
        """

        Kt = thrustCoefficient(self.alpha1,
                               self.alpha2,
                               self.wakeFraction,
                               self.advanceVel,
                               angVel,
                               self.propellerDiameter)
        if ((Kt == 0.0) or (not math.isfinite(Kt))):
            log.warning('Thrust coefficient evaluated to %s at %.4g rad/s, '
                        '%.4g m/s. Keeping %s.',
                        Kt, angVel, self.advanceVel, self.Kt)
            return self.Kt
        self.Kt = Kt
        return self.Kt

    #--------------------------------------------------------------------------
    def thrustToAngVel(self, thrust:float, angVel:float = 0.0)->float:
        """
        Convert thrust to propeller angular velocity.


        Parameters
        ----------
        thrust : float
            Thrust in N.
        angVel : float, default=0.0
            Current propeller angular velocity in rad/s, the operating point
            for the coefficient update.


        Returns
        -------
        angVel : float
            Propeller angular velocity in rad/s with the sign of thrust * Kt.


        Notes
        -----
        Side effect: when the coefficient is not fixed and
        ``|angVel| > EPSILON``, Kt is recomputed before converting. At rest
        the coefficient keeps its last value, otherwise the propeller could
        never start.
        """

        if ((not self.thrustCoefficientSet) and (abs(angVel) > EPSILON)):
            self.updateThrustCoefficient(angVel)

        return angVelFromThrust(thrust,
                                self.fluidDensity,
                                self.Kt,
                                self.propellerDiameter)

    #--------------------------------------------------------------------------
    def angVelToThrust(self, angVel:float)->float:
        """
        Convert propeller angular velocity to thrust.

        Parameters
        ----------
        angVel : float
            Propeller angular velocity in rad/s.

        Returns
        -------
        thrust : float
            Thrust in N. The coefficient is used as is, never recomputed.
        """

        return thrustFromAngVel(angVel,
                                self.fluidDensity,
                                self.Kt,
                                self.propellerDiameter)

    def __repr__(self)->str:
        return (f"ActuatorModel(Kt={self.Kt}, "
                f"fixed={self.thrustCoefficientSet}, "
                f"rho={self.fluidDensity}, D={self.propellerDiameter})")
