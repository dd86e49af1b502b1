"""
Visualization functions for thruster simulation data.

Provides time-series plots of the commanded and measured propeller state and
of the body response recorded by Simulator.simulate().


Functions
---------
plotThrusterStates(simTime, simData, title, figNo)
    Plot spin rate, torque, speed and thrust coefficient vs time.
plotCommands(simTime, simData, title, figNo)
    Plot thrust and angular velocity commands with the published feedback.


Utility Functions
-----------------
cm2inch(value)
    Convert centimeters to inches for figure sizing.


Notes
-----
Default plot parameters (figure size, DPI, legend size) are defined as
module-level globals and can be modified before calling plot functions.
"""

from numpy.typing import NDArray
import matplotlib.pyplot as plt
import numpy as np
from thrustersim import logger

#-----------------------------------------------------------------------------#

# Type Aliases
NPFltArr = NDArray[np.float64]

# Global Variables
log = logger.addLog('pltTS')

# Plot Parameters
legendSize = 10         # legend size
figSize1 = [25, 13]     # figure1 size in cm
figSize2 = [25, 13]     # figure2 size in cm
dpiValue = 150          # figure dpi value

###############################################################################

def cm2inch(value:float)->float:
    """
    Convert centimeters to inches for matplotlib figure sizing.


    Parameters
    ----------
    value : float
        Length in centimeters.


    Returns
    -------
    inches : float
        Length in inches.
    """

    return value / 2.54

###############################################################################

def plotThrusterStates(simTime:NPFltArr,
                       simData:NPFltArr,
                       title:str = 'Thruster',
                       figNo:int = 1,
                       )->plt.Figure:
    """
    Plot propeller and body states versus time.


    Parameters
    ----------
    simTime : ndarray, shape (N+1,)
        Time vector in seconds.
    simData : ndarray, shape (N+1, 8)
        Simulator data, see simulator module notes for the columns.
    title : str
        Figure title.
    figNo : int
        Matplotlib figure number.


    Returns
    -------
    fig : matplotlib.figure.Figure
        The figure, four subplots: spin rate (commanded and measured), torque,
        body speed, thrust coefficient.
    """

    t = simTime
    fig = plt.figure(figNo,
                     figsize=(cm2inch(figSize1[0]), cm2inch(figSize1[1])),
                     dpi=dpiValue)
    plt.suptitle(title)

    plt.subplot(2, 2, 1)
    plt.plot(t, simData[:, 1], t, simData[:, 2])
    plt.legend(['Propeller rate, command', 'Propeller rate, measured'],
               fontsize=legendSize)
    plt.ylabel('rad/s')
    plt.grid()

    plt.subplot(2, 2, 2)
    plt.plot(t, simData[:, 4])
    plt.legend(['Torque'], fontsize=legendSize)
    plt.ylabel('N m')
    plt.grid()

    plt.subplot(2, 2, 3)
    plt.plot(t, simData[:, 5])
    plt.legend(['Speed'], fontsize=legendSize)
    plt.xlabel('Time (s)', fontsize=12)
    plt.ylabel('m/s')
    plt.grid()

    plt.subplot(2, 2, 4)
    plt.plot(t, simData[:, 6])
    plt.legend(['Thrust coefficient'], fontsize=legendSize)
    plt.xlabel('Time (s)', fontsize=12)
    plt.grid()

    return fig

###############################################################################

def plotCommands(simTime:NPFltArr,
                 simData:NPFltArr,
                 title:str = 'Thruster',
                 figNo:int = 2,
                 )->plt.Figure:
    """
    Plot commands, published feedback and the battery gate versus time.


    Parameters
    ----------
    simTime : ndarray, shape (N+1,)
        Time vector in seconds.
    simData : ndarray, shape (N+1, 8)
        Simulator data.
    title : str
        Figure title.
    figNo : int
        Matplotlib figure number.


    Returns
    -------
    fig : matplotlib.figure.Figure
        The figure, three stacked subplots.
    """

    t = simTime
    fig = plt.figure(figNo,
                     figsize=(cm2inch(figSize2[0]), cm2inch(figSize2[1])),
                     dpi=dpiValue)
    plt.suptitle(title)

    plt.subplot(3, 1, 1)
    plt.plot(t, simData[:, 0])
    plt.legend(['Thrust, command (N)'], fontsize=legendSize)
    plt.grid()

    plt.subplot(3, 1, 2)
    plt.plot(t, simData[:, 3])
    plt.legend(['Feedback'], fontsize=legendSize)
    plt.grid()

    plt.subplot(3, 1, 3)
    plt.step(t, simData[:, 7], where='post')
    plt.legend(['Enabled'], fontsize=legendSize)
    plt.xlabel('Time (s)', fontsize=12)
    plt.grid()

    log.debug('Plotted %d samples', len(t))
    return fig
