"""
Single-thruster test bench: a minimal physics host and a simulation driver.

Provides BenchHost, a Host implementation for one rigid body driven by one
propeller joint, and the Simulator class that steps a ThrusterController
against it while feeding commands over the transport and recording time
series for analysis and plotting.


Classes
-------
BenchHost
    Rigid body with surge drag, propeller spin dynamics and batteries.
Simulator
    Stepping loop, command schedule, data collection and logging setup.


Notes
-----
**Bench dynamics:**

The body attitude is held fixed; only translation and the spin rate about the
propeller axis evolve. Per step, with thrust force F and torque tau from the
controller:

    m * dv/dt = F - c_v * |v| * v
    I_p * dw/dt = tau . a - c_w * w

where a is the world spin axis. Under joint velocity control the spin rate is
set directly from the joint command. Explicit Euler integration.

**simData columns:**

    0 thrust command (N)          4 torque (N m)
    1 angular velocity cmd (rad/s) 5 body speed (m/s)
    2 measured spin rate (rad/s)  6 thrust coefficient
    3 published feedback          7 enabled flag (1/0)


References
----------
[1] Fossen, T.I. Python Vehicle Simulator. GitHub repository.
https://github.com/cybergalactic/PythonVehicleSimulator
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Hashable, List, Mapping, Optional
from numpy.typing import NDArray
import datetime
import time
import numpy as np
from thrustersim.battery import BatteryReading
from thrustersim.host import Host, UpdateInfo
from thrustersim.thruster import ThrusterController
from thrustersim.transport import Node
from thrustersim import gnc
from thrustersim import logger

#-----------------------------------------------------------------------------#

# Type Aliases
NPFltArr = NDArray[np.float64]
CommandFn = Callable[[float], Optional[float]]

# Global Variables
log = logger.addLog('sim')

# simData column labels
COLUMNS = ['thrust cmd (N)',
           'ang vel cmd (rad/s)',
           'spin rate (rad/s)',
           'feedback',
           'torque (N m)',
           'speed (m/s)',
           'thrust coefficient',
           'enabled']

###############################################################################

class BenchHost(Host):
    """
    Physics host with one body, one propeller joint and optional batteries.


    Parameters
    ----------
    modelName : str, default='bench'
        Model name, also the model identifier.
    jointName : str, default='propeller_joint'
        Propeller joint name.
    linkName : str, default='propeller'
        Driven link name (child of the joint).
    mass : float, default=10.0
        Body mass (kg).
    linearDrag : float, default=5.0
        Quadratic surge drag coefficient c_v (kg/m).
    spinInertia : float, default=1e-2
        Propeller inertia about the spin axis (kg m^2).
    spinDamping : float, default=1e-4
        Spin damping c_w (N m s/rad).
    jointAxis : array_like, shape (3,), default [1, 0, 0]
        Spin axis in the joint frame.
    jointPose : gnc.Pose, optional
        Joint pose in the link frame. Default identity.
    attitude : tuple of float, default (0, 0, 0)
        Fixed body attitude (phi, theta, psi) in radians.


    Attributes
    ----------
    pos, vel : ndarray, shape (3,)
        Body position (m) and velocity (m/s) in the world.
    spinRate : float
        Propeller rate about the spin axis (rad/s).
    jointVelocityCmd : float or None
        Last joint velocity command, None until one is written.
    force, torque : ndarray, shape (3,)
        Wrench accumulated for the current step.
    """

    def __init__(self,
                 modelName:str = 'bench',
                 jointName:str = 'propeller_joint',
                 linkName:str = 'propeller',
                 mass:float = 10.0,
                 linearDrag:float = 5.0,
                 spinInertia:float = 1e-2,
                 spinDamping:float = 1e-4,
                 jointAxis:Optional[List[float]] = None,
                 jointPose:Optional[gnc.Pose] = None,
                 attitude:tuple = (0.0, 0.0, 0.0),
                 )->None:
        self.name = modelName
        self.jointName = jointName
        self.linkName = linkName
        self.mass = mass
        self.linearDrag = linearDrag
        self.spinInertia = spinInertia
        self.spinDamping = spinDamping
        self._jointAxis = np.asarray(jointAxis if jointAxis is not None
                                     else [1.0, 0.0, 0.0], dtype=float)
        self._jointPose = jointPose if jointPose is not None else gnc.Pose()
        self._R = gnc.Rzyx(*attitude)

        self.pos = np.zeros(3)
        self.vel = np.zeros(3)
        self.spinRate = 0.0
        self.jointVelocityCmd = None
        self.force = np.zeros(3)
        self.torque = np.zeros(3)
        self.batteries: Dict[str,List[float]] = {}

    ## Batteries =============================================================#
    def addBattery(self, name:str, soc:float = 1.0, drain:float = 0.0)->None:
        """
        Attach a battery to the model.

        Parameters
        ----------
        name : str
            Battery name.
        soc : float
            Initial state of charge.
        drain : float
            Charge lost per second of simulated time.
        """
        self.batteries[name] = [soc, drain]

    def setCharge(self, name:str, soc:float)->None:
        """Overwrite the state of charge of a battery."""
        self.batteries[name][0] = soc

    ## Host interface ========================================================#
    def modelName(self, model:Hashable)->str:
        return self.name

    def jointByName(self, model:Hashable, name:str)->Optional[Hashable]:
        if ((model == self.name) and (name == self.jointName)):
            return (self.name, name)
        return None

    def linkByName(self, model:Hashable, name:str)->Optional[Hashable]:
        if ((model == self.name) and (name == self.linkName)):
            return (self.name, name)
        return None

    def jointAxis(self, joint:Hashable)->NPFltArr:
        return self._jointAxis.copy()

    def jointPose(self, joint:Hashable)->gnc.Pose:
        return self._jointPose

    def jointChildLink(self, joint:Hashable)->str:
        return self.linkName

    def worldPose(self, link:Hashable)->gnc.Pose:
        return gnc.Pose(self.pos.copy(), self._R)

    def spinAxis(self)->NPFltArr:
        """World spin axis of the propeller joint."""
        pose = gnc.Pose(self.pos, self._R) * self._jointPose
        return gnc.normalize(pose.rotateVector(self._jointAxis))

    def worldAngularVelocity(self, link:Hashable)->NPFltArr:
        return self.spinRate * self.spinAxis()

    def worldLinearVelocity(self, link:Hashable)->NPFltArr:
        return self.vel.copy()

    def addWorldWrench(self,
                       link:Hashable,
                       force:NPFltArr,
                       torque:NPFltArr,
                       )->None:
        self.force = self.force + np.asarray(force, dtype=float)
        self.torque = self.torque + np.asarray(torque, dtype=float)

    def setJointVelocityCmd(self, joint:Hashable, velocity:float)->None:
        self.jointVelocityCmd = float(velocity)

    def batteryReadings(self)->List[BatteryReading]:
        return [BatteryReading(entity=(self.name, b), parent=self.name,
                               soc=soc)
                for b, (soc, _) in self.batteries.items()]

    ## Physics ===============================================================#
    def step(self, dt:float)->None:
        """
        Integrate the body one step and clear the applied wrench.

        Parameters
        ----------
        dt : float
            Step duration in seconds.
        """

        acc = (self.force - self.linearDrag*np.linalg.norm(self.vel)*self.vel
               ) / self.mass
        self.vel = self.vel + acc * dt
        self.pos = self.pos + self.vel * dt

        if (self.jointVelocityCmd is not None):
            self.spinRate = self.jointVelocityCmd
        else:
            tau = float(np.dot(self.torque, self.spinAxis()))
            self.spinRate += (tau - self.spinDamping*self.spinRate) \
                             / self.spinInertia * dt

        for battery in self.batteries.values():
            battery[0] = max(0.0, battery[0] - battery[1]*dt)

        self.force = np.zeros(3)
        self.torque = np.zeros(3)

###############################################################################

class Simulator:
    """
    Simulation driver for one thruster on the bench.


    Parameters
    ----------
    name : str, default='Thruster'
        Simulation title.
    sampleTime : float, default=0.01
        Iteration time step in seconds.
    N : int, default=1000
        Number of simulation iterations.
    host : BenchHost, optional
        Bench host. A default BenchHost is built if None.
    params : mapping, optional
        Thruster parameters, see config.loadConfig(). Defaults to
        ``{'joint_name': host.jointName}``.
    command : callable, optional
        Command schedule f(t) returning the value to publish on the command
        topic at time t, or None to publish nothing.
    threaded : bool, default=False
        Deliver commands on a background transport thread.
    logging : str, default='none'
        Main logger configuration: 'all', 'none', 'noout', 'nofile'.
    logFile : str, default='thrSim.log'
        Log file name when file logging is on.


    Attributes
    ----------
    simTime : ndarray, shape (N+1,)
        Time of every iteration.
    simData : ndarray, shape (N+1, 8) or None
        Recorded time series, see module notes.
    thruster : ThrusterController
        Controller under test.
    node : Node
        Transport node shared by commander and thruster.
    feedback : list of float
        Values received on the feedback topic.
    """

    def __init__(self,
                 name:str = 'Thruster',
                 sampleTime:float = 0.01,
                 N:int = 1000,
                 host:Optional[BenchHost] = None,
                 params:Optional[Mapping[str,Any]] = None,
                 command:Optional[CommandFn] = None,
                 threaded:bool = False,
                 logging:str = 'none',
                 logFile:str = logger.MAIN_LOG+'.log',
                 )->None:
        self.name = name
        self.logFile = logFile
        self.log = None
        self.logging = logging

        self.host = host if host is not None else BenchHost()
        self.params = (dict(params) if params is not None
                       else {'joint_name': self.host.jointName})
        self.command = command
        self.sampleTime = sampleTime
        self.N = N
        self.simData = None
        self.paused = False

        self.node = Node(threaded=threaded)
        self.thruster = ThrusterController(self.host, self.node)
        self.thruster.configure(self.host.name, self.params)
        self.feedback: List[float] = []
        self._cmdPub = None
        if (self.thruster.configured):
            self.node.subscribe(self.thruster.feedbackTopic,
                                self.feedback.append)
            self._cmdPub = self.node.advertise(self.thruster.cmdTopic)

    ## Properties ============================================================#
    @property
    def sampleTime(self)->float:
        """Get iteration time step in seconds."""
        return self._sampleTime

    @sampleTime.setter
    def sampleTime(self, h:float)->None:
        """
        Set iteration time step.

        Parameters
        ----------
        h : float
            Time step in seconds. A non-positive value is rejected with a
            warning and the previous step (0.01 s at initialization) is kept.
        """

        if (h <= 0):
            old = self.__dict__.get('_sampleTime', 0.01)
            log.warning('Sample time must be positive, got %s. Keeping %s.',
                        h, old)
            h = old
        self._sampleTime = float(h)
        if ('_N' in self.__dict__):
            self.simTime = np.arange(self._N + 1) * self._sampleTime

    #--------------------------------------------------------------------------
    @property
    def N(self)->int:
        """Get number of simulation iterations."""
        return self._N

    @N.setter
    def N(self, n:int)->None:
        """Set number of iterations and rebuild the time vector."""
        if (n < 0):
            log.warning('Number of iterations cannot be negative. Using 0.')
            n = 0
        self._N = int(n)
        self.simTime = np.arange(self._N + 1) * self.sampleTime

    #--------------------------------------------------------------------------
    @property
    def runTime(self)->float:
        """Get total simulated time in seconds."""
        return float(self.simTime[-1])

    @runTime.setter
    def runTime(self, t:float)->None:
        """Set total simulated time, rounded to whole iterations."""
        self.N = round(t / self.sampleTime)

    #--------------------------------------------------------------------------
    @property
    def logging(self)->str:
        """Get main logger configuration."""
        return self._logging

    @logging.setter
    def logging(self, logging:str)->None:
        """
        Set main logger configuration.

        Parameters
        ----------
        logging : str
            'all', 'none', 'noout' (file only), 'nofile' (console only).
        """

        def setNoneLog()->None:
            self.log = logger.noneLog(logger.MAIN_LOG)

        def setNoConsoleLog()->None:
            if (self.log is not None):
                logger.removeLog(logger.MAIN_LOG)
            self.log = logger.setupMain(fileName=self.logFile, outFormat=None)

        def setNoFileLog()->None:
            if (self.log is not None):
                logger.removeLog(logger.MAIN_LOG)
            self.log = logger.setupMain(fileName=None)

        def setDefaultLog()->None:
            if (self.log is not None):
                logger.removeLog(logger.MAIN_LOG)
            self.log = logger.setupMain(fileName=self.logFile)

        logSettings = {
            'NONE': setNoneLog,
            'OFF': setNoneLog,
            'NOOUT': setNoConsoleLog,
            'ONLYFILE': setNoConsoleLog,
            'NOFILE': setNoFileLog,
            'ONLYCONSOLE': setNoFileLog,
        }
        logSettings.get(logging.upper(), setDefaultLog)()
        self._logging = logging

    def __str__(self)->str:
        line = '*' * 64
        cfg = self.thruster.cfg
        return "\n".join([
            line,
            f"{self.__class__.__name__}: {self.name}",
            line,
            f"Sampling frequency: {round(1 / self.sampleTime)} Hz",
            f"Simulation time: {self.runTime:.2f} seconds",
            f"Command topic: {self.thruster.cmdTopic or 'None'}",
            f"Feedback topic: {self.thruster.feedbackTopic or 'None'}",
            f"{cfg if cfg is not None else 'Thruster: inert'}",
            line,
        ])

    ## Methods ===============================================================#
    def run(self)->NPFltArr:
        """
        Execute the simulation and log a run summary.

        Returns
        -------
        simData : ndarray, shape (N+1, 8)
            Recorded time series.
        """

        log.info('\n%s', self)
        start = time.time()
        self.simData = self.simulate()
        real = time.time() - start
        line = '*' * 64
        log.info(line)
        log.info('Run Time: (Real) %s, (Simulated) %s',
                 datetime.timedelta(seconds=round(real)),
                 datetime.timedelta(seconds=round(self.runTime)))
        log.info('Final speed: %.3f m/s, spin rate: %.3f rad/s',
                 np.linalg.norm(self.host.vel), self.host.spinRate)
        log.info(line)
        return self.simData

    #--------------------------------------------------------------------------
    def simulate(self)->NPFltArr:
        """
        Iteration loop: command, preUpdate, physics, postUpdate, record.

        Returns
        -------
        simData : ndarray, shape (N+1, 8)
            Recorded time series.
        """

        simData = np.zeros([self.N+1, len(COLUMNS)], float)
        thr = self.thruster
        h = self.sampleTime

        for i in range(0, self.N+1):
            t = self.simTime[i]
            logger.simTime = f'{t:.2f}'
            info = UpdateInfo(dt=h, simTime=t, iterations=i,
                              paused=self.paused)

            if ((self.command is not None) and (self._cmdPub is not None)):
                value = self.command(t)
                if (value is not None):
                    self._cmdPub.publish(value)
                    self.node.flush()

            thr.preUpdate(info)
            torque = float(np.dot(self.host.torque, self.host.spinAxis()))
            self.host.step(h)
            thr.postUpdate(info)
            self.node.flush()

            if (thr.configured):
                thrust, angVel = thr.commands.snapshot()
                simData[i,:] = [
                    thrust,
                    angVel,
                    self.host.spinRate,
                    self.feedback[-1] if self.feedback else 0.0,
                    torque,
                    np.linalg.norm(self.host.vel),
                    thr.thrustCoefficient,
                    1.0 if thr.enabled else 0.0,
                ]

        return simData

    #--------------------------------------------------------------------------
    def close(self)->None:
        """Stop the transport delivery thread."""
        self.node.close()
