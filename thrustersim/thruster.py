"""
Thruster controller: configuration, command wiring and per-step execution.

Ties the actuator model, command state, control loop and battery gate to a
physics host and a transport node. The host calls configure() once, then
preUpdate() before and postUpdate() after every physics step.


Classes
-------
ThrusterController
    Single propeller thruster attached to one joint of a model.


Functions
---------
thrusterTopics(cfg)
    Command and feedback topic names for a configuration.


Notes
-----
**Step sequence (preUpdate):**

1. Skip if inert, paused, or disabled by the battery gate.
2. Compute the world spin axis from the link pose and the fixed joint pose.
3. Re-derive the commanded rate from the commanded thrust under the command
   lock.
4. Run the control loop (PID torque or joint velocity setpoint).
5. Publish the feedback: propeller rate in force mode, thrust in angular
   velocity mode.
6. Apply thrust and torque along the spin axis to the link.
7. Sample the link speed as the advance velocity for the next coefficient
   update.

**Gate sequence (postUpdate):**

The battery gate is evaluated after the step and governs the next one.

**Inert instances:**

A thruster whose configuration fails (missing joint name, unknown joint or
link, unusable topic) logs the problem and stays inert: it never applies a
force and never publishes.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Hashable, Mapping, Any, Optional, Tuple
import numpy as np
from thrustersim.actuator import ActuatorModel
from thrustersim.battery import EnablementGate
from thrustersim.command import CommandState
from thrustersim.config import (ConfigError, OperationMode, ThrusterConfig,
                                loadConfig)
from thrustersim.control import (ControlLoop, ControlOutput, spinAxisWorld,
                                 wrench)
from thrustersim.host import Host, UpdateInfo
from thrustersim.transport import Node, Publisher, asValidTopic
from thrustersim import logger

#-----------------------------------------------------------------------------#

# Global Variables
log = logger.addLog('thr')

###############################################################################

def thrusterTopics(cfg:ThrusterConfig)->Tuple[str,str]:
    """
    Build command and feedback topic names.


    Parameters
    ----------
    cfg : ThrusterConfig
        Thruster configuration (namespace, topic, jointName, opmode).


    Returns
    -------
    cmdTopic : str
        Topic carrying commands. '' if unusable.
    feedbackTopic : str
        Topic carrying the complementary feedback quantity.


    Notes
    -----
    ============  ================================  ===========================
    Mode          Command                           Feedback
    ============  ================================  ===========================
    custom topic  /<ns>/<topic>                     /<ns>/<topic>/ang_vel|force
    ForceCmd      /model/<ns>/joint/<j>/cmd_thrust  /model/<ns>/joint/<j>/ang_vel
    AngVelCmd     /model/<ns>/joint/<j>/cmd_vel     /model/<ns>/joint/<j>/force
    ============  ================================  ===========================
    """

    forceMode = (cfg.opmode == OperationMode.ForceCmd)
    feedback = 'ang_vel' if forceMode else 'force'
    topic = asValidTopic(cfg.topic) if cfg.topic else ''

    if (topic):
        base = f"{cfg.namespace}/{topic}"
        return asValidTopic(base), asValidTopic(f"{base}/{feedback}")

    base = f"/model/{cfg.namespace}/joint/{cfg.jointName}"
    command = 'cmd_thrust' if forceMode else 'cmd_vel'
    return (asValidTopic(f"{base}/{command}"),
            asValidTopic(f"{base}/{feedback}"))

###############################################################################

class ThrusterController:
    """
    Propeller thruster attached to a model joint.


    Parameters
    ----------
    host : Host
        Physics host providing poses, velocities and wrench application.
    node : Node
        Transport node for the command subscription and feedback publisher.


    Attributes
    ----------
    cfg : ThrusterConfig or None
        Configuration, None until configure() succeeds.
    model : ActuatorModel
        Propeller conversion model.
    commands : CommandState
        Latest command, written by the transport.
    loop : ControlLoop
        Control law.
    gate : EnablementGate
        Battery gate.
    cmdTopic, feedbackTopic : str
        Wired topic names.
    lastOutput : ControlOutput or None
        Result of the last executed step.
    """

    def __init__(self, host:Host, node:Node)->None:
        self.host = host
        self.node = node
        self.cfg: Optional[ThrusterConfig] = None
        self.model: Optional[ActuatorModel] = None
        self.commands: Optional[CommandState] = None
        self.loop: Optional[ControlLoop] = None
        self.gate: Optional[EnablementGate] = None
        self.pub: Optional[Publisher] = None
        self.modelEntity: Optional[Hashable] = None
        self.jointEntity: Optional[Hashable] = None
        self.linkEntity: Optional[Hashable] = None
        self.cmdTopic = ''
        self.feedbackTopic = ''
        self.lastOutput: Optional[ControlOutput] = None

    ## Properties ============================================================#
    @property
    def configured(self)->bool:
        """True once configure() succeeded. False means inert."""
        return self.cfg is not None

    @property
    def enabled(self)->bool:
        """Battery gate state for the next step."""
        return self.gate is not None and self.gate.enabled

    @property
    def thrustCoefficient(self)->Optional[float]:
        """Current thrust coefficient."""
        return None if self.model is None else self.model.Kt

    ## Methods ===============================================================#
    def configure(self, entity:Hashable, params:Mapping[str,Any])->bool:
        """
        Read the configuration and wire the thruster.


        Parameters
        ----------
        entity : hashable
            Model owning the thruster.
        params : mapping
            Thruster parameters, see config.loadConfig().


        Returns
        -------
        ok : bool
            False if the thruster stays inert. The reason is logged.
        """

        modelName = self.host.modelName(entity)
        try:
            cfg = loadConfig(params, modelName)
        except ConfigError as e:
            log.error('%s', e)
            return False

        joint = self.host.jointByName(entity, cfg.jointName)
        if (joint is None):
            log.error('Failed to find joint [%s] in model [%s]. '
                      'Plugin not initialized.', cfg.jointName, modelName)
            return False

        childName = self.host.jointChildLink(joint)
        link = self.host.linkByName(entity, childName)
        if (link is None):
            log.error('Failed to find child link [%s] of joint [%s]. '
                      'Plugin not initialized.', childName, cfg.jointName)
            return False

        cfg = replace(cfg,
                      jointAxis=np.asarray(self.host.jointAxis(joint),
                                           dtype=float),
                      jointPose=self.host.jointPose(joint))

        cmdTopic, feedbackTopic = thrusterTopics(cfg)
        if (cfg.opmode == OperationMode.AngVelCmd):
            log.debug('Using angular velocity mode')

        model = ActuatorModel.fromConfig(cfg)
        commands = CommandState(model, cfg.cmdMin, cfg.cmdMax)
        handler = (commands.setThrust if (cfg.opmode == OperationMode.ForceCmd)
                   else commands.setAngVel)
        if ((not cmdTopic) or (not self.node.subscribe(cmdTopic, handler))):
            log.error('Invalid command topic for joint [%s]. '
                      'Plugin not initialized.', cfg.jointName)
            return False
        pub = self.node.advertise(feedbackTopic)
        if (pub is None):
            log.error('Invalid feedback topic [%s]. Plugin not initialized.',
                      feedbackTopic)
            return False
        log.info('Thruster listening to commands on [%s]', cmdTopic)

        self.loop = ControlLoop(model,
                                velocityControl=cfg.velocityControl,
                                pGain=cfg.pGain,
                                iGain=cfg.iGain,
                                dGain=cfg.dGain,
                                iMax=cfg.iMax,
                                iMin=cfg.iMin,
                                cmdMax=cfg.cmdMax,
                                cmdMin=cfg.cmdMin)
        self.model = model
        self.commands = commands
        self.gate = EnablementGate(entity)
        self.pub = pub
        self.modelEntity = entity
        self.jointEntity = joint
        self.linkEntity = link
        self.cmdTopic = cmdTopic
        self.feedbackTopic = feedbackTopic
        self.cfg = cfg
        return True

    #--------------------------------------------------------------------------
    def preUpdate(self, info:UpdateInfo)->None:
        """
        Run one control step before the physics update.

        Parameters
        ----------
        info : UpdateInfo
            Step timing. Nothing happens while paused, inert or disabled.
        """

        if ((not self.configured) or info.paused or (not self.gate.enabled)):
            return

        cfg = self.cfg
        host = self.host
        link = self.linkEntity

        axis = spinAxisWorld(host.worldPose(link),
                             cfg.jointPose,
                             cfg.jointAxis)

        thrust, angVel = self.commands.refresh()

        currentAngular = 0.0
        if (not cfg.velocityControl):
            currentAngular = float(np.dot(host.worldAngularVelocity(link),
                                          axis))

        out = self.loop.step(info.dt, currentAngular, thrust, angVel)

        if (out.velocitySetpoint is not None):
            host.setJointVelocityCmd(self.jointEntity, out.velocitySetpoint)

        if (cfg.opmode == OperationMode.ForceCmd):
            self.pub.publish(out.angVelFeedback)
        else:
            self.pub.publish(out.thrustFeedback)

        force, torque = wrench(axis, thrust, out.torque)
        host.addWorldWrench(link, force, torque)

        speed = float(np.linalg.norm(host.worldLinearVelocity(link)))
        self.commands.setAdvanceVel(speed)
        self.lastOutput = out

    #--------------------------------------------------------------------------
    def postUpdate(self, info:UpdateInfo)->None:
        """Evaluate the battery gate for the next step."""
        if (not self.configured):
            return
        self.gate.evaluate(self.host.batteryReadings())

    def __repr__(self)->str:
        if (not self.configured):
            return "ThrusterController(inert)"
        return (f"ThrusterController({self.cfg.namespace}/"
                f"{self.cfg.jointName}, {self.cfg.opmode.name})")
