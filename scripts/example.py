"""
example.py - Simple Example for thrusterSim

This is a basic example script demonstrating the workflow for setting up and
running a single thruster on the test bench. A thrust step is commanded at one
second, the propeller PID spins the propeller up and the body accelerates
until drag balances the thrust. Halfway through, the battery runs flat and the
thruster shuts down.
"""

import matplotlib.pyplot as plt
import thrustersim as ts

#------------------------------------------------------------------------------#
#    Bench                                                                     #
#------------------------------------------------------------------------------#

host = ts.BenchHost(                           # one body, one propeller joint
    mass=10.0,                                 # body mass (kg)
    linearDrag=5.0,                            # quadratic surge drag (kg/m)
)
host.addBattery(                               # battery owned by the model
    'main',                                    # battery name
    soc=1.0,                                   # full charge
    drain=0.1,                                 # drains in 10 s
)

#------------------------------------------------------------------------------#
#    Thruster                                                                  #
#------------------------------------------------------------------------------#

params = {
    'joint_name': host.jointName,              # propeller joint to drive
    'propeller_diameter': 0.02,                # m
    'fluid_density': 1000.0,                   # kg/m^3
    'alpha_1': 1.0,                            # open water constants, the
    'alpha_2': 0.2,                            #   Kt follows the body speed
    'max_thrust_cmd': 50.0,                    # N
    'min_thrust_cmd': -50.0,                   # N
    'p_gain': 0.1,                             # propeller rate gain
}

def thrustStep(t):
    return 2.0 if t >= 1.0 else 0.0            # 2 N after one second

#------------------------------------------------------------------------------#
#    Run Simulation                                                            #
#------------------------------------------------------------------------------#

sim = ts.Simulator(
    name='Example',
    sampleTime=0.01,                           # 100 Hz
    N=2000,                                    # 20 s
    host=host,
    params=params,
    command=thrustStep,
    logging='nofile',                          # console output only
)
sim.run()                                      # start the simulation
sim.close()

#------------------------------------------------------------------------------#
#    Plots                                                                     #
#------------------------------------------------------------------------------#

ts.plotTimeSeries.plotThrusterStates(sim.simTime, sim.simData, sim.name)
ts.plotTimeSeries.plotCommands(sim.simTime, sim.simData, sim.name)
plt.show()
