import casadi as ca
import numpy as np
from casadi.tools import entry

from solarsystemopt.systemmodels.subsystem import Subsystem


class HeatPump(Subsystem):
    """ Heat pump covering the space heat demand, Qdot_hp = COP * P_hp >= Qdot_load every hour."""

    name = 'heat_pump'
    mandatory_families = ['heat_pump_coverage']

    def entries(self):
        return [entry('C_hp'), entry('P_hp', shape=self.N)]

    def setBounds(self, lbw, ubw):
        ubw['C_hp'] = self.config.heat_pump_capacity_max_w
        ubw['P_hp'] = ca.DM(np.full(self.N, self.config.heat_pump_capacity_max_w))

    def addConstraints(self, w, constraints):
        constraints.addInequality('heat_pump_coverage', ca.DM(self.data.heat_demand) - self.heatOutput(w))
        constraints.addInequality('heat_pump_capacity', w['P_hp'] - w['C_hp'])

    def heatOutput(self, w):
        return ca.DM(self.data.cop) * w['P_hp']

    def demand(self, w):
        return w['P_hp']

    def investmentCost(self, w):
        return self.config.inv_heat_pump * w['C_hp'] / 1e3

    def outputs(self, w):
        return {
            'C_hp': {'value': w['C_hp'], 'type': 'single', 'unit': 'W', 'description': 'Heat pump capacity (electric)'},
            'P_hp': {'value': w['P_hp'], 'type': 'profile', 'unit': 'Wh',
                     'description': 'Heat pump electricity consumption'},
            'Qdot_hp': {'value': self.heatOutput(w), 'type': 'profile', 'unit': 'Wh',
                        'description': 'Heat pump heat output'},
        }
