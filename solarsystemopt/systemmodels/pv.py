import casadi as ca
from casadi.tools import entry

from solarsystemopt.systemmodels.subsystem import Subsystem, fixedOrBounded


class PVSystem(Subsystem):
    """ Photovoltaic generation.
    Produces C_pv * irradiance each hour. If the feed-in is capped, the surplus that can be neither
    used, stored nor exported is curtailed (P_curt), otherwise all of the production enters the bus.
    """

    name = 'pv'

    def entries(self):
        entries = [entry('C_pv')]
        if self.config.curtailment_enabled:
            entries.append(entry('P_curt', shape=self.N))
        return entries

    def setBounds(self, lbw, ubw):
        fixedOrBounded(lbw, ubw, 'C_pv', self.data.pv_cap_w_max, self.config.pv_fixed)
        if self.config.curtailment_enabled:
            ubw['P_curt'] = ca.DM(self.data.pv_cap_w_max * self.data.irradiance)

    def addConstraints(self, w, constraints):
        if self.config.curtailment_enabled:
            # can only curtail what is produced
            constraints.addInequality('pv_curtailment', w['P_curt'] - self.potential(w))

    def potential(self, w):
        """ Hourly production before curtailment [Wh]."""
        return w['C_pv'] * ca.DM(self.data.irradiance)

    def production(self, w):
        if self.config.curtailment_enabled:
            return self.potential(w) - w['P_curt']
        return self.potential(w)

    def supply(self, w):
        return self.production(w)

    def investmentCost(self, w):
        return self.config.inv_pv * w['C_pv'] / 1e3

    def outputs(self, w):
        outputs = {
            'C_pv': {'value': w['C_pv'], 'type': 'single', 'unit': 'W', 'description': 'PV peak capacity'},
            'P_pv': {'value': self.production(w), 'type': 'profile', 'unit': 'Wh',
                     'description': 'PV production fed to the bus'},
            'P_pv_potential': {'value': self.potential(w), 'type': 'profile', 'unit': 'Wh',
                               'description': 'PV production before curtailment'},
        }
        if self.config.curtailment_enabled:
            outputs['P_curt'] = {'value': w['P_curt'], 'type': 'profile', 'unit': 'Wh',
                                 'description': 'Curtailed PV production'}
        return outputs
