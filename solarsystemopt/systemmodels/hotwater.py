import casadi as ca
from casadi.tools import entry

from solarsystemopt.systemmodels.subsystem import Subsystem, storageDynamics


class HotWaterStorage(Subsystem):
    """ Hot water tank that is charged from PV and discharged to cover the hot water demand.
    Without storage the hot water demand is an electric load on the bus, stored heat
    replaces (part of) that load. The charging is limited to the PV production of the hour.
    """

    name = 'hot_water'

    def entries(self):
        return [entry('C_hwat'),
                entry('E_hw', shape=self.N + 1),
                entry('P_hw_ch', shape=self.N),
                entry('P_hw_dis', shape=self.N)]

    def setBounds(self, lbw, ubw):
        hwat_value = self.config.hwat_value
        ubw['C_hwat'] = hwat_value
        ubw['E_hw'] = ca.DM.ones(self.N + 1) * hwat_value
        ubw['P_hw_ch'] = ca.DM(self.data.pv_cap_w_max * self.data.irradiance)
        ubw['P_hw_dis'] = ca.DM(self.data.hot_water_demand)

    def addConstraints(self, w, constraints):
        config = self.config
        E = w['E_hw']
        constraints.addEquality('hot_water_dynamics',
                                storageDynamics(E, w['P_hw_ch'], w['P_hw_dis'], config.storage_loss_hwat,
                                                config.eta_in_hwat, config.eta_out_hwat, self.N))
        constraints.addEquality('hot_water_periodicity', E[0] - E[self.N])
        constraints.addInequality('hot_water_capacity', E - w['C_hwat'])
        constraints.addInequality('hot_water_pv_charging', w['P_hw_ch'] - w['C_pv'] * ca.DM(self.data.irradiance))

    def supply(self, w):
        return w['P_hw_dis']

    def demand(self, w):
        return w['P_hw_ch'] + ca.DM(self.data.hot_water_demand)

    def investmentCost(self, w):
        return self.config.inv_hwat * w['C_hwat'] / 1e3

    def outputs(self, w):
        return {
            'C_hwat': {'value': w['C_hwat'], 'type': 'single', 'unit': 'Wh',
                       'description': 'Hot water storage capacity'},
            'E_hw': {'value': w['E_hw'][1:self.N + 1], 'type': 'profile', 'unit': 'Wh',
                     'description': 'Hot water storage energy'},
            'P_hw_ch': {'value': w['P_hw_ch'], 'type': 'profile', 'unit': 'Wh',
                        'description': 'Hot water storage charging'},
            'P_hw_dis': {'value': w['P_hw_dis'], 'type': 'profile', 'unit': 'Wh',
                         'description': 'Hot water storage discharging'},
        }
