import casadi as ca
from casadi.tools import entry

from solarsystemopt.systemmodels.subsystem import Subsystem, fixedOrBounded, storageDynamics


class Battery(Subsystem):
    """ Electric battery storage.
    The storage level E_bat is defined at the N+1 hour boundaries, E_bat[0] = E_bat[N] closes the year
    as one repeating cycle. Charging and discharging are limited by the C-rate.
    """

    name = 'battery'

    def entries(self):
        return [entry('C_bat'),
                entry('E_bat', shape=self.N + 1),
                entry('P_ch', shape=self.N),
                entry('P_dis', shape=self.N)]

    def setBounds(self, lbw, ubw):
        config = self.config
        fixedOrBounded(lbw, ubw, 'C_bat', config.bat_value, config.bat_fixed)
        ubw['E_bat'] = ca.DM.ones(self.N + 1) * config.bat_value
        # inf * 0 is nan
        max_power = config.c_rate_limit * config.bat_value if config.c_rate_limit > 0 else 0
        ubw['P_ch'] = ca.DM.ones(self.N) * max_power
        ubw['P_dis'] = ca.DM.ones(self.N) * max_power

    def addConstraints(self, w, constraints):
        config = self.config
        E = w['E_bat']

        constraints.addEquality('battery_dynamics',
                                storageDynamics(E, w['P_ch'], w['P_dis'], config.storage_loss_bat,
                                                config.eta_in_bat, config.eta_out_bat, self.N))

        # periodicity constraint
        constraints.addEquality('battery_periodicity', E[0] - E[self.N])
        if config.bat_initial_soc is not None:
            constraints.addEquality('battery_initial_soc', E[0] - config.bat_initial_soc * w['C_bat'])

        constraints.addInequality('battery_capacity', E - w['C_bat'])
        constraints.addInequality('battery_c_rate', w['P_ch'] - config.c_rate_limit * w['C_bat'])
        constraints.addInequality('battery_c_rate', w['P_dis'] - config.c_rate_limit * w['C_bat'])

    def supply(self, w):
        return w['P_dis']

    def demand(self, w):
        return w['P_ch']

    def investmentCost(self, w):
        return self.config.inv_bat * w['C_bat'] / 1e3

    def outputs(self, w):
        return {
            'C_bat': {'value': w['C_bat'], 'type': 'single', 'unit': 'Wh', 'description': 'Battery capacity'},
            # level at the end of each hour
            'E_bat': {'value': w['E_bat'][1:self.N + 1], 'type': 'profile', 'unit': 'Wh',
                      'description': 'Battery energy'},
            'P_ch': {'value': w['P_ch'], 'type': 'profile', 'unit': 'Wh', 'description': 'Battery charging'},
            'P_dis': {'value': w['P_dis'], 'type': 'profile', 'unit': 'Wh', 'description': 'Battery discharging'},
        }
