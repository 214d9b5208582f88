import casadi as ca
import numpy as np
from casadi.tools import entry

from solarsystemopt.systemmodels.subsystem import Subsystem


class Grid(Subsystem):
    """ Connection to the public grid.
    Import is paid with the hourly tariff, export is paid with the feed-in tariff.
    With a grid investment cost the connection capacity C_grid becomes a sizing variable, otherwise
    the flows are only limited by grid_capacity_max_w (and max_feed_in_w for the export).
    """

    name = 'grid'

    @property
    def sized(self) -> bool:
        return self.config.grid_investment_enabled

    def entries(self):
        entries = [entry('P_grid_buy', shape=self.N),
                   entry('P_grid_sell', shape=self.N)]
        if self.sized:
            entries.append(entry('C_grid'))
        return entries

    def setBounds(self, lbw, ubw):
        cap = self.config.grid_capacity_max_w
        max_sell = cap if self.config.max_feed_in_w is None else min(cap, self.config.max_feed_in_w)
        ubw['P_grid_buy'] = ca.DM(np.full(self.N, cap))
        ubw['P_grid_sell'] = ca.DM(np.full(self.N, max_sell))
        if self.sized:
            ubw['C_grid'] = cap

    def addConstraints(self, w, constraints):
        if self.sized:
            constraints.addInequality('grid_capacity', w['P_grid_buy'] - w['C_grid'])
            constraints.addInequality('grid_capacity', w['P_grid_sell'] - w['C_grid'])

    def supply(self, w):
        return w['P_grid_buy']

    def demand(self, w):
        return w['P_grid_sell']

    def investmentCost(self, w):
        if self.sized:
            return self.config.inv_grid * w['C_grid'] / 1e3
        return 0

    def costBuy(self, w):
        return ca.dot(ca.DM(self.data.rates), w['P_grid_buy']) / 1e3

    def revenueSell(self, w):
        return self.config.feed_in_tariff * ca.sum1(w['P_grid_sell']) / 1e3

    def runningCost(self, w):
        return self.costBuy(w) - self.revenueSell(w)

    def capacity(self, w):
        if self.sized:
            return w['C_grid']
        # peak flow over the year
        return ca.mmax(ca.fmax(w['P_grid_buy'], w['P_grid_sell']))

    def outputs(self, w):
        return {
            'C_grid': {'value': self.capacity(w), 'type': 'single', 'unit': 'W',
                       'description': 'Grid connection capacity' if self.sized else 'Peak grid flow'},
            'P_grid_buy': {'value': w['P_grid_buy'], 'type': 'profile', 'unit': 'Wh', 'description': 'Grid import'},
            'P_grid_sell': {'value': w['P_grid_sell'], 'type': 'profile', 'unit': 'Wh', 'description': 'Grid export'},
            'cost_grid_buy': {'value': self.costBuy(w), 'type': 'single', 'unit': 'EUR/a',
                              'description': 'Cost of the grid import'},
            'cost_feed_in_revenue': {'value': self.revenueSell(w), 'type': 'single', 'unit': 'EUR/a',
                                     'description': 'Revenue of the grid export'},
        }
