from typing import Dict, List, Optional

import casadi as ca
import numpy as np
from casadi.tools import entry, struct_symSX

from solarsystemopt.config import OptimizationConfig
from solarsystemopt.utility import NUM_HOURS


class ModelData:
    """ The hourly data of one optimization run, already validated and scaled.
        - irradiance: fraction of the peak [0, 1]
        - demand: electric base demand [Wh]
        - rates: grid tariff per kWh for every hour
        - heat_demand: space heat demand [Wh] (heat pump only)
        - cop: coefficient of performance of the heat pump for every hour
        - hot_water_demand: hot water demand [Wh] (hot water storage only)
    """

    def __init__(self, pv_cap_w_max: float, irradiance: np.ndarray, demand: np.ndarray, rates: np.ndarray,
                 heat_demand: np.ndarray = None, cop: np.ndarray = None, hot_water_demand: np.ndarray = None):
        self.N = NUM_HOURS
        self.pv_cap_w_max = pv_cap_w_max
        self.irradiance = irradiance
        self.demand = demand
        self.rates = rates
        self.heat_demand = heat_demand
        self.cop = cop
        self.hot_water_demand = hot_water_demand


class ConstraintSet:
    """ Collects the constraints G with lbG <= G <= ubG and remembers which family every row belongs to."""

    def __init__(self):
        self.G = []
        self.lbG = []
        self.ubG = []
        self.families: List[str] = []
        self._rows: Dict[str, int] = {}

    def addEquality(self, family: str, g):
        """ g == 0 """
        g = ca.vec(g)
        self._add(family, g, ca.DM.zeros(g.shape), ca.DM.zeros(g.shape))

    def addInequality(self, family: str, g):
        """ g <= 0 """
        g = ca.vec(g)
        self._add(family, g, -ca.inf * ca.DM.ones(g.shape), ca.DM.zeros(g.shape))

    def _add(self, family, g, lb, ub):
        self.G.append(g)
        self.lbG.append(lb)
        self.ubG.append(ub)
        if family not in self._rows:
            self.families.append(family)
        self._rows[family] = self._rows.get(family, 0) + g.numel()

    def rows(self, family: str) -> int:
        return self._rows.get(family, 0)

    @property
    def size(self) -> int:
        return sum(self._rows.values())


class Subsystem:
    """ Base class of a block of the energy system (PV, battery, grid, ...).
    A block contributes its decision variables, bounds and constraints, its terms of the hourly energy balance,
    its cost terms and the outputs that end up in the results.
    Disabled blocks are not created at all, so they contribute nothing.

    All hourly quantities are energies per hour [Wh], which equals the average power [W] over the hour.
    """

    name: str = 'subsystem'

    # constraint families that enforce demand that has to be met, reported if the model is infeasible
    mandatory_families: List[str] = []

    def __init__(self, config: OptimizationConfig, data: ModelData):
        self.config = config
        self.data = data
        self.N = data.N

    def entries(self) -> List[entry]:
        """ The decision variables of the block."""
        return []

    def setBounds(self, lbw, ubw):
        """ Overwrites the bounds of the own variables, the defaults are [0, inf]."""
        pass

    def addConstraints(self, w: struct_symSX, constraints: ConstraintSet):
        pass

    def supply(self, w: struct_symSX) -> Optional[ca.SX]:
        """ Hourly energy the block feeds into the electric bus."""
        return None

    def demand(self, w: struct_symSX) -> Optional[ca.SX]:
        """ Hourly energy the block draws from the electric bus."""
        return None

    def investmentCost(self, w: struct_symSX):
        """ Investment cost of the sized capacities, not yet annualized."""
        return 0

    def runningCost(self, w: struct_symSX):
        """ Annual operating cost (negative for revenues)."""
        return 0

    def outputs(self, w: struct_symSX) -> dict:
        """ Outputs of the block: name -> {'value': expression, 'type': 'profile'|'single', 'unit', 'description'}"""
        return {}


def storageDynamics(E, P_ch, P_dis, loss: float, eta_in: float, eta_out: float, N: int):
    """ Residual of the storage recurrence E[n+1] = E[n]*(1-loss) + eta_in*P_ch[n] - P_dis[n]/eta_out,
    for the N+1 storage levels at the hour boundaries."""
    return E[1:N + 1] - E[0:N] * (1 - loss) - eta_in * P_ch + P_dis / eta_out


def fixedOrBounded(lbw, ubw, key: str, value: float, fixed: bool):
    """ Bounds a scalar capacity to [0, value], or pins it to value."""
    ubw[key] = value
    lbw[key] = value if fixed else 0
