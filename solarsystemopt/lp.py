import logging
from typing import List

import casadi as ca
from casadi.tools import struct_symSX

from solarsystemopt.config import OptimizationConfig
from solarsystemopt.solver import LinearProgram, LPSolver, SolverSolution
from solarsystemopt.systemmodels import ConstraintSet, ModelData, Subsystem, createSubsystems

logger = logging.getLogger(__name__)


class SolarSystemLP:
    """ Year long LP (one step per hour) that sizes and dispatches the energy system.

    The variables, bounds and constraints are contributed by the subsystem blocks,
    this class couples them with the hourly energy balance
        supply (PV, grid import, discharging) = demand (base load, charging, heat pump, car, grid export)
    and adds the objective:
        - cost:     annuity * investment + grid import cost - feed-in revenue
        - autonomy: grid import
    All cost terms are per kW / kWh, so the energies in Wh are divided by 1000.
    """

    def __init__(self, config: OptimizationConfig, data: ModelData):
        self.config = config
        self.data = data
        self.N = data.N
        self.subsystems: List[Subsystem] = createSubsystems(config, data)

        self.build_LP()

    def build_LP(self):
        logger.info("Building LP with the subsystems %s", [sub.name for sub in self.subsystems])
        N = self.N

        # decision variables of all blocks
        entries = []
        for sub in self.subsystems:
            entries += sub.entries()
        w = struct_symSX(entries)

        # bounds, every variable is non-negative
        lbw = w(0)
        ubw = w(ca.inf)
        for sub in self.subsystems:
            sub.setBounds(lbw, ubw)

        constraints = ConstraintSet()
        for sub in self.subsystems:
            sub.addConstraints(w, constraints)

        # energy balance for every hour
        supply = ca.SX.zeros(N)
        demand = ca.SX(ca.DM(self.data.demand))
        for sub in self.subsystems:
            sub_supply = sub.supply(w)
            sub_demand = sub.demand(w)
            if sub_supply is not None:
                supply += sub_supply
            if sub_demand is not None:
                demand += sub_demand
        constraints.addEquality('energy_balance', supply - demand)

        # costs
        J_fix = 0
        J_running = 0
        for sub in self.subsystems:
            J_fix += sub.investmentCost(w)
            J_running += sub.runningCost(w)
        J_fix_annual = self.config.annuity * J_fix

        if self.config.optimize_for_autonomy:
            J = ca.sum1(w['P_grid_buy']) / 1e3
        else:
            J = J_fix_annual + J_running

        # outputs of the blocks
        self.outputs = {}
        for sub in self.subsystems:
            self.outputs.update(sub.outputs(w))
        output_keys = list(self.outputs.keys())

        # store the lp variables
        self.w = w
        self.lbw = lbw
        self.ubw = ubw
        self.J = J
        self.constraints = constraints
        self.G = ca.vertcat(*constraints.G)
        self.lbG = ca.vertcat(*constraints.lbG)
        self.ubG = ca.vertcat(*constraints.ubG)
        self.supply = supply
        self.demand = demand

        self.f_outputs = ca.Function('f_outputs', [w], [ca.SX(self.outputs[key]['value']) for key in output_keys],
                                     ['w'], output_keys)
        self.f_Jfix = ca.Function('f_Jfix', [w], [J_fix_annual])
        self.f_Jrunning = ca.Function('f_Jrunning', [w], [J_running])
        self.f_balance = ca.Function('f_balance', [w], [supply - demand])

        logger.debug("LP has %d variables and %d constraints in the families %s",
                     w.size, constraints.size, constraints.families)

    @property
    def mandatory_families(self) -> List[str]:
        families = ['energy_balance']
        for sub in self.subsystems:
            families += sub.mandatory_families
        return families

    def problem(self) -> LinearProgram:
        return LinearProgram(self.w.cat, self.J, self.G, self.lbw.cat, self.ubw.cat, self.lbG, self.ubG,
                             self.mandatory_families)

    def solve(self, solver: LPSolver) -> SolverSolution:
        """ Solves the LP and maps the optimal point back onto the named variables (solution.values)."""
        solution = solver.solve(self.problem())
        wopt = self.w(ca.DM(solution.x))
        solution.values = {key: wopt[key].full().ravel() for key in self.w.keys()}
        solution.wopt = wopt
        return solution

    def evaluateOutputs(self, wopt) -> dict:
        """ Values of all block outputs at the point wopt, as numpy arrays."""
        raw = self.f_outputs(w=wopt.cat)
        return {key: raw[key].full().ravel() for key in self.outputs}
