import logging
import time
from typing import List

import casadi as ca
import numpy as np

from solarsystemopt.config import OptimizationConfig
from solarsystemopt.errors import InfeasibleModelError, SolverError

logger = logging.getLogger(__name__)


class LinearProgram:
    """ An LP in the form
        min f(x)  s.t.  lbx <= x <= ubx,  lbg <= g(x) <= ubg
    with f and g linear casadi expressions of the decision variables x."""

    def __init__(self, x, f, g, lbx, ubx, lbg, ubg, mandatory_families: List[str] = None):
        self.x = x
        self.f = f
        self.g = g
        self.lbx = lbx
        self.ubx = ubx
        self.lbg = lbg
        self.ubg = ubg
        self.mandatory_families = list(mandatory_families or [])

    @property
    def n_variables(self) -> int:
        return self.x.numel()

    @property
    def n_constraints(self) -> int:
        return self.g.numel()


class SolverSolution:
    """ The optimal point of an LP, together with the objective value and the statistics of the solver."""

    def __init__(self, x: np.ndarray, objective: float, stats: dict, t_wall: float):
        self.x = x
        self.objective = objective
        self.stats = stats
        self.t_wall = t_wall
        # variable name -> values, filled in by the model that knows the structure of x
        self.values = {}
        self.wopt = None

    @property
    def return_status(self) -> str:
        return str(self.stats.get('return_status', 'unknown'))

    @property
    def iter_count(self) -> int:
        for key in ['simplex_iteration_count', 'ipm_iteration_count', 'iter_count']:
            if self.stats.get(key):
                return int(self.stats[key])
        return 0


class LPSolver:
    """ Interface of an LP solver, only solve() has to be implemented."""

    name = 'lp'

    def solve(self, problem: LinearProgram) -> SolverSolution:
        """ Returns the optimal solution.
        Raises InfeasibleModelError if there is no feasible point and SolverError for any other failure."""
        raise NotImplementedError


class CasadiConicSolver(LPSolver):
    """ Solves the LP with one of the conic (LP/QP) plugins of casadi, HiGHS by default.
    time_limit [s] and iteration_limit bound the solve, exceeding them is a SolverError.
    """

    def __init__(self, plugin: str = 'highs', time_limit: float = None, iteration_limit: int = None,
                 additional_options: dict = None):
        self.plugin = plugin
        self.time_limit = time_limit
        self.iteration_limit = iteration_limit
        self.additional_options = dict(additional_options or {})

    @property
    def name(self) -> str:
        return self.plugin

    @staticmethod
    def fromConfig(config: OptimizationConfig) -> 'CasadiConicSolver':
        return CasadiConicSolver(config.solver, config.solver_time_limit_s, config.solver_iteration_limit)

    def solverOptions(self) -> dict:
        opts = {'error_on_fail': False}
        if self.plugin == 'highs':
            highs_opts = {'output_flag': False}
            if self.time_limit is not None:
                highs_opts['time_limit'] = float(self.time_limit)
            if self.iteration_limit is not None:
                highs_opts['simplex_iteration_limit'] = int(self.iteration_limit)
                highs_opts['ipm_iteration_limit'] = int(self.iteration_limit)
            opts['highs'] = highs_opts
        elif self.time_limit is not None or self.iteration_limit is not None:
            logger.warning("Time and iteration limits are only passed to highs, not to '%s'", self.plugin)
        opts.update(self.additional_options)
        return opts

    def solve(self, problem: LinearProgram) -> SolverSolution:
        lp = {'x': problem.x, 'f': problem.f, 'g': problem.g}
        try:
            solver = ca.qpsol('solver', self.plugin, lp, self.solverOptions())
        except RuntimeError as e:
            raise SolverError(f"Could not create the '{self.plugin}' solver: {e}") from e

        logger.info("Solving LP with %s (%d variables, %d constraints)", self.plugin,
                    problem.n_variables, problem.n_constraints)
        t_start = time.perf_counter()
        try:
            res = solver(lbx=problem.lbx, ubx=problem.ubx, lbg=problem.lbg, ubg=problem.ubg)
        except RuntimeError as e:
            raise SolverError(f"The '{self.plugin}' solver failed: {e}") from e
        t_wall = time.perf_counter() - t_start

        stats = solver.stats()
        status = str(stats.get('return_status', 'unknown'))
        logger.info("Solver returned '%s' after %.2f s", status, t_wall)
        self.checkStatus(stats, problem)

        x = res['x'].full().ravel()
        if not np.all(np.isfinite(x)):
            raise SolverError(f"The '{self.plugin}' solver returned a non-finite solution", status)
        return SolverSolution(x, float(res['f']), stats, t_wall)

    def checkStatus(self, stats: dict, problem: LinearProgram):
        if stats.get('success', False):
            return
        status = str(stats.get('return_status', 'unknown'))
        unified = str(stats.get('unified_return_status', ''))
        # 'Primal infeasible or unbounded' says nothing about the demand constraints
        lowered = status.lower()
        if 'unbounded' not in lowered and ('infeasible' in lowered or unified == 'SOLVER_RET_INFEASIBLE'):
            raise InfeasibleModelError(f"The LP is infeasible ({status})", status, problem.mandatory_families)
        raise SolverError(f"The '{self.plugin}' solver did not find an optimal solution: {status}", status)
