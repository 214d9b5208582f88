import logging

import numpy as np

from solarsystemopt.lp import SolarSystemLP
from solarsystemopt.solver import SolverSolution
from solarsystemopt.utility import DAYS_PER_YEAR, Results

logger = logging.getLogger(__name__)

# hourly series of every block, zero if the block is disabled
PROFILE_KEYS = ['P_pv', 'P_pv_potential', 'P_curt', 'P_grid_buy', 'P_grid_sell', 'P_ch', 'P_dis', 'E_bat',
                'P_hp', 'Qdot_hp', 'P_ev', 'P_hw_ch', 'P_hw_dis', 'E_hw']
CAPACITY_KEYS = {'C_pv': 'W', 'C_bat': 'Wh', 'C_grid': 'W', 'C_hp': 'W', 'C_hwat': 'Wh'}
CAPACITY_DESCRIPTIONS = {'C_pv': 'PV peak capacity', 'C_bat': 'Battery capacity', 'C_grid': 'Grid connection capacity',
                         'C_hp': 'Heat pump capacity (electric)', 'C_hwat': 'Hot water storage capacity'}

# supply and demand side of the energy balance
SUPPLY_KEYS = ['P_pv', 'P_grid_buy', 'P_dis', 'P_hw_dis']
DEMAND_KEYS = ['P_load', 'P_hot_water_load', 'P_hp', 'P_ev', 'P_ch', 'P_hw_ch', 'P_grid_sell']


def clampPercent(value: float) -> float:
    return float(min(max(value, 0.0), 100.0))


def energyBalanceResidual(results: Results) -> np.ndarray:
    """ Hourly residual supply - demand [Wh], recomputed from the hourly series of the results."""
    supply = sum(np.asarray(results[key], dtype=float) for key in SUPPLY_KEYS)
    demand = sum(np.asarray(results[key], dtype=float) for key in DEMAND_KEYS)
    return supply - demand


class ResultAggregator:
    """ Turns the solved LP into a frozen Results instance:
    capacities, annual totals, costs, self consumption and autonomy, hourly series and solver stats.
    """

    def __init__(self, lp: SolarSystemLP):
        self.lp = lp
        self.config = lp.config
        self.data = lp.data

    def process(self, solution: SolverSolution) -> Results:
        lp = self.lp
        N = lp.N
        wopt = solution.wopt
        outputs = lp.evaluateOutputs(wopt)

        results = Results()

        # lp costs
        cost_investment = float(lp.f_Jfix(wopt))
        cost_grid = float(lp.f_Jrunning(wopt))
        results.addResult('cost_investment', cost_investment, 'EUR/a', 'Annualized investment costs')
        results.addResult('cost_grid', cost_grid, 'EUR/a', 'Grid import costs minus feed-in revenue')
        results.addResult('cost_total', cost_investment + cost_grid, 'EUR/a', 'Total annual costs')
        for key in ['cost_grid_buy', 'cost_feed_in_revenue']:
            results.addResult(key, float(outputs[key][0]), 'EUR/a', lp.outputs[key]['description'])
        results.addResult('lp_objective', solution.objective, '-',
                          'Grid import [kWh]' if self.config.optimize_for_autonomy else 'Total annual costs')

        # solver stats
        results.addResult('solver_return_status', solution.return_status, '-', 'Return Status of the Solver')
        results.addResult('solver_t_wall_total', solution.t_wall, 's', 'Total Wall Time of the Solver')
        results.addResult('solver_iter_count', solution.iter_count, '-', 'Number of Iterations of the Solver')

        # lp stats
        results.addResult('lp_w_size', lp.w.size, '-', 'Size of the lp decision variables')
        results.addResult('lp_g_size', lp.constraints.size, '-', 'Number of constraints')
        results.addResult('lp_balance_residual', float(np.max(np.abs(lp.f_balance(wopt).full()))), 'Wh',
                          'Max. violation of the energy balance in the lp')

        # discretization
        results.addResult('N', N, '-', 'Number of time steps')
        results.addResult('T', N, 'h', 'Total time horizon')
        results.addResult('h', 1, 'h', 'Step size')
        results['timegrid'] = np.arange(N, dtype=float)

        # capacities, zero for disabled blocks
        for key, unit in CAPACITY_KEYS.items():
            value = float(outputs[key][0]) if key in outputs else 0.0
            description = lp.outputs[key]['description'] if key in outputs else CAPACITY_DESCRIPTIONS[key]
            results.addResult(key, value, unit, description)

        # hourly series
        zeros = np.zeros(N)
        for key in PROFILE_KEYS:
            if key in lp.outputs:
                results.addResult(key, outputs[key], lp.outputs[key]['unit'], lp.outputs[key]['description'])
            else:
                results.addResult(key, zeros.copy(), 'Wh', '-')
        results.addResult('P_load', self.data.demand.copy(), 'Wh', 'Electric base demand')
        hot_water = self.data.hot_water_demand.copy() if self.config.hwat_enabled else zeros
        results.addResult('P_hot_water_load', hot_water, 'Wh', 'Hot water demand')
        heat_demand = self.data.heat_demand.copy() if self.config.heat_pump_enabled else zeros
        results.addResult('Qdot_load', heat_demand, 'Wh', 'Space heat demand')
        results.addResult('irradiance', self.data.irradiance.copy(), '-', 'Solar irradiance')
        results.addResult('rates', self.data.rates.copy(), 'EUR/kWh', 'Grid tariff')

        self.addTotals(results)
        self.addRatios(results)

        results.addResult('balance_residual', float(np.max(np.abs(energyBalanceResidual(results)))), 'Wh',
                          'Max. residual of the energy balance of the hourly series')

        logger.info("Optimal sizing: C_pv = %.0f W, C_bat = %.0f Wh, total costs %.2f EUR/a",
                    results['C_pv'], results['C_bat'], results['cost_total'])
        return results.freeze()

    def addTotals(self, results: Results):
        def total(key):
            return max(float(np.sum(results[key])), 0.0)

        totals = {
            'E_pv': ('P_pv', 'PV production used or exported'),
            'E_pv_potential': ('P_pv_potential', 'PV production before curtailment'),
            'E_curt': ('P_curt', 'Curtailed PV production'),
            'E_load': ('P_load', 'Electric base demand'),
            'E_grid_buy': ('P_grid_buy', 'Grid import'),
            'E_grid_sell': ('P_grid_sell', 'Grid export'),
            'E_bat_in': ('P_ch', 'Battery charging'),
            'E_bat_out': ('P_dis', 'Battery discharging'),
            'E_hp': ('P_hp', 'Heat pump electricity consumption'),
            'E_heat_demand': ('Qdot_load', 'Space heat demand'),
            'E_ev': ('P_ev', 'Electric car charging'),
            'E_hw_in': ('P_hw_ch', 'Hot water storage charging'),
            'E_hw_out': ('P_hw_dis', 'Hot water storage discharging'),
            'E_hot_water_demand': ('P_hot_water_load', 'Hot water demand'),
        }
        for name, (key, description) in totals.items():
            results.addResult(name, total(key), 'Wh', description)

        results.addResult('E_ev_required', self.config.car_daily_energy_wh * DAYS_PER_YEAR, 'Wh',
                          'Energy required by the electric car')
        consumption = (results['E_load'] + results['E_hot_water_demand'] + results['E_hp'] + results['E_ev'])
        results.addResult('E_consumption', float(consumption), 'Wh',
                          'Total electricity consumption (base, hot water, heat pump, car)')

    def addRatios(self, results: Results):
        E_pv = float(results['E_pv'])
        E_consumption = float(results['E_consumption'])

        self_consumption = (E_pv - float(results['E_grid_sell'])) / E_pv * 100 if E_pv > 0 else 0.0
        autonomy = (E_consumption - float(results['E_grid_buy'])) / E_consumption * 100 if E_consumption > 0 else 0.0

        # autonomy if PV could only cover the demand of the same hour
        hourly_consumption = results['P_load'] + results['P_hot_water_load'] + results['P_hp'] + results['P_ev']
        covered = np.minimum(results['P_pv_potential'], hourly_consumption).sum()
        autonomy_without_battery = covered / E_consumption * 100 if E_consumption > 0 else 0.0

        results.addResult('self_consumption', clampPercent(self_consumption), '%',
                          'Share of the PV production used on site')
        results.addResult('autonomy', clampPercent(autonomy), '%', 'Share of the consumption not covered by the grid')
        results.addResult('autonomy_without_battery', clampPercent(autonomy_without_battery), '%',
                          'Autonomy if PV only covers the demand of the same hour')
