import logging
import math
import numbers
from typing import Sequence

import numpy as np

from solarsystemopt.aggregator import ResultAggregator
from solarsystemopt.building import copForConfig, heatDemandForConfig
from solarsystemopt.config import OptimizationConfig
from solarsystemopt.demand import buildElectricityDemand
from solarsystemopt.errors import ConfigurationError
from solarsystemopt.lp import SolarSystemLP
from solarsystemopt.solver import CasadiConicSolver, LPSolver
from solarsystemopt.systemmodels import ModelData
from solarsystemopt.tariff import ElectricityRate
from solarsystemopt.utility import NUM_HOURS, Results, checkSeries

logger = logging.getLogger(__name__)


def buildModelData(config: OptimizationConfig, pv_cap_w_max: float, solar_irradiance: Sequence[float],
                   electricity_demand: Sequence[float], electricity_rate: ElectricityRate = None,
                   heat_demand: Sequence[float] = None, cop: Sequence[float] = None,
                   hot_water_demand: Sequence[float] = None, T_amb: Sequence[float] = None) -> ModelData:
    """ Validates and prepares the inputs of one run, raises a ConfigurationError for invalid inputs."""
    if not isinstance(config, OptimizationConfig):
        raise ConfigurationError(f"Expected an OptimizationConfig, got {type(config).__name__}")
    if isinstance(pv_cap_w_max, bool) or not isinstance(pv_cap_w_max, numbers.Real) \
            or not math.isfinite(pv_cap_w_max) or pv_cap_w_max < 0:
        raise ConfigurationError(f"'pv_cap_w_max' has to be a finite non-negative number, got {pv_cap_w_max!r}")

    irradiance = checkSeries('solar_irradiance', solar_irradiance, 0, 1)
    demand = buildElectricityDemand(config, electricity_demand)

    if electricity_rate is None:
        rates = np.full(NUM_HOURS, config.fc_grid)
    else:
        if not electricity_rate.isValid():
            raise ConfigurationError(f"{electricity_rate} does not cover every hour of the week exactly once")
        rates = electricity_rate.toYearlyHourlyRates()

    heat = None
    cop_values = None
    if config.heat_pump_enabled:
        if heat_demand is None:
            heat = heatDemandForConfig(config)
        else:
            heat = checkSeries('heat_demand', heat_demand, 0)
        if cop is None:
            cop_values = copForConfig(config, T_amb)
        else:
            cop_values = checkSeries('cop', cop)
            if cop_values.min() <= 0:
                raise ConfigurationError("'cop' has to be positive in every hour")

    hot_water = None
    if config.hwat_enabled:
        if hot_water_demand is None:
            raise ConfigurationError("The hot water storage needs a hot water demand series")
        hot_water = checkSeries('hot_water_demand', hot_water_demand, 0)

    return ModelData(float(pv_cap_w_max), irradiance, demand, rates, heat, cop_values, hot_water)


def runSimpleOpt(config: OptimizationConfig, pv_cap_w_max: float, solar_irradiance: Sequence[float],
                 electricity_demand: Sequence[float], electricity_rate: ElectricityRate = None,
                 heat_demand: Sequence[float] = None, cop: Sequence[float] = None,
                 hot_water_demand: Sequence[float] = None, T_amb: Sequence[float] = None,
                 solver: LPSolver = None) -> Results:
    """ Sizes and dispatches the energy system for one year.

    config: parameters of the run
    pv_cap_w_max: upper bound (or fixed value with config.pv_fixed) of the PV capacity [W]
    solar_irradiance: 8760 hourly values in [0, 1]
    electricity_demand: 8760 hourly values [Wh]
    electricity_rate: time of use tariff, config.fc_grid for every hour if None
    heat_demand: hourly space heat demand [Wh], estimated from the building if None (heat pump only)
    cop: hourly COP of the heat pump, derived from config (heat_pump_cop or heating_type) if None
    T_amb: hourly outdoor temperature [degC] for the COP, monthly averages if None
    hot_water_demand: hourly hot water demand [Wh], required for the hot water storage
    solver: LP solver, a CasadiConicSolver configured from config if None

    Raises ConfigurationError, InfeasibleModelError or SolverError, no partial results are returned.
    """
    data = buildModelData(config, pv_cap_w_max, solar_irradiance, electricity_demand, electricity_rate,
                          heat_demand, cop, hot_water_demand, T_amb)
    if solver is None:
        solver = CasadiConicSolver.fromConfig(config)

    lp = SolarSystemLP(config, data)
    solution = lp.solve(solver)
    return ResultAggregator(lp).process(solution)
