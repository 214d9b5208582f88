import logging
from typing import Sequence

import numpy as np

from solarsystemopt.config import OptimizationConfig
from solarsystemopt.errors import ConfigurationError
from solarsystemopt.utility import HOURS_PER_MONTH, NUM_HOURS, checkSeries, monthOfHour

logger = logging.getLogger(__name__)


def scaleToAnnualUsage(demand: Sequence[float], electricity_usage: float) -> np.ndarray:
    """ Rescales an hourly demand series so that it sums to electricity_usage [Wh]."""
    demand = np.asarray(demand, dtype=float)
    total = demand.sum()
    if total <= 0:
        if electricity_usage > 0:
            raise ConfigurationError("Cannot scale an all-zero demand series to a positive annual usage")
        return np.zeros_like(demand)
    return demand * (electricity_usage / total)


def monthlyDemandCurve(annual_demand: float, monthly_weights: Sequence[float]) -> np.ndarray:
    """ Distributes the annual demand [Wh] over the months proportionally to the weights,
    each month flat over its hours."""
    weights = np.asarray(monthly_weights, dtype=float)
    if weights.size != 12 or np.any(weights <= 0):
        raise ConfigurationError("The monthly demand profile needs exactly 12 positive weights")
    monthly_energy = annual_demand * weights / weights.sum()
    hourly_per_month = monthly_energy / np.asarray(HOURS_PER_MONTH)
    return hourly_per_month[monthOfHour()]


def buildElectricityDemand(config: OptimizationConfig, demand: Sequence[float]) -> np.ndarray:
    """ The hourly electric base demand [Wh] used in the energy balance.

    With a monthly profile the demand is distributed over the months, the annual total is
    config.electricity_usage if given, otherwise the total of the supplied series.
    Without a profile the series is rescaled to config.electricity_usage if given, else used as is.
    """
    demand = checkSeries('electricity_demand', demand, 0)
    annual = config.electricity_usage if config.electricity_usage is not None else float(demand.sum())

    if config.monthly_demand is not None:
        logger.debug("Distributing %.0f Wh with the monthly demand profile", annual)
        scaled = monthlyDemandCurve(annual, config.monthly_demand)
    elif config.electricity_usage is not None:
        scaled = scaleToAnnualUsage(demand, config.electricity_usage)
    else:
        scaled = demand.copy()

    assert scaled.size == NUM_HOURS
    return scaled
