import logging
from typing import NamedTuple, Optional, Sequence

import numpy as np
from scipy.optimize import brentq, fsolve

from solarsystemopt.config import OptimizationConfig
from solarsystemopt.utility import Results

logger = logging.getLogger(__name__)


class ROIResult(NamedTuple):
    roi: float  # yearly return on investment
    net_present_value: float
    payback_period: Optional[float]  # years, None if the investment is not paid back


def _nthRoot(value: float, n: int) -> float:
    return np.sign(value) * np.abs(value) ** (1.0 / n)


def annualSavings(yearly_cost_without: float, yearly_cost_with: float, num_years: int,
                  price_increase: float = 0.0, other_yearly_cost: float = 0.0) -> np.ndarray:
    """ Savings in every year, the grid costs increase by price_increase per year."""
    growth = (1 + price_increase) ** np.arange(num_years)
    return yearly_cost_without * growth - (yearly_cost_with * growth + other_yearly_cost)


def calculateROI(initial_investment: float, savings: Sequence[float]) -> ROIResult:
    """ ROI as the root of (sum_i (1+roi)^i * s_i / I_0)^(1/N) - 1 - roi = 0,
    the net present value discounted with that ROI and the payback period.
    """
    savings = np.asarray(savings, dtype=float)
    num_years = savings.size
    if initial_investment <= 0 or num_years == 0:
        return ROIResult(0.0, 0.0, None)

    years = np.arange(num_years)

    def f(roi):
        return _nthRoot(np.sum((1 + roi) ** years * savings) / initial_investment, num_years) - 1 - roi

    low, high = -0.3, 2.0
    if f(low) * f(high) < 0:
        roi = brentq(f, low, high, xtol=1e-10)
    else:
        logger.debug("No sign change of the ROI equation in [%.1f, %.1f], using fsolve", low, high)
        roi = float(fsolve(lambda x: f(x[0]), [0.1])[0])

    npv = -initial_investment + np.sum(savings / (1 + roi) ** years)

    payback_period = None
    cumulative = np.cumsum(savings)
    paid_back = np.nonzero(cumulative >= initial_investment)[0]
    if paid_back.size > 0:
        i = paid_back[0]
        before = cumulative[i] - savings[i]
        payback_period = float(i + (initial_investment - before) / savings[i])

    return ROIResult(float(roi), float(npv), payback_period)


def calculateOptimizedROI(results: Results, config: OptimizationConfig, num_years: int = 20,
                          other_yearly_cost: float = 0.0) -> ROIResult:
    """ ROI of the optimized system compared to buying all electricity from the grid at config.fc_grid."""
    initial_investment = (float(results['C_pv']) / 1e3 * config.inv_pv
                          + float(results['C_bat']) / 1e3 * config.inv_bat)
    if config.grid_investment_enabled:
        initial_investment += float(results['C_grid']) / 1e3 * config.inv_grid

    usage = config.electricity_usage if config.electricity_usage is not None else float(results['E_load'])
    savings = annualSavings(config.fc_grid * usage / 1e3,
                            config.fc_grid * float(results['E_grid_buy']) / 1e3,
                            num_years, config.electricity_price_increase, other_yearly_cost)
    return calculateROI(initial_investment, savings)
