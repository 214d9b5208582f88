import matplotlib
import numpy as np
import pytest

from solarsystemopt.config import OptimizationConfig
from solarsystemopt.utility import DAYS_PER_YEAR, HOURS_PER_DAY, NUM_HOURS

matplotlib.use('Agg')


def synthetic_irradiance() -> np.ndarray:
    """ Sun between 6 and 18 h, stronger in summer, values in [0, 1]."""
    hours = np.arange(NUM_HOURS)
    hour_of_day = hours % HOURS_PER_DAY
    daily = np.clip(np.sin((hour_of_day - 6) / 12 * np.pi), 0, None)
    season = 0.6 - 0.35 * np.cos(2 * np.pi * (hours // HOURS_PER_DAY) / DAYS_PER_YEAR)
    return np.clip(daily * season, 0, 1)


def synthetic_demand() -> np.ndarray:
    """ 400 Wh base load with a 600 Wh evening peak."""
    hour_of_day = np.arange(NUM_HOURS) % HOURS_PER_DAY
    return 400.0 + 600.0 * ((hour_of_day >= 18) & (hour_of_day < 22))


@pytest.fixture(scope='session')
def irradiance():
    return synthetic_irradiance()


@pytest.fixture(scope='session')
def demand():
    return synthetic_demand()


@pytest.fixture()
def config():
    return OptimizationConfig()
