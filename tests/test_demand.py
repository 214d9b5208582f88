import numpy as np
import pytest

from solarsystemopt.config import OptimizationConfig
from solarsystemopt.demand import buildElectricityDemand, monthlyDemandCurve, scaleToAnnualUsage
from solarsystemopt.errors import ConfigurationError
from solarsystemopt.utility import HOURS_PER_MONTH, NUM_HOURS, monthOfHour


def test_demand_used_as_is_without_usage_or_profile(demand):
    scaled = buildElectricityDemand(OptimizationConfig(), demand)

    np.testing.assert_allclose(scaled, demand)
    assert scaled is not demand


def test_demand_rescaled_to_annual_usage(demand):
    config = OptimizationConfig(electricity_usage=3.5e6)

    scaled = buildElectricityDemand(config, demand)

    assert scaled.sum() == pytest.approx(3.5e6)
    # shape of the profile is kept
    np.testing.assert_allclose(scaled / scaled.max(), demand / demand.max())


def test_monthly_profile_distributes_annual_usage(demand):
    weights = (3, 2, 2, 1, 1, 1, 1, 1, 1, 2, 2, 3)
    config = OptimizationConfig(electricity_usage=4.0e6, monthly_demand=weights)

    scaled = buildElectricityDemand(config, demand)

    monthly = np.bincount(monthOfHour(), weights=scaled)
    np.testing.assert_allclose(monthly, 4.0e6 * np.array(weights) / sum(weights))
    # flat within every month
    start = 0
    for hours in HOURS_PER_MONTH:
        assert np.ptp(scaled[start:start + hours]) == pytest.approx(0.0, abs=1e-9)
        start += hours


def test_monthly_profile_uses_series_total_without_usage(demand):
    config = OptimizationConfig(monthly_demand=(1.0,) * 12)

    scaled = buildElectricityDemand(config, demand)

    assert scaled.sum() == pytest.approx(demand.sum())


def test_monthly_curve_needs_twelve_positive_weights():
    with pytest.raises(ConfigurationError):
        monthlyDemandCurve(1000.0, [1.0] * 11)
    with pytest.raises(ConfigurationError):
        monthlyDemandCurve(1000.0, [1.0] * 11 + [-1.0])


def test_all_zero_demand_cannot_be_scaled():
    with pytest.raises(ConfigurationError):
        scaleToAnnualUsage(np.zeros(NUM_HOURS), 1000.0)
    np.testing.assert_array_equal(scaleToAnnualUsage(np.zeros(NUM_HOURS), 0.0), np.zeros(NUM_HOURS))


@pytest.mark.parametrize('values', [np.ones(100), -np.ones(NUM_HOURS), np.full(NUM_HOURS, np.nan)])
def test_invalid_demand_series(values):
    with pytest.raises(ConfigurationError):
        buildElectricityDemand(OptimizationConfig(), values)
