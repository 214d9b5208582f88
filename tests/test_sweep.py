import numpy as np
import pytest

from solarsystemopt.config import OptimizationConfig
from solarsystemopt.sweep import SweepPoint, runPVSweep
from solarsystemopt.utility import NUM_HOURS


def test_serial_sweep_pins_pv_capacity(irradiance, demand):
    capacities = [0.0, 2000.0, 4000.0]

    points = runPVSweep(OptimizationConfig(bat_value=0.0), capacities, irradiance, demand, max_workers=1)

    assert [point.pv_cap_w for point in points] == capacities
    assert all(point.ok for point in points)
    for point, capacity in zip(points, capacities):
        assert float(point.results['C_pv']) == pytest.approx(capacity)
    # more PV, less grid import
    grid_buy = [float(point.results['E_grid_buy']) for point in points]
    assert grid_buy[0] > grid_buy[1] > grid_buy[2]


def test_failed_point_carries_error(irradiance, demand):
    points = runPVSweep(OptimizationConfig(), [1000.0, -5.0], irradiance, demand, max_workers=1)

    assert points[0].ok
    assert not points[1].ok
    assert points[1].error_kind == 'configuration'
    assert 'pv_cap_w_max' in points[1].error_message


def test_sweep_passes_further_inputs(irradiance, demand):
    hot_water = np.full(NUM_HOURS, 50.0)
    config = OptimizationConfig(hwat_enabled=True)

    points = runPVSweep(config, [3000.0], irradiance, demand, max_workers=1, hot_water_demand=hot_water)

    assert points[0].ok
    assert float(points[0].results['E_hot_water_demand']) == pytest.approx(50.0 * NUM_HOURS)


def test_parallel_sweep_matches_serial(irradiance, demand):
    config = OptimizationConfig(bat_value=0.0)
    capacities = [1000.0, 3000.0]

    serial = runPVSweep(config, capacities, irradiance, demand, max_workers=1)
    parallel = runPVSweep(config, capacities, irradiance, demand, max_workers=2)

    for a, b in zip(serial, parallel):
        assert a.pv_cap_w == b.pv_cap_w
        assert float(a.results['cost_total']) == pytest.approx(float(b.results['cost_total']), rel=1e-6)


def test_sweep_point_ok():
    assert not SweepPoint(1000.0, error_kind='solver', error_message='failed').ok
