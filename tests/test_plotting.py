import matplotlib.pyplot as plt
import numpy as np
import pytest

from solarsystemopt import plotting
from solarsystemopt.utility import NUM_HOURS, Results


@pytest.fixture()
def results(irradiance, demand):
    res = Results()
    res.addResult('C_bat', 5000.0, 'Wh')
    res.addResult('timegrid', np.arange(NUM_HOURS, dtype=float), 'h')
    res.addResult('P_load', demand, 'Wh')
    res.addResult('P_pv_potential', 4000.0 * irradiance, 'Wh')
    res.addResult('P_grid_buy', np.clip(demand - 4000.0 * irradiance, 0, None), 'Wh')
    res.addResult('P_grid_sell', np.clip(4000.0 * irradiance - demand, 0, None), 'Wh')
    res.addResult('P_hp', np.zeros(NUM_HOURS), 'Wh')
    res.addResult('P_ev', np.zeros(NUM_HOURS), 'Wh')
    res.addResult('E_bat', np.full(NUM_HOURS, 2500.0), 'Wh')
    return res.freeze()


def test_weekly_average():
    time_values = np.arange(2 * 168)
    data = np.concatenate([np.ones(168), 3 * np.ones(168)])

    weeks, weekly = plotting.calculate_weekly_average(data, time_values)

    np.testing.assert_array_equal(weeks, [0, 1])
    np.testing.assert_allclose(weekly, [1.0, 3.0])


def test_plot_average_day(results, tmp_path):
    filename = tmp_path / 'average_day.png'

    fig = plotting.plotAverageDay(results, str(filename))
    plt.close(fig)

    assert filename.exists()


def test_plot_days(results, tmp_path):
    filenames = plotting.plotDays(results, [0, 172], str(tmp_path / 'days'))

    assert len(filenames) == 2
    assert filenames[1].endswith('day_172.png')


def test_plot_day_out_of_range(results):
    with pytest.raises(ValueError):
        plotting.plotDay(results, 365)


def test_plot_weekly_averages(results, tmp_path):
    filename = tmp_path / 'weekly.png'

    fig = plotting.plotWeeklyAverages(results, str(filename))
    plt.close(fig)

    assert filename.exists()
