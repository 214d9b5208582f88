import numpy as np
import pandas as pd
import pytest

from solarsystemopt.errors import ConfigurationError, DataError
from solarsystemopt.utility import (NUM_HOURS, Results, TimeSeries, checkSeries, dateString, daySlice,
                                    hourlyAverages, monthOfHour)


def make_results() -> Results:
    res = Results()
    res.addResult('C_pv', 5000.0, 'W', 'PV peak capacity')
    res.addResult('C_bat', 0.0, 'Wh', 'Battery capacity')
    res.addResult('cost_total', 812.5, 'EUR/a', 'Total annual costs')
    res.addResult('E_grid_buy', 1.2e6, 'Wh', 'Grid import')
    res.addResult('autonomy', 42.0, '%', 'Autonomy')
    res.addResult('P_pv', np.arange(NUM_HOURS, dtype=float), 'Wh', 'PV production')
    res.addResult('solver_return_status', 'Optimal')
    return res


def test_add_result_sets_exposed_attributes():
    res = make_results()

    assert res.C_pv == 5000.0
    assert res.autonomy == 42.0
    assert res['E_grid_buy'] == 1.2e6
    assert 'P_pv' in res
    assert 'P_ev' not in res
    assert res.units['C_pv'] == 'W'
    assert res.description('cost_total') == 'Total annual costs'


def test_add_result_keeps_unit_and_description():
    res = make_results()

    res.addResult('C_pv', 6000.0)

    assert res.units['C_pv'] == 'W'
    assert res.description('C_pv') == 'PV peak capacity'
    assert res.keys.count('C_pv') == 1


def test_frozen_results_are_read_only():
    res = make_results().freeze()

    with pytest.raises(TypeError):
        res.addResult('C_pv', 1.0)
    with pytest.raises(TypeError):
        res['C_bat'] = 1.0
    with pytest.raises(TypeError):
        res.C_pv = 1.0
    with pytest.raises(ValueError):
        res['P_pv'][0] = 1.0


def test_save_and_load(tmp_path):
    res = make_results()
    filename = str(tmp_path / 'results')

    res.save(filename)
    loaded = Results.fromFile(filename + '.npz')

    assert loaded.keys == res.keys
    assert loaded.C_pv == 5000.0
    np.testing.assert_array_equal(loaded['P_pv'], res['P_pv'])
    assert str(loaded['solver_return_status']) == 'Optimal'
    assert loaded.units['E_grid_buy'] == 'Wh'
    assert loaded.frozen


def test_format_values_with_comparison():
    res = make_results()
    other = Results()
    other.addResult('C_pv', 3000.0, 'W')

    table = res.formatValues(['C_pv', 'C_bat', 'P_pv'], comparewith=other)

    assert 'Value (Comp)' in table
    assert '5.00 k' in table
    assert '3.00 k' in table
    assert 'NumpyArray' in table


def test_print_groups(capsys):
    res = make_results()

    res.printSizings()
    res.printTotals()
    out = capsys.readouterr().out

    assert 'C_pv' in out
    assert 'E_grid_buy' in out
    assert 'autonomy' in out


def test_check_series():
    values = checkSeries('x', [0.5] * NUM_HOURS, 0, 1)

    assert values.dtype == float
    with pytest.raises(ConfigurationError):
        checkSeries('x', [0.5] * 10)
    with pytest.raises(DataError):
        checkSeries('x', [2.0] * NUM_HOURS, 0, 1, error=DataError)
    with pytest.raises(ConfigurationError):
        checkSeries('x', ['a'] * NUM_HOURS)


def test_time_helpers():
    assert monthOfHour().shape == (NUM_HOURS,)
    assert monthOfHour()[-1] == 11
    assert dateString(0) == 'Jan 1'
    assert dateString(31) == 'Feb 1'
    assert dateString(364) == 'Dec 31'
    assert daySlice(1) == slice(24, 48)
    assert daySlice(365) is None


def test_hourly_averages():
    values = np.tile(np.arange(24, dtype=float), 365)

    np.testing.assert_allclose(hourlyAverages(values), np.arange(24))


def write_csv_files(tmp_path, rows=NUM_HOURS, solar=0.5):
    irradiance_path = tmp_path / 'irradiance.csv'
    demand_path = tmp_path / 'demand.csv'
    pd.DataFrame({'Time': range(rows), 'Solar': [solar] * rows}).to_csv(irradiance_path, index=False)
    pd.DataFrame({'Time': range(rows), 'Hot Water': [100.0] * rows, 'Space Heat': [200.0] * rows,
                  'Electricity': [300.0] * rows, 'Charge': [0.0] * rows}).to_csv(demand_path, index=False)
    return str(irradiance_path), str(demand_path)


def test_time_series_from_csv(tmp_path):
    irradiance_path, demand_path = write_csv_files(tmp_path, rows=NUM_HOURS + 24)

    data = TimeSeries.fromCsv(irradiance_path, demand_path)

    assert data.irradiance.shape == (NUM_HOURS,)
    assert data.demand.sum() == pytest.approx(300.0 * NUM_HOURS)
    assert data.hot_water[0] == 100.0
    assert data.space_heat[0] == 200.0


def test_time_series_from_short_csv(tmp_path):
    irradiance_path, demand_path = write_csv_files(tmp_path, rows=100)

    with pytest.raises(DataError):
        TimeSeries.fromCsv(irradiance_path, demand_path)


def test_time_series_from_csv_out_of_range(tmp_path):
    irradiance_path, demand_path = write_csv_files(tmp_path, solar=1.5)

    with pytest.raises(DataError):
        TimeSeries.fromCsv(irradiance_path, demand_path)


def test_time_series_missing_file(tmp_path):
    with pytest.raises(DataError):
        TimeSeries.fromCsv(str(tmp_path / 'missing.csv'), str(tmp_path / 'missing.csv'))


def test_time_series_reads_outdoor_temperature(tmp_path):
    irradiance_path, demand_path = write_csv_files(tmp_path)
    pd.DataFrame({'Time': range(NUM_HOURS), 'Solar': [0.5] * NUM_HOURS,
                  'Temperature': [12.5] * NUM_HOURS}).to_csv(irradiance_path, index=False)

    data = TimeSeries.fromCsv(irradiance_path, demand_path)

    assert data.T_amb.shape == (NUM_HOURS,)
    assert data.T_amb[0] == 12.5


def test_time_series_without_temperature(tmp_path):
    data = TimeSeries.fromCsv(*write_csv_files(tmp_path))

    assert data.T_amb is None
