import numpy as np
import pandas as pd
import pytest

from conftest import synthetic_demand, synthetic_irradiance
from simpleopt import main
from solarsystemopt.utility import NUM_HOURS, Results


@pytest.fixture()
def input_files(tmp_path):
    irradiance_path = tmp_path / 'irradiance.csv'
    demand_path = tmp_path / 'demand.csv'
    pd.DataFrame({'Time': range(NUM_HOURS), 'Solar': synthetic_irradiance()}).to_csv(irradiance_path, index=False)
    pd.DataFrame({'Time': range(NUM_HOURS), 'Hot Water': np.zeros(NUM_HOURS), 'Space Heat': np.zeros(NUM_HOURS),
                  'Electricity': synthetic_demand(), 'Charge': np.zeros(NUM_HOURS)}).to_csv(demand_path, index=False)
    return str(irradiance_path), str(demand_path)


def test_run_saves_results(input_files, tmp_path, capsys):
    irradiance_path, demand_path = input_files
    output = tmp_path / 'out' / 'results.npz'

    code = main(['run', '--irradiance', irradiance_path, '--demand', demand_path, '--output', str(output),
                 '--pv-max', '6000', '--no-plots', '--log-level', 'WARNING'])

    assert code == 0
    res = Results.fromFile(str(output))
    assert float(res['C_pv']) <= 6000.0 + 1e-6
    out = capsys.readouterr().out
    assert 'Optimal Sizings' in out
    assert 'ROI' in out


def test_run_with_config_and_plots(input_files, tmp_path):
    irradiance_path, demand_path = input_files
    config_path = tmp_path / 'config.yaml'
    config_path.write_text('bat_value: 0.0\nfeed_in_tariff: 0.05\n')
    plot_dir = tmp_path / 'plots'

    code = main(['days', '--irradiance', irradiance_path, '--demand', demand_path, '--config', str(config_path),
                 '--output', str(tmp_path / 'results.npz'), '--plot-dir', str(plot_dir), '--days', '10',
                 '--log-level', 'WARNING'])

    assert code == 0
    assert (plot_dir / 'average_day.png').exists()
    assert (plot_dir / 'day_010.png').exists()


def test_invalid_config_fails(input_files, tmp_path, capsys):
    irradiance_path, demand_path = input_files
    config_path = tmp_path / 'config.yaml'
    config_path.write_text('no_such_key: 1\n')

    code = main(['run', '--irradiance', irradiance_path, '--demand', demand_path, '--config', str(config_path),
                 '--output', str(tmp_path / 'results.npz'), '--no-plots'])

    assert code == 1
    assert 'configuration' in capsys.readouterr().err


def test_missing_input_fails(tmp_path, capsys):
    code = main(['run', '--irradiance', str(tmp_path / 'missing.csv'), '--demand', str(tmp_path / 'missing.csv'),
                 '--no-plots'])

    assert code == 1
    assert 'data' in capsys.readouterr().err
