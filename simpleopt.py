import argparse
import logging
import os
import sys

import matplotlib

from solarsystemopt import OptimizationConfig, SolarSystemOptError, TimeSeries, runSimpleOpt
from solarsystemopt.finance import calculateOptimizedROI

# first day of each season and a few more
DEFAULT_DAYS = [0, 80, 172, 266, 100, 200, 300]


def parseArgs(argv=None):
    parser = argparse.ArgumentParser(description='Size and dispatch a PV / battery system over one year.')
    parser.add_argument('mode', nargs='?', default='run', choices=['run', 'days'],
                        help="'run': optimize and plot the average day, 'days': additionally plot single days")
    # The provided irradiance file should have the columns 'Time,Solar' (fraction of the peak),
    # the demand file 'Time,Hot Water,Space Heat,Electricity,Charge' (Wh per hour).
    parser.add_argument('--irradiance', default='data/solar_irradiance.csv', help='csv file with the irradiance')
    parser.add_argument('--demand', default='data/electricity_demand.csv', help='csv file with the demand')
    parser.add_argument('--config', default=None, help='yaml file with configuration values')
    parser.add_argument('--pv-max', type=float, default=10000.0, help='maximum PV capacity [W]')
    parser.add_argument('--output', default='results/simpleopt.npz', help='npz file for the results')
    parser.add_argument('--plot-dir', default='results/plots', help='directory for the plots')
    parser.add_argument('--days', type=int, nargs='+', default=DEFAULT_DAYS, help='days of the year to plot')
    parser.add_argument('--estimate-heat-demand', action='store_true',
                        help='estimate the space heat demand from the building instead of using the csv')
    parser.add_argument('--roi-years', type=int, default=20, help='years for the ROI calculation')
    parser.add_argument('--no-plots', action='store_true')
    parser.add_argument('--log-level', default='INFO')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parseArgs(argv)
    logging.basicConfig(level=args.log_level.upper(), format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    try:
        config = OptimizationConfig() if args.config is None else OptimizationConfig.fromYaml(args.config)
        data = TimeSeries.fromCsv(args.irradiance, args.demand)

        heat_demand = None if args.estimate_heat_demand else data.space_heat
        res = runSimpleOpt(config, args.pv_max, data.irradiance, data.demand,
                           heat_demand=heat_demand, hot_water_demand=data.hot_water, T_amb=data.T_amb)
    except SolarSystemOptError as e:
        print(f"Optimization failed ({e.kind}): {e}", file=sys.stderr)
        return 1

    output_dir = os.path.dirname(args.output)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
    res.save(args.output)

    print("\nOptimal Sizings:\n" + "-" * 20)
    res.printSizings()
    print("\nCosts:\n" + "-" * 20)
    res.printCosts()
    print("\nAnnual Totals:\n" + "-" * 20)
    res.printTotals()

    roi = calculateOptimizedROI(res, config, args.roi_years)
    payback = '-' if roi.payback_period is None else f"{roi.payback_period:.1f} years"
    print(f"\nROI: {roi.roi * 100:.1f} %, NPV: {roi.net_present_value:.0f}, payback: {payback}")

    if not args.no_plots:
        matplotlib.use('Agg')
        from solarsystemopt import plotting

        os.makedirs(args.plot_dir, exist_ok=True)
        plotting.plotAverageDay(res, os.path.join(args.plot_dir, 'average_day.png'))
        plotting.plotWeeklyAverages(res, os.path.join(args.plot_dir, 'weekly_averages.png'))
        if args.mode == 'days':
            plotting.plotDays(res, args.days, args.plot_dir)

    return 0


if __name__ == '__main__':
    sys.exit(main())
