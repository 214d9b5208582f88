import logging
import os
from typing import List, Sequence

import matplotlib.pyplot as plt
import numpy as np

from solarsystemopt.utility import HOURS_PER_DAY, Results, dateString, daySlice, hourlyAverages

logger = logging.getLogger(__name__)

# (key, label, color) of the flows shown in the profiles
PROFILE_LINES = [('P_load', 'Demand', 'k'),
                 ('P_pv_potential', 'PV', 'C1'),
                 ('P_grid_buy', 'Grid Import', 'C3'),
                 ('P_grid_sell', 'Grid Export', 'C2'),
                 ('P_hp', 'Heat Pump', 'C4'),
                 ('P_ev', 'Electric Car', 'C5')]


def calculate_weekly_average(data, time_values):
    weeks = np.unique(time_values // (24 * 7))  # Find unique weeks
    weekly_avg = []
    for week in weeks:
        mask = (time_values // (24 * 7)) == week
        weekly_avg.append(np.mean(data[mask]))
    return weeks, np.array(weekly_avg)


def _plotProfiles(ax_power, ax_energy, results: Results, index, averaged: bool):
    hours = np.arange(HOURS_PER_DAY)
    for key, label, color in PROFILE_LINES:
        values = np.asarray(results[key])[index]
        if averaged:
            values = hourlyAverages(values)
        if not np.any(values):
            # disabled subsystem
            continue
        ax_power.step(hours, values / 1e3, where='post', label=label, color=color)
    ax_power.set_ylabel('Power [kW]')
    ax_power.legend(loc='upper left')
    ax_power.grid(True, alpha=0.25)

    E_bat = np.asarray(results['E_bat'])[index]
    if averaged:
        E_bat = hourlyAverages(E_bat)
    ax_energy.plot(hours, E_bat / 1e3, color='C0', label='Battery')
    if float(results['C_bat']) > 0:
        ax_energy.axhline(float(results['C_bat']) / 1e3, color='grey', linestyle='--')
    ax_energy.set_ylabel('Energy [kWh]')
    ax_energy.set_xlabel('Hour of the day')
    ax_energy.set_xlim(0, HOURS_PER_DAY - 1)
    ax_energy.grid(True, alpha=0.25)


def plotAverageDay(results: Results, filename: str = None):
    """ Average day of the year: demand, PV, grid flows and battery energy."""
    fig, (ax_power, ax_energy) = plt.subplots(2, 1, figsize=(8, 7), sharex=True)
    _plotProfiles(ax_power, ax_energy, results, slice(None), averaged=True)
    ax_power.set_title('Average day')
    fig.tight_layout()
    if filename is not None:
        fig.savefig(filename)
        logger.info("Saved %s", filename)
    return fig


def plotDay(results: Results, day: int, filename: str = None):
    """ Profiles of a single day of the year (0..364)."""
    index = daySlice(day)
    if index is None:
        raise ValueError(f"Day {day} is out of range (0-364)")
    fig, (ax_power, ax_energy) = plt.subplots(2, 1, figsize=(8, 7), sharex=True)
    _plotProfiles(ax_power, ax_energy, results, index, averaged=False)
    ax_power.set_title(dateString(day))
    fig.tight_layout()
    if filename is not None:
        fig.savefig(filename)
    return fig


def plotDays(results: Results, days: Sequence[int], directory: str) -> List[str]:
    """ Saves one plot per day into directory, returns the file names."""
    os.makedirs(directory, exist_ok=True)
    filenames = []
    for day in days:
        filename = os.path.join(directory, f'day_{day:03d}.png')
        fig = plotDay(results, day, filename)
        plt.close(fig)
        filenames.append(filename)
    logger.info("Saved %d day plots to %s", len(filenames), directory)
    return filenames


def plotWeeklyAverages(results: Results, filename: str = None):
    """ Weekly averages of demand, PV production and grid import over the year."""
    time_values = np.asarray(results['timegrid'])
    fig = plt.figure(figsize=(10, 4))
    for key, label, color in PROFILE_LINES[:3]:
        weeks, weekly = calculate_weekly_average(np.asarray(results[key]), time_values)
        time_week = np.append(weeks * 7, (weeks[-1] + 1) * 7)  # days
        plt.stairs(weekly / 1e3, time_week, label=f'{label} (kW, weekly average)', color=color)
    plt.xlabel('Day')
    plt.ylabel('Power [kW]')
    plt.legend(loc='upper right')
    plt.grid(True, alpha=0.25)
    plt.tight_layout()
    if filename is not None:
        fig.savefig(filename)
    return fig
