import casadi as ca
import numpy as np
from casadi.tools import entry

from solarsystemopt.systemmodels.subsystem import Subsystem
from solarsystemopt.utility import DAYS_PER_YEAR, HOURS_PER_DAY


class ElectricCar(Subsystem):
    """ Charging of an electric car.
    Every day the car has to receive its daily energy within the charging window of that day
    (day window [car_day_start_hour, car_day_end_hour) or the remaining night hours).
    """

    name = 'electric_car'
    mandatory_families = ['ev_daily_energy']

    def chargingMask(self) -> np.ndarray:
        """ 1 for the hours of the year in which the car may charge, 0 otherwise."""
        day_mask = np.zeros(HOURS_PER_DAY)
        day_mask[self.config.carChargingHours()] = 1
        return np.tile(day_mask, DAYS_PER_YEAR)

    def entries(self):
        return [entry('P_ev', shape=self.N)]

    def setBounds(self, lbw, ubw):
        ubw['P_ev'] = ca.DM(np.where(self.chargingMask() > 0, self.config.car_hourly_limit_w, 0.0))

    def addConstraints(self, w, constraints):
        # columns are the days of the year
        daily_charge = ca.sum1(ca.reshape(w['P_ev'], HOURS_PER_DAY, DAYS_PER_YEAR)).T
        constraints.addEquality('ev_daily_energy', daily_charge - self.config.car_daily_energy_wh)

    def demand(self, w):
        return w['P_ev']

    def outputs(self, w):
        return {
            'P_ev': {'value': w['P_ev'], 'type': 'profile', 'unit': 'Wh', 'description': 'Electric car charging'},
        }
