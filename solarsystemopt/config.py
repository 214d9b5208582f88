import logging
import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import List, Optional, Tuple

import dacite
import yaml

from solarsystemopt.errors import ConfigurationError

logger = logging.getLogger(__name__)


class BuildingType(Enum):
    SINGLE_FAMILY = 'single_family'
    TERRACED = 'terraced'
    MULTI_FAMILY = 'multi_family'
    APARTMENT = 'apartment'


class ConstructionPeriod(Enum):
    BEFORE_1900 = 'before_1900'
    BETWEEN_1901_AND_1936 = '1901_1936'
    BETWEEN_1937_AND_1959 = '1937_1959'
    BETWEEN_1960_AND_1979 = '1960_1979'
    BETWEEN_1980_AND_2006 = '1980_2006'
    AFTER_2007 = 'after_2007'


class InsulationLevel(Enum):
    POOR = 'poor'  # national minimum requirement
    MODERATE = 'moderate'  # improved standard
    GOOD = 'good'  # ambitious standard


class HeatingType(Enum):
    FLOOR = 'floor'
    RADIATOR = 'radiator'


@dataclass(frozen=True)
class OptimizationConfig:
    """ All parameters of one optimization run.

    Power is given in W, energy in Wh (one time step is one hour, so both are numerically equal per step).
    Investment costs are per kW / kWh, tariffs per kWh, as they are usually quoted.
    The config validates itself on construction, use dataclasses.replace() to derive variants.
    """

    # ---- INVESTMENT ----
    inv_pv: float = 465.0  # per kWp
    inv_bat: float = 200.0  # per kWh
    inv_hwat: float = 60.0  # per kWh
    inv_grid: float = 0.0  # per kW, > 0 turns the grid connection into a sizing variable
    inv_heat_pump: float = 0.0  # per kW (electric)

    # ---- ECONOMICS ----
    annuity: float = 0.1
    fc_grid: float = 0.30  # per kWh
    feed_in_tariff: float = 0.079  # per kWh

    # ---- BATTERY ----
    storage_loss_bat: float = 0.001  # hourly self discharge
    eta_in_bat: float = 0.95
    eta_out_bat: float = 0.95
    c_rate_limit: float = 0.3  # fraction of the capacity per hour
    bat_value: float = 20000.0  # Wh, upper bound (or fixed value) of the battery capacity
    bat_fixed: bool = False
    bat_initial_soc: Optional[float] = None  # fraction of the capacity at hour 0

    # ---- PV / GRID ----
    pv_fixed: bool = False
    grid_capacity_max_w: float = math.inf
    max_feed_in_w: Optional[float] = None  # None: no export cap, 0: no feed-in at all

    # ---- DEMAND ----
    electricity_usage: Optional[float] = None  # Wh/year, rescales the demand series
    monthly_demand: Optional[Tuple[float, ...]] = None  # 12 weights

    # ---- HOT WATER STORAGE ----
    hwat_enabled: bool = False
    storage_loss_hwat: float = 0.01
    eta_in_hwat: float = 0.90
    eta_out_hwat: float = 0.90
    hwat_value: float = 20000.0  # Wh

    # ---- HEAT PUMP ----
    heat_pump_enabled: bool = False
    house_square_meters: float = 100.0
    building_type: BuildingType = BuildingType.SINGLE_FAMILY
    construction_period: ConstructionPeriod = ConstructionPeriod.BEFORE_1900
    insulation_standard: InsulationLevel = InsulationLevel.MODERATE
    heating_type: HeatingType = HeatingType.FLOOR
    heat_pump_cop: Optional[float] = None  # constant COP, None: hourly COP from heating_type and outdoor temperature
    heat_pump_capacity_max_w: float = math.inf

    # ---- ELECTRIC CAR ----
    electric_car_enabled: bool = False
    car_daily_km: float = 50.0
    car_efficiency_kwh_per_km: float = 0.2
    car_battery_size_kwh: float = 50.0
    car_charger_power_kw: float = 11.0
    car_charge_during_day: bool = True
    car_day_start_hour: int = 6
    car_day_end_hour: int = 18

    # ---- MISC ----
    electricity_price_increase: float = 0.0  # per year, only used for the ROI
    optimize_for_autonomy: bool = False

    # ---- SOLVER ----
    solver: str = 'highs'
    solver_time_limit_s: Optional[float] = None
    solver_iteration_limit: Optional[int] = None

    def __post_init__(self):
        if self.monthly_demand is not None and not isinstance(self.monthly_demand, tuple):
            object.__setattr__(self, 'monthly_demand', tuple(self.monthly_demand))
        self.validate()

    @property
    def grid_investment_enabled(self) -> bool:
        return self.inv_grid > 0

    @property
    def curtailment_enabled(self) -> bool:
        """ PV can only be curtailed if the export is capped, otherwise every surplus is exported."""
        return self.max_feed_in_w is not None

    @property
    def car_daily_energy_wh(self) -> float:
        if not self.electric_car_enabled:
            return 0.0
        return min(self.car_daily_km * self.car_efficiency_kwh_per_km, self.car_battery_size_kwh) * 1000

    @property
    def car_hourly_limit_w(self) -> float:
        return min(self.car_battery_size_kwh, self.car_charger_power_kw) * 1000

    def carChargingHours(self) -> List[int]:
        """ Hours of the day (0..23) in which the car may charge."""
        day_hours = set(range(self.car_day_start_hour, self.car_day_end_hour))
        if self.car_charge_during_day:
            return sorted(day_hours)
        return [hour for hour in range(24) if hour not in day_hours]

    def validate(self):
        """ Raises a ConfigurationError for the first invalid parameter found."""
        for name in ['inv_pv', 'inv_bat', 'inv_hwat', 'inv_grid', 'inv_heat_pump', 'annuity', 'fc_grid',
                     'feed_in_tariff', 'c_rate_limit', 'bat_value', 'hwat_value', 'grid_capacity_max_w',
                     'heat_pump_capacity_max_w', 'house_square_meters', 'car_daily_km',
                     'car_efficiency_kwh_per_km', 'car_battery_size_kwh', 'car_charger_power_kw']:
            _check_non_negative(name, getattr(self, name))

        for name in ['storage_loss_bat', 'storage_loss_hwat']:
            _check_fraction(name, getattr(self, name))

        # efficiencies divide the discharge, zero is not allowed
        for name in ['eta_in_bat', 'eta_out_bat', 'eta_in_hwat', 'eta_out_hwat']:
            value = getattr(self, name)
            _check_number(name, value)
            if not 0 < value <= 1:
                raise ConfigurationError(f"'{name}' has to be in (0, 1], got {value}")

        if self.bat_initial_soc is not None:
            _check_fraction('bat_initial_soc', self.bat_initial_soc)
        if self.max_feed_in_w is not None:
            _check_non_negative('max_feed_in_w', self.max_feed_in_w)
        if self.electricity_usage is not None:
            _check_non_negative('electricity_usage', self.electricity_usage)
            if math.isinf(self.electricity_usage):
                raise ConfigurationError("'electricity_usage' has to be finite")
        # the C-rate multiplies C_bat in the constraint rows
        if math.isinf(self.c_rate_limit):
            raise ConfigurationError("'c_rate_limit' has to be finite")
        if math.isinf(self.bat_value) and self.bat_fixed:
            raise ConfigurationError("'bat_value' has to be finite if the battery is fixed")
        if math.isinf(self.hwat_value) and self.hwat_enabled:
            raise ConfigurationError("'hwat_value' has to be finite")

        if self.monthly_demand is not None:
            if len(self.monthly_demand) != 12:
                raise ConfigurationError(f"'monthly_demand' needs exactly 12 weights, got {len(self.monthly_demand)}")
            for month, weight in enumerate(self.monthly_demand):
                _check_number(f'monthly_demand[{month}]', weight)
                if weight <= 0 or math.isinf(weight):
                    raise ConfigurationError(f"'monthly_demand[{month}]' has to be positive, got {weight}")

        if self.heat_pump_cop is not None:
            _check_number('heat_pump_cop', self.heat_pump_cop)
            if self.heat_pump_cop <= 0 or math.isinf(self.heat_pump_cop):
                raise ConfigurationError(f"'heat_pump_cop' has to be positive and finite, got {self.heat_pump_cop}")

        if not 0 <= self.car_day_start_hour < self.car_day_end_hour <= 24:
            raise ConfigurationError(f"car day window [{self.car_day_start_hour}, {self.car_day_end_hour}) "
                                     f"has to satisfy 0 <= start < end <= 24")

        if self.electric_car_enabled:
            deliverable = len(self.carChargingHours()) * self.car_hourly_limit_w
            if self.car_daily_energy_wh > deliverable:
                raise ConfigurationError(f"The car needs {self.car_daily_energy_wh:.0f} Wh per day, but the charging "
                                         f"window can deliver at most {deliverable:.0f} Wh")

        for name in ['solver_time_limit_s', 'solver_iteration_limit']:
            value = getattr(self, name)
            if value is not None and (not _is_number(value) or value <= 0):
                raise ConfigurationError(f"'{name}' has to be positive, got {value}")
        if not isinstance(self.solver, str) or not self.solver:
            raise ConfigurationError("'solver' has to be the name of a casadi conic plugin")

    @staticmethod
    def fromDict(values: dict) -> 'OptimizationConfig':
        """ Builds a config from plain values (e.g. parsed yaml), enums are given by their value."""
        known = {f.name for f in fields(OptimizationConfig)}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        values = dict(values)
        if values.get('monthly_demand') is not None:
            values['monthly_demand'] = tuple(values['monthly_demand'])
        try:
            return dacite.from_dict(OptimizationConfig, values,
                                    config=dacite.Config(cast=[Enum], type_hooks={float: float}))
        except dacite.DaciteError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
        except ValueError as e:
            # unknown enum values
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @staticmethod
    def fromYaml(file_path: str) -> 'OptimizationConfig':
        logger.debug("Loading configuration from %s", file_path)
        try:
            with open(file_path, 'r') as file:
                values = yaml.safe_load(file) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Could not read the configuration {file_path}: {e}") from e
        if not isinstance(values, dict):
            raise ConfigurationError(f"{file_path} does not contain a mapping of configuration values")
        return OptimizationConfig.fromDict(values)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_number(name: str, value):
    if not _is_number(value) or math.isnan(value):
        raise ConfigurationError(f"'{name}' has to be a number, got {value!r}")


def _check_non_negative(name: str, value):
    _check_number(name, value)
    if value < 0:
        raise ConfigurationError(f"'{name}' has to be non-negative, got {value}")


def _check_fraction(name: str, value):
    _check_number(name, value)
    if not 0 <= value <= 1:
        raise ConfigurationError(f"'{name}' has to be in [0, 1], got {value}")
