import logging
from typing import Dict, Sequence, Tuple

import numpy as np

from solarsystemopt.config import BuildingType, ConstructionPeriod, HeatingType, InsulationLevel, OptimizationConfig
from solarsystemopt.errors import DataError
from solarsystemopt.utility import NUM_HOURS, checkSeries, monthOfHour

logger = logging.getLogger(__name__)


class Constants:
    # ----- HEATING -----
    T_indoor = 20.0  # [degC] desired indoor temperature
    # approximate monthly average outdoor temperatures (Spain) [degC]
    T_outdoor_monthly = [8.0, 9.0, 12.0, 14.0, 18.0, 22.0, 25.0, 25.0, 22.0, 17.0, 12.0, 9.0]

    # ----- HEAT PUMP -----
    eta_hp = 0.5  # fraction of the carnot COP
    T_supply = {HeatingType.FLOOR: 35.0, HeatingType.RADIATOR: 55.0}  # [degC] supply temperature
    min_T_lift = 5.0  # [K]
    max_COP = 7.0


# annual space heating need [kWh/m^2/year] per construction period and building type,
# given as (national minimum requirement, improved standard, ambitious standard)
HEATING_NEED: Dict[ConstructionPeriod, Dict[BuildingType, Tuple[float, float, float]]] = {
    ConstructionPeriod.BEFORE_1900: {
        BuildingType.SINGLE_FAMILY: (10.6, 10.7, 11.0),
        BuildingType.TERRACED: (7.1, 4.0, 3.4),
        BuildingType.MULTI_FAMILY: (11.8, 6.1, 6.1),
        BuildingType.APARTMENT: (7.8, 5.9, 5.6),
    },
    ConstructionPeriod.BETWEEN_1901_AND_1936: {
        BuildingType.SINGLE_FAMILY: (14.8, 8.0, 7.1),
        BuildingType.TERRACED: (17.9, 11.7, 11.5),
        BuildingType.MULTI_FAMILY: (7.7, 4.9, 5.6),
        BuildingType.APARTMENT: (8.5, 4.5, 6.1),
    },
    ConstructionPeriod.BETWEEN_1937_AND_1959: {
        BuildingType.SINGLE_FAMILY: (8.1, 4.1, 3.4),
        BuildingType.TERRACED: (20.7, 15.2, 15.2),
        BuildingType.MULTI_FAMILY: (11.3, 5.5, 5.1),
        BuildingType.APARTMENT: (7.4, 3.6, 3.1),
    },
    ConstructionPeriod.BETWEEN_1960_AND_1979: {
        BuildingType.SINGLE_FAMILY: (12.4, 10.2, 9.1),
        BuildingType.TERRACED: (7.6, 5.0, 6.6),
        BuildingType.MULTI_FAMILY: (9.8, 6.3, 6.0),
        BuildingType.APARTMENT: (4.3, 2.3, 2.3),
    },
    ConstructionPeriod.BETWEEN_1980_AND_2006: {
        BuildingType.SINGLE_FAMILY: (5.8, 4.7, 5.7),
        BuildingType.TERRACED: (5.8, 5.4, 6.7),
        BuildingType.MULTI_FAMILY: (3.9, 3.3, 2.8),
        BuildingType.APARTMENT: (2.3, 1.9, 3.5),
    },
    ConstructionPeriod.AFTER_2007: {
        BuildingType.SINGLE_FAMILY: (6.4, 2.9, 2.4),
        BuildingType.TERRACED: (2.5, 2.2, 1.9),
        BuildingType.MULTI_FAMILY: (3.5, 1.9, 1.5),
        BuildingType.APARTMENT: (2.4, 1.5, 1.2),
    },
}

_INSULATION_COLUMN = {InsulationLevel.POOR: 0, InsulationLevel.MODERATE: 1, InsulationLevel.GOOD: 2}


def annualHeatingDemandPerM2(building_type: BuildingType, construction_period: ConstructionPeriod,
                             insulation_standard: InsulationLevel) -> float:
    """ Specific annual space heating demand [kWh/m^2/year]."""
    return HEATING_NEED[construction_period][building_type][_INSULATION_COLUMN[insulation_standard]]


def defaultHeatingProfile() -> np.ndarray:
    """ Hourly heating profile from the degree hours of the monthly outdoor temperatures.
    Constant within a month, zero in months warmer than the indoor temperature."""
    degree = np.maximum(Constants.T_indoor - np.asarray(Constants.T_outdoor_monthly), 0.0)
    return degree[monthOfHour()]


def estimateHeatDemand(house_square_meters: float, building_type: BuildingType,
                       construction_period: ConstructionPeriod, insulation_standard: InsulationLevel,
                       profile: Sequence[float] = None) -> np.ndarray:
    """ Hourly space heat demand [Wh].
    The annual demand (specific demand * floor area) is distributed proportionally to the profile,
    which defaults to defaultHeatingProfile().
    """
    specific = annualHeatingDemandPerM2(building_type, construction_period, insulation_standard)
    total_annual_demand = specific * house_square_meters * 1000  # Wh/year

    if profile is None:
        profile = defaultHeatingProfile()
    profile = checkSeries('heating_profile', profile, 0, error=DataError)
    profile_sum = profile.sum()
    if profile_sum <= 0:
        raise DataError("Heat demand profile sum is zero")

    logger.debug("Annual heat demand: %.1f kWh/m^2 * %.0f m^2", specific, house_square_meters)
    return profile / profile_sum * total_annual_demand


def heatDemandForConfig(config: OptimizationConfig, profile: Sequence[float] = None) -> np.ndarray:
    return estimateHeatDemand(config.house_square_meters, config.building_type, config.construction_period,
                              config.insulation_standard, profile)


def copFromTemperature(T_amb: Sequence[float], heating_type: HeatingType) -> np.ndarray:
    """ Hourly COP of an air source heat pump as a fraction of the carnot COP.
    T_amb: outdoor temperature [degC]
    """
    T_amb = np.asarray(T_amb, dtype=float)
    T_sup = Constants.T_supply[heating_type] + 273.15  # [K]
    T_lift = np.maximum(T_sup - (T_amb + 273.15), Constants.min_T_lift)  # [K]
    COP = Constants.eta_hp * T_sup / T_lift
    return np.clip(COP, 1.0, Constants.max_COP)


def defaultOutdoorTemperature() -> np.ndarray:
    """ Hourly outdoor temperature [degC], the monthly averages held constant over each month."""
    return np.asarray(Constants.T_outdoor_monthly)[monthOfHour()]


def copForConfig(config: OptimizationConfig, T_amb: Sequence[float] = None) -> np.ndarray:
    """ Hourly COP of the heat pump.
    config.heat_pump_cop is used for every hour if set, otherwise the COP follows the outdoor
    temperature and the supply temperature of config.heating_type.
    T_amb: hourly outdoor temperature [degC], the monthly averages if None
    """
    if config.heat_pump_cop is not None:
        return np.full(NUM_HOURS, float(config.heat_pump_cop))
    if T_amb is None:
        T_amb = defaultOutdoorTemperature()
    else:
        T_amb = checkSeries('T_amb', T_amb)
    logger.debug("COP from the outdoor temperature, %s heating", config.heating_type.value)
    return copFromTemperature(T_amb, config.heating_type)
