from solarsystemopt.config import (BuildingType, ConstructionPeriod, HeatingType, InsulationLevel,
                                   OptimizationConfig)
from solarsystemopt.errors import (ConfigurationError, DataError, InfeasibleModelError, SolarSystemOptError,
                                   SolverError)
from solarsystemopt.run import runSimpleOpt
from solarsystemopt.tariff import ElectricityRate, HourRange, RateTier, WeekdayType
from solarsystemopt.utility import Results, TimeSeries
