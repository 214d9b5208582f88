import logging
from typing import List, Optional, Sequence, Type, Union

import numpy as np
import pandas as pd
from tabulate import tabulate

from solarsystemopt.errors import ConfigurationError, DataError

logger = logging.getLogger(__name__)

NUM_HOURS = 8760  # one non-leap year
HOURS_PER_DAY = 24
DAYS_PER_YEAR = 365
HOURS_PER_MONTH = [744, 672, 744, 720, 744, 720, 744, 744, 720, 744, 720, 744]
MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']


def monthOfHour() -> np.ndarray:
    """ Month index (0..11) of every hour of the year."""
    return np.repeat(np.arange(12), HOURS_PER_MONTH)


def dateString(day: int) -> str:
    """ 'Jan 1' style label of a day of the year (0..364)."""
    remaining = day
    for month, hours in enumerate(HOURS_PER_MONTH):
        days = hours // HOURS_PER_DAY
        if remaining < days:
            return f"{MONTH_NAMES[month]} {remaining + 1}"
        remaining -= days
    raise ValueError(f"Day {day} is out of range (0-364)")


def checkSeries(name: str, values, lower: float = None, upper: float = None,
                error: Type[Exception] = ConfigurationError) -> np.ndarray:
    """ Converts a series into a float array of length NUM_HOURS and checks its range.
    Raises `error` (ConfigurationError for caller input, DataError for loaders) on violation."""
    try:
        array = np.asarray(values, dtype=float).ravel()
    except (TypeError, ValueError) as e:
        raise error(f"'{name}' is not a numeric series: {e}") from e
    if array.size != NUM_HOURS:
        raise error(f"'{name}' must have exactly {NUM_HOURS} hourly values, got {array.size}")
    if not np.all(np.isfinite(array)):
        raise error(f"'{name}' contains non-finite values")
    if lower is not None and array.min() < lower:
        raise error(f"'{name}' has values below {lower} (min {array.min()})")
    if upper is not None and array.max() > upper:
        raise error(f"'{name}' has values above {upper} (max {array.max()})")
    return array


class TimeSeries:
    """ The exogenous hourly data of one year.
        - irradiance: solar irradiance as a fraction of the peak [0, 1]
        - demand: electric household demand [Wh per hour]
        - hot_water: hot water demand [Wh per hour] (optional)
        - space_heat: space heat demand [Wh per hour] (optional)
        - T_amb: outdoor temperature [degC] (optional)
    """

    def __init__(self, irradiance, demand, hot_water=None, space_heat=None, T_amb=None,
                 error: Type[Exception] = ConfigurationError):
        self.irradiance = checkSeries('irradiance', irradiance, 0, 1, error)
        self.demand = checkSeries('demand', demand, 0, None, error)
        self.hot_water = None if hot_water is None else checkSeries('hot_water', hot_water, 0, None, error)
        self.space_heat = None if space_heat is None else checkSeries('space_heat', space_heat, 0, None, error)
        self.T_amb = None if T_amb is None else checkSeries('T_amb', T_amb, error=error)

    @staticmethod
    def fromCsv(irradiance_path: str, demand_path: str) -> 'TimeSeries':
        """ Loads the series from the two csv files.
        The irradiance file has the columns 'Time,Solar' and optionally 'Temperature' [degC],
        the demand file 'Time,Hot Water,Space Heat,Electricity,Charge'.
        Only the first NUM_HOURS rows are used.
        """
        irradiance = _readColumns(irradiance_path, ['Solar'], optional=['Temperature'])
        demand = _readColumns(demand_path, ['Hot Water', 'Space Heat', 'Electricity'])
        logger.info("Loaded %d irradiance values from %s and %d demand values from %s",
                    len(irradiance), irradiance_path, len(demand), demand_path)

        return TimeSeries(irradiance['Solar'].values[:NUM_HOURS],
                          demand['Electricity'].values[:NUM_HOURS],
                          hot_water=demand['Hot Water'].values[:NUM_HOURS],
                          space_heat=demand['Space Heat'].values[:NUM_HOURS],
                          T_amb=irradiance['Temperature'].values[:NUM_HOURS] if 'Temperature' in irradiance else None,
                          error=DataError)


def _readColumns(file_path: str, columns: List[str], optional: List[str] = ()) -> pd.DataFrame:
    try:
        raw_data = pd.read_csv(file_path, skipinitialspace=True)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DataError(f"Could not read {file_path}: {e}") from e
    missing = [col for col in columns if col not in raw_data.columns]
    if missing:
        raise DataError(f"{file_path} is missing the columns {missing}")
    columns = columns + [col for col in optional if col in raw_data.columns]
    data = raw_data[columns].apply(pd.to_numeric, errors='coerce')
    if data.isna().any().any():
        raise DataError(f"{file_path} contains values that are not numbers")
    if len(data) < NUM_HOURS:
        raise DataError(f"{file_path} has only {len(data)} rows, expected {NUM_HOURS}")
    return data


class Results:
    """ A class to store the results of the optimization problem,
    the optimal sizings, the hourly energy flows, annual totals and performance ratios.
    Also includes stats from the LP solver.

    A Results instance is frozen by the aggregator once complete, afterwards it is read only.
    Can be saved and loaded from a file using .save() and .fromFile().

    Use results.printAll() to print an overview in the console.
    """

    # Expose some results, for easier access
    timegrid: np.ndarray = np.nan
    C_pv: np.ndarray = np.nan
    C_bat: np.ndarray = np.nan
    C_grid: np.ndarray = np.nan
    C_hp: np.ndarray = np.nan
    C_hwat: np.ndarray = np.nan
    cost_total: np.ndarray = np.nan
    self_consumption: np.ndarray = np.nan
    autonomy: np.ndarray = np.nan

    def __init__(self):
        self._valueDict = {}
        self._unitDict = {}
        self._descriptionDict = {}
        self.keys: List[str] = []
        self._frozen = False

    @property
    def units(self) -> dict:
        return self._unitDict

    @property
    def frozen(self) -> bool:
        return self._frozen

    def addResult(self, name: str, value, unit: Union[str, List[str]] = None, description: str = None):
        """ Adds a result to the results dictionary, with the given name, value, unit and description."""
        if self._frozen:
            raise TypeError(f"Results are read only, cannot set '{name}'")
        if type(value) is not np.ndarray:
            value = np.array(value)
        self._valueDict[name] = value

        if unit is not None:
            self._unitDict[name] = unit
        else:
            # dont overwrite the unit if it is already set
            self._unitDict[name] = self._unitDict.get(name, '-')

        if description is not None:
            self._descriptionDict[name] = description
        else:
            # dont overwrite the description if it is already set
            self._descriptionDict[name] = self._descriptionDict.get(name, '-')

        if name not in self.keys:
            self.keys.append(name)

        # check if the name is also an attribute of the class, if yes, set
        if hasattr(type(self), name):
            object.__setattr__(self, name, value)

    def freeze(self) -> 'Results':
        for value in self._valueDict.values():
            value.flags.writeable = False
        self._frozen = True
        return self

    def description(self, name: str) -> str:
        return self._descriptionDict[name]

    def save(self, filename: str):
        # dumps the object into a npz file
        outdict = {}
        for name in self.keys:
            outdict[name + '_value'] = self._valueDict[name]
            outdict[name + '_unit'] = self._unitDict[name]
            outdict[name + '_description'] = self._descriptionDict[name]

        # make sure that the filename ends with .npz
        if not filename.endswith('.npz'):
            filename += '.npz'
        np.savez(filename, **outdict, names=self.keys)
        logger.info("Saved results to %s", filename)

    @staticmethod
    def fromFile(filename: str) -> 'Results':
        # loads the object from a npz file
        inDict = np.load(filename, allow_pickle=False)
        res = Results()
        for name in inDict['names']:
            res.addResult(str(name), inDict[name + '_value'], str(inDict[name + '_unit']),
                          str(inDict[name + '_description']))
        return res.freeze()

    def printAll(self, comparewith: 'Results' = None):
        self.printValues(self.keys, comparewith=comparewith)

    def printValues(self, keys: List[str], comparewith: 'Results' = None):
        """ Print a formatted table with the values of the given keys.
         A second 'Results' instance can be provided to compare the values side by side."""
        print(self.formatValues(keys, comparewith))

    def formatValues(self, keys: List[str], comparewith: 'Results' = None) -> str:
        table_data = []
        for key in keys:
            description = self._descriptionDict[key]
            unit = self._unitDict[key]
            value_str = self._formatValue(self._valueDict[key])
            row_data = [key, description, unit, value_str]

            if comparewith is not None:
                if key in comparewith.keys:
                    value_str_compar = self._formatValue(comparewith[key])
                else:
                    value_str_compar = '-'
                row_data.append(value_str_compar)

            table_data.append(row_data)

        headers = ['Key', 'Description', 'Unit', 'Value']
        colaling = ['left', 'left', 'left', 'right']
        if comparewith is not None:
            headers.append('Value (Comp)')
            colaling.append('right')
        return tabulate(table_data, headers=headers, tablefmt='rst', maxcolwidths=50, colalign=colaling)

    def printSizings(self, comparewith: 'Results' = None):
        self.printValues([key for key in self.keys if key.startswith('C_')], comparewith=comparewith)

    def printSolverStats(self, comparewith: 'Results' = None):
        self.printValues([key for key in self.keys if key.startswith('solver_') or key.startswith('lp_')],
                         comparewith=comparewith)

    def printCosts(self, comparewith: 'Results' = None):
        self.printValues([key for key in self.keys if key.startswith('cost_')], comparewith=comparewith)

    def printTotals(self, comparewith: 'Results' = None):
        keys = [key for key in self.keys if key.startswith('E_')]
        keys += [key for key in ['self_consumption', 'autonomy', 'autonomy_without_battery'] if key in self.keys]
        self.printValues(keys, comparewith=comparewith)

    def __getitem__(self, item):
        return self._valueDict[item]

    def __setitem__(self, key, value):
        self.addResult(key, value)

    def __contains__(self, item):
        return item in self._valueDict

    def __setattr__(self, key, value):
        if getattr(self, '_frozen', False):
            raise TypeError(f"Results are read only, cannot set '{key}'")
        super().__setattr__(key, value)

    def __repr__(self):
        return f"Results Instance, use results.printAll() to print the results."

    def _formatValue(self, value: np.ndarray):
        assert type(value) is np.ndarray, "The value should be a numpy array"
        if value.size > 8:
            return "NumpyArray " + str(value.shape)
        elif value.size == 1 and np.issubdtype(value.dtype, np.number):
            return self._formatEngineering(value)
        else:
            value_str = str(value).replace("\n", "")
            # cut away after 20 letters
            if len(value_str) > 23:
                value_str = value_str[:20] + '...'
            return value_str

    def _formatEngineering(self, value):
        """ formats the given value in engineering notation"""
        value = float(value)
        if value == 0 or not np.isfinite(value):
            return f"{value:.2f}"

        exponent = int(np.floor(np.log10(np.abs(value))) // 3 * 3)
        significand = value / 10 ** exponent

        # look up the exponent letter in a dictionary from -12 to 12
        exponent_dict = {3: 'k', 6: 'M', 9: 'G', 12: 'T', 0: '', -3: 'm', -6: 'u', -9: 'n', -12: 'p'}
        exponent_letter = exponent_dict.get(exponent, f'E{exponent}')

        return f"{significand:.2f} {exponent_letter}"


def hourlyAverages(values: Sequence[float]) -> np.ndarray:
    """ Average day profile (24 values) of an hourly series. Series of exactly one day are returned as is."""
    values = np.asarray(values, dtype=float)
    if values.size == HOURS_PER_DAY:
        return values.copy()
    hours = np.arange(values.size) % HOURS_PER_DAY
    sums = np.bincount(hours, weights=values, minlength=HOURS_PER_DAY)
    counts = np.bincount(hours, minlength=HOURS_PER_DAY)
    return np.divide(sums, counts, out=np.zeros(HOURS_PER_DAY), where=counts > 0)


def daySlice(day: int) -> Optional[slice]:
    if not 0 <= day < DAYS_PER_YEAR:
        return None
    return slice(day * HOURS_PER_DAY, (day + 1) * HOURS_PER_DAY)
