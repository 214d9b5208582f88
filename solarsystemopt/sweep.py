import dataclasses
import logging
from concurrent.futures import ProcessPoolExecutor
from typing import List, Optional, Sequence

from solarsystemopt.config import OptimizationConfig
from solarsystemopt.errors import SolarSystemOptError
from solarsystemopt.run import runSimpleOpt
from solarsystemopt.utility import Results

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class SweepPoint:
    """ Outcome of one run of a sweep, either results or the kind and message of the error."""
    pv_cap_w: float
    results: Optional[Results] = None
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.results is not None


def _runPoint(config: OptimizationConfig, pv_cap_w: float, kwargs: dict) -> SweepPoint:
    try:
        results = runSimpleOpt(config, float(pv_cap_w), **kwargs)
    except SolarSystemOptError as e:
        logger.warning("Run with C_pv = %.0f W failed: %s", pv_cap_w, e)
        return SweepPoint(pv_cap_w, error_kind=e.kind, error_message=str(e))
    return SweepPoint(pv_cap_w, results)


def runPVSweep(config: OptimizationConfig, pv_capacities_w: Sequence[float], solar_irradiance: Sequence[float],
               electricity_demand: Sequence[float], max_workers: int = None, **kwargs) -> List[SweepPoint]:
    """ Runs one optimization per PV capacity, with the PV capacity pinned to that value.
    The runs are independent and distributed over a process pool, the points are returned in the
    order of pv_capacities_w. A failed run does not stop the sweep, its point carries the error instead.
    Further keyword arguments are passed to runSimpleOpt.
    """
    config = dataclasses.replace(config, pv_fixed=True)
    kwargs = dict(kwargs, solar_irradiance=solar_irradiance, electricity_demand=electricity_demand)

    logger.info("Sweeping %d PV capacities", len(pv_capacities_w))
    if max_workers == 1:
        return [_runPoint(config, pv_cap_w, kwargs) for pv_cap_w in pv_capacities_w]

    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(_runPoint, config, pv_cap_w, kwargs) for pv_cap_w in pv_capacities_w]
        return [future.result() for future in futures]
