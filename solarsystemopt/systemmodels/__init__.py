from typing import List

from solarsystemopt.config import OptimizationConfig
from solarsystemopt.systemmodels.battery import Battery
from solarsystemopt.systemmodels.electriccar import ElectricCar
from solarsystemopt.systemmodels.grid import Grid
from solarsystemopt.systemmodels.heatpump import HeatPump
from solarsystemopt.systemmodels.hotwater import HotWaterStorage
from solarsystemopt.systemmodels.pv import PVSystem
from solarsystemopt.systemmodels.subsystem import ConstraintSet, ModelData, Subsystem


def createSubsystems(config: OptimizationConfig, data: ModelData) -> List[Subsystem]:
    """ The blocks of the energy system for the given configuration, disabled blocks are left out."""
    subsystems = [PVSystem(config, data), Battery(config, data), Grid(config, data)]
    if config.heat_pump_enabled:
        subsystems.append(HeatPump(config, data))
    if config.electric_car_enabled:
        subsystems.append(ElectricCar(config, data))
    if config.hwat_enabled:
        subsystems.append(HotWaterStorage(config, data))
    return subsystems
