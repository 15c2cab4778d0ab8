from typing import Sequence

from src.fleet_manager.analytics.maintenance.strategies.historical import (
    HistoricalIntervalStrategy,
)
from src.fleet_manager.analytics.maintenance.strategies.interface import (
    IServiceDateStrategy,
)
from src.fleet_manager.analytics.maintenance.strategies.standard import (
    StandardIntervalStrategy,
)
from src.fleet_manager.vehicles.schemas import MaintenanceRecord


class ServiceDateStrategyFactory:
    @staticmethod
    def create(history: Sequence[MaintenanceRecord]) -> IServiceDateStrategy:
        if len(history) >= 2:
            return HistoricalIntervalStrategy()
        return StandardIntervalStrategy()
