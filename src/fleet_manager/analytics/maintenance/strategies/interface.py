from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence

from src.fleet_manager.vehicles.schemas import MaintenanceRecord


class IServiceDateStrategy(ABC):
    @abstractmethod
    def predict(
        self,
        service_type: str,
        history: Sequence[MaintenanceRecord],
        current_odometer_km: int,
        now: datetime,
    ) -> Optional[datetime]:
        """
        Predict when a service is next due.
        ``history`` holds records of that service only, newest first.
        """
        ...
