from datetime import datetime
from typing import Optional, Sequence

from src.fleet_manager.analytics.constants import (
    DEFAULT_STANDARD_INTERVAL_MONTHS,
    STANDARD_INTERVAL_MONTHS,
)
from src.fleet_manager.analytics.enums import ServiceKind
from src.fleet_manager.analytics.maintenance.strategies.interface import (
    IServiceDateStrategy,
)
from src.fleet_manager.analytics.utils import add_months
from src.fleet_manager.vehicles.schemas import MaintenanceRecord


class StandardIntervalStrategy(IServiceDateStrategy):
    """Fixed calendar interval per service kind, counted from the last service."""

    def predict(
        self,
        service_type: str,
        history: Sequence[MaintenanceRecord],
        current_odometer_km: int,
        now: datetime,
    ) -> Optional[datetime]:
        if not history:
            return None
        months = STANDARD_INTERVAL_MONTHS.get(
            ServiceKind.from_label(service_type), DEFAULT_STANDARD_INTERVAL_MONTHS
        )
        return add_months(history[0].date, months)
