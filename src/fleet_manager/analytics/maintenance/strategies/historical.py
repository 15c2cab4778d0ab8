from datetime import datetime, timedelta
from statistics import fmean
from typing import Optional, Sequence

from src.fleet_manager.analytics.constants import (
    ASSUMED_KM_PER_MONTH,
    AVERAGE_DAYS_PER_MONTH,
)
from src.fleet_manager.analytics.maintenance.strategies.interface import (
    IServiceDateStrategy,
)
from src.fleet_manager.vehicles.schemas import MaintenanceRecord


class HistoricalIntervalStrategy(IServiceDateStrategy):
    """
    Learns the service interval from past records.

    Two candidate dates are derived, one from the average time between
    services and one from the average distance between services projected
    at ``km_per_month``. The earlier one is returned.
    """

    def __init__(self, km_per_month: float = ASSUMED_KM_PER_MONTH):
        self.km_per_month = km_per_month

    def predict(
        self,
        service_type: str,
        history: Sequence[MaintenanceRecord],
        current_odometer_km: int,
        now: datetime,
    ) -> Optional[datetime]:
        if len(history) < 2:
            return None

        pairs = list(zip(history, history[1:]))
        avg_seconds = fmean(
            (newer.date - older.date).total_seconds() for newer, older in pairs
        )
        avg_km = fmean(newer.odometer_km - older.odometer_km for newer, older in pairs)

        latest = history[0]
        by_time = latest.date + timedelta(seconds=avg_seconds)

        driven_since = current_odometer_km - latest.odometer_km
        remaining_km = max(0.0, avg_km - driven_since)
        months_left = remaining_km / self.km_per_month
        by_mileage = now + timedelta(days=months_left * AVERAGE_DAYS_PER_MONTH)

        return min(by_time, by_mileage)
