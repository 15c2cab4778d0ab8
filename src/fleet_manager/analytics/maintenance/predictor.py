import logging
from collections import defaultdict
from datetime import datetime, timedelta
from statistics import fmean
from typing import Dict, Iterable, List, Optional, Sequence

from src.fleet_manager.analytics.constants import (
    DEFAULT_ESTIMATED_COST,
    DEFAULT_SCHEDULE,
    DUE_SOON_WINDOW_MONTHS,
    ESTIMATED_COST,
    DefaultService,
)
from src.fleet_manager.analytics.enums import ServiceKind, covered_kinds
from src.fleet_manager.analytics.maintenance.strategies.factory import (
    ServiceDateStrategyFactory,
)
from src.fleet_manager.analytics.schemas import UpcomingMaintenanceDTO
from src.fleet_manager.analytics.utils import (
    add_months,
    utc_now,
    vehicle_age_in_months,
)
from src.fleet_manager.vehicles.schemas import MaintenanceRecord, Vehicle

logger = logging.getLogger(__name__)


def estimate_service_cost(
    service_type: str, history: Sequence[MaintenanceRecord]
) -> float:
    """Average of past costs for the service, or a fixed per-kind estimate."""
    if history:
        return round(fmean(record.cost for record in history), 2)
    kind = ServiceKind.from_label(service_type)
    return ESTIMATED_COST.get(kind, DEFAULT_ESTIMATED_COST)


def predict_next_service_date(
    service_type: str,
    history: Sequence[MaintenanceRecord],
    current_odometer_km: int,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """``history`` must be records of ``service_type`` only, newest first."""
    strategy = ServiceDateStrategyFactory.create(history)
    return strategy.predict(
        service_type, history, current_odometer_km, now or utc_now()
    )


class MaintenancePredictor:
    def __init__(self, window_months: int = DUE_SOON_WINDOW_MONTHS):
        self.window_months = window_months

    def is_due_soon(self, due_date: datetime, now: datetime) -> bool:
        return (
            add_months(now, -self.window_months)
            <= due_date
            <= add_months(now, self.window_months)
        )

    def predict_upcoming_maintenance(
        self,
        vehicle: Vehicle,
        history: Sequence[MaintenanceRecord],
        now: Optional[datetime] = None,
    ) -> List[UpcomingMaintenanceDTO]:
        now = now or utc_now()

        if not history:
            alerts = self.get_default_maintenance_schedule(vehicle, now)
            return sorted(alerts, key=lambda a: a.due_date)

        # Grouped on the exact label the user entered
        groups: Dict[str, List[MaintenanceRecord]] = defaultdict(list)
        for record in history:
            groups[record.service_type].append(record)

        alerts: List[UpcomingMaintenanceDTO] = []
        for service_type, records in groups.items():
            records = sorted(records, key=lambda r: r.date, reverse=True)
            latest = records[0]

            if latest.next_service_due is not None:
                due_date: Optional[datetime] = latest.next_service_due
            else:
                due_date = predict_next_service_date(
                    service_type, records, vehicle.current_odometer_km, now
                )

            if due_date is None or not self.is_due_soon(due_date, now):
                continue
            alerts.append(
                UpcomingMaintenanceDTO(
                    type=service_type,
                    due_date=due_date,
                    estimated_cost=estimate_service_cost(service_type, records),
                )
            )

        alerts.extend(self.add_missing_maintenance_types(vehicle, groups.keys(), now))
        logger.debug(
            "Vehicle %s: %d upcoming maintenance item(s) from %d service type(s)",
            vehicle.id,
            len(alerts),
            len(groups),
        )
        return sorted(alerts, key=lambda a: a.due_date)

    def get_default_maintenance_schedule(
        self, vehicle: Vehicle, now: Optional[datetime] = None
    ) -> List[UpcomingMaintenanceDTO]:
        """Recommendations for a vehicle with no maintenance history at all."""
        now = now or utc_now()
        age_in_months = vehicle_age_in_months(vehicle.year, now)

        alerts = []
        for service in DEFAULT_SCHEDULE:
            if age_in_months < service.min_age_months:
                continue
            by_age = age_in_months % service.interval_months == 0
            by_odometer = (
                service.interval_km is not None
                and vehicle.current_odometer_km % service.interval_km
                <= service.band_km
            )
            if by_age or by_odometer:
                alerts.append(self._default_alert(service, now))
        return alerts

    def add_missing_maintenance_types(
        self,
        vehicle: Vehicle,
        existing_types: Iterable[str],
        now: Optional[datetime] = None,
    ) -> List[UpcomingMaintenanceDTO]:
        """
        Default alerts for common services that never appear in the history,
        issued when the vehicle sits near one of their interval marks.
        """
        now = now or utc_now()
        covered = covered_kinds(existing_types)
        age_in_months = vehicle_age_in_months(vehicle.year, now)

        alerts = []
        for service in DEFAULT_SCHEDULE:
            if service.kind in covered:
                continue
            if service.interval_km is not None:
                remainder = vehicle.current_odometer_km % service.interval_km
                near_mark = (
                    remainder > service.interval_km - service.band_km
                    or remainder < service.band_km
                )
            else:
                near_mark = (
                    age_in_months % service.interval_months
                    >= service.interval_months - 1
                )
            if near_mark:
                alerts.append(self._default_alert(service, now))
        return alerts

    @staticmethod
    def _default_alert(
        service: DefaultService, now: datetime
    ) -> UpcomingMaintenanceDTO:
        return UpcomingMaintenanceDTO(
            type=service.kind.value,
            due_date=now + timedelta(days=service.due_in_days),
            estimated_cost=ESTIMATED_COST.get(service.kind, DEFAULT_ESTIMATED_COST),
        )
