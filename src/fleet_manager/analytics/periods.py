from datetime import datetime
from typing import List, NamedTuple

from src.fleet_manager.analytics.utils import in_window
from src.fleet_manager.vehicles.schemas import (
    FuelRecord,
    MaintenanceRecord,
    Trip,
    VehicleSnapshot,
)


class PeriodRecords(NamedTuple):
    trips: List[Trip]
    fuel_records: List[FuelRecord]
    maintenance_records: List[MaintenanceRecord]

    @property
    def fuel_cost(self) -> float:
        return sum(f.total_cost for f in self.fuel_records)

    @property
    def maintenance_cost(self) -> float:
        return sum(m.cost for m in self.maintenance_records)

    @property
    def total_cost(self) -> float:
        return self.fuel_cost + self.maintenance_cost


def slice_period(
    vehicle: VehicleSnapshot, start: datetime, end: datetime
) -> PeriodRecords:
    """Keep the records of a vehicle that fall inside [start, end]."""
    return PeriodRecords(
        # A trip counts only when it both starts and ends inside the window
        trips=[t for t in vehicle.trips if t.start_time >= start and t.end_time <= end],
        fuel_records=[f for f in vehicle.fuel_records if in_window(f.date, start, end)],
        maintenance_records=[
            m for m in vehicle.maintenance_records if in_window(m.date, start, end)
        ],
    )
