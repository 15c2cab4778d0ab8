"""
Tunables for the analytics engine.

Distances are kilometres, volumes are litres and fuel efficiency is
reported as litres per 100 km.
"""

from typing import Dict, Final, NamedTuple

from src.fleet_manager.analytics.enums import ServiceKind

# Fuel efficiency
MAX_FILLUP_INTERVAL_KM: Final[int] = 2000
MIN_RECORDS_FOR_EFFICIENCY: Final[int] = 2

# Analytics window
DEFAULT_WINDOW_YEARS: Final[int] = 1

# Maintenance prediction
DUE_SOON_WINDOW_MONTHS: Final[int] = 3
ASSUMED_KM_PER_MONTH: Final[int] = 1600
AVERAGE_DAYS_PER_MONTH: Final[float] = 30.44
DEFAULT_STANDARD_INTERVAL_MONTHS: Final[int] = 6

STANDARD_INTERVAL_MONTHS: Final[Dict[ServiceKind, int]] = {
    ServiceKind.oil_change: 3,
    ServiceKind.tire_rotation: 6,
    ServiceKind.brake_inspection: 12,
    ServiceKind.brake_service: 12,
    ServiceKind.air_filter: 12,
}

DEFAULT_ESTIMATED_COST: Final[float] = 50.00
ESTIMATED_COST: Final[Dict[ServiceKind, float]] = {
    ServiceKind.oil_change: 45.99,
    ServiceKind.tire_rotation: 25.00,
    ServiceKind.brake_inspection: 150.00,
    ServiceKind.brake_service: 150.00,
    ServiceKind.air_filter: 20.00,
    ServiceKind.annual_inspection: 89.99,
}


class DefaultService(NamedTuple):
    kind: ServiceKind
    interval_months: int
    interval_km: int | None
    band_km: int
    due_in_days: int
    min_age_months: int = 0


# Services recommended when the vehicle has no history (or lacks that type).
DEFAULT_SCHEDULE: Final[tuple[DefaultService, ...]] = (
    DefaultService(ServiceKind.oil_change, 3, 5000, 800, 15),
    DefaultService(ServiceKind.tire_rotation, 6, 10000, 800, 30),
    DefaultService(ServiceKind.annual_inspection, 12, None, 0, 30, min_age_months=12),
)

# Sentinel label for most-used / most-efficient lookups with no candidate
UNKNOWN_VEHICLE_LABEL: Final[str] = "Unknown"
