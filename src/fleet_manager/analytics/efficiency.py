import logging
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from src.fleet_manager.analytics.constants import (
    MAX_FILLUP_INTERVAL_KM,
    MIN_RECORDS_FOR_EFFICIENCY,
)
from src.fleet_manager.analytics.schemas import FuelEfficiencyTrendDTO
from src.fleet_manager.analytics.utils import month_start
from src.fleet_manager.vehicles.schemas import FuelRecord, Trip

logger = logging.getLogger(__name__)


def calculate_mileage_for_period(
    trips: Sequence[Trip], fuel_records: Sequence[FuelRecord]
) -> int:
    """
    Distance covered in a period, in whole km.

    Logged trips are direct observations and win whenever there are any.
    Otherwise the spread of odometer readings across fill-ups is used.
    """
    if trips:
        return int(sum(t.distance_km for t in trips))
    if len(fuel_records) < MIN_RECORDS_FOR_EFFICIENCY:
        return 0
    readings = [f.odometer_km for f in fuel_records]
    return max(readings) - min(readings)


def _select_fillups(fuel_records: Sequence[FuelRecord]) -> List[FuelRecord]:
    ordered = sorted(fuel_records, key=lambda f: f.odometer_km)
    full_tank = [f for f in ordered if f.full_tank]
    if len(full_tank) >= MIN_RECORDS_FOR_EFFICIENCY:
        return full_tank
    # Partial fills skew the result but are the best signal available
    return ordered


def calculate_average_fuel_efficiency(fuel_records: Sequence[FuelRecord]) -> float:
    """
    Average consumption in litres per 100 km, rounded to one decimal.

    Each interval between consecutive fill-ups contributes its odometer delta
    and the litres of the closing fill-up. Intervals that are not in
    (0, MAX_FILLUP_INTERVAL_KM) are treated as bad data and skipped.
    Returns 0.0 when there is not enough usable data.
    """
    if len(fuel_records) < MIN_RECORDS_FOR_EFFICIENCY:
        return 0.0

    fillups = _select_fillups(fuel_records)
    total_distance = 0.0
    total_liters = 0.0
    rejected = 0

    for previous, current in zip(fillups, fillups[1:]):
        distance = current.odometer_km - previous.odometer_km
        if distance <= 0 or distance >= MAX_FILLUP_INTERVAL_KM:
            rejected += 1
            continue
        total_distance += distance
        total_liters += current.liters

    if rejected:
        logger.debug(
            "Skipped %d fill-up interval(s) outside (0, %d) km",
            rejected,
            MAX_FILLUP_INTERVAL_KM,
        )

    if total_distance <= 0 or total_liters <= 0:
        return 0.0
    return round(total_liters / total_distance * 100, 1)


def calculate_fuel_efficiency_trend(
    fuel_records: Sequence[FuelRecord], by_vehicle: bool = False
) -> List[FuelEfficiencyTrendDTO]:
    """Monthly consumption series, oldest month first."""
    if len(fuel_records) < MIN_RECORDS_FOR_EFFICIENCY:
        return []

    # key: (vehicle_id or None, month_start)
    groups: Dict[Tuple[Optional[int], date], List[FuelRecord]] = defaultdict(list)
    for record in fuel_records:
        vehicle_id = record.vehicle_id if by_vehicle else None
        groups[(vehicle_id, month_start(record.date))].append(record)

    results: List[FuelEfficiencyTrendDTO] = []
    for (vehicle_id, month), records in sorted(
        groups.items(), key=lambda item: (item[0][1], item[0][0] or 0)
    ):
        if len(records) < MIN_RECORDS_FOR_EFFICIENCY:
            continue
        rate = calculate_average_fuel_efficiency(records)
        if rate <= 0:
            continue
        results.append(
            FuelEfficiencyTrendDTO(
                month=month, liters_per_100km=rate, vehicle_id=vehicle_id
            )
        )

    return results
