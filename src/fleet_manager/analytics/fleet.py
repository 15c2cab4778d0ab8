from datetime import datetime
from typing import Dict, List, NamedTuple, Optional, Sequence

from src.fleet_manager.analytics.constants import (
    MIN_RECORDS_FOR_EFFICIENCY,
    UNKNOWN_VEHICLE_LABEL,
)
from src.fleet_manager.analytics.costs import calculate_cost_by_month, to_cost_trend
from src.fleet_manager.analytics.efficiency import (
    calculate_average_fuel_efficiency,
    calculate_fuel_efficiency_trend,
    calculate_mileage_for_period,
)
from src.fleet_manager.analytics.maintenance.predictor import MaintenancePredictor
from src.fleet_manager.analytics.periods import slice_period
from src.fleet_manager.analytics.schemas import (
    CostTrendDTO,
    FleetUpcomingMaintenanceDTO,
    FuelEfficiencyTrendDTO,
    MostEfficientVehicleDTO,
    MostUsedVehicleDTO,
)
from src.fleet_manager.vehicles.schemas import VehicleSnapshot


class FleetStatistics(NamedTuple):
    total_mileage_km: int
    total_cost: float
    cost_breakdown: Dict[str, float]
    average_fuel_efficiency: float


def unknown_most_used_vehicle() -> MostUsedVehicleDTO:
    return MostUsedVehicleDTO(
        id=0, make=UNKNOWN_VEHICLE_LABEL, model=UNKNOWN_VEHICLE_LABEL, trips=0
    )


def unknown_most_efficient_vehicle() -> MostEfficientVehicleDTO:
    return MostEfficientVehicleDTO(
        id=0,
        make=UNKNOWN_VEHICLE_LABEL,
        model=UNKNOWN_VEHICLE_LABEL,
        liters_per_100km=0.0,
    )


def _window_efficiency(
    vehicle: VehicleSnapshot, start: datetime, end: datetime
) -> Optional[float]:
    """Efficiency in the window, or None when the vehicle has too little fuel data."""
    fuel_records = slice_period(vehicle, start, end).fuel_records
    if len(fuel_records) < MIN_RECORDS_FOR_EFFICIENCY:
        return None
    efficiency = calculate_average_fuel_efficiency(fuel_records)
    return efficiency if efficiency > 0 else None


def build_cost_breakdown(
    vehicles: Sequence[VehicleSnapshot], cost_by_vehicle: Dict[int, float]
) -> Dict[str, float]:
    """Render per-vehicle costs under "Make Model (Year)" labels."""
    breakdown: Dict[str, float] = {}
    for vehicle in vehicles:
        label = vehicle.label
        if label in breakdown:
            # Same make, model and year: disambiguate by id
            label = f"{label} #{vehicle.id}"
        breakdown[label] = round(cost_by_vehicle.get(vehicle.id, 0.0), 2)
    return breakdown


def process_vehicle_statistics(
    vehicles: Sequence[VehicleSnapshot], start: datetime, end: datetime
) -> FleetStatistics:
    total_mileage = 0
    total_cost = 0.0
    cost_by_vehicle: Dict[int, float] = {}
    efficiencies: List[float] = []

    for vehicle in vehicles:
        period = slice_period(vehicle, start, end)
        total_mileage += calculate_mileage_for_period(
            period.trips, period.fuel_records
        )
        total_cost += period.total_cost
        cost_by_vehicle[vehicle.id] = period.total_cost

        efficiency = _window_efficiency(vehicle, start, end)
        if efficiency is not None:
            efficiencies.append(efficiency)

    # Vehicles without usable fuel data are left out, not averaged in as zero
    average_efficiency = (
        round(sum(efficiencies) / len(efficiencies), 1) if efficiencies else 0.0
    )

    return FleetStatistics(
        total_mileage_km=total_mileage,
        total_cost=round(total_cost, 2),
        cost_breakdown=build_cost_breakdown(vehicles, cost_by_vehicle),
        average_fuel_efficiency=average_efficiency,
    )


def find_most_used_vehicle(
    vehicles: Sequence[VehicleSnapshot], start: datetime, end: datetime
) -> MostUsedVehicleDTO:
    best: Optional[VehicleSnapshot] = None
    best_trips = 0
    for vehicle in vehicles:
        trips = len(slice_period(vehicle, start, end).trips)
        # Strict comparison keeps the first vehicle on ties
        if trips > best_trips:
            best, best_trips = vehicle, trips

    if best is None:
        return unknown_most_used_vehicle()
    return MostUsedVehicleDTO(
        id=best.id, make=best.make, model=best.model, trips=best_trips
    )


def find_most_efficient_vehicle(
    vehicles: Sequence[VehicleSnapshot], start: datetime, end: datetime
) -> MostEfficientVehicleDTO:
    """
    Pick the vehicle with the highest computed efficiency figure.

    The figure is litres per 100 km, so a higher value means more fuel per
    km: the pick is the heaviest consumer, not the most economical one.
    Only vehicles with at least two fill-ups in the window and a positive
    result take part.
    """
    best: Optional[VehicleSnapshot] = None
    best_efficiency = 0.0
    for vehicle in vehicles:
        efficiency = _window_efficiency(vehicle, start, end)
        if efficiency is not None and efficiency > best_efficiency:
            best, best_efficiency = vehicle, efficiency

    if best is None:
        return unknown_most_efficient_vehicle()
    return MostEfficientVehicleDTO(
        id=best.id,
        make=best.make,
        model=best.model,
        liters_per_100km=best_efficiency,
    )


def calculate_fleet_cost_trend(
    vehicles: Sequence[VehicleSnapshot], start: datetime, end: datetime
) -> List[CostTrendDTO]:
    periods = [slice_period(vehicle, start, end) for vehicle in vehicles]
    maintenance = [m for p in periods for m in p.maintenance_records]
    fuel = [f for p in periods for f in p.fuel_records]
    return to_cost_trend(calculate_cost_by_month(maintenance, fuel))


def calculate_fleet_efficiency_trend(
    vehicles: Sequence[VehicleSnapshot], start: datetime, end: datetime
) -> List[FuelEfficiencyTrendDTO]:
    fuel = [f for v in vehicles for f in slice_period(v, start, end).fuel_records]
    return calculate_fuel_efficiency_trend(fuel, by_vehicle=True)


def get_fleet_upcoming_maintenance(
    vehicles: Sequence[VehicleSnapshot],
    predictor: MaintenancePredictor,
    now: datetime,
) -> List[FleetUpcomingMaintenanceDTO]:
    upcoming: List[FleetUpcomingMaintenanceDTO] = []
    for vehicle in vehicles:
        # Predictions use the full history, not just the window
        alerts = predictor.predict_upcoming_maintenance(
            vehicle, vehicle.maintenance_records, now
        )
        upcoming.extend(
            FleetUpcomingMaintenanceDTO(
                vehicle_id=vehicle.id,
                type=alert.type,
                due_date=alert.due_date,
                estimated_cost=alert.estimated_cost,
            )
            for alert in alerts
        )
    return sorted(upcoming, key=lambda m: m.due_date)
