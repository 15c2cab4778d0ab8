from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from src.fleet_manager.vehicles.utils import as_utc


class AnalyticsRequestDTO(BaseModel):
    start_date: Optional[datetime] = Field(
        None, description="Window start (ISO 8601). Defaults to one year ago."
    )
    end_date: Optional[datetime] = Field(
        None, description="Window end (ISO 8601). Defaults to now."
    )

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_bounds(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None

    @field_validator("end_date")
    @classmethod
    def validate_date_range(cls, end: Optional[datetime], info: ValidationInfo):
        start = info.data.get("start_date")
        if start and end and end < start:
            raise ValueError("end_date must be after or equal to start_date")
        return end


class UpcomingMaintenanceDTO(BaseModel):
    type: str
    due_date: datetime
    estimated_cost: float


class FuelEfficiencyTrendDTO(BaseModel):
    month: date
    liters_per_100km: float
    vehicle_id: Optional[int] = None


class CostByCategoryDTO(BaseModel):
    fuel: float
    maintenance: float
    repairs: float = 0.0


class CostByMonthDTO(BaseModel):
    month: str
    cost: float


class VehicleAnalyticsDTO(BaseModel):
    vehicle_id: int
    period_start: datetime
    period_end: datetime
    total_cost: float
    mileage_km: int
    cost_per_km: float
    total_trips: int
    fuel_efficiency_liters_per_100km: float
    maintenance_costs: float
    fuel_costs: float
    upcoming_maintenance: List[UpcomingMaintenanceDTO]
    fuel_efficiency_trend: List[FuelEfficiencyTrendDTO]
    cost_by_category: CostByCategoryDTO
    cost_by_month: List[CostByMonthDTO]


class MostUsedVehicleDTO(BaseModel):
    id: int
    make: str
    model: str
    trips: int


class MostEfficientVehicleDTO(BaseModel):
    id: int
    make: str
    model: str
    liters_per_100km: float = Field(
        ...,
        description=(
            "Fuel burned per 100 km over the window. The vehicle is chosen as "
            "the one with the highest figure, so it is the one using the most "
            "fuel per km."
        ),
    )


class CostTrendDTO(BaseModel):
    month: str
    cost: float


class FleetUpcomingMaintenanceDTO(BaseModel):
    vehicle_id: int
    type: str
    due_date: datetime
    estimated_cost: float


class FleetAnalyticsDTO(BaseModel):
    user_id: str
    period_start: datetime
    period_end: datetime
    total_vehicles: int
    total_mileage_km: int
    total_cost: float
    cost_breakdown: Dict[str, float]
    average_cost_per_km: float
    average_fuel_efficiency_liters_per_100km: float
    most_used_vehicle: MostUsedVehicleDTO
    most_efficient_vehicle: MostEfficientVehicleDTO
    cost_trend: List[CostTrendDTO]
    fuel_efficiency_trend: List[FuelEfficiencyTrendDTO]
    upcoming_maintenance: List[FleetUpcomingMaintenanceDTO]
