from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.fleet_manager.vehicles.utils import as_utc


class SnapshotBase(BaseModel):
    """Read-only record handed to the analytics layer."""

    model_config = ConfigDict(from_attributes=True, frozen=True)


class Trip(SnapshotBase):
    id: int
    vehicle_id: int
    start_location: str
    end_location: str
    distance_km: float = Field(..., ge=0)
    start_time: datetime
    end_time: datetime
    purpose: str = ""
    fuel_used_liters: Optional[float] = None
    driver_id: str = ""

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, value: datetime) -> datetime:
        return as_utc(value)


class FuelRecord(SnapshotBase):
    id: int
    vehicle_id: int
    date: datetime
    liters: float = Field(..., gt=0)
    cost_per_liter: float = 0.0
    total_cost: float
    odometer_km: int
    station: str = ""
    full_tank: bool = False

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return as_utc(value)


class MaintenanceRecord(SnapshotBase):
    id: int
    vehicle_id: int
    service_type: str
    description: str = ""
    cost: float
    odometer_km: int
    date: datetime
    provider: Optional[str] = None
    next_service_due: Optional[datetime] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return as_utc(value)

    @field_validator("next_service_due")
    @classmethod
    def normalize_next_service_due(
        cls, value: Optional[datetime]
    ) -> Optional[datetime]:
        return as_utc(value) if value is not None else None


class Vehicle(SnapshotBase):
    id: int
    make: str
    model: str
    year: int
    license_plate: str = ""
    current_odometer_km: int = Field(0, ge=0)
    owner_id: str
    created_at: Optional[datetime] = None

    @property
    def label(self) -> str:
        return f"{self.make} {self.model} ({self.year})"


class VehicleSnapshot(Vehicle):
    """A vehicle together with its fully loaded trip, fuel and maintenance history."""

    trips: List[Trip] = []
    fuel_records: List[FuelRecord] = []
    maintenance_records: List[MaintenanceRecord] = []
