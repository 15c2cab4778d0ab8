from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    TIMESTAMP,
    Boolean,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.fleet_manager.database.database import Base


class VehicleModel(Base):
    __tablename__ = "vehicles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    make: Mapped[str] = mapped_column(String(50), nullable=False)
    model: Mapped[str] = mapped_column(String(50), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    license_plate: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str] = mapped_column(String(300), default="")
    current_odometer_km: Mapped[int] = mapped_column(Integer, default=0)
    owner_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    trips: Mapped[List["TripModel"]] = relationship(
        back_populates="vehicle", cascade="all, delete-orphan"
    )
    fuel_records: Mapped[List["FuelRecordModel"]] = relationship(
        back_populates="vehicle", cascade="all, delete-orphan"
    )
    maintenance_records: Mapped[List["MaintenanceRecordModel"]] = relationship(
        back_populates="vehicle", cascade="all, delete-orphan"
    )


class TripModel(Base):
    __tablename__ = "trips"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vehicle_id: Mapped[int] = mapped_column(
        ForeignKey("vehicles.id", ondelete="CASCADE"), index=True, nullable=False
    )
    start_location: Mapped[str] = mapped_column(String(100), nullable=False)
    end_location: Mapped[str] = mapped_column(String(100), nullable=False)
    distance_km: Mapped[float] = mapped_column(Float, nullable=False)
    start_time: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False
    )
    end_time: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False
    )
    purpose: Mapped[str] = mapped_column(String(200), default="")
    fuel_used_liters: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    driver_id: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    vehicle: Mapped[VehicleModel] = relationship(back_populates="trips")


class FuelRecordModel(Base):
    __tablename__ = "fuel_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vehicle_id: Mapped[int] = mapped_column(
        ForeignKey("vehicles.id", ondelete="CASCADE"), index=True, nullable=False
    )
    date: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    liters: Mapped[float] = mapped_column(Float, nullable=False)
    cost_per_liter: Mapped[float] = mapped_column(
        Numeric(8, 3, asdecimal=False), nullable=False
    )
    total_cost: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=False
    )
    odometer_km: Mapped[int] = mapped_column(Integer, nullable=False)
    station: Mapped[str] = mapped_column(String(100), default="")
    full_tank: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    vehicle: Mapped[VehicleModel] = relationship(back_populates="fuel_records")


class MaintenanceRecordModel(Base):
    __tablename__ = "maintenance_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vehicle_id: Mapped[int] = mapped_column(
        ForeignKey("vehicles.id", ondelete="CASCADE"), index=True, nullable=False
    )
    service_type: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(300), default="")
    cost: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    odometer_km: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    provider: Mapped[str] = mapped_column(String(100), default="")
    next_service_due: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    vehicle: Mapped[VehicleModel] = relationship(back_populates="maintenance_records")
