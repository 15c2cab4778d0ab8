from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.fleet_manager.vehicles.models import VehicleModel
from src.fleet_manager.vehicles.schemas import VehicleSnapshot


class IVehicleRepository(ABC):
    @abstractmethod
    async def get_snapshot(
        self, db_session: AsyncSession, vehicle_id: int
    ) -> Optional[VehicleSnapshot]:
        """Returns the vehicle with all of its history, or None"""
        ...

    @abstractmethod
    async def list_snapshots_by_owner(
        self, db_session: AsyncSession, user_id: str
    ) -> List[VehicleSnapshot]: ...


class VehicleRepository(IVehicleRepository):
    @staticmethod
    def _with_history():
        return select(VehicleModel).options(
            selectinload(VehicleModel.trips),
            selectinload(VehicleModel.fuel_records),
            selectinload(VehicleModel.maintenance_records),
        )

    async def get_snapshot(
        self, db_session: AsyncSession, vehicle_id: int
    ) -> Optional[VehicleSnapshot]:
        stmt = self._with_history().where(VehicleModel.id == vehicle_id)
        result = await db_session.execute(stmt)
        vehicle = result.scalars().first()
        if vehicle is None:
            return None
        return VehicleSnapshot.model_validate(vehicle)

    async def list_snapshots_by_owner(
        self, db_session: AsyncSession, user_id: str
    ) -> List[VehicleSnapshot]:
        stmt = (
            self._with_history()
            .where(VehicleModel.owner_id == user_id)
            .order_by(VehicleModel.id)
        )
        result = await db_session.execute(stmt)
        vehicles = result.scalars().all()
        return [VehicleSnapshot.model_validate(v) for v in vehicles]
