import logging
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.fleet_manager.analytics.constants import DEFAULT_WINDOW_YEARS
from src.fleet_manager.analytics.costs import calculate_cost_by_month
from src.fleet_manager.analytics.efficiency import (
    calculate_average_fuel_efficiency,
    calculate_fuel_efficiency_trend,
    calculate_mileage_for_period,
)
from src.fleet_manager.analytics.exceptions import VehicleNotFoundException
from src.fleet_manager.analytics.fleet import (
    calculate_fleet_cost_trend,
    calculate_fleet_efficiency_trend,
    find_most_efficient_vehicle,
    find_most_used_vehicle,
    get_fleet_upcoming_maintenance,
    process_vehicle_statistics,
    unknown_most_efficient_vehicle,
    unknown_most_used_vehicle,
)
from src.fleet_manager.analytics.maintenance.predictor import MaintenancePredictor
from src.fleet_manager.analytics.periods import slice_period
from src.fleet_manager.analytics.schemas import (
    CostByCategoryDTO,
    FleetAnalyticsDTO,
    VehicleAnalyticsDTO,
)
from src.fleet_manager.analytics.utils import add_months, utc_now
from src.fleet_manager.vehicles.repositories import IVehicleRepository
from src.fleet_manager.vehicles.utils import as_utc

logger = logging.getLogger(__name__)


def resolve_window(
    start_date: Optional[datetime], end_date: Optional[datetime], now: datetime
) -> Tuple[datetime, datetime]:
    """
    Fill in missing bounds: the window defaults to the year up to now.

    Naive bounds are read as UTC. A window that ends before it starts is
    kept as given and simply matches no records.
    """
    if start_date:
        start = as_utc(start_date)
    else:
        start = add_months(now, -12 * DEFAULT_WINDOW_YEARS)
    end = as_utc(end_date) if end_date else now
    return start, end


def _per_km(cost: float, mileage: int) -> float:
    return round(cost / mileage, 2) if mileage > 0 else 0.0


class AnalyticsService:
    def __init__(
        self,
        vehicle_repo: IVehicleRepository,
        predictor: Optional[MaintenancePredictor] = None,
    ):
        self.vehicle_repo = vehicle_repo
        self.predictor = predictor or MaintenancePredictor()

    async def get_vehicle_analytics(
        self,
        db_session: AsyncSession,
        vehicle_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> VehicleAnalyticsDTO:
        try:
            now = as_utc(now) if now else utc_now()
            start, end = resolve_window(start_date, end_date, now)

            vehicle = await self.vehicle_repo.get_snapshot(db_session, vehicle_id)
            if vehicle is None:
                raise VehicleNotFoundException(vehicle_id)

            period = slice_period(vehicle, start, end)
            mileage = calculate_mileage_for_period(period.trips, period.fuel_records)
            fuel_cost = round(period.fuel_cost, 2)
            maintenance_cost = round(period.maintenance_cost, 2)
            total_cost = round(period.total_cost, 2)

            logger.info(
                "Vehicle %s analytics: %d trip(s), %d fill-up(s), %d service(s)",
                vehicle_id,
                len(period.trips),
                len(period.fuel_records),
                len(period.maintenance_records),
            )

            return VehicleAnalyticsDTO(
                vehicle_id=vehicle.id,
                period_start=start,
                period_end=end,
                total_cost=total_cost,
                mileage_km=mileage,
                cost_per_km=_per_km(total_cost, mileage),
                total_trips=len(period.trips),
                fuel_efficiency_liters_per_100km=calculate_average_fuel_efficiency(
                    period.fuel_records
                ),
                maintenance_costs=maintenance_cost,
                fuel_costs=fuel_cost,
                # Predictions see the whole history, not only the window
                upcoming_maintenance=self.predictor.predict_upcoming_maintenance(
                    vehicle, vehicle.maintenance_records, now
                ),
                fuel_efficiency_trend=calculate_fuel_efficiency_trend(
                    period.fuel_records
                ),
                cost_by_category=CostByCategoryDTO(
                    fuel=fuel_cost, maintenance=maintenance_cost
                ),
                cost_by_month=calculate_cost_by_month(
                    period.maintenance_records, period.fuel_records
                ),
            )

        except (ValueError, VehicleNotFoundException) as e:
            logger.warning("Vehicle analytics rejected: %s", str(e))
            raise

        except SQLAlchemyError as e:
            logger.error(
                "Database error while generating vehicle analytics: %s",
                str(e),
                exc_info=True,
            )
            raise RuntimeError(
                "Database error during vehicle analytics generation."
            ) from e

        except Exception as e:
            logger.error(
                "Unexpected error during vehicle analytics generation: %s",
                str(e),
                exc_info=True,
            )
            raise RuntimeError(
                "Unexpected error during vehicle analytics generation."
            ) from e

    async def get_fleet_analytics(
        self,
        db_session: AsyncSession,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> FleetAnalyticsDTO:
        try:
            now = as_utc(now) if now else utc_now()
            start, end = resolve_window(start_date, end_date, now)

            vehicles = await self.vehicle_repo.list_snapshots_by_owner(
                db_session, user_id
            )
            if not vehicles:
                logger.info("User %s has no vehicles", user_id)
                return FleetAnalyticsDTO(
                    user_id=user_id,
                    period_start=start,
                    period_end=end,
                    total_vehicles=0,
                    total_mileage_km=0,
                    total_cost=0.0,
                    cost_breakdown={},
                    average_cost_per_km=0.0,
                    average_fuel_efficiency_liters_per_100km=0.0,
                    most_used_vehicle=unknown_most_used_vehicle(),
                    most_efficient_vehicle=unknown_most_efficient_vehicle(),
                    cost_trend=[],
                    fuel_efficiency_trend=[],
                    upcoming_maintenance=[],
                )

            stats = process_vehicle_statistics(vehicles, start, end)
            logger.info(
                "Fleet analytics for user %s over %d vehicle(s)",
                user_id,
                len(vehicles),
            )

            return FleetAnalyticsDTO(
                user_id=user_id,
                period_start=start,
                period_end=end,
                total_vehicles=len(vehicles),
                total_mileage_km=stats.total_mileage_km,
                total_cost=stats.total_cost,
                cost_breakdown=stats.cost_breakdown,
                average_cost_per_km=_per_km(stats.total_cost, stats.total_mileage_km),
                average_fuel_efficiency_liters_per_100km=stats.average_fuel_efficiency,
                most_used_vehicle=find_most_used_vehicle(vehicles, start, end),
                most_efficient_vehicle=find_most_efficient_vehicle(
                    vehicles, start, end
                ),
                cost_trend=calculate_fleet_cost_trend(vehicles, start, end),
                fuel_efficiency_trend=calculate_fleet_efficiency_trend(
                    vehicles, start, end
                ),
                upcoming_maintenance=get_fleet_upcoming_maintenance(
                    vehicles, self.predictor, now
                ),
            )

        except ValueError as e:
            logger.warning("Fleet analytics rejected: %s", str(e))
            raise

        except SQLAlchemyError as e:
            logger.error(
                "Database error while generating fleet analytics: %s",
                str(e),
                exc_info=True,
            )
            raise RuntimeError(
                "Database error during fleet analytics generation."
            ) from e

        except Exception as e:
            logger.error(
                "Unexpected error during fleet analytics generation: %s",
                str(e),
                exc_info=True,
            )
            raise RuntimeError(
                "Unexpected error during fleet analytics generation."
            ) from e
