import logging
from http import HTTPStatus

from sqlalchemy.ext.asyncio import AsyncSession

from fastapi import APIRouter, Depends
from src.fleet_manager.analytics.dependencies import get_analytics_service
from src.fleet_manager.analytics.exceptions import (
    AnalyticsException,
    VehicleNotFoundException,
)
from src.fleet_manager.analytics.schemas import (
    AnalyticsRequestDTO,
    FleetAnalyticsDTO,
    VehicleAnalyticsDTO,
)
from src.fleet_manager.analytics.services import AnalyticsService
from src.fleet_manager.database.dependencies import verify_database
from src.fleet_manager.middleware.auth import validate_api_key

logger = logging.getLogger(__name__)
analytics_router = APIRouter(tags=["Analytics"])


@analytics_router.get(
    "/vehicles/{vehicle_id}/analytics",
    response_model=VehicleAnalyticsDTO,
    status_code=HTTPStatus.OK,
)
async def get_vehicle_analytics(
    vehicle_id: int,
    params: AnalyticsRequestDTO = Depends(),
    db_session: AsyncSession = Depends(verify_database),
    service: AnalyticsService = Depends(get_analytics_service),
    _: str = Depends(validate_api_key),
):
    logger.info(f"Request analytics for vehicle {vehicle_id}")
    try:
        return await service.get_vehicle_analytics(
            db_session, vehicle_id, params.start_date, params.end_date
        )
    except VehicleNotFoundException as e:
        logger.error("Error: %s", e.message)
        raise e
    except ValueError as e:
        raise AnalyticsException(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY, message=str(e)
        )
    except Exception as e:
        logger.error("Unexpected error: %s", e)
        raise AnalyticsException(message=str(e))


@analytics_router.get(
    "/users/{user_id}/fleet-analytics",
    response_model=FleetAnalyticsDTO,
    status_code=HTTPStatus.OK,
)
async def get_fleet_analytics(
    user_id: str,
    params: AnalyticsRequestDTO = Depends(),
    db_session: AsyncSession = Depends(verify_database),
    service: AnalyticsService = Depends(get_analytics_service),
    _: str = Depends(validate_api_key),
):
    logger.info(f"Request fleet analytics for user {user_id}")
    try:
        return await service.get_fleet_analytics(
            db_session, user_id, params.start_date, params.end_date
        )
    except ValueError as e:
        raise AnalyticsException(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY, message=str(e)
        )
    except Exception as e:
        logger.error("Unexpected error: %s", e)
        raise AnalyticsException(message=str(e))
