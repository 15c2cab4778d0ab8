from src.fleet_manager.analytics.services import AnalyticsService
from src.fleet_manager.vehicles.repositories import VehicleRepository

vehicle_repo = VehicleRepository()
service = AnalyticsService(vehicle_repo)


def get_analytics_service() -> AnalyticsService:
    return service
