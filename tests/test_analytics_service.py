from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from src.fleet_manager.analytics.exceptions import VehicleNotFoundException
from src.fleet_manager.analytics.services import AnalyticsService, resolve_window
from src.fleet_manager.vehicles.repositories import (
    IVehicleRepository,
    VehicleRepository,
)
from tests.mocks.vehicle_mocks import (
    NOW,
    make_fuel,
    make_service,
    make_trip,
    make_vehicle,
)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def vehicle_repo():
    repo = MagicMock(spec=IVehicleRepository)
    repo.get_snapshot = AsyncMock()
    repo.list_snapshots_by_owner = AsyncMock()
    return repo


@pytest.fixture
def service(vehicle_repo):
    return AnalyticsService(vehicle_repo)


@pytest.fixture
def vehicle():
    return make_vehicle(
        vehicle_id=7,
        current_odometer_km=3000,
        trips=[
            make_trip(150.9, utc(2025, 3, 1), vehicle_id=7),
            make_trip(100, utc(2025, 4, 1), vehicle_id=7, trip_id=2),
            make_trip(999, utc(2023, 4, 1), vehicle_id=7, trip_id=3),
        ],
        fuel_records=[
            make_fuel(10000, 10, utc(2025, 3, 2), total_cost=15.0, vehicle_id=7),
            make_fuel(10300, 24, utc(2025, 3, 20), total_cost=36.0, vehicle_id=7),
        ],
        maintenance_records=[
            make_service(
                "Brake Service",
                utc(2024, 1, 10),
                cost=200.0,
                next_service_due=utc(2025, 8, 1),
                vehicle_id=7,
            ),
            make_service("Air Filter", utc(2025, 4, 10), cost=24.0, vehicle_id=7),
        ],
    )


def test_resolve_window_defaults_to_last_year():
    start, end = resolve_window(None, None, NOW)
    assert start == utc(2024, 6, 15, 12)
    assert end == NOW


def test_resolve_window_keeps_reversed_bounds():
    start, end = resolve_window(utc(2025, 2, 1), utc(2025, 1, 1), NOW)
    assert (start, end) == (utc(2025, 2, 1), utc(2025, 1, 1))


def test_resolve_window_reads_naive_bounds_as_utc():
    start, end = resolve_window(datetime(2025, 1, 1), datetime(2025, 6, 1), NOW)
    assert start == utc(2025, 1, 1)
    assert end == utc(2025, 6, 1)


@pytest.mark.asyncio
async def test_vehicle_analytics(service, vehicle_repo, vehicle):
    vehicle_repo.get_snapshot.return_value = vehicle
    session = AsyncMock()

    result = await service.get_vehicle_analytics(session, 7, now=NOW)

    vehicle_repo.get_snapshot.assert_awaited_once_with(session, 7)
    assert result.vehicle_id == 7
    assert result.period_start == utc(2024, 6, 15, 12)
    assert result.period_end == NOW
    assert result.total_trips == 2
    assert result.mileage_km == 250
    assert result.fuel_costs == 51.0
    assert result.maintenance_costs == 24.0
    assert result.total_cost == 75.0
    assert result.cost_per_km == 0.3
    assert result.fuel_efficiency_liters_per_100km == 8.0
    assert result.cost_by_category.fuel == 51.0
    assert result.cost_by_category.maintenance == 24.0
    assert result.cost_by_category.repairs == 0.0
    assert [(c.month, c.cost) for c in result.cost_by_month] == [
        ("2025-03", 51.0),
        ("2025-04", 24.0),
    ]
    assert [p.liters_per_100km for p in result.fuel_efficiency_trend] == [8.0]
    # The brake service sits outside the window but still yields a prediction
    assert "Brake Service" in {m.type for m in result.upcoming_maintenance}


@pytest.mark.asyncio
async def test_vehicle_analytics_with_explicit_window(service, vehicle_repo, vehicle):
    vehicle_repo.get_snapshot.return_value = vehicle

    result = await service.get_vehicle_analytics(
        AsyncMock(), 7, utc(2025, 4, 1), utc(2025, 4, 30), now=NOW
    )

    assert result.total_trips == 1
    assert result.mileage_km == 100
    assert result.fuel_costs == 0.0
    assert result.total_cost == 24.0
    assert result.fuel_efficiency_liters_per_100km == 0.0
    assert result.fuel_efficiency_trend == []


@pytest.mark.asyncio
async def test_vehicle_analytics_without_mileage_has_zero_cost_per_km(
    service, vehicle_repo
):
    vehicle_repo.get_snapshot.return_value = make_vehicle(
        maintenance_records=[make_service("Oil Change", utc(2025, 5, 1), cost=80.0)]
    )
    result = await service.get_vehicle_analytics(AsyncMock(), 1, now=NOW)
    assert result.total_cost == 80.0
    assert result.mileage_km == 0
    assert result.cost_per_km == 0.0


@pytest.mark.asyncio
async def test_vehicle_analytics_not_found(service, vehicle_repo):
    vehicle_repo.get_snapshot.return_value = None
    with pytest.raises(VehicleNotFoundException) as exc:
        await service.get_vehicle_analytics(AsyncMock(), 404, now=NOW)
    assert exc.value.status_code == 404
    assert "Vehicle ID: 404" in exc.value.detail


@pytest.mark.asyncio
async def test_vehicle_analytics_reversed_window_is_empty(
    service, vehicle_repo, vehicle
):
    vehicle_repo.get_snapshot.return_value = vehicle

    result = await service.get_vehicle_analytics(
        AsyncMock(), 7, utc(2025, 4, 1), utc(2025, 3, 1), now=NOW
    )

    assert result.total_trips == 0
    assert result.mileage_km == 0
    assert result.total_cost == 0.0
    assert result.cost_by_month == []
    assert result.fuel_efficiency_trend == []


@pytest.mark.asyncio
async def test_vehicle_analytics_future_start_is_empty(service, vehicle_repo, vehicle):
    vehicle_repo.get_snapshot.return_value = vehicle

    result = await service.get_vehicle_analytics(
        AsyncMock(), 7, NOW + timedelta(days=1), None, now=NOW
    )

    assert result.period_end == NOW
    assert result.total_trips == 0
    assert result.total_cost == 0.0
    assert result.cost_per_km == 0.0


@pytest.mark.asyncio
async def test_vehicle_analytics_with_naive_window(service, vehicle_repo, vehicle):
    vehicle_repo.get_snapshot.return_value = vehicle

    result = await service.get_vehicle_analytics(
        AsyncMock(), 7, datetime(2025, 1, 1), datetime(2025, 6, 1), now=NOW
    )

    assert result.period_start == utc(2025, 1, 1)
    assert result.period_end == utc(2025, 6, 1)
    assert result.total_trips == 2
    assert result.total_cost == 75.0


@pytest.mark.asyncio
async def test_vehicle_analytics_database_error(service, vehicle_repo):
    vehicle_repo.get_snapshot.side_effect = SQLAlchemyError("boom")
    with pytest.raises(RuntimeError) as exc:
        await service.get_vehicle_analytics(AsyncMock(), 1, now=NOW)
    assert "Database error" in str(exc.value)
    assert isinstance(exc.value.__cause__, SQLAlchemyError)


@pytest.mark.asyncio
async def test_vehicle_analytics_database_error_from_repository():
    session = AsyncMock()
    session.execute.side_effect = SQLAlchemyError("db down!")
    service = AnalyticsService(VehicleRepository())

    with pytest.raises(RuntimeError) as exc:
        await service.get_vehicle_analytics(session, 1, now=NOW)

    assert str(exc.value) == "Database error during vehicle analytics generation."
    assert isinstance(exc.value.__cause__, SQLAlchemyError)


@pytest.mark.asyncio
async def test_vehicle_analytics_unexpected_error(service, vehicle_repo):
    vehicle_repo.get_snapshot.side_effect = KeyError("missing")
    with pytest.raises(RuntimeError) as exc:
        await service.get_vehicle_analytics(AsyncMock(), 1, now=NOW)
    assert "Unexpected error" in str(exc.value)


@pytest.mark.asyncio
async def test_fleet_analytics_for_user_without_vehicles(service, vehicle_repo):
    vehicle_repo.list_snapshots_by_owner.return_value = []

    result = await service.get_fleet_analytics(AsyncMock(), "user-1", now=NOW)

    assert result.user_id == "user-1"
    assert result.total_vehicles == 0
    assert result.total_mileage_km == 0
    assert result.total_cost == 0.0
    assert result.cost_breakdown == {}
    assert result.average_cost_per_km == 0.0
    assert result.most_used_vehicle.id == 0
    assert result.most_used_vehicle.make == "Unknown"
    assert result.most_efficient_vehicle.model == "Unknown"
    assert result.cost_trend == []
    assert result.upcoming_maintenance == []


@pytest.mark.asyncio
async def test_fleet_analytics(service, vehicle_repo, vehicle):
    other = make_vehicle(
        vehicle_id=8,
        make="Ford",
        model="Ranger",
        year=2019,
        current_odometer_km=3000,
        trips=[make_trip(50, utc(2025, 5, 1), vehicle_id=8)],
    )
    vehicle_repo.list_snapshots_by_owner.return_value = [vehicle, other]

    result = await service.get_fleet_analytics(AsyncMock(), "user-1", now=NOW)

    assert result.total_vehicles == 2
    assert result.total_mileage_km == 300
    assert result.total_cost == 75.0
    assert result.cost_breakdown == {
        "Toyota Hilux (2020)": 75.0,
        "Ford Ranger (2019)": 0.0,
    }
    assert result.average_cost_per_km == 0.25
    assert result.average_fuel_efficiency_liters_per_100km == 8.0
    assert result.most_used_vehicle.id == 7
    assert result.most_used_vehicle.trips == 2
    assert result.most_efficient_vehicle.id == 7
    assert [(c.month, c.cost) for c in result.cost_trend] == [
        ("2025-03", 51.0),
        ("2025-04", 24.0),
    ]
    assert [p.vehicle_id for p in result.fuel_efficiency_trend] == [7]
    assert all(m.vehicle_id == 7 for m in result.upcoming_maintenance)
    due_dates = [m.due_date for m in result.upcoming_maintenance]
    assert due_dates == sorted(due_dates)


@pytest.mark.asyncio
async def test_fleet_analytics_database_error(service, vehicle_repo):
    vehicle_repo.list_snapshots_by_owner.side_effect = SQLAlchemyError("boom")
    with pytest.raises(RuntimeError) as exc:
        await service.get_fleet_analytics(AsyncMock(), "user-1", now=NOW)
    assert "Database error" in str(exc.value)


@pytest.mark.asyncio
async def test_fleet_analytics_database_error_from_repository():
    session = AsyncMock()
    session.execute.side_effect = SQLAlchemyError("db down!")
    service = AnalyticsService(VehicleRepository())

    with pytest.raises(RuntimeError) as exc:
        await service.get_fleet_analytics(session, "user-1", now=NOW)

    assert str(exc.value) == "Database error during fleet analytics generation."
