from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Sequence, Tuple

from src.fleet_manager.analytics.schemas import CostByMonthDTO, CostTrendDTO
from src.fleet_manager.analytics.utils import month_key
from src.fleet_manager.vehicles.schemas import FuelRecord, MaintenanceRecord


def _sum_by_month(entries: Iterable[Tuple[datetime, float]]) -> Dict[str, float]:
    totals: Dict[str, float] = defaultdict(float)
    for when, cost in entries:
        totals[month_key(when)] += cost
    return totals


def calculate_cost_by_month(
    maintenance_records: Sequence[MaintenanceRecord],
    fuel_records: Sequence[FuelRecord],
) -> List[CostByMonthDTO]:
    maintenance_by_month = _sum_by_month((m.date, m.cost) for m in maintenance_records)
    fuel_by_month = _sum_by_month((f.date, f.total_cost) for f in fuel_records)

    combined: Dict[str, float] = defaultdict(float)
    for totals in (maintenance_by_month, fuel_by_month):
        for month, cost in totals.items():
            combined[month] += cost

    # "YYYY-MM" keys sort chronologically
    return [
        CostByMonthDTO(month=month, cost=round(cost, 2))
        for month, cost in sorted(combined.items())
    ]


def to_cost_trend(cost_by_month: Sequence[CostByMonthDTO]) -> List[CostTrendDTO]:
    return [CostTrendDTO(month=c.month, cost=c.cost) for c in cost_by_month]
