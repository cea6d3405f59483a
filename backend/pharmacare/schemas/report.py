from datetime import date
from typing import Dict, List, Union

from pharmacare.schemas.common import CamelModel


class RevenueBucket(CamelModel):
    name: str
    revenue: int
    quantity: int


class DailyRevenue(CamelModel):
    date: str  # YYYY-MM-DD
    revenue: int


class TimeRange(CamelModel):
    start: date
    end: date


class RevenueReport(CamelModel):
    total_revenue: int
    invoice_count: int
    time_range: TimeRange
    # Empty object when no grouping was requested
    grouped_data: Union[List[RevenueBucket], List[DailyRevenue], Dict]
