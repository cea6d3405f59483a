"""Revenue report: read-only aggregation over invoices in a date range.

All amounts are integers in the smallest currency unit; nothing is divided,
so no rounding happens anywhere.
"""
import logging
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from pharmacare.models.medicine import Medicine
from pharmacare.models.sale_invoice import SaleInvoice, SaleInvoiceDetail
from pharmacare.schemas.report import DailyRevenue, RevenueBucket, RevenueReport, TimeRange
from pharmacare.services.sale_invoice_service import day_bounds

logger = logging.getLogger(__name__)

GROUP_BY_OPTIONS = ("medicine", "category", "daily")


def _add(buckets: Dict[int, dict], key: int, name: str, revenue: int, quantity: int) -> None:
    bucket = buckets.setdefault(key, {"name": name, "revenue": 0, "quantity": 0})
    bucket["revenue"] += revenue
    bucket["quantity"] += quantity


def aggregate_revenue(invoices: List[SaleInvoice]) -> dict:
    """Sum line revenue (quantity x unit price) overall, per medicine, per category and per day.

    Buckets keep first-seen order so ties in the sorted output are stable.
    """
    total_revenue = 0
    by_medicine: Dict[int, dict] = {}
    by_category: Dict[int, dict] = {}
    by_day: Dict[str, int] = {}

    for invoice in invoices:
        day = invoice.invoice_date.date().isoformat()
        by_day.setdefault(day, 0)

        for detail in invoice.details:
            revenue = detail.quantity * detail.unit_price
            total_revenue += revenue
            by_day[day] += revenue

            medicine = detail.medicine
            _add(by_medicine, detail.medicine_id, medicine.name, revenue, detail.quantity)
            _add(by_category, medicine.category_id, medicine.category.name, revenue, detail.quantity)

    return {
        "total_revenue": total_revenue,
        "by_medicine": by_medicine,
        "by_category": by_category,
        "by_day": by_day,
    }


def revenue_report(db: Session, start_date: date, end_date: date, group_by: Optional[str] = None) -> RevenueReport:
    start, end = day_bounds(start_date, end_date)
    invoices = (
        db.query(SaleInvoice)
        .options(
            selectinload(SaleInvoice.details)
            .joinedload(SaleInvoiceDetail.medicine)
            .joinedload(Medicine.category)
        )
        .filter(SaleInvoice.invoice_date >= start, SaleInvoice.invoice_date <= end)
        .all()
    )

    totals = aggregate_revenue(invoices)

    if group_by == "medicine":
        grouped_data = sorted(
            (RevenueBucket(**b) for b in totals["by_medicine"].values()),
            key=lambda b: b.revenue,
            reverse=True,
        )
    elif group_by == "category":
        grouped_data = sorted(
            (RevenueBucket(**b) for b in totals["by_category"].values()),
            key=lambda b: b.revenue,
            reverse=True,
        )
    elif group_by == "daily":
        grouped_data = [
            DailyRevenue(date=day, revenue=revenue)
            for day, revenue in sorted(totals["by_day"].items(), reverse=True)
        ]
    else:
        grouped_data = {}

    logger.debug(
        f"Revenue report {start_date}..{end_date} group_by={group_by}: "
        f"{len(invoices)} invoice(s), total {totals['total_revenue']}"
    )

    return RevenueReport(
        total_revenue=totals["total_revenue"],
        invoice_count=len(invoices),
        time_range=TimeRange(start=start_date, end=end_date),
        grouped_data=grouped_data,
    )
