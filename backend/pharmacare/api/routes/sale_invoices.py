"""Sale invoices: record a sale, look it up, search, report revenue, export."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Header, Path, Query, Response, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from pharmacare.api.deps import get_db, get_current_employee
from pharmacare.core.audit import AuditLog
from pharmacare.core.exceptions import BusinessError, SaleInvoiceError
from pharmacare.models.employee import Employee
from pharmacare.schemas.common import MAX_DB_INT, ok
from pharmacare.schemas.sale_invoice import (
    SaleInvoiceCreate,
    SaleInvoiceCreated,
    SaleInvoiceOut,
    SaleInvoiceDetailOut,
    SaleInvoiceFull,
    SaleInvoiceSummary,
)
from pharmacare.services.export_service import invoices_to_csv
from pharmacare.services.pdf_service import generate_invoice_pdf
from pharmacare.services.report_service import GROUP_BY_OPTIONS, revenue_report
from pharmacare.services.sale_invoice_service import (
    create_sale_invoice,
    get_sale_invoice,
    search_sale_invoices,
)

router = APIRouter()


def _require_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date is None or end_date is None:
        raise BusinessError.bad_request("Start date and end date are required")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_invoice(
    data: SaleInvoiceCreate,
    response: Response,
    idempotency_key: Optional[str] = Header(None, description="Client token; a retry with the same key is not recorded twice"),
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    """
    Record a sale and take the sold units out of stock, all or nothing.

    employeeId comes from the token, never from the body.
    """
    try:
        invoice, details, created = create_sale_invoice(
            db, current_employee.id, data.items, idempotency_key=idempotency_key
        )
    except SaleInvoiceError as e:
        raise BusinessError.from_sale_error(e)

    payload = SaleInvoiceCreated(
        invoice=SaleInvoiceOut.model_validate(invoice),
        details=[SaleInvoiceDetailOut.model_validate(d) for d in details],
    )

    if not created:
        response.status_code = status.HTTP_200_OK
        return ok(payload, message="Sale invoice already recorded")

    AuditLog.log_action(
        "create", "sale_invoice", invoice.id, current_employee.id,
        changes={"lines": len(details), "total": sum(d.line_total for d in details)},
    )
    return ok(payload, message="Sale invoice created successfully")


@router.get("/search")
def search_invoices(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    _require_range(start_date, end_date)
    invoices = search_sale_invoices(db, start_date, end_date)
    return ok([SaleInvoiceSummary.model_validate(i) for i in invoices], message="Sale invoices retrieved")


@router.get("/report/revenue")
def revenue(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    group_by: Optional[str] = Query(None, alias="groupBy", description=f"One of: {', '.join(GROUP_BY_OPTIONS)}"),
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    _require_range(start_date, end_date)
    return ok(revenue_report(db, start_date, end_date, group_by), message="Revenue report generated")


@router.get("/export")
def export_invoices_csv(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    """Sold line items in the range as a CSV download."""
    _require_range(start_date, end_date)
    invoices = search_sale_invoices(db, start_date, end_date)

    return StreamingResponse(
        iter([invoices_to_csv(invoices)]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=sales_{start_date}_{end_date}.csv"},
    )


@router.get("/{invoice_id}")
def get_invoice(
    invoice_id: int = Path(..., le=MAX_DB_INT),
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    invoice = get_sale_invoice(db, invoice_id)
    if not invoice:
        raise BusinessError.not_found("Sale invoice not found")
    return ok(SaleInvoiceFull.model_validate(invoice), message="Sale invoice retrieved")


@router.get("/{invoice_id}/pdf")
def download_invoice_pdf(
    invoice_id: int = Path(..., le=MAX_DB_INT),
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
):
    invoice = get_sale_invoice(db, invoice_id)
    if not invoice:
        raise BusinessError.not_found("Sale invoice not found")

    pdf_buffer = generate_invoice_pdf(invoice)
    return StreamingResponse(
        pdf_buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=invoice_{invoice.id}.pdf"},
    )
