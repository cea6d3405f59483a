"""CSV export of sold line items."""
import csv
import io
from typing import Iterable

from pharmacare.models.sale_invoice import SaleInvoice

CSV_HEADER = ["Invoice ID", "Date", "Employee", "Medicine", "Quantity", "Unit price", "Line total"]


def invoices_to_csv(invoices: Iterable[SaleInvoice]) -> str:
    """One row per detail line, invoices in the order given."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_HEADER)

    for invoice in invoices:
        for detail in invoice.details:
            writer.writerow([
                invoice.id,
                invoice.invoice_date.strftime("%Y-%m-%d %H:%M"),
                invoice.employee.full_name,
                detail.medicine.name,
                detail.quantity,
                detail.unit_price,
                detail.line_total,
            ])

    return output.getvalue()
