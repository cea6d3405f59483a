from datetime import datetime
from typing import List, Optional

from pydantic import Field

from pharmacare.schemas.common import CamelModel, MAX_DB_INT
from pharmacare.schemas.medicine import MedicineOut


class SaleItemIn(CamelModel):
    # Optional so that a missing field fails the sale inside the transaction
    # with "Invalid item data", like any other per-item failure.
    medicine_id: Optional[int] = Field(None, le=MAX_DB_INT)
    quantity: Optional[int] = Field(None, le=MAX_DB_INT)
    unit_price: Optional[int] = Field(None, le=MAX_DB_INT)


class SaleInvoiceCreate(CamelModel):
    items: Optional[List[SaleItemIn]] = None


class SaleInvoiceOut(CamelModel):
    id: int
    invoice_date: datetime
    employee_id: int


class SaleInvoiceDetailOut(CamelModel):
    id: int
    sale_invoice_id: int
    medicine_id: int
    quantity: int
    unit_price: int


class SaleInvoiceCreated(CamelModel):
    invoice: SaleInvoiceOut
    details: List[SaleInvoiceDetailOut]


class EmployeeBrief(CamelModel):
    id: int
    full_name: str


class MedicineBrief(CamelModel):
    id: int
    name: str


class DetailWithMedicine(SaleInvoiceDetailOut):
    medicine: MedicineOut


class DetailWithMedicineBrief(SaleInvoiceDetailOut):
    medicine: MedicineBrief


class SaleInvoiceFull(SaleInvoiceOut):
    employee: EmployeeBrief
    details: List[DetailWithMedicine]


class SaleInvoiceSummary(SaleInvoiceOut):
    employee: EmployeeBrief
    details: List[DetailWithMedicineBrief]
