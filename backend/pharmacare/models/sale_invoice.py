"""
SaleInvoice and its line items.

Both are written only by the sale-invoice transaction and never updated or
deleted afterwards. unit_price is the price charged at the time of sale and
may differ from the medicine's current listed price.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from pharmacare.db.base import Base


class SaleInvoice(Base):
    __tablename__ = "sale_invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_date = Column(DateTime, nullable=False, index=True)  # server local time
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False)
    # Client-supplied token; a replay of the same key returns this invoice
    idempotency_key = Column(String(64), unique=True, nullable=True)

    employee = relationship("Employee")
    details = relationship(
        "SaleInvoiceDetail",
        back_populates="sale_invoice",
        order_by="SaleInvoiceDetail.id",
    )


class SaleInvoiceDetail(Base):
    __tablename__ = "sale_invoice_details"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sale_invoice_details_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_sale_invoice_details_unit_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    sale_invoice_id = Column(
        Integer, ForeignKey("sale_invoices.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    medicine_id = Column(Integer, ForeignKey("medicines.id", ondelete="RESTRICT"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Integer, nullable=False)

    sale_invoice = relationship("SaleInvoice", back_populates="details")
    medicine = relationship("Medicine")

    @property
    def line_total(self) -> int:
        return self.quantity * self.unit_price
