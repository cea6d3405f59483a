"""
Sale-invoice transaction: record a sale and take the sold units out of stock.

ATOMICITY:
- The invoice row, every detail row and every stock decrement are written in
  one database transaction. Any failing line (bad data, unknown medicine,
  not enough stock) rolls the whole sale back, including the invoice row
  that was already flushed.
- Lines are processed strictly in request order, one after another, so a
  later line for the same medicine sees the stock left by the earlier one.

CONCURRENCY:
- Stock is taken with a conditional UPDATE
  (quantity = quantity - n WHERE id = ? AND quantity >= n) and the affected
  row count is checked. Two concurrent sales can therefore never both spend
  the same units, independent of the store's isolation level.
"""
import logging
from datetime import date, datetime, time
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from pharmacare.core.exceptions import (
    SaleInvoiceError,
    InvalidSaleInputError,
    MedicineNotFoundError,
    InsufficientStockError,
    IdempotencyConflictError,
)
from pharmacare.models.medicine import Medicine
from pharmacare.models.sale_invoice import SaleInvoice, SaleInvoiceDetail
from pharmacare.schemas.common import MAX_DB_INT
from pharmacare.schemas.sale_invoice import SaleItemIn

logger = logging.getLogger(__name__)

MAX_IDEMPOTENCY_KEY_LENGTH = 64


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value <= MAX_DB_INT


def _find_by_idempotency_key(db: Session, key: str) -> Optional[SaleInvoice]:
    return db.query(SaleInvoice).filter(SaleInvoice.idempotency_key == key).first()


def _replay(invoice: SaleInvoice, employee_id: int) -> Tuple[SaleInvoice, List[SaleInvoiceDetail], bool]:
    if invoice.employee_id != employee_id:
        raise IdempotencyConflictError("Idempotency key has already been used")
    logger.info(f"Replaying sale invoice {invoice.id} for repeated idempotency key")
    return invoice, list(invoice.details), False


def take_stock(db: Session, medicine: Medicine, quantity: int) -> None:
    """Decrement stock by `quantity`, or raise if fewer units are on hand.

    The WHERE clause makes the check and the write one atomic statement.
    """
    updated = (
        db.query(Medicine)
        .filter(Medicine.id == medicine.id, Medicine.quantity >= quantity)
        .update({Medicine.quantity: Medicine.quantity - quantity}, synchronize_session=False)
    )
    if updated != 1:
        raise InsufficientStockError(medicine.name)
    db.refresh(medicine)


def _record_line(db: Session, invoice: SaleInvoice, item: SaleItemIn) -> SaleInvoiceDetail:
    if not (
        _is_positive_int(item.medicine_id)
        and _is_positive_int(item.quantity)
        and _is_positive_int(item.unit_price)
    ):
        raise InvalidSaleInputError("Invalid item data")

    medicine = db.query(Medicine).filter(Medicine.id == item.medicine_id).first()
    if not medicine:
        raise MedicineNotFoundError(item.medicine_id)

    if medicine.quantity < item.quantity:
        raise InsufficientStockError(medicine.name)

    take_stock(db, medicine, item.quantity)

    detail = SaleInvoiceDetail(
        sale_invoice_id=invoice.id,
        medicine_id=medicine.id,
        quantity=item.quantity,
        unit_price=item.unit_price,
    )
    db.add(detail)
    db.flush()
    return detail


def create_sale_invoice(
    db: Session,
    employee_id: int,
    items: Optional[Sequence[SaleItemIn]],
    idempotency_key: Optional[str] = None,
) -> Tuple[SaleInvoice, List[SaleInvoiceDetail], bool]:
    """Create an invoice with one detail row per item and decrement stock.

    Args:
        employee_id: authenticated employee recording the sale
        items: line items in the order they should appear on the invoice
        idempotency_key: optional client token; a repeat returns the first result

    Returns:
        (invoice, details, created) where created is False for a replay.

    Raises:
        SaleInvoiceError subclasses. Nothing is persisted when one is raised.
    """
    if not _is_positive_int(employee_id) or not items:
        raise InvalidSaleInputError("Invalid input data")

    if idempotency_key is not None:
        idempotency_key = idempotency_key.strip()
        if not idempotency_key or len(idempotency_key) > MAX_IDEMPOTENCY_KEY_LENGTH:
            raise InvalidSaleInputError("Invalid idempotency key")
        existing = _find_by_idempotency_key(db, idempotency_key)
        if existing:
            return _replay(existing, employee_id)

    try:
        invoice = SaleInvoice(
            employee_id=employee_id,
            invoice_date=datetime.now(),
            idempotency_key=idempotency_key,
        )
        db.add(invoice)
        db.flush()

        details = [_record_line(db, invoice, item) for item in items]

        db.commit()
    except SaleInvoiceError:
        db.rollback()
        raise
    except IntegrityError:
        db.rollback()
        # Lost a race with a concurrent request carrying the same key
        if idempotency_key is not None:
            existing = _find_by_idempotency_key(db, idempotency_key)
            if existing:
                return _replay(existing, employee_id)
        raise
    except Exception:
        db.rollback()
        raise

    db.refresh(invoice)
    logger.info(
        f"Sale invoice {invoice.id} recorded by employee {employee_id}: "
        f"{len(details)} line(s), total {sum(d.line_total for d in details)}"
    )
    return invoice, details, True


# Read side

def day_bounds(start_date: date, end_date: date) -> Tuple[datetime, datetime]:
    """[start 00:00:00, end 23:59:59.999999] as naive server-local datetimes."""
    return datetime.combine(start_date, time.min), datetime.combine(end_date, time.max)


def get_sale_invoice(db: Session, invoice_id: int) -> Optional[SaleInvoice]:
    """Invoice with its employee and details (each with the full medicine)."""
    return (
        db.query(SaleInvoice)
        .options(
            joinedload(SaleInvoice.employee),
            selectinload(SaleInvoice.details).joinedload(SaleInvoiceDetail.medicine),
        )
        .filter(SaleInvoice.id == invoice_id)
        .first()
    )


def search_sale_invoices(db: Session, start_date: date, end_date: date) -> List[SaleInvoice]:
    """Invoices dated within the inclusive calendar range, newest first."""
    start, end = day_bounds(start_date, end_date)
    return (
        db.query(SaleInvoice)
        .options(
            joinedload(SaleInvoice.employee),
            selectinload(SaleInvoice.details).joinedload(SaleInvoiceDetail.medicine),
        )
        .filter(SaleInvoice.invoice_date >= start, SaleInvoice.invoice_date <= end)
        .order_by(SaleInvoice.invoice_date.desc(), SaleInvoice.id.desc())
        .all()
    )
