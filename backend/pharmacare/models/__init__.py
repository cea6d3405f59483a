from pharmacare.models.employee import Employee
from pharmacare.models.medicine_category import MedicineCategory
from pharmacare.models.medicine import Medicine
from pharmacare.models.supplier import Supplier
from pharmacare.models.sale_invoice import SaleInvoice, SaleInvoiceDetail

__all__ = ["Employee", "MedicineCategory", "Medicine", "Supplier", "SaleInvoice", "SaleInvoiceDetail"]
