"""
PDF sale-invoice generation.
Printable receipt with pharmacy header, employee, line items and total.
"""
from io import BytesIO
from datetime import datetime

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch
from reportlab.lib import colors
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER

from pharmacare.models.sale_invoice import SaleInvoice

PHARMACY_NAME = "Pharma Care"


def format_amount(amount: int) -> str:
    """Integer amount in the smallest currency unit, with thousands separators."""
    return f"{amount:,}"


def generate_invoice_pdf(invoice: SaleInvoice) -> BytesIO:
    """
    Render an invoice (with employee and details loaded) to PDF.

    Returns:
        BytesIO buffer positioned at the start of the PDF data
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, topMargin=0.5*inch, bottomMargin=0.5*inch,
                            title=f"Sale invoice #{invoice.id}")

    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'InvoiceTitle',
        parent=styles['Heading1'],
        fontSize=22,
        textColor=colors.HexColor('#0f766e'),
        alignment=TA_CENTER,
        spaceAfter=12
    )
    heading_style = ParagraphStyle(
        'InvoiceHeading',
        parent=styles['Heading2'],
        fontSize=13,
        textColor=colors.HexColor('#1f2937'),
        spaceAfter=6
    )
    normal_style = ParagraphStyle(
        'InvoiceNormal',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.HexColor('#374151')
    )

    elements.append(Paragraph("SALE INVOICE", title_style))
    elements.append(Spacer(1, 0.2*inch))

    info_data = [[
        Paragraph(f"<b>{PHARMACY_NAME}</b>", normal_style),
        Paragraph(f"<b>Invoice #:</b> {invoice.id}<br/>"
                  f"<b>Date:</b> {invoice.invoice_date.strftime('%d %b %Y, %H:%M')}<br/>"
                  f"<b>Recorded by:</b> {invoice.employee.full_name}", normal_style),
    ]]
    info_table = Table(info_data, colWidths=[3.5*inch, 3*inch])
    info_table.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))
    elements.append(info_table)
    elements.append(Spacer(1, 0.3*inch))

    elements.append(Paragraph("<b>Items</b>", heading_style))
    items_data = [[
        Paragraph("<b>#</b>", normal_style),
        Paragraph("<b>Medicine</b>", normal_style),
        Paragraph("<b>Quantity</b>", normal_style),
        Paragraph("<b>Unit price</b>", normal_style),
        Paragraph("<b>Amount</b>", normal_style),
    ]]
    total = 0
    for position, detail in enumerate(invoice.details, start=1):
        total += detail.line_total
        items_data.append([
            str(position),
            Paragraph(detail.medicine.name, normal_style),
            str(detail.quantity),
            format_amount(detail.unit_price),
            format_amount(detail.line_total),
        ])

    items_table = Table(items_data, colWidths=[0.4*inch, 2.8*inch, 0.9*inch, 1.2*inch, 1.2*inch])
    items_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f3f4f6')),
        ('ALIGN', (2, 0), (-1, -1), 'RIGHT'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#fafafa')]),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))
    elements.append(items_table)
    elements.append(Spacer(1, 0.2*inch))

    total_table = Table(
        [['', '', Paragraph("<b>TOTAL:</b>", heading_style), Paragraph(f"<b>{format_amount(total)}</b>", heading_style)]],
        colWidths=[0.4*inch, 3.7*inch, 1.2*inch, 1.2*inch],
    )
    total_table.setStyle(TableStyle([
        ('ALIGN', (2, 0), (-1, -1), 'RIGHT'),
        ('LINEABOVE', (2, 0), (-1, 0), 1, colors.black),
    ]))
    elements.append(total_table)

    footer_style = ParagraphStyle(
        'Footer',
        parent=styles['Normal'],
        fontSize=8,
        textColor=colors.grey,
        alignment=TA_CENTER
    )
    elements.append(Spacer(1, 0.6*inch))
    elements.append(Paragraph("Thank you for your purchase!", footer_style))
    elements.append(Paragraph(f"Printed on {datetime.now().strftime('%d %b %Y at %H:%M')}", footer_style))

    doc.build(elements)
    buffer.seek(0)
    return buffer
