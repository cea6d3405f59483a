"""Printable invoice PDF and CSV export of sold lines."""
import csv
import io
from datetime import date


def test_invoice_pdf(client, auth_headers, make_medicine, sell):
    medicine = make_medicine(name="Panadol Extra", quantity=10, price=25000)
    invoice_id = sell((medicine["id"], 2, 25000)).json()["data"]["invoice"]["id"]

    resp = client.get(f"/api/sale-invoices/{invoice_id}/pdf", headers=auth_headers)

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert f"invoice_{invoice_id}.pdf" in resp.headers["content-disposition"]
    assert resp.content.startswith(b"%PDF")


def test_invoice_pdf_for_missing_invoice(client, auth_headers):
    resp = client.get("/api/sale-invoices/77/pdf", headers=auth_headers)

    assert resp.status_code == 404
    assert resp.json()["message"] == "Sale invoice not found"


def test_csv_export_has_one_row_per_line(client, auth_headers, make_medicine, sell):
    panadol = make_medicine(name="Panadol Extra", quantity=10)
    terpin = make_medicine(name="Terpin Codein", quantity=10)
    invoice_id = sell((panadol["id"], 2, 25000), (terpin["id"], 1, 45000)).json()["data"]["invoice"]["id"]
    today = date.today().isoformat()

    resp = client.get(
        "/api/sale-invoices/export",
        params={"startDate": today, "endDate": today},
        headers=auth_headers,
    )

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    rows = list(csv.reader(io.StringIO(resp.text)))
    assert rows[0] == ["Invoice ID", "Date", "Employee", "Medicine", "Quantity", "Unit price", "Line total"]
    assert [(r[0], r[3], r[4], r[6]) for r in rows[1:]] == [
        (str(invoice_id), "Panadol Extra", "2", "50000"),
        (str(invoice_id), "Terpin Codein", "1", "45000"),
    ]


def test_csv_export_requires_dates(client, auth_headers):
    resp = client.get("/api/sale-invoices/export", headers=auth_headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Start date and end date are required"
