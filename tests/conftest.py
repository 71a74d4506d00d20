import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


@pytest.fixture()
def invoice_pdf_bytes() -> bytes:
    """Generate a single-page invoice PDF with a text layer."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "INVOICE 2024-001")
    c.drawString(72, 700, "Subtotal 100.00")
    c.drawString(72, 680, "VAT 20.00")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def text_and_blank_pdf_bytes() -> bytes:
    """Generate a two-page PDF: page one has text, page two has none (like a scan)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Total due 120.00")
    c.showPage()
    c.showPage()
    c.save()
    return buf.getvalue()
