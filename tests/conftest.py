import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


def build_pdf(page_count: int) -> bytes:
    """Generate a PDF whose page N carries the text "Page N content"."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for number in range(1, page_count + 1):
        c.drawString(72, 720, f"Page {number} content")
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    return build_pdf(2)


@pytest.fixture()
def forty_page_pdf_bytes() -> bytes:
    return build_pdf(40)


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def make_pdf():  # type: ignore[no-untyped-def]
    """Factory fixture: ``make_pdf(n)`` returns an n-page PDF."""
    return build_pdf
