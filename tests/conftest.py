import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from app.upload.models import UploadRequest


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page referral PDF."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Referral for Jane Doe")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def pdf_request(sample_pdf_bytes: bytes) -> UploadRequest:
    return UploadRequest.from_bytes("referral.pdf", sample_pdf_bytes)


@pytest.fixture()
def two_megabyte_pdf_request() -> UploadRequest:
    return UploadRequest.from_bytes("big-referral.pdf", b"%PDF-1.4\n" + b"0" * (2 * 1000 * 1000))
