"""Tests for receipt rendering and PDF tiling."""
from datetime import datetime

from PIL import Image

from paydesk.services.pdf_service import PAGE_HEIGHT_PX, PAGE_WIDTH_PX, PdfService, ReceiptDocument


def _doc(**overrides):
    fields = dict(
        receipt_number="AKRX-20250108-0001",
        generated_at=datetime(2025, 1, 8, 10, 30),
        customer_name="John Doe",
        customer_email="john@example.com",
        customer_phone="9876543210",
        customer_address="12 MG Road, Pune",
        amount=1500.0,
        payment_mode="card",
        status="success",
        reference="pay_abc",
    )
    fields.update(overrides)
    return ReceiptDocument(**fields)



class TestRender:
    def test_renders_pdf(self):
        pdf = PdfService.render(_doc())
        assert pdf.startswith(b"%PDF")

    def test_same_document_same_bytes(self):
        assert PdfService.render(_doc()) == PdfService.render(_doc())

    def test_image_is_page_width(self):
        image = PdfService.render_image(_doc(description="Consulting " * 40))
        assert image.width == PAGE_WIDTH_PX
        assert image.height > 0


class TestImageToPdf:
    def test_tall_image_spans_pages(self):
        when = datetime(2025, 1, 8)
        short = PdfService.image_to_pdf(Image.new("RGB", (PAGE_WIDTH_PX, 100), "white"), "short", when)
        tall = PdfService.image_to_pdf(
            Image.new("RGB", (PAGE_WIDTH_PX, PAGE_HEIGHT_PX * 2 + 10), "white"), "tall", when,
        )
        assert b"/Count 1" in short
        assert b"/Count 3" in tall

    def test_narrow_image_is_scaled_to_width(self):
        pdf = PdfService.image_to_pdf(Image.new("RGB", (620, 877), "white"), "half", datetime(2025, 1, 8))
        assert b"/Count 1" in pdf
