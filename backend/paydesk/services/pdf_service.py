"""
PDF Service — Renders a receipt to a raster with Pillow and tiles it onto A4 pages.
"""
import io
import logging
import os
import textwrap
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from paydesk.config import get_settings
from paydesk.models.receipt import Receipt
from paydesk.utils.formatting import format_inr, format_mode
from paydesk.utils.tiling import A4_HEIGHT_MM, A4_WIDTH_MM, page_offsets, scaled_height

logger = logging.getLogger(__name__)

DPI = 150
PAGE_WIDTH_PX = round(A4_WIDTH_MM / 25.4 * DPI)     # 1240
PAGE_HEIGHT_PX = round(A4_HEIGHT_MM / 25.4 * DPI)   # 1754
MARGIN = 90

PRIMARY = (139, 92, 246)
TEXT = (31, 41, 55)
GRAY = (107, 114, 128)
PANEL = (248, 250, 252)
WHITE = (255, 255, 255)

_FONT_PATHS = {
    False: [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/usr/share/fonts/TTF/DejaVuSans.ttf",
        "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    ],
    True: [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
    ],
}


def _get_font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """TrueType font if one is installed, Pillow's built-in otherwise."""
    for path in _FONT_PATHS[bold]:
        if os.path.exists(path):
            try:
                return ImageFont.truetype(path, size)
            except OSError:
                continue
    return ImageFont.load_default(size=size)


@dataclass
class ReceiptDocument:
    """Everything printed on a receipt, flattened from Receipt/Payment/User."""

    receipt_number: str
    generated_at: datetime
    customer_name: str
    customer_email: str
    customer_phone: str
    customer_address: str
    amount: float
    payment_mode: str
    status: str
    paid_at: Optional[datetime] = None
    reference: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_receipt(cls, receipt: Receipt) -> "ReceiptDocument":
        payment = receipt.payment
        user = payment.user
        return cls(
            receipt_number=receipt.receipt_number,
            generated_at=receipt.generated_at,
            customer_name=user.name,
            customer_email=user.email,
            customer_phone=user.phone,
            customer_address=user.address,
            amount=payment.amount,
            payment_mode=payment.payment_mode,
            status=payment.status,
            paid_at=payment.completed_at or payment.created_at,
            reference=payment.razorpay_payment_id or payment.utr_number,
            description=payment.description,
        )


class PdfService:
    """Receipt rendering: document -> image -> paged PDF bytes."""

    @staticmethod
    def render_image(doc: ReceiptDocument) -> Image.Image:
        settings = get_settings()
        h1, h2, body, small = _get_font(44, True), _get_font(30, True), _get_font(24), _get_font(18)

        address_lines = textwrap.wrap(doc.customer_address, width=38) or [""]
        description_lines = textwrap.wrap(doc.description or "", width=80)

        info_rows = 4 + len(address_lines)
        height = (
            240                          # header band
            + 80 + info_rows * 40        # customer / payment columns
            + 60 + 130                   # amount panel
            + (50 + 34 * len(description_lines) if description_lines else 0)
            + 160                        # footer
        )
        image = Image.new("RGB", (PAGE_WIDTH_PX, height), WHITE)
        draw = ImageDraw.Draw(image)

        # Header
        draw.rectangle([0, 0, PAGE_WIDTH_PX, 200], fill=PRIMARY)
        draw.text((MARGIN, 55), settings.MERCHANT_NAME, font=h1, fill=WHITE)
        draw.text((MARGIN, 120), settings.MERCHANT_TAGLINE, font=body, fill=WHITE)
        draw.text((PAGE_WIDTH_PX - MARGIN - 330, 55), "RECEIPT", font=h1, fill=WHITE)
        draw.text((PAGE_WIDTH_PX - MARGIN - 330, 120), f"#{doc.receipt_number}", font=body, fill=WHITE)

        # Customer column
        y = 280
        left, right = MARGIN, PAGE_WIDTH_PX // 2 + 20
        draw.text((left, y), "Customer Information", font=h2, fill=TEXT)
        draw.text((right, y), "Payment Information", font=h2, fill=TEXT)
        y += 60

        rows = [("Name", doc.customer_name), ("Email", doc.customer_email), ("Phone", doc.customer_phone)]
        cy = y
        for label, value in rows:
            draw.text((left, cy), f"{label}:", font=body, fill=GRAY)
            draw.text((left + 120, cy), value, font=body, fill=TEXT)
            cy += 40
        draw.text((left, cy), "Address:", font=body, fill=GRAY)
        for line in address_lines:
            draw.text((left + 120, cy), line, font=body, fill=TEXT)
            cy += 40

        # Payment column
        paid_at = doc.paid_at or doc.generated_at
        pay_rows = [
            ("Date", paid_at.strftime("%d/%m/%Y")),
            ("Method", format_mode(doc.payment_mode)),
            ("Status", str(doc.status).upper()),
        ]
        if doc.reference:
            pay_rows.append(("Ref", doc.reference))
        py = y
        for label, value in pay_rows:
            draw.text((right, py), f"{label}:", font=body, fill=GRAY)
            draw.text((right + 120, py), value, font=body, fill=TEXT)
            py += 40

        # Amount panel
        y = max(cy, py) + 40
        draw.rectangle([MARGIN, y, PAGE_WIDTH_PX - MARGIN, y + 110], fill=PANEL)
        draw.text((MARGIN + 30, y + 35), "Total Amount Paid:", font=h2, fill=TEXT)
        draw.text(
            (PAGE_WIDTH_PX - MARGIN - 380, y + 30),
            format_inr(doc.amount, symbol="Rs. "),
            font=h1, fill=PRIMARY,
        )
        y += 150

        if description_lines:
            draw.text((MARGIN, y), "Description", font=h2, fill=TEXT)
            y += 50
            for line in description_lines:
                draw.text((MARGIN, y), line, font=body, fill=TEXT)
                y += 34

        # Footer
        y += 40
        draw.text(
            (MARGIN, y),
            "Thank you for your payment! This receipt serves as proof of your transaction.",
            font=small, fill=GRAY,
        )
        draw.text(
            (MARGIN, y + 34),
            f"Generated on {doc.generated_at.strftime('%d/%m/%Y')} | {settings.MERCHANT_NAME} Receipt System",
            font=small, fill=GRAY,
        )
        return image

    @staticmethod
    def image_to_pdf(image: Image.Image, title: str, when: datetime) -> bytes:
        """Scale image to A4 width and tile it across as many pages as needed.

        Document dates are taken from `when` so identical input produces
        identical bytes.
        """
        image = image.convert("RGB")
        if image.width != PAGE_WIDTH_PX:
            new_height = max(1, round(scaled_height(image.width, image.height, PAGE_WIDTH_PX)))
            image = image.resize((PAGE_WIDTH_PX, new_height))

        pages = []
        for offset in page_offsets(image.height, PAGE_HEIGHT_PX):
            page = Image.new("RGB", (PAGE_WIDTH_PX, PAGE_HEIGHT_PX), WHITE)
            page.paste(image, (0, int(offset)))
            pages.append(page)

        stamp = when.timetuple()
        buffer = io.BytesIO()
        pages[0].save(
            buffer,
            "PDF",
            save_all=True,
            append_images=pages[1:],
            resolution=float(DPI),
            title=title,
            author=get_settings().MERCHANT_NAME,
            creationDate=stamp,
            modDate=stamp,
        )
        return buffer.getvalue()

    @staticmethod
    def render(doc: ReceiptDocument) -> bytes:
        pdf = PdfService.image_to_pdf(
            PdfService.render_image(doc),
            title=f"Receipt {doc.receipt_number}",
            when=doc.generated_at,
        )
        logger.info("Rendered receipt %s (%d bytes)", doc.receipt_number, len(pdf))
        return pdf

    @staticmethod
    def render_receipt(receipt: Receipt) -> bytes:
        return PdfService.render(ReceiptDocument.from_receipt(receipt))
