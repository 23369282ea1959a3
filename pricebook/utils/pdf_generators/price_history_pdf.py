# pricebook/utils/pdf_generators/price_history_pdf.py
from io import BytesIO
from xml.sax.saxutils import escape
from typing import Iterable, Optional

from reportlab.lib.pagesizes import A4
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table
from reportlab.lib.styles import getSampleStyleSheet

from pricebook.schemas.products.product_schemas import ProductOut
from pricebook.schemas.products.price_history_schemas import PriceHistoryOut
from pricebook.services.users.user_admin_service import display_name
from pricebook.utils.decimal_utils import format_money
from pricebook.utils.pdf_generators.styles import TABLE_STYLE

HEADER = ["Effectivity Date", "Unit Price", "Modified By", "Op Date"]


def price_history_rows(
    history: Iterable[PriceHistoryOut],
    profile_names: dict[str, str],
) -> list[list[str]]:
    return [HEADER] + [
        [
            h.effectivity_date.strftime("%b %d, %Y"),
            format_money(h.unit_price),
            display_name(profile_names, h.modified_by),
            h.modified_at.strftime("%b %d, %H:%M"),
        ]
        for h in history
    ]


def generate_price_history_pdf(
    product: ProductOut,
    history: Iterable[PriceHistoryOut],
    profile_names: Optional[dict[str, str]] = None,
) -> bytes:
    """Every entry is listed, soft-deleted ones included."""
    styles = getSampleStyleSheet()
    story = [
        Paragraph("<b>Price History</b>", styles["Title"]),
        Paragraph(escape(f"{product.code} – {product.description}"), styles["Heading3"]),
        Spacer(1, 12),
    ]

    table = Table(price_history_rows(history, profile_names or {}), repeatRows=1)
    table.setStyle(TABLE_STYLE)
    story.append(table)

    buffer = BytesIO()
    SimpleDocTemplate(buffer, pagesize=A4, title=f"Price History {product.code}").build(story)
    return buffer.getvalue()
