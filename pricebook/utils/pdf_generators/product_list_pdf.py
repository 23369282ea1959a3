# pricebook/utils/pdf_generators/product_list_pdf.py
from datetime import datetime, timezone
from io import BytesIO
from typing import Iterable, Optional
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4, landscape
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle

from pricebook.schemas.products.product_schemas import ProductOut
from pricebook.services.users.user_admin_service import display_name
from pricebook.utils.decimal_utils import format_money
from pricebook.utils.pdf_generators.styles import TABLE_STYLE

ADMIN_HEADER = ["Code", "Description", "Unit", "Price", "Status", "Op Type", "Op By", "Op Date"]
USER_HEADER = ["Code", "Description", "Unit", "Price"]

# points; sized to the usable width of landscape and portrait A4
ADMIN_COL_WIDTHS = [60, 200, 40, 65, 55, 55, 90, 95]
USER_COL_WIDTHS = [80, 230, 50, 80]
DESCRIPTION_COL = 1


def product_list_rows(
    products: Iterable[ProductOut],
    *,
    is_admin: bool,
    profile_names: dict[str, str],
) -> list[list[str]]:
    """Admins see archived products and the audit columns; others do not."""
    if not is_admin:
        return [USER_HEADER] + [
            [p.code, p.description, p.unit, format_money(p.current_price)]
            for p in products
            if not p.is_deleted
        ]

    return [ADMIN_HEADER] + [
        [
            p.code,
            p.description,
            p.unit,
            format_money(p.current_price),
            "Archived" if p.is_deleted else "Active",
            p.last_operation.value,
            display_name(profile_names, p.modified_by),
            p.modified_at.strftime("%d-%m-%Y %H:%M"),
        ]
        for p in products
    ]


def wrap_descriptions(rows: list[list], style: ParagraphStyle) -> list[list]:
    """Description cells become Paragraphs so long text wraps inside its column."""
    return [rows[0]] + [
        row[:DESCRIPTION_COL]
        + [Paragraph(escape(row[DESCRIPTION_COL]), style)]
        + row[DESCRIPTION_COL + 1:]
        for row in rows[1:]
    ]


def generate_product_list_pdf(
    products: Iterable[ProductOut],
    *,
    is_admin: bool,
    profile_names: Optional[dict[str, str]] = None,
    generated_at: Optional[datetime] = None,
) -> bytes:
    generated_at = generated_at or datetime.now(timezone.utc)
    data = product_list_rows(products, is_admin=is_admin, profile_names=profile_names or {})

    styles = getSampleStyleSheet()
    story = [
        Paragraph("<b>Product List</b>", styles["Title"]),
        Paragraph(f"Generated: {generated_at.strftime('%d-%m-%Y %H:%M')}", styles["Normal"]),
        Spacer(1, 12),
    ]

    if len(data) == 1:
        story.append(Paragraph("No products found", styles["Italic"]))
    else:
        table = Table(
            wrap_descriptions(data, styles["Normal"]),
            colWidths=ADMIN_COL_WIDTHS if is_admin else USER_COL_WIDTHS,
            repeatRows=1,
        )
        table.setStyle(TABLE_STYLE)
        story.append(table)

    buffer = BytesIO()
    pagesize = landscape(A4) if is_admin else A4
    SimpleDocTemplate(buffer, pagesize=pagesize, title="Product List").build(story)
    return buffer.getvalue()
