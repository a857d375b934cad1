"""
PDF quotation document.

One page, fixed layout: centered title, then six left-aligned lines
(number, product, type, total cost, sale price, margin).
Uses fpdf2 (pure Python, no system dependencies).

With PDF_FONT_PATH pointing at a Unicode TTF every character prints as
stored. Without it the built-in Helvetica is used, which only covers
latin-1; anything else is replaced (see _safe).

Output is deterministic for identical input: the creation date is pinned and
the page stream is left uncompressed.
"""

import logging
import os
from datetime import datetime, timezone

from fpdf import FPDF

from .config import settings

TITLE = "Cotización"
# Fixed so identical quotations produce identical bytes
_CREATION_DATE = datetime(2000, 1, 1, tzinfo=timezone.utc)

logger = logging.getLogger(__name__)

CORE_FONT = "Helvetica"
UNICODE_FONT = "Body"

LEFT_X = 20
FIRST_LINE_Y = 40
LINE_STEP = 10


def quotation_filename(quote_number: str) -> str:
    return f"quotation-{quote_number}.pdf"


def _fmt(amount) -> str:
    """Currency-prefixed, always two decimals."""
    return f"{settings.CURRENCY_SYMBOL}{float(amount):.2f}"


def _fmt_pct(value) -> str:
    """Margin as given: 20 -> '20', 12.5 -> '12.5'."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _label(value) -> str:
    # Enum members print their value, not their member name
    return str(getattr(value, "value", value))


def _safe(text: str) -> str:
    """Replace characters the built-in PDF fonts (latin-1) cannot render."""
    if not text:
        return ""
    return (
        text
        .replace("—", " - ")
        .replace("–", "-")
        .replace("“", '"')
        .replace("”", '"')
        .replace("‘", "'")
        .replace("’", "'")
        .encode("latin-1", errors="replace")
        .decode("latin-1")
    )


def quotation_lines(quotation) -> list:
    """The six data lines, in print order."""
    return [
        f"Número: {quotation.quote_number}",
        f"Producto: {quotation.product_name}",
        f"Tipo: {_label(quotation.product_type)}",
        f"Costo Total: {_fmt(quotation.total_cost)}",
        f"Precio de Venta: {_fmt(quotation.sale_price)}",
        f"Margen: {_fmt_pct(quotation.margin_percentage)}%",
    ]


def _select_font(pdf: FPDF):
    """
    Register the configured Unicode font if there is one.

    Returns the font family to use and the text filter for it.
    """
    path = settings.PDF_FONT_PATH
    if path:
        if os.path.exists(path):
            pdf.add_font(UNICODE_FONT, "", path)
            return UNICODE_FONT, str
        logger.warning("PDF_FONT_PATH %s not found, using %s", path, CORE_FONT)
    return CORE_FONT, _safe


def generate_quotation_pdf(quotation) -> bytes:
    """
    Render a stored quotation.

    Args:
        quotation: anything exposing quote_number, product_name, product_type,
            total_cost, sale_price and margin_percentage (an ORM Quotation
            or a PricedQuotation)

    Returns:
        PDF bytes
    """
    pdf = FPDF(format="A4")
    pdf.set_creation_date(_CREATION_DATE)
    pdf.set_compression(False)
    pdf.set_auto_page_break(auto=False)
    pdf.set_title(_safe(f"{TITLE} {quotation.quote_number}"))
    pdf.set_author(_safe(settings.COMPANY_NAME))
    pdf.add_page()
    family, printable = _select_font(pdf)

    pdf.set_font(family, "", 20)
    pdf.set_xy(0, 15)
    pdf.cell(pdf.w, 10, printable(TITLE), align="C")

    pdf.set_font(family, "", 12)
    for i, text in enumerate(quotation_lines(quotation)):
        pdf.set_xy(LEFT_X, FIRST_LINE_Y + i * LINE_STEP)
        pdf.cell(0, 8, printable(text))

    return bytes(pdf.output())
