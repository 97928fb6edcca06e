"""PDF label generation for CUPS printing.

Renders a single 2.625in x 1in page with the session timestamp, the
amount in ounces and millilitres, optional notes and the use-by dates.
"""

import io
from collections.abc import Mapping

from reportlab.lib.colors import HexColor, black
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from bmt.labels.formatting import (
    DEFAULT_TIMEZONE,
    format_date,
    format_datetime,
    format_oz,
    ml_from_oz,
)

# 2.625in x 1in in points, rounded the way CUPS media names are (Custom.189x72)
PAGE_WIDTH_PT = round(2.625 * 72)
PAGE_HEIGHT_PT = round(1.0 * 72)
MARGIN_PT = 6

NOTES_MAX_CHARS = 60
NOTES_COLOR = HexColor("#444444")


def create_label_pdf(session: Mapping, timezone: str = DEFAULT_TIMEZONE) -> bytes:
    """Generate a single-label PDF for a session.

    Args:
        session: Session fields (timestamp, amount_oz, notes,
            use_by_fridge, use_by_frozen).
        timezone: Time zone the timestamps are printed in.

    Returns:
        bytes: PDF file contents.
    """
    amount_oz = session.get("amount_oz")
    notes = session.get("notes")

    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=(PAGE_WIDTH_PT, PAGE_HEIGHT_PT), pageCompression=0)
    c.setTitle("BMT Label")

    x = MARGIN_PT
    # Baselines are placed top-down: each line drops by its font size plus leading
    y = PAGE_HEIGHT_PT - MARGIN_PT - 8

    c.setFont("Helvetica", 9)
    c.drawString(x, y, format_datetime(session.get("timestamp"), timezone))

    # Amount: bold ounces followed by the ml figure in regular weight
    y -= 16
    oz_text = f"{format_oz(amount_oz)} oz"
    c.setFont("Helvetica-Bold", 16)
    c.drawString(x, y, oz_text)
    c.setFont("Helvetica", 10)
    c.drawString(
        x + stringWidth(oz_text, "Helvetica-Bold", 16),
        y,
        f"  ({ml_from_oz(amount_oz)} ml)",
    )

    if notes:
        y -= 10
        c.setFont("Helvetica", 8)
        c.setFillColor(NOTES_COLOR)
        c.drawString(x, y, str(notes)[:NOTES_MAX_CHARS])
        c.setFillColor(black)

    y -= 10
    c.setFont("Helvetica", 8)
    fridge = format_date(session.get("use_by_fridge"), timezone)
    freezer = format_date(session.get("use_by_frozen"), timezone)
    c.drawString(x, y, f"Fridge: {fridge}   Freeze: {freezer}")

    c.showPage()
    c.save()

    return buffer.getvalue()
