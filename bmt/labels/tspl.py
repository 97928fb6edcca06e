"""TSPL program generation for thermal label printers.

Produces the command stream understood by TSPL printers such as the
Polono PL420. Coordinates are in printer dots (203 dpi).
"""

from collections.abc import Mapping

from bmt.labels.formatting import (
    DEFAULT_TIMEZONE,
    format_date,
    format_datetime,
    format_oz,
    ml_from_oz,
)

# Label stock: 2.625in x 1in with a 0.12in gap
LABEL_WIDTH_IN = 2.625
LABEL_HEIGHT_IN = 1.0
LABEL_GAP_IN = 0.12

LEFT_PAD = 30
Y_TIMESTAMP = 20
Y_AMOUNT = 50
Y_NOTES = 95
Y_USE_BY = 125

NOTES_MAX_CHARS = 28


def _escape(text: str) -> str:
    return text.replace('"', '\\"')


def _text(y: int, value: str, y_scale: int = 1) -> str:
    return f'TEXT {LEFT_PAD},{y},"0",0,1,{y_scale},"{value}"'


def create_label_tspl(session: Mapping, timezone: str = DEFAULT_TIMEZONE) -> str:
    """Render a session as a TSPL program.

    The notes line is left out entirely when the session has no notes;
    every other line is always present.

    Args:
        session: Session fields (timestamp, amount_oz, notes,
            use_by_fridge, use_by_frozen).
        timezone: Time zone the timestamps are printed in.

    Returns:
        str: Newline-joined TSPL program ending with a newline.
    """
    amount_oz = session.get("amount_oz")
    notes = session.get("notes")

    lines = [
        f"SIZE {LABEL_WIDTH_IN:.3f},{LABEL_HEIGHT_IN:.3f}",
        f"GAP {LABEL_GAP_IN},0",
        "DIRECTION 1",
        "REFERENCE 0,0",
        "OFFSET 0.0",
        "SET TEAR ON",
        "CLS",
        _text(Y_TIMESTAMP, _escape(format_datetime(session.get("timestamp"), timezone))),
        _text(Y_AMOUNT, f"{format_oz(amount_oz)} oz ({ml_from_oz(amount_oz)} ml)", y_scale=2),
    ]
    if notes:
        lines.append(_text(Y_NOTES, _escape(str(notes)[:NOTES_MAX_CHARS])))
    fridge = format_date(session.get("use_by_fridge"), timezone)
    freezer = format_date(session.get("use_by_frozen"), timezone)
    lines.extend(
        [
            _text(Y_USE_BY, _escape(f"Fridge: {fridge}  Freezer: {freezer}")),
            "PRINT 1,1",
            "FORMFEED",
        ]
    )
    return "\n".join(lines) + "\n"
