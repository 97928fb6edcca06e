"""Tests for PDF label generation."""

import re

import pytest

from bmt.labels.formatting import ml_from_oz
from bmt.labels.pdf_generator import (
    NOTES_MAX_CHARS,
    PAGE_HEIGHT_PT,
    PAGE_WIDTH_PT,
    create_label_pdf,
)
from bmt.labels.tspl import create_label_tspl


class TestPageSize:
    """Tests for label page geometry."""

    def test_page_is_label_sized(self):
        """2.625in x 1in should be 189 x 72 points."""
        assert (PAGE_WIDTH_PT, PAGE_HEIGHT_PT) == (189, 72)

    def test_media_box(self, sample_session):
        """The PDF page should use the label size."""
        pdf = create_label_pdf(sample_session)

        assert re.search(rb"/MediaBox \[\s*0 0 189 72\s*\]", pdf)


class TestCreateLabelPdf:
    """Tests for single label PDF generation."""

    def test_creates_valid_pdf(self, sample_session):
        """Should create valid PDF bytes."""
        pdf = create_label_pdf(sample_session)

        assert isinstance(pdf, bytes)
        assert pdf[:4] == b"%PDF"

    def test_contains_fields(self, sample_session):
        """Should draw the timestamp, amount, notes and use-by line."""
        pdf = create_label_pdf(sample_session)

        assert b"3/7/2025 9:05:09 AM" in pdf
        assert b"1.00 oz" in pdf
        assert b"30 ml" in pdf
        assert b"left side" in pdf
        assert b"Fridge: 3/11/2025   Freeze: 9/7/2025" in pdf

    def test_without_notes(self, sample_session):
        """Missing notes should not be an error."""
        sample_session["notes"] = None

        pdf = create_label_pdf(sample_session)

        assert pdf[:4] == b"%PDF"
        assert b"left side" not in pdf

    def test_notes_truncated(self, sample_session):
        """Should cut notes to the PDF character budget."""
        sample_session["notes"] = "n" * 80

        pdf = create_label_pdf(sample_session)

        assert b"n" * NOTES_MAX_CHARS in pdf
        assert b"n" * (NOTES_MAX_CHARS + 1) not in pdf


class TestMlAgreement:
    """Both renderers must agree on the ml figure."""

    @pytest.mark.parametrize("oz", [0.25, 1, 1.5, 2.75, 4.2, 7])
    def test_same_ml_in_tspl_and_pdf(self, sample_session, oz):
        """TSPL and PDF should show round(oz * 29.5735) ml."""
        sample_session["amount_oz"] = oz
        ml = ml_from_oz(oz)

        assert f"({ml} ml)" in create_label_tspl(sample_session)
        assert f"{ml} ml".encode() in create_label_pdf(sample_session)


class TestUnusualTimestamps:
    """Rendering must not fail on timestamps the time zone cannot hold."""

    @pytest.mark.parametrize(
        ("timestamp", "expected"),
        [
            ("0001-01-01T00:00:00Z", b"1/1/1 12:00:00 AM"),
            ("9999-12-31T23:59:59Z", b"12/31/9999 6:59:59 PM"),
            ("last tuesday", b"last tuesday"),
        ],
    )
    def test_pdf_renders(self, sample_session, timestamp, expected):
        """Should draw the timestamp instead of raising."""
        sample_session["timestamp"] = timestamp
        sample_session["use_by_frozen"] = timestamp

        pdf = create_label_pdf(sample_session)

        assert pdf[:4] == b"%PDF"
        assert expected in pdf
