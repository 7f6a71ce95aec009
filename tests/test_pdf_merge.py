"""PDF merging with PyMuPDF."""

import pytest

from contractdesk.core.exceptions import UpstreamError
from contractdesk.services.pdf import merge_pdfs
from tests.conftest import make_pdf, pdf_page_texts


def test_pages_are_concatenated_in_order():
    merged = merge_pdfs([make_pdf("A-1", "A-2"), make_pdf("B-1")])
    assert pdf_page_texts(merged) == ["A-1", "A-2", "B-1"]


def test_single_part_round_trips():
    assert pdf_page_texts(merge_pdfs([make_pdf("only")])) == ["only"]


def test_identical_parts_are_not_deduplicated():
    part = make_pdf("same")
    assert pdf_page_texts(merge_pdfs([part, part])) == ["same", "same"]


def test_unreadable_part_raises_with_stage():
    with pytest.raises(UpstreamError) as exc_info:
        merge_pdfs([make_pdf("ok"), b"not a pdf"])
    assert exc_info.value.stage == "pdf_merge"
    assert "part 2" in exc_info.value.message
