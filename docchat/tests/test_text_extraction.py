"""Tests for PDF text extraction."""

from __future__ import annotations

import pytest

from docchat.services import text_extraction
from docchat.services.extractors._normalize import normalize_page_text
from docchat.services.text_extraction import extract_text, make_extractor
from docchat.utils.errors import DocumentReadError

from .conftest import build_pdf


@pytest.mark.parametrize("engine", ["auto", "fitz", "pdfium"])
def test_extracts_each_page(engine: str) -> None:
    data = build_pdf(["Hello World", "Goodbye Moon"])

    result = extract_text(data, engine=engine)

    assert result.page_count == 2
    first, second = result.text.split("\n\n")
    assert "Hello World" in first
    assert "Goodbye Moon" in second


def test_empty_payload_is_a_read_error() -> None:
    with pytest.raises(DocumentReadError):
        extract_text(b"")


def test_invalid_pdf_raises() -> None:
    with pytest.raises(Exception):
        extract_text(b"definitely not a pdf", engine="fitz")


def test_auto_engine_falls_back_to_pdfium(monkeypatch: pytest.MonkeyPatch) -> None:
    def _broken(data: bytes):
        raise RuntimeError("fitz cannot open stream")

    monkeypatch.setattr(text_extraction, "extract_pages_fitz", _broken)

    result = extract_text(build_pdf(["Fallback page", "Another page"]), engine="auto")

    assert result.engine == "pdfium"
    assert result.page_count == 2
    assert "Fallback page" in result.text
    assert "Another page" in result.text


def test_fitz_engine_does_not_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    def _broken(data: bytes):
        raise RuntimeError("fitz cannot open stream")

    monkeypatch.setattr(text_extraction, "extract_pages_fitz", _broken)

    with pytest.raises(RuntimeError):
        extract_text(build_pdf(["Only fitz"]), engine="fitz")


def test_make_extractor_binds_engine() -> None:
    result = make_extractor("pdfium")(build_pdf(["Only page"]))

    assert result.engine == "pdfium"
    assert result.page_count == 1


def test_normalize_page_text_collapses_layout_whitespace() -> None:
    raw = "Intro\u00adduction\u00a0 to\tthe   manual \r\n\n\n\nNext  line "

    assert normalize_page_text(raw) == "Introduction to the manual\n\nNext line"
