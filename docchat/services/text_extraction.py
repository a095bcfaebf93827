"""PDF text extraction with PyMuPDF and a pdfium fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Tuple

from ..utils.errors import DocumentReadError
from .extractors.fitz_extractor import extract_pages_fitz
from .extractors.pdfium_extractor import extract_pages_pdfium

LOGGER = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class ExtractionResult:
    """Page count and concatenated text of a parsed PDF."""

    page_count: int
    text: str
    engine: str


Extractor = Callable[[bytes], ExtractionResult]


class EmptyDocumentError(ValueError):
    """Raised when a PDF parses but contains no pages."""


def _run_engine(data: bytes, engine: str) -> Tuple[List[str], str]:
    """Return the page texts and the name of the engine that produced them."""

    if engine == "fitz":
        return extract_pages_fitz(data), "fitz"
    if engine == "pdfium":
        return extract_pages_pdfium(data), "pdfium"

    try:
        return extract_pages_fitz(data), "fitz"
    except Exception as exc:
        LOGGER.info("PyMuPDF could not parse document (%s); retrying with pdfium", exc)
        return extract_pages_pdfium(data), "pdfium"


def extract_text(data: bytes, engine: str = "auto") -> ExtractionResult:
    """Return the page count and text of ``data``.

    Raises :class:`DocumentReadError` when there is nothing to read and lets
    parser errors propagate unchanged.
    """

    if not data:
        raise DocumentReadError("Uploaded file is empty")

    engine = (engine or "auto").lower()
    pages, used = _run_engine(data, engine)
    if not pages:
        raise EmptyDocumentError("PDF contains no pages")

    text = PAGE_SEPARATOR.join(pages)
    LOGGER.info(
        "Extracted %d page(s), %d characters with %s", len(pages), len(text), used
    )
    return ExtractionResult(page_count=len(pages), text=text, engine=used)


def make_extractor(engine: str = "auto") -> Extractor:
    """Bind ``extract_text`` to a configured engine."""

    def _extract(data: bytes) -> ExtractionResult:
        return extract_text(data, engine=engine)

    return _extract


__all__ = [
    "EmptyDocumentError",
    "ExtractionResult",
    "Extractor",
    "extract_text",
    "make_extractor",
]
