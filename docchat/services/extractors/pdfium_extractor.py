from __future__ import annotations

from typing import List

import pypdfium2 as pdfium

from ._normalize import normalize_page_text


def extract_pages_pdfium(data: bytes) -> List[str]:
    pages: List[str] = []
    document = pdfium.PdfDocument(data)
    try:
        for page_index in range(len(document)):
            page = document.get_page(page_index)
            text_page = page.get_textpage()
            try:
                pages.append(normalize_page_text(text_page.get_text_range() or ""))
            finally:
                text_page.close()
                page.close()
    finally:
        document.close()
    return pages


__all__ = ["extract_pages_pdfium"]
