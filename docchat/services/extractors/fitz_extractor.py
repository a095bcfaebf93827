from __future__ import annotations

from typing import List

import fitz

from ._normalize import normalize_page_text


def extract_pages_fitz(data: bytes) -> List[str]:
    pages: List[str] = []
    with fitz.open(stream=data, filetype="pdf") as document:
        for page in document:
            pages.append(normalize_page_text(page.get_text("text")))
    return pages


__all__ = ["extract_pages_fitz"]
