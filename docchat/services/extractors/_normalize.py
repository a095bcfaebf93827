from __future__ import annotations

import re

NBSPS = "\u00A0\u2007\u2009"
SOFT_HYPH = "\u00AD"

_INLINE_SPACE_RE = re.compile(r"[ \t\f\v]+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def normalize_page_text(s: str) -> str:
    """Collapse layout whitespace in a page while keeping its line breaks."""

    s = s.replace(SOFT_HYPH, "")
    for ch in NBSPS:
        s = s.replace(ch, " ")
    s = s.replace("\r\n", "\n").replace("\r", "\n")
    lines = [_INLINE_SPACE_RE.sub(" ", line).strip() for line in s.split("\n")]
    s = "\n".join(lines)
    s = _BLANK_LINES_RE.sub("\n\n", s)
    return s.strip()


__all__ = ["normalize_page_text"]
