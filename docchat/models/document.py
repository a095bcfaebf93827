"""Document model definition."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from .base import CamelModel, new_id, utcnow


class DocumentStatus(str, Enum):
    """Extraction state of an uploaded document."""

    EXTRACTING = "extracting"
    READY = "ready"
    DEGRADED = "degraded"


class Document(CamelModel):
    """Represents an uploaded PDF and the text extracted from it."""

    id: str = Field(default_factory=new_id)
    name: str = Field(description="Display name of the uploaded document.")
    file_name: str = Field(description="Original filename of the uploaded document.")
    uploaded_at: datetime = Field(
        default_factory=utcnow,
        description="UTC timestamp indicating when the file was uploaded.",
    )
    size: int = Field(default=0, description="Size of the uploaded file in bytes.")
    pages: int = Field(
        default=0, description="Number of pages detected during extraction."
    )
    text: str | None = Field(
        default=None,
        description="Extracted text, or a fallback message when extraction failed.",
    )
    content_type: str = Field(default="application/pdf")
    status: DocumentStatus = Field(default=DocumentStatus.EXTRACTING)
