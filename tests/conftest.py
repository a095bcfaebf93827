"""Test configuration for DocChat."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Generator, List

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import fitz  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from docchat.config import reset_settings_cache  # noqa: E402
from docchat.database import reset_database_state  # noqa: E402
from docchat.dependencies import reset_store_cache  # noqa: E402
from docchat.observability import metrics_registry  # noqa: E402


def _reset_state() -> None:
    reset_store_cache()
    reset_settings_cache()
    reset_database_state()
    metrics_registry.reset()


@pytest.fixture(autouse=True)
def _isolate_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    """Provide isolated configuration for each test."""

    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("DOCCHAT_STORE", "sql")
    monkeypatch.setenv("MAX_UPLOAD_SIZE", str(64 * 1024))
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.delenv("DOCCHAT_CONTEXT_SCOPE", raising=False)
    _reset_state()
    yield
    _reset_state()


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    """Return a test client for the FastAPI application."""

    from docchat.main import app

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_pdf():
    """Return a factory building PDF bytes with one page per text entry."""

    def _make(pages: List[str]) -> bytes:
        document = fitz.open()
        try:
            for text in pages:
                document.new_page().insert_text((72, 72), text)
            return document.tobytes()
        finally:
            document.close()

    return _make
