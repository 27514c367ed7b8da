"""Test setup for settlernote."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from settlernote.media import MediaStore  # noqa: E402
from settlernote.schemas import UserSummary  # noqa: E402
from settlernote.store import DocumentStore  # noqa: E402

OWNER_EMAIL = "ada@example.com"
OTHER_EMAIL = "grace@example.com"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for pytest.

    This allows running the HTTP stack tests selectively:
        pytest -m integration       # run only integration tests
        pytest -m "not integration" # skip integration tests
    """
    config.addinivalue_line(
        "markers",
        "integration: marks tests that run the full HTTP stack",
    )


def paragraph(*texts: str) -> dict[str, Any]:
    """JSON for a paragraph holding one text run per argument."""
    if not texts:
        return {"type": "paragraph"}
    return {"type": "paragraph", "content": [{"type": "text", "text": t} for t in texts]}


def heading(text: str | None, level: int | None = 1) -> dict[str, Any]:
    node: dict[str, Any] = {"type": "heading"}
    if level is not None:
        node["attrs"] = {"level": level}
    if text:
        node["content"] = [{"type": "text", "text": text}]
    return node


def doc(*blocks: dict[str, Any]) -> dict[str, Any]:
    return {"type": "doc", "content": list(blocks)}


@pytest.fixture
def store() -> DocumentStore:
    """Fresh store with two users."""
    s = DocumentStore()
    s.add_user(OWNER_EMAIL, name="Ada")
    s.add_user(OTHER_EMAIL, name="Grace")
    return s


@pytest.fixture
def owner(store: DocumentStore) -> UserSummary:
    return store.get_user_by_email(OWNER_EMAIL)


@pytest.fixture
def other_user(store: DocumentStore) -> UserSummary:
    return store.get_user_by_email(OTHER_EMAIL)


@pytest.fixture
def media_store(tmp_path: Path) -> MediaStore:
    return MediaStore(tmp_path / "media", max_bytes=1024)
