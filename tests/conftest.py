from __future__ import annotations

import sys
from io import BytesIO
from pathlib import Path

import pytest


def pytest_configure() -> None:
    """
    Ensure `src/` is on sys.path so tests can import `image_edit_studio`
    without requiring an editable install.
    """
    repo_root = Path(__file__).resolve().parents[1]
    src_root = repo_root / "src"
    sys.path.insert(0, str(src_root))


def make_png(size: tuple[int, int] = (8, 8), color=(255, 0, 0, 255)) -> bytes:
    """Encode a solid-colour RGBA PNG."""
    from PIL import Image

    buf = BytesIO()
    Image.new("RGBA", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def png_factory():
    """Build PNG bytes of a given size and colour."""
    return make_png
