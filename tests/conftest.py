from __future__ import annotations

from pathlib import Path

import fitz
import pytest


def write_pdf(path: Path, pages: int, width: float = 200, height: float = 260) -> Path:
    doc = fitz.open()
    try:
        for index in range(pages):
            page = doc.new_page(width=width, height=height)
            page.insert_text((20, 40), f"Page {index + 1}", fontsize=14)
        doc.save(str(path))
    finally:
        doc.close()
    return path


@pytest.fixture
def make_pdf(tmp_path: Path):
    """Factory writing a small PDF with ``pages`` pages into ``tmp_path``."""

    def _make(pages: int = 4, name: str = "doc.pdf", **kwargs) -> Path:
        return write_pdf(tmp_path / name, pages, **kwargs)

    return _make
